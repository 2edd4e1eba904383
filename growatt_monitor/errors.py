# growatt_monitor/errors.py

from __future__ import annotations

import requests

# Network, DNS and TLS failures come straight from requests.
TransportError = requests.RequestException


class GrowattError(Exception):
    """Base class for errors raised by the Growatt client itself."""

    def __init__(self, message: str, body: str | None = None):
        super().__init__(message)
        self.message = message
        self.body = body


class AuthenticationFailure(GrowattError):
    """Login envelope reported failure or could not be parsed."""


class RequestFailure(GrowattError):
    """A data endpoint answered with a failing envelope."""


class MalformedResponse(GrowattError, ValueError):
    """Body is not JSON, lacks an expected field, or a field did not parse."""
