# growatt_monitor/services/growatt_client.py

from __future__ import annotations

import http.cookiejar
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from growatt_monitor.config import DEFAULT_BASE_URL, GrowattConfig
from growatt_monitor.errors import AuthenticationFailure, MalformedResponse, RequestFailure
from growatt_monitor.logging import get_logger
from growatt_monitor.models.device import PlantDevice, parse_device_list
from growatt_monitor.models.mix_status import MixStatus


USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/104.0.0.0 Safari/537.36-11"
)

_SESSION_ID_RE = re.compile(r"JSESSIONID=([^;]+)")
_SERVER_ID_RE = re.compile(r"SERVERID=")
_I64_MIN, _I64_MAX = -(2**63), 2**63 - 1


def check_result(body: str) -> bool:
    """Envelope success test: ``result`` must be a nonzero integer.

    Invalid JSON, a non-object body, a missing ``result``, a non-integer
    value or one outside the signed 64-bit range all count as failure.
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return False
    if not isinstance(data, dict):
        return False
    result = data.get("result")
    if isinstance(result, bool) or not isinstance(result, int):
        return False
    if not _I64_MIN <= result <= _I64_MAX:
        return False
    return result != 0


class _RejectAllCookies(http.cookiejar.DefaultCookiePolicy):
    """Keeps the transport's jar empty; SessionState owns the cookies."""

    def set_ok(self, cookie, request):
        return False

    def return_ok(self, cookie, request):
        return False


@dataclass
class SessionState:
    cookies: List[str] = field(default_factory=list)
    referer: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.cookies and not self.referer

    def clear(self) -> None:
        self.cookies = []
        self.referer = ""

    def cookie_header(self) -> str:
        return "; ".join(self.cookies)


def _set_cookie_values(resp: Any) -> List[str]:
    """Every ``set-cookie`` value, unmerged."""
    raw_headers = getattr(getattr(resp, "raw", None), "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return list(raw_headers.getlist("Set-Cookie"))
    single = resp.headers.get("set-cookie")
    return [single] if single else []


class GrowattClient:
    """Session-based client for the Growatt monitoring web service."""

    def __init__(
        self,
        cfg: Optional[GrowattConfig] = None,
        log=None,
        session: Optional[requests.Session] = None,
    ):
        self.cfg = cfg or GrowattConfig()
        self.log = log or get_logger("growatt")
        self.session = session or requests.Session()
        self.timeout = self.cfg.timeout
        base_url = self.cfg.base_url or DEFAULT_BASE_URL
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._state = SessionState()

        jar = getattr(self.session, "cookies", None)
        if isinstance(jar, http.cookiejar.CookieJar):
            jar.set_policy(_RejectAllCookies())

    # ------------------------------------------------------------------
    def __enter__(self) -> "GrowattClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    @property
    def referer(self) -> str:
        return self._state.referer

    @property
    def cookies(self) -> tuple[str, ...]:
        return tuple(self._state.cookies)

    @property
    def logged_in(self) -> bool:
        return not self._state.is_empty

    # ------------------------------------------------------------------
    def _build_url(self, path: str) -> str:
        return f"{self.base_url}{path.lstrip('/')}"

    def _session_headers(self) -> Dict[str, str]:
        return {
            "Cookie": self._state.cookie_header(),
            "Referer": self._state.referer,
        }

    def _post(self, path: str, *, params=None, data=None) -> str:
        resp = self.session.post(
            self._build_url(path),
            params=params,
            data=data,
            headers=self._session_headers(),
            timeout=self.timeout,
        )
        self.log.debug("%s request with status %s", path, resp.status_code)
        return resp.text

    # ------------------------------------------------------------------
    def login(self, username: str, password: str) -> str:
        headers = {
            "User-Agent": USER_AGENT,
            "Connection": "keep-alive",
        }
        payload = {"account": username, "password": password}

        resp = self.session.post(
            self._build_url("login"),
            data=payload,
            headers=headers,
            timeout=self.timeout,
            allow_redirects=False,
        )
        self.log.debug("login request with status %s", resp.status_code)

        self._state.clear()
        cookies: List[str] = []
        referer = ""
        for value in _set_cookie_values(resp):
            self.log.debug("inspecting cookie %s", value)
            match = _SESSION_ID_RE.search(value)
            if match:
                referer = f"{self.base_url}index;jsessionid={match.group(1)}"
                cookies.append(value)
            if _SERVER_ID_RE.search(value):
                if value not in cookies:
                    cookies.append(value)

        body = resp.text
        if not check_result(body):
            self.log.warning("Growatt login failed (HTTP %s)", resp.status_code)
            raise AuthenticationFailure("Missing success field", body=body)

        if referer:
            self._state.cookies = cookies
            self._state.referer = referer
        else:
            self.log.warning("Growatt login succeeded without a JSESSIONID cookie")
        return body

    def list_devices_for_plant(self, plant_id: str) -> str:
        body = self._post(
            "panel/getDevicesByPlantList",
            params={"plantId": plant_id, "currPage": 1},
        )
        if not check_result(body):
            self.log.warning("Growatt device list for plant %s failed", plant_id)
            raise RequestFailure("Succeed false", body=body)
        return body

    def get_mix_status(self, mix_id: str, plant_id: str) -> str:
        body = self._post(
            "panel/mix/getMIXStatusData",
            params={"plantId": plant_id},
            data={"mixSn": mix_id},
        )
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise MalformedResponse("MIX status response is not valid JSON", body=body) from exc
        if not isinstance(data, dict) or "obj" not in data:
            raise MalformedResponse("MIX status response has no 'obj' field", body=body)
        return json.dumps(data["obj"], separators=(",", ":"), ensure_ascii=False)

    # ------------------------------------------------------------------
    def fetch_mix_status(self, mix_id: str, plant_id: str) -> MixStatus:
        return MixStatus.from_json(self.get_mix_status(mix_id, plant_id))

    def fetch_devices(self, plant_id: str) -> List[PlantDevice]:
        return parse_device_list(self.list_devices_for_plant(plant_id))
