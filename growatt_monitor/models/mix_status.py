# growatt_monitor/models/mix_status.py

from __future__ import annotations

import json
import math
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict

from growatt_monitor.errors import MalformedResponse

_UINT_RE = re.compile(r"[0-9]+")
# Plain decimal or exponent notation; no whitespace, underscores, nan or inf.
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_UINT_MAX = 2**32 - 1


# ============================================================================
# Field adapters
# ============================================================================

def _require(payload: Dict[str, Any], key: str) -> Any:
    if key not in payload:
        raise MalformedResponse(f"MIX status field '{key}' missing")
    return payload[key]


def _number(payload: Dict[str, Any], key: str) -> float:
    value = _require(payload, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponse(f"MIX status field '{key}' is not a number: {value!r}")
    return float(value)


def _parse_float(payload: Dict[str, Any], key: str) -> float:
    """String field carrying a float, e.g. ``"vBat": "52.3"``."""
    value = _require(payload, key)
    if not isinstance(value, str):
        raise MalformedResponse(f"MIX status field '{key}' is not a string: {value!r}")
    if not _FLOAT_RE.fullmatch(value):
        raise MalformedResponse(f"MIX status field '{key}' is not a float: {value!r}")
    parsed = float(value)
    if not math.isfinite(parsed):
        raise MalformedResponse(f"MIX status field '{key}' out of range: {value!r}")
    return parsed


def _parse_uint(payload: Dict[str, Any], key: str) -> int:
    """String field carrying an unsigned 32-bit integer, e.g. ``"SOC": "42"``."""
    value = _require(payload, key)
    if not isinstance(value, str):
        raise MalformedResponse(f"MIX status field '{key}' is not a string: {value!r}")
    if not _UINT_RE.fullmatch(value):
        raise MalformedResponse(f"MIX status field '{key}' is not an unsigned integer: {value!r}")
    parsed = int(value)
    if parsed > _UINT_MAX:
        raise MalformedResponse(f"MIX status field '{key}' out of range: {value!r}")
    return parsed


# ============================================================================
# MixStatus
# ============================================================================

@dataclass(frozen=True)
class MixStatus:
    power_battery_charge: float       # W, chargePower
    soc: int                          # %, SOC
    power_to_load: float              # W, pLocalLoad
    power_from_photovoltaic_1: float  # W, pPv1
    power_to_grid: float              # W exported, pactogrid
    power_to_user: float              # W imported, pactouser
    power_battery_discharge: float    # W, pdisCharge1
    voltage_grid: float               # V, vAc1
    voltage_battery: float            # V, vBat
    voltage_photovoltaic_1: float     # V, vPv1
    when: int = field(default_factory=time.time_ns)  # ns since epoch, set client-side

    @classmethod
    def from_payload(cls, payload: Any) -> "MixStatus":
        """Map the ``obj`` payload of getMIXStatusData onto a record.

        Any missing or unparsable field fails the whole record.
        """
        if not isinstance(payload, dict):
            raise MalformedResponse(f"MIX status payload is not an object: {type(payload).__name__}")

        return cls(
            power_battery_charge=_number(payload, "chargePower"),
            soc=_parse_uint(payload, "SOC"),
            power_to_load=_number(payload, "pLocalLoad"),
            power_from_photovoltaic_1=_parse_float(payload, "pPv1"),
            power_to_grid=_number(payload, "pactogrid"),
            power_to_user=_number(payload, "pactouser"),
            power_battery_discharge=_number(payload, "pdisCharge1"),
            voltage_grid=_parse_float(payload, "vAc1"),
            voltage_battery=_parse_float(payload, "vBat"),
            voltage_photovoltaic_1=_parse_float(payload, "vPv1"),
        )

    @classmethod
    def from_json(cls, text: str) -> "MixStatus":
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise MalformedResponse("MIX status payload is not valid JSON", body=text) from exc
        return cls.from_payload(payload)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "when": self.when,
            "chargePower": self.power_battery_charge,
            "SOC": self.soc,
            "pLocalLoad": self.power_to_load,
            "pPv1": self.power_from_photovoltaic_1,
            "pactogrid": self.power_to_grid,
            "pactouser": self.power_to_user,
            "pdisCharge1": self.power_battery_discharge,
            "vAc1": self.voltage_grid,
            "vBat": self.voltage_battery,
            "vPv1": self.voltage_photovoltaic_1,
        }
