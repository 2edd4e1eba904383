# growatt_monitor/models/device.py

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from growatt_monitor.errors import MalformedResponse


@dataclass
class PlantDevice:
    serial: str
    alias: str
    device_type: str | None
    status: str | None
    raw: Dict[str, Any]


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_device_list(body: str) -> List[PlantDevice]:
    """Parse a getDevicesByPlantList body into devices.

    Rows without a serial are skipped; a body that is not a JSON object is an
    error.
    """
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise MalformedResponse("Device list is not valid JSON", body=body) from exc
    if not isinstance(data, dict):
        raise MalformedResponse("Device list is not a JSON object", body=body)

    obj = data.get("obj")
    if not isinstance(obj, dict):
        return []
    rows = obj.get("datas") or obj.get("data") or []

    devices: List[PlantDevice] = []
    for entry in rows:
        if not isinstance(entry, dict):
            continue
        serial = _text(entry.get("sn") or entry.get("deviceSn") or entry.get("serialNum"))
        if not serial:
            continue
        devices.append(
            PlantDevice(
                serial=serial,
                alias=_text(entry.get("alias")) or serial,
                device_type=_text(entry.get("deviceType") or entry.get("type")),
                status=_text(entry.get("status")),
                raw=entry,
            )
        )
    return devices
