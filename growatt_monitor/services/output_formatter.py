# growatt_monitor/services/output_formatter.py

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Iterable

from growatt_monitor.models.device import PlantDevice
from growatt_monitor.models.mix_status import MixStatus


def _when_iso(status: MixStatus) -> str:
    return datetime.fromtimestamp(status.when / 1e9, tz=timezone.utc).isoformat()


def emit_devices_json(devices: Iterable[PlantDevice]) -> None:
    payload = [
        {
            "serial": dev.serial,
            "alias": dev.alias,
            "device_type": dev.device_type,
            "status": dev.status,
        }
        for dev in devices
    ]
    print(json.dumps({"devices": payload}, indent=2))


def emit_devices_human(devices: Iterable[PlantDevice]) -> None:
    devices = list(devices)
    if not devices:
        print("No devices reported for plant")
        return
    for dev in devices:
        type_txt = f" type={dev.device_type}" if dev.device_type else ""
        status_txt = f" status={dev.status}" if dev.status is not None else ""
        print(f"[{dev.alias}] serial={dev.serial}{type_txt}{status_txt}")


def emit_status_json(status: MixStatus) -> None:
    payload = status.as_dict()
    payload["timestamp"] = _when_iso(status)
    print(json.dumps({"status": payload}, indent=2))


def emit_status_human(status: MixStatus) -> None:
    print(f"MIX status @ {_when_iso(status)}")
    print(f"  SOC={status.soc}%  Vbat={status.voltage_battery:.1f}V")
    print(
        f"  PV1={status.power_from_photovoltaic_1:.0f}W  "
        f"Vpv1={status.voltage_photovoltaic_1:.1f}V"
    )
    print(
        f"  charge={status.power_battery_charge:.0f}W  "
        f"discharge={status.power_battery_discharge:.0f}W"
    )
    print(
        f"  load={status.power_to_load:.0f}W  import={status.power_to_user:.0f}W  "
        f"export={status.power_to_grid:.0f}W  Vac={status.voltage_grid:.1f}V"
    )
