# growatt_monitor/tests/test_mix_status.py

import dataclasses
import json
import time

import pytest

from growatt_monitor.errors import MalformedResponse
from growatt_monitor.models.mix_status import MixStatus


def _payload(**overrides):
    payload = {
        "chargePower": 1250.0,
        "SOC": "42",
        "pLocalLoad": 100.0,
        "pPv1": "2100.5",
        "pactogrid": 0,
        "pactouser": 35.2,
        "pdisCharge1": 0.0,
        "vAc1": "229.8",
        "vBat": "52.4",
        "vPv1": "340.1",
        # Extra keys the service sends are ignored.
        "upsFac": 0,
        "status": 5,
    }
    payload.update(overrides)
    return payload


def test_maps_wire_fields():
    status = MixStatus.from_payload(_payload())

    assert status.soc == 42
    assert status.power_battery_charge == 1250.0
    assert status.power_to_load == 100.0
    assert status.power_from_photovoltaic_1 == 2100.5
    assert status.power_to_grid == 0.0
    assert status.power_to_user == 35.2
    assert status.power_battery_discharge == 0.0
    assert status.voltage_grid == 229.8
    assert status.voltage_battery == 52.4
    assert status.voltage_photovoltaic_1 == 340.1


def test_capture_time_is_client_side():
    before = time.time_ns()
    status = MixStatus.from_payload(_payload(when=1))
    after = time.time_ns()

    assert before <= status.when <= after


def test_record_is_immutable():
    status = MixStatus.from_payload(_payload())
    with pytest.raises(dataclasses.FrozenInstanceError):
        status.soc = 10


@pytest.mark.parametrize("soc", ["abc", "", "-1", "42.0", " 42", "4294967296"])
def test_bad_soc_fails_whole_record(soc):
    with pytest.raises(MalformedResponse):
        MixStatus.from_payload(_payload(SOC=soc))


def test_string_fields_must_be_strings():
    with pytest.raises(MalformedResponse):
        MixStatus.from_payload(_payload(SOC=42))
    with pytest.raises(MalformedResponse):
        MixStatus.from_payload(_payload(vBat=52.4))


@pytest.mark.parametrize("field", ["vAc1", "vBat", "vPv1", "pPv1"])
@pytest.mark.parametrize("raw", ["n/a", "", " 52.4", "52.4 ", "1_0", "nan", "inf", "-Infinity", "1e999", "0x1A"])
def test_unparsable_float_string(field, raw):
    with pytest.raises(MalformedResponse):
        MixStatus.from_payload(_payload(**{field: raw}))


@pytest.mark.parametrize(
    "raw, expected",
    [("52", 52.0), ("-3.5", -3.5), ("+1.25", 1.25), (".5", 0.5), ("7.", 7.0), ("1e3", 1000.0)],
)
def test_float_strings_in_decimal_notation(raw, expected):
    status = MixStatus.from_payload(_payload(vBat=raw))
    assert status.voltage_battery == expected


@pytest.mark.parametrize("value", ["1250", None, True])
def test_number_fields_reject_non_numbers(value):
    with pytest.raises(MalformedResponse):
        MixStatus.from_payload(_payload(chargePower=value))


def test_missing_field():
    payload = _payload()
    del payload["pactogrid"]
    with pytest.raises(MalformedResponse) as excinfo:
        MixStatus.from_payload(payload)
    assert "pactogrid" in str(excinfo.value)


@pytest.mark.parametrize("text", ["not json", "null", "[]"])
def test_from_json_rejects_non_objects(text):
    with pytest.raises(MalformedResponse):
        MixStatus.from_json(text)


def test_as_dict_uses_wire_keys():
    status = MixStatus.from_json(json.dumps(_payload()))
    out = status.as_dict()

    assert out["SOC"] == 42
    assert out["vBat"] == 52.4
    assert out["when"] == status.when
    assert set(out) == {
        "when", "chargePower", "SOC", "pLocalLoad", "pPv1", "pactogrid",
        "pactouser", "pdisCharge1", "vAc1", "vBat", "vPv1",
    }
