import json
import logging

from growatt_monitor.logging import ConsoleLog, StatusLogEntry, StructuredLog


def test_structured_log_writes_json(tmp_path):
    log_path = tmp_path / "logs" / "status.jsonl"
    entry = StatusLogEntry(
        timestamp="2024-01-01T00:00:00+00:00",
        plant_id="4711",
        mix_id="MIX0000001",
        status={"SOC": 42, "vBat": 52.4, "when": 1704067200000000000},
    )
    structured = StructuredLog(str(log_path), enabled=True)
    structured.write(entry)
    structured.write(entry)

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    payload = json.loads(lines[0])
    assert payload["timestamp"] == entry.timestamp
    assert payload["mix_id"] == "MIX0000001"
    assert payload["status"]["SOC"] == 42


def test_structured_log_disabled_without_path():
    structured = StructuredLog(None, enabled=True)
    assert structured.enabled is False
    structured.write(StatusLogEntry("t", None, None, None))


def test_console_log_quiet_skips_handlers():
    root = logging.getLogger()
    orig_handlers = list(root.handlers)
    orig_level = root.level
    try:
        log = ConsoleLog(level="INFO", quiet=True).setup()
        assert log.name == "growatt"
        assert root.handlers == []
    finally:
        root.handlers.clear()
        root.handlers.extend(orig_handlers)
        root.setLevel(orig_level)


def test_console_log_debug_modules():
    root = logging.getLogger()
    orig_handlers = list(root.handlers)
    orig_level = root.level
    try:
        ConsoleLog(level="warning", debug_modules=["growatt.test"]).setup()
        assert root.handlers[0].level == logging.WARNING
        assert logging.getLogger("growatt.test").level == logging.DEBUG
    finally:
        logging.getLogger("growatt.test").setLevel(logging.NOTSET)
        root.handlers.clear()
        root.handlers.extend(orig_handlers)
        root.setLevel(orig_level)
