# growatt_monitor/main.py

from datetime import datetime
import sys

from .cli import build_parser
from .config import Config
from .errors import GrowattError, TransportError
from .logging import ConsoleLog, StructuredLog, StatusLogEntry, get_logger

from .services.growatt_client import GrowattClient
from .services.output_formatter import (
    emit_devices_human,
    emit_devices_json,
    emit_status_human,
    emit_status_json,
)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_SERVICE_ERROR = 2
EXIT_TRANSPORT_ERROR = 3


def _require(value, what: str) -> str:
    if not value:
        raise ValueError(f"No {what} configured; set it in [growatt] or pass it on the command line")
    return value


def run_command(args, app_cfg, client: GrowattClient, log, structured_logger=None) -> None:
    growatt_cfg = app_cfg.growatt
    client.login(
        _require(growatt_cfg.username, "username"),
        _require(growatt_cfg.password, "password"),
    )
    log.info("Logged in to %s", client.base_url)

    if args.command == "login":
        if not args.quiet:
            print("Login OK")
        return

    plant_id = _require(getattr(args, "plant", None) or growatt_cfg.plant_id, "plant_id")

    if args.command == "devices":
        devices = client.fetch_devices(plant_id)
        log.debug("Plant %s reported %d device(s)", plant_id, len(devices))
        if not args.quiet:
            if args.json:
                emit_devices_json(devices)
            else:
                emit_devices_human(devices)
    elif args.command == "status":
        mix_id = _require(getattr(args, "mix", None) or growatt_cfg.mix_id, "mix_id")
        status = client.fetch_mix_status(mix_id, plant_id)
        if not args.quiet:
            if args.json:
                emit_status_json(status)
            else:
                emit_status_human(status)
        if structured_logger is not None and structured_logger.enabled:
            structured_logger.write(
                StatusLogEntry(
                    timestamp=datetime.now().astimezone().isoformat(),
                    plant_id=plant_id,
                    mix_id=mix_id,
                    status=status.as_dict(),
                )
            )
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv=None, session=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_cfg = Config.load(args.config)
    except (FileNotFoundError, ValueError) as exc:
        get_logger("growatt").error("Invalid configuration: %s", exc)
        return EXIT_CONFIG_ERROR

    console_logger = ConsoleLog(
        level="DEBUG" if args.debug else app_cfg.logging.console_level,
        quiet=args.quiet or app_cfg.logging.console_quiet,
        debug_modules=app_cfg.logging.debug_modules,
    )
    log = console_logger.setup()
    structured_logger = StructuredLog(
        app_cfg.logging.structured_path,
        app_cfg.logging.structured_enabled,
    )

    with GrowattClient(app_cfg.growatt, log, session=session) as client:
        try:
            run_command(args, app_cfg, client, log, structured_logger)
        except GrowattError as exc:
            log.error("Growatt request failed: %s", exc)
            return EXIT_SERVICE_ERROR
        except TransportError as exc:
            log.error("Could not reach Growatt server: %s", exc)
            return EXIT_TRANSPORT_ERROR
        except ValueError as exc:
            log.error("Invalid configuration: %s", exc)
            return EXIT_CONFIG_ERROR
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
