# growatt_monitor/cli.py
import argparse

def build_parser():
    parser = argparse.ArgumentParser(
        prog="growatt-monitor",
        description="Growatt MIX inverter status client"
    )

    parser.add_argument(
        "--config",
        default="growatt_monitor.conf",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress stdout output (cron-friendly)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable text"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # Credential check
    sub.add_parser("login", help="Log in and report whether it succeeded")

    # Device listing
    cmd_devices = sub.add_parser("devices", help="List the devices of a plant")
    cmd_devices.add_argument(
        "--plant",
        help="Override [growatt] plant_id",
    )

    # MIX status snapshot
    cmd_status = sub.add_parser("status", help="Fetch one MIX status snapshot")
    cmd_status.add_argument(
        "--plant",
        help="Override [growatt] plant_id",
    )
    cmd_status.add_argument(
        "--mix",
        help="Override [growatt] mix_id",
    )

    return parser
