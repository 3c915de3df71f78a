"""
Meter CLI - Read values and operate switches/valves

Usage:
    # Read one or more items
    meterdrv --config meters.yaml read --meter main-power --item voltage
    meterdrv --config meters.yaml read --meter main-power --items voltage,frequency

    # Read actuator status
    meterdrv --config meters.yaml state --meter main-water --turn 1

    # Command an actuator (verified by reading the status back)
    meterdrv --config meters.yaml set-state --meter main-water --turn 1 --close
    meterdrv --config meters.yaml set-state --meter main-power --turn 1 --trip

Switch wording follows circuit terms: closing a power switch energises
the load, opening (tripping) it cuts power. Valves open to let water
through.

Output is one JSON object on stdout; logs go to stderr.
"""

import argparse
import json
import sys
from datetime import datetime, timezone

from .common.config import DriverConfig, MeterType, load_config_file
from .common.exceptions import ConfigurationError, MeterDrvError, VerificationError
from .common.logging_setup import get_component_logger
from .drivers.base import DeviceDriver
from .drivers.manager import create_driver, resolve_item, resolve_turn
from .gateway.session import GatewaySession
from .gateway.transport import PymodbusTransport, TransportFactory

logger = get_component_logger("cli")

# CLI action -> driver flag (True = open side of the actuator descriptor)
_ACTIONS = {
    MeterType.POWER: {"close": True, "open": False, "trip": False},
    MeterType.WATER: {"open": True, "close": False},
}

_STATE_LABELS = {
    MeterType.POWER: {True: "closed", False: "open"},
    MeterType.WATER: {True: "open", False: "closed"},
}


def desired_state(meter_type: MeterType, action: str) -> bool:
    """Translate a CLI action into the driver's open/closed flag"""
    try:
        return _ACTIONS[meter_type][action]
    except KeyError:
        raise ConfigurationError(f"Action '{action}' does not apply to {meter_type.value} meters")


def read_items(config: DriverConfig, driver: DeviceDriver, meter_name: str, items: list[str]) -> dict:
    """
    Read several items from one meter.

    Returns:
        {
            "success": bool,
            "meter": str,
            "readings": {"item": {"value": float, "timestamp": str}, ...},
            "errors": ["error message", ...]
        }
    """
    meter = config.get_meter(meter_name)
    result = {
        "success": False,
        "meter": meter_name,
        "readings": {},
        "errors": [],
    }

    for token in items:
        try:
            item = resolve_item(meter.type, token)
            value = driver.get_val(item)
            result["readings"][item.name.lower()] = {
                "value": value,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        except MeterDrvError as e:
            result["errors"].append(f"{token}: {e}")

    result["success"] = len(result["errors"]) == 0
    return result


def read_state(config: DriverConfig, driver: DeviceDriver, meter_name: str, turn: str) -> dict:
    meter = config.get_meter(meter_name)
    turn_id = resolve_turn(meter.type, turn)
    opened = driver.get_state(turn_id)
    return {
        "success": True,
        "meter": meter_name,
        "turn": turn_id + 1,
        "state": _STATE_LABELS[meter.type][opened],
    }


def write_state(
    config: DriverConfig,
    driver: DeviceDriver,
    meter_name: str,
    turn: str,
    action: str,
) -> dict:
    """
    Command an actuator.

    Returns:
        {
            "success": bool,
            "meter": str,
            "turn": int,
            "action": "open" | "close" | "trip",
            "state": "open" | "closed" | None,
            "verified": bool,
            "error": str | None
        }
    """
    meter = config.get_meter(meter_name)
    turn_id = resolve_turn(meter.type, turn)
    desired_open = desired_state(meter.type, action)
    result = {
        "success": False,
        "meter": meter_name,
        "turn": turn_id + 1,
        "action": action,
        "state": None,
        "verified": False,
        "error": None,
    }

    try:
        driver.set_state(turn_id, desired_open)
    except VerificationError as e:
        result["state"] = _STATE_LABELS[meter.type][e.actual_open]
        result["error"] = str(e)
        return result

    result["success"] = True
    result["verified"] = True
    result["state"] = _STATE_LABELS[meter.type][desired_open]
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meterdrv",
        description="Read meters and operate switches/valves behind a Modbus serial bridge",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        default="meters.yaml",
        help="Path to configuration file (default: meters.yaml)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    read_parser = subparsers.add_parser("read", help="Read measurement items")
    read_parser.add_argument("--meter", required=True, help="Meter name from the config")
    read_parser.add_argument("--item", help="Single item name or id")
    read_parser.add_argument("--items", help="Comma-separated item names (e.g., voltage,frequency)")

    state_parser = subparsers.add_parser("state", help="Read switch/valve status")
    state_parser.add_argument("--meter", required=True, help="Meter name from the config")
    state_parser.add_argument("--turn", required=True, help="Turn number (1-based)")

    set_parser = subparsers.add_parser("set-state", help="Open, close or trip a switch/valve")
    set_parser.add_argument("--meter", required=True, help="Meter name from the config")
    set_parser.add_argument("--turn", required=True, help="Turn number (1-based)")
    group = set_parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--open", dest="action", action="store_const", const="open",
                       help="Open a valve; on a power switch, same as --trip")
    group.add_argument("--close", dest="action", action="store_const", const="close",
                       help="Close a valve; on a power switch, energise the load")
    group.add_argument("--trip", dest="action", action="store_const", const="trip",
                       help="Cut power on a switch")

    return parser


def main(argv: list[str] | None = None, transport_factory: TransportFactory = PymodbusTransport) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    items = []
    if args.command == "read":
        if args.item:
            items.append(args.item)
        if args.items:
            items.extend(i.strip() for i in args.items.split(",") if i.strip())
        if not items:
            print(json.dumps({"success": False, "error": "No items specified"}))
            return 1

    session = GatewaySession(transport_factory)
    try:
        config = load_config_file(args.config)
        driver = create_driver(config.get_meter(args.meter), session)
        session.init(config.gateway)

        if args.command == "read":
            result = read_items(config, driver, args.meter, items)
        elif args.command == "state":
            result = read_state(config, driver, args.meter, args.turn)
        else:
            result = write_state(config, driver, args.meter, args.turn, args.action)
    except MeterDrvError as e:
        logger.error(f"{args.command} failed: {e}")
        result = {"success": False, "error": str(e)}
    finally:
        session.close()

    print(json.dumps(result))
    return 0 if result["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
