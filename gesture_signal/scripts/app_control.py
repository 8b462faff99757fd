#!/usr/bin/env python3
"""
app_control.py - pause or stop a running GESTURE SIGNAL app via config.json

Usage:
    python -m gesture_signal.scripts.app_control --exit true
    python -m gesture_signal.scripts.app_control --pause true
    python -m gesture_signal.scripts.app_control --status
    python -m gesture_signal.scripts.app_control --config /path/to/config.json --pause false

The running app polls config.json and reacts to app_control.pause (stop
delivering signals) and app_control.exit (stop the detection loop).
"""

import argparse
import json
import sys
from typing import Dict, Optional

from gesture_signal.config.config_manager import DEFAULT_CONFIG_PATH

FLAG_DESCRIPTIONS = {
    'pause': "Set to true to stop delivering signals to consumers (hot-reloaded)",
    'exit': "Set to true to gracefully exit the application (hot-reloaded)",
}


def str_to_bool(value: str) -> bool:
    """Convert string to boolean."""
    if value.lower() in ('true', '1', 'yes', 'on'):
        return True
    elif value.lower() in ('false', '0', 'no', 'off'):
        return False
    else:
        raise ValueError(f"Invalid boolean value: {value}")


def read_flags(data: Dict) -> Dict[str, bool]:
    """Current app_control values, accepting plain or [value, description] entries."""
    section = data.get('app_control', {})
    flags = {}
    for name in FLAG_DESCRIPTIONS:
        entry = section.get(name, False)
        flags[name] = bool(entry[0] if isinstance(entry, list) else entry)
    return flags


def set_flag(data: Dict, name: str, value: bool):
    """Write one app_control flag, keeping an existing description."""
    section = data.setdefault('app_control', {})
    entry = section.get(name)
    if isinstance(entry, list) and entry:
        entry[0] = value
    else:
        section[name] = [value, FLAG_DESCRIPTIONS[name]]


def update_config(config_path: str, exit_val: Optional[bool] = None, pause_val: Optional[bool] = None) -> bool:
    """
    Update the app_control fields in config.json.

    Args:
        config_path: Path to config.json
        exit_val: Value for app_control.exit (None = don't change)
        pause_val: Value for app_control.pause (None = don't change)

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        print(f"✗ Config file not found: {config_path}", file=sys.stderr)
        return False
    except json.JSONDecodeError as e:
        print(f"✗ Invalid JSON in config file: {e}", file=sys.stderr)
        return False

    for name, value in (('exit', exit_val), ('pause', pause_val)):
        if value is not None:
            set_flag(data, name, value)
            print(f"✓ Set app_control.{name} = {value}")

    try:
        with open(config_path, 'w') as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        print(f"✗ Error writing config: {e}", file=sys.stderr)
        return False

    print(f"✓ Config saved to {config_path}")
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Control a running GESTURE SIGNAL app via config.json",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
app_control.py --exit true           # Signal app to exit
app_control.py --pause true          # Stop delivering gesture signals
app_control.py --pause false         # Resume
app_control.py --status              # Show current values
        """
    )
    parser.add_argument('--config', '-c', type=str, default=None,
                        help=f'Path to config.json (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--exit', '-e', type=str, default=None, metavar='BOOL',
                        help='Set app_control.exit (true/false)')
    parser.add_argument('--pause', '-p', type=str, default=None, metavar='BOOL',
                        help='Set app_control.pause (true/false)')
    parser.add_argument('--status', '-s', action='store_true',
                        help='Show current app_control values')
    args = parser.parse_args(argv)

    config_path = args.config if args.config else str(DEFAULT_CONFIG_PATH)

    if args.status:
        try:
            with open(config_path, 'r') as f:
                flags = read_flags(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            print(f"✗ Error reading config: {e}", file=sys.stderr)
            return 1
        print(f"Config: {config_path}")
        print(f"  app_control.pause = {flags['pause']}")
        print(f"  app_control.exit  = {flags['exit']}")
        return 0

    if args.exit is None and args.pause is None:
        parser.print_help()
        print("\nError: At least one of --exit or --pause must be specified", file=sys.stderr)
        return 1

    try:
        exit_val = str_to_bool(args.exit) if args.exit is not None else None
        pause_val = str_to_bool(args.pause) if args.pause is not None else None
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0 if update_config(config_path, exit_val=exit_val, pause_val=pause_val) else 1


if __name__ == "__main__":
    sys.exit(main())
