#!/usr/bin/env python3
"""
Remote Control Script

Send commands to the broadcast service remotely (via SSH or locally).

Usage:
    python scripts/remote_control.py go_live          # Camera on + publish
    python scripts/remote_control.py camera_off       # Stop everything
    python scripts/remote_control.py record           # Start local recording
    python scripts/remote_control.py schedule 1760000000000 "Morning show"
    python scripts/remote_control.py status           # Log status

Or directly:
    echo GO_LIVE > /tmp/broadcast_control.cmd

How it works:
- Writes command to control file (/tmp/broadcast_control.cmd)
- Service checks this file every loop iteration (~100ms)
- File is deleted after processing
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import CONTROL_FILE

COMMANDS = [
    "camera_on",
    "camera_off",
    "go_live",
    "publish",
    "unpublish",
    "toggle",
    "record",
    "stop_record",
    "schedule",
    "cancel_schedule",
    "status",
    "shutdown",
]


def build_command(command: str, args: list) -> str:
    """
    Build the control file line.

    Raises:
        ValueError: If SCHEDULE is missing its epoch_ms argument
    """
    line = command.upper()
    if line == "SCHEDULE":
        if not args or not args[0].isdigit():
            raise ValueError("schedule needs <epoch_ms> [title]")
        line = " ".join([line, *args])
    return line


def send_command(line: str) -> bool:
    """
    Send a command line to the broadcast service.

    Returns:
        True if command was sent successfully, False otherwise
    """
    try:
        Path(CONTROL_FILE).write_text(line)
        print(f"✅ Command sent: {line}")
        print("Service will process it within ~1 second")
        return True

    except OSError as e:
        print(f"❌ Failed to send command: {e}")
        return False


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Send commands to the broadcast service remotely",
    )
    parser.add_argument("command", choices=COMMANDS, help="Command to send")
    parser.add_argument("args", nargs="*", help="Command arguments (schedule only)")

    args = parser.parse_args()

    try:
        line = build_command(args.command, args.args)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    sys.exit(0 if send_command(line) else 1)


if __name__ == "__main__":
    main()
