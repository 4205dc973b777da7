#!/usr/bin/env python3
"""
Interactive Session Test Script.

Connects to a device over TCP or serial, sends a few commands and prints
everything the session reports.

    python examples/try_session.py 192.168.1.50 4352 "%1POWR ?"
    python examples/try_session.py /dev/ttyUSB0 9600 "PWR?" "#pause 500" "VOL?"
"""

import sys
import time
import logging
from pathlib import Path

# Add the package to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rawdev import Address, Options, Session, SplitterOptions

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)


def build_address(target, number):
    if target.startswith("/dev/") or target.upper().startswith("COM"):
        return Address(name="serial-device", path=target, baud_rate=number)
    return Address(name="tcp-device", host=target, port=number)


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        return

    address = build_address(sys.argv[1], int(sys.argv[2]))
    commands = sys.argv[3:] or ["\r"]
    options = Options(
        duration=500,
        splitter=SplitterOptions(delimiter="\r"),
    )

    print(f"Creating session for {address.describe()}...")
    with Session(address, options) as session:
        session.subscribe_status(
            lambda s: print(f"[status] {s.status.value} {s.more or ''}"))
        session.subscribe_commands(
            lambda c: print(f"[sent] {c.command!r} -> {c.encoded!r}"))
        session.subscribe_responses(
            lambda r: print(f"[response] {r.value!r}"))

        print(f"Sending {len(commands)} command(s)...")
        session.process(*commands)

        try:
            while session.pending:
                time.sleep(0.1)
            # Give the device a moment to answer the last command
            time.sleep(2.0)
        except KeyboardInterrupt:
            print("\nInterrupted by user.")

    print("Done.")


if __name__ == "__main__":
    main()
