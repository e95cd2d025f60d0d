#!/usr/bin/env python3
"""Demo: five smart devices and a short scripted session.

Creates devices with increasingly complete configurations, mutates
them, runs diagnostics and prints two status snapshots.  Every step is
recorded in ``device_log.txt`` (in the current directory) and echoed to
the console.

Run from the project root::

    python examples/demo_smart_devices.py
    python examples/demo_smart_devices.py --config lock.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack
from pathlib import Path

# ---------------------------------------------------------------------------
# Ensure the package is importable when running from the repo root.
# ---------------------------------------------------------------------------
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from pySmartDevice import (  # noqa: E402
    DeviceConfig,
    SmartDevice,
    load_device_config,
)

# ---------------------------------------------------------------------------
# Logging: library diagnostics to stderr
# ---------------------------------------------------------------------------

BOLD = "\033[1m"
CYAN = "\033[36m"
RESET = "\033[0m"


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def banner(text: str) -> None:
    """Print a prominent banner to the console."""
    width = 60
    print()
    print(f"{BOLD}{CYAN}{'=' * width}{RESET}")
    print(f"{BOLD}{CYAN} {text.center(width - 2)} {RESET}")
    print(f"{BOLD}{CYAN}{'=' * width}{RESET}")
    print()


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with the options of the fifth device",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.config is not None:
        lock_config = load_device_config(args.config)
    else:
        lock_config = DeviceConfig(
            name="Front Door Lock",
            device_type="Security Lock",
            powered_on=True,
            battery_level=85,
            temperature=22.5,
            location="Front Door",
        )

    banner("Creating devices")
    with ExitStack() as stack:
        hub = stack.enter_context(SmartDevice())
        stack.enter_context(
            SmartDevice(DeviceConfig(name="Living Room Thermostat"))
        )
        light = stack.enter_context(SmartDevice(DeviceConfig(
            name="Kitchen Light", device_type="Light Switch",
        )))
        camera = stack.enter_context(SmartDevice(DeviceConfig(
            name="Bedroom Camera", device_type="Security Camera",
            location="Bedroom",
        )))
        lock = stack.enter_context(SmartDevice(lock_config))

        banner("Scripted session")
        hub.set_name("Main Hub")
        hub.set_type("Control Center")
        hub.set_location("Living Room")
        hub.set_powered(True)

        hub.perform_diagnostics()
        light.power_toggle()
        lock.charge_battery(10)
        # Powered off: logged and ignored.
        camera.adjust_temperature(-2.5)

        banner("Device information")
        hub.display_info()
        print()
        print(lock.get_status())

        banner("Shutting down")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
