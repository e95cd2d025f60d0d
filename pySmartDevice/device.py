"""SmartDevice: a single stateful smart device with an audit trail.

A :class:`SmartDevice` holds the configuration (name, type, location)
and runtime state (power, battery, temperature) of one device.  Every
state change is recorded as exactly one timestamped entry in the
device's :class:`~pySmartDevice.audit_log.AuditLog`, which writes to an
append-only log file (the *sink*) and then to standard output.

Power gate
~~~~~~~~~~

Two operations only work while the device is powered on:

* :meth:`SmartDevice.charge_battery` returns ``False`` when powered off.
* :meth:`SmartDevice.adjust_temperature` silently does nothing when
  powered off (apart from logging the reason).

No other operation depends on the power state.

Lifecycle
~~~~~~~~~

1. Construct with a :class:`~pySmartDevice.config.DeviceConfig` (or
   nothing, for all defaults).  The sink is opened and construction
   entries are logged.  If the sink cannot be opened the device falls
   back to console-only logging.
2. Mutate through the ``set_*`` methods, the property setters, or the
   domain operations.
3. Call :meth:`SmartDevice.close` (or leave the ``with`` block) to log
   the teardown entry and release the sink.

Usage example::

    from pySmartDevice import DeviceConfig, SmartDevice

    config = DeviceConfig(name="Front Door Lock",
                          device_type="Security Lock",
                          location="Front Door")
    with SmartDevice(config) as lock:
        lock.set_powered(True)
        lock.charge_battery(10)
        lock.perform_diagnostics()
        print(lock.get_status())
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, List, Optional, TextIO, Type, Union

from pySmartDevice.audit_log import (
    AuditLog,
    Clock,
    FileLogWriter,
    LogWriter,
    StreamLogWriter,
)
from pySmartDevice.config import DeviceConfig, clamp_battery
from pySmartDevice.enums import PowerState

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Default file name of the audit log sink.
DEFAULT_LOG_FILE: str = "device_log.txt"

#: Battery levels strictly below this value count as low.
LOW_BATTERY_THRESHOLD: int = 20

#: Normal operating temperature band in °C (inclusive).
TEMPERATURE_MIN_NORMAL: float = 0.0
TEMPERATURE_MAX_NORMAL: float = 40.0


def _fmt_temp(value: float) -> str:
    return f"{value:.2f}°C"


# ---------------------------------------------------------------------------
# DiagnosticsReport
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DiagnosticsReport:
    """Outcome of :meth:`SmartDevice.perform_diagnostics`."""

    powered_on: bool
    battery_level: int
    temperature: float
    low_battery: bool
    temperature_out_of_range: bool

    @property
    def ok(self) -> bool:
        """``True`` when no warning was raised."""
        return not (self.low_battery or self.temperature_out_of_range)


# ---------------------------------------------------------------------------
# SmartDevice
# ---------------------------------------------------------------------------


class SmartDevice:
    """A single smart device with validated state and an audit log.

    Parameters
    ----------
    config:
        Construction options.  Omitted options take their defaults.
    log_path:
        Path of the append-only log file.  ``None`` disables the file
        sink entirely (console-only logging).
    console:
        Writer used for the console copy of each entry.  Defaults to a
        :class:`~pySmartDevice.audit_log.StreamLogWriter` on
        ``sys.stdout``.
    clock:
        Time source for log timestamps.  Defaults to
        :meth:`datetime.datetime.now`.
    """

    def __init__(
        self,
        config: Optional[DeviceConfig] = None,
        *,
        log_path: Optional[Union[str, Path]] = DEFAULT_LOG_FILE,
        console: Optional[LogWriter] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        config = config or DeviceConfig()

        self._closed: bool = False

        # --- sink + console -------------------------------------------
        self._sink: Optional[FileLogWriter] = None
        if log_path is not None:
            self._sink = self._open_sink(log_path)
        writers: List[LogWriter] = []
        if self._sink is not None:
            writers.append(self._sink)
        writers.append(console if console is not None else StreamLogWriter())
        self._audit = AuditLog(
            writers, clock=clock, on_write_error=self._on_write_error
        )

        # The sink must not outlive a failed construction.
        try:
            self._log_construction(config)
        except BaseException:
            if self._sink is not None:
                self._audit.detach(self._sink)
                self._sink = None
            raise

    def _log_construction(self, config: DeviceConfig) -> None:
        if config.is_complete:
            self._init_state(config)
            self._log("Device fully initialized with custom parameters")
            return

        self._init_state(DeviceConfig())
        self._log("Device created with default parameters")
        for option in config.supplied_fields():
            self._apply_initial(option, config.resolved(option))

    def _init_state(self, config: DeviceConfig) -> None:
        self._name: str = config.resolved("name")
        self._device_type: str = config.resolved("device_type")
        self._location: str = config.resolved("location")
        self._powered_on: bool = bool(config.resolved("powered_on"))
        self._battery_level: int = clamp_battery(
            config.resolved("battery_level")
        )
        self._temperature: float = float(config.resolved("temperature"))

    def _apply_initial(self, option: str, value: Any) -> None:
        if option == "name":
            self._name = value
            self._log(f"Device name set to: {value}")
        elif option == "device_type":
            self._device_type = value
            self._log(f"Device type set to: {value}")
        elif option == "location":
            self._location = value
            self._log(f"Device location set to: {value}")
        elif option == "powered_on":
            self._powered_on = bool(value)
            self._log(
                "Device power state set to: "
                f"{PowerState.from_bool(self._powered_on).label}"
            )
        elif option == "battery_level":
            self._battery_level = clamp_battery(value)
            self._log(f"Battery level set to: {self._battery_level}%")
        elif option == "temperature":
            self._temperature = float(value)
            self._log(f"Temperature set to: {_fmt_temp(self._temperature)}")

    @staticmethod
    def _open_sink(path: Union[str, Path]) -> Optional[FileLogWriter]:
        try:
            return FileLogWriter(path)
        except OSError as exc:
            print(f"Failed to open log file: {path}", file=sys.stderr)
            logger.warning(
                "Audit log %s unavailable (%s), logging to console only",
                path,
                exc,
            )
            return None

    def _on_write_error(self, writer: LogWriter, exc: OSError) -> None:
        if writer is not self._sink:
            return
        print(f"Failed to write log file: {self._sink.path}", file=sys.stderr)
        self._sink = None

    # ---- logging -----------------------------------------------------

    def _log(self, message: str) -> None:
        self._audit.log(self._name, message)

    # ---- accessors ---------------------------------------------------

    @property
    def name(self) -> str:
        """Device identifier."""
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self.set_name(value)

    @property
    def device_type(self) -> str:
        """Category label."""
        return self._device_type

    @device_type.setter
    def device_type(self, value: str) -> None:
        self.set_type(value)

    @property
    def location(self) -> str:
        return self._location

    @location.setter
    def location(self, value: str) -> None:
        self.set_location(value)

    @property
    def powered_on(self) -> bool:
        return self._powered_on

    @powered_on.setter
    def powered_on(self, value: bool) -> None:
        self.set_powered(value)

    @property
    def power_state(self) -> PowerState:
        """Power state as a :class:`~pySmartDevice.enums.PowerState`."""
        return PowerState.from_bool(self._powered_on)

    @property
    def battery_level(self) -> int:
        """Battery level in percent, always within ``[0, 100]``."""
        return self._battery_level

    @battery_level.setter
    def battery_level(self, value: int) -> None:
        self.set_battery(value)

    @property
    def temperature(self) -> float:
        """Temperature in °C (no enforced range)."""
        return self._temperature

    @temperature.setter
    def temperature(self, value: float) -> None:
        self.set_temperature(value)

    @property
    def is_low_battery(self) -> bool:
        """``True`` iff the battery level is below 20 %."""
        return self._battery_level < LOW_BATTERY_THRESHOLD

    @property
    def is_temperature_out_of_range(self) -> bool:
        """``True`` iff the temperature is outside 0–40 °C."""
        return (
            self._temperature < TEMPERATURE_MIN_NORMAL
            or self._temperature > TEMPERATURE_MAX_NORMAL
        )

    @property
    def is_closed(self) -> bool:
        """``True`` once :meth:`close` has run."""
        return self._closed

    @property
    def log_path(self) -> Optional[Path]:
        """Path of the open sink, or ``None`` when logging console-only."""
        return self._sink.path if self._sink is not None else None

    # ---- mutators ----------------------------------------------------

    def set_name(self, name: str) -> None:
        self._name = name
        self._log(f"Device name changed to: {name}")

    def set_type(self, device_type: str) -> None:
        self._device_type = device_type
        self._log(f"Device type changed to: {device_type}")

    def set_location(self, location: str) -> None:
        self._location = location
        self._log(f"Location changed to: {location}")

    def set_powered(self, powered: bool) -> None:
        self._powered_on = bool(powered)
        self._log(
            f"Device power state changed to: {self.power_state.label}"
        )

    def set_battery(self, level: int) -> None:
        """Set the battery level, clamped to ``[0, 100]``."""
        self._battery_level = clamp_battery(int(level))
        self._log(f"Battery level set to: {self._battery_level}%")

    def set_temperature(self, temperature: float) -> None:
        """Set the temperature.  No range is enforced."""
        self._temperature = float(temperature)
        self._log(f"Temperature set to: {_fmt_temp(self._temperature)}")

    # ---- domain operations -------------------------------------------

    def power_toggle(self) -> None:
        """Flip the power state."""
        self._powered_on = not self._powered_on
        self._log(f"Device toggled to: {self.power_state.label}")

    def charge_battery(self, amount: int) -> bool:
        """Charge the battery by *amount* percent, saturating at 100.

        The logged delta is the amount actually applied, which is less
        than *amount* when the battery saturates.

        Returns
        -------
        bool
            ``False`` (and no state change) if the device is powered
            off, ``True`` otherwise.
        """
        if not self._powered_on:
            self._log("Cannot charge - device is powered off")
            return False

        new_level = clamp_battery(self._battery_level + int(amount))
        charged = new_level - self._battery_level
        self._battery_level = new_level
        self._log(
            f"Battery charged by {charged}%. "
            f"New level: {self._battery_level}%"
        )
        return True

    def adjust_temperature(self, delta: float) -> None:
        """Add *delta* °C to the temperature (no clamping).

        Does nothing but log the reason when the device is powered off;
        unlike :meth:`charge_battery` there is no return value.
        """
        if not self._powered_on:
            self._log("Cannot adjust temperature - device is powered off")
            return

        old = self._temperature
        self._temperature = old + delta
        self._log(
            f"Temperature adjusted from {_fmt_temp(old)} "
            f"to {_fmt_temp(self._temperature)}"
        )

    # ---- queries -----------------------------------------------------

    def get_status(self) -> str:
        """Multi-line snapshot of the device."""
        return "\n".join([
            f"Device: {self._name} ({self._device_type})",
            f"Location: {self._location}",
            f"Power: {self.power_state.label}",
            f"Battery: {self._battery_level}%",
            f"Temperature: {_fmt_temp(self._temperature)}",
        ])

    def get_property_tree(self) -> Dict[str, Any]:
        """Snapshot of all attributes, keyed by their external names."""
        return {
            "name": self._name,
            "deviceType": self._device_type,
            "location": self._location,
            "poweredOn": self._powered_on,
            "batteryLevel": self._battery_level,
            "temperature": self._temperature,
        }

    def display_info(self, stream: Optional[TextIO] = None) -> None:
        """Print :meth:`get_status` to *stream* (default stdout)."""
        print(self.get_status(), file=stream or sys.stdout)

    # ---- diagnostics -------------------------------------------------

    def perform_diagnostics(self) -> DiagnosticsReport:
        """Run the self-check and log its findings.

        Always logs seven entries; state is not modified.
        """
        self._log("Starting diagnostics...")
        self._log(
            f"Checking power: {'OK' if self._powered_on else 'OFF'}"
        )

        self._log(f"Checking battery level: {self._battery_level}%")
        low_battery = self.is_low_battery
        if low_battery:
            self._log("WARNING: Low battery detected!")
        else:
            self._log("Battery level OK")

        self._log(f"Checking temperature: {_fmt_temp(self._temperature)}")
        out_of_range = self.is_temperature_out_of_range
        if out_of_range:
            self._log("WARNING: Temperature outside normal operating range!")
        else:
            self._log("Temperature OK")

        self._log("Diagnostics completed")
        return DiagnosticsReport(
            powered_on=self._powered_on,
            battery_level=self._battery_level,
            temperature=self._temperature,
            low_battery=low_battery,
            temperature_out_of_range=out_of_range,
        )

    # ---- teardown ----------------------------------------------------

    def close(self) -> None:
        """Log the teardown entry and release the sink.

        Safe to call more than once; only the first call logs.  Entries
        logged after closing go to the console only.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self._log(f"Device {self._name} destroyed")
        finally:
            sink, self._sink = self._sink, None
            if sink is not None:
                self._audit.detach(sink)

    def __enter__(self) -> SmartDevice:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    # ---- dunder ------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"SmartDevice(name={self._name!r}, "
            f"device_type={self._device_type!r}, "
            f"powered_on={self._powered_on}, "
            f"battery_level={self._battery_level}, "
            f"temperature={self._temperature})"
        )
