"""Construction options for a :class:`~pySmartDevice.device.SmartDevice`.

A :class:`DeviceConfig` carries every recognised construction option in
one record.  Each field is optional: ``None`` means "not supplied" and
the device falls back to the default listed in :data:`DEFAULTS`.  The
device needs to know *which* options were supplied because it logs one
entry per supplied option, or a single summary entry when all of them
were given.

Options can also be read from a YAML file::

    # kitchen.yaml
    name: Kitchen Light
    deviceType: Light Switch
    location: Kitchen

    from pySmartDevice.config import load_device_config

    config = load_device_config("kitchen.yaml")
    with SmartDevice(config) as device:
        ...

Both snake_case keys and the camelCase aliases ``deviceType``,
``poweredOn`` and ``batteryLevel`` are accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Lower bound of the battery level.
BATTERY_MIN: int = 0
#: Upper bound of the battery level.
BATTERY_MAX: int = 100

#: Default value of every construction option.
DEFAULTS: Dict[str, Any] = {
    "name": "Unknown",
    "device_type": "Generic",
    "location": "Not set",
    "powered_on": False,
    "battery_level": 100,
    "temperature": 20.0,
}

#: Canonical option order (also the order of per-option log entries).
OPTION_ORDER: Tuple[str, ...] = tuple(DEFAULTS)

_ALIASES: Dict[str, str] = {
    "deviceType": "device_type",
    "poweredOn": "powered_on",
    "batteryLevel": "battery_level",
}


def clamp_battery(level: int) -> int:
    """Saturate *level* to ``[BATTERY_MIN, BATTERY_MAX]``."""
    return max(BATTERY_MIN, min(BATTERY_MAX, level))


# ---------------------------------------------------------------------------
# DeviceConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeviceConfig:
    """Options record for constructing a smart device.

    Parameters
    ----------
    name:
        Device identifier.  Defaults to ``"Unknown"``.
    device_type:
        Category label.  Defaults to ``"Generic"``.
    location:
        Free-text location.  Defaults to ``"Not set"``.
    powered_on:
        Initial power state.  Defaults to ``False``.
    battery_level:
        Initial battery level in percent; clamped on use.  Defaults
        to ``100``.
    temperature:
        Initial temperature in °C, unclamped.  Defaults to ``20.0``.
    """

    name: Optional[str] = None
    device_type: Optional[str] = None
    location: Optional[str] = None
    powered_on: Optional[bool] = None
    battery_level: Optional[int] = None
    temperature: Optional[float] = None

    def __post_init__(self) -> None:
        for option in ("name", "device_type", "location"):
            _check_type(option, getattr(self, option), str)
        _check_type("powered_on", self.powered_on, bool)
        # bool is an int subclass; reject it for the numeric options.
        if isinstance(self.battery_level, bool):
            raise TypeError("battery_level must be int, got bool")
        _check_type("battery_level", self.battery_level, int)
        if isinstance(self.temperature, bool):
            raise TypeError("temperature must be float, got bool")
        _check_type("temperature", self.temperature, (int, float))

    # ---- queries -----------------------------------------------------

    def supplied_fields(self) -> Tuple[str, ...]:
        """Names of the supplied options, in canonical order."""
        return tuple(
            option for option in OPTION_ORDER
            if getattr(self, option) is not None
        )

    @property
    def is_complete(self) -> bool:
        """``True`` when every option has been supplied."""
        return len(self.supplied_fields()) == len(OPTION_ORDER)

    def resolved(self, option: str) -> Any:
        """Return the supplied value of *option*, or its default."""
        if option not in DEFAULTS:
            raise ValueError(f"Unknown device option: {option!r}")
        value = getattr(self, option)
        return DEFAULTS[option] if value is None else value

    def to_dict(self) -> Dict[str, Any]:
        """Supplied options as a plain dictionary."""
        return {
            option: getattr(self, option)
            for option in self.supplied_fields()
        }

    # ---- construction helpers ----------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DeviceConfig:
        """Build a config from a mapping of option names to values.

        Raises
        ------
        ValueError
            If *data* contains an unknown or duplicated option.
        TypeError
            If a value has the wrong type.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            option = _ALIASES.get(key, key)
            if option not in known:
                raise ValueError(f"Unknown device option: {key!r}")
            if option in kwargs:
                raise ValueError(f"Duplicate device option: {key!r}")
            if option == "temperature" and isinstance(value, int) \
                    and not isinstance(value, bool):
                value = float(value)
            kwargs[option] = value
        return cls(**kwargs)


def _check_type(option: str, value: Any, expected: Any) -> None:
    if value is not None and not isinstance(value, expected):
        raise TypeError(
            f"{option} has invalid type {type(value).__name__}"
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


def load_device_config(path: Union[str, Path]) -> DeviceConfig:
    """Read a :class:`DeviceConfig` from a YAML file.

    An empty file yields an empty config (all defaults).

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If the file is not valid YAML, is not a mapping, or names an
        unknown option.
    TypeError
        If an option value has the wrong type.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a mapping at top level in {path}, "
            f"got {type(data).__name__}"
        )

    config = DeviceConfig.from_dict(data)
    logger.info(
        "Loaded device config from %s (%d option(s))",
        path,
        len(config.supplied_fields()),
    )
    return config
