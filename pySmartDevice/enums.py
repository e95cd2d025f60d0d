"""Smart device enumerations."""

from enum import IntEnum, unique


# ---------------------------------------------------------------------------
#  Power state
# ---------------------------------------------------------------------------


@unique
class PowerState(IntEnum):
    """Binary power state of a :class:`~pySmartDevice.device.SmartDevice`."""

    OFF = 0
    ON = 1

    @classmethod
    def from_bool(cls, powered: bool) -> "PowerState":
        """Map a boolean power flag onto ``ON`` / ``OFF``."""
        return cls.ON if powered else cls.OFF

    @property
    def label(self) -> str:
        """Upper-case label used in log entries and status output."""
        return self.name
