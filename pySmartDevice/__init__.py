"""pySmartDevice - a stateful smart device with an audit log."""

__version__ = "0.1.0"

from pySmartDevice.enums import PowerState  # noqa: F401

from pySmartDevice.config import (  # noqa: F401
    BATTERY_MAX,
    BATTERY_MIN,
    DEFAULTS,
    DeviceConfig,
    clamp_battery,
    load_device_config,
)

from pySmartDevice.audit_log import (  # noqa: F401
    TIMESTAMP_FORMAT,
    AuditLog,
    FileLogWriter,
    LogWriter,
    MemoryLogWriter,
    StreamLogWriter,
    format_entry,
)

from pySmartDevice.device import (  # noqa: F401
    DEFAULT_LOG_FILE,
    LOW_BATTERY_THRESHOLD,
    TEMPERATURE_MAX_NORMAL,
    TEMPERATURE_MIN_NORMAL,
    DiagnosticsReport,
    SmartDevice,
)
