"""Remote control client for a Bluetooth/serial light controller."""

from .const import Mode, Parity, TransportKind
from .models import (
    DeviceConfig,
    DeviceIdentity,
    DeviceTelemetry,
    SerialSettings,
    SessionSnapshot,
    SessionState,
)
from .session import SessionManager

__version__ = "1.0.0"
__all__ = [
    "DeviceConfig",
    "DeviceIdentity",
    "DeviceTelemetry",
    "Mode",
    "Parity",
    "SerialSettings",
    "SessionManager",
    "SessionSnapshot",
    "SessionState",
    "TransportKind",
]
