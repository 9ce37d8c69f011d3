"""Value objects shared by the decoder, encoder and session manager."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Optional

from .const import (
    DEFAULT_CURRENT,
    DEFAULT_FAULT_CODE,
    DEFAULT_STATUS,
    DEFAULT_VOLTAGE,
    Mode,
    Parity,
)


class SessionState(str, Enum):
    """Lifecycle of the single device session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True, slots=True)
class DeviceIdentity:
    """Name and address of the connected controller."""

    name: str
    address: str


@dataclass(frozen=True, slots=True)
class PartialTelemetry:
    """Fields decoded from one inbound chunk; ``None`` means unchanged."""

    voltage: Optional[str] = None
    current: Optional[str] = None
    status: Optional[str] = None
    fault_code: Optional[str] = None

    def is_empty(self) -> bool:
        """Return True when the chunk carried no recognised field."""
        return not self.changed_fields()

    def changed_fields(self) -> dict[str, str]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True, slots=True)
class DeviceTelemetry:
    """Last-known readings; every field always holds a value."""

    voltage: str = DEFAULT_VOLTAGE
    current: str = DEFAULT_CURRENT
    status: str = DEFAULT_STATUS
    fault_code: str = DEFAULT_FAULT_CODE

    @property
    def is_on(self) -> bool:
        return self.status == "ON"

    def merge(self, update: PartialTelemetry) -> DeviceTelemetry:
        """Return a copy with the fields present in ``update`` applied."""
        changes = update.changed_fields()
        if not changes:
            return self
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class DeviceConfig:
    """Operating parameters sent with the MODE command."""

    mode: Mode | str = Mode.A
    high_voltage: str = "285"
    low_voltage: str = "150"
    off_hour: str = "22"
    off_minute: str = "00"


@dataclass(frozen=True, slots=True)
class SerialSettings:
    """Serial line settings sent with the SETTINGS command."""

    baud_rate: str = "9600"
    data_bits: str = "8"
    stop_bits: str = "1"
    parity: Parity | str = Parity.NONE


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Consistent view of the session handed to observers."""

    state: SessionState
    device: Optional[DeviceIdentity]
    telemetry: DeviceTelemetry

    @property
    def connected(self) -> bool:
        return self.state is SessionState.CONNECTED
