"""Define Pydantic models for request payloads."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .const import Mode, Parity, TransportKind
from .models import DeviceConfig, SerialSettings


def _as_text(value: Any) -> Any:
    """Accept numbers for wire fields; the encoder sends their text."""
    if isinstance(value, bool):
        raise ValueError("Expected a string or number")
    if isinstance(value, (int, float)):
        return str(value)
    return value


class ConnectRequest(BaseModel):
    """Payload for opening the device session."""

    transport: TransportKind = TransportKind.SERIAL
    port: Optional[str] = Field(None, description="Serial port path")
    address: Optional[str] = Field(None, description="Bluetooth address")
    name: Optional[str] = Field(None, description="Display name override")
    baud_rate: Optional[int] = Field(None, gt=0)
    replace: bool = Field(
        False, description="Confirm tearing down an active session"
    )

    @model_validator(mode="after")
    def _require_target(self) -> ConnectRequest:
        if self.transport is TransportKind.SERIAL and not self.port:
            raise ValueError("A serial connection requires 'port'")
        if self.transport is TransportKind.BLE and not self.address:
            raise ValueError("A Bluetooth connection requires 'address'")
        return self

    @property
    def target(self) -> str:
        if self.transport is TransportKind.SERIAL:
            return self.port or ""
        return self.address or ""


class DeviceConfigRequest(BaseModel):
    """Mode, voltage thresholds and daily switch-off time."""

    mode: Mode = Mode.A
    high_voltage: str = "285"
    low_voltage: str = "150"
    off_hour: str = "22"
    off_minute: str = "00"

    @field_validator(
        "high_voltage", "low_voltage", "off_hour", "off_minute", mode="before"
    )
    def _text_fields(cls, value: Any) -> Any:
        return _as_text(value)

    def to_config(self) -> DeviceConfig:
        return DeviceConfig(
            mode=self.mode,
            high_voltage=self.high_voltage,
            low_voltage=self.low_voltage,
            off_hour=self.off_hour,
            off_minute=self.off_minute,
        )


class SerialSettingsRequest(BaseModel):
    """Serial line settings for the controller."""

    baud_rate: str = "9600"
    data_bits: str = "8"
    stop_bits: str = "1"
    parity: Parity = Parity.NONE

    @field_validator("baud_rate", "data_bits", "stop_bits", mode="before")
    def _text_fields(cls, value: Any) -> Any:
        return _as_text(value)

    def to_settings(self) -> SerialSettings:
        return SerialSettings(
            baud_rate=self.baud_rate,
            data_bits=self.data_bits,
            stop_bits=self.stop_bits,
            parity=self.parity,
        )
