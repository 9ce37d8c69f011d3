"""Command encoders for the light controller's line protocol.

Every command is a single ASCII line terminated by ``\\n``. Field values
are interpolated verbatim: voltages, times and serial parameters are not
range checked here, the controller rejects what it cannot use.
"""

import datetime
from enum import Enum
from typing import Any

from ..models import DeviceConfig, SerialSettings

LINE_TERMINATOR = "\n"


def _field(value: Any) -> str:
    """Return the wire text of a field value."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def format_device_datetime(ts: datetime.datetime) -> str:
    """Render a timestamp as zero-padded 24-hour ``YYYY-MM-DD HH:MM:SS``."""
    return (
        f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d} "
        f"{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}"
    )


def encode_poll() -> str:
    """Build the telemetry request sent by the poll loop."""
    return "GET_DATA" + LINE_TERMINATOR


def encode_config(cfg: DeviceConfig) -> str:
    """Build the MODE command carrying voltage limits and switch-off time."""
    return (
        f"MODE:{_field(cfg.mode)},"
        f"HV:{_field(cfg.high_voltage)},"
        f"LV:{_field(cfg.low_voltage)},"
        f"OFF:{_field(cfg.off_hour)}:{_field(cfg.off_minute)}"
        + LINE_TERMINATOR
    )


def encode_settings(settings: SerialSettings) -> str:
    """Build the SETTINGS command for the controller's serial line."""
    return (
        f"SETTINGS:BAUD:{_field(settings.baud_rate)},"
        f"DATA:{_field(settings.data_bits)},"
        f"STOP:{_field(settings.stop_bits)},"
        f"PARITY:{_field(settings.parity)}"
        + LINE_TERMINATOR
    )


def encode_firmware_update(timestamp: datetime.datetime | None = None) -> str:
    """Build the firmware update trigger stamped with local wall-clock time."""
    if timestamp is None:
        timestamp = datetime.datetime.now()
    return (
        f"UPDATE_FIRMWARE,DATETIME:{format_device_datetime(timestamp)}"
        + LINE_TERMINATOR
    )
