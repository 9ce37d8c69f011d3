"""Commands package: wire encoders for the light controller."""

__all__ = [
    "encode_config",
    "encode_firmware_update",
    "encode_poll",
    "encode_settings",
    "format_device_datetime",
]
from .encoder import (
    encode_config,
    encode_firmware_update,
    encode_poll,
    encode_settings,
    format_device_datetime,
)
