"""Transport adapters for the light controller."""

__all__ = [
    "BleUartTransport",
    "SerialTransport",
    "Transport",
    "build_transport",
    "discover_ble_devices",
    "list_serial_ports",
]
from .base import Transport
from .ble_uart import BleUartTransport, discover_ble_devices
from .factory import build_transport
from .serial_port import SerialTransport, list_serial_ports
