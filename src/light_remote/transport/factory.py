"""Select a transport adapter from user-facing connection parameters."""

from __future__ import annotations

from typing import Optional

from ..const import DEFAULT_SERIAL_BAUD, TransportKind
from .base import Transport
from .ble_uart import BleUartTransport
from .serial_port import SerialTransport


def build_transport(
    kind: TransportKind | str,
    target: str,
    *,
    baud: int = DEFAULT_SERIAL_BAUD,
    name: Optional[str] = None,
) -> Transport:
    """Return an unopened transport for ``target``.

    ``target`` is a port path for serial links and a Bluetooth address for
    BLE links.
    """
    kind = TransportKind(kind)
    if not target:
        raise ValueError(f"A target is required for a {kind.value} transport")
    if kind is TransportKind.SERIAL:
        return SerialTransport(target, baud, name=name)
    return BleUartTransport(target, name=name)
