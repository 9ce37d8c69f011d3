"""Bluetooth transport for controllers fitted with a UART-over-GATT module."""

from __future__ import annotations

import logging
from typing import ClassVar, Optional

from bleak import BleakScanner
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.backends.service import BleakGATTServiceCollection
from bleak_retry_connector import BLEAK_RETRY_EXCEPTIONS as BLEAK_EXCEPTIONS
from bleak_retry_connector import BleakError  # type: ignore
from bleak_retry_connector import (
    BleakClientWithServiceCache,
    establish_connection,
)

from ..const import UART_RX_CHAR_UUID, UART_TX_CHAR_UUID
from ..exception import TransportError
from ..models import DeviceIdentity
from .base import Transport

logger = logging.getLogger(__name__)

DEFAULT_SCAN_TIMEOUT = 5.0


class BleUartTransport(Transport):
    """Talk to the controller through notify/write UART characteristics."""

    kind: ClassVar[str] = "ble"

    def __init__(
        self,
        address: str,
        *,
        name: Optional[str] = None,
        ble_device: Optional[BLEDevice] = None,
        tx_char_uuid: str = UART_TX_CHAR_UUID,
        rx_char_uuid: str = UART_RX_CHAR_UUID,
        scan_timeout: float = DEFAULT_SCAN_TIMEOUT,
    ) -> None:
        super().__init__()
        self.address = address
        self._name = name
        self._ble_device = ble_device
        self._tx_char_uuid = tx_char_uuid
        self._rx_char_uuid = rx_char_uuid
        self._scan_timeout = scan_timeout
        self._client: BleakClientWithServiceCache | None = None
        self._read_char: BleakGATTCharacteristic | None = None
        self._write_char: BleakGATTCharacteristic | None = None
        self._expected_disconnect = False

    @property
    def name(self) -> str:
        if self._name:
            return self._name
        if self._ble_device is not None and self._ble_device.name:
            return self._ble_device.name
        return self.address

    @property
    def label(self) -> str:
        return self.name

    @property
    def is_open(self) -> bool:
        return self._client is not None and self._client.is_connected

    async def is_available(self) -> bool:
        """Resolve the device; False only when the adapter itself fails."""
        if self._ble_device is not None:
            return True
        try:
            self._ble_device = await BleakScanner.find_device_by_address(
                self.address, timeout=self._scan_timeout
            )
        except BleakError as ex:
            logger.warning("Bluetooth adapter unavailable: %s", ex)
            return False
        except OSError as ex:
            logger.warning("Bluetooth stack unavailable: %s", ex)
            return False
        return True

    async def open(self) -> DeviceIdentity:
        if self._ble_device is None and not await self.is_available():
            raise TransportError("Bluetooth adapter unavailable")
        ble_device = self._ble_device
        if ble_device is None:
            raise TransportError(f"Device {self.address} not found")

        logger.debug("%s: Connecting", self.name)
        try:
            client = await establish_connection(
                BleakClientWithServiceCache,
                ble_device,
                self.name,
                self._disconnected,
                use_services_cache=True,
                ble_device_callback=lambda: ble_device,
            )
        except BLEAK_EXCEPTIONS as ex:
            raise TransportError(f"Failed to connect to {self.name}: {ex}") from ex

        resolved = self._resolve_characteristics(client.services)
        if not resolved:
            self._expected_disconnect = True
            await self._disconnect_quietly(client)
            raise TransportError(f"{self.name}: UART characteristics missing")

        self._client = client
        self._expected_disconnect = False
        logger.debug("%s: Subscribe to notifications", self.name)
        try:
            await client.start_notify(
                self._read_char,  # type: ignore[arg-type]
                self._notification_handler,
            )
        except BLEAK_EXCEPTIONS as ex:
            await self.close()
            raise TransportError(f"{self.name}: notify failed: {ex}") from ex
        return DeviceIdentity(name=self.name, address=self.address)

    def _resolve_characteristics(
        self, services: BleakGATTServiceCollection
    ) -> bool:
        """Find the UART notify and write characteristics."""
        if char := services.get_characteristic(self._tx_char_uuid):
            self._read_char = char
        if char := services.get_characteristic(self._rx_char_uuid):
            self._write_char = char
        return bool(self._read_char and self._write_char)

    def _notification_handler(
        self, _sender: BleakGATTCharacteristic, data: bytearray
    ) -> None:
        """Forward notification bytes as an inbound chunk."""
        self._emit_chunk(data)

    def _disconnected(self, client: BleakClientWithServiceCache) -> None:
        """Report a link drop unless close() caused it."""
        if self._expected_disconnect:
            logger.debug("%s: Disconnected from device", self.name)
            return
        logger.warning("%s: Device unexpectedly disconnected", self.name)
        self._client = None
        self._emit_lost("Device unexpectedly disconnected")

    async def write(self, data: bytes) -> bool:
        client = self._client
        if client is None or not client.is_connected or not self._write_char:
            raise TransportError(f"{self.name} is not connected")
        # Write-without-response packets are bounded by the negotiated MTU.
        size = max(1, self._write_char.max_write_without_response_size)
        try:
            for offset in range(0, len(data), size):
                await client.write_gatt_char(
                    self._write_char, data[offset : offset + size], False
                )
        except BLEAK_EXCEPTIONS as ex:
            raise TransportError(f"{self.name}: write failed: {ex}") from ex
        return True

    async def close(self) -> None:
        client = self._client
        read_char = self._read_char
        self._expected_disconnect = True
        self._client = None
        self._read_char = None
        self._write_char = None
        if client and client.is_connected:
            if read_char:
                try:
                    await client.stop_notify(read_char)
                except BLEAK_EXCEPTIONS:
                    logger.debug(
                        "%s: Failed to stop notifications",
                        self.name,
                        exc_info=True,
                    )
            await self._disconnect_quietly(client)

    async def _disconnect_quietly(
        self, client: BleakClientWithServiceCache
    ) -> None:
        """Drop the link; a failing disconnect leaves nothing to release."""
        try:
            await client.disconnect()
        except BLEAK_EXCEPTIONS:
            logger.debug(
                "%s: Failed to disconnect", self.name, exc_info=True
            )


async def discover_ble_devices(
    timeout: float = DEFAULT_SCAN_TIMEOUT,
) -> list[BLEDevice]:
    """Scan for nearby BLE devices, named ones first."""
    discovered = await BleakScanner.discover(timeout=timeout)
    return sorted(
        discovered, key=lambda d: (d.name is None, d.name or "", d.address)
    )
