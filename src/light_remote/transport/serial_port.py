"""Serial port transport (USB bridge or RFCOMM-bound Bluetooth port)."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import ClassVar, Optional

import serial
import serial.tools.list_ports

from ..const import DEFAULT_SERIAL_BAUD
from ..exception import TransportError
from ..models import DeviceIdentity
from .base import Transport

logger = logging.getLogger(__name__)

READ_INTERVAL = 0.01  # 10ms responsive sleep
WRITE_TIMEOUT = 2.0


class SerialTransport(Transport):
    """Drive the controller through a pyserial port.

    Reads are polled from the event loop using ``in_waiting`` so no data
    is read from a worker thread; blocking writes run in a thread.
    """

    kind: ClassVar[str] = "serial"

    def __init__(
        self,
        port: str,
        baud: int = DEFAULT_SERIAL_BAUD,
        *,
        name: Optional[str] = None,
        write_timeout: float = WRITE_TIMEOUT,
        read_interval: float = READ_INTERVAL,
    ) -> None:
        super().__init__()
        self.port = port
        self.baud = baud
        self._name = name
        self._write_timeout = write_timeout
        self._read_interval = read_interval
        self._serial: Optional[serial.Serial] = None
        self._reader_task: Optional[asyncio.Task] = None

    @property
    def label(self) -> str:
        return self._name or self.port

    @property
    def is_open(self) -> bool:
        return self._serial is not None and self._serial.is_open

    async def is_available(self) -> bool:
        """Return True if the port is enumerated or exists as a device node.

        pyserial URL handlers (``socket://``, ``rfc2217://``, ``loop://``)
        are always considered available; opening them reports failures.
        """
        if "://" in self.port:
            return True
        ports = await asyncio.to_thread(serial.tools.list_ports.comports)
        if any(p.device == self.port for p in ports):
            return True
        return os.path.exists(self.port)

    async def open(self) -> DeviceIdentity:
        try:
            ser = serial.serial_for_url(
                self.port,
                baudrate=self.baud,
                timeout=0,
                write_timeout=self._write_timeout,
                do_not_open=True,
            )
            # Keep DTR/RTS low so boards wired for auto-reset stay running.
            ser.dtr = False
            ser.rts = False
            await asyncio.to_thread(ser.open)
        except (serial.SerialException, OSError, ValueError) as exc:
            raise TransportError(f"Failed to open {self.port}: {exc}") from exc

        self._serial = ser
        logger.info("Opened %s at %s baud", self.port, self.baud)
        self._reader_task = asyncio.create_task(self._read_loop(ser))
        return DeviceIdentity(name=self.label, address=self.port)

    async def write(self, data: bytes) -> bool:
        ser = self._serial
        if ser is None or not ser.is_open:
            raise TransportError(f"{self.port} is not open")
        try:
            written = await asyncio.to_thread(self._write_blocking, ser, data)
        except serial.SerialTimeoutException as exc:
            raise TransportError(f"Write timed out on {self.port}") from exc
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"Write failed on {self.port}: {exc}") from exc
        return written == len(data)

    @staticmethod
    def _write_blocking(ser: serial.Serial, data: bytes) -> int:
        written = ser.write(data) or 0
        ser.flush()
        return written

    async def _read_loop(self, ser: serial.Serial) -> None:
        logger.debug("Serial read loop started on %s", self.port)
        try:
            while ser.is_open:
                try:
                    waiting = ser.in_waiting
                    if waiting > 0:
                        data = ser.read(waiting)
                        if data:
                            self._emit_chunk(data)
                        await asyncio.sleep(0)
                    else:
                        await asyncio.sleep(self._read_interval)
                except (serial.SerialException, OSError) as exc:
                    logger.error("Read loop error on %s: %s", self.port, exc)
                    self._emit_lost(str(exc))
                    break
        finally:
            logger.debug("Serial read loop stopped on %s", self.port)

    async def close(self) -> None:
        task = self._reader_task
        self._reader_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        ser = self._serial
        self._serial = None
        if ser is not None and ser.is_open:
            ser.dtr = False
            ser.rts = False
            await asyncio.to_thread(ser.close)
            logger.info("Closed %s", self.port)


def list_serial_ports() -> list[dict]:
    """Describe every serial port the OS enumerates.

    Bluetooth serial ports (RFCOMM bindings, ``Bluetooth-Incoming-Port``)
    are included; they are how paired classic Bluetooth controllers show up.
    """
    ports = []
    for p in sorted(serial.tools.list_ports.comports(), key=lambda p: p.device):
        ports.append(
            {
                "device": p.device,
                "description": p.description,
                "manufacturer": p.manufacturer,
                "vid": f"0x{p.vid:04x}" if p.vid else None,
                "pid": f"0x{p.pid:04x}" if p.pid else None,
                "serial_number": p.serial_number,
            }
        )
    logger.debug("Found %d serial ports", len(ports))
    return ports
