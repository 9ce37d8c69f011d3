"""Session manager for the single connected light controller.

The manager owns the transport for the lifetime of a session, serializes
writes and state transitions behind one ``asyncio.Lock``, merges decoded
telemetry into an immutable record and polls the controller while
connected. Every public operation returns an ``OperationRecord``; session
failures are logged and reported there instead of being raised.
"""

from __future__ import annotations

import asyncio
import datetime
import inspect
import logging
from functools import partial
from typing import Awaitable, Callable, Optional, Union

from .commands import (
    encode_config,
    encode_firmware_update,
    encode_poll,
    encode_settings,
    format_device_datetime,
)
from .config import SessionConfig
from .event_log import EventLog
from .exception import (
    ConnectFailed,
    NotConnected,
    ReconnectDeclined,
    SessionError,
    TransportError,
    TransportUnavailable,
    WriteFailed,
)
from .frame_decoder import FrameFormat, decode_frame
from .models import (
    DeviceConfig,
    DeviceIdentity,
    DeviceTelemetry,
    SerialSettings,
    SessionSnapshot,
    SessionState,
)
from .operations_model import OperationRecord
from .transport.base import Transport

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[DeviceIdentity], Union[bool, Awaitable[bool]]]
SnapshotObserver = Callable[[SessionSnapshot], None]


class SessionManager:
    """Connect, poll and command one controller at a time."""

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        event_log: EventLog | None = None,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        self._config = config or SessionConfig()
        self._clock = clock
        self.log = event_log or EventLog(self._config.log_capacity, clock=clock)
        self._lock = asyncio.Lock()
        self._state = SessionState.DISCONNECTED
        self._transport: Transport | None = None
        self._device: DeviceIdentity | None = None
        self._telemetry = DeviceTelemetry()
        # Bumped on every connect and teardown; callbacks and the poll loop
        # carry the value they were started with.
        self._generation = 0
        self._poll_task: asyncio.Task | None = None
        self._observers: list[SnapshotObserver] = []
        self._background: set[asyncio.Task] = set()

    # Read-only views

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def device(self) -> Optional[DeviceIdentity]:
        return self._device

    @property
    def telemetry(self) -> DeviceTelemetry:
        return self._telemetry

    @property
    def is_connected(self) -> bool:
        return self._state is SessionState.CONNECTED

    @property
    def poll_active(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def snapshot(self) -> SessionSnapshot:
        """Return the current state, device and telemetry together."""
        return SessionSnapshot(
            state=self._state, device=self._device, telemetry=self._telemetry
        )

    def requires_confirmation(self) -> bool:
        """Return True if connecting now would replace an active session."""
        return self._state is SessionState.CONNECTED

    # Observers

    def subscribe(self, observer: SnapshotObserver) -> Callable[[], None]:
        """Call ``observer`` with a snapshot after every change.

        Returns a callable that removes the observer.
        """
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.warning("Session observer failed", exc_info=True)

    # Connection lifecycle

    async def connect(
        self,
        transport: Transport,
        confirm_replace: ConfirmCallback | None = None,
    ) -> OperationRecord:
        """Open ``transport`` and start a session.

        When a session is already active, ``confirm_replace`` is asked first
        with the current device; without a positive answer nothing is torn
        down and the record is marked declined.
        """
        record = OperationRecord(action="connect")
        record.mark_started()
        try:
            confirmed_generation: Optional[int] = None
            if self.requires_confirmation():
                confirmed_generation = self._generation
                await self._confirm_replace(confirm_replace)
            async with self._lock:
                if self._state is SessionState.CONNECTED:
                    if confirmed_generation != self._generation:
                        raise ReconnectDeclined(
                            "Another session connected while waiting"
                        )
                    await self._teardown_locked("Device Disconnected")
                identity = await self._open_locked(transport)
        except ReconnectDeclined as exc:
            self.log.append(f"Connection kept: {exc}")
            record.mark_declined(exc)
            return record
        except SessionError as exc:
            self.log.append(f"Connection Error: {exc}")
            logger.warning("Connect via %s failed: %s", transport.kind, exc)
            record.mark_failed(exc)
            return record

        record.mark_success(
            {"device": {"name": identity.name, "address": identity.address}}
        )
        return record

    async def _confirm_replace(
        self, confirm_replace: ConfirmCallback | None
    ) -> None:
        current = self._device
        label = current.name if current else "current device"
        if confirm_replace is None or current is None:
            raise ReconnectDeclined(
                f"Already connected to {label}; disconnect first"
            )
        answer = confirm_replace(current)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            raise ReconnectDeclined(f"Kept connection to {label}")

    async def _open_locked(self, transport: Transport) -> DeviceIdentity:
        try:
            available = await transport.is_available()
        except TransportError as exc:
            raise TransportUnavailable(str(exc)) from exc
        except Exception as exc:
            logger.exception("Availability check for %s failed", transport.label)
            raise TransportUnavailable(str(exc) or type(exc).__name__) from exc
        if not available:
            raise TransportUnavailable(f"{transport.kind} transport unavailable")

        self._state = SessionState.CONNECTING
        self._publish()
        self.log.append(f"Connecting to {transport.label}...")
        try:
            identity = await transport.open()
        except TransportError as exc:
            self._state = SessionState.DISCONNECTED
            self._publish()
            await self._close_transport(transport)
            raise ConnectFailed(str(exc)) from exc
        except Exception as exc:
            logger.exception("Unexpected error opening %s", transport.label)
            self._state = SessionState.DISCONNECTED
            self._publish()
            await self._close_transport(transport)
            raise ConnectFailed(str(exc) or type(exc).__name__) from exc
        except asyncio.CancelledError:
            self._state = SessionState.DISCONNECTED
            self._publish()
            await self._close_transport(transport)
            raise

        self._generation += 1
        generation = self._generation
        self._transport = transport
        self._device = identity
        self._telemetry = DeviceTelemetry()
        self._state = SessionState.CONNECTED
        transport.subscribe(
            partial(self._on_chunk, generation),
            partial(self._on_lost, generation),
        )
        self.log.append(f"Connected to {identity.name}")
        self._poll_task = asyncio.create_task(self._poll_loop(generation))
        self._publish()
        return identity

    async def disconnect(self) -> OperationRecord:
        """End the session, release the transport and reset telemetry."""
        record = OperationRecord(action="disconnect")
        record.mark_started()
        async with self._lock:
            if self._state is SessionState.DISCONNECTED:
                record.mark_success({"detail": "already disconnected"})
                return record
            close_error = await self._teardown_locked("Device Disconnected")
        if close_error is not None:
            record.mark_failed(close_error)
        else:
            record.mark_success({"detail": "disconnected"})
        return record

    async def shutdown(self) -> None:
        """Disconnect and wait for any pending link-loss handling."""
        await self.disconnect()
        pending = list(self._background)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _teardown_locked(self, message: str) -> Exception | None:
        """Drop the session. Caller holds ``self._lock``."""
        transport = self._transport
        poll_task = self._poll_task
        self._generation += 1
        self._transport = None
        self._device = None
        self._poll_task = None
        self._telemetry = DeviceTelemetry()
        self._state = SessionState.DISCONNECTED

        if poll_task is not None and poll_task is not asyncio.current_task():
            poll_task.cancel()

        close_error: Exception | None = None
        if transport is not None:
            transport.unsubscribe()
            close_error = await self._close_transport(transport)
        self.log.append(message)
        self._publish()
        return close_error

    async def _close_transport(self, transport: Transport) -> Exception | None:
        try:
            await transport.close()
        except Exception as exc:
            self.log.append(f"Disconnect Error: {exc}")
            logger.warning(
                "Closing %s transport failed", transport.kind, exc_info=True
            )
            return exc
        return None

    # Commands

    async def send(self, command: str, *, action: str = "send") -> OperationRecord:
        """Write one command line; never queued for later delivery."""
        record = OperationRecord(action=action, command=command)
        record.mark_started()
        try:
            # A connect in progress holds the lock; never wait for it.
            if self._state is not SessionState.CONNECTED:
                raise NotConnected("Device not connected")
            async with self._lock:
                if self._state is not SessionState.CONNECTED:
                    raise NotConnected("Device not connected")
                await self._write_locked(command)
        except SessionError as exc:
            self.log.append(f"Send Error: {exc}")
            logger.warning("Send %s failed: %s", action, exc)
            record.mark_failed(exc)
            return record
        record.mark_success()
        return record

    async def _write_locked(self, command: str) -> None:
        transport = self._transport
        if transport is None:
            raise NotConnected("Device not connected")
        try:
            sent = await transport.write(command.encode(transport.encoding))
        except TransportError as exc:
            await self._teardown_locked(f"Connection lost: {exc}")
            raise WriteFailed(str(exc)) from exc
        if not sent:
            await self._teardown_locked("Connection lost: write refused")
            raise WriteFailed("Failed to send data")
        self.log.append(f"Sent: {command.rstrip()}")

    async def request_data(self) -> OperationRecord:
        """Ask the controller for fresh telemetry once."""
        if self.is_connected:
            self.log.append("Requesting device data...")
        return await self.send(encode_poll(), action="get_data")

    async def send_config(self, cfg: DeviceConfig) -> OperationRecord:
        """Transmit mode, voltage limits and switch-off time."""
        if self.is_connected:
            self.log.append("Sending configuration...")
        return await self.send(encode_config(cfg), action="config")

    async def send_settings(self, settings: SerialSettings) -> OperationRecord:
        """Transmit serial line settings for the controller to apply."""
        if self.is_connected:
            self.log.append("Saving settings...")
        return await self.send(encode_settings(settings), action="settings")

    async def update_firmware(
        self, now: datetime.datetime | None = None
    ) -> OperationRecord:
        """Trigger a firmware update stamped with local wall-clock time."""
        timestamp = now or self._clock()
        stamp = format_device_datetime(timestamp)
        if self.is_connected:
            self.log.append(f"Sending update with time: {stamp}")
        record = await self.send(
            encode_firmware_update(timestamp), action="firmware_update"
        )
        if record.ok:
            record.result = {"datetime": stamp}
        return record

    # Background work

    def _is_current(self, generation: int) -> bool:
        return (
            self._state is SessionState.CONNECTED
            and self._generation == generation
        )

    async def _poll_loop(self, generation: int) -> None:
        interval = self._config.poll_interval
        logger.debug("Poll loop started (every %.1fs)", interval)
        try:
            while True:
                await asyncio.sleep(interval)
                async with self._lock:
                    if not self._is_current(generation):
                        break
                    try:
                        await self._write_locked(encode_poll())
                    except SessionError as exc:
                        self.log.append(f"Send Error: {exc}")
                        logger.warning("Poll failed: %s", exc)
                        break
        finally:
            logger.debug("Poll loop stopped")

    def _on_chunk(self, generation: int, chunk: str) -> None:
        if not self._is_current(generation):
            return
        self.log.append(f"Received: {chunk.strip()}")
        update, frame_format = decode_frame(chunk)
        if frame_format is FrameFormat.STRUCTURED:
            self.log.append("Device status updated from JSON")
        if update.is_empty():
            logger.debug("Frame carried no telemetry: %r", chunk)
            return
        self._telemetry = self._telemetry.merge(update)
        self._publish()

    def _on_lost(self, generation: int, reason: str) -> None:
        if not self._is_current(generation):
            return
        task = asyncio.create_task(self._handle_lost(generation, reason))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _handle_lost(self, generation: int, reason: str) -> None:
        async with self._lock:
            if not self._is_current(generation):
                return
            await self._teardown_locked(f"Connection lost: {reason}")
