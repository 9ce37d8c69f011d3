"""Shared fixtures: an in-memory transport and a fast-polling session."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, ClassVar, Optional

import pytest

from light_remote.config import SessionConfig
from light_remote.models import DeviceIdentity
from light_remote.session import SessionManager
from light_remote.transport.base import Transport


class FakeTransport(Transport):
    """Transport double recording writes and injecting inbound chunks."""

    kind: ClassVar[str] = "fake"

    def __init__(
        self,
        name: str = "Light Controller",
        address: str = "00:11:22:33:44:55",
        *,
        available: bool = True,
        open_error: Optional[Exception] = None,
        write_error: Optional[Exception] = None,
        write_result: bool = True,
        close_error: Optional[Exception] = None,
        open_gate: Optional[asyncio.Event] = None,
    ) -> None:
        super().__init__()
        self.name = name
        self.address = address
        self.available = available
        self.open_error = open_error
        self.write_error = write_error
        self.write_result = write_result
        self.close_error = close_error
        self.open_gate = open_gate
        self.writes: list[bytes] = []
        self.open_calls = 0
        self.close_calls = 0
        self._open = False

    @property
    def label(self) -> str:
        return self.name

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def commands(self) -> list[str]:
        return [data.decode() for data in self.writes]

    async def is_available(self) -> bool:
        return self.available

    async def open(self) -> DeviceIdentity:
        self.open_calls += 1
        if self.open_gate is not None:
            await self.open_gate.wait()
        if self.open_error is not None:
            raise self.open_error
        self._open = True
        return DeviceIdentity(name=self.name, address=self.address)

    async def write(self, data: bytes) -> bool:
        if self.write_error is not None:
            raise self.write_error
        self.writes.append(data)
        return self.write_result

    async def close(self) -> None:
        self.close_calls += 1
        self._open = False
        if self.close_error is not None:
            raise self.close_error

    def push(self, data: bytes | str) -> None:
        """Simulate the controller sending ``data``."""
        self._emit_chunk(data)

    def lose(self, reason: str = "link dropped") -> None:
        """Simulate the link going away underneath the session."""
        self._open = False
        self._emit_lost(reason)


async def wait_for(
    predicate: Callable[[], bool], timeout: float = 1.0
) -> None:
    """Yield to the loop until ``predicate`` holds or ``timeout`` passes."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() >= deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    """Expose the polling helper to async tests."""
    return wait_for


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    """Return a factory building fake transports."""
    return FakeTransport


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def session() -> SessionManager:
    """Session polling every 10ms so poll tests stay quick."""
    return SessionManager(SessionConfig(poll_interval=0.01))


@pytest.fixture
def quiet_session() -> SessionManager:
    """Session whose poll loop never fires during a test."""
    return SessionManager(SessionConfig(poll_interval=60.0))
