"""Transport capability consumed by the session manager."""

from __future__ import annotations

import abc
import logging
from abc import ABC
from typing import Callable, ClassVar, Optional

from ..models import DeviceIdentity

ChunkCallback = Callable[[str], None]
LostCallback = Callable[[str], None]

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Byte stream to one controller.

    Concrete adapters open the link, write command lines, push every
    inbound chunk to the subscribed callback and report an unexpected loss
    of the link through ``on_lost``. Failures surface as ``TransportError``.
    """

    kind: ClassVar[str] = "transport"
    encoding: ClassVar[str] = "utf-8"

    def __init__(self) -> None:
        self._on_chunk: Optional[ChunkCallback] = None
        self._on_lost: Optional[LostCallback] = None

    @property
    def label(self) -> str:
        """Human readable name of the far end, used in log lines."""
        return self.kind

    async def is_available(self) -> bool:
        """Return False when the adapter is missing or disabled."""
        return True

    @property
    @abc.abstractmethod
    def is_open(self) -> bool:
        """Return True while the link is usable."""

    @abc.abstractmethod
    async def open(self) -> DeviceIdentity:
        """Open the link and return the identity of the far end."""

    @abc.abstractmethod
    async def write(self, data: bytes) -> bool:
        """Write ``data``; return False if the adapter refused it."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the link. Safe to call more than once."""

    def subscribe(
        self,
        on_chunk: ChunkCallback,
        on_lost: Optional[LostCallback] = None,
    ) -> None:
        """Register the inbound chunk and link-loss callbacks."""
        self._on_chunk = on_chunk
        self._on_lost = on_lost

    def unsubscribe(self) -> None:
        self._on_chunk = None
        self._on_lost = None

    def _emit_chunk(self, data: bytes | bytearray | str) -> None:
        """Deliver one inbound chunk as text."""
        if isinstance(data, (bytes, bytearray)):
            text = bytes(data).decode(self.encoding, errors="replace")
        else:
            text = data
        callback = self._on_chunk
        if callback is None or not text:
            return
        try:
            callback(text)
        except Exception:
            logger.warning("Chunk callback failed", exc_info=True)

    def _emit_lost(self, reason: str) -> None:
        callback = self._on_lost
        if callback is None:
            return
        try:
            callback(reason)
        except Exception:
            logger.warning("Link-loss callback failed", exc_info=True)
