"""Bounded, newest-first diagnostic log kept in memory."""

from __future__ import annotations

import datetime
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List

from .const import DEFAULT_LOG_CAPACITY

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One diagnostic line stamped with local HH:MM:SS."""

    timestamp: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"time": self.timestamp, "message": self.message}


class EventLog:
    """Append-only ring of the most recent session events."""

    def __init__(
        self,
        capacity: int = DEFAULT_LOG_CAPACITY,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"Log capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._clock = clock
        # Newest entry at index 0; appendleft evicts from the right.
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, message: str) -> LogEntry:
        """Stamp ``message`` with the current local time and record it."""
        now = self._clock()
        entry = LogEntry(
            timestamp=f"{now.hour:02d}:{now.minute:02d}:{now.second:02d}",
            message=message,
        )
        self._entries.appendleft(entry)
        logger.info("%s", message)
        return entry

    def entries(self) -> List[LogEntry]:
        """Return all entries, newest first."""
        return list(self._entries)

    def recent(self, limit: int) -> List[LogEntry]:
        """Return at most ``limit`` newest entries."""
        if limit <= 0:
            return []
        return list(self._entries)[:limit]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
