"""Append-only log of provider requests and responses."""

import itertools
import logging
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class LogType(str, Enum):
    """Direction of a logged exchange."""
    REQUEST = "REQUEST"
    RESPONSE = "RESPONSE"


class LogEntry(BaseModel):
    """A single logged request or response."""
    id: int
    timestamp: str
    type: LogType
    payload: dict[str, Any] = Field(default_factory=dict)


class RequestLog:
    """
    Ordered, append-only diagnostics log.

    Entries are only removed by an explicit ``clear()``; the log is never
    trimmed automatically.
    """

    def __init__(self):
        self._entries: list[LogEntry] = []
        self._ids = itertools.count(1)

    def append(self, type: LogType, payload: dict[str, Any]) -> LogEntry:
        entry = LogEntry(
            id=next(self._ids),
            timestamp=datetime.now().strftime("%H:%M:%S"),
            type=type,
            payload=payload,
        )
        self._entries.append(entry)
        logger.debug("%s %s", entry.type.value, payload.get("endpoint", ""))
        return entry

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
