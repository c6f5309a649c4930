"""Append-only, categorized record of session events."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from datetime import datetime, timedelta

from hidpanel.core.model import LogCategory, LogEntry

LOGGER = logging.getLogger(__name__)

_LEVELS = {
    LogCategory.INFO: logging.INFO,
    LogCategory.OUTGOING: logging.INFO,
    LogCategory.INCOMING: logging.DEBUG,
    LogCategory.ERROR: logging.INFO,
}

EntryListener = Callable[[LogEntry], None]


class SessionLog:
    """Timestamped log entries in arrival order.

    Timestamps have millisecond resolution and strictly increase; two appends
    landing in the same millisecond are spread one millisecond apart.
    """

    def __init__(self, *, max_entries: int = 0, clock: Callable[[], datetime] = datetime.now) -> None:
        self._entries: deque[LogEntry] = deque(maxlen=max_entries or None)
        self._listeners: list[EntryListener] = []
        self._clock = clock
        self._last: datetime | None = None

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add_listener(self, listener: EntryListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: EntryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def append(self, message: str, category: LogCategory | str = LogCategory.INFO) -> LogEntry:
        category = LogCategory(category)
        entry = LogEntry(timestamp=self._next_timestamp(), category=category, message=message)
        self._entries.append(entry)
        LOGGER.log(_LEVELS[category], "[%s] %s", category.value, message)
        for listener in list(self._listeners):
            listener(entry)
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        now = now.replace(microsecond=now.microsecond - now.microsecond % 1000)
        if self._last is not None and now <= self._last:
            now = self._last + timedelta(milliseconds=1)
        self._last = now
        return now
