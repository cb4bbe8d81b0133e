"""
Module: importer.notifications

Purpose:
    Operator-facing notifications produced during imports, held in a bounded
    most-recent-first buffer so a long session never grows without limit.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterator, List, Optional


class Severity(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class Notification:
    id: str
    severity: Severity
    message: str
    details: Optional[str] = None


class NotificationBuffer:
    """
    Bounded FIFO of notifications, newest first.

    Adding to a full buffer evicts the oldest notification.

    Example:
        >>> buf = NotificationBuffer(limit=2)
        >>> for i in range(3):
        ...     buf.add(Notification(str(i), Severity.INFO, f"n{i}"))
        >>> [n.id for n in buf]
        ['2', '1']
    """

    def __init__(self, limit: int = 5):
        if limit < 1:
            raise ValueError(f"Notification limit must be positive: {limit}")
        self._items: Deque[Notification] = deque(maxlen=limit)

    @property
    def limit(self) -> int:
        return self._items.maxlen or 0

    def add(self, notification: Notification) -> None:
        self._items.appendleft(notification)

    def dismiss(self, notification_id: str) -> bool:
        """Remove every notification with the given id. Returns True if any was removed."""
        kept = [n for n in self._items if n.id != notification_id]
        removed = len(kept) != len(self._items)
        if removed:
            self._items = deque(kept, maxlen=self._items.maxlen)
        return removed

    def clear(self) -> None:
        self._items.clear()

    def to_list(self) -> List[Notification]:
        return list(self._items)

    def __iter__(self) -> Iterator[Notification]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)
