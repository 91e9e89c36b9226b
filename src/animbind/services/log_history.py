"""
Log history service.

Keeps a bounded, in-memory record of every entry emitted by the Logger so that
hosts can inspect what the binding layer did (filter by expected/error,
search, export) without scraping stdout. Subscribers are notified
synchronously for each new entry.
"""

import json
from collections import deque
from typing import Callable, List, Optional

from animbind.api.schemas.logger import LogMessage


class LogHistory:
    """
    Bounded log history buffer.

    Example:
        history = LogHistory(max_entries=100)
        get_logger().set_history(history)

        errors = history.get_by_type(expected=False)
        hits = history.search("settings/theme")
    """

    def __init__(self, max_entries: int = 100) -> None:
        """
        Args:
            max_entries: Number of entries kept before the oldest is evicted
        """
        self.max_entries = max_entries
        self.entries: deque = deque(maxlen=max_entries)
        self._subscribers: List[Callable[[LogMessage], None]] = []

    def log(
        self,
        timestamp: str,
        level: str,
        category: str,
        message: str
    ) -> None:
        """
        Record a log entry and notify subscribers.

        Args:
            timestamp: ISO 8601 timestamp
            level: Log level (DEBUG, INFO, WARN, ERROR)
            category: Log category
            message: Log message text
        """
        entry = LogMessage(
            timestamp=timestamp,
            level=level,
            category=category,
            message=message
        )
        self.entries.append(entry)

        for subscriber in list(self._subscribers):
            try:
                subscriber(entry)
            except Exception:
                # Logging from here would recurse back into this buffer
                continue

    def subscribe(self, callback: Callable[[LogMessage], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[LogMessage], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def get_recent(self, limit: int = 100) -> List[LogMessage]:
        """
        Get the most recent entries (oldest to newest).

        Args:
            limit: Maximum number of entries to return
        """
        if limit <= 0:
            return []
        return list(self.entries)[-limit:]

    def get_by_type(self, expected: bool) -> List[LogMessage]:
        """Entries that are expected (DEBUG/INFO) or not (WARN/ERROR)"""
        return [e for e in self.entries if e.is_expected == expected]

    def search(self, query: str) -> List[LogMessage]:
        """Case-insensitive substring search over messages"""
        needle = query.lower()
        return [e for e in self.entries if needle in e.message.lower()]

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def error_count(self) -> int:
        return len(self.get_by_type(expected=False))

    @property
    def info_count(self) -> int:
        return len(self.get_by_type(expected=True))

    def export_as_string(self) -> str:
        return "\n".join(e.message for e in self.entries)

    def export_as_json(self) -> str:
        return json.dumps([e.model_dump() for e in self.entries])

    def clear(self) -> None:
        self.entries.clear()


# Global instance, attached to the logger by the container builder
_history: Optional[LogHistory] = None


def get_log_history() -> LogHistory:
    """
    Get or create the global LogHistory instance.
    """
    global _history
    if _history is None:
        _history = LogHistory()
    return _history


def set_log_history(history: LogHistory) -> None:
    """
    Replace the global LogHistory instance.

    Args:
        history: The LogHistory instance to set globally
    """
    global _history
    _history = history
