"""Shared state touched by concurrent render tasks.

Both objects are created once per build and handed to the tasks that need
them. Counters only feed progress log lines; the empty-category set is the
one piece of shared state that affects output.
"""

from __future__ import annotations

import threading


class BuildProgress:
    """Monotonic render counters for one build run."""

    def __init__(self) -> None:
        # Lock to protect counters from concurrent render tasks
        self._lock = threading.Lock()
        self._articles = 0
        self._categories = 0
        self._singles = 0

    def article_rendered(self) -> int:
        with self._lock:
            self._articles += 1
            return self._articles

    def category_done(self) -> int:
        """Count a finished category task, rendered or skipped."""
        with self._lock:
            self._categories += 1
            return self._categories

    def single_rendered(self) -> int:
        with self._lock:
            self._singles += 1
            return self._singles

    @property
    def articles(self) -> int:
        with self._lock:
            return self._articles

    @property
    def categories(self) -> int:
        with self._lock:
            return self._categories

    @property
    def singles(self) -> int:
        with self._lock:
            return self._singles


class EmptyCategories:
    """Ids of categories found to have no articles; append-only while categories render."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids: set[str] = set()

    def add(self, category_id: str) -> None:
        with self._lock:
            self._ids.add(category_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def snapshot(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._ids)


__all__ = ["BuildProgress", "EmptyCategories"]
