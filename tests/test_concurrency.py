"""Tests for the fan-out helper and the shared progress state."""

from __future__ import annotations

import threading
import time

import pytest
import structlog

from microblogen.concurrency import fan_out
from microblogen.progress import BuildProgress, EmptyCategories


class TestFanOut:
    def test_results_in_input_order(self):
        def slow_square(n: int) -> int:
            time.sleep(0.001 * (10 - n))
            return n * n

        assert fan_out(slow_square, range(10), max_workers=4) == [n * n for n in range(10)]

    def test_empty_input(self):
        assert fan_out(lambda x: x, [], max_workers=4) == []

    def test_respects_worker_cap(self):
        active = 0
        peak = 0
        lock = threading.Lock()

        def task(_: int) -> None:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with lock:
                active -= 1

        fan_out(task, range(20), max_workers=3)
        assert peak <= 3

    def test_waits_for_every_task(self):
        finished: list[int] = []
        lock = threading.Lock()

        def task(n: int) -> None:
            time.sleep(0.002)
            with lock:
                finished.append(n)

        fan_out(task, range(25), max_workers=5)
        assert sorted(finished) == list(range(25))

    def test_first_failure_is_raised(self):
        def task(n: int) -> int:
            if n == 3:
                raise ValueError("boom 3")
            return n

        with pytest.raises(ValueError, match="boom 3"):
            fan_out(task, range(8), max_workers=2)

    def test_failure_cancels_queued_tasks(self):
        started: list[int] = []
        lock = threading.Lock()

        def task(n: int) -> None:
            with lock:
                started.append(n)
            if n == 0:
                raise RuntimeError("stop")
            time.sleep(0.01)

        with pytest.raises(RuntimeError):
            fan_out(task, range(50), max_workers=1)
        assert len(started) < 50

    def test_context_variables_reach_tasks(self):
        structlog.contextvars.bind_contextvars(stage="main_pages")
        try:
            seen = fan_out(
                lambda _: structlog.contextvars.get_contextvars().get("stage"),
                range(4),
                max_workers=2,
            )
        finally:
            structlog.contextvars.unbind_contextvars("stage")
        assert seen == ["main_pages"] * 4


class TestBuildProgress:
    def test_counters_start_at_zero(self):
        progress = BuildProgress()
        assert (progress.articles, progress.categories, progress.singles) == (0, 0, 0)

    def test_increment_returns_new_value(self):
        progress = BuildProgress()
        assert progress.article_rendered() == 1
        assert progress.article_rendered() == 2
        assert progress.category_done() == 1
        assert progress.single_rendered() == 1

    def test_concurrent_increments(self):
        progress = BuildProgress()
        values = fan_out(lambda _: progress.article_rendered(), range(500), max_workers=8)

        assert progress.articles == 500
        assert sorted(values) == list(range(1, 501))


class TestEmptyCategories:
    def test_collects_ids_from_threads(self):
        empty = EmptyCategories()
        fan_out(lambda n: empty.add(f"c{n % 10}"), range(100), max_workers=8)

        assert len(empty) == 10
        assert empty.snapshot() == frozenset(f"c{n}" for n in range(10))
