"""Fan-out/barrier helper shared by every concurrent render stage."""

from __future__ import annotations

import concurrent.futures
import contextvars
from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def fan_out(fn: Callable[[T], R], items: Iterable[T], *, max_workers: int) -> list[R]:
    """Run ``fn`` over ``items`` on a bounded thread pool and wait for all of them.

    Each task runs in a copy of the caller's context, so structlog context
    variables bound by the caller (the build stage) show up in task log
    lines.

    Results come back in input order. When a task fails, tasks that have not
    started are cancelled and the first failure in input order is re-raised
    once the running tasks have finished.
    """
    items = list(items)
    if not items:
        return []

    with concurrent.futures.ThreadPoolExecutor(
        max_workers=min(max_workers, len(items)),
        thread_name_prefix="microblogen",
    ) as executor:
        futures = [executor.submit(contextvars.copy_context().run, fn, item) for item in items]
        _, pending = concurrent.futures.wait(
            futures, return_when=concurrent.futures.FIRST_EXCEPTION
        )
        for fut in pending:
            fut.cancel()

    for fut in futures:
        if fut.cancelled():
            continue
        exc = fut.exception()
        if exc is not None:
            raise exc
    return [fut.result() for fut in futures]


__all__ = ["fan_out"]
