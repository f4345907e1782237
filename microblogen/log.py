"""Build logging on top of structlog.

Progress lines are human-readable counts ("Rendered articles 3 / 10"); the
current build stage is carried as a bound context variable so every line
emitted while a stage runs is tagged with it.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import Processor


class _StderrProxy:
    """Writes to whatever ``sys.stderr`` is at call time.

    PrintLoggerFactory keeps the file it was created with, and click's
    CliRunner swaps stderr per invocation.
    """

    def write(self, s: str) -> int:
        return sys.stderr.write(s)

    def flush(self) -> None:
        sys.stderr.flush()

    def isatty(self) -> bool:
        return sys.stderr.isatty()


_stderr_proxy: TextIO = _StderrProxy()  # type: ignore[assignment]


def configure_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Install the process-wide structlog pipeline.

    Args:
        verbose: Emit DEBUG lines (per-request fetch logging).
        json_logs: Render one JSON object per line instead of console output.
    """
    level = logging.DEBUG if verbose else logging.INFO

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
    ]
    if json_logs:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=_stderr_proxy),
        cache_logger_on_first_use=False,
    )


def bind_stage(stage: str) -> None:
    """Tag subsequent log lines from this thread's context with ``stage``."""
    structlog.contextvars.bind_contextvars(stage=stage)


def clear_stage() -> None:
    structlog.contextvars.unbind_contextvars("stage")


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


__all__ = ["bind_stage", "clear_stage", "configure_logging", "get_logger"]
