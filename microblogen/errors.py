"""Microblogen error hierarchy.

All project exceptions inherit from MicroblogenError, enabling:
- ``except MicroblogenError`` at the CLI boundary
- Fine-grained catches deeper in the stack (``except FetchError``)

Every error is fatal to a build run; nothing in the pipeline recovers locally.

Hierarchy:
    MicroblogenError
    ├── ConfigError          # config.py
    ├── FetchError           # source.py
    ├── TemplateError        # templating.py
    └── OutputError          # paths.py, snapshot.py
"""

from __future__ import annotations


class MicroblogenError(Exception):
    """Base class for all microblogen errors."""


class ConfigError(MicroblogenError):
    """Invalid or missing configuration (page size, timezone, credentials)."""


class FetchError(MicroblogenError):
    """The content source was unreachable or returned an unusable response."""

    def __init__(self, message: str, *, endpoint: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status


class TemplateError(MicroblogenError):
    """A template failed to parse or to execute against its data."""

    def __init__(self, message: str, *, template: str | None = None) -> None:
        super().__init__(message)
        self.template = template


class OutputError(MicroblogenError):
    """A filesystem operation on the export tree failed."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


__all__ = ["MicroblogenError", "ConfigError", "FetchError", "TemplateError", "OutputError"]
