"""Snapshot JSON encoding using orjson.

Snapshots must be byte-for-byte stable across runs with identical remote
data: keys keep model field order, datetimes are RFC 3339, and no
whitespace is emitted.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import Any

import orjson
from pydantic import BaseModel


def wire_dict(model: BaseModel) -> dict[str, Any]:
    """Wire representation of a model: camelCase keys, JSON-safe values."""
    to_wire = getattr(model, "to_wire", None)
    if callable(to_wire):
        return to_wire()
    return model.model_dump(mode="json", by_alias=True)


def _default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return wire_dict(obj)
    if isinstance(obj, Decimal):
        return float(obj)
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serializable")


def dumps_bytes(obj: Any, *, default: Callable[[Any], Any] | None = None) -> bytes:
    """Encode ``obj`` to compact UTF-8 JSON bytes."""
    return orjson.dumps(obj, default=default or _default)


def dumps(obj: Any) -> str:
    return dumps_bytes(obj).decode("utf-8")


def loads(obj: str | bytes) -> Any:
    return orjson.loads(obj)


def models_to_json(models: Sequence[BaseModel]) -> bytes:
    """Encode a list of models as a JSON array of their wire dicts."""
    return dumps_bytes([wire_dict(m) for m in models])


__all__ = ["dumps", "dumps_bytes", "loads", "models_to_json", "wire_dict"]
