"""
Row decoder: column-name keyed rows to typed records.

Rows arrive as mappings (psycopg `dict_row`). Decoding is strict about shape:
a missing required column, an unknown column, or a value that cannot be
coerced to the field type raises DecodeError.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from tripbench.errors import DecodeError

Row = Mapping[str, Any]
R = TypeVar("R", bound=BaseModel)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(item) for item in err["loc"]) or "<row>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def decode_row(row: Row, record_type: Type[R]) -> R:
    """Decode a single row into `record_type`."""
    if not isinstance(row, Mapping):
        raise DecodeError(record_type.__name__, f"expected a column mapping, got {type(row).__name__}")
    try:
        return record_type.model_validate(dict(row))
    except ValidationError as exc:
        raise DecodeError(record_type.__name__, _describe(exc)) from exc


def decode_rows(rows: Iterable[Row], record_type: Type[R]) -> List[R]:
    """Decode rows in input order, one record per row."""
    return [decode_row(row, record_type) for row in rows]


__all__ = ["Row", "decode_row", "decode_rows"]
