from __future__ import annotations

from collections.abc import Mapping
from typing import TypeAlias

Record: TypeAlias = Mapping[str, object]


def read_field(record: object, field: str) -> str:
    """Read a string field from a record; anything else reads as ``""``."""
    if not isinstance(record, Mapping):
        return ""
    value = record.get(field)
    if isinstance(value, str):
        return value
    return ""
