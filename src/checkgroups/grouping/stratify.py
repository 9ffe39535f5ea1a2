from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Final

from checkgroups.matching import UNGROUPED, resolve_category
from checkgroups.registry import RuleRegistry

from .records import Record, read_field

MISC_ISSUES_NAME: Final[str] = "Misc Issues"


class TypeBucket(StrEnum):
    ERRORS = "errors"
    WARNINGS = "warnings"
    OTHER = "other"


_BUCKET_ORDER: Final[tuple[TypeBucket, ...]] = (
    TypeBucket.ERRORS,
    TypeBucket.WARNINGS,
    TypeBucket.OTHER,
)

_BUCKET_BY_TYPE: Final[dict[str, TypeBucket]] = {
    "error": TypeBucket.ERRORS,
    "warning": TypeBucket.WARNINGS,
}


def bucket_for_type(raw_type: str) -> TypeBucket:
    return _BUCKET_BY_TYPE.get(raw_type.lower(), TypeBucket.OTHER)


@dataclass(frozen=True, slots=True)
class TypeCategory:
    category_id: str
    name: str
    types: Mapping[TypeBucket, tuple[Record, ...]]

    def __post_init__(self) -> None:
        ordered = {
            bucket: tuple(self.types[bucket]) for bucket in _BUCKET_ORDER if self.types.get(bucket)
        }
        object.__setattr__(self, "types", MappingProxyType(ordered))

    @property
    def size(self) -> int:
        return sum(len(members) for members in self.types.values())

    def as_payload(self) -> dict[str, object]:
        return {
            "name": self.name,
            "types": {bucket.value: list(members) for bucket, members in self.types.items()},
        }


@dataclass(frozen=True, slots=True)
class TypeGrouping:
    categories: tuple[TypeCategory, ...] = ()

    def __len__(self) -> int:
        return len(self.categories)

    def names(self) -> tuple[str, ...]:
        return tuple(category.name for category in self.categories)

    def as_payload(self) -> dict[str, object]:
        return {"categories": [category.as_payload() for category in self.categories]}


def group_by_type(
    records: Iterable[Record],
    registry: RuleRegistry,
    code_field: str = "code",
    type_field: str = "type",
) -> TypeGrouping:
    """Bucket records by category, then split each category by record type.

    Types are compared case-insensitively: ``error`` and ``warning`` get their
    own buckets and everything else (including a missing type) lands in
    ``other``. Categories come out in registry order with ungrouped records
    last under ``Misc Issues``; categories without members are dropped.
    """
    titles: dict[str, str] = {}
    for category_id in registry.top_level_ids():
        node = registry.get(category_id)
        titles[category_id] = node.title if node is not None else category_id

    members: dict[str, dict[TypeBucket, list[Record]]] = {
        category_id: {bucket: [] for bucket in _BUCKET_ORDER} for category_id in titles
    }
    members.setdefault(UNGROUPED, {bucket: [] for bucket in _BUCKET_ORDER})

    for record in records:
        category_id = resolve_category(read_field(record, code_field), registry)
        bucket = bucket_for_type(read_field(record, type_field))
        category = members.setdefault(category_id, {bucket: [] for bucket in _BUCKET_ORDER})
        category[bucket].append(record)

    categories: list[TypeCategory] = []
    for category_id, buckets in members.items():
        if category_id == UNGROUPED:
            continue
        _append_category(
            categories,
            category_id=category_id,
            name=titles.get(category_id, category_id),
            buckets=buckets,
        )
    _append_category(
        categories,
        category_id=UNGROUPED,
        name=MISC_ISSUES_NAME,
        buckets=members[UNGROUPED],
    )
    return TypeGrouping(categories=tuple(categories))


def _append_category(
    categories: list[TypeCategory],
    *,
    category_id: str,
    name: str,
    buckets: Mapping[TypeBucket, list[Record]],
) -> None:
    if not any(buckets.values()):
        return
    categories.append(
        TypeCategory(
            category_id=category_id,
            name=name,
            types={bucket: tuple(records) for bucket, records in buckets.items()},
        )
    )
