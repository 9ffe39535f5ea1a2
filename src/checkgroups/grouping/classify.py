from __future__ import annotations

from collections.abc import Iterable

from checkgroups.matching import UNGROUPED, resolve_category
from checkgroups.registry import RuleRegistry

from .records import Record, read_field

ClassificationResult = dict[str, list[Record]]


def classify(
    records: Iterable[Record],
    registry: RuleRegistry,
    code_field: str = "code",
) -> ClassificationResult:
    """Bucket records by resolved category.

    Buckets are emitted in registry order of the top-level groups, followed by
    any category only reachable through an unknown parent id (first-seen
    order) and finally ``ungrouped``. Empty buckets are omitted; with an empty
    registry every record is ``ungrouped``.
    """
    buckets: dict[str, list[Record]] = {}
    for record in records:
        category_id = resolve_category(read_field(record, code_field), registry)
        buckets.setdefault(category_id, []).append(record)

    return order_buckets(buckets, registry)


def order_buckets(
    buckets: dict[str, list[Record]],
    registry: RuleRegistry,
) -> ClassificationResult:
    ordered: ClassificationResult = {}
    for category_id in registry.top_level_ids():
        if category_id == UNGROUPED:
            continue
        members = buckets.get(category_id)
        if members:
            ordered[category_id] = members

    for category_id, members in buckets.items():
        if category_id == UNGROUPED or category_id in ordered:
            continue
        if members:
            ordered[category_id] = members

    ungrouped = buckets.get(UNGROUPED)
    if ungrouped:
        ordered[UNGROUPED] = ungrouped
    return ordered
