from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Final, Literal

from .models import MatchPolicy, RuleNode, RuleRegistry, Strategy

logger = logging.getLogger(__name__)

RESERVED_SCHEMA_KEY: Final[str] = "$schema"

_STRATEGIES_BY_NAME: Final[dict[str, Strategy]] = {
    Strategy.PREFIX.value: Strategy.PREFIX,
    Strategy.CONTAINS.value: Strategy.CONTAINS,
}


def build_registry(
    raw_config: object,
    *,
    policy: MatchPolicy = MatchPolicy.PARTITIONED,
) -> RuleRegistry:
    """Flatten a two-level group configuration into a :class:`RuleRegistry`.

    Top-level entries are either containers holding a ``children`` mapping or
    direct leaves carrying their own ``type``/``checks``. Children inherit the
    enclosing group as ``parent`` unless they declare a non-empty one. Missing
    or ill-typed fields fall back to empty defaults; this function never raises
    for malformed input.
    """
    if not isinstance(raw_config, Mapping):
        return RuleRegistry.empty(policy)

    nodes: dict[str, RuleNode] = {}
    for group_id, group_data in raw_config.items():
        if group_id == RESERVED_SCHEMA_KEY:
            continue
        if not isinstance(group_id, str) or not isinstance(group_data, Mapping):
            continue

        children = group_data.get("children")
        if isinstance(children, Mapping):
            nodes[group_id] = RuleNode(id=group_id, title=_text(group_data.get("title")))
            for child_id, child_data in children.items():
                if not isinstance(child_id, str) or not isinstance(child_data, Mapping):
                    continue
                nodes[child_id] = _leaf_node(
                    child_id,
                    child_data,
                    parent=_text(child_data.get("parent")) or group_id,
                )
        else:
            nodes[group_id] = _leaf_node(group_id, group_data, parent="")

    prefix_rules = tuple(filter_by_properties(nodes.values(), {"strategy": Strategy.PREFIX}))
    contains_rules = tuple(filter_by_properties(nodes.values(), {"strategy": Strategy.CONTAINS}))
    return RuleRegistry(
        nodes_by_id=nodes,
        policy=policy,
        prefix_rules=prefix_rules,
        contains_rules=contains_rules,
    )


def filter_by_properties(
    nodes: Iterable[RuleNode],
    criteria: Mapping[str, object],
    operator: Literal["AND", "OR"] = "AND",
) -> list[RuleNode]:
    """Return the nodes whose attributes match ``criteria``.

    With ``AND`` every criterion must hold; with ``OR`` any one is enough. An
    empty criteria mapping keeps every node. Unknown attribute names never match.
    """
    pool = list(nodes)
    if not criteria:
        return pool

    matched: list[RuleNode] = []
    for node in pool:
        hits = [
            hasattr(node, name) and getattr(node, name) == expected
            for name, expected in criteria.items()
        ]
        if (operator == "AND" and all(hits)) or (operator == "OR" and any(hits)):
            matched.append(node)
    return matched


def find_dangling_parents(registry: RuleRegistry) -> tuple[str, ...]:
    """Parent ids referenced by leaves that are not top-level registry entries."""
    top_level = set(registry.top_level_ids())
    dangling: dict[str, None] = {}
    for node in registry.nodes():
        if node.parent and node.parent not in top_level:
            dangling[node.parent] = None
    if dangling:
        logger.debug("registry references unknown parent ids: %s", ", ".join(dangling))
    return tuple(dangling)


def _leaf_node(node_id: str, data: Mapping[object, object], *, parent: str) -> RuleNode:
    return RuleNode(
        id=node_id,
        title=_text(data.get("title")),
        strategy=_strategy(data.get("type")),
        parent=parent,
        checks=_checks(data.get("checks")),
    )


def _strategy(value: object) -> Strategy:
    if isinstance(value, str):
        return _STRATEGIES_BY_NAME.get(value, Strategy.NONE)
    return Strategy.NONE


def _checks(value: object) -> tuple[str, ...]:
    if not isinstance(value, list | tuple):
        return ()
    return tuple(item for item in value if isinstance(item, str))


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""
