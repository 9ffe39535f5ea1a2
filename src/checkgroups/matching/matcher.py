from __future__ import annotations

from typing import Final

from checkgroups.registry import MatchPolicy, RuleNode, RuleRegistry

UNGROUPED: Final[str] = "ungrouped"


def match_rule(code: str, registry: RuleRegistry) -> RuleNode | None:
    """Return the rule node that claims ``code``, or ``None``.

    The registry's policy selects the algorithm. ``partitioned`` tries every
    prefix rule's first check before any contains rule; ``mixed`` walks nodes
    in registry order and accepts a check found anywhere in the code.
    """
    if registry.policy is MatchPolicy.MIXED:
        return _match_mixed(code, registry)
    return _match_partitioned(code, registry)


def resolve_category(code: str, registry: RuleRegistry) -> str:
    node = match_rule(code, registry)
    if node is None:
        return UNGROUPED
    if node.parent:
        return node.parent
    return node.id


def _match_partitioned(code: str, registry: RuleRegistry) -> RuleNode | None:
    for node in registry.prefix_rules:
        if node.checks and code.startswith(node.checks[0]):
            return node
    for node in registry.contains_rules:
        for check in node.checks:
            if check in code:
                return node
    return None


def _match_mixed(code: str, registry: RuleRegistry) -> RuleNode | None:
    for node in registry.nodes():
        for check in node.checks:
            if check in code:
                return node
    return None
