from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType


class Strategy(StrEnum):
    PREFIX = "prefix"
    CONTAINS = "contains"
    NONE = "none"


class MatchPolicy(StrEnum):
    PARTITIONED = "partitioned"
    MIXED = "mixed"


@dataclass(frozen=True, slots=True)
class RuleNode:
    id: str
    title: str = ""
    strategy: Strategy = Strategy.NONE
    parent: str = ""
    checks: tuple[str, ...] = ()

    @property
    def is_leaf(self) -> bool:
        return bool(self.parent)

    @property
    def is_top_level(self) -> bool:
        return not self.parent

    @property
    def is_container(self) -> bool:
        return not self.parent and self.strategy is Strategy.NONE

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.strategy.value,
            "parent": self.parent,
            "checks": list(self.checks),
        }


@dataclass(frozen=True, slots=True)
class RuleRegistry:
    """Flattened, read-only view of a group configuration.

    Iteration yields node ids in registry order: each top-level group followed
    by its children in declared order.
    """

    nodes_by_id: Mapping[str, RuleNode] = field(default_factory=lambda: MappingProxyType({}))
    policy: MatchPolicy = MatchPolicy.PARTITIONED
    prefix_rules: tuple[RuleNode, ...] = ()
    contains_rules: tuple[RuleNode, ...] = ()

    def __post_init__(self) -> None:
        for key, node in self.nodes_by_id.items():
            if key != node.id:
                raise ValueError(f"registry key '{key}' does not match node id '{node.id}'")
        if not isinstance(self.nodes_by_id, MappingProxyType):
            object.__setattr__(self, "nodes_by_id", MappingProxyType(dict(self.nodes_by_id)))

    @classmethod
    def empty(cls, policy: MatchPolicy = MatchPolicy.PARTITIONED) -> RuleRegistry:
        return cls(policy=policy)

    def __len__(self) -> int:
        return len(self.nodes_by_id)

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes_by_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes_by_id

    @property
    def is_empty(self) -> bool:
        return not self.nodes_by_id

    def get(self, node_id: str) -> RuleNode | None:
        return self.nodes_by_id.get(node_id)

    def nodes(self) -> tuple[RuleNode, ...]:
        return tuple(self.nodes_by_id.values())

    def top_level_ids(self) -> tuple[str, ...]:
        return tuple(node.id for node in self.nodes_by_id.values() if node.is_top_level)
