from .build import RESERVED_SCHEMA_KEY, build_registry, filter_by_properties, find_dangling_parents
from .models import MatchPolicy, RuleNode, RuleRegistry, Strategy

__all__ = [
    "MatchPolicy",
    "RESERVED_SCHEMA_KEY",
    "RuleNode",
    "RuleRegistry",
    "Strategy",
    "build_registry",
    "filter_by_properties",
    "find_dangling_parents",
]
