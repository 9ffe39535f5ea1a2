from .matcher import UNGROUPED, match_rule, resolve_category

__all__ = [
    "UNGROUPED",
    "match_rule",
    "resolve_category",
]
