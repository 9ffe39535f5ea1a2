from .classify import ClassificationResult, classify, order_buckets
from .records import Record, read_field
from .stratify import (
    MISC_ISSUES_NAME,
    TypeBucket,
    TypeCategory,
    TypeGrouping,
    bucket_for_type,
    group_by_type,
)

__all__ = [
    "ClassificationResult",
    "MISC_ISSUES_NAME",
    "Record",
    "TypeBucket",
    "TypeCategory",
    "TypeGrouping",
    "bucket_for_type",
    "classify",
    "group_by_type",
    "order_buckets",
    "read_field",
]
