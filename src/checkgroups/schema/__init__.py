from .models import SchemaViolation, ValidationOutcome, format_violations
from .validate import (
    DEFAULT_SCHEMA_PATH,
    load_schema,
    require_valid,
    validate,
    validate_document_file,
    validate_json_string,
)

__all__ = [
    "DEFAULT_SCHEMA_PATH",
    "SchemaViolation",
    "ValidationOutcome",
    "format_violations",
    "load_schema",
    "require_valid",
    "validate",
    "validate_document_file",
    "validate_json_string",
]
