from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Final, Protocol

from checkgroups.documents import (
    DocumentErrorCode,
    build_document_error,
    decode_structured_text,
    read_mapping_file,
    read_structured_file,
)

from .models import SchemaViolation, ValidationOutcome, format_violations

DEFAULT_SCHEMA_PATH: Final[Path] = Path(__file__).with_name("groups-schema.json")

_VALID_SCHEMA_TYPES: Final[set[str]] = {
    "object",
    "array",
    "string",
    "number",
    "integer",
    "boolean",
    "null",
}


class _ValidatorFn(Protocol):
    def __call__(
        self,
        *,
        instance: object,
        schema: Mapping[str, object],
        path: str,
        errors: list[SchemaViolation],
    ) -> None: ...


def load_schema(path: Path = DEFAULT_SCHEMA_PATH) -> dict[str, object]:
    return read_mapping_file(path)


def validate(document: object, schema: Mapping[str, object]) -> ValidationOutcome:
    """Validate a decoded document against a JSON-schema subset.

    Supported keywords: ``type`` (string or list), ``const``, ``enum``,
    ``required``, ``properties``, ``patternProperties``,
    ``additionalProperties``, ``items``, ``minItems``, ``maxItems``,
    ``uniqueItems`` and ``minLength``. Violations are reported in document
    order with a dotted property path; the root path is ``""``.
    """
    errors: list[SchemaViolation] = []
    _validate_value(instance=document, schema=schema, path="", errors=errors)
    return ValidationOutcome.from_violations(errors)


def validate_json_string(
    json_string: str,
    schema_path: Path = DEFAULT_SCHEMA_PATH,
) -> ValidationOutcome:
    document = decode_structured_text(json_string, source="<string>", json_only=True)
    return validate(document, load_schema(schema_path))


def validate_document_file(
    path: Path,
    schema_path: Path = DEFAULT_SCHEMA_PATH,
) -> ValidationOutcome:
    return validate(read_structured_file(path), load_schema(schema_path))


def require_valid(document: object, schema: Mapping[str, object], *, context: str) -> None:
    outcome = validate(document, schema)
    if outcome.valid:
        return
    raise build_document_error(
        DocumentErrorCode.VALIDATION_FAILED,
        f"Validation failed: {format_violations(outcome.errors)}",
        context=context,
        errors=[violation.model_dump() for violation in outcome.errors],
    )


def _child_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _violation(errors: list[SchemaViolation], path: str, message: str) -> None:
    errors.append(SchemaViolation(property=path, message=message))


def _validate_value(
    *,
    instance: object,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> None:
    if "const" in schema and instance != schema["const"]:
        _violation(errors, path, f"Does not have a value equal to {schema['const']!r}")
        return

    enum_values = schema.get("enum")
    if enum_values is not None:
        if not isinstance(enum_values, list) or not enum_values:
            _violation(errors, path, "Schema enum must be a non-empty list")
            return
        if instance not in enum_values:
            allowed = ", ".join(repr(value) for value in enum_values)
            _violation(errors, path, f"Does not have a value in the enumeration [{allowed}]")
            return

    schema_types = _coerce_schema_types(schema=schema, path=path, errors=errors)
    if schema_types is None:
        return
    if not schema_types:
        _validate_untyped(instance=instance, schema=schema, path=path, errors=errors)
        return
    matching_type = _pick_matching_type(instance=instance, allowed_types=schema_types)
    if matching_type is None:
        expected = " or ".join(schema_types)
        _violation(
            errors, path, f"{_json_type_name(instance)} value found, but {expected} is required"
        )
        return

    _TYPE_VALIDATORS[matching_type](instance=instance, schema=schema, path=path, errors=errors)


def _validate_untyped(
    *,
    instance: object,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> None:
    for schema_type, validator in _TYPE_VALIDATORS.items():
        if _matches_type(instance=instance, schema_type=schema_type):
            validator(instance=instance, schema=schema, path=path, errors=errors)
            return


def _coerce_schema_types(
    *,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> tuple[str, ...] | None:
    schema_type_raw = schema.get("type")
    if schema_type_raw is None:
        return ()
    if isinstance(schema_type_raw, str):
        if schema_type_raw not in _VALID_SCHEMA_TYPES:
            _violation(errors, path, f"Unsupported schema type {schema_type_raw!r}")
            return None
        return (schema_type_raw,)
    if isinstance(schema_type_raw, list) and schema_type_raw:
        collected: list[str] = []
        for item in schema_type_raw:
            if not isinstance(item, str) or item not in _VALID_SCHEMA_TYPES:
                _violation(errors, path, f"Unsupported schema type {item!r}")
                return None
            collected.append(item)
        return tuple(dict.fromkeys(collected))
    _violation(errors, path, "Schema type must be a string or non-empty list of strings")
    return None


def _pick_matching_type(*, instance: object, allowed_types: tuple[str, ...]) -> str | None:
    for schema_type in allowed_types:
        if _matches_type(instance=instance, schema_type=schema_type):
            return schema_type
    return None


def _matches_type(*, instance: object, schema_type: str) -> bool:
    matchers: dict[str, Callable[[object], bool]] = {
        "object": lambda value: isinstance(value, dict),
        "array": lambda value: isinstance(value, list),
        "string": lambda value: isinstance(value, str),
        "number": _is_json_number,
        "integer": _is_json_integer,
        "boolean": lambda value: isinstance(value, bool),
        "null": lambda value: value is None,
    }
    matcher = matchers.get(schema_type)
    return bool(matcher(instance)) if matcher is not None else False


def _json_type_name(instance: object) -> str:
    for schema_type in ("null", "boolean", "integer", "number", "string", "array", "object"):
        if _matches_type(instance=instance, schema_type=schema_type):
            return schema_type.capitalize()
    return type(instance).__name__


def _validate_object(
    *,
    instance: object,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> None:
    if not isinstance(instance, dict):
        _violation(errors, path, "Object value expected")
        return

    required = schema.get("required", [])
    if not isinstance(required, list):
        _violation(errors, path, "Schema required must be a list")
        return
    for required_key in required:
        if isinstance(required_key, str) and required_key not in instance:
            _violation(errors, _child_path(path, required_key), "The property is required")

    properties_raw = schema.get("properties", {})
    if not isinstance(properties_raw, dict):
        _violation(errors, path, "Schema properties must be a mapping")
        return
    properties = {
        key: value
        for key, value in properties_raw.items()
        if isinstance(key, str) and isinstance(value, dict)
    }
    patterns = _compile_pattern_properties(schema=schema, path=path, errors=errors)
    if patterns is None:
        return

    additional = schema.get("additionalProperties", True)
    if not isinstance(additional, bool | dict):
        _violation(errors, path, "Schema additionalProperties must be bool or object")
        return

    for key, value in instance.items():
        if not isinstance(key, str):
            _violation(errors, path, "Object keys must be strings")
            continue
        child_path = _child_path(path, key)
        matched = False
        prop_schema = properties.get(key)
        if prop_schema is not None:
            matched = True
            _validate_value(instance=value, schema=prop_schema, path=child_path, errors=errors)
        for pattern, pattern_schema in patterns:
            if pattern.search(key):
                matched = True
                _validate_value(
                    instance=value,
                    schema=pattern_schema,
                    path=child_path,
                    errors=errors,
                )
        if matched:
            continue
        if additional is False:
            _violation(
                errors,
                path,
                f"The property {key} is not defined and the definition does not allow "
                "additional properties",
            )
            continue
        if isinstance(additional, dict):
            _validate_value(instance=value, schema=additional, path=child_path, errors=errors)


def _compile_pattern_properties(
    *,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> list[tuple[re.Pattern[str], Mapping[str, object]]] | None:
    raw = schema.get("patternProperties", {})
    if not isinstance(raw, dict):
        _violation(errors, path, "Schema patternProperties must be a mapping")
        return None
    compiled: list[tuple[re.Pattern[str], Mapping[str, object]]] = []
    for pattern_text, pattern_schema in raw.items():
        if not isinstance(pattern_text, str) or not isinstance(pattern_schema, dict):
            continue
        try:
            compiled.append((re.compile(pattern_text), pattern_schema))
        except re.error:
            _violation(
                errors, path, f"Schema patternProperties has an invalid pattern {pattern_text!r}"
            )
            return None
    return compiled


def _validate_array(
    *,
    instance: object,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> None:
    if not isinstance(instance, list):
        _violation(errors, path, "Array value expected")
        return

    min_items = schema.get("minItems")
    if min_items is not None:
        if not _is_json_integer(min_items):
            _violation(errors, path, "Schema minItems must be an integer")
        elif len(instance) < min_items:
            _violation(errors, path, f"There must be a minimum of {min_items} items in the array")

    max_items = schema.get("maxItems")
    if max_items is not None:
        if not _is_json_integer(max_items):
            _violation(errors, path, "Schema maxItems must be an integer")
        elif len(instance) > max_items:
            _violation(errors, path, f"There must be a maximum of {max_items} items in the array")

    if schema.get("uniqueItems") is True:
        seen: list[object] = []
        for value in instance:
            if value in seen:
                _violation(errors, path, "There are no duplicates allowed in the array")
                break
            seen.append(value)

    items_schema = schema.get("items")
    if items_schema is None:
        return
    if not isinstance(items_schema, dict):
        _violation(errors, path, "Schema items must be an object")
        return
    for index, value in enumerate(instance):
        _validate_value(
            instance=value,
            schema=items_schema,
            path=f"{path}[{index}]",
            errors=errors,
        )


def _validate_string(
    *,
    instance: object,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> None:
    if not isinstance(instance, str):
        _violation(errors, path, "String value expected")
        return
    min_length = schema.get("minLength")
    if _is_json_integer(min_length) and len(instance) < min_length:
        _violation(errors, path, f"Must be at least {min_length} characters long")


def _validate_number(
    *,
    instance: object,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> None:
    del schema
    if not _is_json_number(instance):
        _violation(errors, path, "Number value expected")


def _validate_integer(
    *,
    instance: object,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> None:
    del schema
    if not _is_json_integer(instance):
        _violation(errors, path, "Integer value expected")


def _validate_boolean(
    *,
    instance: object,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> None:
    del schema
    if not isinstance(instance, bool):
        _violation(errors, path, "Boolean value expected")


def _validate_null(
    *,
    instance: object,
    schema: Mapping[str, object],
    path: str,
    errors: list[SchemaViolation],
) -> None:
    del schema
    if instance is not None:
        _violation(errors, path, "Null value expected")


def _is_json_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_json_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


_TYPE_VALIDATORS: Final[dict[str, _ValidatorFn]] = {
    "object": _validate_object,
    "array": _validate_array,
    "string": _validate_string,
    "number": _validate_number,
    "integer": _validate_integer,
    "boolean": _validate_boolean,
    "null": _validate_null,
}
