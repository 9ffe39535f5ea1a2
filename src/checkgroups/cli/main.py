from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final, Literal

import typer

from checkgroups.config import ClassifierSettings, load_settings
from checkgroups.documents import DocumentError, read_structured_file
from checkgroups.engine import Classifier
from checkgroups.grouping import ClassificationResult, Record, TypeGrouping
from checkgroups.registry import MatchPolicy
from checkgroups.schema import DEFAULT_SCHEMA_PATH, ValidationOutcome, validate_document_file

app = typer.Typer(help="Group checker diagnostics by configured rule groups")

_EXIT_OK: Final[int] = 0
_EXIT_FAIL: Final[int] = 2
_RECORDS_KEY: Final[str] = "records"
_CLASSIFY_OUTPUT_SCHEMA_VERSION: Final[int] = 1

_FORMAT_OPTION = typer.Option(
    "text",
    "--format",
    help="Output format: text|json",
    show_default=True,
)
_SCHEMA_OPTION = typer.Option(
    None,
    "--schema",
    help="JSON schema for the group configuration (defaults to the bundled schema)",
)
_NO_SCHEMA_OPTION = typer.Option(
    False,
    "--no-schema",
    help="Skip schema validation of the group configuration",
)
_SETTINGS_OPTION = typer.Option(
    None,
    "--settings",
    help="JSON/YAML settings file with a 'classifier' section",
)
_POLICY_OPTION = typer.Option(
    None,
    "--policy",
    help="Matching policy: partitioned|mixed",
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def classify(
    config: Path,
    records: Path,
    schema: Path | None = _SCHEMA_OPTION,
    no_schema: bool = _NO_SCHEMA_OPTION,
    settings_file: Path | None = _SETTINGS_OPTION,
    policy: MatchPolicy | None = _POLICY_OPTION,
    code_field: str | None = typer.Option(None, "--code-field", help="Record field to match"),
    format: Literal["text", "json"] = _FORMAT_OPTION,
) -> None:
    """Bucket records by configured group."""
    classifier, items = _prepare(
        config=config,
        records=records,
        schema=schema,
        no_schema=no_schema,
        settings_file=settings_file,
        policy=policy,
    )
    result = classifier.classify(items, code_field=code_field)
    field_name = code_field or classifier.settings.code_field
    if format == "json":
        typer.echo(_build_classify_json_output(config=config, result=result))
    else:
        _print_classification(result, code_field=field_name)
    raise typer.Exit(code=_EXIT_OK)


@app.command()
def group(
    config: Path,
    records: Path,
    schema: Path | None = _SCHEMA_OPTION,
    no_schema: bool = _NO_SCHEMA_OPTION,
    settings_file: Path | None = _SETTINGS_OPTION,
    policy: MatchPolicy | None = _POLICY_OPTION,
    code_field: str | None = typer.Option(None, "--code-field", help="Record field to match"),
    type_field: str | None = typer.Option(None, "--type-field", help="Record type field"),
    format: Literal["text", "json"] = _FORMAT_OPTION,
) -> None:
    """Bucket records by group, then by error/warning/other."""
    classifier, items = _prepare(
        config=config,
        records=records,
        schema=schema,
        no_schema=no_schema,
        settings_file=settings_file,
        policy=policy,
    )
    grouping = classifier.group_by_type(items, code_field=code_field, type_field=type_field)
    field_name = code_field or classifier.settings.code_field
    if format == "json":
        payload = grouping.as_payload()
        typer.echo(json.dumps(payload, ensure_ascii=True, separators=(",", ":"), default=str))
    else:
        _print_type_grouping(grouping, code_field=field_name)
    raise typer.Exit(code=_EXIT_OK)


@app.command()
def validate(
    document: Path,
    schema: Path | None = _SCHEMA_OPTION,
    format: Literal["text", "json"] = _FORMAT_OPTION,
) -> None:
    """Validate a JSON/YAML document against a schema."""
    try:
        outcome = validate_document_file(document, schema or DEFAULT_SCHEMA_PATH)
    except DocumentError as exc:
        typer.echo(f"error: {exc}")
        raise typer.Exit(code=_EXIT_FAIL) from exc

    if format == "json":
        typer.echo(outcome.model_dump_json())
    else:
        _print_validation(outcome)
    raise typer.Exit(code=_EXIT_OK if outcome.valid else _EXIT_FAIL)


def _prepare(
    *,
    config: Path,
    records: Path,
    schema: Path | None,
    no_schema: bool,
    settings_file: Path | None,
    policy: MatchPolicy | None,
) -> tuple[Classifier, list[Record]]:
    try:
        settings = load_settings(settings_file)
        items = _load_records(records)
    except DocumentError as exc:
        typer.echo(f"error: {exc}")
        raise typer.Exit(code=_EXIT_FAIL) from exc

    settings = _apply_overrides(settings, schema=schema, no_schema=no_schema, policy=policy)
    classifier = Classifier.from_file(config, settings=settings)
    if classifier.load_failure is not None:
        typer.echo(f"warning: {classifier.load_failure.message}", err=True)
    return classifier, items


def _apply_overrides(
    settings: ClassifierSettings,
    *,
    schema: Path | None,
    no_schema: bool,
    policy: MatchPolicy | None,
) -> ClassifierSettings:
    updates: dict[str, object] = {}
    if no_schema:
        updates["schema_path"] = None
    elif schema is not None:
        updates["schema_path"] = schema
    if policy is not None:
        updates["match_policy"] = policy
    if not updates:
        return settings
    return settings.model_copy(update=updates)


def _load_records(path: Path) -> list[Record]:
    payload = read_structured_file(path)
    if isinstance(payload, Mapping):
        payload = payload.get(_RECORDS_KEY, [])
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, Mapping)]


def _build_classify_json_output(*, config: Path, result: ClassificationResult) -> str:
    payload: dict[str, object] = {
        "schema_version": _CLASSIFY_OUTPUT_SCHEMA_VERSION,
        "config": config.as_posix(),
        "groups": [
            {"id": category_id, "count": len(members), "records": list(members)}
            for category_id, members in result.items()
        ],
    }
    return json.dumps(payload, ensure_ascii=True, separators=(",", ":"), default=str)


def _print_classification(result: ClassificationResult, *, code_field: str) -> None:
    for category_id, members in result.items():
        typer.echo(f"GROUP id={category_id} count={len(members)}")
        _print_items(members, code_field=code_field, indent="  ")


def _print_type_grouping(grouping: TypeGrouping, *, code_field: str) -> None:
    for category in grouping.categories:
        typer.echo(f"CATEGORY id={category.category_id} name={category.name}")
        for bucket, members in category.types.items():
            typer.echo(f"  TYPE bucket={bucket} count={len(members)}")
            _print_items(members, code_field=code_field, indent="    ")


def _print_items(members: Sequence[Record], *, code_field: str, indent: str) -> None:
    for item in members:
        message = item.get("message")
        suffix = f" message={message}" if isinstance(message, str) and message else ""
        typer.echo(f"{indent}ITEM code={item.get(code_field, '')}{suffix}")


def _print_validation(outcome: ValidationOutcome) -> None:
    if outcome.valid:
        typer.echo("VALID")
        return
    for violation in outcome.errors:
        typer.echo(f"VIOLATION property={violation.property or '-'} message={violation.message}")


def main() -> None:
    app()
