from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from checkgroups.documents import DocumentErrorCode, build_document_error, read_mapping_file
from checkgroups.registry import MatchPolicy
from checkgroups.schema import DEFAULT_SCHEMA_PATH

SETTINGS_SECTION: Final[str] = "classifier"

_ENV_OVERRIDES: Final[dict[str, str]] = {
    "CHECKGROUPS_CODE_FIELD": "code_field",
    "CHECKGROUPS_TYPE_FIELD": "type_field",
    "CHECKGROUPS_MATCH_POLICY": "match_policy",
    "CHECKGROUPS_SCHEMA_PATH": "schema_path",
}


class ClassifierSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    code_field: str = Field(default="code", min_length=1)
    type_field: str = Field(default="type", min_length=1)
    match_policy: MatchPolicy = MatchPolicy.PARTITIONED
    schema_path: Path | None = DEFAULT_SCHEMA_PATH


def load_settings(
    path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ClassifierSettings:
    """Build settings from an optional file section plus environment overrides.

    The file may be JSON or YAML; only its ``classifier`` section is read.
    Environment variables win over the file.
    """
    values: dict[str, object] = {}
    if path is not None:
        section = read_mapping_file(path).get(SETTINGS_SECTION, {})
        if not isinstance(section, dict):
            raise build_document_error(
                DocumentErrorCode.CONFIG_INVALID,
                f"settings section '{SETTINGS_SECTION}' must be a mapping",
                file_path=path.as_posix(),
            )
        values.update(section)

    env = os.environ if environ is None else environ
    for env_name, field_name in _ENV_OVERRIDES.items():
        raw = env.get(env_name)
        if raw:
            values[field_name] = raw.strip()

    try:
        return ClassifierSettings.model_validate(values)
    except ValidationError as exc:
        raise build_document_error(
            DocumentErrorCode.CONFIG_INVALID,
            f"invalid classifier settings: {exc.error_count()} error(s)",
            errors=[
                {"property": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
                for error in exc.errors()
            ],
        ) from exc
