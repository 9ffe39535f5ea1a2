from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Final, cast

from checkgroups.config import (
    ClassifierSettings,
    ConfigLoadFailure,
    load_group_config,
    registry_or_empty,
)
from checkgroups.documents import DocumentErrorDetail
from checkgroups.grouping import ClassificationResult, Record, TypeGrouping, classify, group_by_type
from checkgroups.registry import RuleRegistry
from checkgroups.schema import DEFAULT_SCHEMA_PATH, ValidationOutcome, validate_json_string

logger = logging.getLogger(__name__)

_SCHEMA_UNSET: Final[object] = object()


class Classifier:
    """Classify diagnostic records against a loaded group configuration.

    A configuration that cannot be read, decoded or validated leaves the
    classifier with an empty registry: :meth:`classify` then returns ``{}`` and
    :attr:`load_failure` describes what went wrong.
    """

    def __init__(
        self,
        registry: RuleRegistry,
        settings: ClassifierSettings | None = None,
        *,
        load_failure: DocumentErrorDetail | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings or ClassifierSettings(match_policy=registry.policy)
        self._load_failure = load_failure

    @classmethod
    def from_file(
        cls,
        config_path: Path | str,
        schema_path: object = _SCHEMA_UNSET,
        *,
        settings: ClassifierSettings | None = None,
    ) -> Classifier:
        resolved = settings or ClassifierSettings()
        resolved_schema = (
            resolved.schema_path
            if schema_path is _SCHEMA_UNSET
            else cast(Path | str | None, schema_path)
        )
        result = load_group_config(
            config_path,
            resolved_schema,
            policy=resolved.match_policy,
        )
        failure: DocumentErrorDetail | None = None
        if isinstance(result, ConfigLoadFailure):
            logger.warning(
                "group configuration %s not loaded (%s); classification falls back to empty",
                result.source,
                result.detail.code,
            )
            failure = result.detail
        return cls(registry_or_empty(result), resolved, load_failure=failure)

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    @property
    def settings(self) -> ClassifierSettings:
        return self._settings

    @property
    def load_failure(self) -> DocumentErrorDetail | None:
        return self._load_failure

    def group_config(self) -> dict[str, dict[str, object]]:
        return {node.id: node.as_dict() for node in self._registry.nodes()}

    def classify(
        self,
        records: Iterable[Record],
        code_field: str | None = None,
    ) -> ClassificationResult:
        if self._registry.is_empty:
            return {}
        return classify(records, self._registry, code_field or self._settings.code_field)

    def group_by_type(
        self,
        records: Iterable[Record],
        code_field: str | None = None,
        type_field: str | None = None,
    ) -> TypeGrouping:
        return group_by_type(
            records,
            self._registry,
            code_field or self._settings.code_field,
            type_field or self._settings.type_field,
        )

    @staticmethod
    def validate_json(
        json_string: str,
        schema_path: Path | str = DEFAULT_SCHEMA_PATH,
    ) -> ValidationOutcome:
        return validate_json_string(json_string, Path(schema_path))
