from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from checkgroups.documents import DocumentError, DocumentErrorDetail, read_mapping_file
from checkgroups.registry import MatchPolicy, RuleRegistry, build_registry, find_dangling_parents
from checkgroups.schema import DEFAULT_SCHEMA_PATH, load_schema, require_valid

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConfigLoadSuccess:
    registry: RuleRegistry
    source: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class ConfigLoadFailure:
    detail: DocumentErrorDetail
    source: str

    @property
    def ok(self) -> bool:
        return False

    @property
    def reason(self) -> str:
        return self.detail.message


ConfigLoadResult: TypeAlias = ConfigLoadSuccess | ConfigLoadFailure


def load_group_config(
    config_path: Path | str,
    schema_path: Path | str | None = DEFAULT_SCHEMA_PATH,
    *,
    policy: MatchPolicy = MatchPolicy.PARTITIONED,
) -> ConfigLoadResult:
    """Read, validate and flatten a group configuration file.

    Failures never escape: an unreadable, undecodable or schema-invalid
    document is returned as :class:`ConfigLoadFailure`. Pass
    ``schema_path=None`` to skip schema validation.
    """
    path = Path(config_path)
    source = path.as_posix()
    try:
        groups = read_mapping_file(path)
        if schema_path is not None:
            require_valid(groups, load_schema(Path(schema_path)), context="group configuration")
    except DocumentError as exc:
        logger.debug("group configuration load failed: %s", exc)
        return ConfigLoadFailure(detail=exc.detail, source=source)

    registry = build_registry(groups, policy=policy)
    dangling = find_dangling_parents(registry)
    if dangling:
        logger.warning(
            "group configuration %s references unknown parent group(s): %s",
            source,
            ", ".join(dangling),
        )
    return ConfigLoadSuccess(registry=registry, source=source)


def registry_or_empty(result: ConfigLoadResult) -> RuleRegistry:
    if isinstance(result, ConfigLoadSuccess):
        return result.registry
    return RuleRegistry.empty()
