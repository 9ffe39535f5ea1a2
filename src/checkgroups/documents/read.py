from __future__ import annotations

import json
from pathlib import Path
from typing import Final

import yaml

from .errors import DocumentErrorCode, build_document_error

_JSON_SUFFIXES: Final[frozenset[str]] = frozenset((".json",))


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError, PermissionError) as exc:
        raise build_document_error(
            DocumentErrorCode.FILE_NOT_FOUND,
            f"File not found: {path.as_posix()}",
            file_path=path.as_posix(),
        ) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise build_document_error(
            DocumentErrorCode.FILE_NOT_FOUND,
            f"File not readable: {path.as_posix()}: {exc}",
            file_path=path.as_posix(),
        ) from exc


def decode_structured_text(text: str, *, source: str, json_only: bool = False) -> object:
    """Decode JSON (always) or YAML (unless ``json_only``) text."""
    if json_only:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise build_document_error(
                DocumentErrorCode.JSON_DECODE_ERROR,
                f"JSON decode error: {exc.msg}",
                source=source,
                json_error=exc.msg,
            ) from exc
        except RecursionError as exc:
            raise build_document_error(
                DocumentErrorCode.JSON_DECODE_ERROR,
                f"JSON decode error: document nested too deeply: {source}",
                source=source,
                json_error="maximum nesting depth exceeded",
            ) from exc
    try:
        return yaml.safe_load(text)
    except (yaml.YAMLError, ValueError, RecursionError) as exc:
        raise build_document_error(
            DocumentErrorCode.JSON_DECODE_ERROR,
            f"invalid JSON/YAML payload: {source}: {exc}",
            source=source,
            json_error=str(exc),
        ) from exc


def read_structured_file(path: Path) -> object:
    text = read_text(path)
    return decode_structured_text(
        text,
        source=path.as_posix(),
        json_only=path.suffix.lower() in _JSON_SUFFIXES,
    )


def read_mapping_file(path: Path) -> dict[str, object]:
    payload = read_structured_file(path)
    if not isinstance(payload, dict):
        raise build_document_error(
            DocumentErrorCode.CONFIG_INVALID,
            f"document root must be a mapping: {path.as_posix()}",
            file_path=path.as_posix(),
        )
    return payload


def is_valid_json(text: str) -> bool:
    try:
        json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return False
    return True
