from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType


class DocumentErrorCode(StrEnum):
    FILE_NOT_FOUND = "file_not_found"
    JSON_DECODE_ERROR = "json_decode_error"
    VALIDATION_FAILED = "validation_failed"
    CONFIG_INVALID = "config_invalid"


@dataclass(frozen=True, slots=True)
class DocumentErrorDetail:
    code: str
    message: str
    data: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("document error code must be non-empty")
        if not self.message:
            raise ValueError("document error message must be non-empty")
        canonical_data = {key: self.data[key] for key in sorted(self.data)}
        object.__setattr__(self, "data", MappingProxyType(canonical_data))


class DocumentError(ValueError):
    def __init__(self, detail: DocumentErrorDetail) -> None:
        super().__init__(f"{detail.code}: {detail.message}")
        self.detail = detail

    @property
    def code(self) -> str:
        return self.detail.code


def build_document_error(
    code: DocumentErrorCode,
    message: str,
    **data: object,
) -> DocumentError:
    return DocumentError(DocumentErrorDetail(code=code.value, message=message, data=data))
