from .errors import DocumentError, DocumentErrorCode, DocumentErrorDetail, build_document_error
from .read import (
    decode_structured_text,
    is_valid_json,
    read_mapping_file,
    read_structured_file,
    read_text,
)

__all__ = [
    "DocumentError",
    "DocumentErrorCode",
    "DocumentErrorDetail",
    "build_document_error",
    "decode_structured_text",
    "is_valid_json",
    "read_mapping_file",
    "read_structured_file",
    "read_text",
]
