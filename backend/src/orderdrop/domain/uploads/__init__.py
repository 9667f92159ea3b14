"""Uploads domain module - buyer file validation rules"""

from .validation import (
    is_supported_mime_type,
    validate_file_size,
    validate_filename,
    sanitize_filename,
    SUPPORTED_MIME_TYPES,
)

__all__ = [
    "is_supported_mime_type",
    "validate_file_size",
    "validate_filename",
    "sanitize_filename",
    "SUPPORTED_MIME_TYPES",
]
