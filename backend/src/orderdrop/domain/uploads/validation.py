"""File validation utilities for buyer uploads

Limits are passed in by the caller (the inbound file receiver reads them from Settings).
"""

import os
import re
from typing import Optional, Tuple


# Photos and receipts
SUPPORTED_MIME_TYPES = {
    'image/jpeg',
    'image/png',
    'image/gif',
    'image/webp',
    'image/heic',
    'image/heif',
    'application/pdf',
}

MAX_FILENAME_LENGTH = 255


def is_supported_mime_type(mime_type: Optional[str]) -> bool:
    """Check if MIME type is accepted for upload

    Parameters such as "; charset=..." are ignored.

    Example:
        >>> is_supported_mime_type('image/jpeg')
        True
        >>> is_supported_mime_type('application/zip')
        False
    """
    if not mime_type:
        return False
    return mime_type.split(';', 1)[0].strip().lower() in SUPPORTED_MIME_TYPES


def validate_file_size(size_bytes: int, max_size: int) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024, 2048)
        (True, None)
        >>> validate_file_size(0, 2048)
        (False, 'File is empty (0 bytes)')
    """
    if size_bytes == 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"File exceeds maximum size of {max_size} bytes"

    return True, None


def validate_filename(filename: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate a client-supplied filename

    Validation rules:
    - Not empty
    - Max 255 characters
    - No path traversal or directory separators
    - No null bytes or control characters
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > MAX_FILENAME_LENGTH:
        return False, f"Filename exceeds {MAX_FILENAME_LENGTH} characters (got {len(filename)})"

    if '..' in filename or '/' in filename or '\\' in filename:
        return False, "Filename contains path traversal or directory separators"

    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for use in a remote object key

    Example:
        >>> sanitize_filename('receipt (copy).jpg')
        'receipt_copy_.jpg'
    """
    filename = os.path.basename(filename)

    # Replace problematic characters with underscore
    filename = re.sub(r'[^\w\s.-]', '_', filename)

    # Collapse runs of whitespace/underscores
    filename = re.sub(r'[\s_]+', '_', filename)

    if len(filename) > MAX_FILENAME_LENGTH:
        name, ext = os.path.splitext(filename)
        filename = name[:MAX_FILENAME_LENGTH - len(ext)] + ext

    return filename
