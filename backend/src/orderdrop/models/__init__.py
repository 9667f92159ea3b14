"""SQLAlchemy Models for OrderDrop"""

from .base import Base
from .upload_request import UploadRequest

__all__ = [
    "Base",
    "UploadRequest",
]
