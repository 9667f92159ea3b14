"""Buyer uploads: the upload form, the inbound file receiver, and the upload handler."""

from .receiver import InboundFileReceiver
from .service import FailedFile, UploadedFile, UploadResult, UploadService

__all__ = ["FailedFile", "InboundFileReceiver", "UploadedFile", "UploadResult", "UploadService"]
