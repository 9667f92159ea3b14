"""Order intake: turns order data into a Pending upload request and its link."""

from .service import CreatedRequest, IntakeService, build_upload_link

__all__ = ["CreatedRequest", "IntakeService", "build_upload_link"]
