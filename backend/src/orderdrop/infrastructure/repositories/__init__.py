"""Request store adapters."""

from .request_repository import RequestRepository

__all__ = ["RequestRepository"]
