"""Reversion sweep: expires unconfirmed reset requests after the grace period."""

from .schemas import ReversionStatistics
from .service import ReversionService

__all__ = ["ReversionService", "ReversionStatistics"]
