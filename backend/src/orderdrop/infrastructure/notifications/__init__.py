"""Outbound email adapters."""

from .postmark_notifier import PostmarkNotifier

__all__ = ["PostmarkNotifier"]
