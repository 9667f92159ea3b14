"""Commerce-platform webhook ingestion."""

from .service import WebhookOutcome, WebhookRejection, WebhookResult, WebhookService

__all__ = ["WebhookOutcome", "WebhookRejection", "WebhookResult", "WebhookService"]
