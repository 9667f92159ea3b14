"""Postmark implementation of the notifier port.

Without a server token the notifier runs in dev mode: emails are logged and
not sent.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from postmarker.core import PostmarkClient

from ...domain.notifications.ports.notifier_port import NotificationTemplate, NotifierPort
from ...domain.requests.errors import NotificationError
from .templates import render

logger = logging.getLogger(__name__)


class PostmarkNotifier(NotifierPort):
    """Sends templated email through Postmark."""

    def __init__(self, server_token: Optional[str], sender: str, client: Optional[PostmarkClient] = None):
        self.sender = sender
        if client is not None:
            self.client = client
        elif server_token:
            self.client = PostmarkClient(server_token=server_token)
            logger.info("Postmark email client initialized")
        else:
            logger.warning("POSTMARK_SERVER_TOKEN not set - emails will be logged but not sent")
            self.client = None

    async def send(
        self,
        to_address: str,
        template: NotificationTemplate,
        data: Dict[str, Any],
    ) -> None:
        try:
            rendered = render(template, data)
        except KeyError as e:
            raise NotificationError(f"Template {template.value} is missing field {e}") from e

        if self.client is None:
            logger.info(f"[DEV MODE] Email logged (not sent) to {to_address}: {rendered.subject}")
            return

        try:
            response = await asyncio.to_thread(
                self.client.emails.send,
                From=self.sender,
                To=to_address,
                Subject=rendered.subject,
                HtmlBody=rendered.html_body,
                TextBody=rendered.text_body,
                Tag=template.value,
            )
        except Exception as e:
            logger.error(f"Failed to send email to {to_address}: {e}")
            raise NotificationError(f"Email delivery failed: {type(e).__name__}", retryable=True) from e

        logger.info(f"Email sent to {to_address}: {response['MessageID']}")
