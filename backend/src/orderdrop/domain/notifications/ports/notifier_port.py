"""Notifier Port - Domain interface for outbound email."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict


class NotificationTemplate(str, Enum):
    """Email templates known to the notifier"""
    UPLOAD_LINK = "upload_link"            # buyer: upload your files
    RESET_REQUESTED = "reset_requested"    # seller: buyer wants to start over
    UPLOAD_COMPLETED = "upload_completed"  # seller: files arrived
    RESET_CONFIRMED = "reset_confirmed"    # buyer: you can upload again


class NotifierPort(ABC):
    """Port interface for sending templated email."""

    @abstractmethod
    async def send(
        self,
        to_address: str,
        template: NotificationTemplate,
        data: Dict[str, Any],
    ) -> None:
        """Send a templated email.

        Raises:
            NotificationError: If delivery fails
        """
