"""FastAPI dependencies.

Every service comes from the AppContainer stored on app.state at startup, so
tests can swap the whole wiring by building the app with their own container.
"""

from fastapi import Request

from .bootstrap import AppContainer
from .config import Settings
from .intake.service import IntakeService
from .resets.service import ResetService
from .uploads.receiver import InboundFileReceiver
from .uploads.service import UploadService
from .webhooks.service import WebhookService


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_settings_dep(request: Request) -> Settings:
    return get_container(request).settings


def get_intake_service(request: Request) -> IntakeService:
    return get_container(request).intake


def get_webhook_service(request: Request) -> WebhookService:
    return get_container(request).webhooks


def get_upload_service(request: Request) -> UploadService:
    return get_container(request).uploads


def get_file_receiver(request: Request) -> InboundFileReceiver:
    return get_container(request).receiver


def get_reset_service(request: Request) -> ResetService:
    return get_container(request).resets
