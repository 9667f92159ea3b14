"""Application wiring.

AppContainer owns every long-lived collaborator (database engine, remote file
store client, notifier, per-request locks) and the services built from them.
It is constructed once at startup and torn down at shutdown; nothing is
created at import time.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import Settings
from .database import create_db_engine, create_session_factory, init_db
from .domain.notifications.ports.notifier_port import NotifierPort
from .domain.requests.ports.request_store_port import RequestStorePort
from .domain.storage.ports.remote_file_store_port import RemoteFileStorePort
from .infrastructure.notifications.postmark_notifier import PostmarkNotifier
from .infrastructure.repositories.request_repository import RequestRepository
from .infrastructure.storage.s3_remote_file_store import S3RemoteFileStore
from .infrastructure.storage.storage_config import storage_config_from_settings
from .intake.service import IntakeService
from .resets.service import ResetService
from .resets.tokens import ResetTokenSigner
from .reversion.service import ReversionService
from .uploads.receiver import InboundFileReceiver
from .uploads.service import UploadService
from .utils.locks import KeyedLock
from .webhooks.service import WebhookService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    store: RequestStorePort
    file_store: RemoteFileStorePort
    notifier: NotifierPort
    locks: KeyedLock
    receiver: InboundFileReceiver
    intake: IntakeService
    webhooks: WebhookService
    uploads: UploadService
    resets: ResetService
    reversion: ReversionService

    @classmethod
    def build(
        cls,
        settings: Settings,
        engine: Optional[Engine] = None,
        file_store: Optional[RemoteFileStorePort] = None,
        notifier: Optional[NotifierPort] = None,
    ) -> "AppContainer":
        """Wire the application from settings.

        Collaborators passed in explicitly (tests pass in-memory fakes) are
        used instead of the ones settings would build.
        """
        engine = engine or create_db_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        init_db(engine)
        session_factory = create_session_factory(engine)
        store = RequestRepository(session_factory)

        if file_store is None:
            file_store = S3RemoteFileStore.from_config(storage_config_from_settings(settings))
        if notifier is None:
            notifier = PostmarkNotifier(settings.POSTMARK_SERVER_TOKEN, settings.EMAIL_SENDER)

        locks = KeyedLock()
        timeout = settings.EXTERNAL_CALL_TIMEOUT_SECONDS

        intake = IntakeService(store, settings.BASE_URL)
        container = cls(
            settings=settings,
            engine=engine,
            session_factory=session_factory,
            store=store,
            file_store=file_store,
            notifier=notifier,
            locks=locks,
            receiver=InboundFileReceiver(
                max_file_size=settings.MAX_UPLOAD_SIZE_BYTES,
                max_files=settings.MAX_BATCH_UPLOAD_FILES,
                tmp_dir=settings.UPLOAD_TMP_DIR,
            ),
            intake=intake,
            webhooks=WebhookService(
                store=store,
                intake=intake,
                notifier=notifier,
                webhook_secret=settings.SHOPIFY_WEBHOOK_SECRET,
                timeout_seconds=timeout,
            ),
            uploads=UploadService(
                store=store,
                file_store=file_store,
                notifier=notifier,
                locks=locks,
                seller_email=settings.SELLER_EMAIL,
                seller_zone=settings.seller_zone,
                timeout_seconds=timeout,
                notify_seller=settings.NOTIFY_SELLER_ON_UPLOAD,
            ),
            resets=ResetService(
                store=store,
                file_store=file_store,
                notifier=notifier,
                locks=locks,
                signer=ResetTokenSigner(settings.SECRET_KEY),
                base_url=settings.BASE_URL,
                seller_email=settings.SELLER_EMAIL,
                grace_period_days=settings.RESET_GRACE_PERIOD_DAYS,
                timeout_seconds=timeout,
            ),
            reversion=ReversionService(store, settings.RESET_GRACE_PERIOD_DAYS),
        )
        logger.info(f"Application container built (environment={settings.ENVIRONMENT})")
        return container

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Application container closed")
