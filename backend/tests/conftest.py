"""Pytest fixtures for OrderDrop.

Provides reusable test fixtures for:
- Settings with test values (no .env file)
- In-memory SQLite request store
- In-memory remote file store and recording notifier
- An application container and TestClient wired to the fakes

Usage:
    def test_process_order(client, store):
        response = client.post("/process-order", json={"name": "Jane", "email": "jane@x.com", "receiptId": "1"})
        assert store.get_by_id(response.json()["requestId"]) is not None
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator, List

import pytest
from fastapi.testclient import TestClient

from orderdrop.bootstrap import AppContainer
from orderdrop.config import Settings
from orderdrop.database import create_db_engine, create_session_factory, init_db
from orderdrop.domain.storage.ports.remote_file_store_port import InboundFile
from orderdrop.infrastructure.repositories.request_repository import RequestRepository
from orderdrop.main import create_app

from .fixtures.fakes import FixedClock, InMemoryRemoteFileStore, RecordingNotifier

TEST_WEBHOOK_SECRET = "test-webhook-secret"
TEST_SECRET_KEY = "test-secret-key-for-reset-links"
SELLER_EMAIL = "seller@shop.example"

# A minimal valid JPEG header is enough; nothing decodes the content
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        BASE_URL="https://uploads.shop.example",
        SELLER_EMAIL=SELLER_EMAIL,
        SELLER_TIMEZONE="America/New_York",
        SECRET_KEY=TEST_SECRET_KEY,
        SHOPIFY_WEBHOOK_SECRET=TEST_WEBHOOK_SECRET,
        POSTMARK_SERVER_TOKEN=None,
        EXTERNAL_CALL_TIMEOUT_SECONDS=2.0,
        MAX_UPLOAD_SIZE_BYTES=1024,
        MAX_BATCH_UPLOAD_FILES=3,
        LOG_JSON=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def engine(settings: Settings):
    engine = create_db_engine(settings.DATABASE_URL)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> RequestRepository:
    return RequestRepository(create_session_factory(engine))


@pytest.fixture
def file_store() -> InMemoryRemoteFileStore:
    return InMemoryRemoteFileStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def container(settings, engine, file_store, notifier) -> AppContainer:
    return AppContainer.build(settings, engine=engine, file_store=file_store, notifier=notifier)


@pytest.fixture
def client(container) -> Generator[TestClient, None, None]:
    app = create_app(container=container)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_inbound_files(tmp_path: Path) -> Callable[..., List[InboundFile]]:
    """Factory writing spooled files to tmp_path, as the receiver would."""

    def _make(*names: str, content: bytes = JPEG_BYTES) -> List[InboundFile]:
        files = []
        for name in names:
            path = tmp_path / name
            path.write_bytes(content)
            files.append(InboundFile(original_name=name, path=path, mime_type="image/jpeg", size_bytes=len(content)))
        return files

    return _make


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 1, 15, 30, tzinfo=timezone.utc))
