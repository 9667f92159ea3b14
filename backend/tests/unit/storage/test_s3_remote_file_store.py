"""Unit tests for the S3 remote file store using moto"""

import boto3
import pytest
from moto import mock_aws

from orderdrop.domain.requests import RemoteFileStoreError
from orderdrop.domain.storage.ports.remote_file_store_port import InboundFile
from orderdrop.infrastructure.storage import S3RemoteFileStore
from orderdrop.infrastructure.storage.storage_config import StorageConfig, validate_storage_config

TEST_BUCKET = "test-orderdrop-bucket"
TEST_REGION = "us-east-1"
FOLDER = "Order-1001-Jane Doe"


@pytest.fixture
def s3_client():
    """Mock S3 with an empty bucket"""
    with mock_aws():
        client = boto3.client(
            "s3",
            region_name=TEST_REGION,
            aws_access_key_id="test-access-key",
            aws_secret_access_key="test-secret-key",
        )
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def remote_store(s3_client):
    return S3RemoteFileStore(s3_client, TEST_BUCKET)


@pytest.fixture
def inbound(tmp_path):
    path = tmp_path / "000-receipt.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0jpeg")
    return InboundFile(original_name="receipt (1).jpg", path=path, mime_type="image/jpeg", size_bytes=8)


class TestFolders:
    """Test folder lookup, creation, and sharing"""

    @pytest.mark.asyncio
    async def test_find_missing_folder(self, remote_store):
        assert await remote_store.find_folder(FOLDER) is None

    @pytest.mark.asyncio
    async def test_find_or_create_is_idempotent(self, remote_store, s3_client):
        """Test a second call returns the same folder without a new marker"""
        first = await remote_store.find_or_create_folder(FOLDER)
        second = await remote_store.find_or_create_folder(FOLDER)

        assert first == second == f"{FOLDER}/"
        assert await remote_store.find_folder(FOLDER) == first
        keys = [o["Key"] for o in s3_client.list_objects_v2(Bucket=TEST_BUCKET)["Contents"]]
        assert keys == [f"{FOLDER}/.folder"]

    @pytest.mark.asyncio
    async def test_share_records_grantee_once(self, remote_store, s3_client):
        folder_id = await remote_store.find_or_create_folder(FOLDER)

        await remote_store.share_folder(folder_id, "seller@shop.example")
        await remote_store.share_folder(folder_id, "seller@shop.example")

        tags = s3_client.get_object_tagging(Bucket=TEST_BUCKET, Key=f"{folder_id}.folder")["TagSet"]
        assert tags == [{"Key": "share-1", "Value": "seller@shop.example"}]

    @pytest.mark.asyncio
    async def test_share_missing_folder_fails(self, remote_store):
        with pytest.raises(RemoteFileStoreError):
            await remote_store.share_folder("Order-404-Nobody/", "seller@shop.example")


class TestFiles:
    """Test file upload, listing and deletion"""

    @pytest.mark.asyncio
    async def test_upload_and_list(self, remote_store, s3_client, inbound):
        """Test the uploaded object lives under the folder with a sanitized name"""
        folder_id = await remote_store.find_or_create_folder(FOLDER)

        file_id = await remote_store.upload_file(folder_id, inbound)

        assert file_id.startswith(folder_id)
        assert file_id.endswith("-receipt_1_.jpg")
        obj = s3_client.get_object(Bucket=TEST_BUCKET, Key=file_id)
        assert obj["Body"].read() == b"\xff\xd8\xff\xe0jpeg"
        assert obj["ContentType"] == "image/jpeg"

        [remote_file] = await remote_store.list_files(folder_id)
        assert remote_file.file_id == file_id
        assert remote_file.size_bytes == 8

    @pytest.mark.asyncio
    async def test_each_upload_creates_new_object(self, remote_store, inbound):
        folder_id = await remote_store.find_or_create_folder(FOLDER)
        await remote_store.upload_file(folder_id, inbound)
        await remote_store.upload_file(folder_id, inbound)

        assert len(await remote_store.list_files(folder_id)) == 2

    @pytest.mark.asyncio
    async def test_delete(self, remote_store, inbound):
        """Test deleted files disappear and deleting twice is harmless"""
        folder_id = await remote_store.find_or_create_folder(FOLDER)
        file_id = await remote_store.upload_file(folder_id, inbound)

        await remote_store.delete_file(file_id)
        await remote_store.delete_file(file_id)

        assert await remote_store.list_files(folder_id) == []
        assert await remote_store.find_folder(FOLDER) == folder_id

    @pytest.mark.asyncio
    async def test_listing_is_scoped_to_folder(self, remote_store, inbound):
        first = await remote_store.find_or_create_folder(FOLDER)
        second = await remote_store.find_or_create_folder("Order-1002-John Roe")
        await remote_store.upload_file(second, inbound)

        assert await remote_store.list_files(first) == []


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_bucket(self, remote_store):
        await remote_store.check_health()

    @pytest.mark.asyncio
    async def test_missing_bucket(self, s3_client):
        with pytest.raises(RemoteFileStoreError):
            await S3RemoteFileStore(s3_client, "no-such-bucket").check_health()


class TestStorageConfig:

    def test_valid_minio_config(self):
        validate_storage_config(
            StorageConfig(endpoint_url="http://localhost:9000", access_key="a", secret_key="s", bucket_name="b")
        )

    def test_missing_bucket_name(self):
        with pytest.raises(ValueError, match="bucket_name"):
            validate_storage_config(StorageConfig(endpoint_url=None, access_key="a", secret_key="s", bucket_name=""))

    def test_bad_endpoint_scheme(self):
        with pytest.raises(ValueError, match="endpoint_url"):
            validate_storage_config(
                StorageConfig(endpoint_url="localhost:9000", access_key="a", secret_key="s", bucket_name="b")
            )
