"""S3 Remote File Store - Implementation of RemoteFileStorePort using boto3.

Models per-order folders on an S3-compatible bucket (AWS S3, MinIO):

- A folder is the key prefix "{name}/" plus a zero-byte marker object at
  "{name}/.folder". The folder id is the prefix.
- Sharing records the grantee on the marker as an object tag
  ("share-N" = email). Bucket policies grant the actual access.
- Uploaded files live at "{name}/{uuid}-{sanitized filename}"; the key is
  the file id.

boto3 is synchronous, so every call runs in a worker thread.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import asyncio
import logging
from typing import List, Optional
from uuid import uuid4

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...domain.requests.errors import RemoteFileStoreError
from ...domain.storage.ports.remote_file_store_port import (
    InboundFile,
    RemoteFile,
    RemoteFileStorePort,
)
from ...domain.uploads.validation import sanitize_filename
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

FOLDER_MARKER = ".folder"
SHARE_TAG_PREFIX = "share-"
MAX_OBJECT_TAGS = 10

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class S3RemoteFileStore(RemoteFileStorePort):
    """S3-compatible remote file store.

    Example:
        store = S3RemoteFileStore.from_config(storage_config_from_settings(settings))
        folder_id = await store.find_or_create_folder("Order-1001-Jane Doe")
        await store.share_folder(folder_id, "seller@example.com")
    """

    def __init__(self, s3_client, bucket_name: str):
        self.s3_client = s3_client
        self.bucket_name = bucket_name

    @classmethod
    def from_config(cls, config: StorageConfig) -> "S3RemoteFileStore":
        """Build the adapter with a boto3 client bounded by the configured timeout.

        Raises:
            RemoteFileStoreError: If S3 client initialization fails
        """
        client_config = Config(
            connect_timeout=config.timeout_seconds,
            read_timeout=config.timeout_seconds,
            retries={"max_attempts": 3, "mode": "standard"},
        )
        try:
            s3_client = boto3.client(
                "s3",
                endpoint_url=config.endpoint_url,
                aws_access_key_id=config.access_key,
                aws_secret_access_key=config.secret_key,
                region_name=config.region,
                config=client_config,
            )
        except BotoCoreError as e:
            raise RemoteFileStoreError(f"Failed to initialize S3 client: {e}")

        logger.info(
            f"Initialized S3 remote file store: bucket={config.bucket_name}, "
            f"endpoint={config.endpoint_url or 'AWS S3'}, region={config.region}"
        )
        return cls(s3_client, config.bucket_name)

    async def _call(self, operation: str, **kwargs):
        method = getattr(self.s3_client, operation)
        try:
            return await asyncio.to_thread(method, Bucket=self.bucket_name, **kwargs)
        except ClientError as e:
            error_code = _error_code(e)
            logger.error(f"S3 {operation} failed: error={error_code}, message={e}")
            raise RemoteFileStoreError(
                f"Remote file store {operation} failed: {error_code}",
                retryable=error_code in {"SlowDown", "ServiceUnavailable", "InternalError"},
            ) from e
        except BotoCoreError as e:
            logger.error(f"S3 {operation} failed: {e}")
            raise RemoteFileStoreError(
                f"Remote file store {operation} failed: {e}", retryable=True
            ) from e

    @staticmethod
    def _marker_key(folder_id: str) -> str:
        return f"{folder_id}{FOLDER_MARKER}"

    async def find_folder(self, name: str) -> Optional[str]:
        folder_id = f"{name}/"
        try:
            await self._call("head_object", Key=self._marker_key(folder_id))
        except RemoteFileStoreError as e:
            cause = e.__cause__
            if isinstance(cause, ClientError) and _error_code(cause) in _NOT_FOUND_CODES:
                return None
            raise
        return folder_id

    async def find_or_create_folder(self, name: str) -> str:
        existing = await self.find_folder(name)
        if existing is not None:
            logger.debug(f"Reusing remote folder: {existing}")
            return existing

        folder_id = f"{name}/"
        await self._call("put_object", Key=self._marker_key(folder_id), Body=b"")
        logger.info(f"Created remote folder: {folder_id}")
        return folder_id

    async def share_folder(self, folder_id: str, email: str) -> None:
        marker_key = self._marker_key(folder_id)
        response = await self._call("get_object_tagging", Key=marker_key)
        tags = response.get("TagSet", [])

        shared_with = {
            tag["Value"] for tag in tags if tag["Key"].startswith(SHARE_TAG_PREFIX)
        }
        if email in shared_with:
            return

        if len(tags) >= MAX_OBJECT_TAGS:
            raise RemoteFileStoreError(f"Folder {folder_id} cannot be shared with more addresses")

        tags = tags + [{"Key": f"{SHARE_TAG_PREFIX}{len(shared_with) + 1}", "Value": email}]
        await self._call("put_object_tagging", Key=marker_key, Tagging={"TagSet": tags})
        logger.info(f"Shared remote folder: folder={folder_id}, grantee={email}")

    async def upload_file(self, folder_id: str, file: InboundFile) -> str:
        file_id = f"{folder_id}{uuid4().hex}-{sanitize_filename(file.original_name)}"
        try:
            body = file.path.read_bytes()
        except OSError as e:
            raise RemoteFileStoreError(f"Cannot read spooled file {file.original_name}: {e}") from e

        await self._call(
            "put_object",
            Key=file_id,
            Body=body,
            ContentType=file.mime_type,
            Metadata={"original_filename": file.original_name},
        )
        logger.info(
            f"Uploaded file: key={file_id}, size={file.size_bytes}, mime_type={file.mime_type}"
        )
        return file_id

    async def list_files(self, folder_id: str) -> List[RemoteFile]:
        marker_key = self._marker_key(folder_id)
        files: List[RemoteFile] = []
        continuation_token = None

        while True:
            kwargs = {"Prefix": folder_id}
            if continuation_token:
                kwargs["ContinuationToken"] = continuation_token
            response = await self._call("list_objects_v2", **kwargs)

            for obj in response.get("Contents", []):
                if obj["Key"] == marker_key:
                    continue
                files.append(
                    RemoteFile(
                        file_id=obj["Key"],
                        name=obj["Key"][len(folder_id):],
                        size_bytes=obj.get("Size", 0),
                    )
                )

            if not response.get("IsTruncated"):
                return files
            continuation_token = response.get("NextContinuationToken")

    async def delete_file(self, file_id: str) -> None:
        # S3 DeleteObject succeeds for missing keys
        await self._call("delete_object", Key=file_id)
        logger.info(f"Deleted file: key={file_id}")

    async def check_health(self) -> None:
        await self._call("head_bucket")
