"""Remote file store adapters."""

from .s3_remote_file_store import S3RemoteFileStore
from .storage_config import StorageConfig, storage_config_from_settings

__all__ = ["S3RemoteFileStore", "StorageConfig", "storage_config_from_settings"]
