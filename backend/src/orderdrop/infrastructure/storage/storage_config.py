"""Connection settings for the S3-compatible remote file store.

MinIO in development (S3_ENDPOINT_URL set), AWS S3 in production
(S3_ENDPOINT_URL empty, regional endpoint derived from S3_REGION).
"""

from dataclasses import dataclass
from typing import List, Optional

from ...config import Settings


@dataclass(frozen=True)
class StorageConfig:
    """Where the order folders live and how long a call may take.

    Attributes:
        endpoint_url: MinIO/S3-compatible endpoint, None for AWS S3
        access_key: Access key id
        secret_key: Secret access key
        bucket_name: Bucket holding one prefix per order folder
        region: AWS region
        timeout_seconds: Connect and read timeout for every call
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"
    timeout_seconds: float = 30.0

    @property
    def uses_custom_endpoint(self) -> bool:
        return bool(self.endpoint_url)


def storage_config_from_settings(settings: Settings) -> StorageConfig:
    """Read the S3_* settings; the call timeout comes from EXTERNAL_CALL_TIMEOUT_SECONDS.

    Raises:
        ValueError: If configuration is invalid
    """
    config = StorageConfig(
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
        timeout_seconds=settings.EXTERNAL_CALL_TIMEOUT_SECONDS,
    )
    validate_storage_config(config)
    return config


def validate_storage_config(config: StorageConfig) -> None:
    """Reject a configuration the adapter cannot start with.

    All problems are reported together.

    Raises:
        ValueError: If configuration is invalid
    """
    problems: List[str] = []
    for field_name in ("access_key", "secret_key", "bucket_name"):
        if not getattr(config, field_name):
            problems.append(f"Storage {field_name} is required")

    if config.uses_custom_endpoint:
        if not config.endpoint_url.startswith(("http://", "https://")):
            problems.append(
                f"Invalid endpoint_url: {config.endpoint_url} (must start with http:// or https://)"
            )
    elif not config.region:
        problems.append("S3_REGION is required when S3_ENDPOINT_URL is not set")

    if config.timeout_seconds <= 0:
        problems.append("Storage timeout_seconds must be positive")

    if problems:
        raise ValueError("; ".join(problems))
