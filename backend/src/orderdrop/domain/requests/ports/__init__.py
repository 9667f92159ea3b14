from .request_store_port import (
    NewUploadRequest,
    RequestSource,
    RequestStorePort,
    UploadRequestRecord,
)

__all__ = [
    "NewUploadRequest",
    "RequestSource",
    "RequestStorePort",
    "UploadRequestRecord",
]
