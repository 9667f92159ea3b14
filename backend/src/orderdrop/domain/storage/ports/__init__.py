from .remote_file_store_port import InboundFile, RemoteFile, RemoteFileStorePort

__all__ = ["InboundFile", "RemoteFile", "RemoteFileStorePort"]
