"""Remote File Store Port - Domain interface for per-order folders.

This port defines the contract for the file-hosting service that receives buyer
uploads. Folders are addressed by name; resolving a folder is find-before-create
so repeated calls for the same name return the same folder id.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class InboundFile:
    """A buyer file spilled to local temporary storage.

    Attributes:
        original_name: Sanitized client-side filename
        path: Local temporary path holding the content
        mime_type: Declared MIME type
        size_bytes: Content length in bytes
    """
    original_name: str
    path: Path
    mime_type: str
    size_bytes: int


@dataclass(frozen=True)
class RemoteFile:
    """A file inside a remote folder."""
    file_id: str
    name: str
    size_bytes: int


class RemoteFileStorePort(ABC):
    """Port interface for the remote file store.

    All methods may block on network I/O and raise RemoteFileStoreError on failure.
    """

    @abstractmethod
    async def find_folder(self, name: str) -> Optional[str]:
        """Return the folder id for `name`, or None if it does not exist."""

    @abstractmethod
    async def find_or_create_folder(self, name: str) -> str:
        """Return the folder id for `name`, creating the folder if needed.

        Idempotent: calling twice with the same name returns the same id.
        """

    @abstractmethod
    async def share_folder(self, folder_id: str, email: str) -> None:
        """Grant `email` write access to the folder. Safe to repeat."""

    @abstractmethod
    async def upload_file(self, folder_id: str, file: InboundFile) -> str:
        """Upload one file into the folder and return its file id.

        Not idempotent: every call creates a new remote file.
        """

    @abstractmethod
    async def list_files(self, folder_id: str) -> List[RemoteFile]:
        """List the files inside the folder."""

    @abstractmethod
    async def delete_file(self, file_id: str) -> None:
        """Delete one file. Deleting a missing file is not an error."""

    @abstractmethod
    async def check_health(self) -> None:
        """Raise RemoteFileStoreError if the store is unreachable."""
