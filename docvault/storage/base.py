from abc import ABC, abstractmethod
from pathlib import Path


class BaseStorage(ABC):
    """Contract for raw upload byte storage."""

    @abstractmethod
    def save(self, key: str, data: bytes) -> Path:
        """Persist bytes under key and return where they were written.

        Raises:
            StorageError: if the bytes cannot be written.
        """

    @abstractmethod
    def fetch(self, key: str) -> bytes:
        """Read the bytes stored under key.

        Raises:
            BlobNotFoundError: if nothing is stored under key.
            StorageError: on any other read failure.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the bytes stored under key.

        Raises:
            StorageError: if the blob cannot be removed.
        """
