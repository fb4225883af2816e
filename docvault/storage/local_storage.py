from pathlib import Path

from docvault.storage.base import BaseStorage
from docvault.storage.exceptions import BlobNotFoundError, StorageError


class LocalStorage(BaseStorage):
    """Stores upload bytes as flat files under a single root directory."""

    def __init__(self, files_root: Path) -> None:
        self._files_root = files_root

    def save(self, key: str, data: bytes) -> Path:
        path = self._resolve_path(key)
        try:
            self._files_root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write {key}: {exc}") from exc
        return path

    def fetch(self, key: str) -> bytes:
        path = self._resolve_path(key)
        if not path.exists():
            raise BlobNotFoundError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self._resolve_path(key)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise BlobNotFoundError(f"File not found: {path}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc

    def _resolve_path(self, key: str) -> Path:
        # Keys are flat file names; anything that could escape the root is rejected.
        if not key or key != Path(key).name or key in (".", ".."):
            raise StorageError(f"Invalid storage key '{key}'")
        return self._files_root / key
