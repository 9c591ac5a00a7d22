"""
Key -> string blob stores used to persist entries, chat history and the profile.
"""

import json
import os
import tempfile
import threading
from typing import Dict, Optional

from .config import StorageConfig
from .logging_config import get_logger

logger = get_logger(__name__)

ENTRIES_KEY = 'manasikaEntries'
CONVERSATIONS_KEY = 'manasikaConversations'
PROFILE_KEY = 'manasikaProfile'

ALL_KEYS = (ENTRIES_KEY, CONVERSATIONS_KEY, PROFILE_KEY)


class BlobStoreError(Exception):
    """Custom exception for blob store errors."""
    pass


class BlobStore:
    """Opaque key -> string store. Callers own encoding of the values."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def health_check(self) -> bool:
        """
        Perform a health check on the store.

        Returns:
            True if a value can be written and read back, False otherwise
        """
        probe_key = '__health__'
        try:
            self.set(probe_key, 'ok')
            healthy = self.get(probe_key) == 'ok'
            self.remove(probe_key)
            return healthy
        except BlobStoreError as e:
            logger.error(f'Blob store health check failed: {e}')
            return False


class InMemoryBlobStore(BlobStore):
    """Process-local store, mainly for tests and the ``memory`` backend."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBlobStore(BlobStore):
    """All keys kept in a single JSON object file, rewritten atomically on every change."""

    def __init__(self, path: str):
        """
        Initialize the file-backed store.

        Args:
            path: Location of the JSON file, created on first write
        """
        self.path = path
        self._lock = threading.Lock()
        logger.info(f'Initialized file blob store at: {self.path}')

    def _read(self, recover: bool = False) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'rb') as f:
                raw = f.read()
        except OSError as e:
            raise BlobStoreError(f'Failed to read blob store {self.path}: {e}')

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError('not a JSON object')
        except ValueError as e:
            if not recover:
                raise BlobStoreError(f'Failed to read blob store {self.path}: {e}')
            self._quarantine(e)
            return {}
        return data

    def _quarantine(self, reason: Exception) -> None:
        corrupt_path = f'{self.path}.corrupt'
        try:
            os.replace(self.path, corrupt_path)
        except OSError as e:
            raise BlobStoreError(f'Failed to move corrupt blob store {self.path} aside: {e}')
        logger.error(f'Blob store {self.path} is corrupt ({reason}), moved to {corrupt_path} and starting empty')

    def _write(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path) or '.'
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.blobstore-', suffix='.tmp')
        except OSError as e:
            raise BlobStoreError(f'Failed to write blob store {self.path}: {e}')

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise BlobStoreError(f'Failed to write blob store {self.path}: {e}')

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read().get(key)
        return value if value is None or isinstance(value, str) else json.dumps(value)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read(recover=True)
            data[key] = value
            self._write(data)
        logger.debug(f'Stored blob {key} ({len(value)} chars)')

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read(recover=True)
            if data.pop(key, None) is not None:
                self._write(data)
        logger.debug(f'Removed blob {key}')


def create_blob_store(config: StorageConfig) -> BlobStore:
    """Build the blob store configured by ``STORAGE_BACKEND``.

    Raises:
        BlobStoreError: If the backend is unknown
    """
    if config.backend == 'memory':
        return InMemoryBlobStore()
    if config.backend == 'file':
        return JsonFileBlobStore(config.path)
    raise BlobStoreError(f'Unknown storage backend: {config.backend}')
