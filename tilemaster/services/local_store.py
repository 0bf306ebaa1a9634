"""
Local fallback storage for the tilemaster collections
Used only when no Supabase project is configured; one serialized blob per key
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Optional

from ..config.settings import get_settings
from ..exceptions import LocalStoreError

logger = logging.getLogger(__name__)


class LocalStore(ABC):
    """Abstract base class for local key/blob storage"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored blob, or None if the key was never written"""
        pass

    @abstractmethod
    async def set(self, key: str, blob: str) -> None:
        """Overwrite the blob stored under key"""
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Forget a key (no-op if absent)"""
        pass


class LocalFileBackend(LocalStore):
    """Local filesystem backend: <directory>/<key>.json"""

    def __init__(self, data_directory: str = "./tilemaster_data"):
        self.data_directory = data_directory
        os.makedirs(data_directory, exist_ok=True)

    def _get_file_path(self, key: str) -> str:
        return os.path.join(self.data_directory, f"{key}.json")

    async def get(self, key: str) -> Optional[str]:
        file_path = self._get_file_path(key)
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            raise LocalStoreError(f"Could not read {key}: {e}") from e

    async def set(self, key: str, blob: str) -> None:
        file_path = self._get_file_path(key)
        try:
            # Write to a temp file first so a failed write never truncates the old blob
            fd, tmp_path = tempfile.mkstemp(dir=self.data_directory, suffix=".tmp")
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(blob)
                os.replace(tmp_path, file_path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise
        except OSError as e:
            raise LocalStoreError(f"Could not write {key}: {e}") from e

    async def remove(self, key: str) -> None:
        file_path = self._get_file_path(key)
        try:
            if os.path.exists(file_path):
                os.remove(file_path)
        except OSError as e:
            raise LocalStoreError(f"Could not remove {key}: {e}") from e


# Global local store - lazy initialization
local_store = None

def get_local_store() -> LocalStore:
    """Get the global local fallback store"""
    global local_store
    if local_store is None:
        local_store = LocalFileBackend(get_settings().LOCAL_STORE_DIR)
    return local_store
