"""
Storage Backends - Key-value stores for the persisted cart

Provides:
- LocalStorage: a JSON file on disk, the default on-device store
- Upstash Redis sync client for hosted key-value storage

Both expose get(key) -> Optional[str] and set(key, value).
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

from upstash_redis import Redis

from shopcart.config import Settings
from shopcart.errors import CartStorageError
from shopcart.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """Minimal string key-value interface used by PersistedCartStore."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> object: ...


class LocalStorage:
    """
    Durable key-value store backed by a single JSON file.

    The whole file is rewritten on every set through a temp file
    and os.replace, so a crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CartStorageError(f"Cannot read storage file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise CartStorageError(f"Storage file {self.path} does not contain an object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise CartStorageError(f"Cannot write storage file {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except CartStorageError as e:
            logger.warning(f"Replacing unreadable storage file: {e}")
            data = {}
        data[key] = value
        self._write_all(data)


class StorageKeys:
    """Key names used in the key-value store."""

    CART = "cart"

    @staticmethod
    def cart_key(namespace: str) -> str:
        """Namespaced cart key, e.g. "@shopcart:cart"."""
        if namespace.endswith(f":{StorageKeys.CART}"):
            return namespace
        return f"{namespace}:{StorageKeys.CART}"


def get_redis_sync(url: str, token: str) -> Redis:
    """
    Create a sync Upstash Redis client.

    Uses the standard Upstash REST credentials:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    if not url or not token:
        raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
    return Redis(url=url, token=token)


def create_key_value_store(settings: Settings) -> KeyValueStore:
    """Build the backend selected by settings.storage_backend."""
    if settings.storage_backend == "redis":
        logger.info("Cart storage: Upstash Redis")
        return get_redis_sync(settings.redis_url, settings.redis_token)
    logger.info(f"Cart storage: local file {settings.storage_path}")
    return LocalStorage(settings.storage_path)


__all__ = [
    "KeyValueStore",
    "LocalStorage",
    "StorageKeys",
    "get_redis_sync",
    "create_key_value_store",
]
