import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from redis import Redis, RedisError

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a storage backend cannot be read or written."""


class KeyValueStorage(Protocol):
    """Durable string key-value storage (the local-storage analogue)."""

    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage. Lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage:
    """
    Stores all keys in a single JSON document on disk.

    The directory is created with mode 0o700 and the file is rewritten with
    mode 0o600 on every change, since it holds a bearer token.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Could not read storage file {self._path}") from e

        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Storage file {self._path} is not valid JSON") from e
        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self._path} does not contain a JSON object")
        return data

    def _save(self, data: dict[str, str]) -> None:
        try:
            os.makedirs(self._path.parent, exist_ok=True, mode=0o700)
            tmp_path = self._path.with_name(self._path.name + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Could not write storage file {self._path}") from e

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class RedisStorage:
    """Redis-backed storage, keys namespaced as ``<prefix>:<key>``."""

    def __init__(
        self,
        redis_client: Optional[Redis] = None,
        redis_url: str = "redis://localhost:6379",
        key_prefix: str = "recipeshare:storage",
    ):
        self._client = redis_client or Redis.from_url(redis_url, decode_responses=True)
        self._key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    def _handle_redis_error(self, operation: str, key: str, error: RedisError) -> None:
        logger.error(f"Redis error during {operation} of key {key}: {error}")
        raise StorageError(f"Storage error during {operation}") from error

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(self._make_key(key))
        except RedisError as e:
            self._handle_redis_error("read", key, e)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._make_key(key), value)
        except RedisError as e:
            self._handle_redis_error("write", key, e)

    def remove(self, key: str) -> None:
        try:
            self._client.delete(self._make_key(key))
        except RedisError as e:
            self._handle_redis_error("delete", key, e)


def create_storage(storage_type: str = "memory", **kwargs) -> KeyValueStorage:
    """
    Create the storage backend used for the session.

    Args:
        storage_type: One of "memory", "file" or "redis".
        **kwargs: ``storage_path`` for file storage; ``redis_url`` and
            ``key_prefix`` for redis storage.

    Raises:
        ValueError: For an unknown storage type or missing file path.
    """
    if storage_type == "memory":
        logger.warning("Using in-memory session storage - the session will not survive a restart")
        return MemoryStorage()

    if storage_type == "file":
        storage_path = kwargs.get("storage_path")
        if not storage_path:
            raise ValueError("storage_path must be provided for file storage")
        return FileStorage(storage_path)

    if storage_type == "redis":
        return RedisStorage(
            redis_url=kwargs.get("redis_url", "redis://localhost:6379"),
            key_prefix=kwargs.get("key_prefix", "recipeshare:storage"),
        )

    raise ValueError(f"Unknown storage_type '{storage_type}'")
