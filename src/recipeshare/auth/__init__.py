from .session_store import SESSION_KEY, TOKEN_KEY, SessionDataError, SessionStore
from .storage import (
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    RedisStorage,
    StorageError,
    create_storage,
)

__all__ = [
    "SESSION_KEY",
    "TOKEN_KEY",
    "SessionDataError",
    "SessionStore",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "RedisStorage",
    "StorageError",
    "create_storage",
]
