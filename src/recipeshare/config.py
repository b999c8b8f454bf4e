"""
Configuration for the RecipeShare client.

Values come from environment variables (a local .env file is loaded first):

- RECIPESHARE_BASE_URL      backend root URL
- RECIPESHARE_TIMEOUT       request timeout in seconds
- RECIPESHARE_STORAGE       session storage backend: memory, file or redis
- RECIPESHARE_STORAGE_PATH  JSON file used by file storage
- REDIS_URL                 redis connection URL used by redis storage
- RECIPESHARE_REDIS_PREFIX  key prefix used by redis storage
- LOG_LEVEL                 logging level for the command line client
"""
import logging
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_STORAGE_PATH = "~/.recipeshare/storage.json"


class ClientConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    storage_type: Literal["memory", "file", "redis"] = "file"
    storage_path: str = DEFAULT_STORAGE_PATH
    redis_url: str = "redis://localhost:6379"
    redis_key_prefix: str = "recipeshare:storage"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build the configuration from environment variables, falling back to defaults."""
        timeout_raw = os.getenv("RECIPESHARE_TIMEOUT", "10")
        try:
            timeout = float(timeout_raw)
        except ValueError:
            logger.warning(f"Invalid RECIPESHARE_TIMEOUT '{timeout_raw}', using 10 seconds")
            timeout = 10.0

        return cls(
            base_url=os.getenv("RECIPESHARE_BASE_URL", DEFAULT_BASE_URL),
            timeout=timeout,
            storage_type=os.getenv("RECIPESHARE_STORAGE", "file").strip().lower(),
            storage_path=os.getenv("RECIPESHARE_STORAGE_PATH", DEFAULT_STORAGE_PATH),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379"),
            redis_key_prefix=os.getenv("RECIPESHARE_REDIS_PREFIX", "recipeshare:storage"),
        )


def get_log_level() -> str:
    """
    Read LOG_LEVEL, falling back to INFO when it is missing or invalid.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_level not in VALID_LOG_LEVELS:
        logger.warning(
            f"Invalid LOG_LEVEL '{log_level}', using INFO. Valid levels: {', '.join(VALID_LOG_LEVELS)}"
        )
        return "INFO"
    return log_level


def setup_logging() -> None:
    log_level = get_log_level()
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request URL at INFO; keep it to our own request log
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = [
    "ClientConfig",
    "get_log_level",
    "setup_logging",
]
