"""
Configuration

All settings come from environment variables (optionally seeded from a
.env file) and are collected into an immutable Settings object that is
passed explicitly to build_cart_operations().
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_API_URL = "http://localhost:3333"
DEFAULT_STORAGE_KEY = "@shopcart:cart"
DEFAULT_STORAGE_PATH = ".shopcart/storage.json"

STORAGE_BACKENDS = ("file", "redis")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the cart manager."""
    api_url: str = DEFAULT_API_URL
    api_timeout: float = 10.0
    api_retries: int = 2
    storage_backend: str = "file"
    storage_key: str = DEFAULT_STORAGE_KEY
    storage_path: str = DEFAULT_STORAGE_PATH
    redis_url: str = ""
    redis_token: str = ""
    language: str = "en"

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unsupported storage backend: {self.storage_backend} "
                f"(use one of: {', '.join(STORAGE_BACKENDS)})"
            )
        if self.api_retries < 1:
            raise ValueError("api_retries must be >= 1")
        if self.api_timeout <= 0:
            raise ValueError("api_timeout must be > 0")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment."""
        return cls(
            api_url=os.environ.get("SHOPCART_API_URL", DEFAULT_API_URL).rstrip("/"),
            api_timeout=_env_float("SHOPCART_API_TIMEOUT", 10.0),
            api_retries=_env_int("SHOPCART_API_RETRIES", 2),
            storage_backend=os.environ.get("SHOPCART_STORAGE_BACKEND", "file").lower(),
            storage_key=os.environ.get("SHOPCART_STORAGE_KEY", DEFAULT_STORAGE_KEY),
            storage_path=os.environ.get("SHOPCART_STORAGE_PATH", DEFAULT_STORAGE_PATH),
            # Upstash uses REST_URL and REST_TOKEN
            redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
            language=os.environ.get("SHOPCART_LANGUAGE", "en"),
        )


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load settings, reading a .env file first if one is present.

    Variables already set in the environment take precedence over the file.
    """
    load_dotenv(env_file, override=False)
    return Settings.from_env()


__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_STORAGE_KEY",
    "DEFAULT_STORAGE_PATH",
    "STORAGE_BACKENDS",
    "Settings",
    "load_settings",
]
