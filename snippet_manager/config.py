"""Runtime configuration for the snippet manager."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("snippet_manager")

MODE_LOCAL = "local"
MODE_REMOTE = "remote"

BACKEND_FILE = "file"
BACKEND_REDIS = "redis"

DEFAULT_STORAGE_KEY = "codeSnippets"
DEFAULT_LOCAL_PATH = Path.home() / ".snippet_manager" / f"{DEFAULT_STORAGE_KEY}.json"


@dataclass(slots=True)
class AppSettings:
    """Which store to use and how to reach it."""

    mode: str = MODE_LOCAL
    local_backend: str = BACKEND_FILE
    local_path: Path = DEFAULT_LOCAL_PATH
    storage_key: str = DEFAULT_STORAGE_KEY
    redis_url: str = "redis://127.0.0.1:6379/0"
    mongo_url: str | None = None
    mongo_database: str = "code_snippets"
    mongo_collection: str = "snippets"
    log_level: str = "INFO"

    @property
    def is_remote(self) -> bool:
        return self.mode == MODE_REMOTE

    @classmethod
    def from_env(cls) -> "AppSettings":
        def _choice_env(name: str, choices: tuple[str, ...], default: str) -> str:
            raw = os.getenv(name)
            if not raw:
                return default
            value = raw.strip().lower()
            if value not in choices:
                logger.warning("Invalid value for %s: %s", name, raw)
                return default
            return value

        local_path = os.getenv("SNIPPETS_LOCAL_PATH")

        return cls(
            mode=_choice_env("SNIPPETS_MODE", (MODE_LOCAL, MODE_REMOTE), MODE_LOCAL),
            local_backend=_choice_env(
                "SNIPPETS_LOCAL_BACKEND", (BACKEND_FILE, BACKEND_REDIS), BACKEND_FILE
            ),
            local_path=Path(local_path).expanduser() if local_path else DEFAULT_LOCAL_PATH,
            storage_key=os.getenv("SNIPPETS_STORAGE_KEY", DEFAULT_STORAGE_KEY),
            redis_url=os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0"),
            mongo_url=os.getenv("MONGODB_URL"),
            mongo_database=os.getenv("MONGODB_DATABASE", "code_snippets"),
            mongo_collection=os.getenv("MONGODB_COLLECTION", "snippets"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


__all__ = [
    "AppSettings",
    "BACKEND_FILE",
    "BACKEND_REDIS",
    "DEFAULT_STORAGE_KEY",
    "MODE_LOCAL",
    "MODE_REMOTE",
]
