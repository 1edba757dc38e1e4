"""Snippet persistence backends."""

from __future__ import annotations

import redis

from ..config import BACKEND_REDIS, AppSettings
from .base import ProgressCallback, SnippetStore
from .local import FileSlot, KeyValueSlot, LocalSnippetStore, RedisSlot
from .remote import MongoSnippetStore


def create_store(settings: AppSettings) -> SnippetStore:
    """Build the store selected by ``settings``."""

    if settings.is_remote:
        if not settings.mongo_url:
            raise ValueError("MONGODB_URL must be set for remote mode")
        return MongoSnippetStore.from_url(
            settings.mongo_url,
            database=settings.mongo_database,
            collection=settings.mongo_collection,
        )

    if settings.local_backend == BACKEND_REDIS:
        slot: KeyValueSlot = RedisSlot(
            redis.Redis.from_url(settings.redis_url),
            key=settings.storage_key,
        )
    else:
        slot = FileSlot(settings.local_path)
    return LocalSnippetStore(slot)


__all__ = [
    "FileSlot",
    "KeyValueSlot",
    "LocalSnippetStore",
    "MongoSnippetStore",
    "ProgressCallback",
    "RedisSlot",
    "SnippetStore",
    "create_store",
]
