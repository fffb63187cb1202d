"""
Review Storage Module
=====================

Pluggable persistence for canonical reviews.

Backends:
    - memory: MemoryReviewStorage (default)
    - file:   JsonFileReviewStorage (reviews.json + meta.json)
    - sql:    SqlReviewStorage (SQLAlchemy, SQLite by default)

Usage:
    from src.storage import create_storage

    storage = create_storage()          # uses STORAGE_BACKEND
    storage.save(reviews)
"""

import logging

from .base import ReviewStorage
from .file_storage import JsonFileReviewStorage
from .memory import MemoryReviewStorage
from .sql_storage import SqlReviewStorage

logger = logging.getLogger(__name__)


def create_storage(config=None) -> ReviewStorage:
    """
    Build the storage adapter selected by configuration.

    Args:
        config: StorageConfig (if None, loaded from settings)

    Returns:
        A ready ReviewStorage
    """
    if config is None:
        from ..data.config import get_settings
        config = get_settings().storage

    logger.info(f"Creating review storage: backend={config.backend}")
    if config.backend == "file":
        return JsonFileReviewStorage(config.data_dir)
    if config.backend == "sql":
        return SqlReviewStorage(config.database_url)
    return MemoryReviewStorage()


__all__ = [
    "ReviewStorage",
    "MemoryReviewStorage",
    "JsonFileReviewStorage",
    "SqlReviewStorage",
    "create_storage",
]
