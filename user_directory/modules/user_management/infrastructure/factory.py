# 📄 File: user_directory/modules/user_management/infrastructure/factory.py
# 🧭 Purpose (Layman Explanation):
# Picks the right kind of storage (SQL, Redis, or memory) based on the configuration.
# 🧪 Purpose (Technical Summary):
# Builds the single UserRecordStore instance of the process from Settings.STORAGE_BACKEND.
# 🔗 Dependencies:
# Settings, DatabaseConfig, RedisConfig, concrete stores
# 🔄 Connected Modules / Calls From:
# user_directory.main (application lifespan)

import logging
from typing import Optional

from user_directory.modules.user_management.domain.repositories.user_record_store import (
    UserRecordStore,
)
from user_directory.shared.config.database import DatabaseConfig
from user_directory.shared.config.redis import RedisConfig
from user_directory.shared.config.settings import Settings, get_settings

from .cache.redis_user_record_store import RedisUserRecordStore
from .database.user_record_store_impl import SQLUserRecordStore
from .memory.memory_user_record_store import InMemoryUserRecordStore

logger = logging.getLogger(__name__)


def build_user_record_store(settings: Optional[Settings] = None) -> UserRecordStore:
    """
    Build the record store selected by ``STORAGE_BACKEND``.

    The store is returned unconnected; the caller owns its lifecycle.

    Args:
        settings: Application settings (defaults to the cached singleton)

    Returns:
        UserRecordStore: Store for the configured variant
    """
    settings = settings or get_settings()
    backend = settings.STORAGE_BACKEND

    if backend in ("document", "document_cache"):
        store: UserRecordStore = SQLUserRecordStore(
            database_config=DatabaseConfig(settings),
            mode=backend,
            create_tables=settings.DB_CREATE_TABLES,
        )
    elif backend == "key_value":
        store = RedisUserRecordStore(
            redis_config=RedisConfig(settings),
            key_prefix=settings.REDIS_KEY_PREFIX,
            scan_count=settings.REDIS_SCAN_COUNT,
        )
    elif backend == "memory":
        store = InMemoryUserRecordStore(key_prefix=settings.REDIS_KEY_PREFIX)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.info(f"Using {type(store).__name__} for storage backend '{backend}'")
    return store
