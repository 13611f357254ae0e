"""
Shared pytest fixtures for the user directory tests.

This module provides:
- Test settings that never read a local .env file
- In-memory record stores configured like each deployment variant
- An async Redis double for the key-value store
"""

import fnmatch
from typing import Dict, Optional

import pytest

from user_directory.modules.user_management.domain.repositories.user_record_store import (
    DOCUMENT_CAPABILITIES,
    KEY_VALUE_CAPABILITIES,
    StoreCapabilities,
)
from user_directory.modules.user_management.domain.services.user_service import (
    UserDirectoryService,
)
from user_directory.modules.user_management.infrastructure.memory.memory_user_record_store import (
    InMemoryUserRecordStore,
)
from user_directory.shared.config.settings import Settings

# Phone lookup without insert semantics or a phone requirement; the profile the
# register walkthrough (new id, backfill, phone match) needs
PHONE_LOOKUP_CAPABILITIES = StoreCapabilities(
    secondary_lookup=True, bulk_scan=True, insert_on_register=False, flush=True
)


# =============================================================================
# Settings
# =============================================================================


def make_settings(**overrides) -> Settings:
    values = {
        "ENVIRONMENT": "test",
        "DEBUG": False,
        "LOG_FORMAT": "text",
        "STORAGE_BACKEND": "memory",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


# =============================================================================
# Stores and services
# =============================================================================


@pytest.fixture
def phone_lookup_store() -> InMemoryUserRecordStore:
    return InMemoryUserRecordStore(capabilities=PHONE_LOOKUP_CAPABILITIES)


@pytest.fixture
def document_store() -> InMemoryUserRecordStore:
    return InMemoryUserRecordStore(capabilities=DOCUMENT_CAPABILITIES, key_prefix="")


@pytest.fixture
def key_value_store() -> InMemoryUserRecordStore:
    return InMemoryUserRecordStore(capabilities=KEY_VALUE_CAPABILITIES)


@pytest.fixture
def phone_lookup_service(phone_lookup_store) -> UserDirectoryService:
    return UserDirectoryService(phone_lookup_store, register_requires_phone=False)


@pytest.fixture
def document_service(document_store) -> UserDirectoryService:
    return UserDirectoryService(document_store)


@pytest.fixture
def key_value_service(key_value_store) -> UserDirectoryService:
    return UserDirectoryService(key_value_store, read_timeout=0.5)


# =============================================================================
# Redis double
# =============================================================================


class FakeAsyncRedis:
    """The subset of redis.asyncio.Redis the key-value store uses."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.closed = False

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self.data)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def scan_iter(self, match: Optional[str] = None, count: Optional[int] = None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeAsyncRedis:
    return FakeAsyncRedis()
