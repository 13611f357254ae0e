"""Tests for SQLUserRecordStore on a temporary SQLite database (aiosqlite)."""

import pytest
import pytest_asyncio

from tests.conftest import make_settings
from user_directory.modules.user_management.domain.models.user_record import UserRecord
from user_directory.modules.user_management.infrastructure.database.user_record_store_impl import (
    SQLUserRecordStore,
)
from user_directory.shared.config.database import DatabaseConfig
from user_directory.shared.core.exceptions import (
    DuplicateResourceError,
    UnsupportedOperationError,
)

ADA_ID = "3f2b8a52-5c7e-4d0a-9a57-2f4b1f7e0c11"
BOB_ID = "1c6f2e1a-7d4b-4c5e-8a1f-3e2d9b6c4a70"


def _config(tmp_path) -> DatabaseConfig:
    return DatabaseConfig(
        settings=make_settings(),
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'directory.db'}",
    )


@pytest_asyncio.fixture
async def document_store(tmp_path):
    store = SQLUserRecordStore(_config(tmp_path), mode="document")
    await store.connect()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def cache_store(tmp_path):
    store = SQLUserRecordStore(_config(tmp_path), mode="document_cache")
    await store.connect()
    yield store
    await store.close()


class TestSQLStoreModes:
    def test_unknown_mode_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            SQLUserRecordStore(_config(tmp_path), mode="graph")

    def test_document_capabilities(self, tmp_path):
        store = SQLUserRecordStore(_config(tmp_path), mode="document")
        assert store.capabilities.secondary_lookup
        assert store.capabilities.insert_on_register
        assert not store.capabilities.flush

    def test_document_cache_capabilities(self, tmp_path):
        store = SQLUserRecordStore(_config(tmp_path), mode="document_cache")
        assert not store.capabilities.secondary_lookup
        assert store.capabilities.bulk_scan
        assert store.capabilities.flush

    @pytest.mark.asyncio
    async def test_lookup_before_connect_is_backend_error(self, tmp_path):
        store = SQLUserRecordStore(_config(tmp_path))
        assert (await store.get_by_key(ADA_ID)).is_backend_error


class TestDocumentMode:
    @pytest.mark.asyncio
    async def test_insert_and_get(self, document_store):
        record = UserRecord(name="Ada", phone_number="+15550001", image_url="a.png", id=ADA_ID)
        await document_store.insert(record)

        result = await document_store.get_by_key(ADA_ID)

        assert result.is_found
        assert result.record == record

    @pytest.mark.asyncio
    async def test_duplicate_insert_rejected(self, document_store):
        await document_store.insert(UserRecord(phone_number="+15550001", id=ADA_ID))

        with pytest.raises(DuplicateResourceError):
            await document_store.insert(UserRecord(phone_number="+15550002", id=ADA_ID))

    @pytest.mark.asyncio
    async def test_lookup_by_phone(self, document_store):
        await document_store.insert(UserRecord(name="Ada", phone_number="+15550001", id=ADA_ID))
        await document_store.insert(UserRecord(name="Bob", phone_number="+15550002", id=BOB_ID))

        result = await document_store.get_by_attribute("phone_number", "+15550002")
        missing = await document_store.get_by_attribute("phone_number", "+15559999")

        assert result.is_found and result.record.id == BOB_ID
        assert not missing.is_found and not missing.is_backend_error

    @pytest.mark.asyncio
    async def test_put_replaces_whole_record(self, document_store):
        await document_store.insert(
            UserRecord(name="Ada", status="busy", phone_number="+15550001", id=ADA_ID)
        )
        await document_store.put(UserRecord(name="Ada L.", phone_number="+15550001", id=ADA_ID))

        record = (await document_store.get_by_key(ADA_ID)).record

        assert record.name == "Ada L."
        assert record.status == ""

    @pytest.mark.asyncio
    async def test_scan_and_list_keys(self, document_store):
        await document_store.insert(UserRecord(name="Ada", id=ADA_ID))
        await document_store.insert(UserRecord(name="Bob", id=BOB_ID))

        records = await document_store.scan_all()

        assert {record.name for record in records} == {"Ada", "Bob"}
        assert sorted(await document_store.list_keys()) == sorted([ADA_ID, BOB_ID])

    @pytest.mark.asyncio
    async def test_delete_and_exists(self, document_store):
        await document_store.insert(UserRecord(id=ADA_ID))

        assert await document_store.exists(ADA_ID)
        assert await document_store.delete_by_key(ADA_ID) is True
        assert await document_store.delete_by_key(ADA_ID) is False
        assert not await document_store.exists(ADA_ID)

    @pytest.mark.asyncio
    async def test_flush_unsupported(self, document_store):
        with pytest.raises(UnsupportedOperationError):
            await document_store.flush()

    @pytest.mark.asyncio
    async def test_health_check(self, document_store):
        assert (await document_store.health_check())["status"] == "healthy"


class TestDocumentCacheMode:
    @pytest.mark.asyncio
    async def test_insert_overwrites(self, cache_store):
        await cache_store.insert(UserRecord(name="Old", id=ADA_ID))
        await cache_store.insert(UserRecord(name="New", id=ADA_ID))

        assert (await cache_store.get_by_key(ADA_ID)).record.name == "New"

    @pytest.mark.asyncio
    async def test_phone_lookup_unsupported(self, cache_store):
        with pytest.raises(UnsupportedOperationError):
            await cache_store.get_by_attribute("phone_number", "+15550001")

    @pytest.mark.asyncio
    async def test_flush(self, cache_store):
        await cache_store.put(UserRecord(id=ADA_ID))
        await cache_store.put(UserRecord(id=BOB_ID))

        assert await cache_store.flush() == 2
        assert await cache_store.list_keys() == []
