"""Tests for RedisUserRecordStore against an async Redis double."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tests.conftest import FakeAsyncRedis
from user_directory.modules.user_management.domain.models.user_record import UserRecord
from user_directory.modules.user_management.infrastructure.cache.redis_user_record_store import (
    RedisUserRecordStore,
)
from user_directory.shared.core.exceptions import StorageError, UnsupportedOperationError

RECORD_ID = "3f2b8a52-5c7e-4d0a-9a57-2f4b1f7e0c11"


@pytest.fixture
def store(fake_redis) -> RedisUserRecordStore:
    return RedisUserRecordStore(client=fake_redis)


class TestRedisStoreInit:
    def test_capabilities(self, store):
        assert store.backend_name == "key_value"
        assert store.capabilities.flush
        assert not store.capabilities.secondary_lookup
        assert not store.capabilities.bulk_scan
        assert store.key_prefix == "user:"

    @pytest.mark.asyncio
    async def test_not_connected_lookup_is_backend_error(self):
        result = await RedisUserRecordStore().get_by_key(RECORD_ID)
        assert result.is_backend_error


class TestRedisStoreReadsAndWrites:
    @pytest.mark.asyncio
    async def test_put_stores_json_blob_under_prefixed_key(self, store, fake_redis):
        await store.put(UserRecord(name="Ada", phone_number="+15550001", id=RECORD_ID))

        stored = json.loads(fake_redis.data[f"user:{RECORD_ID}"])
        assert stored["_id"] == RECORD_ID
        assert stored["phone_number"] == "+15550001"

    @pytest.mark.asyncio
    async def test_get_accepts_bare_id_or_key(self, store):
        await store.put(UserRecord(name="Ada", id=RECORD_ID))

        by_id = await store.get_by_key(RECORD_ID)
        by_key = await store.get_by_key(f"user:{RECORD_ID}")

        assert by_id.is_found and by_key.is_found
        assert by_id.record == by_key.record

    @pytest.mark.asyncio
    async def test_missing_key_is_not_found(self, store):
        result = await store.get_by_key(RECORD_ID)
        assert not result.is_found
        assert not result.is_backend_error

    @pytest.mark.asyncio
    async def test_undecodable_blob_is_backend_error(self, store, fake_redis):
        fake_redis.data[f"user:{RECORD_ID}"] = "{broken"

        result = await store.get_by_key(RECORD_ID)

        assert result.is_backend_error
        assert isinstance(result.error, StorageError)

    @pytest.mark.asyncio
    async def test_exists_and_delete(self, store):
        await store.put(UserRecord(id=RECORD_ID))

        assert await store.exists(RECORD_ID)
        assert await store.delete_by_key(RECORD_ID) is True
        assert await store.delete_by_key(RECORD_ID) is False
        assert not await store.exists(RECORD_ID)

    @pytest.mark.asyncio
    async def test_phone_lookup_and_scan_are_unsupported(self, store):
        with pytest.raises(UnsupportedOperationError):
            await store.get_by_attribute("phone_number", "+15550001")
        with pytest.raises(UnsupportedOperationError):
            await store.scan_all()


class TestRedisStoreNamespace:
    @pytest.mark.asyncio
    async def test_list_keys_only_returns_namespace(self, store, fake_redis):
        await store.put(UserRecord(id=RECORD_ID))
        fake_redis.data["session:abc"] = "other"

        assert await store.list_keys() == [f"user:{RECORD_ID}"]

    @pytest.mark.asyncio
    async def test_flush_leaves_foreign_keys(self, store, fake_redis):
        await store.put(UserRecord(id=RECORD_ID))
        await store.put(UserRecord(id="1c6f2e1a-7d4b-4c5e-8a1f-3e2d9b6c4a70"))
        fake_redis.data["session:abc"] = "other"

        assert await store.flush() == 2
        assert fake_redis.data == {"session:abc": "other"}

    @pytest.mark.asyncio
    async def test_flush_empty_namespace(self, store):
        assert await store.flush() == 0


class TestRedisStoreFailures:
    @pytest.mark.asyncio
    async def test_read_failure_is_backend_error(self):
        client = FakeAsyncRedis()
        client.get = AsyncMock(side_effect=RedisConnectionError("refused"))
        store = RedisUserRecordStore(client=client)

        result = await store.get_by_key(RECORD_ID)

        assert result.is_backend_error

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self):
        client = FakeAsyncRedis()
        client.set = AsyncMock(side_effect=RedisConnectionError("refused"))
        store = RedisUserRecordStore(client=client)

        with pytest.raises(StorageError) as exc_info:
            await store.put(UserRecord(id=RECORD_ID))
        assert exc_info.value.details["key"] == f"user:{RECORD_ID}"

    @pytest.mark.asyncio
    async def test_health_check(self, store):
        assert (await store.health_check())["status"] == "healthy"

        store._client.ping = AsyncMock(side_effect=RedisConnectionError("refused"))
        health = await store.health_check()
        assert health["status"] == "unhealthy"


class TestRedisStoreLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, store, fake_redis):
        await store.connect()
        await store.close()
        assert fake_redis.closed is False

    @pytest.mark.asyncio
    async def test_owned_client_comes_from_config(self, fake_redis):
        config = MagicMock()
        config.create_redis_client.return_value = fake_redis
        config.close_connections = AsyncMock()
        store = RedisUserRecordStore(redis_config=config)

        await store.connect()
        await store.put(UserRecord(id=RECORD_ID))
        await store.close()

        config.create_redis_client.assert_called_once()
        config.close_connections.assert_awaited_once()
        assert f"user:{RECORD_ID}" in fake_redis.data
