# 📄 File: user_directory/modules/user_management/infrastructure/cache/redis_user_record_store.py
# 🧭 Purpose (Layman Explanation):
# Keeps each user profile in Redis as a small JSON text stored under "user:<id>", and knows
# how to find, list, delete and wipe those entries.
#
# 🧪 Purpose (Technical Summary):
# redis.asyncio implementation of UserRecordStore for the key_value variant: one JSON blob
# per prefixed key, key enumeration via SCAN (no secondary lookup, no bulk scan), and
# namespace flush. The client comes from RedisConfig's pooled connection.
#
# 🔗 Dependencies:
# - redis (redis.asyncio client, RedisError)
# - user_directory.shared.config.redis (RedisConfig)
# - user_directory.modules.user_management.infrastructure.codec (blob encoding, keys)
#
# 🔄 Connected Modules / Calls From:
# - user_directory.modules.user_management.infrastructure.factory

import logging
from typing import Any, Dict, List, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from user_directory.modules.user_management.domain.models.lookup import LookupResult
from user_directory.modules.user_management.domain.models.user_record import UserRecord
from user_directory.modules.user_management.domain.repositories.user_record_store import (
    KEY_VALUE_CAPABILITIES,
    UserRecordStore,
)
from user_directory.modules.user_management.infrastructure.codec import (
    DEFAULT_KEY_PREFIX,
    decode_blob,
    encode_blob,
    storage_key,
)
from user_directory.shared.config.redis import RedisConfig
from user_directory.shared.core.exceptions import StorageError


logger = logging.getLogger(__name__)

# Redis failures plus socket-level errors raised before redis-py wraps them
BACKEND_ERRORS = (RedisError, OSError)


class RedisUserRecordStore(UserRecordStore):
    """Key-value record store backed by Redis."""

    backend_name = "key_value"
    capabilities = KEY_VALUE_CAPABILITIES

    def __init__(
        self,
        redis_config: Optional[RedisConfig] = None,
        client: Optional[Redis] = None,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        scan_count: int = 500,
    ):
        """
        Initialize the Redis store.

        Args:
            redis_config: Pool / client configuration, used when no client is given
            client: Pre-built async client (tests inject one)
            key_prefix: Namespace tag prepended to every record id
            scan_count: SCAN batch size hint
        """
        self._config = redis_config
        self._client = client
        self._owns_client = client is None
        self.key_prefix = key_prefix
        self.scan_count = scan_count

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def connect(self) -> None:
        if self._client is None:
            self._config = self._config or RedisConfig()
            self._client = self._config.create_redis_client()
        logger.info(f"Redis record store ready (prefix={self.key_prefix!r})")

    async def close(self) -> None:
        if self._owns_client and self._config is not None:
            await self._config.close_connections()
            self._client = None
        logger.info("Redis record store closed")

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self._redis.ping()
            return {"status": "healthy", "backend": self.backend_name}
        except (BACKEND_ERRORS + (StorageError,)) as e:
            logger.error(f"Redis health check failed: {str(e)}")
            return {"status": "unhealthy", "backend": self.backend_name, "error": str(e)}

    @property
    def _redis(self) -> Redis:
        if self._client is None:
            raise StorageError(message="Record store is not connected", operation="client")
        return self._client

    def _key(self, key: str) -> str:
        return storage_key(key, self.key_prefix)

    # =========================================================================
    # READS
    # =========================================================================

    async def get_by_key(self, key: str) -> LookupResult:
        redis_key = self._key(key)
        try:
            raw = await self._redis.get(redis_key)
        except (BACKEND_ERRORS + (StorageError,)) as e:
            logger.error(f"Redis error reading {redis_key}: {str(e)}")
            return LookupResult.failed(e)

        if raw is None:
            return LookupResult.not_found()

        try:
            return LookupResult.found(decode_blob(raw))
        except StorageError as e:
            logger.warning(f"Undecodable record blob under {redis_key}")
            return LookupResult.failed(e)

    async def exists(self, key: str) -> bool:
        redis_key = self._key(key)
        try:
            return bool(await self._redis.exists(redis_key))
        except BACKEND_ERRORS as e:
            logger.error(f"Redis error checking {redis_key}: {str(e)}")
            raise StorageError(
                message="Failed to check record existence", operation="exists", key=redis_key
            ) from e

    async def list_keys(self) -> List[str]:
        try:
            keys = [
                key async for key in self._redis.scan_iter(
                    match=f"{self.key_prefix}*", count=self.scan_count
                )
            ]
        except BACKEND_ERRORS as e:
            logger.error(f"Redis error enumerating keys: {str(e)}")
            raise StorageError(message="Failed to list record keys", operation="list_keys") from e

        # SCAN may return a key more than once
        return list(dict.fromkeys(keys))

    # =========================================================================
    # WRITES
    # =========================================================================

    async def put(self, record: UserRecord) -> None:
        redis_key = self._key(record.id)
        try:
            await self._redis.set(redis_key, encode_blob(record))
            logger.debug(f"Stored user record under {redis_key}")
        except BACKEND_ERRORS as e:
            logger.error(f"Redis error writing {redis_key}: {str(e)}")
            raise StorageError(
                message="Failed to store record", operation="put", key=redis_key
            ) from e

    async def delete_by_key(self, key: str) -> bool:
        redis_key = self._key(key)
        try:
            return (await self._redis.delete(redis_key)) > 0
        except BACKEND_ERRORS as e:
            logger.error(f"Redis error deleting {redis_key}: {str(e)}")
            raise StorageError(
                message="Failed to delete record", operation="delete", key=redis_key
            ) from e

    async def flush(self) -> int:
        """Delete every key in the record namespace (never FLUSHDB)."""
        keys = await self.list_keys()
        if not keys:
            return 0

        try:
            return await self._redis.delete(*keys)
        except BACKEND_ERRORS as e:
            logger.error(f"Redis error flushing record namespace: {str(e)}")
            raise StorageError(message="Failed to flush records", operation="flush") from e
