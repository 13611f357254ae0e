# 📄 File: user_directory/modules/user_management/domain/services/listing_service.py
# 🧭 Purpose (Layman Explanation):
# Builds the "everyone in the directory" lists. When the storage cannot hand over all
# profiles at once, it asks for each one in parallel and puts the answers together.
# 🧪 Purpose (Technical Summary):
# Aggregation engine: identifier listing with namespace stripping, and record listing
# via a single bulk scan or a fork-join fan-out (one task per key, joined with gather,
# each read bounded by a timeout). Failed reads become empty records in place.
# 🔗 Dependencies:
# asyncio, UserRecordStore, record codec
# 🔄 Connected Modules / Calls From:
# user_service.py (UserDirectoryService facade)

import asyncio
import logging
from typing import List

from user_directory.modules.user_management.infrastructure.codec import identifier_from_key
from user_directory.shared.core.exceptions import StorageError

from ..models.user_record import UserRecord
from ..repositories.user_record_store import UserRecordStore

logger = logging.getLogger(__name__)

DEFAULT_READ_TIMEOUT_SECONDS = 2.0


class ListingAggregator:
    """Lists identifiers and hydrated records from a record store."""

    def __init__(self, store: UserRecordStore, read_timeout: float = DEFAULT_READ_TIMEOUT_SECONDS):
        self.store = store
        self.read_timeout = read_timeout

    async def list_identifiers(self) -> List[str]:
        """
        Enumerate record identifiers, namespace prefix stripped.

        Raises:
            StorageError: If key enumeration fails
        """
        keys = await self.store.list_keys()
        return [identifier_from_key(key, self.store.key_prefix) for key in keys]

    async def list_records(self) -> List[UserRecord]:
        """
        Return every record.

        Bulk-scan stores answer with one query. Other stores are enumerated
        and each key is read concurrently; a read that fails, times out, or
        finds its key gone yields an empty record at that position.

        Raises:
            StorageError: If the scan or the key enumeration fails
        """
        if self.store.capabilities.bulk_scan:
            return await self.store.scan_all()

        keys = await self.store.list_keys()
        tasks = [asyncio.create_task(self._hydrate(key)) for key in keys]
        records = await asyncio.gather(*tasks)

        logger.debug(f"Hydrated {len(records)} records from {len(keys)} keys")
        return list(records)

    async def _hydrate(self, key: str) -> UserRecord:
        try:
            result = await asyncio.wait_for(self.store.get_by_key(key), timeout=self.read_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Read of {key} timed out after {self.read_timeout}s")
            return UserRecord()
        except StorageError as e:
            logger.warning(f"Read of {key} failed: {e.message}")
            return UserRecord()

        if result.is_found:
            return result.record

        if result.is_backend_error:
            logger.warning(f"Read of {key} failed: {result.error}")
        else:
            logger.warning(f"Key {key} vanished between enumeration and read")
        return UserRecord()
