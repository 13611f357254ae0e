# 📄 File: user_directory/modules/user_management/infrastructure/memory/memory_user_record_store.py
# 🧭 Purpose (Layman Explanation):
# A store that keeps user profiles only in the running program's memory. Handy for local
# runs and tests; everything is gone on restart.
# 🧪 Purpose (Technical Summary):
# Dict-backed UserRecordStore with configurable capabilities, so any deployment
# variant's behaviour can be reproduced without an external backend.
# 🔗 Dependencies:
# codec (keys), domain models
# 🔄 Connected Modules / Calls From:
# infrastructure.factory ("memory" backend), tests

import logging
from typing import Any, Dict, List, Optional

from user_directory.modules.user_management.domain.models.lookup import LookupResult
from user_directory.modules.user_management.domain.models.user_record import UserRecord
from user_directory.modules.user_management.domain.repositories.user_record_store import (
    KEY_VALUE_CAPABILITIES,
    StoreCapabilities,
    UserRecordStore,
)
from user_directory.modules.user_management.infrastructure.codec import (
    DEFAULT_KEY_PREFIX,
    storage_key,
)
from user_directory.shared.core.exceptions import (
    DuplicateResourceError,
    UnsupportedOperationError,
)

logger = logging.getLogger(__name__)


class InMemoryUserRecordStore(UserRecordStore):
    """Process-local record store."""

    backend_name = "memory"

    def __init__(
        self,
        capabilities: Optional[StoreCapabilities] = None,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ):
        self.capabilities = capabilities or KEY_VALUE_CAPABILITIES
        self.key_prefix = key_prefix
        self._records: Dict[str, UserRecord] = {}

    async def connect(self) -> None:
        logger.info("In-memory record store ready")

    async def close(self) -> None:
        pass

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy", "backend": self.backend_name, "records": len(self._records)}

    def _key(self, key: str) -> str:
        return storage_key(key, self.key_prefix)

    async def get_by_key(self, key: str) -> LookupResult:
        record = self._records.get(self._key(key))
        if record is None:
            return LookupResult.not_found()
        return LookupResult.found(record.model_copy())

    async def get_by_attribute(self, attribute: str, value: str) -> LookupResult:
        if not self.capabilities.secondary_lookup:
            raise UnsupportedOperationError(
                operation="get_by_attribute", backend=self.backend_name
            )

        field = "id" if attribute == "_id" else attribute
        for record in self._records.values():
            if getattr(record, field) == value:
                return LookupResult.found(record.model_copy())
        return LookupResult.not_found()

    async def exists(self, key: str) -> bool:
        return self._key(key) in self._records

    async def list_keys(self) -> List[str]:
        return list(self._records)

    async def scan_all(self) -> List[UserRecord]:
        if not self.capabilities.bulk_scan:
            raise UnsupportedOperationError(operation="scan_all", backend=self.backend_name)
        return [record.model_copy() for record in self._records.values()]

    async def put(self, record: UserRecord) -> None:
        self._records[self._key(record.id)] = record.model_copy()

    async def insert(self, record: UserRecord) -> None:
        if self.capabilities.insert_on_register and await self.exists(record.id):
            raise DuplicateResourceError(
                message="A user with this id already exists",
                resource_type="user",
                field="id",
                value=record.id,
            )
        await self.put(record)

    async def delete_by_key(self, key: str) -> bool:
        return self._records.pop(self._key(key), None) is not None

    async def flush(self) -> int:
        if not self.capabilities.flush:
            raise UnsupportedOperationError(operation="flush", backend=self.backend_name)
        count = len(self._records)
        self._records.clear()
        return count
