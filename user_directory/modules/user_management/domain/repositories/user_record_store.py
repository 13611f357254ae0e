# 📄 File: user_directory/modules/user_management/domain/repositories/user_record_store.py
# 🧭 Purpose (Layman Explanation):
# Defines the contract for how to save, find, list and delete user profiles without
# saying which database actually holds them.
# 🧪 Purpose (Technical Summary):
# Repository interface (storage adapter) for UserRecord entities, plus the capability
# flags through which each backend declares which lookup/listing/write paths it offers.
# 🔗 Dependencies:
# Domain models (UserRecord, LookupResult), abc, dataclasses
# 🔄 Connected Modules / Calls From:
# Domain services, infrastructure implementations, store factory

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List

from user_directory.shared.core.exceptions import UnsupportedOperationError

from ..models.lookup import LookupResult
from ..models.user_record import UserRecord


@dataclass(frozen=True)
class StoreCapabilities:
    """
    What a backend can do natively.

    Attributes:
        secondary_lookup: Indexed lookup by phone number is available
        bulk_scan: One query returns every record (no per-key fan-out needed)
        insert_on_register: Register writes with insert semantics instead of overwrite
        flush: The whole record namespace can be cleared
    """

    secondary_lookup: bool = False
    bulk_scan: bool = False
    insert_on_register: bool = False
    flush: bool = False


# Capability profiles of the three deployment variants
# Insert-on-register: registering an id that is already stored answers 409
# (DuplicateResourceError) rather than succeeding without a write.
DOCUMENT_CAPABILITIES = StoreCapabilities(
    secondary_lookup=True, bulk_scan=True, insert_on_register=True, flush=False
)
DOCUMENT_CACHE_CAPABILITIES = StoreCapabilities(
    secondary_lookup=False, bulk_scan=True, insert_on_register=False, flush=True
)
KEY_VALUE_CAPABILITIES = StoreCapabilities(
    secondary_lookup=False, bulk_scan=False, insert_on_register=False, flush=True
)


class UserRecordStore(ABC):
    """
    Repository interface for UserRecord persistence.

    Implementation Notes:
    - Read methods return LookupResult and never raise for backend failures;
      the failure is carried in the result so callers can tell it apart
      from a missing record
    - Write methods raise StorageError when the backend fails
    - ``key`` arguments accept either a bare identifier or a full storage
      key; implementations derive the storage key idempotently
    - One instance is shared by all concurrent requests of the process
    """

    backend_name: str = "abstract"
    capabilities: StoreCapabilities = StoreCapabilities()
    key_prefix: str = ""

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @abstractmethod
    async def connect(self) -> None:
        """Open connections / pools. Called once at startup."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections / pools. Called once at shutdown."""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Check backend connectivity.

        Returns:
            Dict with at least a ``status`` of "healthy" or "unhealthy"
        """
        pass

    # =========================================================================
    # READS
    # =========================================================================

    @abstractmethod
    async def get_by_key(self, key: str) -> LookupResult:
        """
        Get a record by primary key.

        Args:
            key: Record identifier or storage key

        Returns:
            LookupResult: found / not found / backend error
        """
        pass

    async def get_by_attribute(self, attribute: str, value: str) -> LookupResult:
        """
        Get a record by a secondary attribute (phone number).

        Only available where ``capabilities.secondary_lookup`` is set.

        Args:
            attribute: Document field name, e.g. "phone_number"
            value: Value to match

        Returns:
            LookupResult: first matching record, not found, or backend error
        """
        raise UnsupportedOperationError(
            operation="get_by_attribute", backend=self.backend_name
        )

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """
        Check whether a record is stored under the key.

        Raises:
            StorageError: If the backend fails
        """
        pass

    @abstractmethod
    async def list_keys(self) -> List[str]:
        """
        Enumerate the storage keys of every record in the namespace.

        Raises:
            StorageError: If the backend fails
        """
        pass

    async def scan_all(self) -> List[UserRecord]:
        """
        Return every record in one server-side query.

        Only available where ``capabilities.bulk_scan`` is set.

        Raises:
            StorageError: If the backend fails
        """
        raise UnsupportedOperationError(operation="scan_all", backend=self.backend_name)

    # =========================================================================
    # WRITES
    # =========================================================================

    @abstractmethod
    async def put(self, record: UserRecord) -> None:
        """
        Upsert: store the record as a full replacement under its id.

        Raises:
            StorageError: If the backend fails
        """
        pass

    async def insert(self, record: UserRecord) -> None:
        """
        Store a new record. Backends without insert semantics overwrite.

        Raises:
            DuplicateResourceError: If the id is already stored (insert backends)
            StorageError: If the backend fails
        """
        await self.put(record)

    @abstractmethod
    async def delete_by_key(self, key: str) -> bool:
        """
        Delete the record under the key. Deleting a missing key is not an error.

        Returns:
            bool: True if something was removed

        Raises:
            StorageError: If the backend fails
        """
        pass

    async def flush(self) -> int:
        """
        Remove every record in the namespace.

        Only available where ``capabilities.flush`` is set.

        Returns:
            int: Number of records removed
        """
        raise UnsupportedOperationError(operation="flush", backend=self.backend_name)
