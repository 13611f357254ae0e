# 📄 File: user_directory/modules/user_management/domain/services/user_service.py
# 🧭 Purpose (Layman Explanation):
# The single front desk of the directory: every request (register, update, look up,
# list, delete, wipe) comes through here and is handed to the right specialist.
# 🧪 Purpose (Technical Summary):
# Domain service facade combining the identity resolution engine, the listing
# aggregator and direct store access, converting tagged lookup results into domain
# exceptions and emitting audit events for every mutation.
# 🔗 Dependencies:
# IdentityResolutionEngine, ListingAggregator, UserRecordStore, validators, structured logging
# 🔄 Connected Modules / Calls From:
# presentation/api/v1/users.py (through presentation/dependencies.py), user_directory.main

import logging
from typing import Any, Dict, List, Optional

from user_directory.shared.core.exceptions import (
    NotFoundError,
    UnsupportedOperationError,
    ValidationError,
)
from user_directory.shared.utils.logging import get_logger
from user_directory.shared.utils.validators import validate_phone_number, validate_uuid

from ..models.user_record import UserRecord
from ..repositories.user_record_store import UserRecordStore
from .identity_service import PHONE_ATTRIBUTE, IdentityResolutionEngine, UpdateOutcome
from .listing_service import DEFAULT_READ_TIMEOUT_SECONDS, ListingAggregator

logger = logging.getLogger(__name__)
audit_logger = get_logger("user_directory.audit")


class UserDirectoryService:
    """
    Domain service for the user directory.

    One instance is created at startup around the process-wide store and
    shared by all requests.
    """

    def __init__(
        self,
        store: UserRecordStore,
        register_requires_phone: Optional[bool] = None,
        read_timeout: float = DEFAULT_READ_TIMEOUT_SECONDS,
    ):
        self.store = store
        self.identity = IdentityResolutionEngine(store, register_requires_phone)
        self.listing = ListingAggregator(store, read_timeout)

    # =========================================================================
    # WRITES
    # =========================================================================

    async def register(self, candidate: UserRecord) -> UserRecord:
        """
        Register a user profile.

        Args:
            candidate: Incoming record, id optional

        Returns:
            UserRecord: The persisted record
        """
        outcome = await self.identity.register(candidate)

        audit_logger.log_business_event(
            event_type="user_registered",
            description=f"User record {outcome.record.id} registered",
            entity_id=outcome.record.id,
            entity_type="user",
            extra={"resolution": outcome.resolution.value},
        )
        return outcome.record

    async def update(self, candidate: UserRecord) -> UpdateOutcome:
        """
        Update a user profile located by id and/or phone number.

        Returns:
            UpdateOutcome: For conditional stores only ``written`` is meaningful
            to callers
        """
        outcome = await self.identity.update(candidate)

        if outcome.written:
            audit_logger.log_business_event(
                event_type="user_updated",
                description=f"User record {outcome.record.id} updated",
                entity_id=outcome.record.id,
                entity_type="user",
                extra={"resolution": outcome.resolution.value},
            )
        return outcome

    async def delete(self, identifier: str) -> bool:
        """
        Delete a record by id. Deleting a missing id is not an error.

        Returns:
            bool: True if a record was removed
        """
        deleted = await self.store.delete_by_key(identifier)

        if deleted:
            audit_logger.log_business_event(
                event_type="user_deleted",
                description=f"User record {identifier} deleted",
                entity_id=identifier,
                entity_type="user",
            )
        else:
            logger.debug(f"Delete of unknown id {identifier} ignored")
        return deleted

    async def flush(self) -> int:
        """Clear the whole record namespace (flushable stores only)."""
        if not self.store.capabilities.flush:
            raise UnsupportedOperationError(operation="flush", backend=self.store.backend_name)

        removed = await self.store.flush()

        audit_logger.log_business_event(
            event_type="users_flushed",
            description=f"Record namespace flushed ({removed} records)",
            extra={"removed": removed},
        )
        return removed

    # =========================================================================
    # READS
    # =========================================================================

    async def get_profile(self, identifier: str) -> UserRecord:
        """
        Get a record by id.

        Raises:
            ValidationError: If the id is not a UUID
            NotFoundError: If no record is stored under the id
            StorageError: If the backend cannot answer
        """
        check = validate_uuid(identifier)
        if not check:
            raise ValidationError(
                message="Invalid user id",
                field="id",
                value=identifier,
                constraint="uuid",
            )

        result = await self.store.get_by_key(identifier)
        result.raise_for_backend_error("get_profile", identifier)

        if not result.is_found:
            raise NotFoundError(message="User not found", resource_type="user", resource_id=identifier)
        return result.record

    async def get_by_phone(self, phone_number: str) -> UserRecord:
        """
        Get a record by phone number (phone-lookup stores only).

        The phone format is checked but a mismatch is only logged.

        Raises:
            UnsupportedOperationError: If the store has no phone lookup
            NotFoundError: If no record carries the phone number
            StorageError: If the backend cannot answer
        """
        if not self.store.capabilities.secondary_lookup:
            raise UnsupportedOperationError(
                operation="get_by_phone", backend=self.store.backend_name
            )

        check = validate_phone_number(phone_number)
        if not check:
            logger.warning(f"Phone number lookup with unexpected format: {phone_number!r}")

        result = await self.store.get_by_attribute(PHONE_ATTRIBUTE, phone_number)
        result.raise_for_backend_error("get_by_phone", phone_number)

        if not result.is_found:
            raise NotFoundError(
                message="User not found", resource_type="user", resource_id=phone_number
            )
        return result.record

    async def list_profiles(self) -> List[UserRecord]:
        return await self.listing.list_records()

    async def list_identifiers(self) -> List[str]:
        return await self.listing.list_identifiers()

    async def health(self) -> Dict[str, Any]:
        return await self.store.health_check()
