# 📄 File: user_directory/modules/user_management/domain/services/identity_service.py
# 🧭 Purpose (Layman Explanation):
# A person can be recognised by their id or by their phone number. This file decides,
# when someone registers or updates a profile, which existing profile they are and
# how the incoming details are merged with what is already stored.
# 🧪 Purpose (Technical Summary):
# Dual-key identity resolution and upsert engine. Precedence between the phone-number
# match and the id match is held in decision tables (data), and the engine applies
# the selected resolution, merges, and persists through the UserRecordStore.
# 🔗 Dependencies:
# asyncio, UserRecordStore, record codec (identifier policy), shared exceptions
# 🔄 Connected Modules / Calls From:
# user_service.py (UserDirectoryService facade)

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from user_directory.modules.user_management.infrastructure.codec import resolve_identifier
from user_directory.shared.core.exceptions import NotFoundError, ValidationError

from ..models.lookup import LookupResult
from ..models.user_record import UserRecord
from ..repositories.user_record_store import UserRecordStore

logger = logging.getLogger(__name__)

PHONE_ATTRIBUTE = "phone_number"


# =============================================================================
# DECISION TABLES
# =============================================================================

class Resolution(str, Enum):
    """How an incoming record is reconciled with stored identities."""

    ADOPT_PHONE_IDENTITY = "adopt_phone_identity"
    INHERIT_FROM_ID = "inherit_from_id"
    CREATE = "create"
    ID_AUTHORITATIVE = "id_authoritative"
    REJECT_NOT_FOUND = "reject_not_found"


# (phone matched, id matched) -> resolution
REGISTER_DECISIONS: Dict[Tuple[bool, bool], Resolution] = {
    (True, True): Resolution.ADOPT_PHONE_IDENTITY,
    (True, False): Resolution.ADOPT_PHONE_IDENTITY,
    (False, True): Resolution.INHERIT_FROM_ID,
    (False, False): Resolution.CREATE,
}

UPDATE_DECISIONS: Dict[Tuple[bool, bool], Resolution] = {
    (True, True): Resolution.ID_AUTHORITATIVE,
    (False, True): Resolution.ID_AUTHORITATIVE,
    (True, False): Resolution.ADOPT_PHONE_IDENTITY,
    (False, False): Resolution.REJECT_NOT_FOUND,
}


def decide(
    table: Dict[Tuple[bool, bool], Resolution], phone_match: bool, id_match: bool
) -> Resolution:
    """Look up the resolution for a pair of match outcomes."""
    return table[(bool(phone_match), bool(id_match))]


# =============================================================================
# MERGE RULES
# =============================================================================

def adopt_phone_identity(candidate: UserRecord, existing: UserRecord) -> UserRecord:
    """The phone match wins: the incoming record takes over the stored id."""
    return candidate.with_changes(id=existing.id)


def inherit_from_id(candidate: UserRecord, existing: UserRecord) -> UserRecord:
    """Backfill an empty incoming phone number from the record stored under the id."""
    if existing.phone_number and not candidate.phone_number:
        return candidate.with_changes(phone_number=existing.phone_number)
    return candidate


def id_authoritative(candidate: UserRecord, existing: UserRecord) -> UserRecord:
    """The id match wins: the stored phone number replaces the incoming one."""
    return candidate.with_changes(phone_number=existing.phone_number)


# =============================================================================
# OUTCOMES
# =============================================================================

@dataclass(frozen=True)
class RegisterOutcome:
    record: UserRecord
    resolution: Resolution


@dataclass(frozen=True)
class UpdateOutcome:
    """
    Result of an update.

    ``conditional`` is set for stores without secondary lookup, whose callers
    only learn whether the write happened.
    """

    record: UserRecord
    resolution: Resolution
    written: bool
    conditional: bool = False


# =============================================================================
# ENGINE
# =============================================================================

class IdentityResolutionEngine:
    """
    Applies the register / update decision tables against a record store.

    Holds no per-request state; one engine serves all concurrent requests.
    """

    def __init__(self, store: UserRecordStore, register_requires_phone: Optional[bool] = None):
        """
        Args:
            store: Record store for lookups and writes
            register_requires_phone: Override for the phone requirement on register.
                None means "required iff the store supports phone lookup".
        """
        self.store = store
        self._register_requires_phone = register_requires_phone

    @property
    def register_requires_phone(self) -> bool:
        if self._register_requires_phone is not None:
            return self._register_requires_phone
        return self.store.capabilities.secondary_lookup

    async def _lookup_by_phone(self, phone_number: str) -> LookupResult:
        if not phone_number or not self.store.capabilities.secondary_lookup:
            return LookupResult.not_found()
        result = await self.store.get_by_attribute(PHONE_ATTRIBUTE, phone_number)
        return result.raise_for_backend_error("lookup_by_phone", phone_number)

    async def _lookup_by_id(self, identifier: str) -> LookupResult:
        if not identifier:
            return LookupResult.not_found()
        result = await self.store.get_by_key(identifier)
        return result.raise_for_backend_error("lookup_by_id", identifier)

    # =========================================================================
    # REGISTER
    # =========================================================================

    async def register(self, candidate: UserRecord) -> RegisterOutcome:
        """
        Register a profile, reconciling it with an existing identity.

        Args:
            candidate: Incoming record, id optional

        Returns:
            RegisterOutcome: Persisted record and the applied resolution

        Raises:
            ValidationError: Missing required phone number or malformed id
            DuplicateResourceError: Insert hit an existing id (insert stores)
            StorageError: Backend failure during lookup or write
        """
        if self.register_requires_phone and not candidate.phone_number:
            raise ValidationError(
                message="Phone number is required",
                field="phone_number",
                constraint="required",
            )

        by_phone = await self._lookup_by_phone(candidate.phone_number)
        if by_phone.is_found:
            resolution = decide(REGISTER_DECISIONS, True, False)
            record = adopt_phone_identity(candidate, by_phone.record)
            await self.store.put(record)
            logger.info(f"Register matched phone number, reusing id {record.id}")
            return RegisterOutcome(record=record, resolution=resolution)

        identifier = resolve_identifier(candidate.id)
        record = candidate.with_changes(id=identifier)

        # A freshly generated identifier cannot match a stored record
        by_id = await self._lookup_by_id(identifier if candidate.id else "")
        resolution = decide(REGISTER_DECISIONS, False, by_id.is_found)

        if resolution is Resolution.INHERIT_FROM_ID:
            record = inherit_from_id(record, by_id.record)

        if self.store.capabilities.insert_on_register:
            await self.store.insert(record)
        else:
            await self.store.put(record)

        logger.info(f"Registered user record {record.id} ({resolution.value})")
        return RegisterOutcome(record=record, resolution=resolution)

    # =========================================================================
    # UPDATE
    # =========================================================================

    async def update(self, candidate: UserRecord) -> UpdateOutcome:
        """
        Update a profile located by id and/or phone number.

        Stores with phone lookup cross-fill the two keys and always return
        the written record. Other stores write only if the id is already
        stored and report whether they did.

        Raises:
            ValidationError: Neither id nor phone number supplied
            NotFoundError: No match by either key (phone-lookup stores)
            StorageError: Backend failure during lookup or write
        """
        if not candidate.id and not candidate.phone_number:
            raise ValidationError(
                message="Either id or phone number is required",
                field="id",
                constraint="id_or_phone_number",
            )

        if not self.store.capabilities.secondary_lookup:
            return await self._conditional_update(candidate)

        by_phone, by_id = await asyncio.gather(
            self._lookup_by_phone(candidate.phone_number),
            self._lookup_by_id(candidate.id),
            return_exceptions=True,
        )
        for result in (by_phone, by_id):
            if isinstance(result, BaseException):
                raise result

        resolution = decide(UPDATE_DECISIONS, by_phone.is_found, by_id.is_found)

        if resolution is Resolution.REJECT_NOT_FOUND:
            raise NotFoundError(
                message="User not found",
                resource_type="user",
                resource_id=candidate.id or candidate.phone_number,
            )

        if resolution is Resolution.ID_AUTHORITATIVE:
            record = id_authoritative(candidate, by_id.record)
        else:
            record = adopt_phone_identity(candidate, by_phone.record)

        await self.store.put(record)
        logger.info(f"Updated user record {record.id} ({resolution.value})")
        return UpdateOutcome(record=record, resolution=resolution, written=True)

    async def _conditional_update(self, candidate: UserRecord) -> UpdateOutcome:
        exists = bool(candidate.id) and await self.store.exists(candidate.id)
        resolution = decide(UPDATE_DECISIONS, False, exists)

        if exists:
            await self.store.put(candidate)
            logger.info(f"Updated user record {candidate.id} (conditional)")
        else:
            logger.info(f"Conditional update skipped, no record for id '{candidate.id}'")

        return UpdateOutcome(
            record=candidate, resolution=resolution, written=exists, conditional=True
        )
