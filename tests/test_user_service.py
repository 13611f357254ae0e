"""Tests for UserDirectoryService: register / update resolution, lookups, delete and flush."""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from user_directory.modules.user_management.domain.models.lookup import LookupResult
from user_directory.modules.user_management.domain.models.user_record import UserRecord
from user_directory.modules.user_management.domain.services.identity_service import Resolution
from user_directory.shared.core.exceptions import (
    DuplicateResourceError,
    NotFoundError,
    StorageError,
    UnsupportedOperationError,
    ValidationError,
)

KNOWN_ID = "9b1deb4d-3b7d-4bad-9bdd-2b0d7b3dcb6d"
OTHER_ID = "1c6f2e1a-7d4b-4c5e-8a1f-3e2d9b6c4a70"


class TestRegister:
    @pytest.mark.asyncio
    async def test_unseen_phone_without_id_gets_fresh_identifier(self, phone_lookup_service):
        first = await phone_lookup_service.register(UserRecord(phone_number="+15550001"))
        second = await phone_lookup_service.register(UserRecord(phone_number="+15550002"))

        assert uuid.UUID(first.id)
        assert uuid.UUID(second.id)
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_phone_match_returns_existing_identifier(self, phone_lookup_service):
        existing = await phone_lookup_service.register(UserRecord(phone_number="+15550001"))

        again = await phone_lookup_service.register(
            UserRecord(phone_number="+15550001", id=OTHER_ID, name="Again")
        )

        assert again.id == existing.id
        assert again.name == "Again"
        assert await phone_lookup_service.store.list_keys() == [f"user:{existing.id}"]

    @pytest.mark.asyncio
    async def test_phone_match_ignores_malformed_supplied_id(self, phone_lookup_service):
        existing = await phone_lookup_service.register(UserRecord(phone_number="+15550001"))

        again = await phone_lookup_service.register(
            UserRecord(phone_number="+15550001", id="not-a-uuid")
        )

        assert again.id == existing.id

    @pytest.mark.asyncio
    async def test_known_id_with_empty_phone_inherits_phone(self, phone_lookup_service):
        await phone_lookup_service.register(UserRecord(phone_number="+15550001", id=KNOWN_ID))

        record = await phone_lookup_service.register(UserRecord(id=KNOWN_ID, name="Ada"))

        assert record.phone_number == "+15550001"
        assert record.name == "Ada"

    @pytest.mark.asyncio
    async def test_malformed_id_rejected_before_write(self, phone_lookup_service):
        with pytest.raises(ValidationError):
            await phone_lookup_service.register(
                UserRecord(phone_number="+15550001", id="not-a-uuid")
            )

        assert await phone_lookup_service.store.list_keys() == []

    @pytest.mark.asyncio
    async def test_phone_required_on_document_store(self, document_service):
        with pytest.raises(ValidationError) as exc_info:
            await document_service.register(UserRecord(name="Ada"))

        assert exc_info.value.details["field"] == "phone_number"
        assert await document_service.store.list_keys() == []

    @pytest.mark.asyncio
    async def test_phone_not_required_on_key_value_store(self, key_value_service):
        record = await key_value_service.register(UserRecord(name="Ada"))
        assert uuid.UUID(record.id)

    @pytest.mark.asyncio
    async def test_insert_store_rejects_duplicate_id(self, document_service):
        await document_service.register(UserRecord(phone_number="+15550001", id=KNOWN_ID))

        with pytest.raises(DuplicateResourceError):
            await document_service.register(UserRecord(phone_number="+15550002", id=KNOWN_ID))

    @pytest.mark.asyncio
    async def test_overwrite_store_replaces_record_under_id(self, key_value_service):
        await key_value_service.register(UserRecord(name="Old", id=KNOWN_ID))
        await key_value_service.register(UserRecord(name="New", id=KNOWN_ID))

        stored = await key_value_service.get_profile(KNOWN_ID)
        assert stored.name == "New"

    @pytest.mark.asyncio
    async def test_backend_error_on_phone_lookup_is_not_treated_as_missing(
        self, phone_lookup_service
    ):
        store = phone_lookup_service.store
        failing = AsyncMock(return_value=LookupResult.failed(ConnectionError("down")))

        with patch.object(store, "get_by_attribute", failing):
            with pytest.raises(StorageError) as exc_info:
                await phone_lookup_service.register(UserRecord(phone_number="+15550001"))

        assert exc_info.value.status_code == 503
        assert await store.list_keys() == []

    @pytest.mark.asyncio
    async def test_worked_example(self, phone_lookup_service):
        created = await phone_lookup_service.register(UserRecord(phone_number="+15550001"))
        identifier = created.id
        assert uuid.UUID(identifier)

        backfilled = await phone_lookup_service.register(
            UserRecord(id=identifier, phone_number="")
        )
        assert backfilled.phone_number == "+15550001"

        renamed = await phone_lookup_service.register(
            UserRecord(phone_number="+15550001", name="New")
        )
        assert renamed.id == identifier
        assert renamed.name == "New"


class TestUpdate:
    @pytest.mark.asyncio
    async def test_requires_id_or_phone(self, phone_lookup_service):
        with pytest.raises(ValidationError):
            await phone_lookup_service.update(UserRecord(name="Nobody"))

    @pytest.mark.asyncio
    async def test_no_match_fails_without_write(self, phone_lookup_service):
        with pytest.raises(NotFoundError):
            await phone_lookup_service.update(
                UserRecord(phone_number="+15550001", id=KNOWN_ID)
            )

        assert await phone_lookup_service.store.list_keys() == []

    @pytest.mark.asyncio
    async def test_backend_error_on_id_lookup_is_not_treated_as_missing(
        self, phone_lookup_service
    ):
        store = phone_lookup_service.store
        failing = AsyncMock(return_value=LookupResult.failed(ConnectionError("down")))

        with patch.object(store, "get_by_key", failing):
            with pytest.raises(StorageError) as exc_info:
                await phone_lookup_service.update(
                    UserRecord(phone_number="+15550001", id=KNOWN_ID)
                )

        assert exc_info.value.status_code == 503
        failing.assert_awaited_once_with(KNOWN_ID)
        assert await store.list_keys() == []

    @pytest.mark.asyncio
    async def test_both_lookups_failing_are_both_collected(self, phone_lookup_service):
        store = phone_lookup_service.store
        phone_failure = AsyncMock(return_value=LookupResult.failed(ConnectionError("down")))
        id_failure = AsyncMock(return_value=LookupResult.failed(TimeoutError("slow")))

        with patch.object(store, "get_by_attribute", phone_failure), \
                patch.object(store, "get_by_key", id_failure):
            with pytest.raises(StorageError) as exc_info:
                await phone_lookup_service.update(
                    UserRecord(phone_number="+15550001", id=KNOWN_ID)
                )

        assert exc_info.value.details["operation"] == "lookup_by_phone"
        phone_failure.assert_awaited_once()
        id_failure.assert_awaited_once()
        assert await store.list_keys() == []

    @pytest.mark.asyncio
    async def test_id_is_authoritative_over_phone(self, phone_lookup_service):
        await phone_lookup_service.register(UserRecord(phone_number="+15550001", id=KNOWN_ID))

        outcome = await phone_lookup_service.update(
            UserRecord(phone_number="+15559999", id=KNOWN_ID, status="away")
        )

        assert outcome.resolution is Resolution.ID_AUTHORITATIVE
        assert outcome.record.phone_number == "+15550001"
        stored = await phone_lookup_service.get_profile(KNOWN_ID)
        assert stored.phone_number == "+15550001"
        assert stored.status == "away"

    @pytest.mark.asyncio
    async def test_phone_match_adopts_stored_id(self, phone_lookup_service):
        await phone_lookup_service.register(UserRecord(phone_number="+15550001", id=KNOWN_ID))

        outcome = await phone_lookup_service.update(
            UserRecord(phone_number="+15550001", name="Ada")
        )

        assert outcome.resolution is Resolution.ADOPT_PHONE_IDENTITY
        assert outcome.record.id == KNOWN_ID
        assert (await phone_lookup_service.get_profile(KNOWN_ID)).name == "Ada"

    @pytest.mark.asyncio
    async def test_conditional_update_skips_absent_key(self, key_value_service):
        outcome = await key_value_service.update(UserRecord(name="Ghost", id=KNOWN_ID))

        assert outcome.conditional
        assert outcome.written is False
        assert await key_value_service.store.list_keys() == []

    @pytest.mark.asyncio
    async def test_conditional_update_overwrites_existing_key(self, key_value_service):
        await key_value_service.register(UserRecord(name="Old", id=KNOWN_ID))

        outcome = await key_value_service.update(UserRecord(name="New", id=KNOWN_ID))

        assert outcome.written is True
        assert (await key_value_service.get_profile(KNOWN_ID)).name == "New"

    @pytest.mark.asyncio
    async def test_conditional_update_with_phone_only_reports_false(self, key_value_service):
        outcome = await key_value_service.update(UserRecord(phone_number="+15550001"))
        assert outcome.written is False


class TestLookups:
    @pytest.mark.asyncio
    async def test_get_profile_rejects_malformed_id(self, key_value_service):
        with pytest.raises(ValidationError):
            await key_value_service.get_profile("12345")

    @pytest.mark.asyncio
    async def test_get_profile_unknown_id(self, key_value_service):
        with pytest.raises(NotFoundError):
            await key_value_service.get_profile(KNOWN_ID)

    @pytest.mark.asyncio
    async def test_get_by_phone(self, phone_lookup_service):
        await phone_lookup_service.register(UserRecord(phone_number="+15550001", id=KNOWN_ID))

        record = await phone_lookup_service.get_by_phone("+15550001")
        assert record.id == KNOWN_ID

    @pytest.mark.asyncio
    async def test_get_by_phone_with_unusual_format_is_still_served(self, phone_lookup_service):
        await phone_lookup_service.register(UserRecord(phone_number="555-0001", id=KNOWN_ID))

        record = await phone_lookup_service.get_by_phone("555-0001")
        assert record.id == KNOWN_ID

    @pytest.mark.asyncio
    async def test_get_by_phone_unsupported_on_key_value_store(self, key_value_service):
        with pytest.raises(UnsupportedOperationError):
            await key_value_service.get_by_phone("+15550001")


class TestDeleteAndFlush:
    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, key_value_service):
        await key_value_service.register(UserRecord(id=KNOWN_ID))

        assert await key_value_service.delete(KNOWN_ID) is True
        assert await key_value_service.delete(KNOWN_ID) is False
        with pytest.raises(NotFoundError):
            await key_value_service.get_profile(KNOWN_ID)

    @pytest.mark.asyncio
    async def test_delete_unknown_id_succeeds(self, key_value_service):
        assert await key_value_service.delete(OTHER_ID) is False

    @pytest.mark.asyncio
    async def test_flush_clears_namespace(self, key_value_service):
        await key_value_service.register(UserRecord(id=KNOWN_ID))
        await key_value_service.register(UserRecord(id=OTHER_ID))

        assert await key_value_service.flush() == 2
        assert await key_value_service.list_identifiers() == []

    @pytest.mark.asyncio
    async def test_flush_unsupported_on_document_store(self, document_service):
        with pytest.raises(UnsupportedOperationError):
            await document_service.flush()
