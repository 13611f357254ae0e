"""Tests for the record codec: document/blob mapping, keys and identifier policy."""

import json
import uuid

import pytest

from user_directory.modules.user_management.domain.models.user_record import UserRecord
from user_directory.modules.user_management.infrastructure.codec import (
    decode_blob,
    encode_blob,
    from_document,
    identifier_from_key,
    is_valid_identifier,
    resolve_identifier,
    storage_key,
    to_document,
)
from user_directory.shared.core.exceptions import StorageError, ValidationError

RECORD_ID = "3f2b8a52-5c7e-4d0a-9a57-2f4b1f7e0c11"


class TestDocumentMapping:
    def test_id_is_stored_under_underscore_id(self):
        record = UserRecord(name="Ada", phone_number="+15550001", id=RECORD_ID)
        document = to_document(record)

        assert document["_id"] == RECORD_ID
        assert "id" not in document
        assert document["phone_number"] == "+15550001"
        assert set(document) == {"name", "phone_number", "image_url", "status", "_id"}

    def test_from_document_ignores_unknown_fields_and_nulls(self):
        record = from_document({"_id": RECORD_ID, "name": None, "extra": 1})

        assert record.id == RECORD_ID
        assert record.name == ""
        assert record.phone_number == ""

    def test_from_document_rejects_non_mapping(self):
        with pytest.raises(StorageError):
            from_document(["not", "a", "document"])


class TestBlobMapping:
    def test_blob_is_json_document(self):
        record = UserRecord(name="Ada", status="busy", id=RECORD_ID)
        blob = encode_blob(record)

        assert json.loads(blob)["_id"] == RECORD_ID
        assert decode_blob(blob) == record

    def test_decode_accepts_bytes(self):
        blob = encode_blob(UserRecord(id=RECORD_ID)).encode("utf-8")
        assert decode_blob(blob).id == RECORD_ID

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", "42", None])
    def test_undecodable_blob_raises_storage_error(self, raw):
        with pytest.raises(StorageError) as exc_info:
            decode_blob(raw)
        assert exc_info.value.status_code == 503


class TestStorageKeys:
    def test_prefix_is_added_once(self):
        key = storage_key(RECORD_ID)
        assert key == f"user:{RECORD_ID}"
        assert storage_key(key) == key

    def test_custom_and_empty_prefix(self):
        assert storage_key("abc", "profile:") == "profile:abc"
        assert storage_key("abc", "") == "abc"

    def test_identifier_from_key_strips_prefix(self):
        assert identifier_from_key(f"user:{RECORD_ID}") == RECORD_ID
        assert identifier_from_key(RECORD_ID) == RECORD_ID


class TestIdentifierPolicy:
    def test_empty_identifier_is_generated(self):
        generated = resolve_identifier("")
        assert uuid.UUID(generated).version == 4

    def test_generated_identifiers_are_unique(self):
        assert resolve_identifier("") != resolve_identifier("")

    def test_valid_identifier_is_kept(self):
        assert resolve_identifier(RECORD_ID) == RECORD_ID

    def test_malformed_identifier_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve_identifier("not-a-uuid")
        assert exc_info.value.details["field"] == "id"
        assert exc_info.value.status_code == 400

    def test_is_valid_identifier(self):
        assert is_valid_identifier(RECORD_ID)
        assert not is_valid_identifier("12345")
        assert not is_valid_identifier("")
