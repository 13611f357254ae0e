# 📄 File: user_directory/modules/user_management/infrastructure/codec.py
# 🧭 Purpose (Layman Explanation):
# Translates a user profile into the shapes the databases store (a document or a text
# blob) and back again, and decides what the storage key for a person looks like.
# 🧪 Purpose (Technical Summary):
# Canonical UserRecord <-> document / JSON blob mapping, idempotent storage-key
# derivation with a namespace prefix, and the identifier policy (generate UUID4 when
# absent, validate when present).
# 🔗 Dependencies:
# json, uuid, pydantic (UserRecord), shared validators and exceptions
# 🔄 Connected Modules / Calls From:
# SQL / Redis / in-memory stores, identity resolution engine

import json
import uuid
from typing import Any, Dict, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from user_directory.shared.core.exceptions import StorageError, ValidationError
from user_directory.shared.utils.validators import validate_uuid

from ..domain.models.user_record import UserRecord

DEFAULT_KEY_PREFIX = "user:"

# Document field -> model field
DOCUMENT_FIELDS = {
    "name": "name",
    "phone_number": "phone_number",
    "image_url": "image_url",
    "status": "status",
    "_id": "id",
}


# =============================================================================
# DOCUMENT MAPPING
# =============================================================================

def to_document(record: UserRecord) -> Dict[str, str]:
    """
    Map a record to its document form (id stored under ``_id``).

    Args:
        record: Record to encode

    Returns:
        Dict[str, str]: Document with the five stored fields
    """
    return {
        doc_field: getattr(record, model_field)
        for doc_field, model_field in DOCUMENT_FIELDS.items()
    }


def from_document(document: Mapping[str, Any]) -> UserRecord:
    """
    Build a record from a stored document. Unknown fields are ignored.

    Raises:
        StorageError: If the document does not describe a record
    """
    try:
        return UserRecord(**{
            model_field: document.get(doc_field)
            for doc_field, model_field in DOCUMENT_FIELDS.items()
        })
    except (PydanticValidationError, AttributeError, TypeError) as e:
        raise StorageError(
            message="Stored document could not be decoded",
            operation="decode",
            details={"cause": str(e)},
        ) from e


# =============================================================================
# BLOB MAPPING (key-value store)
# =============================================================================

def encode_blob(record: UserRecord) -> str:
    """Serialize a record as the JSON document stored under its key."""
    return json.dumps(to_document(record), separators=(",", ":"))


def decode_blob(raw: Union[str, bytes, None]) -> UserRecord:
    """
    Deserialize a stored JSON blob.

    Args:
        raw: Value read from the key-value store

    Returns:
        UserRecord: Decoded record

    Raises:
        StorageError: If the blob is missing, not JSON, or not an object
    """
    if raw is None:
        raise StorageError(message="No blob to decode", operation="decode")

    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise StorageError(
            message="Stored blob is not valid JSON",
            operation="decode",
            details={"cause": str(e)},
        ) from e

    if not isinstance(document, dict):
        raise StorageError(message="Stored blob is not a JSON object", operation="decode")

    return from_document(document)


# =============================================================================
# KEYS AND IDENTIFIERS
# =============================================================================

def storage_key(identifier: str, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    """
    Derive the storage key for an identifier.

    Idempotent: a value that already carries the prefix is returned as is.
    """
    if not prefix or identifier.startswith(prefix):
        return identifier
    return f"{prefix}{identifier}"


def identifier_from_key(key: str, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    """Strip the namespace prefix from a storage key."""
    if prefix and key.startswith(prefix):
        return key[len(prefix):]
    return key


def is_valid_identifier(value: str) -> bool:
    return bool(validate_uuid(value))


def new_identifier() -> str:
    return str(uuid.uuid4())


def resolve_identifier(value: str) -> str:
    """
    Apply the identifier policy to a candidate id.

    Args:
        value: Supplied identifier, possibly empty

    Returns:
        str: A fresh UUID4 string if empty, the value itself if it parses

    Raises:
        ValidationError: If a non-empty value is not a UUID
    """
    if not value:
        return new_identifier()

    if not is_valid_identifier(value):
        raise ValidationError(
            message="Invalid user id",
            field="id",
            value=value,
            constraint="uuid",
        )
    return value
