from .user_record_store import (
    DOCUMENT_CACHE_CAPABILITIES,
    DOCUMENT_CAPABILITIES,
    KEY_VALUE_CAPABILITIES,
    StoreCapabilities,
    UserRecordStore,
)

__all__ = [
    "DOCUMENT_CACHE_CAPABILITIES",
    "DOCUMENT_CAPABILITIES",
    "KEY_VALUE_CAPABILITIES",
    "StoreCapabilities",
    "UserRecordStore",
]
