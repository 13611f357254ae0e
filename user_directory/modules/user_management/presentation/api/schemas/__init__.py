from .user_schemas import (
    FlushResponse,
    UserDeleteResponse,
    UserKeyListResponse,
    UserRecordListResponse,
    UserRecordRequest,
    UserRecordResponse,
)

__all__ = [
    "FlushResponse",
    "UserDeleteResponse",
    "UserKeyListResponse",
    "UserRecordListResponse",
    "UserRecordRequest",
    "UserRecordResponse",
]
