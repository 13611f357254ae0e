from .models import UserRecordModel
from .user_record_store_impl import SQLUserRecordStore

__all__ = ["SQLUserRecordStore", "UserRecordModel"]
