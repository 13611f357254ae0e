from .lookup import LookupResult, LookupStatus
from .user_record import UserRecord

__all__ = ["LookupResult", "LookupStatus", "UserRecord"]
