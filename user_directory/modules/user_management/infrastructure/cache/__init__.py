from .redis_user_record_store import RedisUserRecordStore

__all__ = ["RedisUserRecordStore"]
