from .memory_user_record_store import InMemoryUserRecordStore

__all__ = ["InMemoryUserRecordStore"]
