# 📄 File: user_directory/modules/user_management/domain/models/lookup.py
# 🧭 Purpose (Layman Explanation):
# When we ask storage for a user, we get one of three answers: "here it is", "nobody
# by that key", or "storage could not answer". This file keeps those answers apart.
# 🧪 Purpose (Technical Summary):
# Tagged lookup result (FOUND / NOT_FOUND / BACKEND_ERROR) returned by every store
# read so that backend outages are never mistaken for missing records.
# 🔗 Dependencies:
# dataclasses, enum, StorageError
# 🔄 Connected Modules / Calls From:
# Storage adapters (producers), identity and listing services (consumers)

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from user_directory.shared.core.exceptions import StorageError

from .user_record import UserRecord


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    BACKEND_ERROR = "backend_error"


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a single point read against a record store."""

    status: LookupStatus
    record: Optional[UserRecord] = None
    error: Optional[Exception] = None

    @classmethod
    def found(cls, record: UserRecord) -> "LookupResult":
        return cls(LookupStatus.FOUND, record=record)

    @classmethod
    def not_found(cls) -> "LookupResult":
        return cls(LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: Exception) -> "LookupResult":
        return cls(LookupStatus.BACKEND_ERROR, error=error)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def is_backend_error(self) -> bool:
        return self.status is LookupStatus.BACKEND_ERROR

    def raise_for_backend_error(self, operation: str, key: Optional[str] = None) -> "LookupResult":
        """
        Convert a backend error into StorageError; pass other outcomes through.

        Args:
            operation: Name of the lookup, used in the error details
            key: Key or attribute value that was looked up

        Returns:
            LookupResult: self, when the lookup reached the backend

        Raises:
            StorageError: If the backend could not answer
        """
        if self.is_backend_error:
            if isinstance(self.error, StorageError):
                raise self.error
            raise StorageError(
                message=f"Record store unavailable during {operation}",
                operation=operation,
                key=key,
                details={"cause": str(self.error)} if self.error else None,
            ) from self.error
        return self
