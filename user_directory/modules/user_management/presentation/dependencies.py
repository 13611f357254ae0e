# 📄 File: user_directory/modules/user_management/presentation/dependencies.py
# 🧭 Purpose (Layman Explanation):
# Hands each web endpoint the directory service that was set up when the app started.
# 🧪 Purpose (Technical Summary):
# FastAPI dependency resolving the process-wide UserDirectoryService from app.state.
# 🔗 Dependencies:
# FastAPI Request, StorageError
# 🔄 Connected Modules / Calls From:
# user_directory.modules.user_management.presentation.api.v1.users, api/v1/health.py

from fastapi import Request

from user_directory.modules.user_management.domain.services.user_service import (
    UserDirectoryService,
)
from user_directory.shared.core.exceptions import StorageError


def get_user_directory_service(request: Request) -> UserDirectoryService:
    """
    Get the directory service attached during application startup.

    Raises:
        StorageError: If the application has not finished starting up
    """
    service = getattr(request.app.state, "directory_service", None)
    if service is None:
        raise StorageError(message="Record store is not initialised", operation="dependency")
    return service
