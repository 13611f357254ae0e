# 📄 File: user_directory/modules/user_management/presentation/api/v1/users.py
# 🧭 Purpose (Layman Explanation):
# This file contains all the web endpoints of the directory: registering and updating
# profiles, looking someone up by id or phone number, listing everyone, deleting one
# profile, and wiping the whole directory.
#
# 🧪 Purpose (Technical Summary):
# FastAPI router mapping the /users routes onto UserDirectoryService. Domain exceptions
# propagate to the application-level handlers, which turn them into status codes.
#
# 🔗 Dependencies:
# - FastAPI router and Depends
# - user_directory.modules.user_management.presentation.api.schemas.user_schemas
# - user_directory.modules.user_management.presentation.dependencies
#
# 🔄 Connected Modules / Calls From:
# - user_directory.api.v1.router (router inclusion)

"""
Users API Endpoints

Endpoints:
- POST /users/register: Register a profile (id generated when absent)
- POST /users/update: Update a profile by id and/or phone number
- GET /users/profile/{id}: Get a profile by id
- GET /users/get/{phoneNumber}: Get a profile by phone number
- GET /users/get-all/profile: List every profile
- GET /users/get-all/id: List every id
- GET /users/delete/{id}: Delete a profile (idempotent)
- GET /users/flush: Remove every profile
"""

import logging
from typing import Union

from fastapi import APIRouter, Depends, Path

from user_directory.modules.user_management.domain.services.user_service import (
    UserDirectoryService,
)
from user_directory.modules.user_management.presentation.api.schemas.user_schemas import (
    FlushResponse,
    UserDeleteResponse,
    UserKeyListResponse,
    UserRecordListResponse,
    UserRecordRequest,
    UserRecordResponse,
)
from user_directory.modules.user_management.presentation.dependencies import (
    get_user_directory_service,
)

logger = logging.getLogger(__name__)

users_router = APIRouter()

ERROR_RESPONSES = {
    400: {"description": "Validation error"},
    503: {"description": "Record store unavailable"},
}


@users_router.post(
    "/register",
    response_model=UserRecordResponse,
    summary="Register a user profile",
    responses={
        **ERROR_RESPONSES,
        409: {"description": "A user with this id already exists"},
    },
)
async def register_user(
    payload: UserRecordRequest,
    service: UserDirectoryService = Depends(get_user_directory_service),
) -> UserRecordResponse:
    """
    Register a user profile.

    A known phone number makes this an update of that user (the stored id is
    kept). Otherwise the supplied id is validated, or a new one generated.
    """
    record = await service.register(payload.to_domain())
    return UserRecordResponse.from_domain(record)


@users_router.post(
    "/update",
    response_model=Union[UserRecordResponse, bool],
    summary="Update a user profile",
    responses={**ERROR_RESPONSES, 404: {"description": "User not found"}},
)
async def update_user(
    payload: UserRecordRequest,
    service: UserDirectoryService = Depends(get_user_directory_service),
) -> Union[UserRecordResponse, bool]:
    """
    Update a user profile located by id and/or phone number.

    Stores without phone lookup answer with a JSON boolean telling whether
    a record existed under the id and was overwritten.
    """
    outcome = await service.update(payload.to_domain())

    if outcome.conditional:
        return outcome.written
    return UserRecordResponse.from_domain(outcome.record)


@users_router.get(
    "/profile/{user_id}",
    response_model=UserRecordResponse,
    summary="Get a user profile by id",
    responses={**ERROR_RESPONSES, 404: {"description": "User not found"}},
)
async def get_user_profile(
    user_id: str = Path(..., description="User id (UUID)"),
    service: UserDirectoryService = Depends(get_user_directory_service),
) -> UserRecordResponse:
    record = await service.get_profile(user_id)
    return UserRecordResponse.from_domain(record)


@users_router.get(
    "/get/{phone_number}",
    response_model=UserRecordResponse,
    summary="Get a user profile by phone number",
    responses={
        404: {"description": "User not found"},
        501: {"description": "Storage backend has no phone lookup"},
        503: {"description": "Record store unavailable"},
    },
)
async def get_user_by_phone(
    phone_number: str = Path(..., description="Phone number, e.g. +15550001"),
    service: UserDirectoryService = Depends(get_user_directory_service),
) -> UserRecordResponse:
    record = await service.get_by_phone(phone_number)
    return UserRecordResponse.from_domain(record)


@users_router.get(
    "/get-all/profile",
    response_model=UserRecordListResponse,
    summary="List every user profile",
)
async def list_user_profiles(
    service: UserDirectoryService = Depends(get_user_directory_service),
) -> UserRecordListResponse:
    records = await service.list_profiles()
    return UserRecordListResponse.from_domain(records)


@users_router.get(
    "/get-all/id",
    response_model=UserKeyListResponse,
    summary="List every user id",
)
async def list_user_ids(
    service: UserDirectoryService = Depends(get_user_directory_service),
) -> UserKeyListResponse:
    keys = await service.list_identifiers()
    return UserKeyListResponse(keys=keys, count=len(keys))


@users_router.get(
    "/delete/{user_id}",
    response_model=UserDeleteResponse,
    summary="Delete a user profile",
)
async def delete_user(
    user_id: str = Path(..., description="User id"),
    service: UserDirectoryService = Depends(get_user_directory_service),
) -> UserDeleteResponse:
    deleted = await service.delete(user_id)
    return UserDeleteResponse(id=user_id, deleted=deleted)


@users_router.get(
    "/flush",
    response_model=FlushResponse,
    summary="Remove every user profile",
    responses={501: {"description": "Storage backend cannot flush"}},
)
async def flush_users(
    service: UserDirectoryService = Depends(get_user_directory_service),
) -> FlushResponse:
    removed = await service.flush()
    logger.warning(f"User directory flushed, {removed} records removed")
    return FlushResponse(flushed=removed)
