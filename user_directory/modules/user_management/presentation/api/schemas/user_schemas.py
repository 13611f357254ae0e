# 📄 File: user_directory/modules/user_management/presentation/api/schemas/user_schemas.py
# 🧭 Purpose (Layman Explanation):
# This file defines the shape of the data the directory's web endpoints accept and send
# back: a user profile, lists of profiles or ids, and small confirmations.
#
# 🧪 Purpose (Technical Summary):
# Pydantic request/response schemas with the public wire names (phoneNumber, imageURL, id),
# accepted aliases for the storage-style names, and conversions to/from the domain model.
#
# 🔗 Dependencies:
# - pydantic for schema validation and serialization
# - user_directory.modules.user_management.domain.models.user_record (UserRecord)
#
# 🔄 Connected Modules / Calls From:
# - user_directory.modules.user_management.presentation.api.v1.users (directory endpoints)
# - FastAPI automatic request validation and response serialization

"""
User Directory API Schemas

Request Schemas:
- UserRecordRequest: partial user profile for register / update

Response Schemas:
- UserRecordResponse: one user profile
- UserRecordListResponse: hydrated listing with count
- UserKeyListResponse: identifier listing with count
- UserDeleteResponse: delete confirmation
- FlushResponse: namespace flush confirmation

Null values are accepted on input and treated as empty strings.
"""

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from user_directory.modules.user_management.domain.models.user_record import UserRecord


USER_EXAMPLE = {
    "name": "Ada",
    "phoneNumber": "+15550001",
    "imageURL": "https://cdn.example.com/ada.png",
    "status": "available",
    "id": "3f2b8a52-5c7e-4d0a-9a57-2f4b1f7e0c11",
}


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class UserRecordRequest(BaseModel):
    """Partial user profile submitted to register or update."""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": USER_EXAMPLE},
    )

    name: Optional[str] = Field(default="", description="Display name")
    phone_number: Optional[str] = Field(
        default="",
        validation_alias=AliasChoices("phoneNumber", "phone_number"),
        description="Phone number, expected like +15550001",
    )
    image_url: Optional[str] = Field(
        default="",
        validation_alias=AliasChoices("imageURL", "image_url", "imageUrl"),
        description="Profile image URL",
    )
    status: Optional[str] = Field(default="", description="Free text status")
    id: Optional[str] = Field(
        default="",
        validation_alias=AliasChoices("id", "uuid"),
        description="User id (UUID); generated on register when absent",
    )

    @field_validator("name", "phone_number", "image_url", "status", "id", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    def to_domain(self) -> UserRecord:
        return UserRecord(
            name=self.name,
            phone_number=self.phone_number,
            image_url=self.image_url,
            status=self.status,
            id=self.id,
        )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class UserRecordResponse(BaseModel):
    """User profile as returned by the API."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": USER_EXAMPLE},
    )

    name: str = ""
    phone_number: str = Field(default="", alias="phoneNumber")
    image_url: str = Field(default="", alias="imageURL")
    status: str = ""
    id: str = ""

    @classmethod
    def from_domain(cls, record: UserRecord) -> "UserRecordResponse":
        return cls(
            name=record.name,
            phone_number=record.phone_number,
            image_url=record.image_url,
            status=record.status,
            id=record.id,
        )


class UserRecordListResponse(BaseModel):
    """Every stored profile; failed reads appear as empty profiles."""

    records: List[UserRecordResponse]
    count: int

    @classmethod
    def from_domain(cls, records: List[UserRecord]) -> "UserRecordListResponse":
        return cls(
            records=[UserRecordResponse.from_domain(record) for record in records],
            count=len(records),
        )


class UserKeyListResponse(BaseModel):
    keys: List[str]
    count: int


class UserDeleteResponse(BaseModel):
    id: str
    deleted: bool = Field(description="False when no record was stored under the id")


class FlushResponse(BaseModel):
    flushed: int = Field(description="Number of records removed")
