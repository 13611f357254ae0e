# 📄 File: user_directory/modules/user_management/domain/models/user_record.py
# 🧭 Purpose (Layman Explanation):
# Defines what a user profile is in the directory: a name, a phone number, a picture link,
# a status line, and the unique identifier that names the person.
# 🧪 Purpose (Technical Summary):
# Pydantic domain model for the UserRecord entity. Every field is a plain string that
# defaults to empty; null input is normalised to empty so presence checks stay uniform.
# 🔗 Dependencies:
# pydantic
# 🔄 Connected Modules / Calls From:
# identity_service.py, listing_service.py, record codec, storage adapters, API schemas

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, field_validator


class UserRecord(BaseModel):
    """
    User profile record, the sole entity of the directory.

    ``id`` is the primary key in every storage variant. ``phone_number`` is
    the secondary identity key, expected (but not required) to look like
    ``+15550001``.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    phone_number: str = ""
    image_url: str = ""
    status: str = ""
    id: str = ""

    @field_validator("name", "phone_number", "image_url", "status", "id", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def is_empty(self) -> bool:
        """True for the placeholder record produced by a failed listing read."""
        return not any((self.name, self.phone_number, self.image_url, self.status, self.id))

    def with_changes(self, **changes: Any) -> "UserRecord":
        """Return a validated copy with the given fields replaced."""
        data: Dict[str, Any] = self.model_dump()
        data.update(changes)
        return UserRecord(**data)
