from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer, field_validator

from linkup.core.db import MongoModel
from linkup.utils import now


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class User(MongoModel):
    """User domain model with credentials and profile.

    Indexed on username - unique, email - unique.
    """

    username: str
    email: str
    password_hash: str  # bcrypt hash
    is_verified: bool = False

    first_name: str
    last_name: str
    date_of_birth: date | None = None
    bio: str | None = None
    mobile_number: str | None = None
    gender: Gender | None = None
    cover_image: str | None = None
    profile_image_url: str | None = None

    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)

    @field_serializer("date_of_birth")
    def _serialize_date_of_birth(self, value: date | None) -> str | None:
        # BSON has no date type, stored as ISO string
        return value.isoformat() if value is not None else None


class NewUser(BaseModel):
    """Fields required to register an account. Password is already hashed."""

    username: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    date_of_birth: date | None = None


class ProfileUpdate(BaseModel):
    """Partial profile update. Only fields explicitly set are written."""

    bio: str | None = None
    mobile_number: str | None = None
    gender: Gender | None = None
    cover_image: str | None = None
    profile_image_url: str | None = None

    @field_validator("gender", mode="before")
    @classmethod
    def _normalize_gender(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value


class ProfileView(BaseModel):
    """User profile (API representation)."""

    id: UUID = Field(..., description="User ID")
    username: str
    email: str
    first_name: str
    last_name: str
    date_of_birth: date | None = None
    bio: str | None = None
    mobile_number: str | None = None
    gender: Gender | None = None
    cover_image: str | None = None
    profile_image_url: str | None = None
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "ProfileView":
        """Create view model from domain model."""
        return cls.model_validate(user.model_dump(exclude={"password_hash"}))
