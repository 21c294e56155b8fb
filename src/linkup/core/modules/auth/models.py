from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from linkup.core.modules.user.models import User


class RegisterData(BaseModel):
    """Validated registration input with a plaintext password."""

    first_name: str
    last_name: str
    date_of_birth: date | None = None
    username: str
    email: str
    password: str


class RegistrationResult(BaseModel):
    """A registered, still unverified account. Deliberately carries no token."""

    user_id: UUID = Field(..., alias="userId")
    email: str

    model_config = ConfigDict(populate_by_name=True)


class UsernameAvailability(BaseModel):
    username: str
    available: bool
    suggestions: list[str] = Field(default_factory=list)


class AuthContext(BaseModel):
    """Authenticated caller, produced once per request by token authentication."""

    user: User
    token: str

    @property
    def user_id(self) -> UUID:
        return self.user.id
