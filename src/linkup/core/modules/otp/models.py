from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from linkup.core.db import MongoModel
from linkup.utils import now

OTP_MIN = 100000
OTP_SPAN = 900000  # 100000..999999 inclusive


class OtpRecord(MongoModel):
    """One issued one-time passcode.

    Indexed on (user_id, otp, created_at desc) for validation lookups,
    expires_at - TTL (expired rows are purged lazily; they are invalid either way).
    """

    user_id: UUID
    otp: str
    created_at: datetime = Field(default_factory=now)
    expires_at: datetime
    is_verified: bool = False


class OtpCheck(BaseModel):
    """Outcome of validating a code: the matching record id when valid."""

    valid: bool
    record_id: UUID | None = None
