from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel


class MailIntent(StrEnum):
    """Why an OTP email is sent."""

    VERIFY = "verify"
    FORGOT_PASSWORD = "forgotpassword"


class MailJob(BaseModel):
    """Queued request to issue a fresh OTP for a user and email it."""

    user_id: UUID
    email: str
    intent: MailIntent


class EmailMessage(BaseModel):
    recipient: str
    subject: str
    html: str
    text: str
