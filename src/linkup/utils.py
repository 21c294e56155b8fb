import re
from datetime import UTC, datetime

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_LOGIN_RE = re.compile(r"^[a-zA-Z0-9_]{3,30}$")


def is_email(value: str) -> bool:
    return bool(EMAIL_RE.fullmatch(value))


def is_login_username(value: str) -> bool:
    return bool(USERNAME_LOGIN_RE.fullmatch(value))


def now() -> datetime:
    return datetime.now(UTC)
