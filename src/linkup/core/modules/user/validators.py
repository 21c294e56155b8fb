import re
from urllib.parse import urlparse

from linkup.core.modules.user.models import ProfileUpdate
from linkup.errors import ValidationError

MOBILE_NUMBER_RE = re.compile(r"^\+?[1-9]\d{0,15}$")
MAX_BIO_LENGTH = 500


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - Minimum length of 8 characters
    - At most 72 bytes once UTF-8 encoded (bcrypt input limit)

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters")

    if len(password.encode("utf-8")) > 72:
        raise ValidationError("Password must be at most 72 bytes")


def _is_absolute_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def validate_profile_update(update: ProfileUpdate) -> None:
    """Validate the fields present in a partial profile update.

    Collects every failing field so the client gets them all at once.

    Raises:
        ValidationError: If no field is set or any set field is invalid
    """
    fields = update.model_fields_set
    if not fields:
        raise ValidationError("No profile data provided for update")

    errors: dict[str, str] = {}
    if update.bio and len(update.bio) > MAX_BIO_LENGTH:
        errors["[body.bio]"] = f"Bio must be less than {MAX_BIO_LENGTH} characters"
    if update.mobile_number and not MOBILE_NUMBER_RE.fullmatch(update.mobile_number):
        errors["[body.mobile_number]"] = "Invalid mobile number format"
    if update.cover_image and not _is_absolute_url(update.cover_image):
        errors["[body.cover_image]"] = "Invalid image URL format"
    if update.profile_image_url and not _is_absolute_url(update.profile_image_url):
        errors["[body.profile_image_url]"] = "Invalid image URL format"

    if errors:
        raise ValidationError("Validation Error", errors)
