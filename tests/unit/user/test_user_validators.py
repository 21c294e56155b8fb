"""Tests for password and profile validation."""

import pytest

from linkup.core.modules.user.models import ProfileUpdate
from linkup.core.modules.user.passwords import hash_password, verify_password
from linkup.core.modules.user.validators import validate_password, validate_profile_update
from linkup.errors import ValidationError


class TestValidatePassword:
    """Tests for validate_password function."""

    def test_valid_password_accepted(self):
        validate_password("Secret123!")
        validate_password("a" * 72)

    def test_short_password_rejected(self):
        """Passwords under 8 characters are rejected."""
        with pytest.raises(ValidationError, match="at least 8 characters"):
            validate_password("short")

    def test_password_over_bcrypt_limit_rejected(self):
        """Multi-byte characters count against the 72-byte bcrypt limit."""
        with pytest.raises(ValidationError, match="at most 72 bytes"):
            validate_password("é" * 40)


class TestPasswordHashing:
    def test_hash_verifies(self):
        password_hash = hash_password("Secret123!", rounds=4)
        assert password_hash != "Secret123!"
        assert verify_password("Secret123!", password_hash) is True
        assert verify_password("Wrong123!", password_hash) is False

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("Secret123!", "not-a-bcrypt-hash") is False


class TestValidateProfileUpdate:
    """Tests for validate_profile_update function."""

    def test_valid_update_accepted(self):
        validate_profile_update(
            ProfileUpdate(
                bio="Hiking and photography",
                mobile_number="+14155550123",
                gender="other",
                cover_image="https://cdn.example.com/cover.png",
                profile_image_url="https://cdn.example.com/me.png",
            )
        )

    def test_empty_update_rejected(self):
        with pytest.raises(ValidationError, match="No profile data provided for update"):
            validate_profile_update(ProfileUpdate())

    def test_explicit_null_counts_as_supplied(self):
        """Clearing a field with null is a valid update."""
        validate_profile_update(ProfileUpdate(bio=None))

    def test_all_invalid_fields_reported(self):
        """Every failing field is reported in a single error."""
        update = ProfileUpdate(
            bio="x" * 501,
            mobile_number="0123",
            cover_image="not a url",
            profile_image_url="/relative/path.png",
        )
        with pytest.raises(ValidationError) as exc_info:
            validate_profile_update(update)
        assert exc_info.value.errors == {
            "[body.bio]": "Bio must be less than 500 characters",
            "[body.mobile_number]": "Invalid mobile number format",
            "[body.cover_image]": "Invalid image URL format",
            "[body.profile_image_url]": "Invalid image URL format",
        }

    def test_gender_is_case_insensitive(self):
        assert ProfileUpdate(gender="Prefer_Not_To_Say").gender == "prefer_not_to_say"
