"""Tests for the OTP ledger."""

from datetime import timedelta
from uuid import uuid4

import pytest

from linkup import utils
from linkup.core.modules.otp.models import OtpRecord
from linkup.core.modules.otp.service import generate_otp


class TestGenerateOtp:
    def test_six_digits_in_range(self):
        for _ in range(200):
            code = generate_otp()
            assert len(code) == 6
            assert 100000 <= int(code) <= 999999


class TestOtpLedger:
    """Tests for issue / validate / consume."""

    @pytest.mark.asyncio
    async def test_issued_code_validates_once(self, core):
        """A code can be consumed exactly once."""
        user_id = uuid4()
        code = await core.services.otp.issue(user_id)

        check = await core.services.otp.validate(code, user_id)
        assert check.valid is True
        assert await core.services.otp.consume(check.record_id) is True

        assert (await core.services.otp.validate(code, user_id)).valid is False
        assert await core.services.otp.consume(check.record_id) is False

    @pytest.mark.asyncio
    async def test_code_bound_to_user(self, core):
        code = await core.services.otp.issue(uuid4())
        assert (await core.services.otp.validate(code, uuid4())).valid is False

    @pytest.mark.asyncio
    async def test_expired_code_invalid(self, core):
        """Codes past expires_at never validate, even before the TTL purge."""
        core.config.otp_ttl_minutes = -1
        user_id = uuid4()
        code = await core.services.otp.issue(user_id)
        assert (await core.services.otp.validate(code, user_id)).valid is False

    @pytest.mark.asyncio
    async def test_earlier_codes_stay_valid(self, core):
        """Issuing a new code does not revoke outstanding ones."""
        user_id = uuid4()
        first = await core.services.otp.issue(user_id)
        second = await core.services.otp.issue(user_id)
        assert (await core.services.otp.validate(first, user_id)).valid is True
        assert (await core.services.otp.validate(second, user_id)).valid is True

    @pytest.mark.asyncio
    async def test_ttl_index_created(self, core, storage):
        indexes = storage.database.get_collection("otp_verifications").indexes
        assert ([("expires_at", 1)], {"expireAfterSeconds": 0}) in indexes


class TestDuplicateCodes:
    """The same code issued twice to one user resolves to the newest live record."""

    @staticmethod
    def _insert(storage, user_id, code, created_at, expires_at) -> OtpRecord:
        record = OtpRecord(user_id=user_id, otp=code, created_at=created_at, expires_at=expires_at)
        storage.database.get_collection("otp_verifications").insert_sync(record.to_mongo())
        return record

    @pytest.mark.asyncio
    async def test_newest_record_wins_then_older_one(self, core, storage):
        user_id = uuid4()
        issued = utils.now()
        expires = issued + timedelta(minutes=10)
        older = self._insert(storage, user_id, "123456", issued - timedelta(minutes=2), expires)
        newer = self._insert(storage, user_id, "123456", issued - timedelta(minutes=1), expires)

        check = await core.services.otp.validate("123456", user_id)
        assert check.record_id == newer.id
        assert await core.services.otp.consume(newer.id) is True

        check = await core.services.otp.validate("123456", user_id)
        assert check.record_id == older.id
        assert await core.services.otp.consume(older.id) is True

        assert (await core.services.otp.validate("123456", user_id)).valid is False

    @pytest.mark.asyncio
    async def test_expired_newer_record_falls_back_to_older(self, core, storage):
        user_id = uuid4()
        issued = utils.now()
        older = self._insert(storage, user_id, "654321", issued - timedelta(minutes=5), issued + timedelta(minutes=5))
        self._insert(storage, user_id, "654321", issued - timedelta(minutes=1), issued - timedelta(seconds=1))

        check = await core.services.otp.validate("654321", user_id)
        assert check.valid is True
        assert check.record_id == older.id
