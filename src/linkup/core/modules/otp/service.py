import secrets
from datetime import timedelta
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from linkup import utils
from linkup.core.core import Service
from linkup.core.db import transient_errors
from linkup.core.modules.otp.models import OTP_MIN, OTP_SPAN, OtpCheck, OtpRecord

logger = structlog.get_logger(__name__)


def generate_otp() -> str:
    """Uniformly random 6-digit code in 100000..999999."""
    return str(OTP_MIN + secrets.randbelow(OTP_SPAN))


class OtpService(Service):
    """OTP ledger: issues, validates and consumes one-time passcodes."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("otp_verifications")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("user_id", 1), ("otp", 1), ("created_at", -1)])
        # TTL index, documents are removed once expires_at has passed
        await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    async def issue(self, user_id: UUID) -> str:
        """Persist a fresh code for the user and return it for out-of-band delivery.

        Earlier outstanding codes are left in place; validation picks the newest match.
        """
        issued_at = utils.now()
        record = OtpRecord(
            user_id=user_id,
            otp=generate_otp(),
            created_at=issued_at,
            expires_at=issued_at + timedelta(minutes=self.core.config.otp_ttl_minutes),
        )
        with transient_errors():
            await self._collection.insert_one(record.to_mongo())
        logger.debug("otp_issued", user_id=user_id, otp_id=record.id, expires_at=record.expires_at)
        return record.otp

    async def validate(self, code: str, user_id: UUID) -> OtpCheck:
        """Find the most recently created unexpired, unconsumed record matching user and code."""
        with transient_errors():
            doc = await self._collection.find_one(
                {"user_id": user_id, "otp": code, "is_verified": False, "expires_at": {"$gt": utils.now()}},
                sort=[("created_at", -1)],
            )
        if doc is None:
            return OtpCheck(valid=False)
        return OtpCheck(valid=True, record_id=doc["_id"])

    async def consume(self, record_id: UUID) -> bool:
        """Mark a record verified. Returns False if it was already consumed (or missing)."""
        with transient_errors():
            res = await self._collection.update_one(
                {"_id": record_id, "is_verified": False}, {"$set": {"is_verified": True}}
            )
        consumed = res.modified_count == 1
        logger.debug("otp_consumed", otp_id=record_id, consumed=consumed)
        return consumed
