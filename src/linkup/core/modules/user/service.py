from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from linkup import utils
from linkup.core.core import Service
from linkup.core.db import transient_errors
from linkup.core.modules.user.models import NewUser, ProfileUpdate, User
from linkup.core.modules.user.validators import validate_profile_update
from linkup.errors import DuplicateKeyError

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Credential store: owns user records, their verification flag and profile fields.

    Lookups always go to the database so that token holders are re-checked
    against the current record on every use.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create unique indexes; uniqueness is enforced here, not in application code."""
        await self._collection.create_index([("username", 1)], unique=True)
        await self._collection.create_index([("email", 1)], unique=True)

    async def _find_one(self, query: dict[str, Any]) -> User | None:
        with transient_errors():
            doc = await self._collection.find_one(query)
        return User.model_validate(doc) if doc is not None else None

    async def get_user(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        return await self._find_one({"_id": user_id})

    async def find_by_email(self, email: str) -> User | None:
        """Get user by email regardless of verification state."""
        return await self._find_one({"email": email})

    async def find_by_login_name(self, login_name: str, verified_only: bool = True) -> User | None:
        """Resolve a login name by email if it looks like one, otherwise by username."""
        field = "email" if utils.is_email(login_name) else "username"
        query: dict[str, Any] = {field: login_name}
        if verified_only:
            query["is_verified"] = True
        return await self._find_one(query)

    async def username_exists(self, username: str) -> bool:
        with transient_errors():
            return await self._collection.count_documents({"username": username}, limit=1) > 0

    async def email_exists(self, email: str) -> bool:
        with transient_errors():
            return await self._collection.count_documents({"email": email}, limit=1) > 0

    async def create_user(self, data: NewUser) -> UUID:
        """Insert an unverified user.

        Raises:
            DuplicateKeyError: If the username or email is already taken
        """
        user = User(**data.model_dump())
        try:
            with transient_errors():
                res = await self._collection.insert_one(user.to_mongo())
        except MongoDuplicateKeyError as e:
            key_pattern = (e.details or {}).get("keyPattern") or {}
            field = next(iter(key_pattern), "username")
            logger.info("user_duplicate_key", field=field)
            raise DuplicateKeyError(field) from e
        logger.debug("user_created", user_id=res.inserted_id)
        return user.id

    async def mark_verified(self, user_id: UUID) -> None:
        with transient_errors():
            await self._collection.update_one({"_id": user_id}, {"$set": {"is_verified": True, "updated_at": utils.now()}})
        logger.debug("user_verified", user_id=user_id)

    async def update_password_hash(self, user_id: UUID, password_hash: str, current_hash: str) -> bool:
        """Replace the hash only if it is still current_hash.

        Returns False when another writer changed the password first.
        """
        with transient_errors():
            res = await self._collection.update_one(
                {"_id": user_id, "password_hash": current_hash},
                {"$set": {"password_hash": password_hash, "updated_at": utils.now()}},
            )
        updated = res.modified_count == 1
        logger.debug("user_password_updated", user_id=user_id, updated=updated)
        return updated

    async def update_profile(self, user_id: UUID, update: ProfileUpdate) -> User | None:
        """Apply a partial profile update, touching only the fields explicitly supplied.

        Returns the updated user, or None when the user does not exist.
        """
        validate_profile_update(update)
        changes = update.model_dump(include=update.model_fields_set)
        changes["updated_at"] = utils.now()
        with transient_errors():
            doc = await self._collection.find_one_and_update(
                {"_id": user_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
            )
        if doc is None:
            return None
        logger.debug("user_profile_updated", user_id=user_id, fields=sorted(update.model_fields_set))
        return User.model_validate(doc)
