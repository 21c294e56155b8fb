from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from urllib.parse import urlparse
from uuid import UUID, uuid4

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import ConnectionFailure, PyMongoError

from linkup.config import Config
from linkup.errors import TransientError

logger = structlog.get_logger(__name__)


class MongoModel(BaseModel):
    id: UUID = Field(alias="_id", serialization_alias="id", default_factory=uuid4)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        if "id" in data:
            data["_id"] = data.pop("id")  # Rename id → _id for MongoDB
        return data


@contextmanager
def transient_errors() -> Iterator[None]:
    """Translate connection and timeout failures from the driver into TransientError."""
    try:
        yield
    except PyMongoError as e:
        if isinstance(e, ConnectionFailure) or e.timeout:
            logger.warning("storage_transient_error", error=str(e))
            raise TransientError("Storage temporarily unavailable") from e
        raise


class Storage:
    """MongoDB handle with explicit lifecycle: opened at process start, closed at shutdown."""

    def __init__(self, client: AsyncMongoClient[dict[str, Any]], database_name: str) -> None:
        self.client = client
        self.database: AsyncDatabase[dict[str, Any]] = client.get_database(database_name)

    @classmethod
    def from_config(cls, config: Config) -> "Storage":
        client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(
            config.database_url,
            uuidRepresentation="standard",
            tz_aware=True,
            maxPoolSize=config.database_max_pool_size,
            connectTimeoutMS=config.database_connect_timeout_ms,
            serverSelectionTimeoutMS=config.database_server_selection_timeout_ms,
            timeoutMS=config.database_timeout_ms,
        )
        return cls(client, urlparse(config.database_url).path[1:])

    async def open(self) -> None:
        """Verify the database is reachable. Failure here must stop the process."""
        with transient_errors():
            await self.database.command("ping")
        logger.info("storage_connected", database=self.database.name)

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("storage_closed")
