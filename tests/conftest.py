"""Shared pytest fixtures and in-memory doubles for storage, mail queue and mailer."""

import copy
import re
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date
from types import SimpleNamespace
from typing import Any

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from linkup.app import App
from linkup.config import Config
from linkup.core.core import Core
from linkup.core.modules.notification.models import EmailMessage, MailJob
from linkup.core.modules.user.models import User
from linkup.core.modules.user.passwords import hash_password
from linkup.web.server import create_fastapi_app

OTP_RE = re.compile(r"\b(\d{6})\b")
TEST_PASSWORD = "Secret123!"


class FakeCollection:
    """Async stand-in for a MongoDB collection.

    Supports equality and `$gt` filters, single-key sorts, `$set` updates and
    unique indexes (violations raise pymongo's DuplicateKeyError with keyPattern).
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.unique_fields: list[str] = []
        self.indexes: list[tuple[list[tuple[str, int]], dict[str, Any]]] = []

    @staticmethod
    def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
        for key, expected in query.items():
            value = doc.get(key)
            if isinstance(expected, dict) and "$gt" in expected:
                if value is None or not value > expected["$gt"]:
                    return False
            elif value != expected:
                return False
        return True

    def _find(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        return [doc for doc in self.docs if self._matches(doc, query)]

    def _check_unique(self, doc: dict[str, Any]) -> None:
        for field in self.unique_fields:
            for existing in self.docs:
                if existing.get(field) == doc.get(field):
                    raise DuplicateKeyError(
                        f"E11000 duplicate key error collection: {self.name} index: {field}_1",
                        11000,
                        {"keyPattern": {field: 1}, "keyValue": {field: doc.get(field)}},
                    )

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        if unique and len(keys) == 1:
            self.unique_fields.append(keys[0][0])
        return "_".join(f"{field}_{direction}" for field, direction in keys)

    async def find_one(self, query: dict[str, Any], sort: list[tuple[str, int]] | None = None) -> dict[str, Any] | None:
        found = self._find(query)
        if sort:
            field, direction = sort[0]
            found.sort(key=lambda doc: doc[field], reverse=direction < 0)
        return copy.deepcopy(found[0]) if found else None

    def insert_sync(self, doc: dict[str, Any]) -> None:
        self._check_unique(doc)
        self.docs.append(copy.deepcopy(doc))

    async def insert_one(self, doc: dict[str, Any]) -> SimpleNamespace:
        self.insert_sync(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> SimpleNamespace:
        found = self._find(query)
        if not found:
            return SimpleNamespace(matched_count=0, modified_count=0)
        found[0].update(copy.deepcopy(update["$set"]))
        return SimpleNamespace(matched_count=1, modified_count=1)

    async def find_one_and_update(
        self, query: dict[str, Any], update: dict[str, Any], return_document: bool = ReturnDocument.BEFORE
    ) -> dict[str, Any] | None:
        found = self._find(query)
        if not found:
            return None
        before = copy.deepcopy(found[0])
        found[0].update(copy.deepcopy(update["$set"]))
        return copy.deepcopy(found[0]) if return_document == ReturnDocument.AFTER else before

    async def count_documents(self, query: dict[str, Any], limit: int | None = None) -> int:
        count = len(self._find(query))
        return min(count, limit) if limit else count


class FakeDatabase:
    def __init__(self, name: str = "linkup_test") -> None:
        self.name = name
        self._collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection(name))

    async def command(self, name: str) -> dict[str, Any]:
        return {"ok": 1}


class FakeStorage:
    def __init__(self) -> None:
        self.database = FakeDatabase()
        self.opened = False
        self.closed = False

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True


class RecordingMailQueue:
    """Collects enqueued mail jobs; raises on enqueue when `fail` is set."""

    def __init__(self) -> None:
        self.jobs: list[MailJob] = []
        self.fail = False

    async def open(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def enqueue(self, job: MailJob) -> None:
        if self.fail:
            raise ConnectionError("Redis unavailable")
        self.jobs.append(job)


class RecordingMailer:
    def __init__(self) -> None:
        self.messages: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> None:
        self.messages.append(message)

    async def close(self) -> None:
        pass

    def last_otp(self) -> str:
        match = OTP_RE.search(self.messages[-1].text)
        assert match is not None, "no OTP in the last message"
        return match.group(1)


@pytest.fixture
def config(tmp_path):
    """Configuration with fast bcrypt and uploads in a temporary directory."""
    return Config(
        _env_file=None,
        database_url="mongodb://localhost:27017/linkup_test",
        host="127.0.0.1",
        port=8000,
        debug=True,
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        uploads_path=str(tmp_path / "uploads"),
        public_base_url="http://testserver",
    )


@pytest.fixture
def mail_queue():
    return RecordingMailQueue()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest_asyncio.fixture
async def core(config, storage, mail_queue, mailer) -> AsyncGenerator[Core]:
    """Started Core wired to in-memory collaborators."""
    instance = Core(config, storage, mail_queue, mailer)  # type: ignore[arg-type]
    await instance.on_start()
    yield instance
    await instance.on_stop()


@pytest.fixture
def deliver_mail(core, mail_queue) -> Callable[[], Awaitable[None]]:
    """Run every queued mail job the way the worker would, then clear the queue."""

    async def deliver() -> None:
        jobs, mail_queue.jobs = mail_queue.jobs, []
        for job in jobs:
            await core.services.auth.issue_and_send_otp(job.user_id, job.email, job.intent)

    return deliver


def make_user(username: str = "alice", email: str = "alice@example.com", verified: bool = True) -> User:
    return User(
        username=username,
        email=email,
        password_hash=hash_password(TEST_PASSWORD, rounds=4),
        is_verified=verified,
        first_name="Alice",
        last_name="Smith",
        date_of_birth=date(1995, 4, 12),
    )


@pytest.fixture
def seed_user(storage) -> Callable[..., User]:
    """Insert a user record directly into the fake users collection."""

    def seed(username: str = "alice", email: str = "alice@example.com", verified: bool = True) -> User:
        user = make_user(username, email, verified)
        storage.database.get_collection("users").insert_sync(user.to_mongo())
        return user

    return seed


@pytest.fixture
def client(config, storage, mail_queue, mailer):
    """TestClient over the full FastAPI app; lifespan starts Core on the fakes."""
    core = Core(config, storage, mail_queue, mailer)  # type: ignore[arg-type]
    with TestClient(create_fastapi_app(App(core), config), raise_server_exceptions=False) as test_client:
        test_client.core = core  # type: ignore[attr-defined]
        yield test_client


def run_mail_jobs(client: TestClient, mail_queue: RecordingMailQueue) -> None:
    """Deliver queued mail jobs inside the TestClient's event loop."""
    core: Core = client.core  # type: ignore[attr-defined]
    jobs, mail_queue.jobs = mail_queue.jobs, []
    for job in jobs:
        client.portal.call(core.services.auth.issue_and_send_otp, job.user_id, job.email, job.intent)  # type: ignore[union-attr]


@pytest.fixture
def mail_runner(client, mail_queue) -> Callable[[], None]:
    return lambda: run_mail_jobs(client, mail_queue)
