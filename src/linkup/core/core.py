from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

from pymongo.asynchronous.database import AsyncDatabase

from linkup.config import Config
from linkup.core.db import Storage
from linkup.core.modules.notification.mailer import HttpMailer, Mailer
from linkup.core.modules.notification.queue import ArqMailQueue, MailQueue


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from linkup.core.modules.auth.service import AuthService  # noqa: PLC0415
    from linkup.core.modules.media.service import MediaService  # noqa: PLC0415
    from linkup.core.modules.otp.service import OtpService  # noqa: PLC0415
    from linkup.core.modules.token.service import TokenService  # noqa: PLC0415
    from linkup.core.modules.user.service import UserService  # noqa: PLC0415
    from linkup.core.modules.username.service import UsernameService  # noqa: PLC0415

    user: UserService
    otp: OtpService
    username: UsernameService
    token: TokenService
    auth: AuthService
    media: MediaService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []
        self._database = database

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters for initialization - storage-owning services first
        service_configs = [
            ("user", "linkup.core.modules.user.service", "UserService"),
            ("otp", "linkup.core.modules.otp.service", "OtpService"),
            ("username", "linkup.core.modules.username.service", "UsernameService"),
            ("token", "linkup.core.modules.token.service", "TokenService"),
            ("auth", "linkup.core.modules.auth.service", "AuthService"),
            ("media", "linkup.core.modules.media.service", "MediaService"),
        ]

        # Dynamically import and instantiate services
        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop all services that have cleanup logic."""
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, storage, outbound collaborators, and all service instances."""

    config: Config
    storage: Storage
    database: AsyncDatabase[dict[str, Any]]
    mail_queue: MailQueue
    mailer: Mailer
    services: Services

    def __init__(self, config: Config, storage: Storage, mail_queue: MailQueue, mailer: Mailer) -> None:
        """Wire explicitly constructed collaborators and auto-register services."""
        self.config = config
        self.storage = storage
        self.database = storage.database
        self.mail_queue = mail_queue
        self.mailer = mailer
        self.services = Services(self.database)
        self.services.set_core(self)

    @classmethod
    def from_config(cls, config: Config) -> Core:
        """Build a Core with production collaborators (MongoDB, arq/Redis, HTTP email API)."""
        return cls(config, Storage.from_config(config), ArqMailQueue(config.redis_url), HttpMailer(config))

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Open storage and queue, then start all services."""
        await self.storage.open()
        await self.mail_queue.open()
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and release every outbound connection."""
        await self.services.stop_all()
        await self.mail_queue.close()
        await self.mailer.close()
        await self.storage.close()
