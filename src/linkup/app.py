from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from linkup.core.core import Core
from linkup.core.modules.auth.models import AuthContext, RegisterData, RegistrationResult, UsernameAvailability
from linkup.core.modules.media.models import StoredFileInfo, UploadedFile
from linkup.core.modules.user.models import ProfileUpdate, ProfileView
from linkup.errors import NotFoundError


class App:
    """Facade for all application operations.

    Public onboarding operations delegate straight to the auth orchestrator;
    everything else takes the AuthContext produced by `authenticate`.
    """

    def __init__(self, core: Core) -> None:
        self._core = core

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def authenticate(self, token: str) -> AuthContext:
        """Resolve a bearer token to an authentication context."""
        return await self._core.services.auth.authenticate(token)

    # === Onboarding and credentials ===
    async def register(self, data: RegisterData) -> RegistrationResult:
        """Register an account pending email verification."""
        return await self._core.services.auth.register(data)

    async def login(self, login_name: str, password: str) -> str:
        """Authenticate by email or username and issue a session token."""
        return await self._core.services.auth.login(login_name, password)

    async def confirm_registration(self, email: str, otp: str) -> str:
        """Verify an account with its OTP and issue a session token."""
        return await self._core.services.auth.confirm_registration(email, otp)

    async def forgot_password(self, login_name: str) -> None:
        """Send a password reset OTP."""
        await self._core.services.auth.initiate_forgot_password(login_name)

    async def change_password(self, login_name: str, otp: str, new_password: str) -> None:
        """Reset a password using an OTP."""
        await self._core.services.auth.change_password(login_name, otp, new_password)

    async def generate_username(self, base: str, first_name: str | None = None) -> str:
        return await self._core.services.auth.generate_username(base, first_name)

    async def validate_username(self, username: str) -> UsernameAvailability:
        return await self._core.services.auth.validate_username(username)

    async def username_exists(self, username: str) -> bool:
        return await self._core.services.user.username_exists(username)

    async def email_exists(self, email: str) -> bool:
        return await self._core.services.user.email_exists(email)

    # === Profile ===
    async def get_profile(self, ctx: AuthContext) -> ProfileView:
        """Get the caller's profile, re-read from storage."""
        user = await self._core.services.user.get_user(ctx.user_id)
        if user is None:
            raise NotFoundError("Profile not found")
        return ProfileView.from_domain(user)

    async def update_profile(self, ctx: AuthContext, update: ProfileUpdate) -> ProfileView:
        """Partially update the caller's own profile."""
        user = await self._core.services.user.update_profile(ctx.user_id, update)
        if user is None:
            raise NotFoundError("Profile not found")
        return ProfileView.from_domain(user)

    # === Media ===
    async def upload_media(self, ctx: AuthContext, filename: str, content: bytes, mime_type: str) -> UploadedFile:
        return await self._core.services.media.upload(ctx.user_id, filename, content, mime_type)

    async def get_media_file(self, ctx: AuthContext, name: str) -> StoredFileInfo:  # noqa: ARG002
        """Locate an uploaded file (authenticated users only)."""
        return self._core.services.media.get_file_info(name)
