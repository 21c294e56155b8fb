import asyncio
from uuid import UUID

import structlog

from linkup.core.core import Service
from linkup.core.modules.auth.models import AuthContext, RegisterData, RegistrationResult, UsernameAvailability
from linkup.core.modules.notification.models import MailIntent, MailJob
from linkup.core.modules.notification.templates import render_otp_email
from linkup.core.modules.user.models import NewUser
from linkup.core.modules.user.passwords import hash_password, verify_password
from linkup.core.modules.user.validators import validate_password
from linkup.errors import (
    AccessDeniedError,
    AuthenticationError,
    InvalidCredentialsError,
    InvalidOtpError,
    NotFoundError,
    SamePasswordError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


class AuthService(Service):
    """Account verification state machine: registration, OTP confirmation, login, password reset.

    An account is PendingVerification while `is_verified` is false and becomes
    Verified only through `confirm_registration`. Nothing moves it back.
    """

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(hash_password, password, self.core.config.bcrypt_rounds)

    async def _matches(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(verify_password, password, password_hash)

    async def _enqueue_mail(self, job: MailJob) -> None:
        """Hand a mail job to the queue without failing the caller's request."""
        try:
            await self.core.mail_queue.enqueue(job)
        except Exception:
            logger.exception("mail_enqueue_failed", user_id=job.user_id, intent=job.intent)

    async def register(self, data: RegisterData) -> RegistrationResult:
        """Create an unverified account and queue its verification email. No session is issued."""
        validate_password(data.password)
        password_hash = await self._hash(data.password)
        user_id = await self.core.services.user.create_user(
            NewUser(
                username=data.username,
                email=data.email,
                password_hash=password_hash,
                first_name=data.first_name,
                last_name=data.last_name,
                date_of_birth=data.date_of_birth,
            )
        )
        logger.info("user_registered", user_id=user_id, username=data.username)
        await self._enqueue_mail(MailJob(user_id=user_id, email=data.email, intent=MailIntent.VERIFY))
        return RegistrationResult(user_id=user_id, email=data.email)

    async def login(self, login_name: str, password: str) -> str:
        """Authenticate a verified account and issue a session token.

        Unknown account, unverified account and wrong password are indistinguishable.
        """
        user = await self.core.services.user.find_by_login_name(login_name)
        if user is None or not await self._matches(password, user.password_hash):
            logger.warning("login_failed", login_name=login_name)
            raise InvalidCredentialsError
        logger.info("user_logged_in", user_id=user.id)
        return self.core.services.token.sign_session(user.id)

    async def confirm_registration(self, email: str, code: str) -> str:
        """Consume a verification OTP, mark the account verified and issue a session token.

        The OTP is consumed before the flag is set: a crash in between leaves an
        unverified account whose code is spent, which a fresh OTP can recover,
        never a code that can be replayed.
        """
        users = self.core.services.user
        user = await users.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found")

        check = await self.core.services.otp.validate(code, user.id)
        if not check.valid or check.record_id is None:
            logger.warning("confirm_registration_invalid_otp", user_id=user.id)
            raise InvalidOtpError
        # A concurrent confirmation may have spent the same record first
        if not await self.core.services.otp.consume(check.record_id):
            raise InvalidOtpError

        await users.mark_verified(user.id)
        logger.info("user_verification_confirmed", user_id=user.id)
        return self.core.services.token.sign_session(user.id)

    async def initiate_forgot_password(self, login_name: str) -> None:
        """Queue a password reset OTP for the account behind login_name."""
        user = await self.core.services.user.find_by_login_name(login_name, verified_only=False)
        if user is None:
            raise NotFoundError("User not found")
        await self._enqueue_mail(MailJob(user_id=user.id, email=user.email, intent=MailIntent.FORGOT_PASSWORD))
        logger.info("forgot_password_initiated", user_id=user.id)

    async def change_password(self, login_name: str, code: str, new_password: str) -> None:
        """Reset a password with an OTP.

        The new hash is written before the OTP is consumed, so a crash in
        between can at worst let the same code set a password once more.
        The write only applies over the hash read at lookup, so of two
        concurrent resets with one code exactly one changes the password.
        """
        validate_password(new_password)
        users = self.core.services.user
        user = await users.find_by_login_name(login_name, verified_only=False)
        if user is None:
            raise NotFoundError("User not found")

        check = await self.core.services.otp.validate(code, user.id)
        if not check.valid or check.record_id is None:
            logger.warning("change_password_invalid_otp", user_id=user.id)
            raise InvalidOtpError

        if await self._matches(new_password, user.password_hash):
            raise SamePasswordError

        new_hash = await self._hash(new_password)
        if not await users.update_password_hash(user.id, new_hash, user.password_hash):
            logger.warning("change_password_lost_race", user_id=user.id)
            raise InvalidOtpError
        if not await self.core.services.otp.consume(check.record_id):
            logger.warning("change_password_otp_already_consumed", user_id=user.id, otp_id=check.record_id)
            raise InvalidOtpError
        logger.info("password_changed", user_id=user.id)

    async def issue_and_send_otp(self, user_id: UUID, email: str, intent: MailIntent) -> None:
        """Issue a fresh OTP and email it. Delivery errors propagate so the queue can retry."""
        if await self.core.services.user.get_user(user_id) is None:
            logger.warning("otp_mail_user_missing", user_id=user_id, intent=intent)
            return
        code = await self.core.services.otp.issue(user_id)
        await self.core.mailer.send(render_otp_email(email, intent, code))
        logger.info("otp_mail_sent", user_id=user_id, intent=intent)

    async def authenticate(self, token: str) -> AuthContext:
        """Resolve a bearer token to the current, verified user record.

        Raises:
            AuthenticationError: Token invalid/expired, or its user no longer exists
            AccessDeniedError: The user exists but is not verified
        """
        user_id = self.core.services.token.verify_session(token)
        user = await self.core.services.user.get_user(user_id)
        if user is None:
            raise AuthenticationError("User not found")
        if not user.is_verified:
            raise AccessDeniedError("Account not verified")
        return AuthContext(user=user, token=token)

    async def generate_username(self, base: str, first_name: str | None = None) -> str:
        username = await self.core.services.username.generate_unique(base, first_name)
        if username is None:
            raise ValidationError("Unable to generate a unique username")
        return username

    async def validate_username(self, username: str) -> UsernameAvailability:
        """Report availability, with suggestions when the name is taken."""
        negotiator = self.core.services.username
        if not await negotiator.exists(username):
            return UsernameAvailability(username=username, available=True)
        return UsernameAvailability(username=username, available=False, suggestions=await negotiator.suggest(username))
