from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import jwt
import structlog

from linkup import utils
from linkup.core.core import Service
from linkup.errors import ConfigurationError, InvalidTokenError, TokenExpiredError, TokenNotYetValidError

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(days=1)
USER_ID_CLAIM = "userId"
_ISSUER_CLAIMS = ("iat", "exp")


class TokenService(Service):
    """Signs and verifies stateless session tokens. Nothing is stored server-side."""

    async def on_start(self) -> None:
        self._secret()  # refuse to start without a signing secret

    def _secret(self) -> str:
        secret = self.core.config.jwt_secret
        if not secret:
            raise ConfigurationError("jwt_secret is not set")
        return secret

    def sign(self, claims: dict[str, Any], issued_at: datetime | None = None) -> str:
        """Sign claims with a fixed one-day expiry."""
        issued_at = issued_at or utils.now()
        payload = {**claims, "iat": issued_at, "exp": issued_at + TOKEN_LIFETIME}
        return jwt.encode(payload, self._secret(), algorithm=ALGORITHM)

    def sign_session(self, user_id: UUID) -> str:
        return self.sign({USER_ID_CLAIM: str(user_id)})

    def verify(self, token: str) -> dict[str, Any]:
        """Verify signature and time claims and return the caller's claims.

        Raises:
            TokenExpiredError: Past exp
            TokenNotYetValidError: Before nbf
            InvalidTokenError: Bad signature or malformed token
        """
        try:
            payload = jwt.decode(token, self._secret(), algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError from e
        except jwt.ImmatureSignatureError as e:
            raise TokenNotYetValidError from e
        except jwt.InvalidTokenError as e:
            logger.debug("token_invalid", error=str(e))
            raise InvalidTokenError from e
        return {key: value for key, value in payload.items() if key not in _ISSUER_CLAIMS}

    def verify_session(self, token: str) -> UUID:
        """Verify a session token and extract the user id it asserts."""
        claims = self.verify(token)
        try:
            return UUID(str(claims[USER_ID_CLAIM]))
        except (KeyError, ValueError) as e:
            raise InvalidTokenError from e
