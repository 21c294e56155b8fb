from typing import Annotated, cast

import structlog
from fastapi import Depends, Request

from linkup.app import App
from linkup.core.modules.auth.models import AuthContext
from linkup.errors import AuthenticationError

BEARER_PREFIX = "Bearer "


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_auth_context(request: Request, app: Annotated[App, Depends(get_app)]) -> AuthContext:
    """Authenticate the Authorization Bearer header into an explicit AuthContext."""
    header = request.headers.get("Authorization")
    if not header:
        raise AuthenticationError("Access token is required")
    if not header.startswith(BEARER_PREFIX):
        raise AuthenticationError("Invalid token format. Use 'Bearer <token>'")

    token = header.removeprefix(BEARER_PREFIX).strip()
    if not token:
        raise AuthenticationError("Access token is required")
    ctx = await app.authenticate(token)
    structlog.contextvars.bind_contextvars(user_id=ctx.user_id)
    return ctx


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
AuthContextDep = Annotated[AuthContext, Depends(get_auth_context)]
