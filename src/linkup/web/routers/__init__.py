from linkup.web.routers.auth import router as auth_router
from linkup.web.routers.media import router as media_router
from linkup.web.routers.profile import router as profile_router

__all__ = [
    "auth_router",
    "media_router",
    "profile_router",
]
