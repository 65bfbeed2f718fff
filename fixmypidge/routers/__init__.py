"""API routers."""

from fixmypidge.routers.auth import router as auth_router
from fixmypidge.routers.cases import router as cases_router
from fixmypidge.routers.media import router as media_router
from fixmypidge.routers.webhooks import router as webhooks_router

__all__ = ["auth_router", "cases_router", "media_router", "webhooks_router"]
