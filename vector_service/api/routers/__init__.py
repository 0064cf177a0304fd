"""API routers."""

from .health import router as health_router
from .sync import router as sync_router
from .vectors import router as vectors_router

__all__ = [
    "health_router",
    "sync_router",
    "vectors_router",
]
