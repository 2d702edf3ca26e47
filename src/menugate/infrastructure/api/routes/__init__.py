"""API Routes for MenuGate."""

from .menus_router import router as menus_router
from .permissions_router import router as permissions_router
from .roles_router import router as roles_router

__all__ = [
    "menus_router",
    "permissions_router",
    "roles_router",
]
