# quotation_backend/routers/__init__.py
from .auth_router import router as auth_router
from .quotations_router import router as quotations_router

__all__ = [
    "auth_router",
    "quotations_router",
]
