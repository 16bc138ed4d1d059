from fastapi import APIRouter, FastAPI

from .admin import router as admin_router
from .public import router as public_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(admin_router, tags=["admin"])
    app.include_router(public_router, tags=["public"])


__all__ = ["include_modular_routers", "APIRouter"]
