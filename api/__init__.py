from __future__ import annotations

from fastapi import FastAPI

from .configAPI import router as config_router
from .usersAPI import router as users_router

__all__ = ["users_router", "config_router", "register"]


def register(app: FastAPI) -> None:
    app.include_router(users_router)
    app.include_router(config_router)
