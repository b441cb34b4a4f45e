from __future__ import annotations

from fastapi import APIRouter

from registry_api.api import health, institutions, users

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(institutions.router)
api_router.include_router(users.router)
