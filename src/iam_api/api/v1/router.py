"""Aggregate the versioned API routers."""

from __future__ import annotations

from fastapi import APIRouter

from iam_api.features.groups.router import router as groups_router
from iam_api.features.roles.router import router as roles_router
from iam_api.features.users.router import router as users_router

API_V1_PREFIX = "/v1"


def create_api_router() -> APIRouter:
    api_router = APIRouter(prefix=API_V1_PREFIX)
    api_router.include_router(users_router)
    api_router.include_router(groups_router)
    api_router.include_router(roles_router)
    return api_router


__all__ = ["API_V1_PREFIX", "create_api_router"]
