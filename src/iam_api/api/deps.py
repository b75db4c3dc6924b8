"""Dependency factories used by API routers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from iam_api.features.management.service import EntityLifecycleManager
from iam_api.settings import Settings
from iam_api.store.base import DocumentStore


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise RuntimeError("Settings not initialized. Build the app with create_app().")
    return settings


def get_document_store(request: Request) -> DocumentStore:
    store = getattr(request.app.state, "document_store", None)
    if store is None:
        raise RuntimeError("Document store not initialized. Is the lifespan running?")
    return store


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
DocumentStoreDep = Annotated[DocumentStore, Depends(get_document_store)]


def get_lifecycle_manager(
    store: DocumentStoreDep,
    settings: SettingsDep,
) -> EntityLifecycleManager:
    return EntityLifecycleManager(
        store=store,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )


LifecycleManagerDep = Annotated[EntityLifecycleManager, Depends(get_lifecycle_manager)]


__all__ = [
    "DocumentStoreDep",
    "LifecycleManagerDep",
    "SettingsDep",
    "get_app_settings",
    "get_document_store",
    "get_lifecycle_manager",
]
