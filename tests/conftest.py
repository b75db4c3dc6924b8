"""Shared pytest fixtures for IAM API tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from iam_api.features.management.service import EntityLifecycleManager
from iam_api.settings import Settings
from iam_api.store.sql import SqlDocumentStore, build_engine


def pytest_collection_modifyitems(config, items) -> None:
    for item in items:
        path_str = str(Path(str(item.fspath)))
        if "/tests/integration/" in path_str:
            item.add_marker(pytest.mark.integration)
        elif "/tests/unit/" in path_str:
            item.add_marker(pytest.mark.unit)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite document store."""

    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'data' / 'iam.sqlite'}",
        document_store="sql",
        log_level="WARNING",
        access_log_enabled=False,
        default_page_size=25,
        max_page_size=100,
    )


@pytest.fixture()
def sql_store() -> Iterator[SqlDocumentStore]:
    store = SqlDocumentStore(build_engine("sqlite://"))
    store.ensure_schema()
    yield store
    store.close()


@pytest.fixture()
def manager(sql_store: SqlDocumentStore) -> EntityLifecycleManager:
    return EntityLifecycleManager(store=sql_store, default_page_size=25, max_page_size=100)
