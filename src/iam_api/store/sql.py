"""SQLAlchemy-backed document store.

Documents live in a single ``documents`` table keyed by ``(type, id)``. The
``rev`` column is compared on every update and delete, so a stale writer
changes zero rows and gets ``False`` back.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import (
    JSON,
    Column,
    MetaData,
    String,
    Table,
    create_engine,
    delete,
    func,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.pool import StaticPool

from iam_api.common.logging import log_context
from iam_api.settings import Settings

from .base import (
    DocumentPage,
    DocumentStore,
    DocumentStoreUnavailableError,
    StoredDocument,
)
from .paging import decode_page_param, new_revision, page_links, page_window

logger = logging.getLogger(__name__)

metadata = MetaData()

documents = Table(
    "documents",
    metadata,
    Column("type", String(32), primary_key=True),
    Column("id", String(320), primary_key=True),
    Column("rev", String(64), nullable=False),
    Column("body", JSON, nullable=False),
)


def build_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``.

    SQLite file databases get their parent directory created; in-memory
    SQLite shares one connection across threads.
    """

    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(url, echo=echo, pool_pre_ping=True)

    database = url.database or ""
    if database in {"", ":memory:"}:
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, connect_args={"check_same_thread": False})


class SqlDocumentStore(DocumentStore):
    """Document store over any SQLAlchemy engine."""

    backend = "sql"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_settings(cls, settings: Settings) -> SqlDocumentStore:
        return cls(build_engine(settings.database_url, echo=settings.database_echo))

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except (OperationalError, InterfaceError) as exc:
            logger.warning(
                "store.sql.unavailable",
                extra=log_context(operation=operation, error=str(exc.orig or exc)),
            )
            raise DocumentStoreUnavailableError(
                f"SQL document store unavailable during {operation}."
            ) from exc

    # ---- Mutations ----

    def save(self, document: StoredDocument) -> bool:
        with self._guard("save"):
            try:
                with self._engine.begin() as conn:
                    conn.execute(
                        insert(documents).values(
                            type=document.type,
                            id=document.id,
                            rev=new_revision(),
                            body=document.body,
                        )
                    )
            except IntegrityError:
                logger.info(
                    "store.sql.save.collision",
                    extra=log_context(entity_type=document.type, entity_id=document.id),
                )
                return False
        return True

    def update(self, document: StoredDocument) -> bool:
        if not document.rev:
            return False
        with self._guard("update"), self._engine.begin() as conn:
            result = conn.execute(
                update(documents)
                .where(
                    documents.c.type == document.type,
                    documents.c.id == document.id,
                    documents.c.rev == document.rev,
                )
                .values(rev=new_revision(document.rev), body=document.body)
            )
        return result.rowcount == 1

    def remove(self, doc_type: str, doc_id: str, revision: str) -> bool:
        with self._guard("remove"), self._engine.begin() as conn:
            result = conn.execute(
                delete(documents).where(
                    documents.c.type == doc_type,
                    documents.c.id == doc_id,
                    documents.c.rev == revision,
                )
            )
        return result.rowcount == 1

    # ---- Reads ----

    def find(self, doc_type: str, doc_id: str) -> StoredDocument | None:
        stmt = select(documents).where(documents.c.type == doc_type, documents.c.id == doc_id)
        with self._guard("find"), self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return _to_document(row)

    def find_all(self, doc_type: str, page_size: int, param: str | None = None) -> DocumentPage:
        page_number = decode_page_param(param)
        offset, limit = page_window(page_number, page_size)
        count_stmt = select(func.count()).select_from(documents).where(
            documents.c.type == doc_type
        )
        page_stmt = (
            select(documents)
            .where(documents.c.type == doc_type)
            .order_by(documents.c.id)
            .offset(offset)
            .limit(limit)
        )
        with self._guard("find_all"), self._engine.connect() as conn:
            total = int(conn.execute(count_stmt).scalar_one())
            rows = conn.execute(page_stmt).mappings().all()

        items = [_to_document(row) for row in rows]
        has_next, has_previous, next_param, previous_param = page_links(
            page_number=page_number,
            page_size=page_size,
            returned=len(items),
            total=total,
        )
        return DocumentPage(
            items=items,
            total_results=total,
            page_number=page_number,
            has_next=has_next,
            has_previous=has_previous,
            next_param=next_param,
            previous_param=previous_param,
        )

    # ---- Lifecycle ----

    def ensure_schema(self) -> None:
        with self._guard("ensure_schema"):
            metadata.create_all(self._engine)
        logger.info(
            "store.sql.schema_ready",
            extra=log_context(url=self._engine.url.render_as_string()),
        )

    def check_connection(self) -> None:
        with self._guard("check_connection"), self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def close(self) -> None:
        self._engine.dispose()


def _to_document(row: Any) -> StoredDocument:
    return StoredDocument(
        type=row["type"],
        id=row["id"],
        rev=row["rev"],
        body=dict(row["body"] or {}),
    )


__all__ = ["SqlDocumentStore", "build_engine", "documents", "metadata"]
