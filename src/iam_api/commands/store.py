"""Document store commands for the IAM API."""

from __future__ import annotations

import typer

from iam_api.common.logging import setup_logging
from iam_api.settings import Settings
from iam_api.store import DocumentStoreError, build_document_store


def run_init_store(*, check_only: bool = False) -> None:
    """Create the tables or CouchDB database/views the configured store needs."""

    settings = Settings()
    setup_logging(settings)
    store = build_document_store(settings)
    try:
        if check_only:
            store.check_connection()
            typer.echo(f"Document store ({store.backend}) is reachable.")
            return
        store.ensure_schema()
        typer.echo(f"Document store ({store.backend}) is ready.")
    except DocumentStoreError as exc:
        typer.echo(f"Document store ({store.backend}) error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        store.close()


def register(app: typer.Typer) -> None:
    @app.command(
        name="init-store",
        help="Prepare the configured document store (tables, or CouchDB database + views).",
    )
    def init_store(
        check: bool = typer.Option(
            False,
            "--check",
            help="Only verify connectivity; do not create anything.",
        ),
    ) -> None:
        run_init_store(check_only=check)
