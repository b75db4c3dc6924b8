"""Command registrations for the IAM API CLI."""

from __future__ import annotations

import typer

from . import routes, server, store

COMMAND_MODULES = (
    server,
    store,
    routes,
)


def register_all(app: typer.Typer) -> None:
    for module in COMMAND_MODULES:
        module.register(app)
