"""Route listing command for the IAM API."""

from __future__ import annotations

import json
from typing import Any

import typer
from fastapi.routing import APIRoute

from iam_api.settings import Settings

EXCLUDED_METHODS = {"HEAD", "OPTIONS"}
METHOD_ORDER = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def _method_rank(method: str) -> int:
    return METHOD_ORDER.index(method) if method in METHOD_ORDER else len(METHOD_ORDER)


def collect_routes(prefix: str = "") -> list[dict[str, Any]]:
    """Return one entry per (path, method) of the API, sorted by path."""

    from iam_api.main import create_app

    app = create_app(Settings(api_docs_enabled=False))
    collected: list[dict[str, Any]] = []
    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue
        if prefix and not route.path.startswith(prefix):
            continue
        for method in sorted((route.methods or set()) - EXCLUDED_METHODS, key=_method_rank):
            collected.append(
                {
                    "method": method,
                    "path": route.path,
                    "status": route.status_code,
                    "summary": route.summary or route.name,
                    "handler": f"{route.endpoint.__module__}:{route.endpoint.__qualname__}",
                }
            )
    collected.sort(key=lambda item: (item["path"], _method_rank(item["method"])))
    return collected


def format_table(routes: list[dict[str, Any]]) -> str:
    if not routes:
        return "(no routes)"
    method_width = max(len(item["method"]) for item in routes)
    path_width = max(len(item["path"]) for item in routes)
    lines = []
    for item in routes:
        status = item["status"] if item["status"] is not None else "-"
        lines.append(
            f"{item['method']:<{method_width}}  {item['path']:<{path_width}}  "
            f"{status!s:<3}  {item['summary']}"
        )
    return "\n".join(lines)


def register(app: typer.Typer) -> None:
    @app.command(name="routes", help="Print the API route table.")
    def routes(
        prefix: str = typer.Option("", "--prefix", help="Only show paths with this prefix."),
        as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
    ) -> None:
        collected = collect_routes(prefix)
        if as_json:
            typer.echo(json.dumps(collected, indent=2))
        else:
            typer.echo(format_table(collected))
