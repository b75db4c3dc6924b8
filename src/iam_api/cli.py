"""iam-api: CLI for the IAM API."""

from __future__ import annotations

import typer

from iam_api.commands import register_all

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="IAM API CLI (dev, start, init-store, routes).",
)


@app.callback()
def _main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


register_all(app)


if __name__ == "__main__":
    app()
