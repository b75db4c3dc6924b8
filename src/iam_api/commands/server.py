"""Server commands for the IAM API."""

from __future__ import annotations

import typer

from iam_api.commands import common
from iam_api.settings import Settings

APP_FACTORY = "iam_api.main:create_app"


def build_uvicorn_command(
    settings: Settings,
    *,
    host: str | None = None,
    port: int | None = None,
    processes: int | None = None,
    reload: bool = False,
) -> list[str]:
    host = host or settings.api_host
    port = port or settings.api_port
    processes = int(processes if processes is not None else settings.api_processes)

    cmd = [
        common.uvicorn_path(),
        APP_FACTORY,
        "--factory",
        "--host",
        host,
        "--port",
        str(port),
        "--log-level",
        settings.log_level.lower(),
    ]
    if not settings.access_log_enabled:
        cmd.append("--no-access-log")
    if reload and processes == 1:
        cmd.extend(["--reload", "--reload-dir", "src"])
    elif processes > 1:
        cmd.extend(["--workers", str(processes)])
    return cmd


def run_dev(*, host: str | None = None, port: int | None = None) -> None:
    """Run the API dev server (uvicorn --reload)."""

    settings = Settings()
    host = host or settings.api_host
    port = port or settings.api_port
    cmd = build_uvicorn_command(settings, host=host, port=port, processes=1, reload=True)
    typer.echo(f"IAM API dev server: http://{host}:{port}")
    common.run(cmd, env=common.build_env())


def run_start(
    *,
    host: str | None = None,
    port: int | None = None,
    processes: int | None = None,
) -> None:
    """Start the API server."""

    settings = Settings()
    host = host or settings.api_host
    port = port or settings.api_port
    cmd = build_uvicorn_command(settings, host=host, port=port, processes=processes)
    typer.echo(f"Starting IAM API on http://{host}:{port}")
    common.run(cmd, env=common.build_env())


def register(app: typer.Typer) -> None:
    @app.command(name="dev", help="Run the API dev server with auto-reload.")
    def dev(
        host: str = typer.Option(
            None,
            "--host",
            help="Host/interface for the API dev server.",
            envvar="IAM_API_HOST",
        ),
        port: int = typer.Option(
            None,
            "--port",
            help="Port for the API dev server.",
            envvar="IAM_API_PORT",
        ),
    ) -> None:
        run_dev(host=host, port=port)

    @app.command(name="start", help="Start the API server.")
    def start(
        host: str = typer.Option(
            None,
            "--host",
            help="Host/interface for the API server.",
            envvar="IAM_API_HOST",
        ),
        port: int = typer.Option(
            None,
            "--port",
            help="Port for the API server.",
            envvar="IAM_API_PORT",
        ),
        processes: int = typer.Option(
            None,
            "--processes",
            help="Number of API processes.",
            envvar="IAM_API_PROCESSES",
            min=1,
        ),
    ) -> None:
        run_start(host=host, port=port, processes=processes)
