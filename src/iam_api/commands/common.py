"""Process helpers shared by the CLI commands."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

import typer

_BIN_DIR = Path(sys.executable).parent


def run(command: Sequence[str], *, env: dict[str, str] | None = None) -> None:
    """Echo and run ``command``; a non-zero exit becomes the CLI's exit code."""

    typer.echo(f"-> {' '.join(command)}", err=True)
    returncode = subprocess.run(list(command), env=env, check=False).returncode
    if returncode != 0:
        raise typer.Exit(code=returncode)


def uvicorn_path() -> str:
    """Prefer the uvicorn installed next to this interpreter, then ``PATH``."""

    bundled = _BIN_DIR / "uvicorn"
    if bundled.exists():
        return str(bundled)
    found = shutil.which("uvicorn")
    if found is None:
        typer.echo("uvicorn not found. Install the IAM API with `pip install -e .`.", err=True)
        raise typer.Exit(code=1)
    return found


def build_env() -> dict[str, str]:
    env = dict(os.environ)
    env["PATH"] = os.pathsep.join([str(_BIN_DIR), env.get("PATH", "")])
    return env
