from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from relkit.core.config import CONFIG_FILE_NAME, ReleaseConfig, load_config, load_config_or_default
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def repo_root() -> Path:
    env = os.environ.get("RELKIT_ROOT")
    if env:
        return Path(env).expanduser().resolve()
    return Path.cwd().resolve()


def build_context(config_path: Path | None = None) -> CLIContext:
    root = repo_root()
    if config_path is not None:
        result = load_config(config_path.expanduser())
    else:
        result = load_config_or_default(root / CONFIG_FILE_NAME)

    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(root=root, config=result.value, console=RichConsole())
