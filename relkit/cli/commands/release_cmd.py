"""Release command - commit, tag, push and publish a version."""

from __future__ import annotations

from pathlib import Path

import typer

from relkit.cli.context import build_context
from relkit.core.result import Err
from relkit.output.errors import print_release_error, release_error_exit_code
from relkit.release.context import create_context
from relkit.release.pipeline import run_release


def release(
    version: str = typer.Argument(..., help="Version to release (e.g. 1.2.0)."),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Show what would be done without changing anything."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Allow empty commits and move existing tags."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Print commands and their output."),
    debug: bool = typer.Option(False, "--debug", help="Print raw errors and API responses."),
    require_clean: bool | None = typer.Option(
        None,
        "--require-clean/--no-require-clean",
        help="Require a clean working directory (overrides [git] require_clean).",
    ),
    github_release: bool | None = typer.Option(
        None,
        "--github-release/--no-github-release",
        help="Create a remote release (overrides [github] release).",
    ),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Config file (default: .release.toml in the repository)."
    ),
) -> None:
    """Commit, tag and push VERSION, then publish the remote release."""
    cli = build_context(config_path)
    config = cli.config.with_overrides(require_clean=require_clean, github_release=github_release)

    ctx = create_context(
        root=cli.root,
        version=version.strip(),
        config=config,
        console=cli.console,
        dry_run=dry_run,
        force=force,
        verbose=verbose,
        debug=debug,
    )

    result = run_release(ctx)
    if isinstance(result, Err):
        print_release_error(result.error, cli.console)
        raise typer.Exit(code=release_error_exit_code(result.error))
