"""Release context passed by reference through every step."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from relkit.core.config import ReleaseConfig
from relkit.core.runtime import RuntimeOptions
from relkit.git.shell import CommandExecutor, CommandRunner
from relkit.output.console import ConsoleProtocol
from relkit.output.log import ReleaseLog

__all__ = ["ReleaseContext", "create_context"]


@dataclass
class ReleaseContext:
    """Everything one release run needs.

    Attributes:
        root: Repository root (working directory of every command)
        version: Version being released, substituted into templates
        config: Release configuration (file plus CLI overrides)
        executor: Command executor (owns dry-run)
        log: Release log
        force: Allow empty commits and moving existing tags
        runtime: Values computed by one step for later steps
    """

    root: Path
    version: str
    config: ReleaseConfig
    executor: CommandRunner
    log: ReleaseLog
    force: bool = False
    runtime: RuntimeOptions = field(default_factory=RuntimeOptions)

    @property
    def dry_run(self) -> bool:
        return self.executor.dry_run


def create_context(
    *,
    root: Path,
    version: str,
    config: ReleaseConfig,
    console: ConsoleProtocol,
    dry_run: bool = False,
    force: bool = False,
    verbose: bool = False,
    debug: bool = False,
) -> ReleaseContext:
    log = ReleaseLog(console, verbose=verbose, debug=debug, dry_run=dry_run)
    return ReleaseContext(
        root=root,
        version=version,
        config=config,
        executor=CommandExecutor(root, log, dry_run=dry_run),
        log=log,
        force=force,
    )
