"""Command execution for release steps.

``CommandExecutor`` is the single place where dry-run is enforced. Commands
are either read-only (status, diff, describe, rev-parse, remote url) and
always run, or mutating and skipped under dry-run, resolving as a no-op
success with empty output.

String commands may carry the ``!`` sentinel to mark them read-only:

    executor.run("!git describe --tags --abbrev=0")
    executor.run(["git", "describe", "--tags", "--abbrev=0"], read_only=True)

Both forms above are equivalent. String commands are split with shell
quoting rules but are not run through a shell (no pipes or redirection).
"""

from __future__ import annotations

import glob
import shlex
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from relkit.core.result import Err, Ok, Result
from relkit.output.log import ReleaseLog
from relkit.platform.process import ProcessError
from relkit.platform.process import run as run_process

__all__ = [
    "READ_ONLY_SENTINEL",
    "CommandExecutor",
    "CommandResult",
    "CommandRunner",
    "parse_command",
]

READ_ONLY_SENTINEL = "!"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output of a successful command."""

    output: str


class CommandRunner(Protocol):
    """What release steps need from the executor (fakes implement this in tests)."""

    dry_run: bool

    def run(
        self, command: str | Sequence[str], *, read_only: bool = False
    ) -> Result[CommandResult, ProcessError]: ...

    def remove_tree(self, path: Path) -> Result[None, ProcessError]: ...

    def copy_files(
        self, base_dir: Path, patterns: Sequence[str], dest: Path
    ) -> Result[int, ProcessError]: ...

    def with_cwd(self, cwd: Path) -> CommandRunner: ...


def parse_command(command: str | Sequence[str], *, read_only: bool = False) -> tuple[list[str], bool]:
    """Normalize a command into argv plus its read-only flag.

    A leading ``!`` on a string command marks it read-only.
    """
    if isinstance(command, str):
        text = command.strip()
        if text.startswith(READ_ONLY_SENTINEL):
            text = text[len(READ_ONLY_SENTINEL) :].lstrip()
            read_only = True
        return shlex.split(text), read_only
    return list(command), read_only


class CommandExecutor:
    """Runs git and changelog commands in one working directory.

    Attributes:
        cwd: Working directory for every command
        dry_run: Skip mutating commands when True
    """

    def __init__(self, cwd: Path, log: ReleaseLog, *, dry_run: bool = False) -> None:
        self.cwd = cwd
        self.log = log
        self.dry_run = dry_run

    def with_cwd(self, cwd: Path) -> CommandExecutor:
        """Return an executor sharing log and dry-run mode in another directory."""
        return CommandExecutor(cwd, self.log, dry_run=self.dry_run)

    def run(
        self, command: str | Sequence[str], *, read_only: bool = False
    ) -> Result[CommandResult, ProcessError]:
        argv, read_only = parse_command(command, read_only=read_only)
        display = shlex.join(argv)

        if self.dry_run and not read_only:
            self.log.command(display, skipped=True)
            return Ok(CommandResult(output=""))

        self.log.command(display)
        if not argv:
            return Err(ProcessError(command=(), returncode=-1, stdout="", stderr="empty command"))

        result = run_process(argv, cwd=self.cwd)
        if isinstance(result, Err):
            self.log.debug(result.error.details)
            return result

        self.log.output(result.value)
        return Ok(CommandResult(output=result.value))

    def remove_tree(self, path: Path) -> Result[None, ProcessError]:
        """Remove a directory tree if present (``rm -rf``); mutating."""
        target = path if path.is_absolute() else self.cwd / path
        display = shlex.join(["rm", "-rf", str(path)])
        if self.dry_run:
            self.log.command(display, skipped=True)
            return Ok(None)

        self.log.command(display)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
        except OSError as e:
            return Err(
                ProcessError(command=("rm", "-rf", str(path)), returncode=-1, stdout="", stderr=str(e))
            )
        return Ok(None)

    def copy_files(
        self, base_dir: Path, patterns: Sequence[str], dest: Path
    ) -> Result[int, ProcessError]:
        """Copy files matching ``patterns`` (relative to ``base_dir``) into ``dest``; mutating.

        Relative paths below ``base_dir`` are preserved. Returns the number of
        files copied (0 under dry-run).
        """
        base = base_dir if base_dir.is_absolute() else self.cwd / base_dir
        target = dest if dest.is_absolute() else self.cwd / dest
        display = f"cp {' '.join(patterns)} {dest} (from {base_dir})"
        if self.dry_run:
            self.log.command(display, skipped=True)
            return Ok(0)

        self.log.command(display)
        copied = 0
        try:
            for pattern in patterns:
                for match in sorted(glob.glob(pattern, root_dir=base, recursive=True)):
                    src = base / match
                    if not src.is_file():
                        continue
                    out = target / match
                    out.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(src, out)
                    copied += 1
        except OSError as e:
            return Err(
                ProcessError(command=("cp", str(base_dir), str(dest)), returncode=-1, stdout="", stderr=str(e))
            )
        return Ok(copied)
