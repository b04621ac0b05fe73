"""Release log.

Every release step reports at one of four severities:

- ``execution``: what is (or, in dry-run, would be) executed. Printed when
  verbose or dry-run.
- ``debug``: raw errors and responses. Printed only with ``--debug``.
- ``warn``: soft failures; the release continues.
- ``error``: fatal failures and final retry attempts.

``log`` prints plain lines regardless of verbosity. Verbosity only changes
what is printed, never what executes.
"""

from __future__ import annotations

from relkit.output.console import ConsoleProtocol, Style

__all__ = ["ReleaseLog"]


class ReleaseLog:
    def __init__(
        self,
        console: ConsoleProtocol,
        *,
        verbose: bool = False,
        debug: bool = False,
        dry_run: bool = False,
    ) -> None:
        self.console = console
        self.is_verbose = verbose or debug
        self.is_debug = debug
        self.is_dry_run = dry_run

    def log(self, message: str) -> None:
        self.console.print(message)

    def execution(self, *parts: object) -> None:
        if self.is_verbose or self.is_dry_run:
            self.console.print(" ".join(str(p) for p in parts), Style.DIM)

    def command(self, command: str, *, skipped: bool = False) -> None:
        """Echo a shell command; ``skipped`` marks commands suppressed by dry-run."""
        if self.is_verbose or self.is_dry_run:
            suffix = " (dry-run)" if skipped else ""
            self.console.print(f"$ {command}{suffix}", Style.DIM)

    def output(self, text: str) -> None:
        """Echo captured command output when verbose."""
        if self.is_verbose and text.strip():
            self.console.print(text.rstrip(), Style.DIM)

    def debug(self, *parts: object) -> None:
        if self.is_debug:
            self.console.print(" ".join(str(p) for p in parts), Style.DIM)

    def warn(self, message: str) -> None:
        self.console.warning(message)

    def error(self, message: str) -> None:
        self.console.error(message)
