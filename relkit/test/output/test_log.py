"""Tests for relkit.output.log module."""

from __future__ import annotations

from relkit.output.console import MockConsole, Style
from relkit.output.log import ReleaseLog


class TestVisibility:
    def test_quiet_hides_execution_and_commands(self) -> None:
        console = MockConsole()
        log = ReleaseLog(console)
        log.execution("releases#createRelease (start)")
        log.command("git push")
        log.output("pushed")
        log.debug("raw")
        assert console.outputs == []

    def test_dry_run_shows_execution_and_skipped_commands(self) -> None:
        console = MockConsole()
        log = ReleaseLog(console, dry_run=True)
        log.execution("releases#createRelease (start)", "o/p")
        log.command("git push", skipped=True)
        assert console.messages == [
            "releases#createRelease (start) o/p",
            "$ git push (dry-run)",
        ]
        assert console.count(Style.DIM) == 2

    def test_verbose_echoes_output(self) -> None:
        console = MockConsole()
        log = ReleaseLog(console, verbose=True)
        log.command("git describe --tags --abbrev=0")
        log.output("v1.0.0\n")
        log.output("   ")
        log.debug("hidden")
        assert console.messages == ["$ git describe --tags --abbrev=0", "v1.0.0"]

    def test_debug_implies_verbose(self) -> None:
        console = MockConsole()
        log = ReleaseLog(console, debug=True)
        assert log.is_verbose
        log.debug("status", 502)
        assert console.messages == ["status 502"]


class TestSeverities:
    def test_warn_and_error_always_print(self) -> None:
        console = MockConsole()
        log = ReleaseLog(console)
        log.warn("No changes in src repo.")
        log.error("Push failed")
        log.log("M package.json")
        assert console.messages == [
            "warning: No changes in src repo.",
            "error: Push failed",
            "M package.json",
        ]
