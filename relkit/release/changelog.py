"""Changelog generation.

The changelog is the output of a configured command, typically ``git log``.
When the command holds the ``[REV_RANGE]`` placeholder it is replaced by
``<previous tag>...HEAD``, or by nothing (whole history) when the previous
tag does not exist, e.g. on a first release.

Runtime options:
    reads ``previous_version``
    writes ``changelog``
"""

from __future__ import annotations

import shlex

from relkit.core.result import Err, Ok, Result
from relkit.core.runtime import CHANGELOG, PREVIOUS_VERSION, RuntimeOptions
from relkit.core.templating import render
from relkit.git.shell import CommandRunner
from relkit.git.workflow import GitWorkflow
from relkit.output.log import ReleaseLog
from relkit.release.errors import ReleaseError

__all__ = ["REV_RANGE_PLACEHOLDER", "ChangelogGenerator", "revision_range"]

REV_RANGE_PLACEHOLDER = "[REV_RANGE]"
REV_RANGE_TEMPLATE = "{tag}...HEAD"


def revision_range(previous_tag: str | None) -> str:
    """Revision range since ``previous_tag``; empty means the whole history."""
    return render(REV_RANGE_TEMPLATE, {"tag": previous_tag}) if previous_tag else ""


class ChangelogGenerator:
    def __init__(
        self,
        executor: CommandRunner,
        workflow: GitWorkflow,
        log: ReleaseLog,
        runtime: RuntimeOptions,
    ) -> None:
        self.executor = executor
        self.workflow = workflow
        self.log = log
        self.runtime = runtime

    def _previous_tag(self, tag_name: str) -> Result[str | None, ReleaseError]:
        previous_version = self.runtime.get_str(PREVIOUS_VERSION)
        if previous_version is None:
            return Ok(None)

        previous_tag = render(tag_name, {"version": previous_version})
        exists = self.workflow.tag_exists(previous_tag)
        if isinstance(exists, Err):
            self.log.warn("Probably the previous version is not a known tag in the repository.")
            self.log.debug(exists.error.details)
            return Err(
                ReleaseError(
                    kind="changelog_failed",
                    message=f"Could not create changelog from latest tag ({previous_tag}) to HEAD.",
                    hint=exists.error.details,
                )
            )
        return Ok(previous_tag if exists.value else None)

    def get_changelog(self, command: str | None, tag_name: str) -> Result[str | None, ReleaseError]:
        """Run the changelog command and store its output.

        Args:
            command: Changelog command; None disables the step
            tag_name: Tag template used to name the previous version's tag

        Returns:
            Ok(changelog text), Ok(None) when disabled, or Err on failure
        """
        if not command:
            return Ok(None)

        if REV_RANGE_PLACEHOLDER in command:
            previous_tag = self._previous_tag(tag_name)
            if isinstance(previous_tag, Err):
                return previous_tag
            rev_range = revision_range(previous_tag.value)
            command = command.replace(
                REV_RANGE_PLACEHOLDER, shlex.quote(rev_range) if rev_range else "", 1
            )

        result = self.executor.run(command, read_only=True)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="changelog_failed",
                    message="Could not create changelog.",
                    hint=result.error.details,
                )
            )

        changelog = result.value.output
        self.runtime.set_option(CHANGELOG, changelog)
        return Ok(changelog)
