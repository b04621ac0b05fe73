"""Git steps of a release.

Steps run strictly in sequence, each one against the repository state left
by the previous one. Most steps are soft: "nothing changed since the last
release" is a normal state, so a failed stage, commit, tag or push of tags
is logged as a warning and the release goes on. Only a missing repository,
a dirty working directory (when a clean one is required), a failed clone and
a failed push return ``Err``.

Runtime options:
    writes ``latest_tag``, ``previous_version`` (resolve_previous_version)
    writes ``<repo>_has_changes`` (has_changes)
    writes ``tag_set`` or the given flag key (tag)
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.core.runtime import LATEST_TAG, PREVIOUS_VERSION, TAG_SET, RuntimeOptions, has_changes_key
from relkit.core.templating import extract_version, render
from relkit.git.shell import CommandRunner
from relkit.output.log import ReleaseLog
from relkit.platform.process import ProcessError
from relkit.release.errors import ReleaseError

__all__ = ["DEFAULT_CLONE_BRANCH", "GitWorkflow", "split_clone_spec"]

DEFAULT_CLONE_BRANCH = "master"


def split_clone_spec(spec: str) -> tuple[str, str]:
    """Split ``url[#branch]`` into (url, branch); the branch defaults to master."""
    url, _, branch = spec.partition("#")
    return url.strip(), branch.strip() or DEFAULT_CLONE_BRANCH


class GitWorkflow:
    """Git operations for one repository.

    Attributes:
        executor: Runs commands in the repository (enforces dry-run)
        log: Release log
        runtime: Runtime option store shared with later steps
        force: Allow empty commits and moving existing tags
    """

    def __init__(
        self,
        executor: CommandRunner,
        log: ReleaseLog,
        runtime: RuntimeOptions,
        *,
        force: bool = False,
    ) -> None:
        self.executor = executor
        self.log = log
        self.runtime = runtime
        self.force = force

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def is_git_repo(self) -> Result[None, ReleaseError]:
        result = self.executor.run(["git", "rev-parse", "--git-dir"], read_only=True)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="not_a_repo",
                    message="Not a git repository.",
                    hint=result.error.details,
                )
            )
        return Ok(None)

    def is_working_dir_clean(self, require_clean: bool) -> Result[None, ReleaseError]:
        if not require_clean:
            return Ok(None)
        result = self.executor.run(
            ["git", "diff-index", "--name-only", "HEAD", "--exit-code"], read_only=True
        )
        if isinstance(result, Err):
            pending = result.error.stdout.strip()
            return Err(
                ReleaseError(
                    kind="dirty_working_dir",
                    message="Working dir must be clean.",
                    hint=pending or "Commit or stash your changes, or run with --no-require-clean.",
                )
            )
        return Ok(None)

    def has_changes(self, repo: str, *, warn: bool = True) -> bool:
        """Record whether ``repo`` has uncommitted changes; advisory only.

        With ``warn=False`` an unchanged repository is only reported at debug
        level.
        """
        result = self.executor.run(
            ["git", "diff-index", "--name-only", "HEAD", "--exit-code"], read_only=True
        )
        # diff-index exits 0 when there is no difference
        changed = isinstance(result, Err)
        self.runtime.set_option(has_changes_key(repo), changed)
        if not changed:
            report = self.log.warn if warn else self.log.debug
            report(f"No changes in {repo} repo.")
        return changed

    def get_remote_url(self) -> Result[str, ReleaseError]:
        result = self.executor.run(
            ["git", "config", "--get", "remote.origin.url"], read_only=True
        )
        if isinstance(result, Ok) and result.value.output.strip():
            return Ok(result.value.output.strip())
        return Err(
            ReleaseError(
                kind="remote_missing",
                message="Could not get remote Git url.",
                hint="git remote add origin <url>",
            )
        )

    def tag_exists(self, tag: str) -> Result[bool, ProcessError]:
        """Check for a local tag.

        Returns Ok(False) when the tag does not exist and Err when git itself
        failed (e.g. not a repository).
        """
        result = self.executor.run(
            ["git", "show-ref", "--tags", "--quiet", "--verify", "--", f"refs/tags/{tag}"],
            read_only=True,
        )
        if isinstance(result, Ok):
            return Ok(True)
        if result.error.returncode == 1:
            return Ok(False)
        return result

    def current_branch(self) -> str | None:
        result = self.executor.run(["git", "rev-parse", "--abbrev-ref", "HEAD"], read_only=True)
        if isinstance(result, Err):
            return None
        branch = result.value.output.strip()
        return None if branch in ("", "HEAD") else branch

    def status(self) -> None:
        result = self.executor.run(
            ["git", "status", "--short", "--untracked-files=no"], read_only=True
        )
        # Verbose mode already echoed the output
        if isinstance(result, Ok) and not self.log.is_verbose and result.value.output.strip():
            self.log.log(result.value.output.rstrip())

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def clone(self, spec: str, target: Path) -> Result[None, ReleaseError]:
        """Clone ``url[#branch]`` (single branch) into ``target``, replacing it."""
        url, branch = split_clone_spec(spec)
        removed = self.executor.remove_tree(target)
        if isinstance(removed, Err):
            self.log.error(f"Unable to clone {spec}")
            return Err(
                ReleaseError(kind="clone_failed", message=f"Could not remove {target}", hint=removed.error.details)
            )

        result = self.executor.run(
            ["git", "clone", url, "-b", branch, "--single-branch", str(target)]
        )
        if isinstance(result, Err):
            self.log.error(f"Unable to clone {spec}")
            return Err(
                ReleaseError(kind="clone_failed", message=f"Unable to clone {spec}", hint=result.error.details)
            )
        return Ok(None)

    def stage(self, files: str | Sequence[str] | None) -> None:
        if not files:
            return
        paths = [files] if isinstance(files, str) else list(files)
        result = self.executor.run(["git", "add", *paths])
        if isinstance(result, Err):
            self.log.debug(result.error.details)
            self.log.warn(f"Could not stage {' '.join(paths)}")

    def stage_dir(self, base_dir: str = ".") -> None:
        """Stage everything under ``base_dir``, deletions included."""
        result = self.executor.run(["git", "add", base_dir or ".", "--all"])
        if isinstance(result, Err):
            self.log.debug(result.error.details)
            self.log.warn(f"Could not stage {base_dir or '.'}")

    def commit(self, message: str, version: str) -> None:
        """Commit staged changes; when nothing is staged the latest commit gets tagged."""
        cmd = ["git", "commit"]
        if self.force:
            cmd.append("--allow-empty")
        cmd.append(f"--message={render(message, {'version': version})}")
        result = self.executor.run(cmd)
        if isinstance(result, Err):
            self.log.debug(result.error.details)
            self.log.warn("No changes to commit. The latest commit will be tagged.")

    def tag(self, version: str, tag_name: str, annotation: str, *, flag: str = TAG_SET) -> None:
        """Create an annotated tag; on success ``flag`` is set in the runtime store."""
        context = {"version": version}
        name = render(tag_name, context)
        cmd = ["git", "tag"]
        if self.force:
            cmd.append("--force")
        cmd.extend(["--annotate", f"--message={render(annotation, context)}", name])
        result = self.executor.run(cmd)
        if isinstance(result, Err):
            self.log.debug(result.error.details)
            self.log.warn(
                f'Could not tag. Does tag "{name}" already exist? Use --force to move a tag.'
            )
            return
        self.runtime.set_option(flag, True)

    def get_latest_tag(self) -> str | None:
        result = self.executor.run(["git", "describe", "--tags", "--abbrev=0"], read_only=True)
        if isinstance(result, Err):
            # No tags yet
            self.log.debug(result.error.details)
            return None
        return result.value.output.strip() or None

    def resolve_previous_version(self, tag_name: str) -> str | None:
        """Derive the previous version from the latest tag and the tag template."""
        latest = self.get_latest_tag()
        self.runtime.set_option(LATEST_TAG, latest)
        previous = extract_version(tag_name, latest) if latest else None
        if latest and previous is None:
            self.log.warn(f'Latest tag "{latest}" does not match the tag template "{tag_name}".')
        self.runtime.set_option(PREVIOUS_VERSION, previous)
        return previous

    def push(self, remote_url: str, push_url: str | None = None) -> Result[None, ReleaseError]:
        cmd = ["git", "push"]
        if push_url:
            cmd.append(push_url)
        result = self.executor.run(cmd)
        if isinstance(result, Err):
            branch = self.current_branch() or DEFAULT_CLONE_BRANCH
            guidance = "\n".join(
                [
                    f"git remote add origin {remote_url}",
                    f"git push --set-upstream origin {branch}",
                ]
            )
            self.log.error(
                "Please make sure an upstream remote repository is configured for the "
                "current branch. Example commands:\n" + guidance
            )
            return Err(
                ReleaseError(
                    kind="push_failed",
                    message=f"Push failed: {result.error.details}",
                    hint=guidance,
                )
            )
        return Ok(None)

    def push_tags(self, version: str, push_url: str | None = None) -> None:
        cmd = ["git", "push", "--follow-tags"]
        if self.force:
            cmd.append("--force")
        if push_url:
            cmd.append(push_url)
        result = self.executor.run(cmd)
        if isinstance(result, Err):
            self.log.debug(result.error.details)
            self.log.warn(
                f'Could not push tag(s). Does tag "{version}" already exist? Use --force to move a tag.'
            )
