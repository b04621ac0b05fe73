"""Git operations for releases.

- CommandExecutor: runs commands, enforcing dry-run for mutating ones
- GitWorkflow: validate, stage, commit, tag, push
- parse_repo: remote URL to owner/project identity

Usage:
    from relkit.git import CommandExecutor, GitWorkflow

    executor = CommandExecutor(Path("."), log, dry_run=True)
    workflow = GitWorkflow(executor, log, runtime)
    workflow.tag("1.2.0", "v%s", "Release %s")
"""

from relkit.git.remote import PUBLIC_HOST, RepoIdentity, parse_repo
from relkit.git.shell import (
    READ_ONLY_SENTINEL,
    CommandExecutor,
    CommandResult,
    CommandRunner,
)
from relkit.git.workflow import GitWorkflow, split_clone_spec

__all__ = [
    # Shell
    "READ_ONLY_SENTINEL",
    "CommandExecutor",
    "CommandResult",
    "CommandRunner",
    # Workflow
    "GitWorkflow",
    "split_clone_spec",
    # Remote
    "PUBLIC_HOST",
    "RepoIdentity",
    "parse_repo",
]
