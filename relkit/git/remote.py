"""Remote URL parsing.

Turns a git remote URL into the owner/project identity the release API
needs. Both SSH and HTTPS forms are accepted, on the public host or on a
self-hosted instance:

    git@github.com:owner/project.git
    ssh://git@git.example.com:2222/owner/project.git
    https://github.com/owner/project.git
    https://git.example.com/group/subgroup/project

Usage:
    match parse_repo("git@github.com:webpro/my.project.git"):
        case Ok(repo):
            print(repo.repository)  # webpro/my.project
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import urlsplit

from relkit.core.result import Err, Ok, Result
from relkit.release.errors import ReleaseError

__all__ = ["PUBLIC_HOST", "RepoIdentity", "parse_repo"]

PUBLIC_HOST = "github.com"

_SCP_RE = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>.+)$")
_URL_SCHEMES = frozenset({"http", "https", "ssh", "git", "git+ssh", "ssh+git"})


@dataclass(frozen=True, slots=True)
class RepoIdentity:
    """Structured identity of a remote repository.

    Attributes:
        host: Host name (e.g. "github.com")
        owner: Owner or group path (e.g. "webpro")
        project: Project name, exactly as written in the URL (e.g. "my.project")
        repository: "owner/project"
        remote: The original remote URL
    """

    host: str
    owner: str
    project: str
    repository: str
    remote: str

    @property
    def is_public_host(self) -> bool:
        return self.host == PUBLIC_HOST


def _split_remote(remote_url: str) -> tuple[str, str] | None:
    """Split a remote URL into (host, path)."""
    if "://" in remote_url:
        parts = urlsplit(remote_url)
        if parts.scheme not in _URL_SCHEMES or not parts.hostname:
            return None
        return parts.hostname, parts.path

    match = _SCP_RE.match(remote_url)
    if match is None:
        return None
    return match.group("host"), match.group("path")


def parse_repo(remote_url: str) -> Result[RepoIdentity, ReleaseError]:
    """Parse a remote URL into a RepoIdentity.

    Dots in the project name are replaced by dashes before the path is parsed
    (``my.project`` would otherwise read as a name plus a suffix) and the
    original name is put back into the result. Everything before the project
    is the owner, so nested groups on self-hosted instances are preserved.
    """
    url = remote_url.strip()
    split = _split_remote(url)
    if split is None:
        return Err(
            ReleaseError(
                kind="remote_missing",
                message=f"Could not parse remote url: {remote_url}",
            )
        )
    host, path = split

    path = path.strip("/")
    segments = [s for s in path.split("/") if s]
    if len(segments) < 2:
        return Err(
            ReleaseError(
                kind="remote_missing",
                message=f"Remote url has no owner/project path: {remote_url}",
            )
        )

    last = segments[-1]
    project = last[: -len(".git")] if last.endswith(".git") else last
    if not project:
        return Err(ReleaseError(kind="remote_missing", message=f"Empty project name: {remote_url}"))

    normalized = PurePosixPath(*segments[:-1], project.replace(".", "-"))
    owner = normalized.parent.as_posix()

    return Ok(
        RepoIdentity(
            host=host.lower(),
            owner=owner,
            project=project,
            repository=f"{owner}/{project}",
            remote=remote_url,
        )
    )
