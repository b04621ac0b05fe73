"""Error types for the release workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "not_a_repo",
    "dirty_working_dir",
    "remote_missing",
    "clone_failed",
    "push_failed",
    "changelog_failed",
    "release_failed",
    "upload_failed",
    "copy_failed",
    "invalid_config",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Fatal release error payload.

    Attributes:
        kind: Error category (drives the exit code)
        message: One-line description
        hint: Remediation text or captured stderr
        attempts: Number of attempts made before giving up (retried steps only)
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    attempts: int = 1

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
