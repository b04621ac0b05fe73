"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relkit.core.errors import ErrorCode
from relkit.output.console import Style
from relkit.release.errors import ReleaseError

if TYPE_CHECKING:
    from relkit.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a fatal release error with its remediation text."""
    match error:
        case ReleaseError(kind="release_failed", attempts=attempts) if attempts > 1:
            console.error(f"{error.message} (gave up after {attempts} attempts)")
        case _:
            console.error(error.message)
    if error.hint:
        for line in error.hint.splitlines():
            console.print(f"hint: {line}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error.kind:
        case "invalid_config":
            return int(ErrorCode.USER_ERROR)
        case "not_a_repo" | "dirty_working_dir" | "remote_missing":
            return int(ErrorCode.ENV_ERROR)
        case "clone_failed" | "push_failed" | "changelog_failed":
            return int(ErrorCode.GIT_ERROR)
        case "release_failed" | "upload_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "copy_failed":
            return int(ErrorCode.IO_ERROR)
    # Fallback for exhaustiveness
    return int(ErrorCode.USER_ERROR)
