"""Error codes for CLI exit status.

Every release failure maps to one of these codes so that CI scripts can tell
a bad invocation apart from a git or network failure.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the release command.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad input, invalid configuration)
    - 2: Environment error (not a repository, dirty working dir)
    - 3: Git error (clone or push failed)
    - 4: Network error (release API unreachable or rejected the request)
    - 5: I/O error (asset or dist file could not be read/copied)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    GIT_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
