"""Result type for explicit error handling.

Every release step returns either ``Ok(value)`` or ``Err(error)``. Fatal
errors travel up to the orchestrator as ``Err`` values; soft failures are
logged where they happen and turned back into ``Ok``.

Usage:
    def latest_tag(executor) -> Result[str | None, ProcessError]:
        result = executor.run(["git", "describe", "--tags", "--abbrev=0"], read_only=True)
        if isinstance(result, Err):
            return result
        return Ok(result.value.output.strip() or None)

    match latest_tag(executor):
        case Ok(tag):
            print(f"previous tag: {tag}")
        case Err(error):
            print(f"describe failed: {error.stderr}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
