"""Runtime options shared between release steps.

A release run computes values in one step that a later, otherwise
independent step needs: the previous version found by the git workflow is
read by the changelog generator, the changelog text becomes the release body,
the created release id addresses the asset uploads.

``RuntimeOptions`` is created empty per run, carried by reference on the
release context, and discarded when the run ends. Last write wins and no key
is reset between steps.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TypeAlias

__all__ = [
    "OptionValue",
    "RuntimeOptions",
    "VERSION",
    "PREVIOUS_VERSION",
    "LATEST_TAG",
    "CHANGELOG",
    "RELEASE_ID",
    "TAG_SET",
    "DIST_TAG_SET",
    "has_changes_key",
]

OptionValue: TypeAlias = str | bool | int | None

VERSION = "version"
PREVIOUS_VERSION = "previous_version"
LATEST_TAG = "latest_tag"
CHANGELOG = "changelog"
RELEASE_ID = "github_release_id"
TAG_SET = "tag_set"
DIST_TAG_SET = "dist_tag_set"


def has_changes_key(repo: str) -> str:
    """Key of the per-repository "has changes" flag (e.g. ``src_has_changes``)."""
    return f"{repo}_has_changes"


class RuntimeOptions:
    """Mutable option store for one release run."""

    def __init__(self, initial: dict[str, OptionValue] | None = None) -> None:
        self._values: dict[str, OptionValue] = dict(initial or {})

    def set_option(self, key: str, value: OptionValue) -> None:
        self._values[key] = value

    def get_option(self, key: str, default: OptionValue = None) -> OptionValue:
        return self._values.get(key, default)

    def get_str(self, key: str) -> str | None:
        """Get a string option; None when unset or not a string."""
        value = self._values.get(key)
        return value if isinstance(value, str) else None

    def get_flag(self, key: str) -> bool:
        """Get a boolean option; unset counts as False."""
        return self._values.get(key) is True

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def as_dict(self) -> dict[str, OptionValue]:
        return dict(self._values)

    def __repr__(self) -> str:
        return f"RuntimeOptions({self._values!r})"
