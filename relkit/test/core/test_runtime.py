"""Tests for relkit.core.runtime module."""

from __future__ import annotations

from relkit.core.runtime import (
    CHANGELOG,
    RELEASE_ID,
    TAG_SET,
    RuntimeOptions,
    has_changes_key,
)


class TestRuntimeOptions:
    def test_starts_empty(self) -> None:
        options = RuntimeOptions()
        assert options.as_dict() == {}
        assert options.get_option(CHANGELOG) is None

    def test_last_write_wins(self) -> None:
        options = RuntimeOptions()
        options.set_option(CHANGELOG, "* first")
        options.set_option(CHANGELOG, "* second")
        assert options.get_option(CHANGELOG) == "* second"

    def test_keys_are_not_reset(self) -> None:
        options = RuntimeOptions()
        options.set_option(TAG_SET, True)
        options.set_option(RELEASE_ID, 7)
        assert options.get_flag(TAG_SET) is True
        assert options.get_option(RELEASE_ID) == 7

    def test_get_option_default(self) -> None:
        assert RuntimeOptions().get_option("missing", "fallback") == "fallback"

    def test_typed_getters(self) -> None:
        options = RuntimeOptions({RELEASE_ID: 7, TAG_SET: "yes"})
        assert options.get_str(RELEASE_ID) is None
        assert options.get_flag(TAG_SET) is False
        assert options.get_flag("unset") is False

    def test_none_is_a_stored_value(self) -> None:
        options = RuntimeOptions()
        options.set_option("previous_version", None)
        assert "previous_version" in options

    def test_initial_values_are_copied(self) -> None:
        initial: dict[str, str | bool | int | None] = {CHANGELOG: "x"}
        options = RuntimeOptions(initial)
        options.set_option(CHANGELOG, "y")
        assert initial[CHANGELOG] == "x"


def test_has_changes_key() -> None:
    assert has_changes_key("src") == "src_has_changes"
    assert has_changes_key("dist") == "dist_has_changes"
