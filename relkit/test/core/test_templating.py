"""Tests for relkit.core.templating module."""

from __future__ import annotations

import pytest

from relkit.core.templating import extract_version, render


class TestRender:
    def test_positional_placeholder(self) -> None:
        assert render("v%s", {"version": "2.0.0"}) == "v2.0.0"

    def test_named_placeholder(self) -> None:
        assert render("Release {version}", {"version": "2.0.0"}) == "Release 2.0.0"

    def test_every_positional_placeholder_is_substituted(self) -> None:
        assert render("%s (%s)", {"version": "1.0"}) == "1.0 (1.0)"

    def test_unknown_named_placeholder_is_kept(self) -> None:
        assert render("{project} {version}", {"version": "1"}) == "{project} 1"

    def test_single_pass(self) -> None:
        # A substituted value holding a placeholder is not expanded again
        assert render("v%s", {"version": "{name}", "name": "x"}) == "v{name}"
        assert render("v{version}", {"version": "%s"}) == "v%s"

    def test_no_version_in_context(self) -> None:
        assert render("v%s", {}) == "v%s"

    def test_template_without_placeholder(self) -> None:
        assert render("latest", {"version": "1.0.0"}) == "latest"


class TestExtractVersion:
    @pytest.mark.parametrize(
        ("template", "tag", "expected"),
        [
            ("%s", "1.2.0", "1.2.0"),
            ("v%s", "v1.2.0", "1.2.0"),
            ("release-{version}", "release-3.0.0-rc.1", "3.0.0-rc.1"),
            ("v%s", "1.2.0", None),
            ("latest", "latest", None),
        ],
    )
    def test_extract(self, template: str, tag: str, expected: str | None) -> None:
        assert extract_version(template, tag) == expected

    def test_special_characters_in_template(self) -> None:
        assert extract_version("pkg+%s", "pkg+1.0") == "1.0"
        assert extract_version("pkg+%s", "pkgg1.0") is None

    def test_render_then_extract(self) -> None:
        template = "v%s"
        assert extract_version(template, render(template, {"version": "2.0.0"})) == "2.0.0"
