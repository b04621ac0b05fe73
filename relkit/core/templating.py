"""Placeholder substitution for release templates.

Commit messages, tag names, tag annotations and release names are templates
holding either the positional ``%s`` placeholder or named ``{version}``-style
placeholders:

    render("v%s", {"version": "2.0.0"})          -> "v2.0.0"
    render("Release {version}", {"version": "2"}) -> "Release 2"

Substitution is a single pass: substituted values are never scanned again,
and unknown named placeholders are left as-is.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

__all__ = ["render", "extract_version"]

_PLACEHOLDER_RE = re.compile(r"%s|\{(\w+)\}")


def render(template: str, context: Mapping[str, str]) -> str:
    """Substitute placeholders in ``template`` from ``context``.

    ``%s`` is bound to ``context["version"]``.
    """

    def _sub(match: re.Match[str]) -> str:
        name = match.group(1)
        if name is None:
            return context.get("version", match.group(0))
        return context.get(name, match.group(0))

    return _PLACEHOLDER_RE.sub(_sub, template)


def extract_version(template: str, rendered: str) -> str | None:
    """Recover the version a template was rendered with.

    ``extract_version("v%s", "v1.2.0")`` returns ``"1.2.0"``. Returns None
    when ``rendered`` does not match the template.
    """
    pattern = ""
    pos = 0
    seen = False
    for match in _PLACEHOLDER_RE.finditer(template):
        pattern += re.escape(template[pos : match.start()])
        name = match.group(1)
        if name is None or name == "version":
            pattern += "(?P=version)" if seen else "(?P<version>.+?)"
            seen = True
        else:
            pattern += ".+?"
        pos = match.end()
    pattern += re.escape(template[pos:])

    if not seen:
        return None
    found = re.fullmatch(pattern, rendered)
    return found.group("version") if found else None
