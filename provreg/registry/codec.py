"""Provider-list text format.

A resource lists one provider identifier per line, sorted, with a trailing
newline. Anything after a ``#`` is a comment; blank lines are ignored. The
persistence layer prepends a ``# Generated by ...`` header when writing.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from provreg.errors import require

COMMENT_MARKER = "#"
HEADER_PREFIX = "# Generated by "


def header(tool_name: str) -> str:
    return f"{HEADER_PREFIX}{tool_name}\n"


def serialize_providers(providers: Iterable[str]) -> str:
    """Sort by codepoint and join, one identifier per newline-terminated line."""
    return "".join(f"{provider}\n" for provider in sorted(providers))


def parse_providers(text: str) -> Iterator[str]:
    """Yield the provider identifiers listed in ``text``."""
    require(text, "text")
    for line in text.split("\n"):
        token = line.split(COMMENT_MARKER, 1)[0].strip()
        if token:
            yield token
