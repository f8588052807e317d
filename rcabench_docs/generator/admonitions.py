"""Render GitHub-style alert blockquotes as admonition boxes.

A blockquote whose first line is an alert marker becomes a titled box::

    > [!WARNING] Cluster access
    > Fault injection requires cluster-admin rights.

Recognised markers are ``NOTE``, ``TIP``, ``IMPORTANT``, ``WARNING`` and
``CAUTION``; text after the marker overrides the default title. Blockquotes
without a marker, and markers inside code blocks, are left untouched.
"""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from rcabench_docs.generator.shortcodes import mask_code

if typ.TYPE_CHECKING:
    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any

ALERT_PATTERN = re.compile(
    r"^[ ]{0,3}>[ ]?\[!(?P<kind>NOTE|TIP|IMPORTANT|WARNING|CAUTION)\][ \t]*(?P<title>.*)$",
    re.IGNORECASE,
)
QUOTE_PATTERN = re.compile(r"^[ ]{0,3}>[ ]?(?P<body>.*)$")


def convert_alerts(text: str) -> str:
    """Return ``text`` with alert blockquotes replaced by admonition HTML blocks."""
    lines = text.split("\n")
    masked = mask_code(text).split("\n")
    out: list[str] = []
    idx = 0
    while idx < len(lines):
        match = ALERT_PATTERN.match(masked[idx])
        if not match:
            out.append(lines[idx])
            idx += 1
            continue
        kind = match.group("kind").lower()
        title = lines[idx][match.start("title") :].strip() or kind.title()
        body: list[str] = []
        idx += 1
        while idx < len(lines):
            quoted = QUOTE_PATTERN.match(masked[idx])
            if not quoted:
                break
            body.append(lines[idx][quoted.start("body") :])
            idx += 1
        out.extend(
            [
                "",
                f'<div class="admonition admonition--{kind}" markdown="1">',
                f'<p class="admonition__title">{escape(title)}</p>',
                "",
                *body,
                "",
                "</div>",
                "",
            ]
        )
    return "\n".join(out)


class AdmonitionExtension(Extension):
    """Register the alert blockquote preprocessor."""

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Run after shortcode expansion and before ``fenced_code``."""
        md.preprocessors.register(AdmonitionPreprocessor(md), "rcabench_admonitions", 35)


class AdmonitionPreprocessor(Preprocessor):
    """Rewrite ``> [!KIND]`` blockquotes into admonition blocks."""

    def run(self, lines: list[str]) -> list[str]:
        return convert_alerts("\n".join(lines)).split("\n")


__all__ = ["AdmonitionExtension", "convert_alerts"]
