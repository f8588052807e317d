r"""Extract headings and their anchors from Markdown page bodies.

The documentation builder renders heading ids with the Python-Markdown
``toc`` extension configured to use :func:`slugify_heading`. This module
computes the same anchors directly from Markdown so content checks and the
search index can reason about headings without rendering HTML. Fenced code
blocks are skipped, so ``## comments`` inside samples never count.

Example
-------
>>> from rcabench_docs.markdown_parser import extract_headings
>>> [h.anchor for h in extract_headings("## Intro\nBody\n\n## Intro\n")]
['intro', 'intro_1']
"""

from __future__ import annotations

import dataclasses as dc
import re
import unicodedata

HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*#*[ \t]*$")
FENCE_PATTERN = re.compile(r"^[ \t]*(`{3,}|~{3,})")
BOLD_HEADING_PATTERN = re.compile(r"^\s*\*\*(.+?)\*\*\s*$")
INLINE_LINK_PATTERN = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
INLINE_MARKUP_PATTERN = re.compile(r"[*_`]")
ID_COUNT_PATTERN = re.compile(r"^(.*)_([0-9]+)$")


@dc.dataclass(slots=True)
class Heading:
    """A Markdown heading and the anchor it renders with.

    Attributes
    ----------
    level : int
        Heading depth (``1`` for ``#``).
    title : str
        Heading text with inline markup removed.
    anchor : str
        Unique element id assigned to the heading.
    line : int
        1-based line number within the parsed text.
    """

    level: int
    title: str
    anchor: str
    line: int


def slugify_heading(value: str, separator: str = "-") -> str:
    """Return the anchor slug for heading text.

    Passed to the ``toc`` extension as its ``slugify`` callable so rendered
    ids match :func:`extract_headings`.
    """
    normalized = unicodedata.normalize("NFKD", value)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    stripped = re.sub(r"[^\w\s-]", "", ascii_text).strip().lower()
    return re.sub(rf"[{re.escape(separator)}\s]+", separator, stripped)


def _unique_slug(base: str, used: set[str]) -> str:
    """Generate a unique slug the way the ``toc`` extension does (``_1`` suffixes)."""
    candidate = base
    while candidate in used or not candidate:
        match = ID_COUNT_PATTERN.match(candidate)
        if match:
            candidate = f"{match.group(1)}_{int(match.group(2)) + 1}"
        else:
            candidate = f"{candidate}_1"
    used.add(candidate)
    return candidate


def _clean_heading(text: str) -> str:
    """Return heading text without escapes, link syntax, or emphasis markers."""
    text = INLINE_LINK_PATTERN.sub(r"\1", text)
    text = INLINE_MARKUP_PATTERN.sub("", text.replace("\\", ""))
    return text.strip()


def _scan_fences(markdown_text: str) -> tuple[list[tuple[int, str]], int | None]:
    """Return unfenced ``(line_number, line)`` pairs and any unclosed fence line."""
    unfenced: list[tuple[int, str]] = []
    fence: str | None = None
    opened_at: int | None = None
    for number, line in enumerate(markdown_text.splitlines(), start=1):
        match = FENCE_PATTERN.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                opened_at = number
                continue
            unfenced.append((number, line))
            continue
        if not match:
            continue
        marker = match.group(1)
        closes = marker[0] == fence[0] and len(marker) >= len(fence)
        if closes and not line[match.end() :].strip():
            fence = None
            opened_at = None
    return unfenced, opened_at


def iter_unfenced_lines(markdown_text: str) -> list[tuple[int, str]]:
    """Return ``(line_number, line)`` pairs that sit outside fenced code blocks."""
    unfenced, _unclosed = _scan_fences(markdown_text)
    return unfenced


def unclosed_fence_line(markdown_text: str) -> int | None:
    """Return the line of a code fence that is never closed, or ``None``."""
    _unfenced, unclosed = _scan_fences(markdown_text)
    return unclosed


def extract_headings(
    markdown_text: str, *, promote_bold: bool = False
) -> list[Heading]:
    """Return every ATX heading in ``markdown_text`` with its rendered anchor.

    Parameters
    ----------
    markdown_text : str
        Markdown body, without front matter.
    promote_bold : bool, optional
        Treat standalone bold lines (``**Capabilities**``) as level-four
        headings. Useful for search indexing, where such lines act as
        headings for readers.

    Returns
    -------
    list[Heading]
        Headings in document order. Anchors are unique within the page.
    """
    headings: list[Heading] = []
    used: set[str] = set()
    for number, line in iter_unfenced_lines(markdown_text):
        match = HEADING_PATTERN.match(line)
        if match:
            level = len(match.group(1))
            title = _clean_heading(match.group(2))
        elif promote_bold and (bold := BOLD_HEADING_PATTERN.match(line)):
            level = 4
            title = _clean_heading(bold.group(1))
        else:
            continue
        if not title:
            continue
        if match:
            anchor = _unique_slug(slugify_heading(title), used)
        else:
            anchor = ""
        headings.append(Heading(level=level, title=title, anchor=anchor, line=number))
    return headings


__all__ = [
    "Heading",
    "extract_headings",
    "iter_unfenced_lines",
    "slugify_heading",
    "unclosed_fence_line",
]
