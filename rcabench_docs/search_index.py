"""Build the Fuse.js search index published alongside the rendered site.

The browser-side search widget fetches ``index.json`` and feeds it straight
to Fuse.js, so every record is a flat JSON object whose keys match the
widget's search options: ``title``, ``permalink``, ``section``, ``summary``,
``headings`` and ``content``.

Example
-------
>>> from rcabench_docs.search_index import summarize
>>> summarize("one two three four", 2)
'one two…'
"""

from __future__ import annotations

import dataclasses as dc
import json
import re
import typing as typ

from bs4 import BeautifulSoup

from rcabench_docs.markdown_parser import extract_headings

if typ.TYPE_CHECKING:
    from pathlib import Path

    from rcabench_docs.config import SiteConfig
    from rcabench_docs.content import ContentPage

WHITESPACE_PATTERN = re.compile(r"\s+")
# Elements whose text is chrome rather than prose.
SKIPPED_TAGS = ("script", "style", "summary")


@dc.dataclass(slots=True)
class SearchRecord:
    """A single Fuse.js document."""

    title: str
    permalink: str
    section: str
    summary: str
    headings: list[str]
    content: str

    def to_json(self) -> dict[str, typ.Any]:
        """Return the record as a JSON-serialisable mapping."""
        return dc.asdict(self)


def html_to_text(html: str) -> str:
    """Return the visible text of an HTML fragment with whitespace collapsed."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup.find_all(SKIPPED_TAGS):
        element.decompose()
    for element in soup.select(".callout__emoji, .admonition__title"):
        element.decompose()
    text = soup.get_text(" ", strip=True)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def summarize(text: str, words: int) -> str:
    """Return the first ``words`` words of ``text``, with an ellipsis if cut."""
    tokens = text.split()
    if len(tokens) <= words:
        return " ".join(tokens)
    return " ".join(tokens[:words]) + "\N{HORIZONTAL ELLIPSIS}"


def build_record(
    page: ContentPage, html: str, site_config: SiteConfig, *, section: str = ""
) -> SearchRecord:
    """Return the search record for ``page`` rendered as ``html``.

    Parameters
    ----------
    page : ContentPage
        Page being indexed.
    html : str
        Rendered Markdown body of the page (without the surrounding layout).
    site_config : SiteConfig
        Supplies the base URL and the summary length.
    section : str, optional
        Label of the top-level section the page lives in.
    """
    content = html_to_text(html)
    summary = page.front_matter.description or summarize(
        content, site_config.summary_length
    )
    headings = [
        heading.title for heading in extract_headings(page.body, promote_bold=True)
    ]
    return SearchRecord(
        title=page.title,
        permalink=site_config.absolute_url(page.url),
        section=section,
        summary=summary,
        headings=headings,
        content=content,
    )


def write_search_index(records: list[SearchRecord], path: Path) -> Path:
    """Write ``records`` as a JSON array to ``path`` and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [record.to_json() for record in records]
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


__all__ = [
    "SearchRecord",
    "build_record",
    "html_to_text",
    "summarize",
    "write_search_index",
]
