"""Tests for the Fuse.js search records."""

from __future__ import annotations

import typing as typ
from pathlib import PurePosixPath

import msgspec.json
import pytest

from rcabench_docs.config import SiteConfig
from rcabench_docs.content import make_page
from rcabench_docs.frontmatter import FrontMatter
from rcabench_docs.search_index import (
    SearchRecord,
    build_record,
    html_to_text,
    summarize,
    write_search_index,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.parametrize(
    ("text", "words", "expected"),
    [
        ("one two three", 5, "one two three"),
        ("one two three", 3, "one two three"),
        ("one  two\nthree four", 2, "one two\N{HORIZONTAL ELLIPSIS}"),
    ],
)
def test_summarize_truncates_on_word_boundaries(
    text: str, words: int, expected: str
) -> None:
    """Summaries keep whole words and mark truncation with an ellipsis."""
    assert summarize(text, words) == expected


def test_html_to_text_drops_chrome() -> None:
    """Scripts, summaries and decorative labels are excluded from indexed text."""
    html = (
        '<div class="callout"><div class="callout__emoji">!</div><p>Use  care.</p></div>'
        "<details><summary>Show</summary><p>Hidden text</p></details>"
        "<script>var x = 1;</script>"
        '<div class="admonition"><p class="admonition__title">Note</p><p>Body</p></div>'
    )

    assert html_to_text(html) == "Use care. Hidden text Body"


def test_build_record_uses_description_and_headings() -> None:
    """Records carry the permalink, section label and heading titles."""
    page = make_page(
        PurePosixPath("docs/sdk/index.md"),
        FrontMatter(title="Python SDK", description="Drive RCABench from Python."),
        "## Installation\n\n**Submitting**\n\n```bash\n## not a heading\n```\n",
        5,
    )
    config = SiteConfig(title="RCABench", base_url="https://docs.example.invalid/")

    record = build_record(page, "<h2>Installation</h2><p>pip install</p>", config, section="Docs")

    assert record == SearchRecord(
        title="Python SDK",
        permalink="https://docs.example.invalid/docs/sdk/",
        section="Docs",
        summary="Drive RCABench from Python.",
        headings=["Installation", "Submitting"],
        content="Installation pip install",
    )


def test_build_record_summarizes_content_without_description() -> None:
    """Pages without a description are summarised from their text."""
    page = make_page(PurePosixPath("faq.md"), FrontMatter(title="FAQ"), "", 3)
    config = SiteConfig(title="RCABench", summary_length=3)

    record = build_record(page, "<p>one two three four five</p>", config)

    assert record.summary == "one two three\N{HORIZONTAL ELLIPSIS}"
    assert record.permalink == "/faq/"


def test_write_search_index_emits_json_array(tmp_path: Path) -> None:
    """The index is a JSON array of flat records, written with UTF-8 text."""
    record = SearchRecord(
        title="Über", permalink="/uber/", section="", summary="", headings=[], content="ü"
    )
    path = write_search_index([record], tmp_path / "nested" / "index.json")

    payload = msgspec.json.decode(path.read_bytes())

    assert payload == [record.to_json()]
    assert "Über" in path.read_text(encoding="utf-8"), "non-ASCII text is not escaped"
