"""Tests for Markdown rendering: code blocks, headings, alerts and links."""

from __future__ import annotations

from textwrap import dedent

import pytest
from bs4 import BeautifulSoup

from rcabench_docs.generator import HtmlContentRenderer, RelativeLinkExtension
from rcabench_docs.generator.admonitions import convert_alerts
from rcabench_docs.generator.shortcodes import ShortcodeContext
from rcabench_docs.markdown_parser import extract_headings


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_code_fences_carry_language_and_filename() -> None:
    """Highlighted blocks expose their language and optional filename."""
    renderer = HtmlContentRenderer()
    text = dedent(
        """
        ```python {filename="run.py"}
        print("inject")
        ```

        ```yaml
        kind: PodChaos
        ```
        """
    )

    soup = _soup(renderer.markdown(text))
    blocks = soup.select("div.codehilite")

    assert len(blocks) == 2, "expected one highlighted block per fence"
    assert blocks[0]["data-language"] == "python"
    assert blocks[0]["data-filename"] == "run.py"
    assert blocks[1]["data-language"] == "yaml"
    assert not blocks[1].has_attr("data-filename")


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (
            '~~~bash\nmake deploy\n~~~\n\n```python {filename="run.py"}\nprint(1)\n```\n',
            [("bash", None), ("python", "run.py")],
        ),
        (
            'Run:\n\n    make deploy\n\n```python {filename="run.py"}\nprint(1)\n```\n',
            [("text", None), ("python", "run.py")],
        ),
        (
            '~~~yaml {filename="chaos.yaml"}\nkind: PodChaos\n~~~\n\n```\nplain\n```\n',
            [("yaml", "chaos.yaml"), ("text", None)],
        ),
    ],
    ids=["tilde-then-backtick", "indented-then-fence", "tilde-filename"],
)
def test_each_block_is_labelled_from_its_own_source(
    text: str, expected: list[tuple[str, str | None]]
) -> None:
    """Tilde fences and indented code blocks do not shift later labels."""
    soup = _soup(HtmlContentRenderer().markdown(text))

    labels = [
        (block["data-language"], block.get("data-filename"))
        for block in soup.select("div.codehilite")
    ]

    assert labels == expected


def test_indented_fences_still_highlight() -> None:
    """Fences indented by up to three spaces render as code blocks."""
    renderer = HtmlContentRenderer()

    soup = _soup(renderer.markdown("Steps:\n\n   ```bash\n   make deploy\n   ```\n"))

    block = soup.select_one("div.codehilite")
    assert block is not None
    assert "make deploy" in block.get_text()


def test_code_block_helper_tags_language() -> None:
    """``code_block`` highlights standalone snippets."""
    html = HtmlContentRenderer().code_block("x = 1\n", "python")

    assert 'data-language="python"' in html
    assert "codehilite" in HtmlContentRenderer().stylesheet


def test_heading_ids_and_toc_tokens() -> None:
    """Headings get unique slug ids and levels two to four populate the TOC."""
    rendered = HtmlContentRenderer().render(
        "# Title\n\n## Install\n\n### Pull images\n\n## Install\n\n##### Deep\n"
    )

    soup = _soup(rendered.html)
    assert [h["id"] for h in soup.select("h2")] == ["install", "install_1"]
    assert [token["id"] for token in rendered.toc] == ["install", "install_1"]
    assert rendered.toc[0]["children"][0]["id"] == "pull-images"


def test_heading_ids_match_extracted_anchors() -> None:
    """Anchors computed from Markdown match the rendered heading ids."""
    text = "## What's `rcabench`?\n\n## Metrics & scores\n\n## What's `rcabench`?\n"

    soup = _soup(HtmlContentRenderer().markdown(text))

    rendered = [h["id"] for h in soup.select("h2")]
    assert rendered == [h.anchor for h in extract_headings(text)]


def test_empty_body_renders_nothing() -> None:
    """Whitespace-only bodies produce empty HTML and no TOC."""
    rendered = HtmlContentRenderer().render("\n  \n")

    assert rendered.html == ""
    assert rendered.toc == []


def test_alert_blockquotes_become_admonitions() -> None:
    """GitHub-style alerts render as titled admonition boxes."""
    text = "> [!WARNING] Cluster access\n> Requires **cluster-admin**.\n\n> Plain quote.\n"

    soup = _soup(HtmlContentRenderer().markdown(text))

    box = soup.select_one("div.admonition.admonition--warning")
    assert box is not None
    title = box.select_one(".admonition__title")
    assert title is not None
    assert title.get_text() == "Cluster access"
    assert box.find("strong").get_text() == "cluster-admin"
    assert soup.find("blockquote") is not None, "plain quotes stay blockquotes"


def test_alert_title_defaults_to_kind() -> None:
    """Alerts without a custom title use the capitalised kind."""
    converted = convert_alerts("> [!TIP]\n> Use the SDK.")

    assert '<p class="admonition__title">Tip</p>' in converted
    assert "Use the SDK." in converted


def test_alerts_inside_code_are_ignored() -> None:
    """Alert markers in fenced code are left alone."""
    text = "```markdown\n> [!NOTE]\n> quoted\n```"

    assert convert_alerts(text) == text


def test_shortcode_blocks_render_markdown_bodies() -> None:
    """Shortcode bodies are rendered as Markdown inside their HTML wrappers."""
    renderer = HtmlContentRenderer(
        shortcode_context=ShortcodeContext(versions={"platform": "1.4.0"})
    )
    text = dedent(
        """
        Current release: {{< version >}}

        {{< spoiler text="Show payload" >}}
        Send **this**:

        ```json
        {"fault": "cpu"}
        ```
        {{< /spoiler >}}
        """
    )

    soup = _soup(renderer.markdown(text))

    assert "Current release: 1.4.0" in soup.get_text()
    details = soup.select_one("details.spoiler")
    assert details is not None
    assert details.find("summary").get_text() == "Show payload"
    assert details.find("strong").get_text() == "this"
    assert details.select_one("div.codehilite") is not None


def test_relative_links_are_rewritten() -> None:
    """Links to Markdown sources are rewritten by the link extension."""
    targets = {"sdk.md": "/docs/sdk/", "faq.md#gpu": "/docs/faq/#gpu"}
    renderer = HtmlContentRenderer(
        link_extension=RelativeLinkExtension(targets.get)
    )
    text = (
        "[SDK](sdk.md) [GPU](faq.md#gpu) [gone](missing.md) "
        "[site](https://example.invalid/a.md) [anchor](#top)"
    )

    links = [a["href"] for a in _soup(renderer.markdown(text)).find_all("a")]

    assert links == [
        "/docs/sdk/",
        "/docs/faq/#gpu",
        "missing.md",
        "https://example.invalid/a.md",
        "#top",
    ]
