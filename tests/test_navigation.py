"""Tests for sidebar trees, breadcrumbs, reading order and link resolution."""

from __future__ import annotations

import typing as typ

import pytest
from conftest import write_tree

from rcabench_docs.content import ContentTree, load_content
from rcabench_docs.generator.link_rewriter import (
    build_link_resolver,
    is_relative_content_link,
)
from rcabench_docs.generator.navigation import (
    breadcrumbs,
    build_nav_tree,
    flatten,
    mark_active,
    neighbours,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def tree(tmp_path: Path) -> ContentTree:
    """Provide a two-level docs tree with one hidden page."""
    root = tmp_path / "content"
    write_tree(
        root,
        {
            "_index.md": "---\ntitle: Home\n---\n",
            "docs/_index.md": "---\ntitle: Docs\nweight: 1\n---\n",
            "docs/install.md": "---\ntitle: Install\nweight: 1\n---\n",
            "docs/algorithms/_index.md": "---\ntitle: Algorithms\nweight: 2\n---\n",
            "docs/algorithms/baro.md": "---\ntitle: BARO\nweight: 1\n---\n",
            "docs/algorithms/rcd.md": "---\ntitle: RCD\nweight: 2\n---\n",
            "docs/faq.md": "---\ntitle: FAQ\nweight: 3\n---\n",
            "docs/legal.md": (
                "---\ntitle: Legal\nweight: 4\nsidebar:\n  exclude: true\n---\n"
            ),
            "about.md": "---\ntitle: About\nweight: 2\n---\n",
        },
    )
    return load_content(root)


def test_nav_tree_mirrors_sections(tree: ContentTree) -> None:
    """Sections nest their children and hidden pages are excluded."""
    nodes = build_nav_tree(tree)

    assert [node.url for node in nodes] == ["/docs/", "/about/"]
    docs = nodes[0]
    assert docs.is_section is True
    assert [child.title for child in docs.children] == ["Install", "Algorithms", "FAQ"]
    assert [child.title for child in docs.children[1].children] == ["BARO", "RCD"]


def test_reading_order_is_depth_first(tree: ContentTree) -> None:
    """Sections precede their children in reading order."""
    order = [node.url for node in flatten(build_nav_tree(tree))]

    assert order == [
        "/docs/",
        "/docs/install/",
        "/docs/algorithms/",
        "/docs/algorithms/baro/",
        "/docs/algorithms/rcd/",
        "/docs/faq/",
        "/about/",
    ]


def test_neighbours_link_previous_and_next(tree: ContentTree) -> None:
    """Pages link to the entries on either side in reading order."""
    order = flatten(build_nav_tree(tree))

    prev_link, next_link = neighbours(order, "/docs/algorithms/baro/")
    assert prev_link is not None
    assert next_link is not None
    assert prev_link.title == "Algorithms"
    assert next_link.url == "/docs/algorithms/rcd/"

    first_prev, _ = neighbours(order, "/docs/")
    _, last_next = neighbours(order, "/about/")
    assert first_prev is None
    assert last_next is None
    assert neighbours(order, "/docs/legal/") == (None, None), "hidden pages have no pager"


def test_mark_active_expands_ancestors(tree: ContentTree) -> None:
    """The active page and its ancestors are flagged without mutating the tree."""
    nodes = build_nav_tree(tree)

    marked = mark_active(nodes, "/docs/algorithms/rcd/")

    docs = marked[0]
    algorithms = docs.children[1]
    assert docs.expanded is True
    assert docs.active is False
    assert algorithms.expanded is True
    assert algorithms.children[1].active is True
    assert marked[1].expanded is False
    assert nodes[0].expanded is False, "original nodes stay untouched"


def test_breadcrumbs_list_enclosing_sections(tree: ContentTree) -> None:
    """Breadcrumbs run from the home page down to the parent section."""
    page = tree.pages["/docs/algorithms/baro/"]

    crumbs = breadcrumbs(tree, page)

    assert [(crumb.title, crumb.url) for crumb in crumbs] == [
        ("Home", "/"),
        ("Docs", "/docs/"),
        ("Algorithms", "/docs/algorithms/"),
    ]


def test_link_resolver_keeps_fragments_and_formats_urls(tree: ContentTree) -> None:
    """Resolved links keep query strings and fragments."""
    page = tree.pages["/docs/install/"]
    resolver = build_link_resolver(tree, page, url_for=lambda p: f"/rcabench{p.url}")

    assert resolver("algorithms/baro.md#results") == "/rcabench/docs/algorithms/baro/#results"
    assert resolver("faq.md?tab=gpu") == "/rcabench/docs/faq/?tab=gpu"
    assert resolver("missing.md") is None


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("sdk.md", True),
        ("../index.md#install", True),
        ("/docs/sdk.md", False),
        ("https://example.invalid/readme.md", False),
        ("mailto:team@example.invalid", False),
        ("#top", False),
        ("guide.html", False),
        (None, False),
    ],
)
def test_is_relative_content_link(target: str | None, expected: bool) -> None:
    """Only relative links to Markdown sources are rewritten."""
    assert is_relative_content_link(target) is expected
