"""Sidebar, breadcrumb and reading-order navigation for the content tree.

The sidebar mirrors the section hierarchy: every list page becomes a group
whose children are ordered by weight (see :func:`rcabench_docs.content.ordering_key`).
Reading order, used for previous/next links, is a depth-first walk of the same
tree, so a section's own page precedes its children.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .models import LinkModel, NavNode

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from rcabench_docs.content import ContentPage, ContentTree


def is_hidden(page: ContentPage) -> bool:
    """Return ``True`` when front matter sets ``sidebar.exclude``."""
    sidebar = page.front_matter.params.get("sidebar")
    return isinstance(sidebar, dict) and bool(sidebar.get("exclude"))


def build_nav_tree(tree: ContentTree) -> list[NavNode]:
    """Return the sidebar tree below the home page (or the top-level pages)."""
    return [
        _build_node(tree, page)
        for page in tree.children(tree.home)
        if not is_hidden(page)
    ]


def _build_node(tree: ContentTree, page: ContentPage) -> NavNode:
    children: list[NavNode] = []
    if page.is_list:
        children = [
            _build_node(tree, child)
            for child in tree.children(page)
            if not is_hidden(child)
        ]
    return NavNode(
        title=page.link_title,
        url=page.url,
        weight=page.weight,
        is_section=page.is_list,
        children=children,
    )


def flatten(nodes: cabc.Iterable[NavNode]) -> list[NavNode]:
    """Return ``nodes`` and their descendants in depth-first reading order."""
    ordered: list[NavNode] = []
    for node in nodes:
        ordered.append(node)
        ordered.extend(flatten(node.children))
    return ordered


def mark_active(nodes: cabc.Iterable[NavNode], url: str) -> list[NavNode]:
    """Return a copy of ``nodes`` with the page at ``url`` and its ancestors flagged."""
    marked: list[NavNode] = []
    for node in nodes:
        children = mark_active(node.children, url)
        active = node.url == url
        marked.append(
            dc.replace(
                node,
                children=children,
                active=active,
                expanded=active or any(child.expanded for child in children),
            )
        )
    return marked


def breadcrumbs(tree: ContentTree, page: ContentPage) -> list[LinkModel]:
    """Return links to the list pages enclosing ``page``, root first."""
    return [
        LinkModel(title=ancestor.link_title, url=ancestor.url)
        for ancestor in tree.ancestors(page)
    ]


def neighbours(
    reading_order: list[NavNode], url: str
) -> tuple[LinkModel | None, LinkModel | None]:
    """Return the previous and next links around ``url`` in reading order."""
    for idx, node in enumerate(reading_order):
        if node.url != url:
            continue
        prev_link = None
        next_link = None
        if idx > 0:
            before = reading_order[idx - 1]
            prev_link = LinkModel(title=before.title, url=before.url)
        if idx + 1 < len(reading_order):
            after = reading_order[idx + 1]
            next_link = LinkModel(title=after.title, url=after.url)
        return prev_link, next_link
    return None, None


__all__ = [
    "breadcrumbs",
    "build_nav_tree",
    "flatten",
    "is_hidden",
    "mark_active",
    "neighbours",
]
