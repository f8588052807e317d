"""Shared dataclasses used by the page generation pipeline."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata


@dc.dataclass(slots=True)
class NavNode:
    """A sidebar entry, optionally holding child entries.

    Attributes
    ----------
    title : str
        Navigation label (``linkTitle`` or title).
    url : str
        Site-relative URL of the page.
    weight : int
        Ordering weight copied from front matter.
    is_section : bool
        ``True`` for list pages that group children.
    children : list[NavNode]
        Child entries in navigation order.
    active : bool
        ``True`` for the page currently being rendered.
    expanded : bool
        ``True`` when the node is the active page or one of its ancestors.
    """

    title: str
    url: str
    weight: int = 0
    is_section: bool = False
    children: list[NavNode] = dc.field(default_factory=list)
    active: bool = False
    expanded: bool = False


@dc.dataclass(slots=True)
class LinkModel:
    """A labelled hyperlink passed to templates (breadcrumbs, prev/next, cards)."""

    title: str
    url: str
    description: str | None = None


@dc.dataclass(slots=True)
class PageModel:
    """Structured data passed to the page templates.

    Attributes
    ----------
    title : str
        Page title.
    url : str
        Site-relative URL.
    kind : str
        ``"home"``, ``"section"`` or ``"page"``.
    content_html : str
        Rendered Markdown body.
    toc : list[dict]
        Heading tree for the on-page table of contents; empty when disabled.
    description : str | None
        Front matter description, used for ``<meta>`` and cards.
    date : datetime | None
        Publication date.
    updated_at : datetime | None
        Last modification date shown in the page meta.
    edit_url : str | None
        "Edit this page" link target.
    breadcrumbs : list[LinkModel]
        Ancestor list pages from the site root.
    prev_link, next_link : LinkModel | None
        Neighbours in reading order.
    children : list[LinkModel]
        Child pages listed on section pages.
    """

    title: str
    url: str
    kind: str
    content_html: str
    toc: list[dict[str, object]]
    description: str | None = None
    date: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    edit_url: str | None = None
    breadcrumbs: list[LinkModel] = dc.field(default_factory=list)
    prev_link: LinkModel | None = None
    next_link: LinkModel | None = None
    children: list[LinkModel] = dc.field(default_factory=list)


__all__ = ["LinkModel", "NavNode", "PageModel"]
