"""Helpers for rewriting relative Markdown links to rendered page URLs."""

from __future__ import annotations

import typing as typ
from urllib.parse import urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from rcabench_docs.content import ContentPage, ContentTree
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

LinkResolver = typ.Callable[[str], str | None]


def build_link_resolver(
    tree: ContentTree,
    page: ContentPage | None,
    url_for: cabc.Callable[[ContentPage], str] | None = None,
) -> LinkResolver:
    """Return a resolver mapping content references made from ``page`` to URLs.

    ``url_for`` turns the matched page into the emitted URL; it defaults to
    the page's site-relative URL.
    """

    def _resolve(ref: str) -> str | None:
        target = tree.lookup(ref, relative_to=page)
        if target is None:
            return None
        url = url_for(target) if url_for else target.url
        parsed = urlsplit(ref)
        if parsed.query:
            url = f"{url}?{parsed.query}"
        if parsed.fragment:
            url = f"{url}#{parsed.fragment}"
        return url

    return _resolve


def is_relative_content_link(target: str | None) -> bool:
    """Return ``True`` for links that point at another Markdown source file."""
    if not target:
        return False
    lower = target.lower()
    if lower.startswith(("http://", "https://", "mailto:", "tel:", "data:", "javascript:")):
        return False
    if target.startswith(("#", "//", "/")) or "://" in target:
        return False
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc:
        return False
    return parsed.path.endswith(".md")


class RelativeLinkExtension(Extension):
    """Rewrite relative Markdown links to the URLs of the rendered pages.

    Insert this extension into a ``markdown.Markdown`` instance so links
    written against the content tree (``./sdk.md``, ``../index.md#install``)
    keep working once pages are published under pretty URLs. Links that do
    not resolve are left as authored.
    """

    def __init__(self, resolver: LinkResolver) -> None:
        self.resolver = resolver

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the relative-link treeprocessor on the Markdown instance."""
        processor = RelativeLinkTreeprocessor(md, self.resolver)
        md.treeprocessors.register(processor, "rcabench_relative_links", 15)


class RelativeLinkTreeprocessor(Treeprocessor):
    """Rewrite anchors whose ``href`` targets a Markdown source file."""

    def __init__(self, md: Markdown, resolver: LinkResolver) -> None:
        super().__init__(md)
        self.resolver = resolver

    def run(self, root: Element) -> Element:
        """Rewrite relative anchors in the parsed markdown tree."""
        for element in root.iter("a"):
            href = element.get("href")
            if not is_relative_content_link(href):
                continue
            rewritten = self.resolver(typ.cast("str", href))
            if rewritten:
                element.set("href", rewritten)
        return root


__all__ = [
    "LinkResolver",
    "RelativeLinkExtension",
    "RelativeLinkTreeprocessor",
    "build_link_resolver",
    "is_relative_content_link",
]
