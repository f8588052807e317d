"""Load the Markdown content tree that makes up the documentation site.

Every ``*.md`` file below the content directory becomes a
:class:`ContentPage`. Directory layout decides the page kind and URL:

* ``content/_index.md`` is the home page (``/``).
* ``content/docs/_index.md`` is a section list page (``/docs/``).
* ``content/docs/sdk/index.md`` is a leaf bundle (``/docs/sdk/``).
* ``content/docs/getting-started.md`` is a regular page
  (``/docs/getting-started/``).

Example
-------
>>> from pathlib import Path
>>> from rcabench_docs.content import load_content
>>> tree = load_content(Path("content"))  # doctest: +SKIP
>>> [page.url for page in tree.children(tree.home)]  # doctest: +SKIP
['/docs/', '/blog/']
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import logging
import posixpath
import re
import typing as typ
from pathlib import Path, PurePosixPath
from urllib.parse import urlsplit

from ._constants import BUNDLE_INDEX, PAGE_OUTPUT_NAME, SECTION_INDEX
from .frontmatter import ContentError, FrontMatter, split_front_matter

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

PAGE_KINDS = ("home", "section", "page")


@dc.dataclass(slots=True)
class ContentPage:
    """A single documentation page loaded from the content directory.

    Attributes
    ----------
    source_path : str
        POSIX path of the source file relative to the content root.
    front_matter : FrontMatter
        Validated front matter fields.
    body : str
        Markdown body with the front matter block removed.
    body_line : int
        Number of source lines preceding the body.
    kind : str
        One of ``"home"``, ``"section"`` or ``"page"``.
    section : tuple[str, ...]
        Directory the page belongs to. Section pages use their own directory.
    url : str
        Site-relative URL such as ``/docs/getting-started/``.
    """

    source_path: str
    front_matter: FrontMatter
    body: str
    body_line: int
    kind: str
    section: tuple[str, ...]
    url: str

    @property
    def title(self) -> str:
        return self.front_matter.title

    @property
    def link_title(self) -> str:
        """Return the label used in navigation (``linkTitle`` or the title)."""
        return self.front_matter.link_title or self.front_matter.title

    @property
    def weight(self) -> int:
        return self.front_matter.weight

    @property
    def date(self) -> dt.datetime | None:
        return self.front_matter.date

    @property
    def is_list(self) -> bool:
        """Return ``True`` for home and section pages."""
        return self.kind in ("home", "section")

    @property
    def output_path(self) -> Path:
        """Return the output file path relative to the site output directory."""
        trimmed = self.url.strip("/")
        if not trimmed:
            return Path(PAGE_OUTPUT_NAME)
        if PurePosixPath(trimmed).suffix:
            return Path(trimmed)
        return Path(trimmed) / PAGE_OUTPUT_NAME


def ordering_key(page: ContentPage) -> tuple[typ.Any, ...]:
    """Return the sort key ordering pages within navigation.

    Weighted pages come first by ascending weight, followed by unweighted
    pages. Ties fall back to the newest date, then the link title, then the
    source path so ordering is always deterministic.
    """
    weight = page.weight
    date = page.date
    return (
        weight == 0,
        weight,
        date is None,
        -date.timestamp() if date else 0.0,
        page.link_title.lower(),
        page.source_path,
    )


def sort_pages(pages: cabc.Iterable[ContentPage]) -> list[ContentPage]:
    """Return ``pages`` in navigation order."""
    return sorted(pages, key=ordering_key)


class ContentTree:
    """Collection of loaded pages indexed by URL and by source path."""

    def __init__(self, pages: cabc.Iterable[ContentPage]) -> None:
        """Index ``pages``, rejecting duplicate URLs.

        Raises
        ------
        ContentError
            If two pages resolve to the same URL.
        """
        self.pages: dict[str, ContentPage] = {}
        self.by_source: dict[str, ContentPage] = {}
        for page in pages:
            existing = self.pages.get(page.url)
            if existing is not None:
                msg = (
                    f"{page.source_path}: URL '{page.url}' is already used by "
                    f"{existing.source_path}"
                )
                raise ContentError(msg)
            self.pages[page.url] = page
            self.by_source[page.source_path] = page
        self._sections = {page.section: page for page in self if page.is_list}
        self._parents = {page.source_path: self._find_parent(page) for page in self}
        grouped: dict[str | None, list[ContentPage]] = {}
        for page in self:
            parent = self._parents[page.source_path]
            key = parent.source_path if parent is not None else None
            grouped.setdefault(key, []).append(page)
        self._children = {key: sort_pages(group) for key, group in grouped.items()}

    def __iter__(self) -> cabc.Iterator[ContentPage]:
        return iter(self.pages.values())

    def __len__(self) -> int:
        return len(self.pages)

    @property
    def home(self) -> ContentPage | None:
        """Return the home page, when ``content/_index.md`` exists."""
        return self.pages.get("/")

    def sections(self) -> dict[tuple[str, ...], ContentPage]:
        """Return list pages keyed by their directory."""
        return dict(self._sections)

    def parent(self, page: ContentPage) -> ContentPage | None:
        """Return the nearest enclosing list page, or ``None`` for the home page."""
        return self._parents.get(page.source_path)

    def _find_parent(self, page: ContentPage) -> ContentPage | None:
        if page.kind == "home":
            return None
        sections = self._sections
        directory = page.section[:-1] if page.kind == "section" else page.section
        while True:
            candidate = sections.get(directory)
            if candidate is not None and candidate is not page:
                return candidate
            if not directory:
                return None
            directory = directory[:-1]

    def children(self, page: ContentPage | None) -> list[ContentPage]:
        """Return the direct children of a list page in navigation order.

        Passing ``None`` returns the top-level pages of a site without a home
        page.
        """
        if page is not None and not page.is_list:
            return []
        key = page.source_path if page is not None else None
        return list(self._children.get(key, []))

    def ancestors(self, page: ContentPage) -> list[ContentPage]:
        """Return list pages from the root down to the parent of ``page``."""
        chain: list[ContentPage] = []
        current = self.parent(page)
        while current is not None:
            chain.append(current)
            current = self.parent(current)
        chain.reverse()
        return chain

    def lookup(
        self, ref: str, relative_to: ContentPage | None = None
    ) -> ContentPage | None:
        """Resolve a content reference to a page.

        Parameters
        ----------
        ref : str
            Source path (``sdk.md``, ``../index.md``), directory reference
            (``docs/sdk``) or site URL (``/docs/sdk/``). Query strings and
            fragments are ignored.
        relative_to : ContentPage, optional
            Page whose directory anchors relative references. When omitted,
            or when the relative lookup fails, the reference is resolved from
            the content root.

        Returns
        -------
        ContentPage | None
            The referenced page, or ``None`` when nothing matches.
        """
        path = urlsplit(ref).path
        if not path:
            return None
        if path.startswith("/"):
            found = self._lookup_source(path.lstrip("/"))
            if found is None and not path.endswith(".md"):
                found = self.pages.get(_normalize_url(path))
            return found

        if relative_to is not None:
            base = posixpath.dirname(relative_to.source_path)
            joined = posixpath.normpath(posixpath.join(base, path))
            if not joined.startswith("../"):
                found = self._lookup_source(joined)
                if found is not None:
                    return found
        return self._lookup_source(posixpath.normpath(path))

    def _lookup_source(self, path: str) -> ContentPage | None:
        path = path.rstrip("/")
        if path in ("", "."):
            return self.by_source.get(SECTION_INDEX)
        if path.endswith(".md"):
            return self.by_source.get(path)
        for candidate in (
            f"{path}.md",
            f"{path}/{SECTION_INDEX}",
            f"{path}/{BUNDLE_INDEX}",
        ):
            found = self.by_source.get(candidate)
            if found is not None:
                return found
        return None


def slugify_segment(name: str) -> str:
    """Return a URL segment for a file or directory name."""
    return re.sub(r"\s+", "-", name.strip()).lower()


def _normalize_url(url: str) -> str:
    """Ensure a URL has a leading slash and, unless it names a file, a trailing one."""
    path = "/" + url.strip().lstrip("/")
    if PurePosixPath(path).suffix or path.endswith("/"):
        return path
    return f"{path}/"


def _compute_location(
    relative: PurePosixPath, front_matter: FrontMatter
) -> tuple[str, tuple[str, ...], str]:
    """Return ``(kind, section, url)`` for a source file path."""
    directory = tuple(relative.parent.parts)
    if relative.name == SECTION_INDEX:
        kind = "home" if not directory else "section"
        segments = [slugify_segment(part) for part in directory]
        if front_matter.slug and segments:
            segments[-1] = front_matter.slug
        section = directory
    elif relative.name == BUNDLE_INDEX and directory:
        kind = "page"
        segments = [slugify_segment(part) for part in directory]
        if front_matter.slug:
            segments[-1] = front_matter.slug
        section = directory[:-1]
    else:
        kind = "page"
        segments = [slugify_segment(part) for part in directory]
        segments.append(front_matter.slug or slugify_segment(relative.stem))
        section = directory

    if front_matter.url:
        url = _normalize_url(front_matter.url)
    else:
        url = "/" + "".join(f"{segment}/" for segment in segments)
    return kind, section, url


def load_page(path: Path, content_dir: Path) -> ContentPage:
    """Load a single content page from ``path``.

    Raises
    ------
    ContentError
        If the file is not UTF-8, or its front matter is malformed or
        invalid. The message is prefixed with the page's source path.
    """
    relative = PurePosixPath(path.relative_to(content_dir).as_posix())
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"{relative}: file is not valid UTF-8 (byte {exc.start}: {exc.reason})"
        raise ContentError(msg) from exc
    try:
        mapping, body, body_line = split_front_matter(text)
        front_matter = FrontMatter.from_mapping(mapping)
    except ContentError as exc:
        msg = f"{relative}: {exc}"
        raise type(exc)(msg) from exc
    return make_page(relative, front_matter, body, body_line)


def make_page(
    relative: PurePosixPath, front_matter: FrontMatter, body: str, body_line: int
) -> ContentPage:
    """Return the page stored at ``relative`` with its kind, section and URL."""
    kind, section, url = _compute_location(relative, front_matter)
    return ContentPage(
        source_path=str(relative),
        front_matter=front_matter,
        body=body,
        body_line=body_line,
        kind=kind,
        section=section,
        url=url,
    )


def iter_source_files(content_dir: Path) -> list[Path]:
    """Return every Markdown source below ``content_dir`` in a stable order."""
    return sorted(path for path in content_dir.rglob("*.md") if path.is_file())


def load_content(content_dir: Path, *, build_drafts: bool = False) -> ContentTree:
    """Load every page below ``content_dir`` into a :class:`ContentTree`.

    Parameters
    ----------
    content_dir : Path
        Root of the Markdown content tree.
    build_drafts : bool, optional
        Include pages whose front matter sets ``draft: true``.

    Raises
    ------
    FileNotFoundError
        If ``content_dir`` does not exist.
    ContentError
        If a page is invalid or two pages share a URL.
    """
    if not content_dir.is_dir():
        msg = f"Content directory '{content_dir}' not found."
        raise FileNotFoundError(msg)
    pages: list[ContentPage] = []
    for path in iter_source_files(content_dir):
        page = load_page(path, content_dir)
        if page.front_matter.draft and not build_drafts:
            logger.debug("skipping draft %s", page.source_path)
            continue
        pages.append(page)
    return ContentTree(pages)


__all__ = [
    "PAGE_KINDS",
    "ContentPage",
    "ContentTree",
    "iter_source_files",
    "load_content",
    "load_page",
    "make_page",
    "ordering_key",
    "slugify_segment",
    "sort_pages",
]
