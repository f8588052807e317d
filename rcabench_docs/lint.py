"""Content checks run by ``docs check`` before publishing.

Every Markdown page under the content directory is inspected for problems
that would break the build or produce dead links: malformed front matter,
non-integer weights, unparseable dates, unclosed code fences, broken
shortcodes, links that do not resolve to a page, and pages that collide on
the same URL. Problems are collected as :class:`LintIssue` records rather
than raised, so one run reports everything at once.

Example
-------
>>> from pathlib import Path
>>> from rcabench_docs.config import load_site_config
>>> from rcabench_docs.lint import check_site
>>> issues = check_site(load_site_config(Path("config/site.yaml")))  # doctest: +SKIP
>>> [issue.format() for issue in issues]  # doctest: +SKIP
['docs/sdk.md:42: [link] link target './missing.md' does not match any page']
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from pathlib import PurePosixPath
from urllib.parse import urlsplit

from rcabench_docs.content import ContentTree, iter_source_files, make_page
from rcabench_docs.frontmatter import (
    ContentError,
    FrontMatter,
    FrontMatterError,
    coerce_date,
    coerce_flag,
    coerce_weight,
    split_front_matter,
)
from rcabench_docs.generator.link_rewriter import is_relative_content_link
from rcabench_docs.generator.shortcodes import ShortcodeError, mask_code, scan_shortcodes
from rcabench_docs.markdown_parser import extract_headings, unclosed_fence_line

if typ.TYPE_CHECKING:
    from pathlib import Path

    from rcabench_docs.config import SiteConfig
    from rcabench_docs.content import ContentPage

LINK_PATTERN = re.compile(
    r"(?<!!)\[[^\]]*\]\(\s*<?(?P<target>[^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)"
)
REFERENCE_SHORTCODES = frozenset({"relref", "ref"})
ISSUE_CODES = (
    "encoding",
    "front-matter",
    "title",
    "weight",
    "date",
    "fence",
    "link",
    "shortcode",
    "duplicate-url",
)


@dc.dataclass(frozen=True, slots=True, order=True)
class LintIssue:
    """A single content problem.

    Attributes
    ----------
    path : str
        Source path relative to the content directory.
    line : int
        1-based line in the source file (front matter included).
    code : str
        Short category, one of :data:`ISSUE_CODES`.
    message : str
        Human-readable description.
    """

    path: str
    line: int
    code: str
    message: str

    def format(self) -> str:
        """Return the ``path:line: [code] message`` form printed by the CLI."""
        return f"{self.path}:{self.line}: [{self.code}] {self.message}"


@dc.dataclass(slots=True)
class _Source:
    page: ContentPage
    text: str


def check_site(site_config: SiteConfig) -> list[LintIssue]:
    """Run every content check over ``site_config.content_dir``.

    Front matter checks cover every source file. Body checks (fences,
    shortcodes, links) and URL collisions cover the pages a build would
    publish, so drafts are only included when ``site.build_drafts`` is set.
    A file whose front matter cannot be parsed is reported once and skipped.

    Returns
    -------
    list[LintIssue]
        Issues sorted by path, then line.

    Raises
    ------
    FileNotFoundError
        If the content directory does not exist.
    """
    content_dir = site_config.content_dir
    if not content_dir.is_dir():
        msg = f"Content directory '{content_dir}' not found."
        raise FileNotFoundError(msg)

    issues: list[LintIssue] = []
    sources: list[_Source] = []
    for path in iter_source_files(content_dir):
        source = _check_front_matter(path, content_dir, issues)
        if source is None:
            continue
        if source.page.front_matter.draft and not site_config.build_drafts:
            continue
        sources.append(source)

    tree = ContentTree(_first_per_url([source.page for source in sources], issues))
    for source in sources:
        _check_body(source, tree, site_config, issues)
    return sorted(issues)


def _check_front_matter(
    path: Path, content_dir: Path, issues: list[LintIssue]
) -> _Source | None:
    """Validate front matter fields one by one, returning the page when usable."""
    relative = PurePosixPath(path.relative_to(content_dir).as_posix())
    rel = str(relative)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        message = f"file is not valid UTF-8 (byte {exc.start}: {exc.reason})"
        issues.append(LintIssue(rel, 1, "encoding", message))
        return None
    try:
        mapping, body, body_line = split_front_matter(text)
    except FrontMatterError as exc:
        issues.append(LintIssue(rel, 1, "front-matter", str(exc)))
        return None

    cleaned = dict(mapping)
    if not str(mapping.get("title") or "").strip():
        issues.append(LintIssue(rel, 1, "title", "page has no title"))
    try:
        coerce_weight(mapping.get("weight"))
    except ContentError as exc:
        issues.append(LintIssue(rel, _key_line(text, "weight"), "weight", str(exc)))
        cleaned.pop("weight", None)
    for key in ("date", "lastmod"):
        try:
            coerce_date(mapping, key)
        except ContentError as exc:
            issues.append(LintIssue(rel, _key_line(text, key), "date", str(exc)))
            cleaned.pop(key, None)
    for key in ("draft", "toc"):
        try:
            coerce_flag(mapping, key, default=False)
        except ContentError as exc:
            line = _key_line(text, key)
            issues.append(LintIssue(rel, line, "front-matter", str(exc)))
            cleaned.pop(key, None)
    try:
        front_matter = FrontMatter.from_mapping(cleaned)
    except ContentError as exc:
        issues.append(LintIssue(rel, 1, "front-matter", str(exc)))
        return None
    return _Source(make_page(relative, front_matter, body, body_line), text)


def _key_line(text: str, key: str) -> int:
    """Return the line declaring ``key`` in the front matter block, or 1."""
    pattern = re.compile(rf"^\s*{re.escape(key)}\s*[:=]")
    for number, line in enumerate(text.splitlines(), start=1):
        if pattern.match(line):
            return number
    return 1


def _first_per_url(
    pages: list[ContentPage], issues: list[LintIssue]
) -> list[ContentPage]:
    """Return one page per URL, reporting every later page that collides."""
    seen: dict[str, ContentPage] = {}
    for page in sorted(pages, key=lambda item: item.source_path):
        existing = seen.get(page.url)
        if existing is None:
            seen[page.url] = page
            continue
        message = f"URL '{page.url}' is already used by {existing.source_path}"
        issues.append(LintIssue(page.source_path, 1, "duplicate-url", message))
    return list(seen.values())


def _check_body(
    source: _Source,
    tree: ContentTree,
    site_config: SiteConfig,
    issues: list[LintIssue],
) -> None:
    page = source.page
    rel = page.source_path
    offset = page.body_line

    fence_line = unclosed_fence_line(page.body)
    if fence_line is not None:
        issues.append(
            LintIssue(rel, offset + fence_line, "fence", "code fence is never closed")
        )

    try:
        calls = scan_shortcodes(page.body)
    except ShortcodeError as exc:
        issues.append(
            LintIssue(rel, offset + (exc.line or 1), "shortcode", exc.reason)
        )
        calls = []
    for call in calls:
        if call.name in REFERENCE_SHORTCODES:
            ref = call.first()
        elif call.name == "card":
            ref = call.arg("link")
        else:
            continue
        if not ref or "://" in ref or ref.startswith(("mailto:", "#", "//")):
            continue
        if tree.lookup(ref, relative_to=page) is None:
            message = f"{call.name} target '{ref}' does not match any page"
            issues.append(LintIssue(rel, offset + call.line, "link", message))

    anchors = {heading.anchor for heading in extract_headings(page.body)}
    masked = mask_code(page.body)
    for number, line in enumerate(masked.splitlines(), start=1):
        for match in LINK_PATTERN.finditer(line):
            problem = _check_link(match.group("target"), page, anchors, tree, site_config)
            if problem:
                issues.append(LintIssue(rel, offset + number, "link", problem))


def _check_link(
    target: str,
    page: ContentPage,
    anchors: set[str],
    tree: ContentTree,
    site_config: SiteConfig,
) -> str | None:
    """Return a problem description for ``target``, or ``None`` when it resolves."""
    if target.startswith("#"):
        fragment = target[1:]
        if fragment and fragment not in anchors:
            return f"fragment '{target}' does not match any heading on this page"
        return None

    if is_relative_content_link(target):
        found = tree.lookup(target, relative_to=page)
        if found is None:
            return f"link target '{target}' does not match any page"
        fragment = urlsplit(target).fragment
        if fragment:
            target_anchors = {heading.anchor for heading in extract_headings(found.body)}
            if fragment not in target_anchors:
                return (
                    f"fragment '#{fragment}' does not match any heading in "
                    f"{found.source_path}"
                )
        return None

    if target.startswith("/") and not target.startswith("//"):
        path = urlsplit(target).path
        if PurePosixPath(path).suffix and not path.endswith(".md"):
            relative = path.lstrip("/")
            if (site_config.static_dir / relative).is_file():
                return None
            if (site_config.content_dir / relative).is_file():
                return None
            return f"link target '{target}' does not match any page or file"
        if tree.lookup(path) is None:
            return f"link target '{target}' does not match any page"
    return None


__all__ = ["ISSUE_CODES", "LintIssue", "check_site"]
