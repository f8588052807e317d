"""High-level orchestration for building the documentation site.

This module walks the Markdown content tree, renders every page with
``HtmlContentRenderer`` (shortcodes, admonitions, highlighted code and
rewritten links included), and writes themed HTML through the shared Jinja
templates. It exposes :class:`SiteGenerator`, which consumes a
:class:`~rcabench_docs.config.SiteConfig` and also emits alias redirect pages,
the Fuse.js search index, the Netlify ``_headers``/``_redirects`` files, and
a metadata JSON listing the generated pages.

Example
-------
>>> from pathlib import Path
>>> from rcabench_docs.config import load_site_config
>>> from rcabench_docs.generator import SiteGenerator
>>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> SiteGenerator(config).run()  # doctest: +SKIP
[PosixPath('public/index.html'), PosixPath('public/docs/index.html'), ...]
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import json
import logging
import shutil
import typing as typ
from pathlib import Path, PurePosixPath

from jinja2 import Environment, FileSystemLoader, select_autoescape

from rcabench_docs._constants import (
    BUILD_META_FILENAME,
    BUNDLE_INDEX,
    PAGE_OUTPUT_NAME,
    SECTION_INDEX,
)
from rcabench_docs.content import load_content
from rcabench_docs.frontmatter import ContentError
from rcabench_docs.git_info import CommitDateResolver
from rcabench_docs.netlify import write_netlify_files
from rcabench_docs.search_index import SearchRecord, build_record, write_search_index

from .link_rewriter import RelativeLinkExtension, build_link_resolver
from .models import LinkModel, NavNode, PageModel
from .navigation import breadcrumbs, build_nav_tree, flatten, mark_active, neighbours
from .renderer import HtmlContentRenderer, RenderedMarkdown
from .shortcodes import ShortcodeContext

if typ.TYPE_CHECKING:
    from jinja2 import Template

    from rcabench_docs.config import SiteConfig
    from rcabench_docs.content import ContentPage, ContentTree

logger = logging.getLogger(__name__)

LIST_TEMPLATE = "list_page.jinja"
PAGE_TEMPLATE = "doc_page.jinja"
ALIAS_TEMPLATE = "alias.jinja"
RELEASE_KEY = "platform"


def _resource_destination(
    relative: PurePosixPath,
    leaf_dirs: dict[PurePosixPath, Path],
    branch_dirs: dict[PurePosixPath, Path],
) -> Path:
    """Return where the content file ``relative`` is published."""
    for parent in relative.parents:
        if parent in leaf_dirs:
            return leaf_dirs[parent] / relative.relative_to(parent).as_posix()
    section_dir = branch_dirs.get(relative.parent)
    if section_dir is not None:
        return section_dir / relative.name
    return Path(relative.as_posix())


class SiteGenerator:
    """Render the content tree into a themed static site."""

    def __init__(
        self,
        site_config: SiteConfig,
        *,
        templates_dir: Path | None = None,
        output_dir: Path | None = None,
        build_drafts: bool | None = None,
        base_url: str | None = None,
        commit_dates: CommitDateResolver | None = None,
    ) -> None:
        """Initialize the generator with configuration and template context.

        Parameters
        ----------
        site_config : SiteConfig
            Site configuration describing content, theming, and outputs.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        output_dir : Path, optional
            Override for the output directory; defaults to ``site.output_dir``.
        build_drafts : bool, optional
            Override for ``site.build_drafts``.
        base_url : str, optional
            Override for ``site.base_url``, e.g. for Netlify deploy previews.
        commit_dates : CommitDateResolver, optional
            Source of commit-based "last updated" dates. By default one is
            created when ``edit.enable_git_info`` is set and a repository is
            configured.
        """
        if base_url:
            site_config = dc.replace(site_config, base_url=base_url)
        self.site = site_config
        self.output_dir = output_dir or site_config.output_dir
        self.build_drafts = (
            site_config.build_drafts if build_drafts is None else build_drafts
        )
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        if commit_dates is None and site_config.edit.enable_git_info:
            if site_config.edit.repo:
                commit_dates = CommitDateResolver(site_config.edit)
        self.commit_dates = commit_dates
        self.versions = {
            key: release.version_display
            for key, release in site_config.releases.items()
            if release.version_display
        }
        self.stylesheet = HtmlContentRenderer(site_config.pygments_style).stylesheet
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["relurl"] = self.site.relative_url
        self.env.filters["absurl"] = self.site.absolute_url

    def run(self) -> list[Path]:
        """Render every page and auxiliary artefact to disk.

        Returns
        -------
        list[Path]
            Generated pages (in source order), alias pages, the search index,
            and Netlify files.

        Raises
        ------
        FileNotFoundError
            If the content directory does not exist.
        RuntimeError
            If the content directory holds no publishable pages.
        ContentError
            If a page is invalid, has no title, or contains a broken
            shortcode. The message names the page's source path.
        """
        tree = load_content(self.site.content_dir, build_drafts=self.build_drafts)
        if not len(tree):
            msg = f"No content pages were found under '{self.site.content_dir}'."
            raise RuntimeError(msg)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        generated_at = dt.datetime.now(dt.UTC)
        nav = build_nav_tree(tree)
        reading_order = flatten(nav)

        written: list[Path] = []
        records: list[SearchRecord] = []
        for page in sorted(tree, key=lambda item: item.source_path):
            rendered = self._render_markdown(tree, page)
            model = self._build_page_model(tree, page, rendered, reading_order)
            html = self._template_for(page).render(
                **self._page_context(page, model, nav, generated_at)
            )
            output_path = self.output_dir / page.output_path
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(html, encoding="utf-8")
            written.append(output_path)
            if self.site.search.enabled:
                records.append(
                    build_record(
                        page,
                        rendered.html,
                        self.site,
                        section=self._section_label(tree, page),
                    )
                )

        written.extend(self._write_aliases(tree))
        self._copy_assets(tree)
        if self.site.search.enabled:
            index_path = self.output_dir / PurePosixPath(self.site.search.output)
            written.append(write_search_index(records, index_path))
        written.extend(write_netlify_files(tree, self.site, self.output_dir))
        self._write_metadata(tree, generated_at)
        return written

    def _render_markdown(self, tree: ContentTree, page: ContentPage) -> RenderedMarkdown:
        """Render the page body, prefixing content errors with its source path."""
        resolver = build_link_resolver(
            tree, page, url_for=lambda target: self.site.relative_url(target.url)
        )
        renderer = HtmlContentRenderer(
            self.site.pygments_style,
            link_extension=RelativeLinkExtension(resolver),
            shortcode_context=ShortcodeContext(
                link_resolver=resolver, versions=self.versions
            ),
        )
        try:
            return renderer.render(page.body)
        except ContentError as exc:
            msg = f"{page.source_path}: {exc}"
            raise type(exc)(msg) from exc

    def _build_page_model(
        self,
        tree: ContentTree,
        page: ContentPage,
        rendered: RenderedMarkdown,
        reading_order: list[NavNode],
    ) -> PageModel:
        """Construct a PageModel with rendered HTML and navigation metadata."""
        if not page.title:
            msg = f"{page.source_path}: front matter requires a title"
            raise ContentError(msg)
        prev_link, next_link = neighbours(reading_order, page.url)
        children = [
            LinkModel(
                title=child.link_title,
                url=child.url,
                description=child.front_matter.description,
            )
            for child in tree.children(page)
        ]
        return PageModel(
            title=page.title,
            url=page.url,
            kind=page.kind,
            content_html=rendered.html,
            toc=rendered.toc if page.front_matter.toc else [],
            description=page.front_matter.description,
            date=page.date,
            updated_at=self._resolve_updated_at(page),
            edit_url=self.site.edit.edit_url(page.source_path),
            breadcrumbs=breadcrumbs(tree, page),
            prev_link=prev_link,
            next_link=next_link,
            children=children,
        )

    def _resolve_updated_at(self, page: ContentPage) -> dt.datetime | None:
        """Return ``lastmod``, else the latest commit date, else the page date."""
        if page.front_matter.lastmod:
            return page.front_matter.lastmod
        if self.commit_dates is not None:
            committed = self.commit_dates.resolve(page.source_path)
            if committed is not None:
                return committed
        return page.date

    def _template_for(self, page: ContentPage) -> Template:
        """Return the ``<type>_page.jinja`` template when present, else the default."""
        default = LIST_TEMPLATE if page.is_list else PAGE_TEMPLATE
        names = [default]
        if page.front_matter.type:
            names.insert(0, f"{page.front_matter.type}_page.jinja")
        return self.env.select_template(names)

    def _page_context(
        self,
        page: ContentPage,
        model: PageModel,
        nav: list[NavNode],
        generated_at: dt.datetime,
    ) -> dict[str, typ.Any]:
        release = self.site.get_release(RELEASE_KEY)
        return {
            "site": self.site,
            "theme": self.site.theme,
            "menu": self.site.menu,
            "analytics": self.site.analytics,
            "page": model,
            "params": page.front_matter.params,
            "nav": mark_active(nav, page.url),
            "html_title": self._format_page_title(model),
            "doc_version": release.version_display if release else None,
            "generated_at": generated_at,
            "pygments_css": self.stylesheet,
            "search_index_url": (
                self.site.relative_url(self.site.search.output)
                if self.site.search.enabled
                else None
            ),
        }

    def _format_page_title(self, model: PageModel) -> str:
        """Compose the HTML title from the page title and site name."""
        site_name = self.site.theme.site_name
        if model.kind == "home" or model.title == site_name:
            return site_name
        return f"{model.title} | {site_name}"

    @staticmethod
    def _section_label(tree: ContentTree, page: ContentPage) -> str:
        """Return the link title of the top-level section holding ``page``."""
        chain = [item for item in tree.ancestors(page) if item.kind == "section"]
        if page.kind == "section":
            chain.append(page)
        return chain[0].link_title if chain else ""

    def _write_aliases(self, tree: ContentTree) -> list[Path]:
        """Write a redirecting HTML page at every front matter alias."""
        template = self.env.get_template(ALIAS_TEMPLATE)
        taken = {self.output_dir / page.output_path for page in tree}
        written: list[Path] = []
        for page in tree:
            target = self.site.relative_url(page.url)
            for alias in page.front_matter.aliases:
                trimmed = alias.strip("/")
                if PurePosixPath(trimmed).suffix:
                    path = self.output_dir / trimmed
                else:
                    path = self.output_dir / trimmed / PAGE_OUTPUT_NAME
                if path in taken:
                    logger.warning(
                        "alias %s of %s collides with another page or alias; skipped",
                        alias,
                        page.source_path,
                    )
                    continue
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(
                    template.render(site=self.site, title=page.title, target=target),
                    encoding="utf-8",
                )
                written.append(path)
                taken.add(path)
        return written

    def _copy_assets(self, tree: ContentTree) -> None:
        """Copy the static directory and non-Markdown content files to the output.

        Files in a leaf bundle (a directory holding ``index.md``, subfolders
        included) or directly beside a section's ``_index.md`` are published
        next to that page, so slug and ``url`` overrides keep relative
        resource links working. Other files keep their source path.
        """
        static_dir = self.site.static_dir
        if static_dir.is_dir():
            shutil.copytree(static_dir, self.output_dir, dirs_exist_ok=True)
        leaf_dirs: dict[PurePosixPath, Path] = {}
        branch_dirs: dict[PurePosixPath, Path] = {}
        for page in tree:
            source = PurePosixPath(page.source_path)
            if source.name == BUNDLE_INDEX:
                leaf_dirs[source.parent] = page.output_path.parent
            elif source.name == SECTION_INDEX:
                branch_dirs[source.parent] = page.output_path.parent
        content_dir = self.site.content_dir
        for path in sorted(content_dir.rglob("*")):
            if not path.is_file() or path.suffix == ".md":
                continue
            relative = PurePosixPath(path.relative_to(content_dir).as_posix())
            destination = self.output_dir / _resource_destination(
                relative, leaf_dirs, branch_dirs
            )
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, destination)

    def _write_metadata(self, tree: ContentTree, generated_at: dt.datetime) -> None:
        """Persist the metadata JSON listing every generated page URL."""
        metadata = {
            "generated_at": generated_at.isoformat(),
            "pages": sorted(page.url for page in tree),
        }
        path = self.output_dir / BUILD_META_FILENAME
        try:
            path.write_text(json.dumps(metadata, indent=2), encoding="utf-8")
        except OSError:  # pragma: no cover - IO issues
            logger.warning("could not write build metadata to %s", path)
