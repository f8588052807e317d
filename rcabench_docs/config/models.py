"""Typed dataclasses describing RCABench docs site configuration structures."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
from pathlib import Path
from urllib.parse import urlsplit

from rcabench_docs._constants import DEFAULT_SUMMARY_LENGTH


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ThemeConfig:
    """Visual theming applied to generated documentation."""

    hero_eyebrow: str = "RCABench"
    hero_tagline: str = "Benchmarking root cause analysis for microservices"
    doc_label: str = "Docs"
    site_name: str = "RCABench"
    footer_note: str = ""


@dc.dataclass(slots=True)
class MenuLinkConfig:
    """Top navigation link rendered in the site header."""

    label: str
    href: str
    weight: int = 0
    external: bool = False


@dc.dataclass(slots=True)
class EditConfig:
    """Source repository used for "edit this page" links and commit dates."""

    repo: str | None = None
    branch: str = "main"
    content_path: str = "content"
    enable_git_info: bool = False

    def edit_url(self, source_path: str) -> str | None:
        """Return the GitHub edit URL for a content file, when a repo is set."""
        if not self.repo:
            return None
        prefix = self.content_path.strip("/")
        path = f"{prefix}/{source_path}" if prefix else source_path
        return f"https://github.com/{self.repo}/edit/{self.branch}/{path}"


@dc.dataclass(slots=True)
class AnalyticsConfig:
    """Third-party analytics snippets injected into every page head."""

    google_measurement_id: str | None = None
    plausible_domain: str | None = None

    @property
    def enabled(self) -> bool:
        """Return ``True`` when at least one provider is configured."""
        return bool(self.google_measurement_id or self.plausible_domain)


@dc.dataclass(slots=True)
class SearchConfig:
    """Fuse.js search index output options."""

    enabled: bool = True
    output: str = "index.json"


@dc.dataclass(slots=True)
class RedirectConfig:
    """A static redirect rule written to the Netlify ``_redirects`` file."""

    source: str
    target: str
    status: int = 301


@dc.dataclass(slots=True)
class NetlifyConfig:
    """Netlify deployment artefacts (``_headers`` and ``_redirects``)."""

    enabled: bool = True
    headers: dict[str, str] = dc.field(default_factory=dict)
    redirects: list[RedirectConfig] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class ReleaseConfig:
    """A tracked GitHub repository whose latest release the docs reference."""

    key: str
    repo: str
    latest_release: str | None = None
    latest_release_published_at: dt.datetime | None = None

    @property
    def version_display(self) -> str | None:
        """Return the release tag without a leading ``v`` prefix."""
        tag = self.latest_release
        if not tag:
            return None
        if tag.upper().startswith("V") and len(tag) > 1:
            return tag[1:]
        return tag


@dc.dataclass(slots=True)
class SiteConfig:
    """Fully resolved site configuration consumed by the generators."""

    title: str
    base_url: str = "/"
    language: str = "en"
    content_dir: Path = Path("content")
    output_dir: Path = Path("public")
    static_dir: Path = Path("static")
    pygments_style: str = "monokai"
    build_drafts: bool = False
    summary_length: int = DEFAULT_SUMMARY_LENGTH
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)
    menu: list[MenuLinkConfig] = dc.field(default_factory=list)
    edit: EditConfig = dc.field(default_factory=EditConfig)
    analytics: AnalyticsConfig = dc.field(default_factory=AnalyticsConfig)
    search: SearchConfig = dc.field(default_factory=SearchConfig)
    netlify: NetlifyConfig = dc.field(default_factory=NetlifyConfig)
    releases: dict[str, ReleaseConfig] = dc.field(default_factory=dict)

    @property
    def base_path(self) -> str:
        """Return the URL path prefix of ``base_url`` with a trailing slash."""
        path = urlsplit(self.base_url).path or "/"
        if not path.endswith("/"):
            path = f"{path}/"
        return path

    def absolute_url(self, url: str) -> str:
        """Join a site-relative ``url`` onto ``base_url``."""
        return self.base_url.rstrip("/") + "/" + url.lstrip("/")

    def relative_url(self, url: str) -> str:
        """Prefix a site-relative ``url`` with the base path."""
        return self.base_path + url.lstrip("/")

    def get_release(self, key: str) -> ReleaseConfig | None:
        """Return the tracked release configuration for ``key``, if any."""
        return self.releases.get(key)


__all__ = [
    "AnalyticsConfig",
    "EditConfig",
    "MenuLinkConfig",
    "NetlifyConfig",
    "RedirectConfig",
    "ReleaseConfig",
    "SearchConfig",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
]
