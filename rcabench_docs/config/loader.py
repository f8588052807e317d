"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from rcabench_docs._constants import DEFAULT_SUMMARY_LENGTH

from .helpers import (
    DEFAULT_SECURITY_HEADERS,
    _build_menu,
    _build_redirects,
    _build_releases,
    _build_theme_config,
    _coerce_bool,
    _coerce_int,
    _mapping,
    _optional_str,
)
from .models import (
    AnalyticsConfig,
    EditConfig,
    NetlifyConfig,
    SearchConfig,
    SiteConfig,
    SiteConfigError,
)


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the documentation site.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML site configuration file (for example,
        ``config/site.yaml``).

    Returns
    -------
    SiteConfig
        Parsed site configuration, including content and output directories,
        theme, navigation menu, analytics, search, Netlify, and tracked
        release settings.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If required fields are missing or invalid in the configuration (for
        example, no site title is defined).
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from rcabench_docs.config import load_site_config
    >>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
    >>> config.title  # doctest: +SKIP
    'RCABench'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    site = _mapping(raw.get("site"), "site")
    title = _optional_str(site.get("title"))
    if not title:
        msg = "Site configuration requires 'site.title'."
        raise SiteConfigError(msg)

    summary_length = _coerce_int(
        site.get("summary_length", DEFAULT_SUMMARY_LENGTH), "site.summary_length"
    )
    if summary_length <= 0:
        msg = "'site.summary_length' must be positive."
        raise SiteConfigError(msg)

    theme = _build_theme_config(_mapping(raw.get("theme"), "theme"))
    if "site_name" not in (raw.get("theme") or {}):
        theme.site_name = title

    return SiteConfig(
        title=title,
        base_url=str(site.get("base_url", "/")),
        language=str(site.get("language", "en")),
        content_dir=Path(site.get("content_dir", "content")),
        output_dir=Path(site.get("output_dir", "public")),
        static_dir=Path(site.get("static_dir", "static")),
        pygments_style=str(site.get("pygments_style", "monokai")),
        build_drafts=_coerce_bool(
            site.get("build_drafts"), "site.build_drafts", default=False
        ),
        summary_length=summary_length,
        theme=theme,
        menu=_build_menu(raw.get("menu")),
        edit=_build_edit_config(_mapping(raw.get("edit"), "edit")),
        analytics=_build_analytics_config(_mapping(raw.get("analytics"), "analytics")),
        search=_build_search_config(_mapping(raw.get("search"), "search")),
        netlify=_build_netlify_config(_mapping(raw.get("netlify"), "netlify")),
        releases=_build_releases(_mapping(raw.get("releases"), "releases")),
    )


def _build_edit_config(payload: typ.Mapping[str, typ.Any]) -> EditConfig:
    base = EditConfig()
    return EditConfig(
        repo=_optional_str(payload.get("repo")),
        branch=str(payload.get("branch", base.branch)),
        content_path=str(payload.get("content_path", base.content_path)),
        enable_git_info=_coerce_bool(
            payload.get("enable_git_info"),
            "edit.enable_git_info",
            default=base.enable_git_info,
        ),
    )


def _build_analytics_config(payload: typ.Mapping[str, typ.Any]) -> AnalyticsConfig:
    return AnalyticsConfig(
        google_measurement_id=_optional_str(payload.get("google_measurement_id")),
        plausible_domain=_optional_str(payload.get("plausible_domain")),
    )


def _build_search_config(payload: typ.Mapping[str, typ.Any]) -> SearchConfig:
    base = SearchConfig()
    output = _optional_str(payload.get("output")) or base.output
    if output.startswith("/") or ".." in Path(output).parts:
        msg = "'search.output' must be a path inside the output directory."
        raise SiteConfigError(msg)
    enabled = _coerce_bool(
        payload.get("enabled"), "search.enabled", default=base.enabled
    )
    return SearchConfig(enabled=enabled, output=output)


def _build_netlify_config(payload: typ.Mapping[str, typ.Any]) -> NetlifyConfig:
    """Merge configured headers over the default security headers."""
    headers = dict(DEFAULT_SECURITY_HEADERS)
    for name, value in _mapping(payload.get("headers"), "netlify.headers").items():
        if value is None:
            headers.pop(str(name), None)
        else:
            headers[str(name)] = str(value)
    return NetlifyConfig(
        enabled=_coerce_bool(payload.get("enabled"), "netlify.enabled", default=True),
        headers=headers,
        redirects=_build_redirects(payload.get("redirects")),
    )


__all__ = ["load_site_config"]
