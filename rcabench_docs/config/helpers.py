"""Utility helpers shared by the site configuration loader."""

from __future__ import annotations

import datetime as dt
import typing as typ

from .models import (
    MenuLinkConfig,
    RedirectConfig,
    ReleaseConfig,
    SiteConfigError,
    ThemeConfig,
)

DEFAULT_SECURITY_HEADERS: dict[str, str] = {
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _mapping(value: object, section: str) -> typ.Mapping[str, typ.Any]:
    """Return ``value`` as a mapping, treating ``None`` as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{section}' must be a mapping."
        raise SiteConfigError(msg)
    return value


def _coerce_int(value: object, field: str) -> int:
    """Return ``value`` as an int, rejecting booleans and non-integral input."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"'{field}' must be an integer, got {value!r}."
        raise SiteConfigError(msg)
    return value


def _coerce_bool(value: object, field: str, *, default: bool) -> bool:
    """Return ``value`` as a bool, rejecting strings and numbers.

    ``None`` (an absent or empty key) yields ``default``.
    """
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"'{field}' must be true or false, got {value!r}."
        raise SiteConfigError(msg)
    return value


def _parse_timestamp(value: dt.datetime | dt.date | str | None) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None."""
    match value:
        case dt.datetime():
            parsed = value
        case dt.date():
            parsed = dt.datetime(value.year, value.month, value.day)
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def _build_theme_config(payload: typ.Mapping[str, typ.Any]) -> ThemeConfig:
    """Build a ThemeConfig instance from the provided mapping payload."""
    base = ThemeConfig()
    return ThemeConfig(
        hero_eyebrow=payload.get("hero_eyebrow", base.hero_eyebrow),
        hero_tagline=payload.get("hero_tagline", base.hero_tagline),
        doc_label=payload.get("doc_label", base.doc_label),
        site_name=payload.get("site_name", base.site_name),
        footer_note=payload.get("footer_note", base.footer_note),
    )


def _build_menu(payload: object) -> list[MenuLinkConfig]:
    """Return header menu links sorted by weight then label."""
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get("main") or []
    if not isinstance(payload, list):
        msg = "'menu' must be a list of links or a mapping with a 'main' list."
        raise SiteConfigError(msg)
    links: list[MenuLinkConfig] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        label = _optional_str(entry.get("label"))
        href = _optional_str(entry.get("href"))
        if not label or not href:
            msg = "Menu links require both 'label' and 'href'."
            raise SiteConfigError(msg)
        links.append(
            MenuLinkConfig(
                label=label,
                href=href,
                weight=_coerce_int(entry.get("weight", 0), f"menu.{label}.weight"),
                external=bool(entry.get("external", href.startswith("http"))),
            )
        )
    return sorted(links, key=lambda link: (link.weight, link.label.lower()))


def _build_redirects(payload: object) -> list[RedirectConfig]:
    """Return redirect rules from ``netlify.redirects`` entries."""
    if not payload:
        return []
    if not isinstance(payload, list):
        msg = "'netlify.redirects' must be a list."
        raise SiteConfigError(msg)
    rules: list[RedirectConfig] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        source = _optional_str(entry.get("from"))
        target = _optional_str(entry.get("to"))
        if not source or not target:
            msg = "Redirects require both 'from' and 'to'."
            raise SiteConfigError(msg)
        status = _coerce_int(entry.get("status", 301), f"redirect {source} status")
        rules.append(RedirectConfig(source=source, target=target, status=status))
    return rules


def _build_releases(payload: typ.Mapping[str, typ.Any]) -> dict[str, ReleaseConfig]:
    """Return tracked release repositories keyed by their config name."""
    releases: dict[str, ReleaseConfig] = {}
    for key, entry in payload.items():
        match entry:
            case str() as repo:
                releases[key] = ReleaseConfig(key=key, repo=repo)
            case dict():
                repo = _optional_str(entry.get("repo"))
                if not repo:
                    msg = f"Release '{key}' is missing 'repo'."
                    raise SiteConfigError(msg)
                releases[key] = ReleaseConfig(
                    key=key,
                    repo=repo,
                    latest_release=_optional_str(entry.get("latest_release")),
                    latest_release_published_at=_parse_timestamp(
                        entry.get("latest_release_published_at")
                    ),
                )
            case _:
                continue
    return releases


__all__ = [
    "DEFAULT_SECURITY_HEADERS",
    "_build_menu",
    "_build_redirects",
    "_build_releases",
    "_build_theme_config",
    "_coerce_int",
    "_mapping",
    "_optional_str",
    "_parse_timestamp",
]
