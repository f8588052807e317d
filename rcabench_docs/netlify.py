"""Write the Netlify ``_redirects`` and ``_headers`` files for a built site."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

    from rcabench_docs.config import SiteConfig
    from rcabench_docs.content import ContentTree

REDIRECTS_FILENAME = "_redirects"
HEADERS_FILENAME = "_headers"
ASSET_CACHE_CONTROL = "public, max-age=31536000, immutable"


def redirect_rules(tree: ContentTree, site_config: SiteConfig) -> list[tuple[str, str, int]]:
    """Return ``(source, target, status)`` rules for aliases and configured redirects.

    Front matter aliases come first, ordered by alias path, followed by the
    redirects listed in ``netlify.redirects`` in configuration order.
    """
    aliases: list[tuple[str, str, int]] = []
    for page in tree:
        target = site_config.relative_url(page.url)
        aliases.extend(
            (site_config.relative_url(alias), target, 301)
            for alias in page.front_matter.aliases
        )
    aliases.sort()
    configured = [
        (rule.source, rule.target, rule.status)
        for rule in site_config.netlify.redirects
    ]
    return aliases + configured


def render_redirects(tree: ContentTree, site_config: SiteConfig) -> str:
    """Return the contents of the ``_redirects`` file."""
    lines = [
        f"{source}  {target}  {status}"
        for source, target, status in redirect_rules(tree, site_config)
    ]
    return "\n".join(lines) + ("\n" if lines else "")


def render_headers(site_config: SiteConfig) -> str:
    """Return the contents of the ``_headers`` file."""
    lines = ["/*"]
    lines.extend(
        f"  {name}: {value}" for name, value in site_config.netlify.headers.items()
    )
    lines.append(f"{site_config.base_path}assets/*")
    lines.append(f"  Cache-Control: {ASSET_CACHE_CONTROL}")
    return "\n".join(lines) + "\n"


def write_netlify_files(
    tree: ContentTree, site_config: SiteConfig, output_dir: Path
) -> list[Path]:
    """Write ``_redirects`` and ``_headers`` into ``output_dir``.

    Returns an empty list when Netlify output is disabled in configuration.
    """
    if not site_config.netlify.enabled:
        return []
    output_dir.mkdir(parents=True, exist_ok=True)
    redirects_path = output_dir / REDIRECTS_FILENAME
    redirects_path.write_text(render_redirects(tree, site_config), encoding="utf-8")
    headers_path = output_dir / HEADERS_FILENAME
    headers_path.write_text(render_headers(site_config), encoding="utf-8")
    return [redirects_path, headers_path]


__all__ = [
    "HEADERS_FILENAME",
    "REDIRECTS_FILENAME",
    "redirect_rules",
    "render_headers",
    "render_redirects",
    "write_netlify_files",
]
