"""Load and validate site configuration YAML for RCABench documentation builds.

This subpackage parses the project's ``site.yaml`` file, applies defaults, and
produces strongly typed dataclasses (:class:`SiteConfig`,
:class:`ThemeConfig`, etc.) that downstream generators consume. The primary
entry point is :func:`load_site_config`, which ensures required fields are
present, applies defaults, and returns a :class:`SiteConfig` ready for
rendering.

Examples
--------
>>> from pathlib import Path
>>> from rcabench_docs.config import load_site_config
>>> site = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> site.content_dir  # doctest: +SKIP
PosixPath('content')
"""

from .loader import load_site_config
from .models import (
    AnalyticsConfig,
    EditConfig,
    MenuLinkConfig,
    NetlifyConfig,
    RedirectConfig,
    ReleaseConfig,
    SearchConfig,
    SiteConfig,
    SiteConfigError,
    ThemeConfig,
)

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
    "load_site_config",
]
