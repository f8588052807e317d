"""Utilities for rendering and generating RCABench documentation pages."""

from .link_rewriter import RelativeLinkExtension
from .models import LinkModel, NavNode, PageModel
from .renderer import HtmlContentRenderer
from .shortcodes import ShortcodeError
from .site_generator import SiteGenerator

__all__ = [
    "HtmlContentRenderer",
    "LinkModel",
    "NavNode",
    "PageModel",
    "RelativeLinkExtension",
    "ShortcodeError",
    "SiteGenerator",
]
