"""Utilities for rendering markdown and syntax-highlighted code snippets."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from rcabench_docs.generator.admonitions import AdmonitionExtension
from rcabench_docs.generator.shortcodes import ShortcodeContext, ShortcodeExtension
from rcabench_docs.markdown_parser import slugify_heading

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
FENCE_ATTRS_PATTERN = re.compile(
    r"^([`~]{3,})[ \t]*([A-Za-z0-9_+#.-]+)?[ \t]*\{([^}\r\n]*)\}[ \t]*$", re.MULTILINE
)
FILENAME_PATTERN = re.compile(r"""filename\s*=\s*["']([^"'\r\n]*)["']""")


class CodePanelFormatter(HtmlFormatter):
    """Pygments formatter tagging each block with its language and filename.

    Python-Markdown's ``codehilite`` passes ``lang_str`` (the fence language,
    or ``text`` for unlabelled and indented blocks) to formatter classes, and
    ``fenced_code`` forwards a ``filename`` attribute from ``{filename="..."}``.
    Both end up on the wrapping ``<div>`` so every block is labelled from its
    own source.
    """

    def __init__(self, lang_str: str = "", **options: typ.Any) -> None:
        filename = options.pop("filename", "") or ""
        super().__init__(**options)
        self.lang_str = lang_str or "text"
        self.code_filename = str(filename)

    def _wrap_div(
        self, inner: cabc.Iterator[tuple[int, str]]
    ) -> cabc.Iterator[tuple[int, str]]:
        attrs = f' data-language="{escape(self.lang_str, quote=True)}"'
        if self.code_filename:
            attrs += f' data-filename="{escape(self.code_filename, quote=True)}"'
        yield 0, f'<div class="{self.cssclass}"{attrs}>'
        yield from inner
        yield 0, "</div>\n"


@dc.dataclass(slots=True)
class RenderedMarkdown:
    """HTML output plus the heading tree collected by the ``toc`` extension.

    Attributes
    ----------
    html : str
        Rendered HTML fragment.
    toc : list[dict[str, Any]]
        Nested heading tokens (``level``, ``id``, ``name``, ``children``).
    """

    html: str
    toc: list[dict[str, typ.Any]]


class HtmlContentRenderer:
    """Render markdown and code snippets with consistent styling."""

    def __init__(
        self,
        pygments_style: str = "monokai",
        link_extension: Extension | None = None,
        shortcode_context: ShortcodeContext | None = None,
    ) -> None:
        """Initialize a renderer with optional pygments style and extensions.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults to
            ``"monokai"``.
        link_extension : Extension, optional
            Markdown extension used when rewriting links; pass ``None`` to skip
            link rewriting.
        shortcode_context : ShortcodeContext, optional
            Reference resolution and release versions used by shortcodes.
        """
        self.pygments_style = pygments_style
        self._formatter = CodePanelFormatter(
            style=pygments_style, cssclass="codehilite", wrapcode=True
        )
        self._link_extension = link_extension
        self._shortcode_context = shortcode_context or ShortcodeContext()

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def markdown(self, text: str) -> str:
        """Render markdown into HTML using the configured extensions."""
        return self.render(text).html

    def render(self, text: str) -> RenderedMarkdown:
        """Render markdown, returning the HTML and the page's heading tree.

        Raises
        ------
        ShortcodeError
            If the page contains unknown or unbalanced shortcodes, or a
            shortcode references a page that does not exist.
        """
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return RenderedMarkdown(html="", toc=[])
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            "md_in_html",
            "toc",
            ShortcodeExtension(self._shortcode_context),
            AdmonitionExtension(),
        ]
        if self._link_extension:
            extensions.append(self._link_extension)
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                    "pygments_formatter": CodePanelFormatter,
                    "lang_prefix": "",
                },
                "toc": {"slugify": slugify_heading, "toc_depth": "2-4"},
            },
        )
        html = md.convert(normalized)
        toc = list(getattr(md, "toc_tokens", []))
        return RenderedMarkdown(html=html, toc=toc)

    def code_block(self, code: str, language: str | None = None) -> str:
        """Render ``code`` into highlighted HTML with an optional language tag.

        Parameters
        ----------
        code : str
            Source snippet to highlight.
        language : str, optional
            Pygments lexer name; defaults to ``"text"`` when not provided or
            when the lexer lookup fails.

        Returns
        -------
        str
            HTML containing the highlighted block with ``data-language``
            metadata applied.
        """
        lang = language or "text"
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lexer = get_lexer_by_name("text")
        formatter = CodePanelFormatter(
            lang_str=lang,
            style=self.pygments_style,
            cssclass="codehilite",
            wrapcode=True,
        )
        return highlight(code, lexer, formatter)

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        def _keep_filename(match: re.Match[str]) -> str:
            fence, language, attrs = match.groups()
            filename = FILENAME_PATTERN.search(attrs)
            if filename is None:
                return f"{fence}{language or ''}"
            lang_class = f".{language} " if language else ""
            return f'{fence}{{{lang_class}filename="{filename.group(1)}"}}'

        without_attrs = FENCE_ATTRS_PATTERN.sub(_keep_filename, without_indent)
        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_attrs)


__all__ = ["CodePanelFormatter", "HtmlContentRenderer", "RenderedMarkdown"]
