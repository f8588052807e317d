r"""Expand theme shortcodes embedded in documentation Markdown.

Pages use Hugo-style directives to lay out content that plain Markdown cannot
express: card grids linking to other pages, numbered step sequences,
collapsible spoilers, and callout boxes. ``{{< name args >}}`` and
``{{% name args %}}`` open a shortcode; block shortcodes close with
``{{< /name >}}``. Expansion happens in a Markdown preprocessor, before block
parsing, and emits HTML blocks carrying ``markdown="1"`` so the
``md_in_html`` extension renders their bodies.

Shortcodes inside fenced code blocks and inline code spans are left alone, so
pages may document the syntax itself.

Example
-------
>>> from rcabench_docs.generator.shortcodes import expand_shortcodes
>>> html = expand_shortcodes('{{< spoiler text="Why?" >}}\nBecause.\n{{< /spoiler >}}')
>>> "<summary>Why?</summary>" in html
True
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import escape

from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from rcabench_docs.frontmatter import ContentError
from rcabench_docs.markdown_parser import FENCE_PATTERN

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any

SHORTCODE_PATTERN = re.compile(
    r"\{\{(?P<delim>[<%])\s*(?P<close>/)?\s*(?P<name>[A-Za-z][\w-]*)"
    r"(?P<args>(?:\s.*?)?)\s*(?:(?<=[\s\"`])(?P<self_close>/)\s*)?[>%]\}\}",
    re.DOTALL,
)
ARG_PATTERN = re.compile(
    r"(?:(?P<key>[A-Za-z_][\w-]*)=)?"
    r"(?:\"(?P<dq>(?:[^\"\\]|\\.)*)\"|`(?P<bq>[^`]*)`|(?P<bare>[^\s\"`]+))"
)
INLINE_CODE_PATTERN = re.compile(r"(`+)(?!`).+?(?<!`)\1")

CALLOUT_EMOJI: dict[str, str] = {
    "note": "\N{MEMO}",
    "info": "\N{INFORMATION SOURCE}",
    "tip": "\N{ELECTRIC LIGHT BULB}",
    "important": "\N{HEAVY EXCLAMATION MARK SYMBOL}",
    "warning": "\N{WARNING SIGN}",
    "error": "\N{NO ENTRY SIGN}",
}


class ShortcodeError(ContentError):
    """Raised when a shortcode is unknown, unbalanced, or references a missing page.

    Attributes
    ----------
    line : int | None
        1-based line of the offending tag within the Markdown body.
    reason : str
        Message without the line prefix.
    """

    def __init__(self, reason: str, *, line: int | None = None) -> None:
        self.reason = reason
        self.line = line
        super().__init__(f"line {line}: {reason}" if line is not None else reason)


@dc.dataclass(slots=True)
class ShortcodeCall:
    """A parsed shortcode invocation.

    Attributes
    ----------
    name : str
        Shortcode name (``"cards"``, ``"relref"``...).
    args : dict[str, str]
        Named arguments.
    positional : list[str]
        Positional arguments in order.
    line : int
        1-based line of the opening tag.
    inner : str | None
        Expanded body for block shortcodes; ``None`` for inline ones.
    """

    name: str
    args: dict[str, str]
    positional: list[str]
    line: int
    inner: str | None = None

    def arg(self, key: str, default: str = "") -> str:
        """Return named argument ``key`` (falling back to ``default``)."""
        return self.args.get(key, default)

    def first(self, default: str = "") -> str:
        """Return the first positional argument, or ``default``."""
        return self.positional[0] if self.positional else default


@dc.dataclass(slots=True)
class ShortcodeContext:
    """Site-level hooks shortcodes use while rendering.

    Attributes
    ----------
    link_resolver : Callable[[str], str | None] | None
        Maps a content reference to a page URL. ``None`` disables resolution
        so references render as authored.
    versions : Mapping[str, str]
        Display versions of tracked releases keyed by release name.
    """

    link_resolver: cabc.Callable[[str], str | None] | None = None
    versions: cabc.Mapping[str, str] = dc.field(default_factory=dict)

    def resolve(self, ref: str, *, line: int) -> str:
        """Return the URL for ``ref`` or raise when a resolver cannot find it."""
        if self.link_resolver is None or _is_external(ref):
            return ref
        resolved = self.link_resolver(ref)
        if resolved is None:
            msg = f"reference '{ref}' does not match any page"
            raise ShortcodeError(msg, line=line)
        return resolved


def _is_external(ref: str) -> bool:
    return "://" in ref or ref.startswith(("mailto:", "#", "//"))


def _block(tag: str, attrs: str, inner: str, *, prefix: str = "") -> str:
    """Return an HTML block whose body is rendered as Markdown."""
    return f"\n\n<{tag} {attrs} markdown=\"1\">\n{prefix}\n\n{inner.strip()}\n\n</{tag}>\n\n"


def _render_cards(call: ShortcodeCall, _context: ShortcodeContext) -> str:
    return _block("div", 'class="cards"', call.inner or "")


def _render_card(call: ShortcodeCall, context: ShortcodeContext) -> str:
    link = call.arg("link")
    href = context.resolve(link, line=call.line) if link else "#"
    title = escape(call.arg("title"))
    parts = [f'<a class="card__link" href="{escape(href, quote=True)}">']
    icon = call.arg("icon")
    if icon:
        parts.append(f'<span class="card__icon" data-icon="{escape(icon, quote=True)}"></span>')
    parts.append(f'<span class="card__title">{title}</span>')
    subtitle = call.arg("subtitle")
    if subtitle:
        parts.append(f'<span class="card__subtitle">{escape(subtitle)}</span>')
    parts.append("</a>")
    return f'\n\n<div class="card">{"".join(parts)}</div>\n\n'


def _render_steps(call: ShortcodeCall, _context: ShortcodeContext) -> str:
    return _block("div", 'class="steps"', call.inner or "")


def _render_spoiler(call: ShortcodeCall, _context: ShortcodeContext) -> str:
    summary = call.arg("text") or call.arg("title") or call.first("Details")
    open_attr = ""
    if call.name == "details" and call.arg("closed", "false").lower() != "true":
        open_attr = " open"
    return _block(
        "details",
        f'class="spoiler"{open_attr}',
        call.inner or "",
        prefix=f"<summary>{escape(summary)}</summary>",
    )


def _render_callout(call: ShortcodeCall, _context: ShortcodeContext) -> str:
    kind = (call.arg("type") or call.first("info")).lower()
    if kind == "default":
        kind = "info"
    emoji = call.arg("emoji") or CALLOUT_EMOJI.get(kind, "")
    prefix = ""
    if emoji:
        prefix = f'<div class="callout__emoji" aria-hidden="true">{escape(emoji)}</div>'
    return _block(
        "div",
        f'class="callout callout--{escape(kind, quote=True)}" role="note"',
        call.inner or "",
        prefix=prefix,
    )


def _render_ref(call: ShortcodeCall, context: ShortcodeContext) -> str:
    ref = call.first()
    if not ref:
        msg = f"{call.name} requires a page reference"
        raise ShortcodeError(msg, line=call.line)
    return context.resolve(ref, line=call.line)


def _render_version(call: ShortcodeCall, context: ShortcodeContext) -> str:
    return escape(context.versions.get(call.first("platform"), ""))


@dc.dataclass(frozen=True, slots=True)
class ShortcodeSpec:
    """Rendering rules for a named shortcode."""

    name: str
    block: bool
    render: cabc.Callable[[ShortcodeCall, ShortcodeContext], str]


SHORTCODES: dict[str, ShortcodeSpec] = {
    spec.name: spec
    for spec in (
        ShortcodeSpec("cards", block=True, render=_render_cards),
        ShortcodeSpec("card", block=False, render=_render_card),
        ShortcodeSpec("steps", block=True, render=_render_steps),
        ShortcodeSpec("spoiler", block=True, render=_render_spoiler),
        ShortcodeSpec("details", block=True, render=_render_spoiler),
        ShortcodeSpec("callout", block=True, render=_render_callout),
        ShortcodeSpec("relref", block=False, render=_render_ref),
        ShortcodeSpec("ref", block=False, render=_render_ref),
        ShortcodeSpec("version", block=False, render=_render_version),
    )
}


def parse_args(raw: str) -> tuple[dict[str, str], list[str]]:
    """Split a shortcode argument string into named and positional values."""
    named: dict[str, str] = {}
    positional: list[str] = []
    for match in ARG_PATTERN.finditer(raw):
        value = match.group("dq")
        if value is not None:
            value = value.replace('\\"', '"')
        else:
            value = match.group("bq") if match.group("bq") is not None else match.group("bare")
        key = match.group("key")
        if key:
            named[key] = value
        else:
            positional.append(value)
    return named, positional


def mask_code(text: str) -> str:
    """Return ``text`` with fenced and inline code replaced by spaces.

    The result has the same length and line structure as ``text`` so match
    offsets map straight back onto the original.
    """
    out: list[str] = []
    fence: str | None = None
    for line in text.splitlines(keepends=True):
        match = FENCE_PATTERN.match(line)
        if fence is None and match:
            fence = match.group(1)
            out.append(_blank(line))
            continue
        if fence is not None:
            if match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
                if not line[match.end() :].strip():
                    fence = None
            out.append(_blank(line))
            continue
        out.append(INLINE_CODE_PATTERN.sub(lambda m: _blank(m.group(0)), line))
    return "".join(out)


def _blank(segment: str) -> str:
    return re.sub(r"[^\r\n]", " ", segment)


@dc.dataclass(slots=True)
class _Frame:
    call: ShortcodeCall
    parts: list[str] = dc.field(default_factory=list)


def _iter_calls(text: str) -> cabc.Iterator[tuple[re.Match[str], ShortcodeCall, ShortcodeSpec]]:
    masked = mask_code(text)
    for match in SHORTCODE_PATTERN.finditer(masked):
        name = match.group("name")
        line = text.count("\n", 0, match.start()) + 1
        spec = SHORTCODES.get(name)
        if spec is None:
            msg = f"unknown shortcode '{name}'"
            raise ShortcodeError(msg, line=line)
        raw_args = text[match.start("args") : match.end("args")]
        named, positional = parse_args(raw_args)
        yield match, ShortcodeCall(name, named, positional, line), spec


def expand_shortcodes(text: str, context: ShortcodeContext | None = None) -> str:
    """Expand every shortcode in ``text``.

    Parameters
    ----------
    text : str
        Markdown source.
    context : ShortcodeContext, optional
        Hooks for resolving page references and release versions.

    Returns
    -------
    str
        Markdown with shortcodes replaced by HTML blocks or inline values.

    Raises
    ------
    ShortcodeError
        If a shortcode is unknown, a block shortcode is never closed, a
        closing tag has no matching opener, an inline shortcode is closed, or
        a page reference cannot be resolved.
    """
    ctx = context or ShortcodeContext()
    root: list[str] = []
    stack: list[_Frame] = []
    position = 0
    for match, call, spec in _iter_calls(text):
        target = stack[-1].parts if stack else root
        target.append(text[position : match.start()])
        position = match.end()
        if match.group("close"):
            if not spec.block:
                msg = f"shortcode '{call.name}' does not take a closing tag"
                raise ShortcodeError(msg, line=call.line)
            if not stack or stack[-1].call.name != call.name:
                msg = f"closing '{call.name}' without a matching opener"
                raise ShortcodeError(msg, line=call.line)
            frame = stack.pop()
            frame.call.inner = "".join(frame.parts)
            parent = stack[-1].parts if stack else root
            parent.append(spec.render(frame.call, ctx))
        elif spec.block and not match.group("self_close"):
            stack.append(_Frame(call))
        else:
            if spec.block:
                call.inner = ""
            target.append(spec.render(call, ctx))
    if stack:
        frame = stack[-1]
        msg = f"shortcode '{frame.call.name}' is never closed"
        raise ShortcodeError(msg, line=frame.call.line)
    root.append(text[position:])
    return "".join(root)


def scan_shortcodes(text: str) -> list[ShortcodeCall]:
    """Return every shortcode call in ``text`` after validating nesting.

    Raises
    ------
    ShortcodeError
        On unknown names or unbalanced tags, as :func:`expand_shortcodes`.
    """
    calls: list[ShortcodeCall] = []
    open_names: list[ShortcodeCall] = []
    for match, call, spec in _iter_calls(text):
        if match.group("close"):
            if not spec.block:
                msg = f"shortcode '{call.name}' does not take a closing tag"
                raise ShortcodeError(msg, line=call.line)
            if not open_names or open_names[-1].name != call.name:
                msg = f"closing '{call.name}' without a matching opener"
                raise ShortcodeError(msg, line=call.line)
            open_names.pop()
            continue
        if spec.block and not match.group("self_close"):
            open_names.append(call)
        calls.append(call)
    if open_names:
        call = open_names[-1]
        msg = f"shortcode '{call.name}' is never closed"
        raise ShortcodeError(msg, line=call.line)
    return calls


class ShortcodeExtension(Extension):
    """Register the shortcode preprocessor on a ``markdown.Markdown`` instance."""

    def __init__(self, context: ShortcodeContext | None = None) -> None:
        self.context = context or ShortcodeContext()

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Run ahead of ``fenced_code`` and ``html_block`` preprocessing."""
        md.preprocessors.register(
            ShortcodePreprocessor(md, self.context), "rcabench_shortcodes", 40
        )


class ShortcodePreprocessor(Preprocessor):
    """Replace shortcode directives with HTML before block parsing."""

    def __init__(self, md: Markdown, context: ShortcodeContext) -> None:
        super().__init__(md)
        self.context = context

    def run(self, lines: list[str]) -> list[str]:
        return expand_shortcodes("\n".join(lines), self.context).split("\n")


__all__ = [
    "SHORTCODES",
    "ShortcodeCall",
    "ShortcodeContext",
    "ShortcodeError",
    "ShortcodeExtension",
    "expand_shortcodes",
    "mask_code",
    "parse_args",
    "scan_shortcodes",
]
