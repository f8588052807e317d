r"""Split and validate the front matter block at the top of content pages.

Pages open with either a YAML block fenced by ``---`` lines or a TOML block
fenced by ``+++`` lines. The block carries the page title, publication date,
navigation weight, and content type alongside optional presentation fields.

Example
-------
>>> from rcabench_docs.frontmatter import FrontMatter, split_front_matter
>>> mapping, body, offset = split_front_matter("---\ntitle: SDK\nweight: 2\n---\nBody\n")
>>> FrontMatter.from_mapping(mapping).weight
2
>>> body
'Body\n'
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import tomllib
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from rcabench_docs.config.helpers import _optional_str, _parse_timestamp

FRONT_MATTER_DELIMITERS: dict[str, str] = {"---": "yaml", "+++": "toml"}
KNOWN_KEYS = frozenset(
    {
        "title",
        "date",
        "weight",
        "type",
        "draft",
        "description",
        "linkTitle",
        "slug",
        "url",
        "aliases",
        "lastmod",
        "toc",
        "params",
    }
)


class ContentError(ValueError):
    """Raised when a content page cannot be loaded or is invalid."""


class FrontMatterError(ContentError):
    """Raised when a front matter block is malformed or never closed."""


@dc.dataclass(slots=True)
class FrontMatter:
    """Validated front matter fields for a single content page.

    Attributes
    ----------
    title : str
        Page title; empty when the author omitted it.
    date : datetime | None
        Publication date normalised to UTC.
    weight : int
        Navigation ordering key. ``0`` means unweighted.
    type : str | None
        Content type used to select a page template.
    params : dict[str, Any]
        Every unrecognised key plus the explicit ``params`` mapping.
    """

    title: str = ""
    date: dt.datetime | None = None
    weight: int = 0
    type: str | None = None
    draft: bool = False
    description: str | None = None
    link_title: str | None = None
    slug: str | None = None
    url: str | None = None
    aliases: list[str] = dc.field(default_factory=list)
    lastmod: dt.datetime | None = None
    toc: bool = True
    params: dict[str, typ.Any] = dc.field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: typ.Mapping[str, typ.Any]) -> FrontMatter:
        """Coerce a raw front matter mapping into a validated ``FrontMatter``.

        Raises
        ------
        ContentError
            If ``weight`` is not an integer, ``draft`` or ``toc`` is not a
            boolean, or ``date``/``lastmod`` cannot be parsed.
        """
        params: dict[str, typ.Any] = {
            key: value for key, value in mapping.items() if key not in KNOWN_KEYS
        }
        explicit_params = mapping.get("params")
        if isinstance(explicit_params, dict):
            params.update(explicit_params)

        return cls(
            title=_optional_str(mapping.get("title")) or "",
            date=coerce_date(mapping, "date"),
            weight=coerce_weight(mapping.get("weight")),
            type=_optional_str(mapping.get("type")),
            draft=coerce_flag(mapping, "draft", default=False),
            description=_optional_str(mapping.get("description")),
            link_title=_optional_str(mapping.get("linkTitle")),
            slug=_optional_str(mapping.get("slug")),
            url=_optional_str(mapping.get("url")),
            aliases=_coerce_aliases(mapping.get("aliases")),
            lastmod=coerce_date(mapping, "lastmod"),
            toc=coerce_flag(mapping, "toc", default=True),
            params=params,
        )


def coerce_weight(value: object) -> int:
    """Return ``value`` as a navigation weight, rejecting non-integers."""
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"weight must be an integer, got {value!r}"
        raise ContentError(msg)
    return value


def coerce_flag(
    mapping: typ.Mapping[str, typ.Any], key: str, *, default: bool
) -> bool:
    """Return the boolean stored under ``key``, rejecting quoted or numeric values."""
    value = mapping.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"{key} must be true or false, got {value!r}"
        raise ContentError(msg)
    return value


def coerce_date(mapping: typ.Mapping[str, typ.Any], key: str) -> dt.datetime | None:
    """Return the UTC timestamp stored under ``key``, rejecting unparseable values."""
    value = mapping.get(key)
    if value is None or value == "":
        return None
    parsed = _parse_timestamp(value)
    if parsed is None:
        msg = f"{key} is not a valid date: {value!r}"
        raise ContentError(msg)
    return parsed


def _coerce_aliases(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        msg = f"aliases must be a list of paths, got {value!r}"
        raise ContentError(msg)
    aliases: list[str] = []
    for entry in value:
        text = _optional_str(entry)
        if text:
            aliases.append(text if text.startswith("/") else f"/{text}")
    return aliases


def split_front_matter(text: str) -> tuple[dict[str, typ.Any], str, int]:
    """Separate the front matter block from the Markdown body.

    Parameters
    ----------
    text : str
        Full content of a page source file.

    Returns
    -------
    tuple[dict[str, Any], str, int]
        The parsed front matter mapping (empty when the page has none), the
        remaining Markdown body, and the number of lines consumed by the
        front matter block so callers can report body line numbers.

    Raises
    ------
    FrontMatterError
        If the block is never closed, cannot be parsed, or is not a mapping.
    """
    text = text.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines:
        return {}, "", 0
    opener = lines[0].strip()
    syntax = FRONT_MATTER_DELIMITERS.get(opener)
    if syntax is None:
        return {}, text, 0

    for idx in range(1, len(lines)):
        if lines[idx].strip() == opener:
            raw = "".join(lines[1:idx])
            body = "".join(lines[idx + 1 :])
            return _parse_block(raw, syntax), body, idx + 1

    msg = f"front matter opened with '{opener}' is never closed"
    raise FrontMatterError(msg)


def _parse_block(raw: str, syntax: str) -> dict[str, typ.Any]:
    """Parse a YAML or TOML front matter block into a mapping."""
    if syntax == "toml":
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            msg = f"invalid TOML front matter: {exc}"
            raise FrontMatterError(msg) from exc

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(raw)
    except YAMLError as exc:
        msg = f"invalid YAML front matter: {exc}"
        raise FrontMatterError(msg) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = "front matter must be a mapping"
        raise FrontMatterError(msg)
    return dict(loaded)


__all__ = [
    "ContentError",
    "FrontMatter",
    "FrontMatterError",
    "coerce_date",
    "coerce_flag",
    "coerce_weight",
    "split_front_matter",
]
