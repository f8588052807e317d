r"""Create new content pages with front matter filled in.

``docs new docs/algorithms/baro.md`` writes a page whose title comes from the
file name, dated now, and weighted one past the heaviest sibling so it lands
at the end of its section in the sidebar.

Example
-------
>>> from rcabench_docs.scaffold import title_from_path
>>> from pathlib import PurePosixPath
>>> title_from_path(PurePosixPath("docs/fault-injection/index.md"))
'Fault Injection'
"""

from __future__ import annotations

import datetime as dt
import io
import typing as typ
from pathlib import Path, PurePosixPath

from ruamel.yaml import YAML

from ._constants import BUNDLE_INDEX, INDEX_FILENAMES, SECTION_INDEX
from .frontmatter import ContentError, coerce_weight, split_front_matter


def title_from_path(relative: PurePosixPath) -> str:
    """Return a title-cased label from a file (or bundle directory) name."""
    stem = relative.parent.name if relative.name in INDEX_FILENAMES else relative.stem
    words = stem.replace("_", " ").replace("-", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def sibling_sources(content_dir: Path, relative: PurePosixPath) -> list[Path]:
    """Return the sources sharing a sidebar parent with ``relative``."""
    directory = content_dir / Path(relative.parent)
    if relative.name in INDEX_FILENAMES:
        directory = directory.parent
    if not directory.is_dir():
        return []
    siblings = [
        path
        for path in directory.glob("*.md")
        if path.name != SECTION_INDEX
    ]
    for child in directory.iterdir():
        if child.is_dir():
            siblings.extend(
                path
                for name in (SECTION_INDEX, BUNDLE_INDEX)
                if (path := child / name).is_file()
            )
    target = content_dir / Path(relative)
    return sorted(path for path in siblings if path != target)


def next_weight(content_dir: Path, relative: PurePosixPath) -> int:
    """Return one more than the highest weight among the page's siblings.

    Siblings with unreadable front matter are ignored.
    """
    highest = 0
    for path in sibling_sources(content_dir, relative):
        try:
            mapping, _body, _line = split_front_matter(path.read_text(encoding="utf-8"))
            weight = coerce_weight(mapping.get("weight"))
        except (ContentError, UnicodeDecodeError):
            continue
        highest = max(highest, weight)
    return highest + 1


def render_page(
    title: str, *, weight: int, date: dt.datetime, description: str | None = None
) -> str:
    """Return the source text of a new page with YAML front matter."""
    front_matter: dict[str, typ.Any] = {
        "title": title,
        "date": date.isoformat(),
        "weight": weight,
    }
    if description:
        front_matter["description"] = description
    yaml = YAML()
    yaml.default_flow_style = False
    buffer = io.StringIO()
    yaml.dump(front_matter, buffer)
    return f"---\n{buffer.getvalue()}---\n\n{title} overview.\n"


def scaffold_page(
    content_dir: Path,
    path: str,
    *,
    title: str | None = None,
    weight: int | None = None,
    now: dt.datetime | None = None,
) -> Path:
    """Create the page at ``path`` (relative to ``content_dir``).

    Parameters
    ----------
    content_dir : Path
        Content root.
    path : str
        Page path such as ``docs/sdk/python.md``; a missing ``.md`` suffix is
        added.
    title : str, optional
        Page title; derived from the file name by default.
    weight : int, optional
        Navigation weight; one past the highest sibling weight by default.
    now : datetime, optional
        Publication date; the current UTC time by default.

    Returns
    -------
    Path
        The created file.

    Raises
    ------
    FileExistsError
        If a file already exists at the target path.
    ValueError
        If ``path`` escapes the content directory.
    """
    relative = PurePosixPath(path.strip().lstrip("/"))
    if relative.suffix != ".md":
        relative = relative.with_name(f"{relative.name}.md")
    if ".." in relative.parts:
        msg = f"Page path '{path}' must stay inside the content directory."
        raise ValueError(msg)
    target = content_dir / Path(relative)
    if target.exists():
        msg = f"Refusing to overwrite existing page '{target}'."
        raise FileExistsError(msg)

    resolved_weight = weight if weight is not None else next_weight(content_dir, relative)
    created = (now or dt.datetime.now(dt.UTC)).replace(microsecond=0)
    text = render_page(
        title or title_from_path(relative), weight=resolved_weight, date=created
    )
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    return target


__all__ = [
    "next_weight",
    "render_page",
    "scaffold_page",
    "sibling_sources",
    "title_from_path",
]
