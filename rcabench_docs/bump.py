"""Record the latest GitHub releases of tracked repositories in ``site.yaml``.

Each entry under ``releases`` names a repository whose version the docs
quote (``{{< version >}}`` and the "Version x" badge in the header)::

    releases:
      platform:
        repo: LGU-SE-Internal/rcabench
        latest_release: v1.4.0
        latest_release_published_at: "2025-05-01T09:30:00Z"
      sdk: LGU-SE-Internal/rcabench-python-sdk

:func:`bump_latest_release_metadata` asks GitHub for the newest release of
each repository and rewrites the entries in place with a round-trip YAML
loader, so comments and key order in the rest of the file survive. A
shorthand ``key: owner/repo`` entry is expanded into a mapping the first time
a release is recorded for it.

Example
-------
.. code-block:: python

    from pathlib import Path
    from rcabench_docs.bump import bump_latest_release_metadata
    from rcabench_docs.releases import GitHubReleaseClient

    results = bump_latest_release_metadata(
        config_path=Path("config/site.yaml"),
        client=GitHubReleaseClient(token="ghp_exampletoken"),
    )
    for key, info in results.items():
        if info:
            print(f"{key} -> {info.tag_name}")
"""

from __future__ import annotations

import logging
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .releases import GitHubReleaseClient, ReleaseInfo

logger = logging.getLogger(__name__)


class ReleaseConfigError(ValueError):
    """Raised when the ``releases`` section cannot be updated."""


def bump_latest_release_metadata(
    *, config_path: Path, client: GitHubReleaseClient
) -> dict[str, ReleaseInfo | None]:
    """Fetch the latest release for every tracked repository and update the YAML.

    Returns
    -------
    dict[str, ReleaseInfo | None]
        Release keys mapped to the recorded release, or ``None`` when the
        repository has no releases (stale values are removed).

    Raises
    ------
    ReleaseConfigError
        If the file is not a mapping, has no ``releases`` entries, or an entry
        does not name a repository.
    GitHubReleaseError
        If a GitHub lookup fails; the file is left untouched.
    """
    yaml = _build_roundtrip_yaml()
    with config_path.open("r", encoding="utf-8") as handle:
        document = yaml.load(handle) or CommentedMap()
    if not isinstance(document, CommentedMap):
        msg = "Top-level configuration must be a mapping"
        raise ReleaseConfigError(msg)

    releases = document.get("releases")
    if not isinstance(releases, CommentedMap) or not releases:
        msg = "No releases defined in site configuration"
        raise ReleaseConfigError(msg)

    results: dict[str, ReleaseInfo | None] = {}
    for key in list(releases.keys()):
        entry = _normalize_entry(key, releases[key])
        release = client.fetch_latest(str(entry["repo"]))
        results[str(key)] = _record_release(entry, release)
        if isinstance(releases[key], str) and release is None:
            continue
        releases[key] = entry
        logger.debug("release %s -> %s", key, release.tag_name if release else None)

    with config_path.open("w", encoding="utf-8") as handle:
        yaml.dump(document, handle)

    return results


def _build_roundtrip_yaml() -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    yaml.width = 120
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


def _normalize_entry(key: object, entry: object) -> CommentedMap:
    """Return ``entry`` as a mapping holding at least ``repo``."""
    if isinstance(entry, str) and entry.strip():
        expanded = CommentedMap()
        expanded["repo"] = entry.strip()
        return expanded
    if isinstance(entry, CommentedMap) and str(entry.get("repo") or "").strip():
        return entry
    msg = f"Release '{key}' must name a repository"
    raise ReleaseConfigError(msg)


def _record_release(
    entry: CommentedMap, release: ReleaseInfo | None
) -> ReleaseInfo | None:
    if release is None:
        for key in ("latest_release", "latest_release_published_at"):
            if key in entry:
                del entry[key]
        return None

    _upsert_key(entry, "latest_release", release.tag_name, ("repo",))
    if release.published_at:
        _upsert_key(
            entry,
            "latest_release_published_at",
            release.published_at,
            ("latest_release", "repo"),
        )
    elif "latest_release_published_at" in entry:
        del entry["latest_release_published_at"]
    return release


def _upsert_key(
    entry: CommentedMap, key: str, value: str, anchors: tuple[str, ...]
) -> None:
    """Set ``key``, inserting it after the first present anchor key when new."""
    if key in entry:
        entry[key] = value
        return
    existing_keys = list(entry.keys())
    for anchor in anchors:
        if anchor in entry:
            entry.insert(existing_keys.index(anchor) + 1, key, value)
            return
    entry[key] = value


__all__ = ["ReleaseConfigError", "bump_latest_release_metadata"]
