"""Resolve "last updated" timestamps for content pages from GitHub history.

When ``edit.enable_git_info`` is set, each page's last-updated date is the
timestamp of the latest commit touching its source file on the configured
branch. Lookups go through github3.py and degrade to ``None`` on any API
error, so builds never fail because GitHub is unreachable.
"""

from __future__ import annotations

import datetime as dt
import logging
import os
import typing as typ

from github3 import GitHub
from github3 import exceptions as gh_exc

from .config.helpers import _parse_timestamp

if typ.TYPE_CHECKING:
    from .config import EditConfig

logger = logging.getLogger(__name__)


class CommitDateResolver:
    """Look up and cache the latest commit date for content source files."""

    def __init__(self, edit: EditConfig, *, client: GitHub | None = None) -> None:
        """Initialize the resolver for the repository named in ``edit``.

        Parameters
        ----------
        edit : EditConfig
            Source repository, branch, and content path prefix.
        client : GitHub, optional
            Preconfigured github3.py client; by default one is created lazily
            from ``GITHUB_TOKEN`` or ``GH_TOKEN``.
        """
        self.edit = edit
        self._github_client = client
        self._repository: typ.Any = None
        self._repository_loaded = False
        self._cache: dict[str, dt.datetime | None] = {}

    def _github(self) -> GitHub:
        """Return a cached github3.py client, lazily configured from env tokens."""
        if self._github_client is None:
            token = os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
            self._github_client = GitHub(token=token)
        return self._github_client

    def _repo(self) -> typ.Any:
        """Return the github3 repository object, or None when unavailable."""
        if self._repository_loaded:
            return self._repository
        self._repository_loaded = True
        repo_slug = self.edit.repo
        if not repo_slug or "/" not in repo_slug:
            return None
        owner, name = repo_slug.split("/", 1)
        try:
            self._repository = self._github().repository(owner, name)
        except gh_exc.GitHubException as exc:
            logger.warning("GitHub repository lookup for %s failed: %s", repo_slug, exc)
            self._repository = None
        return self._repository

    def resolve(self, source_path: str) -> dt.datetime | None:
        """Return the latest commit timestamp for ``source_path`` or None on errors."""
        if source_path in self._cache:
            return self._cache[source_path]
        result: dt.datetime | None = None
        repository = self._repo()
        if repository is not None:
            prefix = self.edit.content_path.strip("/")
            path = f"{prefix}/{source_path}" if prefix else source_path
            try:
                commits = repository.commits(path=path, sha=self.edit.branch, number=1)
                latest_commit = next(iter(commits), None)
            except gh_exc.GitHubException as exc:
                logger.warning("GitHub commit lookup for %s failed: %s", path, exc)
                latest_commit = None
            if latest_commit is not None:
                result = extract_commit_timestamp(latest_commit)
        self._cache[source_path] = result
        return result


def _field(source: object, name: str) -> typ.Any:
    """Read ``name`` from a github3 object or from its raw JSON mapping."""
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)


def extract_commit_timestamp(commit: object) -> dt.datetime | None:
    """Return the author date of ``commit``, falling back to the committer date.

    ``commit`` may be a github3 commit or the decoded API payload; both expose
    the dates under ``commit.author.date`` and ``commit.committer.date``.
    """
    details = _field(commit, "commit")
    if details is None:
        return None
    for role in ("author", "committer"):
        stamp = normalize_commit_date(_field(_field(details, role), "date"))
        if stamp is not None:
            return stamp
    return None


def normalize_commit_date(value: object) -> dt.datetime | None:
    """Parse a commit date with the same rules as front matter dates."""
    return _parse_timestamp(typ.cast("dt.datetime | dt.date | str | None", value))


__all__ = ["CommitDateResolver", "extract_commit_timestamp", "normalize_commit_date"]
