r"""Look up the latest published releases of repositories the docs describe.

The RCABench documentation quotes the version of the platform (and of the
SDK) it was written against. ``docs bump`` asks the GitHub REST API for the
newest release of every repository listed under ``releases`` in
``config/site.yaml``; this module holds the HTTP client that performs those
lookups and the :class:`ReleaseInfo` record it returns.

Example
-------
>>> from rcabench_docs.releases import GitHubReleaseClient
>>> client = GitHubReleaseClient(token="ghp_example", timeout=5)  # doctest: +SKIP
>>> latest = client.fetch_latest("LGU-SE-Internal/rcabench")  # doctest: +SKIP
>>> latest.tag_name  # doctest: +SKIP
'v1.4.0'
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import json
from http import HTTPStatus

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from rcabench_docs.config.helpers import _parse_timestamp

DEFAULT_API_BASE = "https://api.github.com"
_ACCEPT_HEADER = "application/vnd.github+json"
_API_VERSION = "2022-11-28"


class GitHubReleaseError(RuntimeError):
    """Raised when the GitHub API cannot be reached or answers with an error."""


@dc.dataclass(slots=True)
class ReleaseInfo:
    """The parts of a GitHub release object the docs record.

    Attributes
    ----------
    tag_name : str
        Git tag of the release, e.g. ``"v1.4.0"``.
    name : str | None
        Release title, when one was given.
    html_url : str | None
        Release page on github.com.
    published_at : str | None
        ISO-8601 publication timestamp as returned by the API.
    """

    tag_name: str
    name: str | None = None
    html_url: str | None = None
    published_at: str | None = None

    @property
    def published_datetime(self) -> dt.datetime | None:
        """Return ``published_at`` as a UTC datetime, if it parses."""
        return _parse_timestamp(self.published_at)


def _build_session() -> requests.Session:
    """Return a session that retries transient GitHub failures on GET."""
    session = requests.Session()
    retry = Retry(
        total=3,
        connect=3,
        read=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET",),
    )
    session.mount("https://", HTTPAdapter(max_retries=retry))
    return session


class GitHubReleaseClient:
    """Fetch ``/repos/{owner}/{repo}/releases/latest`` for tracked repositories."""

    def __init__(
        self,
        *,
        token: str | None = None,
        api_base: str = DEFAULT_API_BASE,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialise the client with optional authentication and transport.

        Parameters
        ----------
        token : str | None, optional
            GitHub token; raises the rate limit and grants access to private
            repositories.
        api_base : str, optional
            API root, overridable for GitHub Enterprise Server.
        session : requests.Session, optional
            Session to reuse; by default one with retrying HTTPS transport is
            created.
        timeout : float, optional
            Per-request timeout in seconds.
        """
        self._api_base = api_base.rstrip("/") or DEFAULT_API_BASE
        self._session = session or _build_session()
        self.timeout = timeout
        self._headers = {
            "Accept": _ACCEPT_HEADER,
            "User-Agent": "rcabench-docs",
            "X-GitHub-Api-Version": _API_VERSION,
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def fetch_latest(self, repo: str) -> ReleaseInfo | None:
        """Return the latest published release of ``owner/name``.

        Returns
        -------
        ReleaseInfo | None
            The newest release, or ``None`` when the repository has none
            (GitHub answers HTTP 404).

        Raises
        ------
        ValueError
            If ``repo`` is empty.
        GitHubReleaseError
            If the request fails or GitHub answers with another error status.
        """
        normalized = repo.strip().strip("/")
        if not normalized:
            msg = "Repository name cannot be empty"
            raise ValueError(msg)

        url = f"{self._api_base}/repos/{normalized}/releases/latest"
        try:
            response = self._session.get(
                url, headers=self._headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach GitHub releases for '{normalized}': {exc}"
            raise GitHubReleaseError(msg) from exc

        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            msg = (
                f"GitHub release lookup for '{normalized}' failed with "
                f"status {response.status_code}: {response.text[:200]}"
            )
            raise GitHubReleaseError(msg)

        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            msg = f"GitHub response for '{normalized}' was not valid JSON"
            raise GitHubReleaseError(msg) from exc
        if not isinstance(payload, dict):
            msg = f"GitHub response for '{normalized}' was not a release object"
            raise GitHubReleaseError(msg)

        tag_name = _coerce_str(payload.get("tag_name"))
        if not tag_name:
            return None
        return ReleaseInfo(
            tag_name=tag_name,
            name=_coerce_str(payload.get("name")),
            html_url=_coerce_str(payload.get("html_url")),
            published_at=_coerce_str(payload.get("published_at")),
        )


def _coerce_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = [
    "DEFAULT_API_BASE",
    "GitHubReleaseClient",
    "GitHubReleaseError",
    "ReleaseInfo",
]
