"""Unit tests for the release bump workflow."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest
import requests
from ruamel.yaml import YAML

from rcabench_docs.bump import ReleaseConfigError, bump_latest_release_metadata
from rcabench_docs.releases import GitHubReleaseClient, GitHubReleaseError, ReleaseInfo

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture


class StubClient(GitHubReleaseClient):
    """Release client answering from a fixed table instead of GitHub."""

    def __init__(self, releases: dict[str, ReleaseInfo | None]) -> None:
        super().__init__()
        self.releases = releases
        self.calls: list[str] = []

    def fetch_latest(self, repo: str) -> ReleaseInfo | None:
        self.calls.append(repo)
        return self.releases.get(repo)


def test_github_release_client_fetches_release_and_uses_token(
    mocker: MockerFixture,
) -> None:
    """The GitHub client should pass auth headers and parse release payloads."""
    session = mocker.Mock(spec=requests.Session)
    response = mocker.Mock()
    response.status_code = 200
    response.json.return_value = {
        "tag_name": "v1.4.0",
        "name": "RCABench 1.4",
        "html_url": "https://example.invalid/releases/14",
        "published_at": "2025-05-01T09:30:00Z",
    }
    session.get.return_value = response

    client = GitHubReleaseClient(
        token="secret-token", api_base="https://example.invalid/", session=session
    )
    release = client.fetch_latest("LGU-SE-Internal/rcabench")

    assert release is not None, "expected ReleaseInfo when GitHub returns 200"
    assert release.tag_name == "v1.4.0", (
        f"expected tag_name 'v1.4.0', got {release.tag_name!r}"
    )
    assert release.published_datetime is not None
    assert release.published_datetime.isoformat() == "2025-05-01T09:30:00+00:00"

    session.get.assert_called_once()
    called_url = session.get.call_args.args[0]
    assert called_url == (
        "https://example.invalid/repos/LGU-SE-Internal/rcabench/releases/latest"
    ), f"expected latest releases endpoint to be requested, got {called_url!r}"
    headers = session.get.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer secret-token", (
        "expected Authorization header to include Bearer token"
    )
    assert headers["Accept"] == "application/vnd.github+json"


def test_github_release_client_returns_none_for_missing_release(
    mocker: MockerFixture,
) -> None:
    """GitHub returns HTTP 404 when no releases exist; treat that as None."""
    session = mocker.Mock(spec=requests.Session)
    response = mocker.Mock()
    response.status_code = 404
    response.text = ""
    session.get.return_value = response

    client = GitHubReleaseClient(session=session)
    assert client.fetch_latest("owner/missing") is None, (
        "expected None for repositories without releases (HTTP 404)"
    )
    headers = session.get.call_args.kwargs["headers"]
    assert "Authorization" not in headers, "anonymous clients send no token"


def test_github_release_client_raises_on_server_errors(
    mocker: MockerFixture,
) -> None:
    """Error statuses other than 404 surface as GitHubReleaseError."""
    session = mocker.Mock(spec=requests.Session)
    response = mocker.Mock()
    response.status_code = 403
    response.text = "API rate limit exceeded"
    session.get.return_value = response

    client = GitHubReleaseClient(session=session)
    with pytest.raises(GitHubReleaseError, match="403"):
        client.fetch_latest("owner/repo")


def test_github_release_client_wraps_transport_errors(mocker: MockerFixture) -> None:
    """Connection failures are reported as GitHubReleaseError."""
    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = requests.ConnectionError("unreachable")

    client = GitHubReleaseClient(session=session)
    with pytest.raises(GitHubReleaseError, match="owner/repo"):
        client.fetch_latest("owner/repo")


def test_github_release_client_rejects_empty_repo() -> None:
    """An empty repository slug is a caller error."""
    with pytest.raises(ValueError, match="empty"):
        GitHubReleaseClient().fetch_latest(" / ")


def test_bump_workflow_updates_yaml(tmp_path: Path) -> None:
    """Latest release values should be inserted or removed per repo."""
    config_path = tmp_path / "site.yaml"
    config_path.write_text(
        dedent(
            """
            site:
              title: RCABench
            releases:
              # Updated by `docs bump`.
              platform:
                repo: LGU-SE-Internal/rcabench
                channel: stable
              sdk: LGU-SE-Internal/rcabench-python-sdk
              operator:
                repo: LGU-SE-Internal/rcabench-operator
                latest_release: prune-me
                latest_release_published_at: "2024-01-01T00:00:00Z"
              dashboard: LGU-SE-Internal/rcabench-dashboard
            """
        ).strip()
        + "\n",
        encoding="utf-8",
    )
    client = StubClient(
        {
            "LGU-SE-Internal/rcabench": ReleaseInfo(
                tag_name="v1.4.0", published_at="2025-05-01T09:30:00Z"
            ),
            "LGU-SE-Internal/rcabench-python-sdk": ReleaseInfo(tag_name="v0.9.2"),
        }
    )

    result = bump_latest_release_metadata(config_path=config_path, client=client)

    assert client.calls == [
        "LGU-SE-Internal/rcabench",
        "LGU-SE-Internal/rcabench-python-sdk",
        "LGU-SE-Internal/rcabench-operator",
        "LGU-SE-Internal/rcabench-dashboard",
    ], f"expected each repo to be fetched once, got {client.calls!r}"
    assert result["platform"] is not None
    assert result["platform"].tag_name == "v1.4.0"
    assert result["operator"] is None, "expected operator release to be cleared"
    assert result["dashboard"] is None

    text = config_path.read_text(encoding="utf-8")
    assert "# Updated by `docs bump`." in text, "comments should survive the rewrite"

    parsed = YAML(typ="safe").load(text)
    platform = parsed["releases"]["platform"]
    assert list(platform) == [
        "repo",
        "latest_release",
        "latest_release_published_at",
        "channel",
    ], f"expected release keys after repo, got {list(platform)!r}"
    assert platform["latest_release"] == "v1.4.0"
    assert platform["latest_release_published_at"] == "2025-05-01T09:30:00Z"
    assert parsed["releases"]["sdk"] == {
        "repo": "LGU-SE-Internal/rcabench-python-sdk",
        "latest_release": "v0.9.2",
    }, "shorthand entries expand into mappings once a release is known"
    assert parsed["releases"]["operator"] == {
        "repo": "LGU-SE-Internal/rcabench-operator"
    }, "stale release values should be removed"
    assert parsed["releases"]["dashboard"] == "LGU-SE-Internal/rcabench-dashboard", (
        "shorthand entries without releases stay untouched"
    )


@pytest.mark.parametrize(
    "document",
    [
        "site:\n  title: RCABench\n",
        "releases: {}\n",
        "releases:\n  platform:\n    channel: stable\n",
        "- not\n- a mapping\n",
    ],
    ids=["no-releases", "empty-releases", "missing-repo", "not-a-mapping"],
)
def test_bump_rejects_unusable_config(tmp_path: Path, document: str) -> None:
    """Configurations without usable release entries are rejected."""
    config_path = tmp_path / "site.yaml"
    config_path.write_text(document, encoding="utf-8")

    with pytest.raises(ReleaseConfigError):
        bump_latest_release_metadata(config_path=config_path, client=StubClient({}))
    assert config_path.read_text(encoding="utf-8") == document, "file is left untouched"
