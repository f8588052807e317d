"""Behaviour tests for recording the latest releases in ``site.yaml``.

These scenarios run the bump workflow with a real ``GitHubReleaseClient``
whose HTTP session is mocked, so the request handling and YAML rewriting are
exercised together without live network calls. The rewritten configuration
is then loaded again to check the version shown on the site.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path
from textwrap import dedent

import pytest
import requests
from pytest_bdd import given, parsers, scenarios, then, when
from ruamel.yaml import YAML

from rcabench_docs.bump import bump_latest_release_metadata
from rcabench_docs.config import load_site_config
from rcabench_docs.releases import GitHubReleaseClient

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "release_bump.feature"
scenarios(FEATURE_FILE)

API_BASE = "https://api.example.invalid"

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Return a mutable dict used to share scenario state across BDD steps.

    The ``responses`` entry maps release endpoints to canned GitHub answers.
    """
    return {"responses": {}}


@given("a site config tracking the platform and SDK repositories")
def given_site_config(tmp_path: Path, scenario_state: ScenarioState) -> None:
    """Write a ``site.yaml`` whose SDK entry carries an outdated tag."""
    config_path = tmp_path / "site.yaml"
    config_path.write_text(
        dedent(
            f"""
            site:
              title: RCABench
              content_dir: {tmp_path / "content"}
            releases:
              platform: LGU-SE-Internal/rcabench
              sdk:
                repo: LGU-SE-Internal/rcabench-python-sdk
                latest_release: v0.1.0
            """
        ).lstrip(),
        encoding="utf-8",
    )
    scenario_state["config_path"] = config_path


@given(parsers.parse('GitHub reports release "{tag}" for "{repo}"'))
def given_release(scenario_state: ScenarioState, tag: str, repo: str) -> None:
    """Register a successful latest-release answer for ``repo``."""
    scenario_state["responses"][repo] = (
        200,
        {"tag_name": tag, "published_at": "2025-05-01T09:30:00Z"},
    )


@given(parsers.parse('GitHub reports no release for "{repo}"'))
def given_no_release(scenario_state: ScenarioState, repo: str) -> None:
    """Register a 404 answer, which GitHub sends for repos without releases."""
    scenario_state["responses"][repo] = (404, {"message": "Not Found"})


@when("I run the release bump workflow")
def when_run_bump(scenario_state: ScenarioState, mocker: MockerFixture) -> None:
    """Run the workflow against a session answering from the canned responses."""
    responses = typ.cast("dict[str, tuple[int, dict[str, str]]]", scenario_state["responses"])

    def _get(url: str, **_: object) -> object:
        repo = url.removeprefix(f"{API_BASE}/repos/").removesuffix("/releases/latest")
        status, payload = responses[repo]
        response = mocker.Mock()
        response.status_code = status
        response.text = str(payload)
        response.json.return_value = payload
        return response

    session = mocker.Mock(spec=requests.Session)
    session.get.side_effect = _get
    client = GitHubReleaseClient(api_base=API_BASE, session=session)

    config_path = typ.cast("Path", scenario_state["config_path"])
    scenario_state["result"] = bump_latest_release_metadata(
        config_path=config_path, client=client
    )


def _release_entry(scenario_state: ScenarioState, key: str) -> dict[str, str]:
    config_path = typ.cast("Path", scenario_state["config_path"])
    parsed = YAML(typ="safe").load(config_path.read_text(encoding="utf-8"))
    return parsed["releases"][key]


@then(parsers.parse('the "{key}" entry records release "{tag}"'))
def then_records_release(scenario_state: ScenarioState, key: str, tag: str) -> None:
    """Assert the rewritten entry and the returned result carry ``tag``."""
    entry = _release_entry(scenario_state, key)
    assert entry["latest_release"] == tag
    assert entry["latest_release_published_at"] == "2025-05-01T09:30:00Z"
    release = scenario_state["result"][key]
    assert release is not None
    assert release.tag_name == tag


@then(parsers.parse('the "{key}" entry records no release'))
def then_records_no_release(scenario_state: ScenarioState, key: str) -> None:
    """Assert stale release values were removed from the entry."""
    entry = _release_entry(scenario_state, key)
    assert "latest_release" not in entry, f"stale tag left in {entry!r}"
    assert scenario_state["result"][key] is None


@then(parsers.parse('the site shows version "{version}" for "{key}"'))
def then_site_version(scenario_state: ScenarioState, version: str, key: str) -> None:
    """Assert the reloaded configuration exposes the display version."""
    config = load_site_config(typ.cast("Path", scenario_state["config_path"]))
    release = config.get_release(key)
    assert release is not None
    assert release.version_display == version
