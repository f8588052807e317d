"""Behaviour tests for building a documentation site from a content tree.

These scenarios write a throwaway content tree, run the site generator and
inspect the published files. They cover the pretty URL rules for section
pages and leaf bundles, bundle resources, sidebar ordering and the handling
of draft pages.

Usage
-----
Run ``pytest tests/bdd/test_site_build.py -v``.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from rcabench_docs.config import load_site_config
from rcabench_docs.generator import SiteGenerator

if typ.TYPE_CHECKING:
    from conftest import SiteFactory

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "site_build.feature"
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("a content tree with a docs section and an SDK bundle")
def given_bundle_tree(site_factory: SiteFactory, scenario_state: ScenarioState) -> None:
    """Write a home page, a docs section, a plain page and a leaf bundle."""
    scenario_state["config_path"] = site_factory(
        {
            "_index.md": "---\ntitle: RCABench\n---\nWelcome.\n",
            "docs/_index.md": "---\ntitle: Docs\nweight: 1\n---\nGuides.\n",
            "docs/install.md": "---\ntitle: Install\nweight: 1\n---\nSteps.\n",
            "docs/sdk/index.md": "---\ntitle: SDK\nweight: 2\n---\nClient.\n",
            "docs/sdk/example.py": "import rcabench\n",
        }
    )


@given("a content tree with a draft page")
def given_draft_tree(site_factory: SiteFactory, scenario_state: ScenarioState) -> None:
    """Write a small tree where one page is still marked as a draft."""
    scenario_state["config_path"] = site_factory(
        {
            "_index.md": "---\ntitle: RCABench\n---\n",
            "docs/_index.md": "---\ntitle: Docs\n---\n",
            "docs/wip.md": "---\ntitle: Work in progress\ndraft: true\n---\n",
        }
    )


def _build(scenario_state: ScenarioState, *, build_drafts: bool) -> None:
    config = load_site_config(typ.cast("Path", scenario_state["config_path"]))
    generator = SiteGenerator(config, build_drafts=build_drafts)
    written = generator.run()
    scenario_state["output_dir"] = config.output_dir
    scenario_state["written"] = [
        path.relative_to(config.output_dir).as_posix() for path in written
    ]


@when("I build the site")
def when_build(scenario_state: ScenarioState) -> None:
    """Run the generator with the configured draft setting."""
    _build(scenario_state, build_drafts=False)


@when("I build the site including drafts")
def when_build_drafts(scenario_state: ScenarioState) -> None:
    """Run the generator with drafts enabled."""
    _build(scenario_state, build_drafts=True)


@then(parsers.parse('"{source}" is published at "{target}"'))
def then_published(scenario_state: ScenarioState, source: str, target: str) -> None:
    """Assert the page rendered from ``source`` was written to ``target``."""
    written = typ.cast("list[str]", scenario_state["written"])
    assert target in written, f"expected {source} to be written to {target}, got {written!r}"
    html = (scenario_state["output_dir"] / target).read_text(encoding="utf-8")
    assert "<html" in html


@then(parsers.parse('nothing is published at "{target}"'))
def then_not_published(scenario_state: ScenarioState, target: str) -> None:
    """Assert no page was written to ``target``."""
    output_dir = typ.cast("Path", scenario_state["output_dir"])
    assert not (output_dir / target).exists(), f"{target} should not be published"


@then(parsers.parse('the bundle resource "{resource}" is copied'))
def then_resource_copied(scenario_state: ScenarioState, resource: str) -> None:
    """Assert non-Markdown files next to a bundle are published verbatim."""
    output_dir = typ.cast("Path", scenario_state["output_dir"])
    assert (output_dir / resource).read_text(encoding="utf-8") == "import rcabench\n"


@then(parsers.parse('the sidebar on "{url_path}" lists "{labels}"'))
def then_sidebar_lists(scenario_state: ScenarioState, url_path: str, labels: str) -> None:
    """Assert the nested sidebar lists the section's pages in weight order."""
    output_dir = typ.cast("Path", scenario_state["output_dir"])
    html = (output_dir / url_path / "index.html").read_text(encoding="utf-8")
    soup = BeautifulSoup(html, "html.parser")
    found = [
        link.get_text(strip=True)
        for link in soup.select(".sidebar__list--depth-1 > li > a")
    ]
    assert found == labels.split(", "), f"unexpected sidebar entries {found!r}"
