"""Cyclopts CLI entrypoint for building and checking the RCABench docs site.

The ``docs`` console script defined here renders the Markdown content tree
into a static site, lints content before publishing, scaffolds new pages, and
records the latest GitHub releases of the repositories the docs describe.
Typical usage involves running ``docs check`` and ``docs build`` in CI, and
``docs bump`` when RCABench publishes a release.

Examples
--------
Build the site with the default configuration:

>>> from rcabench_docs.cli import main
>>> main()  # doctest: +SKIP

Build into a custom directory with drafts included:

>>> from rcabench_docs.cli import app
>>> app(["build", "--output-dir", "dist", "--build-drafts"])  # doctest: +SKIP
"""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .bump import bump_latest_release_metadata
from .config import load_site_config
from .generator import SiteGenerator
from .lint import check_site
from .releases import DEFAULT_API_BASE, GitHubReleaseClient
from .scaffold import scaffold_page

DEFAULT_CONFIG = Path("config/site.yaml")

app = App(name="docs", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Render the content tree into a static site.")
def build(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    build_drafts: typ.Annotated[
        bool, Parameter(help="Include draft pages", env_var="INPUT_BUILD_DRAFTS")
    ] = False,
    base_url: typ.Annotated[
        str | None,
        Parameter(help="Override the site base URL", env_var="INPUT_BASE_URL"),
    ] = None,
) -> None:
    """Build the documentation site.

    Parameters
    ----------
    config : Path, optional
        Path to the ``site.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    output_dir : Path or None, optional
        Output directory; defaults to ``site.output_dir``.
    build_drafts : bool, optional
        Render pages marked ``draft: true`` as well; drafts are also included
        when ``site.build_drafts`` is set.
    base_url : str or None, optional
        Base URL override, e.g. a deploy preview address.
    """
    site_config = load_site_config(config)
    generator = SiteGenerator(
        site_config,
        output_dir=output_dir,
        build_drafts=build_drafts or None,
        base_url=base_url,
    )
    for path in generator.run():
        print(f"wrote {_format_path(path)}")


@app.command(help="Check content for broken links, fences and front matter.")
def check(*, config: ConfigOption = DEFAULT_CONFIG) -> None:
    """Print one line per content issue and exit non-zero when any exist.

    Parameters
    ----------
    config : Path, optional
        Path to the site configuration file.

    Raises
    ------
    SystemExit
        With status 1 when issues were found.
    """
    site_config = load_site_config(config)
    issues = check_site(site_config)
    for issue in issues:
        print(issue.format())
    if issues:
        print(f"{len(issues)} issue(s) found")
        raise SystemExit(1)
    print("no issues found")


@app.command(help="Create a new content page with front matter.")
def new(
    path: typ.Annotated[
        str, Parameter(help="Page path relative to the content directory")
    ],
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    title: typ.Annotated[
        str | None, Parameter(help="Page title (derived from the file name)")
    ] = None,
    weight: typ.Annotated[
        int | None, Parameter(help="Navigation weight (after the last sibling)")
    ] = None,
) -> None:
    """Scaffold a page under the configured content directory.

    Parameters
    ----------
    path : str
        Page path such as ``docs/algorithms/baro.md``.
    config : Path, optional
        Path to the site configuration file.
    title : str or None, optional
        Title override.
    weight : int or None, optional
        Weight override.

    Raises
    ------
    FileExistsError
        If the page already exists.
    """
    site_config = load_site_config(config)
    created = scaffold_page(
        site_config.content_dir, path, title=title, weight=weight
    )
    print(f"wrote {_format_path(created)}")


@app.command(help="Record the latest GitHub release tag for each tracked repository.")
def bump(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    github_token: typ.Annotated[
        str | None,
        Parameter(
            help="Optional GitHub token (falls back to GITHUB_TOKEN)",
            env_var="INPUT_GITHUB_TOKEN",
        ),
    ] = None,
    github_api_url: typ.Annotated[
        str,
        Parameter(
            help="Override the GitHub API base URL", env_var="INPUT_GITHUB_API_URL"
        ),
    ] = DEFAULT_API_BASE,
) -> None:
    """Update ``releases`` entries with the latest GitHub release tags.

    Parameters
    ----------
    config : Path, optional
        Path to the site configuration file; defaults to ``config/site.yaml``.
    github_token : str or None, optional
        GitHub token for authenticated release queries. If ``None``, the
        function falls back to ``GITHUB_TOKEN`` or ``GH_TOKEN`` environment
        variables before making unauthenticated requests.
    github_api_url : str, optional
        Base URL for the GitHub API; override for GitHub Enterprise.
    """
    token = github_token or os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
    client = GitHubReleaseClient(token=token, api_base=github_api_url)
    results = bump_latest_release_metadata(config_path=config, client=client)
    for key, release in sorted(results.items()):
        if release:
            label = release.tag_name
            if release.published_at:
                label = f"{label} ({release.published_at})"
            print(f"{key}: {label}")
        else:
            print(f"{key}: no releases found")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``docs`` console command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
