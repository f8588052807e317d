"""Shared fixtures for building throwaway documentation sites under ``tmp_path``."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

if typ.TYPE_CHECKING:
    from pathlib import Path


def write_tree(root: Path, files: dict[str, str]) -> None:
    """Write ``files`` (relative path -> dedented text) below ``root``."""
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(text).lstrip(), encoding="utf-8")


SiteFactory = typ.Callable[..., "Path"]


@pytest.fixture
def site_factory(tmp_path: Path) -> SiteFactory:
    """Return a callable writing content pages plus a ``site.yaml`` pointing at them.

    The callable accepts the content files and optional extra YAML appended to
    the generated configuration, and returns the configuration path.
    """

    def _factory(files: dict[str, str], extra_yaml: str = "") -> Path:
        content_dir = tmp_path / "content"
        content_dir.mkdir(exist_ok=True)
        write_tree(content_dir, files)
        config_path = tmp_path / "config" / "site.yaml"
        config_path.parent.mkdir(exist_ok=True)
        config_path.write_text(
            dedent(
                f"""
                site:
                  title: RCABench
                  base_url: https://docs.example.invalid/
                  content_dir: {content_dir}
                  output_dir: {tmp_path / "public"}
                  static_dir: {tmp_path / "static"}
                """
            ).lstrip()
            + dedent(extra_yaml).lstrip(),
            encoding="utf-8",
        )
        return config_path

    return _factory
