"""Static site builder for the RCABench documentation.

This package exposes the CLI entry points used by ``uv run docs`` to render
the Markdown content tree, check it for broken links and malformed front
matter, scaffold pages, and record the latest RCABench releases.

Exports
-------
- ``app``: Cyclopts application holding the subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from rcabench_docs import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
