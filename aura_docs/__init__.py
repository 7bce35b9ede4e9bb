"""Build tooling for the Aura Network documentation site.

This package loads the declarative ``site.yaml`` descriptor, generates API
reference pages from OpenAPI specs, resolves navigation, and renders the site
shell.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from aura_docs import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
