"""Shared fixtures for aura-docs tests.

``example_site`` copies the checked-in Aura Network example into a temporary
directory so builds can write generated pages without touching the
repository. ``make_site`` writes a small descriptor from a Python mapping,
letting each test mutate just the fields it cares about.
"""

from __future__ import annotations

import copy
import shutil
import typing as typ
from pathlib import Path

import pytest
from ruamel.yaml import YAML

REPO_ROOT = Path(__file__).resolve().parents[1]
EXAMPLE_ROOT = REPO_ROOT / "example"

BASE_DESCRIPTOR: dict[str, typ.Any] = {
    "site": {
        "title": "Docs",
        "tagline": "Test Network",
        "url": "https://docs.example.test",
        "base_url": "/",
        "favicon": "img/favicon.svg",
        "organization_name": "example-org",
        "project_name": "docs",
    },
    "preset": {
        "name": "classic",
        "docs": {"path": "docs", "route_base_path": "/", "sidebar_path": "sidebars.yaml"},
    },
    "theme_config": {
        "navbar": {
            "title": "Example",
            "items": [
                {"type": "docSidebar", "sidebar_id": "main", "label": "Guide"},
            ],
        },
    },
}

SiteFactory = typ.Callable[..., Path]


@pytest.fixture
def example_site(tmp_path: Path) -> Path:
    """Return the descriptor of a private copy of the example site."""
    root = tmp_path / "site"
    shutil.copytree(EXAMPLE_ROOT, root)
    return root / "site.yaml"


@pytest.fixture
def make_site(tmp_path: Path) -> SiteFactory:
    """Return a factory that writes a minimal site and its descriptor.

    The factory accepts an optional ``mutate`` callable that edits a deep
    copy of :data:`BASE_DESCRIPTOR` before it is written, and an optional
    ``sidebars`` mapping (defaults to one ``main`` sidebar listing
    ``intro``).
    """

    def _make(
        mutate: typ.Callable[[dict[str, typ.Any]], None] | None = None,
        *,
        sidebars: dict[str, typ.Any] | None = None,
        docs: dict[str, str] | None = None,
    ) -> Path:
        descriptor = copy.deepcopy(BASE_DESCRIPTOR)
        if mutate is not None:
            mutate(descriptor)
        docs_dir = tmp_path / "docs"
        for relative, text in (docs or {"intro.md": "# Introduction\n"}).items():
            target = docs_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        yaml = YAML()
        with (tmp_path / "sidebars.yaml").open("w", encoding="utf-8") as handle:
            yaml.dump(sidebars if sidebars is not None else {"main": ["intro"]}, handle)
        path = tmp_path / "site.yaml"
        with path.open("w", encoding="utf-8") as handle:
            yaml.dump(descriptor, handle)
        return path

    return _make
