"""Cyclopts CLI entrypoint for building the documentation site.

The ``aura-docs`` console script loads the site descriptor, generates API
reference pages from the configured OpenAPI specs, resolves navigation, checks
markdown links, and renders the site shell. ``check`` runs every validation
without writing, which suits CI jobs guarding pull requests.

Every option can also be supplied through ``INPUT_*`` environment variables so
the CLI works unchanged inside a GitHub Action.

Examples
--------
Build the site described by the default descriptor:

>>> from aura_docs.cli import main
>>> main()  # doctest: +SKIP

Regenerate one API's reference pages:

>>> from aura_docs.cli import app
>>> app.run(["gen-api-docs", "horoscope", "--config", "example/site.yaml"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .build import DEFAULT_OUT_DIR, BuildContext, SiteBuilder
from .config import load_site_config

DEFAULT_CONFIG = Path("site.yaml")

app = App(name="aura-docs", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to the site descriptor", env_var="INPUT_CONFIG")
]
ApiIdArgument = typ.Annotated[
    str | None, Parameter(help="API id to target; all APIs when omitted")
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Generate API pages, check links, and render the site shell.")
def build(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    out_dir: typ.Annotated[
        Path, Parameter(help="Directory for build artefacts", env_var="INPUT_OUT_DIR")
    ] = DEFAULT_OUT_DIR,
) -> None:
    """Build the documentation site.

    Parameters
    ----------
    config : Path, optional
        Path to the ``site.yaml`` descriptor (overridable via
        ``INPUT_CONFIG``).
    out_dir : Path, optional
        Directory the shell and static assets are written to (overridable via
        ``INPUT_OUT_DIR``).

    Raises
    ------
    SiteConfigError
        If the descriptor is invalid.
    BrokenLinkError
        If a link check fails under the ``throw`` policy.
    """
    site_config = load_site_config(config)
    result = SiteBuilder(BuildContext(site_config, out_dir)).run()
    for path in result.written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Validate the descriptor, specs, navigation, and links without writing.")
def check(*, config: ConfigOption = DEFAULT_CONFIG) -> None:
    """Run every validation stage and report a summary."""
    site_config = load_site_config(config)
    result = SiteBuilder(BuildContext(site_config)).check()
    print(
        f"checked {_format_path(config)}: {result.documents} documents, "
        f"{len(result.api_pages)} API pages"
    )
    for problem in (*result.link_warnings, *result.markdown_warnings):
        print(f"warning: {problem}")


@app.command(name="gen-api-docs", help="Generate reference pages from OpenAPI specs.")
def gen_api_docs(api_id: ApiIdArgument = None, *, config: ConfigOption = DEFAULT_CONFIG) -> None:
    """Generate pages for one API, or for every configured API."""
    site_config = load_site_config(config)
    runs = SiteBuilder(BuildContext(site_config)).plugins.run(api_id)
    for run in runs:
        for path in run.written:
            print(f"wrote {_format_path(path)}")


@app.command(name="clean-api-docs", help="Remove generated API reference pages.")
def clean_api_docs(
    api_id: ApiIdArgument = None, *, config: ConfigOption = DEFAULT_CONFIG
) -> None:
    """Remove generated output for one API, or for every configured API."""
    site_config = load_site_config(config)
    removed = SiteBuilder(BuildContext(site_config)).plugins.clean(api_id)
    for path in removed:
        print(f"removed {_format_path(path)}")
    if not removed:
        print("nothing to clean")


def main() -> None:
    """Invoke the Cyclopts application that powers the `aura-docs` console command.

    Logging is configured here so policy-driven ``log`` and ``warn`` link
    reports reach stderr.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
