"""Site shell rendering.

The shell is the chrome every page of the documentation site shares: the
navbar with its dropdowns, the footer, the colour-mode wiring, the code
highlighting stylesheet, and the DocSearch configuration. ``ShellBuilder``
renders it into ``index.html`` in the build output directory using the
``shell.html.jinja`` template, with Jinja2 autoescaping enabled.

Prism theme names from the descriptor are mapped onto Pygments styles, and the
two stylesheets are scoped by ``[data-theme='light']`` and
``[data-theme='dark']`` so the toggle switches code colours as well.
"""

from __future__ import annotations

import datetime as dt
import json
import shutil
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from pygments.formatters.html import HtmlFormatter

from ._constants import SHELL_FILENAME
from .config.helpers import _pygments_style

if typ.TYPE_CHECKING:
    from .build import BuildContext
    from .config import SearchIntegrationConfig, SiteMetadata
    from .navigation import ResolvedNavbar

STYLESHEET_DIR = "css"


class ShellBuilder:
    """Render the shared site shell from the resolved navigation."""

    def __init__(
        self,
        context: BuildContext,
        navbar: ResolvedNavbar,
        *,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the builder and Jinja environment.

        Parameters
        ----------
        context : BuildContext
            Loaded site configuration and the build output directory.
        navbar : ResolvedNavbar
            Navbar entries with hrefs resolved by the navigation composer.
        templates_dir : Path, optional
            Directory containing Jinja templates. Defaults to
            ``aura_docs/templates``.
        """
        self.context = context
        self.navbar = navbar
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(self.templates_dir),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("shell.html.jinja")

    def code_stylesheet(self) -> str:
        """Return highlight CSS for both colour modes."""
        prism = self.context.config.theme_config.prism
        rules = []
        for mode, theme in (("light", prism.theme), ("dark", prism.dark_theme)):
            formatter = HtmlFormatter(style=_pygments_style(theme), cssclass="codehilite")
            rules.append(formatter.get_style_defs(f"[data-theme='{mode}'] .codehilite"))
        return "\n".join(rules)

    def run(self) -> Path:
        """Render and write ``index.html``, returning the output path.

        The custom stylesheet, when configured, is copied next to the shell
        under ``css/`` and linked from it.
        """
        config = self.context.config
        out_dir = self.context.out_dir
        out_dir.mkdir(parents=True, exist_ok=True)

        stylesheet_href = None
        custom_css = config.preset.theme.custom_css
        if custom_css is not None:
            target = out_dir / STYLESHEET_DIR / custom_css.name
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(custom_css, target)
            stylesheet_href = f"{config.site.base_url}{STYLESHEET_DIR}/{custom_css.name}"

        theme = config.theme_config
        html = self.template.render(
            site=config.site,
            navbar=self.navbar,
            logo_src=_asset_url(config.site, self.navbar.logo.src) if self.navbar.logo else None,
            favicon=_asset_url(config.site, config.site.favicon),
            footer=theme.footer,
            color_mode=theme.color_mode,
            docs_sidebar=theme.docs_sidebar,
            stylesheet_href=stylesheet_href,
            code_css=self.code_stylesheet(),
            docsearch_json=_docsearch_json(theme.algolia),
            generated_at=dt.datetime.now(dt.UTC),
        )
        if not html.endswith("\n"):
            html += "\n"
        output_path = out_dir / SHELL_FILENAME
        output_path.write_text(html, encoding="utf-8")
        return output_path


def _asset_url(site: SiteMetadata, src: str) -> str:
    """Prefix static asset paths with the site's base URL."""
    if "://" in src or src.startswith("/"):
        return src
    return f"{site.base_url}{src}"


def _docsearch_json(search: SearchIntegrationConfig | None) -> str | None:
    """Serialize the DocSearch options for an inline ``<script>`` block."""
    if search is None:
        return None
    payload: dict[str, typ.Any] = {
        "appId": search.app_id,
        "apiKey": search.api_key,
        "indexName": search.index_name,
        "contextualSearch": search.contextual_search,
        "searchParameters": dict(search.search_parameters),
    }
    if search.search_page_path is not None:
        payload["searchPagePath"] = search.search_page_path
    if search.external_url_regex is not None:
        payload["externalUrlRegex"] = search.external_url_regex
    return json.dumps(payload, sort_keys=True).replace("</", "<\\/")


__all__ = ["ShellBuilder"]
