"""Typed dataclasses describing the documentation site descriptor."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ
from pathlib import Path

from aura_docs._constants import OPENAPI_DOCS_PLUGIN
from aura_docs.errors import SiteConfigError


class BrokenLinkPolicy(enum.StrEnum):
    """How a broken reference is reported during the build."""

    IGNORE = "ignore"
    LOG = "log"
    WARN = "warn"
    THROW = "throw"


class ColorMode(enum.StrEnum):
    """Colour scheme applied to the site shell on first load."""

    LIGHT = "light"
    DARK = "dark"


@dc.dataclass(frozen=True, slots=True)
class SiteMetadata:
    """Global identity of the site."""

    title: str
    tagline: str
    url: str
    base_url: str
    favicon: str
    organization_name: str
    project_name: str

    @property
    def url_prefix(self) -> str:
        """Return the absolute URL every page lives under."""
        return f"{self.url.rstrip('/')}{self.base_url}"

    def absolute_url(self, path: str = "") -> str:
        """Join ``path`` onto the site URL prefix."""
        return f"{self.url_prefix}{path.lstrip('/')}"


@dc.dataclass(frozen=True, slots=True)
class DocsOptions:
    """Options handed to the preset's docs content pipeline."""

    path: Path
    route_base_path: str
    sidebar_path: Path
    edit_url: str | None = None
    doc_layout_component: str | None = None
    doc_item_component: str | None = None
    sidebar_collapsed: bool = True

    def edit_url_for(self, relative_source: str) -> str | None:
        """Return the edit link for a document path relative to the site root."""
        if not self.edit_url:
            return None
        return f"{self.edit_url.rstrip('/')}/{relative_source.lstrip('/')}"


@dc.dataclass(frozen=True, slots=True)
class PresetThemeOptions:
    """Theme options bundled with the preset."""

    custom_css: Path | None = None


@dc.dataclass(frozen=True, slots=True)
class PresetConfig:
    """The content-pipeline preset selected for the site."""

    name: str
    docs: DocsOptions
    theme: PresetThemeOptions

    @property
    def docs_plugin_id(self) -> str:
        """Identifier other plugins use to target the preset's docs plugin."""
        return self.name


@dc.dataclass(frozen=True, slots=True)
class ApiSidebarOptions:
    """How generated API pages are arranged."""

    group_paths_by: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ApiSpecConfig:
    """One OpenAPI document to convert into reference pages."""

    api_id: str
    spec_path: Path | str
    output_dir: Path
    sidebar_options: ApiSidebarOptions = ApiSidebarOptions()

    @property
    def is_remote(self) -> bool:
        """Return True when the spec is fetched over HTTP."""
        return isinstance(self.spec_path, str)


@dc.dataclass(frozen=True, slots=True)
class OpenApiDocsPlugin:
    """Options for the OpenAPI reference-doc plugin."""

    id: str
    docs_plugin_id: str
    config: typ.Mapping[str, ApiSpecConfig]
    name: typ.ClassVar[str] = OPENAPI_DOCS_PLUGIN

    def api(self, api_id: str) -> ApiSpecConfig:
        """Return the spec config registered under ``api_id``."""
        try:
            return self.config[api_id]
        except KeyError as exc:
            available = ", ".join(sorted(self.config))
            msg = f"Unknown API '{api_id}'. Known APIs: {available}"
            raise SiteConfigError(msg) from exc


PluginEntry = OpenApiDocsPlugin


@dc.dataclass(frozen=True, slots=True)
class NavbarLogo:
    """Logo shown at the start of the navbar."""

    alt: str
    src: str


@dc.dataclass(frozen=True, slots=True)
class DocSidebarLink:
    """Navbar entry pointing at the first document of a sidebar."""

    sidebar_id: str
    label: str
    position: str = "left"
    type: typ.ClassVar[str] = "docSidebar"


@dc.dataclass(frozen=True, slots=True)
class DocLink:
    """Link to a single document inside a dropdown."""

    doc_id: str
    label: str


@dc.dataclass(frozen=True, slots=True)
class Dropdown:
    """Navbar entry grouping document links."""

    label: str
    items: tuple[DocLink, ...]
    position: str = "left"
    type: typ.ClassVar[str] = "dropdown"


NavbarItem = DocSidebarLink | Dropdown


@dc.dataclass(frozen=True, slots=True)
class NavbarConfig:
    """Navbar title, logo, and entries."""

    title: str | None = None
    logo: NavbarLogo | None = None
    items: tuple[NavbarItem, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class FooterLink:
    """Footer hyperlink metadata."""

    label: str
    href: str


@dc.dataclass(frozen=True, slots=True)
class FooterConfig:
    """Footer links and copyright line."""

    links: tuple[FooterLink, ...] = ()
    copyright: str | None = None


@dc.dataclass(frozen=True, slots=True)
class PrismConfig:
    """Code highlighting themes and extra languages."""

    theme: str = "github"
    dark_theme: str = "dracula"
    additional_languages: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class ColorModeConfig:
    """Colour-mode defaults for the rendered shell."""

    default_mode: ColorMode = ColorMode.LIGHT
    disable_switch: bool = False
    respect_prefers_color_scheme: bool = False

    @property
    def shows_toggle(self) -> bool:
        """Return True when the shell presents a colour-mode toggle."""
        return not self.disable_switch


@dc.dataclass(frozen=True, slots=True)
class DocsSidebarBehaviour:
    """Docs sidebar behaviour from ``theme_config.docs.sidebar``."""

    auto_collapse_categories: bool = False
    hideable: bool = False


@dc.dataclass(frozen=True, slots=True)
class SidebarBehaviour:
    """Legacy sidebar behaviour from ``theme_config.sidebar``."""

    auto_collapse_categories: bool = False


@dc.dataclass(frozen=True, slots=True)
class SearchIntegrationConfig:
    """Hosted search-index integration (Algolia DocSearch).

    The application id and API key are public search-only identifiers and are
    shipped to the browser as-is.
    """

    app_id: str
    api_key: str
    index_name: str
    contextual_search: bool = True
    search_parameters: typ.Mapping[str, typ.Any] = dc.field(default_factory=dict)
    search_page_path: str | None = "search"
    external_url_regex: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ThemeConfig:
    """Cross-cutting presentation settings."""

    navbar: NavbarConfig = NavbarConfig()
    footer: FooterConfig = FooterConfig()
    prism: PrismConfig = PrismConfig()
    color_mode: ColorModeConfig = ColorModeConfig()
    docs_sidebar: DocsSidebarBehaviour = DocsSidebarBehaviour()
    sidebar: SidebarBehaviour = SidebarBehaviour()
    algolia: SearchIntegrationConfig | None = None


@dc.dataclass(frozen=True, slots=True)
class SiteConfig:
    """Fully validated site descriptor."""

    source: Path
    site: SiteMetadata
    preset: PresetConfig
    plugins: tuple[PluginEntry, ...] = ()
    themes: tuple[str, ...] = ()
    theme_config: ThemeConfig = ThemeConfig()
    on_broken_links: BrokenLinkPolicy = BrokenLinkPolicy.THROW
    on_broken_markdown_links: BrokenLinkPolicy = BrokenLinkPolicy.WARN
    static_directories: tuple[Path, ...] = ()

    @property
    def root(self) -> Path:
        """Directory relative paths in the descriptor are resolved against."""
        return self.source.parent

    @property
    def docs_dir(self) -> Path:
        """Directory holding the site's documents."""
        return self.preset.docs.path

    def plugin(self, plugin_id: str) -> PluginEntry:
        """Return the plugin registered under ``plugin_id``."""
        for entry in self.plugins:
            if entry.id == plugin_id:
                return entry
        known = ", ".join(entry.id for entry in self.plugins) or "none"
        msg = f"Unknown plugin '{plugin_id}'. Known plugins: {known}"
        raise SiteConfigError(msg)

    def openapi_plugins(self) -> list[OpenApiDocsPlugin]:
        """Return every OpenAPI plugin entry in declaration order."""
        return [entry for entry in self.plugins if isinstance(entry, OpenApiDocsPlugin)]

    def api_specs(self) -> list[ApiSpecConfig]:
        """Return every configured API spec across OpenAPI plugins."""
        return [
            spec for plugin in self.openapi_plugins() for spec in plugin.config.values()
        ]


__all__ = [
    "ApiSidebarOptions",
    "ApiSpecConfig",
    "BrokenLinkPolicy",
    "ColorMode",
    "ColorModeConfig",
    "DocLink",
    "DocSidebarLink",
    "DocsOptions",
    "DocsSidebarBehaviour",
    "Dropdown",
    "FooterConfig",
    "FooterLink",
    "NavbarConfig",
    "NavbarItem",
    "NavbarLogo",
    "OpenApiDocsPlugin",
    "PluginEntry",
    "PresetConfig",
    "PresetThemeOptions",
    "PrismConfig",
    "SearchIntegrationConfig",
    "SidebarBehaviour",
    "SiteConfig",
    "SiteConfigError",
    "SiteMetadata",
    "ThemeConfig",
]
