"""Load and validate the documentation site descriptor.

This subpackage parses the project's ``site.yaml`` descriptor, checks that
every required field is present and well typed, resolves referenced files
(sidebar definitions, custom stylesheet, OpenAPI specs) against the
descriptor's directory, and produces immutable dataclasses
(:class:`SiteConfig`, :class:`PresetConfig`, etc.) that the build stages
consume. The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from aura_docs.config import load_site_config
>>> site = load_site_config(Path("example/site.yaml"))  # doctest: +SKIP
>>> [item.label for item in site.theme_config.navbar.items][:1]  # doctest: +SKIP
['Overview']
"""

from .loader import REQUIRED_SITE_FIELDS, load_site_config
from .models import (
    ApiSidebarOptions,
    ApiSpecConfig,
    BrokenLinkPolicy,
    ColorMode,
    ColorModeConfig,
    DocLink,
    DocSidebarLink,
    DocsOptions,
    DocsSidebarBehaviour,
    Dropdown,
    FooterConfig,
    FooterLink,
    NavbarConfig,
    NavbarItem,
    NavbarLogo,
    OpenApiDocsPlugin,
    PluginEntry,
    PresetConfig,
    PresetThemeOptions,
    PrismConfig,
    SearchIntegrationConfig,
    SidebarBehaviour,
    SiteConfig,
    SiteConfigError,
    SiteMetadata,
    ThemeConfig,
)

__all__ = [
    "REQUIRED_SITE_FIELDS",
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
    "load_site_config",
]
