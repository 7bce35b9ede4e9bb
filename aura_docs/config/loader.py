"""Load the site descriptor YAML into typed, immutable dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from aura_docs._constants import API_ITEM_COMPONENT, CLASSIC_PRESET, OPENAPI_DOCS_THEME
from aura_docs.errors import MissingFileError

from .helpers import (
    _coerce_bool,
    _coerce_enum,
    _normalize_base_url,
    _normalize_route,
    _optional_mapping,
    _optional_str,
    _require_existing,
    _require_mapping,
    _require_str,
    _resolve_path,
    _string_list,
    _validate_site_url,
)
from .models import (
    BrokenLinkPolicy,
    DocsOptions,
    PresetConfig,
    PresetThemeOptions,
    SiteConfig,
    SiteConfigError,
    SiteMetadata,
)
from .plugins import _build_plugins, _build_themes
from .theme import _build_theme_config

REQUIRED_SITE_FIELDS = (
    "title",
    "tagline",
    "url",
    "base_url",
    "favicon",
    "organization_name",
    "project_name",
)
SUPPORTED_PRESETS = frozenset({CLASSIC_PRESET})


def load_site_config(path: Path) -> SiteConfig:
    """Load and validate the YAML descriptor describing the documentation site.

    Parameters
    ----------
    path : Path
        Filesystem path to the descriptor (for example, ``site.yaml``).
        Relative paths inside the descriptor are resolved against its
        directory.

    Returns
    -------
    SiteConfig
        Immutable site configuration with metadata, preset, plugins, themes,
        navigation, and presentation settings.

    Raises
    ------
    MissingFileError
        If the descriptor, the sidebar file, the custom stylesheet, or a local
        OpenAPI spec does not exist.
    MissingFieldError
        If a required field is absent or empty.
    SiteConfigError
        If a value has the wrong type, names an unknown preset, plugin, theme,
        or navbar item type, or plugins and themes are wired inconsistently.

    Examples
    --------
    >>> from pathlib import Path
    >>> from aura_docs.config import load_site_config
    >>> config = load_site_config(Path("example/site.yaml"))  # doctest: +SKIP
    >>> config.site.url_prefix  # doctest: +SKIP
    'https://docs.aura.network/'
    """
    if not path.exists():
        raise MissingFileError("Site descriptor", path)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"Site descriptor '{path}' is not valid YAML: {exc}"
        raise SiteConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise SiteConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    source = path.resolve()
    root = source.parent

    site = _build_site_metadata(_require_mapping(raw.get("site"), "site"))
    preset = _build_preset(_require_mapping(raw.get("preset"), "preset"), root)
    plugins = _build_plugins(raw.get("plugins"), root)
    themes = _build_themes(raw.get("themes"))
    theme_config = _build_theme_config(
        _optional_mapping(raw.get("theme_config"), "theme_config")
    )

    for plugin in plugins:
        if plugin.docs_plugin_id != preset.docs_plugin_id:
            msg = (
                f"Plugin '{plugin.id}' targets docs plugin '{plugin.docs_plugin_id}', "
                f"but the preset provides '{preset.docs_plugin_id}'."
            )
            raise SiteConfigError(msg)
        for api in plugin.config.values():
            if not api.output_dir.resolve().is_relative_to(preset.docs.path.resolve()):
                msg = (
                    f"Output directory '{api.output_dir}' for API '{api.api_id}' must "
                    f"live inside the docs directory '{preset.docs.path}'."
                )
                raise SiteConfigError(msg)
    if preset.docs.doc_item_component == API_ITEM_COMPONENT and OPENAPI_DOCS_THEME not in themes:
        msg = (
            f"'{API_ITEM_COMPONENT}' is provided by '{OPENAPI_DOCS_THEME}'; "
            "add it to 'themes'."
        )
        raise SiteConfigError(msg)

    return SiteConfig(
        source=source,
        site=site,
        preset=preset,
        plugins=plugins,
        themes=themes,
        theme_config=theme_config,
        on_broken_links=_coerce_enum(
            BrokenLinkPolicy,
            raw.get("on_broken_links"),
            "on_broken_links",
            default=BrokenLinkPolicy.THROW,
        ),
        on_broken_markdown_links=_coerce_enum(
            BrokenLinkPolicy,
            raw.get("on_broken_markdown_links"),
            "on_broken_markdown_links",
            default=BrokenLinkPolicy.WARN,
        ),
        static_directories=tuple(
            _resolve_path(root, entry)
            for entry in _string_list(raw.get("static_directories"), "static_directories")
        ),
    )


def _build_site_metadata(payload: typ.Mapping[str, typ.Any]) -> SiteMetadata:
    """Build the site identity, requiring every metadata field."""
    values = {key: _require_str(payload, key, f"site.{key}") for key in REQUIRED_SITE_FIELDS}
    values["url"] = _validate_site_url(values["url"])
    values["base_url"] = _normalize_base_url(values["base_url"])
    return SiteMetadata(**values)


def _build_preset(payload: typ.Mapping[str, typ.Any], root: Path) -> PresetConfig:
    """Build the content-pipeline preset and check its referenced files."""
    name = _require_str(payload, "name", "preset.name")
    if name not in SUPPORTED_PRESETS:
        known = ", ".join(sorted(SUPPORTED_PRESETS))
        msg = f"Unknown preset '{name}'. Supported presets: {known}"
        raise SiteConfigError(msg)

    docs_raw = _require_mapping(payload.get("docs"), "preset.docs")
    docs = DocsOptions(
        path=_resolve_path(root, _optional_str(docs_raw.get("path")) or "docs"),
        route_base_path=_normalize_route(str(docs_raw.get("route_base_path") or "docs")),
        sidebar_path=_require_existing(
            root,
            _require_str(docs_raw, "sidebar_path", "preset.docs.sidebar_path"),
            "Sidebar file",
        ),
        edit_url=_optional_str(docs_raw.get("edit_url")),
        doc_layout_component=_optional_str(docs_raw.get("doc_layout_component")),
        doc_item_component=_optional_str(docs_raw.get("doc_item_component")),
        sidebar_collapsed=_coerce_bool(
            docs_raw.get("sidebar_collapsed"),
            "preset.docs.sidebar_collapsed",
            default=True,
        ),
    )

    theme_raw = _optional_mapping(payload.get("theme"), "preset.theme")
    custom_css = _optional_str(theme_raw.get("custom_css"))
    theme = PresetThemeOptions(
        custom_css=_require_existing(root, custom_css, "Custom stylesheet")
        if custom_css
        else None
    )
    return PresetConfig(name=name, docs=docs, theme=theme)


__all__ = ["REQUIRED_SITE_FIELDS", "SUPPORTED_PRESETS", "load_site_config"]
