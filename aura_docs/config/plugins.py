"""Plugin and theme registry builders.

Plugins are declared as ``{name, options}`` entries. Each supported plugin name
maps to a builder that turns its free-form options into a typed record, so an
unknown plugin or a misspelled option fails at load time rather than during
generation.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path
from types import MappingProxyType

from aura_docs._constants import (
    OPENAPI_DOCS_PLUGIN,
    OPENAPI_DOCS_THEME,
    SEARCH_ALGOLIA_THEME,
)

from .helpers import (
    _is_remote,
    _optional_mapping,
    _optional_str,
    _require_existing,
    _require_mapping,
    _require_str,
    _resolve_path,
    _string_list,
)
from .models import (
    ApiSidebarOptions,
    ApiSpecConfig,
    OpenApiDocsPlugin,
    PluginEntry,
    SiteConfigError,
)

KNOWN_THEMES = frozenset({OPENAPI_DOCS_THEME, SEARCH_ALGOLIA_THEME})
GROUP_PATHS_BY = frozenset({"tag"})

PluginBuilder = cabc.Callable[[typ.Mapping[str, typ.Any], Path], PluginEntry]


def _build_openapi_plugin(
    options: typ.Mapping[str, typ.Any], root: Path
) -> OpenApiDocsPlugin:
    """Build the OpenAPI reference-doc plugin options."""
    plugin_id = _require_str(options, "id", "plugins.options.id")
    docs_plugin_id = _require_str(
        options, "docs_plugin_id", f"plugins.{plugin_id}.docs_plugin_id"
    )
    raw_config = _require_mapping(options.get("config"), f"plugins.{plugin_id}.config")
    if not raw_config:
        msg = f"Plugin '{plugin_id}' declares no APIs under 'config'."
        raise SiteConfigError(msg)
    apis: dict[str, ApiSpecConfig] = {}
    for api_id, payload in raw_config.items():
        apis[str(api_id)] = _build_api_spec(str(api_id), payload, root)
    return OpenApiDocsPlugin(
        id=plugin_id,
        docs_plugin_id=docs_plugin_id,
        config=MappingProxyType(apis),
    )


def _build_api_spec(api_id: str, payload: object, root: Path) -> ApiSpecConfig:
    """Build one API entry, checking the local spec file exists."""
    field = f"config.{api_id}"
    data = _require_mapping(payload, field)
    raw_spec = _require_str(data, "spec_path", f"{field}.spec_path")
    spec_path: Path | str
    if _is_remote(raw_spec):
        spec_path = raw_spec
    else:
        spec_path = _require_existing(root, raw_spec, f"OpenAPI spec for '{api_id}'")
    output_dir = _resolve_path(root, _require_str(data, "output_dir", f"{field}.output_dir"))
    sidebar = _optional_mapping(data.get("sidebar_options"), f"{field}.sidebar_options")
    group_by = _optional_str(sidebar.get("group_paths_by"))
    if group_by is not None and group_by not in GROUP_PATHS_BY:
        msg = (
            f"'{field}.sidebar_options.group_paths_by' must be one of: "
            f"{', '.join(sorted(GROUP_PATHS_BY))} (got {group_by!r})."
        )
        raise SiteConfigError(msg)
    return ApiSpecConfig(
        api_id=api_id,
        spec_path=spec_path,
        output_dir=output_dir,
        sidebar_options=ApiSidebarOptions(group_paths_by=group_by),
    )


PLUGIN_BUILDERS: dict[str, PluginBuilder] = {
    OPENAPI_DOCS_PLUGIN: _build_openapi_plugin,
}


def _build_plugins(entries: object, root: Path) -> tuple[PluginEntry, ...]:
    """Build every plugin entry in declaration order."""
    match entries:
        case None:
            return ()
        case list() as items:
            pass
        case _:
            msg = "'plugins' must be a list."
            raise SiteConfigError(msg)

    plugins: list[PluginEntry] = []
    for index, entry in enumerate(items):
        match entry:
            case {"name": str() as name, **rest}:
                options = _optional_mapping(rest.get("options"), f"plugins[{index}].options")
            case _:
                msg = f"Plugin entry {index} must be a mapping with a 'name'."
                raise SiteConfigError(msg)
        builder = PLUGIN_BUILDERS.get(name)
        if builder is None:
            known = ", ".join(sorted(PLUGIN_BUILDERS))
            msg = f"Unknown plugin '{name}'. Supported plugins: {known}"
            raise SiteConfigError(msg)
        plugins.append(builder(options, root))

    seen_ids: set[str] = set()
    seen_apis: set[str] = set()
    for plugin in plugins:
        if plugin.id in seen_ids:
            msg = f"Duplicate plugin id '{plugin.id}'."
            raise SiteConfigError(msg)
        seen_ids.add(plugin.id)
        for api_id in plugin.config:
            if api_id in seen_apis:
                msg = f"API id '{api_id}' is configured by more than one plugin."
                raise SiteConfigError(msg)
            seen_apis.add(api_id)
    return tuple(plugins)


def _build_themes(entries: object) -> tuple[str, ...]:
    """Validate theme module names against the known theme registry."""
    themes = _string_list(entries, "themes")
    for theme in themes:
        if theme not in KNOWN_THEMES:
            known = ", ".join(sorted(KNOWN_THEMES))
            msg = f"Unknown theme '{theme}'. Supported themes: {known}"
            raise SiteConfigError(msg)
    return themes


__all__ = [
    "GROUP_PATHS_BY",
    "KNOWN_THEMES",
    "PLUGIN_BUILDERS",
    "_build_plugins",
    "_build_themes",
]
