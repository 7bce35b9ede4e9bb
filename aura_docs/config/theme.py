"""Theme configuration builders: navbar, footer, code themes, search."""

from __future__ import annotations

import datetime as dt
import typing as typ

from .helpers import (
    _coerce_bool,
    _coerce_enum,
    _optional_mapping,
    _optional_str,
    _pygments_style,
    _require_str,
    _string_list,
    _validate_language,
)
from .models import (
    ColorMode,
    ColorModeConfig,
    DocLink,
    DocSidebarLink,
    DocsSidebarBehaviour,
    Dropdown,
    FooterConfig,
    FooterLink,
    NavbarConfig,
    NavbarItem,
    NavbarLogo,
    PrismConfig,
    SearchIntegrationConfig,
    SidebarBehaviour,
    SiteConfigError,
    ThemeConfig,
)

NAVBAR_POSITIONS = frozenset({"left", "right"})


def _build_theme_config(payload: typ.Mapping[str, typ.Any]) -> ThemeConfig:
    """Build the cross-cutting presentation settings."""
    docs = _optional_mapping(payload.get("docs"), "theme_config.docs")
    return ThemeConfig(
        navbar=_build_navbar(_optional_mapping(payload.get("navbar"), "theme_config.navbar")),
        footer=_build_footer(_optional_mapping(payload.get("footer"), "theme_config.footer")),
        prism=_build_prism(_optional_mapping(payload.get("prism"), "theme_config.prism")),
        color_mode=_build_color_mode(
            _optional_mapping(payload.get("color_mode"), "theme_config.color_mode")
        ),
        docs_sidebar=_build_docs_sidebar(
            _optional_mapping(docs.get("sidebar"), "theme_config.docs.sidebar")
        ),
        sidebar=SidebarBehaviour(
            auto_collapse_categories=_coerce_bool(
                _optional_mapping(payload.get("sidebar"), "theme_config.sidebar").get(
                    "auto_collapse_categories"
                ),
                "theme_config.sidebar.auto_collapse_categories",
                default=False,
            )
        ),
        algolia=_build_algolia(payload.get("algolia")),
    )


def _build_navbar(payload: typ.Mapping[str, typ.Any]) -> NavbarConfig:
    """Build the navbar configuration and its tagged items."""
    logo = None
    logo_raw = _optional_mapping(payload.get("logo"), "theme_config.navbar.logo")
    if logo_raw:
        logo = NavbarLogo(
            alt=_optional_str(logo_raw.get("alt")) or "",
            src=_require_str(logo_raw, "src", "theme_config.navbar.logo.src"),
        )
    match payload.get("items"):
        case None:
            entries: list[typ.Any] = []
        case list() as entries:
            pass
        case _:
            msg = "'theme_config.navbar.items' must be a list."
            raise SiteConfigError(msg)
    items = tuple(
        _build_navbar_item(entry, f"theme_config.navbar.items[{index}]")
        for index, entry in enumerate(entries)
    )
    return NavbarConfig(
        title=_optional_str(payload.get("title")), logo=logo, items=items
    )


def _build_navbar_item(entry: object, field: str) -> NavbarItem:
    """Build one navbar item, dispatching on its ``type`` tag."""
    match entry:
        case {"type": "docSidebar", **rest}:
            return DocSidebarLink(
                sidebar_id=_require_str(rest, "sidebar_id", f"{field}.sidebar_id"),
                label=_require_str(rest, "label", f"{field}.label"),
                position=_position(rest.get("position"), field),
            )
        case {"type": "dropdown", **rest}:
            raw_items = rest.get("items")
            if not isinstance(raw_items, list) or not raw_items:
                msg = f"'{field}.items' must list at least one document link."
                raise SiteConfigError(msg)
            return Dropdown(
                label=_require_str(rest, "label", f"{field}.label"),
                position=_position(rest.get("position"), field),
                items=tuple(
                    _build_doc_link(item, f"{field}.items[{index}]")
                    for index, item in enumerate(raw_items)
                ),
            )
        case {"type": other}:
            msg = f"'{field}' has unsupported navbar item type {other!r}."
            raise SiteConfigError(msg)
        case _:
            msg = f"'{field}' must be a mapping with a 'type'."
            raise SiteConfigError(msg)


def _build_doc_link(entry: object, field: str) -> DocLink:
    """Build a dropdown document link."""
    if not isinstance(entry, dict):
        msg = f"'{field}' must be a mapping."
        raise SiteConfigError(msg)
    item_type = entry.get("type", "doc")
    if item_type != "doc":
        msg = f"'{field}' has unsupported dropdown item type {item_type!r}."
        raise SiteConfigError(msg)
    return DocLink(
        doc_id=_require_str(entry, "doc_id", f"{field}.doc_id"),
        label=_require_str(entry, "label", f"{field}.label"),
    )


def _position(value: object, field: str) -> str:
    position = _optional_str(value) or "left"
    if position not in NAVBAR_POSITIONS:
        msg = f"'{field}.position' must be 'left' or 'right' (got {position!r})."
        raise SiteConfigError(msg)
    return position


def _build_footer(payload: typ.Mapping[str, typ.Any]) -> FooterConfig:
    """Build footer links and expand the ``{year}`` copyright placeholder."""
    links: list[FooterLink] = []
    match payload.get("links"):
        case None:
            pass
        case list() as entries:
            for index, entry in enumerate(entries):
                match entry:
                    case dict():
                        field = f"theme_config.footer.links[{index}]"
                        links.append(
                            FooterLink(
                                label=_require_str(entry, "label", f"{field}.label"),
                                href=_require_str(entry, "href", f"{field}.href"),
                            )
                        )
                    case _:
                        msg = "Footer links require 'label' and 'href'."
                        raise SiteConfigError(msg)
        case _:
            msg = "'theme_config.footer.links' must be a list."
            raise SiteConfigError(msg)
    copyright_text = _optional_str(payload.get("copyright"))
    if copyright_text:
        copyright_text = copyright_text.replace("{year}", str(dt.datetime.now(dt.UTC).year))
    return FooterConfig(links=tuple(links), copyright=copyright_text)


def _build_prism(payload: typ.Mapping[str, typ.Any]) -> PrismConfig:
    """Build code-highlighting settings, checking themes and languages exist."""
    base = PrismConfig()
    theme = _optional_str(payload.get("theme")) or base.theme
    dark_theme = _optional_str(payload.get("dark_theme")) or base.dark_theme
    _pygments_style(theme)
    _pygments_style(dark_theme)
    languages = _string_list(
        payload.get("additional_languages"), "theme_config.prism.additional_languages"
    )
    return PrismConfig(
        theme=theme,
        dark_theme=dark_theme,
        additional_languages=tuple(_validate_language(lang) for lang in languages),
    )


def _build_color_mode(payload: typ.Mapping[str, typ.Any]) -> ColorModeConfig:
    field = "theme_config.color_mode"
    return ColorModeConfig(
        default_mode=_coerce_enum(
            ColorMode,
            payload.get("default_mode"),
            f"{field}.default_mode",
            default=ColorMode.LIGHT,
        ),
        disable_switch=_coerce_bool(
            payload.get("disable_switch"), f"{field}.disable_switch", default=False
        ),
        respect_prefers_color_scheme=_coerce_bool(
            payload.get("respect_prefers_color_scheme"),
            f"{field}.respect_prefers_color_scheme",
            default=False,
        ),
    )


def _build_docs_sidebar(payload: typ.Mapping[str, typ.Any]) -> DocsSidebarBehaviour:
    field = "theme_config.docs.sidebar"
    return DocsSidebarBehaviour(
        auto_collapse_categories=_coerce_bool(
            payload.get("auto_collapse_categories"),
            f"{field}.auto_collapse_categories",
            default=False,
        ),
        hideable=_coerce_bool(payload.get("hideable"), f"{field}.hideable", default=False),
    )


def _build_algolia(payload: object) -> SearchIntegrationConfig | None:
    """Build the search integration block; ``None`` when it is absent."""
    if payload is None:
        return None
    data = _optional_mapping(payload, "theme_config.algolia")
    field = "theme_config.algolia"
    search_parameters = _optional_mapping(
        data.get("search_parameters"), f"{field}.search_parameters"
    )
    match data.get("search_page_path", "search"):
        case False | None:
            search_page_path = None
        case str() as text if text.strip():
            search_page_path = text.strip().strip("/")
        case other:
            msg = f"'{field}.search_page_path' must be a path or false (got {other!r})."
            raise SiteConfigError(msg)
    return SearchIntegrationConfig(
        app_id=_require_str(data, "app_id", f"{field}.app_id"),
        api_key=_require_str(data, "api_key", f"{field}.api_key"),
        index_name=_require_str(data, "index_name", f"{field}.index_name"),
        contextual_search=_coerce_bool(
            data.get("contextual_search"), f"{field}.contextual_search", default=True
        ),
        search_parameters=search_parameters,
        search_page_path=search_page_path,
        external_url_regex=_optional_str(data.get("external_url_regex")),
    )


__all__ = ["NAVBAR_POSITIONS", "_build_theme_config"]
