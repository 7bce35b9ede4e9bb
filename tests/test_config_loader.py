"""Tests for loading and validating the site descriptor."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ
from pathlib import Path

import pytest

from aura_docs.config import (
    REQUIRED_SITE_FIELDS,
    BrokenLinkPolicy,
    ColorMode,
    DocSidebarLink,
    Dropdown,
    OpenApiDocsPlugin,
    load_site_config,
)
from aura_docs.errors import MissingFieldError, MissingFileError, SiteConfigError

SiteFactory = typ.Callable[..., Path]


def _with_openapi(descriptor: dict[str, typ.Any], spec_path: str = "api.yaml") -> None:
    descriptor["plugins"] = [
        {
            "name": "docusaurus-plugin-openapi-docs",
            "options": {
                "id": "apiDocs",
                "docs_plugin_id": "classic",
                "config": {
                    "petstore": {"spec_path": spec_path, "output_dir": "docs/petstore"}
                },
            },
        }
    ]


def test_loads_reference_site(example_site: Path) -> None:
    """The Aura descriptor should load into the expected typed values."""
    config = load_site_config(example_site)

    assert config.site.title == "Docs", "title should be read from site.title"
    assert config.site.url_prefix == "https://docs.aura.network/", (
        "url and base_url should join into the site prefix"
    )
    assert config.preset.name == "classic", "preset name should be classic"
    assert config.preset.docs.route_base_path == "/", "docs should be served at the root"
    assert config.preset.docs.sidebar_collapsed is True
    assert config.preset.docs.edit_url_for("docs/intro.md") == (
        "https://github.com/aura-nw/docs/edit/main/docs/intro.md"
    ), "edit links join the edit URL and the site-relative source"
    assert dc.replace(config.preset.docs, edit_url=None).edit_url_for("docs/intro.md") is None
    assert config.on_broken_links is BrokenLinkPolicy.THROW
    assert config.on_broken_markdown_links is BrokenLinkPolicy.WARN
    assert [path.name for path in config.static_directories] == ["public", "static"]

    plugin = config.plugin("apiDocs")
    assert isinstance(plugin, OpenApiDocsPlugin), "apiDocs should be the OpenAPI plugin"
    api = plugin.api("horoscope")
    with pytest.raises(SiteConfigError, match="Known APIs: horoscope"):
        plugin.api("petstore")
    assert api.sidebar_options.group_paths_by == "tag"
    assert api.output_dir == config.docs_dir / "horoscope"
    assert config.themes == ("docusaurus-theme-openapi-docs",)

    navbar = config.theme_config.navbar
    assert navbar.title == "Aura.network"
    sidebar_links = [item for item in navbar.items if isinstance(item, DocSidebarLink)]
    assert [item.sidebar_id for item in sidebar_links] == [
        "overview",
        "developer",
        "tutorials",
        "validator",
        "integrate",
    ], "docSidebar entries should keep their declaration order"
    dropdown = navbar.items[-1]
    assert isinstance(dropdown, Dropdown), "last navbar item should be the dropdown"
    assert [link.doc_id for link in dropdown.items] == [
        "product/pyxis-safe/index",
        "product/aurascan/index",
        "product/horoscope/index",
    ]

    footer = config.theme_config.footer
    assert [link.label for link in footer.links] == ["Github", "Discord", "Twitter", "Blog"]
    assert footer.copyright is not None
    assert str(dt.datetime.now(dt.UTC).year) in footer.copyright, (
        "copyright should expand the {year} placeholder"
    )
    assert config.theme_config.prism.additional_languages == ("go", "rust", "json", "bash")
    assert config.theme_config.color_mode.default_mode is ColorMode.DARK
    assert config.theme_config.color_mode.shows_toggle is True
    assert config.theme_config.docs_sidebar.hideable is True
    assert config.theme_config.sidebar.auto_collapse_categories is True
    algolia = config.theme_config.algolia
    assert algolia is not None
    assert algolia.index_name == "aura"
    assert algolia.search_page_path == "search"


def test_config_is_immutable(make_site: SiteFactory) -> None:
    """Loaded configuration should reject attribute assignment."""
    config = load_site_config(make_site())

    with pytest.raises(dc.FrozenInstanceError):
        config.site.title = "Changed"  # type: ignore[misc]


def test_policies_default_to_throw_and_warn(make_site: SiteFactory) -> None:
    """Navigation links default to throw; markdown links default to warn."""
    config = load_site_config(make_site())

    assert config.on_broken_links is BrokenLinkPolicy.THROW
    assert config.on_broken_markdown_links is BrokenLinkPolicy.WARN


@pytest.mark.parametrize("field", REQUIRED_SITE_FIELDS)
def test_missing_site_field_is_reported(make_site: SiteFactory, field: str) -> None:
    """Every site metadata field is required and named in the error."""

    def drop(descriptor: dict[str, typ.Any]) -> None:
        del descriptor["site"][field]

    with pytest.raises(MissingFieldError) as excinfo:
        load_site_config(make_site(drop))

    assert excinfo.value.field == f"site.{field}", "error should name the missing field"


def test_empty_site_field_counts_as_missing(make_site: SiteFactory) -> None:
    def blank(descriptor: dict[str, typ.Any]) -> None:
        descriptor["site"]["title"] = "   "

    with pytest.raises(MissingFieldError, match=r"site\.title"):
        load_site_config(make_site(blank))


def test_missing_descriptor(tmp_path: Path) -> None:
    with pytest.raises(MissingFileError, match="Site descriptor"):
        load_site_config(tmp_path / "absent.yaml")


def test_missing_sidebar_file(make_site: SiteFactory) -> None:
    def point_elsewhere(descriptor: dict[str, typ.Any]) -> None:
        descriptor["preset"]["docs"]["sidebar_path"] = "missing-sidebars.yaml"

    with pytest.raises(MissingFileError, match="Sidebar file"):
        load_site_config(make_site(point_elsewhere))


def test_missing_custom_stylesheet(make_site: SiteFactory) -> None:
    def add_css(descriptor: dict[str, typ.Any]) -> None:
        descriptor["preset"]["theme"] = {"custom_css": "src/css/custom.css"}

    with pytest.raises(MissingFileError, match="Custom stylesheet"):
        load_site_config(make_site(add_css))


def test_missing_openapi_spec(make_site: SiteFactory) -> None:
    with pytest.raises(MissingFileError, match="OpenAPI spec for 'petstore'"):
        load_site_config(make_site(_with_openapi))


def test_remote_spec_path_is_not_checked_at_load(make_site: SiteFactory) -> None:
    """URLs are fetched at generation time, so loading does not require them."""
    config = load_site_config(
        make_site(lambda data: _with_openapi(data, "https://specs.example.test/api.yaml"))
    )

    spec = config.api_specs()[0]
    assert spec.is_remote, "http(s) spec paths should be kept as URLs"
    assert spec.spec_path == "https://specs.example.test/api.yaml"


@pytest.mark.parametrize(
    ("url", "fragment"),
    [
        ("docs.example.test", "absolute http"),
        ("https://docs.example.test/nested", "must not contain a path"),
    ],
)
def test_site_url_must_be_an_origin(make_site: SiteFactory, url: str, fragment: str) -> None:
    def set_url(descriptor: dict[str, typ.Any]) -> None:
        descriptor["site"]["url"] = url

    with pytest.raises(SiteConfigError, match=fragment):
        load_site_config(make_site(set_url))


def test_base_url_gets_trailing_slash(make_site: SiteFactory) -> None:
    def set_base(descriptor: dict[str, typ.Any]) -> None:
        descriptor["site"]["base_url"] = "/docs"

    config = load_site_config(make_site(set_base))

    assert config.site.base_url == "/docs/"
    assert config.site.absolute_url("intro") == "https://docs.example.test/docs/intro"


def test_base_url_requires_leading_slash(make_site: SiteFactory) -> None:
    def set_base(descriptor: dict[str, typ.Any]) -> None:
        descriptor["site"]["base_url"] = "docs/"

    with pytest.raises(SiteConfigError, match="must start with '/'"):
        load_site_config(make_site(set_base))


def test_unknown_preset(make_site: SiteFactory) -> None:
    def set_preset(descriptor: dict[str, typ.Any]) -> None:
        descriptor["preset"]["name"] = "bootstrap"

    with pytest.raises(SiteConfigError, match="Unknown preset 'bootstrap'"):
        load_site_config(make_site(set_preset))


def test_unknown_plugin(make_site: SiteFactory) -> None:
    def add_plugin(descriptor: dict[str, typ.Any]) -> None:
        descriptor["plugins"] = [{"name": "docusaurus-plugin-ideal-image", "options": {}}]

    with pytest.raises(SiteConfigError, match="Unknown plugin"):
        load_site_config(make_site(add_plugin))


def test_unknown_theme(make_site: SiteFactory) -> None:
    def add_theme(descriptor: dict[str, typ.Any]) -> None:
        descriptor["themes"] = ["docusaurus-theme-live-codeblock"]

    with pytest.raises(SiteConfigError, match="Unknown theme"):
        load_site_config(make_site(add_theme))


def test_unknown_navbar_item_type(make_site: SiteFactory) -> None:
    def add_item(descriptor: dict[str, typ.Any]) -> None:
        descriptor["theme_config"]["navbar"]["items"].append(
            {"type": "localeDropdown", "label": "Language"}
        )

    with pytest.raises(SiteConfigError, match="unsupported navbar item type"):
        load_site_config(make_site(add_item))


def test_empty_dropdown_is_rejected(make_site: SiteFactory) -> None:
    def add_item(descriptor: dict[str, typ.Any]) -> None:
        descriptor["theme_config"]["navbar"]["items"].append(
            {"type": "dropdown", "label": "Ecosystem", "items": []}
        )

    with pytest.raises(SiteConfigError, match="at least one document link"):
        load_site_config(make_site(add_item))


def test_api_item_component_requires_openapi_theme(make_site: SiteFactory) -> None:
    def set_component(descriptor: dict[str, typ.Any]) -> None:
        descriptor["preset"]["docs"]["doc_item_component"] = "@theme/ApiItem"

    with pytest.raises(SiteConfigError, match="docusaurus-theme-openapi-docs"):
        load_site_config(make_site(set_component))


def test_plugin_must_target_the_preset(make_site: SiteFactory, tmp_path: Path) -> None:
    (tmp_path / "api.yaml").write_text("openapi: 3.0.0\n", encoding="utf-8")

    def mistarget(descriptor: dict[str, typ.Any]) -> None:
        _with_openapi(descriptor)
        descriptor["plugins"][0]["options"]["docs_plugin_id"] = "blog"

    with pytest.raises(SiteConfigError, match="targets docs plugin 'blog'"):
        load_site_config(make_site(mistarget))


def test_api_output_must_live_in_docs(make_site: SiteFactory, tmp_path: Path) -> None:
    (tmp_path / "api.yaml").write_text("openapi: 3.0.0\n", encoding="utf-8")

    def escape(descriptor: dict[str, typ.Any]) -> None:
        _with_openapi(descriptor)
        api = descriptor["plugins"][0]["options"]["config"]["petstore"]
        api["output_dir"] = "generated/petstore"

    with pytest.raises(SiteConfigError, match="inside the docs directory"):
        load_site_config(make_site(escape))


def test_duplicate_api_ids_across_plugins(make_site: SiteFactory, tmp_path: Path) -> None:
    (tmp_path / "api.yaml").write_text("openapi: 3.0.0\n", encoding="utf-8")

    def duplicate(descriptor: dict[str, typ.Any]) -> None:
        _with_openapi(descriptor)
        second = {
            "name": "docusaurus-plugin-openapi-docs",
            "options": {
                "id": "moreDocs",
                "docs_plugin_id": "classic",
                "config": {
                    "petstore": {"spec_path": "api.yaml", "output_dir": "docs/other"}
                },
            },
        }
        descriptor["plugins"].append(second)

    with pytest.raises(SiteConfigError, match="more than one plugin"):
        load_site_config(make_site(duplicate))


def test_unknown_group_paths_by(make_site: SiteFactory, tmp_path: Path) -> None:
    (tmp_path / "api.yaml").write_text("openapi: 3.0.0\n", encoding="utf-8")

    def group_by_path(descriptor: dict[str, typ.Any]) -> None:
        _with_openapi(descriptor)
        api = descriptor["plugins"][0]["options"]["config"]["petstore"]
        api["sidebar_options"] = {"group_paths_by": "path"}

    with pytest.raises(SiteConfigError, match="group_paths_by"):
        load_site_config(make_site(group_by_path))


def test_unknown_policy_value(make_site: SiteFactory) -> None:
    def set_policy(descriptor: dict[str, typ.Any]) -> None:
        descriptor["on_broken_links"] = "explode"

    with pytest.raises(SiteConfigError, match="on_broken_links"):
        load_site_config(make_site(set_policy))


def test_unknown_code_theme(make_site: SiteFactory) -> None:
    def set_theme(descriptor: dict[str, typ.Any]) -> None:
        descriptor["theme_config"]["prism"] = {"theme": "not-a-theme"}

    with pytest.raises(SiteConfigError, match="Unknown code theme"):
        load_site_config(make_site(set_theme))


def test_unknown_highlight_language(make_site: SiteFactory) -> None:
    def add_language(descriptor: dict[str, typ.Any]) -> None:
        descriptor["theme_config"]["prism"] = {"additional_languages": ["klingon-script"]}

    with pytest.raises(SiteConfigError):
        load_site_config(make_site(add_language))


def test_search_page_can_be_disabled(make_site: SiteFactory) -> None:
    def add_search(descriptor: dict[str, typ.Any]) -> None:
        descriptor["theme_config"]["algolia"] = {
            "app_id": "APP",
            "api_key": "key",
            "index_name": "docs",
            "search_page_path": False,
        }

    config = load_site_config(make_site(add_search))

    algolia = config.theme_config.algolia
    assert algolia is not None
    assert algolia.search_page_path is None, "false should disable the search page"
    assert algolia.contextual_search is True, "contextual search defaults to on"


def test_plugin_lookup_reports_known_ids(make_site: SiteFactory) -> None:
    config = load_site_config(make_site())

    with pytest.raises(SiteConfigError, match="Known plugins: none"):
        config.plugin("apiDocs")


def test_invalid_yaml_is_a_config_error(tmp_path: Path) -> None:
    path = tmp_path / "site.yaml"
    path.write_text("site: [unclosed\n", encoding="utf-8")

    with pytest.raises(SiteConfigError, match="not valid YAML"):
        load_site_config(path)
