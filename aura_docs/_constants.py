"""Common literal values used across aura_docs.

These constants keep filenames and plugin identifiers centralized so the
loader, generators, and tests can import the same values without drifting.
Intended for internal use within the aura_docs package.

Examples
--------
>>> from aura_docs import _constants
>>> _constants.API_MANIFEST_TEMPLATE.format(api_id="horoscope")
'.aura-docs-horoscope-pages.json'
"""

API_MANIFEST_TEMPLATE = ".aura-docs-{api_id}-pages.json"
GENERATED_SIDEBAR_FILENAME = "sidebar.yaml"
SHELL_FILENAME = "index.html"

CLASSIC_PRESET = "classic"
OPENAPI_DOCS_PLUGIN = "docusaurus-plugin-openapi-docs"
OPENAPI_DOCS_THEME = "docusaurus-theme-openapi-docs"
SEARCH_ALGOLIA_THEME = "@docusaurus/theme-search-algolia"
API_ITEM_COMPONENT = "@theme/ApiItem"

DOC_EXTENSIONS = (".md", ".mdx")
