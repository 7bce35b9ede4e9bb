"""Build orchestration for the documentation site.

``SiteBuilder`` runs the stages in a fixed order, each consuming the immutable
configuration carried by :class:`BuildContext`:

1. plugins generate API reference pages into the docs directory;
2. the docs directory is scanned into the known-document index;
3. sidebar definitions are loaded;
4. navbar and sidebar references are resolved under ``on_broken_links``;
5. in-content markdown links are checked under ``on_broken_markdown_links``;
6. static directories are copied and the site shell is rendered.

Any stage may raise; nothing after a failing stage runs.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import shutil
import typing as typ
from pathlib import Path

from .content import collect_documents
from .links import check_markdown_links
from .navigation import NavigationComposer
from .plugins import PluginInvoker
from .shell import ShellBuilder
from .sidebars import load_sidebars

if typ.TYPE_CHECKING:
    import requests

    from .config import SiteConfig
    from .content import DocumentIndex
    from .navigation import ResolvedNavbar

logger = logging.getLogger(__name__)

DEFAULT_OUT_DIR = Path("build")


@dc.dataclass(frozen=True, slots=True)
class BuildContext:
    """Loaded configuration plus the directory build artefacts go to."""

    config: SiteConfig
    out_dir: Path = DEFAULT_OUT_DIR


@dc.dataclass(frozen=True, slots=True)
class BuildResult:
    """Summary of a completed build."""

    written: tuple[Path, ...]
    generated_docs: tuple[str, ...]
    markdown_warnings: tuple[str, ...] = ()
    link_warnings: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class CheckResult:
    """Summary of a validation-only pass."""

    documents: int
    api_pages: tuple[str, ...]
    markdown_warnings: tuple[str, ...] = ()
    link_warnings: tuple[str, ...] = ()


class SiteBuilder:
    """Run every build stage for one site."""

    def __init__(
        self, context: BuildContext, *, session: requests.Session | None = None
    ) -> None:
        self.context = context
        self.plugins = PluginInvoker(context, session=session)

    @property
    def config(self) -> SiteConfig:
        """Configuration shared by every stage."""
        return self.context.config

    def run(self) -> BuildResult:
        """Build the site and return what was written.

        Returns
        -------
        BuildResult
            Generated API pages and shell artefacts, the doc ids the plugins
            contributed, and any problems reported under non-throwing
            link policies.

        Raises
        ------
        MissingFileError
            If an OpenAPI spec or included sidebar file is missing.
        MalformedSpecError
            If an OpenAPI spec cannot be parsed or validated.
        BrokenLinkError
            If a link check fails under the ``throw`` policy.
        SiteConfigError
            If documents or sidebars are inconsistent.
        """
        runs = self.plugins.run()
        written: list[Path] = [path for run in runs for path in run.written]
        generated = tuple(doc_id for run in runs for doc_id in run.doc_ids)
        logger.info("Generated %d API pages", len(generated))

        documents = self.documents()
        navbar = self.navigation(documents)
        markdown_warnings = check_markdown_links(
            documents, self.config.on_broken_markdown_links
        )

        written.extend(self._copy_static())
        written.append(ShellBuilder(self.context, navbar).run())
        return BuildResult(
            written=tuple(written),
            generated_docs=generated,
            markdown_warnings=tuple(markdown_warnings),
            link_warnings=navbar.problems,
        )

    def check(self) -> CheckResult:
        """Validate the site without writing anything.

        OpenAPI specs are parsed, validated and rendered in memory; navigation
        and markdown links are resolved against the documents already on
        disk.
        """
        api_pages = tuple(self.plugins.validate())
        documents = self.documents()
        navbar = self.navigation(documents)
        markdown_warnings = check_markdown_links(
            documents, self.config.on_broken_markdown_links
        )
        return CheckResult(
            documents=len(documents),
            api_pages=api_pages,
            markdown_warnings=tuple(markdown_warnings),
            link_warnings=navbar.problems,
        )

    def documents(self) -> DocumentIndex:
        """Scan the docs directory into the known-document index."""
        docs = self.config.preset.docs
        return collect_documents(
            docs.path,
            route_base_path=docs.route_base_path,
            base_url=self.config.site.base_url,
            edit_url_for=self._edit_url,
        )

    def _edit_url(self, relative_source: str) -> str | None:
        """Join the configured edit URL with the source path under the site root."""
        docs = self.config.preset.docs
        try:
            docs_prefix = docs.path.relative_to(self.config.root).as_posix()
        except ValueError:
            docs_prefix = docs.path.name
        return docs.edit_url_for(f"{docs_prefix}/{relative_source}")

    def navigation(self, documents: DocumentIndex) -> ResolvedNavbar:
        """Resolve navbar and sidebar references against ``documents``."""
        sidebars = load_sidebars(self.config.preset.docs.sidebar_path)
        return NavigationComposer(self.config, documents, sidebars).compose()

    def _copy_static(self) -> list[Path]:
        """Copy static directories into the output root."""
        copied: list[Path] = []
        out_dir = self.context.out_dir
        for directory in self.config.static_directories:
            if not directory.is_dir():
                logger.info("Skipping missing static directory %s", directory)
                continue
            shutil.copytree(directory, out_dir, dirs_exist_ok=True)
            copied.extend(
                out_dir / path.relative_to(directory)
                for path in sorted(directory.rglob("*"))
                if path.is_file()
            )
        return copied


__all__ = ["DEFAULT_OUT_DIR", "BuildContext", "BuildResult", "CheckResult", "SiteBuilder"]
