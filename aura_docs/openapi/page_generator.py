"""High-level orchestration for API reference page generation.

This module turns one configured OpenAPI document into ``.mdx`` pages that the
docs content pipeline picks up. :class:`ApiDocsGenerator` loads and validates
the spec, renders one page per operation with the shared Jinja templates,
groups pages into one subdirectory per tag, and writes a ``sidebar.yaml`` that
sidebar definitions can ``include``.

Every page is rendered in memory before anything touches the disk, and the
output directory is swapped in from a staging directory, so a malformed spec
never leaves a half-generated tree behind for navigation to link into.

Example
-------
>>> from pathlib import Path
>>> from aura_docs.config import load_site_config
>>> from aura_docs.openapi import ApiDocsGenerator
>>> config = load_site_config(Path("example/site.yaml"))  # doctest: +SKIP
>>> spec = config.api_specs()[0]  # doctest: +SKIP
>>> ApiDocsGenerator(spec, docs_dir=config.docs_dir).run()  # doctest: +SKIP
[PosixPath('example/docs/horoscope/block/get-block-by-height.mdx'), ...]
"""

from __future__ import annotations

import io
import json
import posixpath
import re
import shutil
import tempfile
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from ruamel.yaml import YAML

from aura_docs._constants import API_MANIFEST_TEMPLATE, GENERATED_SIDEBAR_FILENAME
from aura_docs.errors import SiteConfigError

from .loader import load_openapi_document
from .models import ApiDocument, GeneratedPage

if typ.TYPE_CHECKING:
    import requests

    from aura_docs.config import ApiSpecConfig

MDX_SPECIAL = re.compile(r"([{}<>])")


class ApiDocsGenerator:
    """Render API reference pages for one configured OpenAPI document."""

    def __init__(
        self,
        spec: ApiSpecConfig,
        *,
        docs_dir: Path,
        templates_dir: Path | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the generator with the spec config and template context.

        Parameters
        ----------
        spec : ApiSpecConfig
            API entry from the OpenAPI plugin options.
        docs_dir : Path
            Docs content root; generated doc ids are relative to it.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        session : requests.Session, optional
            Session used when the spec lives at a URL.
        """
        self.spec = spec
        self.docs_dir = docs_dir
        self.session = session
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self.env.filters["yaml_str"] = _yaml_str
        self.env.filters["mdx_text"] = _mdx_text
        self.env.filters["table_cell"] = _table_cell
        self.template = self.env.get_template("api_operation.mdx.jinja")

    @property
    def output_dir(self) -> Path:
        """Directory the generated pages are written to."""
        return self.spec.output_dir

    @property
    def doc_prefix(self) -> str:
        """Doc id prefix shared by every generated page."""
        try:
            relative = self.output_dir.resolve().relative_to(self.docs_dir.resolve())
        except ValueError as exc:
            msg = (
                f"Output directory '{self.output_dir}' for API '{self.spec.api_id}' "
                f"must live inside the docs directory '{self.docs_dir}'."
            )
            raise SiteConfigError(msg) from exc
        return "" if relative == Path() else relative.as_posix()

    def load(self) -> ApiDocument:
        """Load and validate the configured spec without rendering it."""
        return load_openapi_document(self.spec.spec_path, session=self.session)

    def render(self) -> list[GeneratedPage]:
        """Render every operation into an in-memory page.

        Raises
        ------
        MissingFileError
            If the local spec file is missing.
        MalformedSpecError
            If the spec cannot be parsed or fails validation.
        """
        document = self.load()
        prefix = self.doc_prefix
        grouped = self.spec.sidebar_options.group_paths_by == "tag"
        used: dict[str, set[str]] = {}
        pages: list[GeneratedPage] = []
        for operation in document.operations:
            directory = _slugify(operation.tag) if grouped and operation.tag else ""
            slug = _unique_slug(
                _slugify(operation.slug_source) or "operation",
                used.setdefault(directory, set()),
            )
            relative = posixpath.join(directory, f"{slug}.mdx") if directory else f"{slug}.mdx"
            doc_id = posixpath.join(prefix, directory, slug)
            content = self.template.render(
                operation=operation,
                page_id=slug,
                document=document,
                api_id=self.spec.api_id,
            )
            pages.append(
                GeneratedPage(
                    relative_path=relative,
                    doc_id=doc_id.strip("/"),
                    operation=operation,
                    content=content,
                )
            )
        return pages

    def run(self) -> list[Path]:
        """Render and write every page, replacing the output directory.

        Returns
        -------
        list[Path]
            Paths of the generated ``.mdx`` pages in operation order.

        Notes
        -----
        The previous output directory is only replaced when it was produced
        by this generator (it carries the pages manifest) or is empty;
        otherwise a :class:`SiteConfigError` protects hand-written content.
        """
        pages = self.render()
        sidebar_text = self._render_sidebar(pages)
        manifest = {
            "api_id": self.spec.api_id,
            "spec": str(self.spec.spec_path),
            "pages": [page.doc_id for page in pages],
        }
        self._guard_existing_output()

        out_dir = self.output_dir
        out_dir.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{out_dir.name}-", dir=out_dir.parent))
        try:
            for page in pages:
                target = staging / page.relative_path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(page.content, encoding="utf-8")
            (staging / GENERATED_SIDEBAR_FILENAME).write_text(sidebar_text, encoding="utf-8")
            (staging / self._manifest_name()).write_text(
                json.dumps(manifest, indent=2) + "\n", encoding="utf-8"
            )
            self._swap_in(staging)
        finally:
            if staging.exists():
                shutil.rmtree(staging)
        return [out_dir / page.relative_path for page in pages]

    def clean(self) -> bool:
        """Remove previously generated output; return True when something was removed."""
        if not self.output_dir.exists():
            return False
        self._guard_existing_output()
        shutil.rmtree(self.output_dir)
        return True

    def generated_doc_ids(self) -> list[str]:
        """Return the doc ids recorded by the last successful run."""
        manifest = self.output_dir / self._manifest_name()
        if not manifest.exists():
            return []
        payload = json.loads(manifest.read_text(encoding="utf-8"))
        return [str(doc_id) for doc_id in payload.get("pages", [])]

    def _manifest_name(self) -> str:
        return API_MANIFEST_TEMPLATE.format(api_id=self.spec.api_id)

    def _guard_existing_output(self) -> None:
        out_dir = self.output_dir
        if not out_dir.exists():
            return
        if not out_dir.is_dir():
            msg = f"Output path '{out_dir}' for API '{self.spec.api_id}' is not a directory."
            raise SiteConfigError(msg)
        if (out_dir / self._manifest_name()).exists() or not any(out_dir.iterdir()):
            return
        msg = (
            f"Refusing to replace '{out_dir}': it was not generated for API "
            f"'{self.spec.api_id}'. Remove it or choose another 'output_dir'."
        )
        raise SiteConfigError(msg)

    def _swap_in(self, staging: Path) -> None:
        """Move ``staging`` into place, discarding the previous output."""
        out_dir = self.output_dir
        if out_dir.exists():
            retired = Path(tempfile.mkdtemp(prefix=f".{out_dir.name}-old-", dir=out_dir.parent))
            retired.rmdir()
            out_dir.rename(retired)
            staging.rename(out_dir)
            shutil.rmtree(retired)
        else:
            staging.rename(out_dir)

    def _render_sidebar(self, pages: list[GeneratedPage]) -> str:
        """Return the YAML item list describing the generated pages."""
        items: list[dict[str, typ.Any]] = []
        categories: dict[str, list[dict[str, typ.Any]]] = {}
        grouped = self.spec.sidebar_options.group_paths_by == "tag"
        for page in pages:
            entry = {
                "type": "doc",
                "id": page.doc_id,
                "label": page.operation.title,
            }
            if grouped and page.operation.tag:
                if page.operation.tag not in categories:
                    categories[page.operation.tag] = []
                    items.append(
                        {
                            "type": "category",
                            "label": page.operation.tag,
                            "items": categories[page.operation.tag],
                        }
                    )
                categories[page.operation.tag].append(entry)
            else:
                items.append(entry)
        yaml = YAML()
        yaml.default_flow_style = False
        buffer = io.StringIO()
        yaml.dump(items, buffer)
        return buffer.getvalue()


def _slugify(value: str) -> str:
    """Convert a string into a lowercase hyphen-separated slug."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def _unique_slug(base: str, used: set[str]) -> str:
    """Generate a unique slug, appending numeric suffixes when needed."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def _yaml_str(value: object) -> str:
    """Render ``value`` as a double-quoted YAML scalar."""
    return json.dumps(str(value), ensure_ascii=False)


def _mdx_text(value: object) -> str:
    """Escape characters MDX would read as JSX or expressions."""
    return MDX_SPECIAL.sub(r"\\\1", str(value))


def _table_cell(value: object) -> str:
    """Flatten ``value`` onto one line and escape it for a markdown table."""
    flattened = " ".join(str(value).split())
    return _mdx_text(flattened).replace("|", "\\|")


__all__ = ["ApiDocsGenerator"]
