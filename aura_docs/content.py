r"""Discover the documents that make up the docs content pipeline.

Every ``.md``/``.mdx`` file below the docs directory becomes a
:class:`DocRecord`. Its identifier is the file's path relative to the docs
directory without the extension; a front matter ``id`` replaces the final
path segment. The resulting :class:`DocumentIndex` is the known-pages set that
sidebars, navbar links, and markdown links are resolved against.

Example
-------
>>> from pathlib import Path
>>> from aura_docs.content import collect_documents
>>> index = collect_documents(Path("docs"), route_base_path="/", base_url="/")  # doctest: +SKIP
>>> index.get("product/horoscope/index").permalink  # doctest: +SKIP
'/product/horoscope/'
"""

from __future__ import annotations

import dataclasses as dc
import posixpath
import re
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ._constants import DOC_EXTENSIONS
from .errors import SiteConfigError

FRONT_MATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
HEADING_PATTERN = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)


@dc.dataclass(frozen=True, slots=True)
class DocRecord:
    """A single document known to the content pipeline.

    Attributes
    ----------
    id : str
        Identifier used by sidebars and navbar links.
    source : Path
        Absolute path of the markdown file.
    relative_source : str
        POSIX path of the file relative to the docs directory.
    title : str
        Front matter title, first heading, or last id segment.
    permalink : str
        Site-relative URL the document is served at.
    front_matter : Mapping[str, Any]
        Parsed front matter block (empty when absent).
    edit_url : str or None
        Link to the source in the docs repository, if one is configured.
    """

    id: str
    source: Path
    relative_source: str
    title: str
    permalink: str
    front_matter: typ.Mapping[str, typ.Any] = dc.field(default_factory=dict)
    edit_url: str | None = None

    @property
    def sidebar_label(self) -> str:
        """Return the label shown for this document in sidebars."""
        label = self.front_matter.get("sidebar_label")
        return str(label) if label else self.title


class DocumentIndex:
    """Lookup table of documents keyed by id and by source path."""

    def __init__(self, docs_dir: Path, records: typ.Iterable[DocRecord]) -> None:
        self.docs_dir = docs_dir
        self._by_id: dict[str, DocRecord] = {}
        self._by_source: dict[Path, DocRecord] = {}
        for record in records:
            existing = self._by_id.get(record.id)
            if existing is not None:
                msg = (
                    f"Duplicate document id '{record.id}' in "
                    f"'{existing.relative_source}' and '{record.relative_source}'."
                )
                raise SiteConfigError(msg)
            self._by_id[record.id] = record
            self._by_source[record.source.resolve()] = record

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._by_id

    def __iter__(self) -> typ.Iterator[DocRecord]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    @property
    def ids(self) -> list[str]:
        """Return every document id in discovery order."""
        return list(self._by_id)

    def get(self, doc_id: str) -> DocRecord | None:
        """Return the document registered under ``doc_id``, if any."""
        return self._by_id.get(doc_id)

    def for_source(self, path: Path) -> DocRecord | None:
        """Return the document whose markdown lives at ``path``, if any."""
        return self._by_source.get(path.resolve())

    def under(self, dir_name: str) -> list[DocRecord]:
        """Return documents whose source lives below ``dir_name`` (``.`` for all)."""
        prefix = dir_name.strip("/")
        if prefix in {"", "."}:
            return list(self._by_id.values())
        return [
            record
            for record in self._by_id.values()
            if record.relative_source.startswith(f"{prefix}/")
        ]


def collect_documents(
    docs_dir: Path,
    *,
    route_base_path: str = "/",
    base_url: str = "/",
    edit_url_for: typ.Callable[[str], str | None] | None = None,
) -> DocumentIndex:
    """Scan ``docs_dir`` for markdown documents.

    Parameters
    ----------
    docs_dir : Path
        Root directory of the docs content.
    route_base_path : str, optional
        Route every document is served under (``"/"`` serves docs at the root).
    base_url : str, optional
        Site base URL prefixed to every permalink.
    edit_url_for : Callable[[str], str | None], optional
        Maps a docs-relative source path to its edit link. A front matter
        ``custom_edit_url`` overrides it; ``null`` removes the link.

    Returns
    -------
    DocumentIndex
        Every discovered document, sorted by relative path. An absent docs
        directory yields an empty index.

    Raises
    ------
    SiteConfigError
        If two documents resolve to the same id or a front matter block is not
        valid YAML.
    """
    if not docs_dir.is_dir():
        return DocumentIndex(docs_dir, [])
    sources = sorted(
        path
        for path in docs_dir.rglob("*")
        if path.is_file() and path.suffix in DOC_EXTENSIONS
    )
    return DocumentIndex(
        docs_dir,
        (
            _build_record(path, docs_dir, route_base_path, base_url, edit_url_for)
            for path in sources
        ),
    )


def read_front_matter(text: str, *, source: Path | None = None) -> tuple[dict[str, typ.Any], str]:
    """Split ``text`` into its front matter mapping and markdown body."""
    match = FRONT_MATTER_PATTERN.match(text)
    if not match:
        return {}, text
    loader = YAML(typ="safe")
    try:
        loaded = loader.load(match.group(1)) or {}
    except YAMLError as exc:
        location = f" in '{source}'" if source else ""
        msg = f"Invalid front matter{location}: {exc}"
        raise SiteConfigError(msg) from exc
    if not isinstance(loaded, dict):
        loaded = {}
    return dict(loaded), text[match.end() :]


def _build_record(
    path: Path,
    docs_dir: Path,
    route_base_path: str,
    base_url: str,
    edit_url_for: typ.Callable[[str], str | None] | None,
) -> DocRecord:
    relative = path.relative_to(docs_dir).as_posix()
    front_matter, body = read_front_matter(path.read_text(encoding="utf-8"), source=path)
    directory, filename = posixpath.split(relative)
    stem = filename.rsplit(".", 1)[0]
    custom_id = front_matter.get("id")
    stem = str(custom_id).strip() if custom_id else stem
    doc_id = posixpath.join(directory, stem) if directory else stem
    return DocRecord(
        id=doc_id,
        source=path,
        relative_source=relative,
        title=_resolve_title(front_matter, body, stem),
        permalink=_build_permalink(doc_id, front_matter.get("slug"), route_base_path, base_url),
        front_matter=front_matter,
        edit_url=_resolve_edit_url(front_matter, relative, edit_url_for),
    )


def _resolve_edit_url(
    front_matter: typ.Mapping[str, typ.Any],
    relative: str,
    edit_url_for: typ.Callable[[str], str | None] | None,
) -> str | None:
    if "custom_edit_url" in front_matter:
        custom = front_matter["custom_edit_url"]
        return str(custom) if custom else None
    return edit_url_for(relative) if edit_url_for else None


def _resolve_title(front_matter: typ.Mapping[str, typ.Any], body: str, fallback: str) -> str:
    title = front_matter.get("title")
    if title:
        return str(title)
    heading = HEADING_PATTERN.search(body)
    if heading:
        return heading.group(1).strip()
    return fallback


def _build_permalink(
    doc_id: str, slug: object, route_base_path: str, base_url: str
) -> str:
    """Return the site-relative URL for a document.

    Index documents are served at their directory route; a front matter
    ``slug`` replaces the id-derived route (absolute slugs start at the docs
    route, relative ones at the document's directory).
    """
    if slug:
        text = str(slug)
        if text.startswith("/"):
            route = text.strip("/")
        else:
            route = posixpath.join(posixpath.dirname(doc_id), text).strip("/")
    else:
        route = doc_id
        if route == "index":
            route = ""
        elif route.endswith("/index"):
            route = f"{route[: -len('/index')]}/"
    docs_root = route_base_path.strip("/")
    segments = [segment for segment in (base_url.strip("/"), docs_root) if segment]
    prefix = "/" + "/".join(segments) if segments else ""
    return f"{prefix}/{route}" if route else f"{prefix}/"


__all__ = [
    "DocRecord",
    "DocumentIndex",
    "collect_documents",
    "read_front_matter",
]
