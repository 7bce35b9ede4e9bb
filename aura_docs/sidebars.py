"""Parse sidebar definitions into typed navigation trees.

The sidebar file is a YAML mapping of sidebar id to an ordered item list.
Items may be bare document ids, ``doc``, ``category``, ``link``,
``autogenerated``, or ``include`` entries. ``include`` splices in an item list
from another file, such as the ``sidebar.yaml`` written next to generated API
reference pages.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import MissingFileError, SiteConfigError

if typ.TYPE_CHECKING:
    from .content import DocumentIndex


@dc.dataclass(frozen=True, slots=True)
class SidebarDoc:
    """Reference to a single document."""

    doc_id: str
    label: str | None = None


@dc.dataclass(frozen=True, slots=True)
class SidebarLink:
    """External or absolute link."""

    href: str
    label: str


@dc.dataclass(frozen=True, slots=True)
class SidebarAutogenerated:
    """Every document below ``dir_name``, in path order."""

    dir_name: str


@dc.dataclass(frozen=True, slots=True)
class SidebarCategory:
    """Collapsible group of sidebar items."""

    label: str
    items: tuple[SidebarItem, ...]
    collapsed: bool | None = None


SidebarItem = SidebarDoc | SidebarLink | SidebarAutogenerated | SidebarCategory


@dc.dataclass(frozen=True, slots=True)
class SidebarDefinitions:
    """All sidebars declared for the docs preset."""

    sidebars: typ.Mapping[str, tuple[SidebarItem, ...]]
    source: Path | None = None

    def __contains__(self, sidebar_id: object) -> bool:
        return sidebar_id in self.sidebars

    def doc_ids(self, sidebar_id: str, documents: DocumentIndex) -> list[str]:
        """Return every document id the sidebar references, in order."""
        return list(_walk(self.sidebars[sidebar_id], documents))

    def first_doc(self, sidebar_id: str, documents: DocumentIndex) -> str | None:
        """Return the first document of ``sidebar_id`` that exists, if any."""
        for doc_id in _walk(self.sidebars[sidebar_id], documents):
            if doc_id in documents:
                return doc_id
        return None

    def missing_docs(self, documents: DocumentIndex) -> list[tuple[str, str]]:
        """Return ``(sidebar_id, doc_id)`` pairs naming unknown documents."""
        missing: list[tuple[str, str]] = []
        for sidebar_id, items in self.sidebars.items():
            missing.extend(
                (sidebar_id, doc_id)
                for doc_id in _walk(items, documents)
                if doc_id not in documents
            )
        return missing


def load_sidebars(path: Path) -> SidebarDefinitions:
    """Load sidebar definitions from ``path``.

    Raises
    ------
    MissingFileError
        If ``path`` or an included item file does not exist.
    SiteConfigError
        If the file is not a mapping of sidebar ids to item lists or an item
        is malformed.
    """
    raw = _load_yaml(path, "Sidebar file")
    if not isinstance(raw, dict):
        msg = f"Sidebar file '{path}' must map sidebar ids to item lists."
        raise SiteConfigError(msg)
    sidebars: dict[str, tuple[SidebarItem, ...]] = {}
    for sidebar_id, items in raw.items():
        sidebars[str(sidebar_id)] = _build_items(items, path.parent, f"{sidebar_id}")
    return SidebarDefinitions(sidebars=sidebars, source=path)


def _load_yaml(path: Path, label: str) -> object:
    if not path.exists():
        raise MissingFileError(label, path)
    loader = YAML(typ="safe")
    try:
        with path.open("r", encoding="utf-8") as handle:
            return loader.load(handle)
    except YAMLError as exc:
        msg = f"{label} '{path}' is not valid YAML: {exc}"
        raise SiteConfigError(msg) from exc


def _build_items(entries: object, base_dir: Path, where: str) -> tuple[SidebarItem, ...]:
    if not isinstance(entries, list):
        msg = f"Sidebar '{where}' must be a list of items."
        raise SiteConfigError(msg)
    items: list[SidebarItem] = []
    for index, entry in enumerate(entries):
        location = f"{where}[{index}]"
        match entry:
            case str():
                items.append(SidebarDoc(doc_id=entry))
            case {"type": "doc", "id": str() as doc_id, **rest}:
                items.append(SidebarDoc(doc_id=doc_id, label=rest.get("label")))
            case {"type": "link", "href": str() as href, "label": str() as label}:
                items.append(SidebarLink(href=href, label=label))
            case {"type": "autogenerated", "dir_name": str() as dir_name}:
                items.append(SidebarAutogenerated(dir_name=dir_name))
            case {"type": "category", "label": str() as label, "items": children, **rest}:
                collapsed = rest.get("collapsed")
                items.append(
                    SidebarCategory(
                        label=label,
                        items=_build_items(children, base_dir, f"{location}.items"),
                        collapsed=collapsed if isinstance(collapsed, bool) else None,
                    )
                )
            case {"type": "include", "path": str() as include}:
                include_path = base_dir / include
                included = _load_yaml(include_path, "Included sidebar")
                items.extend(_build_items(included, include_path.parent, str(include_path)))
            case _:
                msg = f"Sidebar item '{location}' is malformed: {entry!r}"
                raise SiteConfigError(msg)
    return tuple(items)


def _walk(items: typ.Iterable[SidebarItem], documents: DocumentIndex) -> typ.Iterator[str]:
    for item in items:
        match item:
            case SidebarDoc(doc_id=doc_id):
                yield doc_id
            case SidebarAutogenerated(dir_name=dir_name):
                yield from (record.id for record in documents.under(dir_name))
            case SidebarCategory(items=children):
                yield from _walk(children, documents)
            case SidebarLink():
                continue


__all__ = [
    "SidebarAutogenerated",
    "SidebarCategory",
    "SidebarDefinitions",
    "SidebarDoc",
    "SidebarItem",
    "SidebarLink",
    "load_sidebars",
]
