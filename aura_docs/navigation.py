"""Resolve navbar references against sidebars and known documents.

The composer checks every ``docSidebar`` entry against the sidebar definitions,
every dropdown document link against the document index, and every document a
sidebar references. Problems are gathered before the ``on_broken_links``
policy is applied, so one failing build reports all of them at once.

Example
-------
>>> from aura_docs.navigation import NavigationComposer
>>> navbar = NavigationComposer(config, documents, sidebars).compose()  # doctest: +SKIP
>>> [item.label for item in navbar.items]  # doctest: +SKIP
['Overview', 'Developers', 'Ecosystem']
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .config import DocSidebarLink, Dropdown
from .links import apply_link_policy

if typ.TYPE_CHECKING:
    from .config import NavbarLogo, SiteConfig
    from .content import DocumentIndex
    from .sidebars import SidebarDefinitions


@dc.dataclass(frozen=True, slots=True)
class ResolvedLink:
    """A navbar link with its target URL (``None`` when unresolved)."""

    label: str
    href: str | None
    doc_id: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ResolvedNavItem:
    """A navbar entry ready for rendering."""

    kind: str
    label: str
    position: str
    href: str | None = None
    items: tuple[ResolvedLink, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class ResolvedNavbar:
    """The navbar after reference resolution."""

    title: str | None
    logo: NavbarLogo | None
    items: tuple[ResolvedNavItem, ...]
    problems: tuple[str, ...] = ()

    def position(self, side: str) -> list[ResolvedNavItem]:
        """Return the entries placed on ``side`` (``left`` or ``right``)."""
        return [item for item in self.items if item.position == side]


class NavigationComposer:
    """Resolve navbar and sidebar references for the site shell."""

    def __init__(
        self,
        config: SiteConfig,
        documents: DocumentIndex,
        sidebars: SidebarDefinitions,
    ) -> None:
        self.config = config
        self.documents = documents
        self.sidebars = sidebars

    def compose(self) -> ResolvedNavbar:
        """Resolve every navbar entry and apply the broken-link policy.

        Returns
        -------
        ResolvedNavbar
            Navbar entries with resolved hrefs, plus the problems that were
            reported under a non-throwing policy.

        Raises
        ------
        BrokenLinkError
            If any reference is unresolved and ``on_broken_links`` is
            ``throw``.
        """
        problems: list[str] = [
            f"sidebar '{sidebar_id}' references unknown document '{doc_id}'"
            for sidebar_id, doc_id in self.sidebars.missing_docs(self.documents)
        ]
        items: list[ResolvedNavItem] = []
        navbar = self.config.theme_config.navbar
        for item in navbar.items:
            match item:
                case DocSidebarLink():
                    items.append(self._resolve_sidebar_link(item, problems))
                case Dropdown():
                    items.append(self._resolve_dropdown(item, problems))
        reported = apply_link_policy(
            self.config.on_broken_links, problems, kind="link"
        )
        return ResolvedNavbar(
            title=navbar.title,
            logo=navbar.logo,
            items=tuple(items),
            problems=tuple(reported),
        )

    def _resolve_sidebar_link(
        self, item: DocSidebarLink, problems: list[str]
    ) -> ResolvedNavItem:
        href = None
        if item.sidebar_id not in self.sidebars:
            problems.append(
                f"navbar item '{item.label}' references unknown sidebar '{item.sidebar_id}'"
            )
        else:
            first = self.sidebars.first_doc(item.sidebar_id, self.documents)
            if first is None:
                problems.append(
                    f"navbar item '{item.label}' points at sidebar "
                    f"'{item.sidebar_id}', which has no documents"
                )
            else:
                href = self._permalink(first)
        return ResolvedNavItem(
            kind=item.type, label=item.label, position=item.position, href=href
        )

    def _resolve_dropdown(self, item: Dropdown, problems: list[str]) -> ResolvedNavItem:
        links: list[ResolvedLink] = []
        for link in item.items:
            href = None
            if link.doc_id in self.documents:
                href = self._permalink(link.doc_id)
            else:
                problems.append(
                    f"dropdown '{item.label}' entry '{link.label}' references "
                    f"unknown document '{link.doc_id}'"
                )
            links.append(ResolvedLink(label=link.label, href=href, doc_id=link.doc_id))
        return ResolvedNavItem(
            kind=item.type,
            label=item.label,
            position=item.position,
            items=tuple(links),
        )

    def _permalink(self, doc_id: str) -> str | None:
        record = self.documents.get(doc_id)
        return record.permalink if record else None


__all__ = [
    "NavigationComposer",
    "ResolvedLink",
    "ResolvedNavItem",
    "ResolvedNavbar",
]
