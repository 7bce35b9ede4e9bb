"""Extract and check relative markdown links between documents.

Links are gathered by running each document through ``markdown`` with a tree
processor that records anchor targets, so links inside code spans and fenced
blocks are never mistaken for navigation.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import posixpath
import typing as typ
from pathlib import Path
from urllib.parse import unquote, urlsplit

from markdown import Markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from ._constants import DOC_EXTENSIONS
from .content import read_front_matter
from .errors import BrokenLinkError

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from .config import BrokenLinkPolicy
    from .content import DocumentIndex

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class BrokenMarkdownLink:
    """A relative markdown link whose target document does not exist."""

    source: str
    target: str

    def describe(self) -> str:
        """Return a one-line description for reports."""
        return f"'{self.target}' linked from '{self.source}' does not resolve to a document"


class LinkCollectorExtension(Extension):
    """Record every anchor ``href`` in the rendered markdown tree."""

    def __init__(self) -> None:
        super().__init__()
        self.hrefs: list[str] = []

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the link-collecting treeprocessor on the Markdown instance."""
        processor = LinkCollectorTreeprocessor(md, self.hrefs)
        md.treeprocessors.register(processor, "aura_link_collector", 15)


class LinkCollectorTreeprocessor(Treeprocessor):
    """Append anchor targets to a shared list."""

    def __init__(self, md: Markdown, hrefs: list[str]) -> None:
        super().__init__(md)
        self.hrefs = hrefs

    def run(self, root: Element) -> None:
        """Collect ``href`` attributes from every anchor in the tree."""
        for element in root.iter("a"):
            href = element.get("href")
            if href:
                self.hrefs.append(href)


def extract_links(markdown_text: str) -> list[str]:
    """Return every link target in ``markdown_text`` in document order."""
    collector = LinkCollectorExtension()
    Markdown(extensions=["fenced_code", "tables", collector]).convert(markdown_text)
    return collector.hrefs


def relative_doc_target(href: str) -> str | None:
    """Return the file path of a relative link to a markdown document, or None."""
    parsed = urlsplit(href)
    if parsed.scheme or parsed.netloc or href.startswith(("#", "/")):
        return None
    path = unquote(parsed.path)
    if not path.endswith(DOC_EXTENSIONS):
        return None
    return path


def find_broken_markdown_links(documents: DocumentIndex) -> list[BrokenMarkdownLink]:
    """Return relative ``.md``/``.mdx`` links that do not resolve to a document."""
    broken: list[BrokenMarkdownLink] = []
    for record in documents:
        _, body = read_front_matter(record.source.read_text(encoding="utf-8"), source=record.source)
        base_dir = posixpath.dirname(record.relative_source)
        for href in extract_links(body):
            target = relative_doc_target(href)
            if target is None:
                continue
            joined = posixpath.normpath(posixpath.join(base_dir, target))
            if joined.startswith("../") or documents.for_source(documents.docs_dir / joined) is None:
                broken.append(BrokenMarkdownLink(source=record.relative_source, target=href))
    return broken


def apply_link_policy(
    policy: BrokenLinkPolicy, problems: list[str], *, kind: str
) -> list[str]:
    """Report ``problems`` according to ``policy``.

    Returns the problems that were reported (empty when ignored) and raises
    :class:`BrokenLinkError` under the ``throw`` policy.
    """
    if not problems or policy == "ignore":
        return []
    if policy == "throw":
        raise BrokenLinkError(problems)
    level = logging.INFO if policy == "log" else logging.WARNING
    for problem in problems:
        logger.log(level, "Broken %s: %s", kind, problem)
    return problems


def check_markdown_links(documents: DocumentIndex, policy: BrokenLinkPolicy) -> list[str]:
    """Check in-content markdown links and apply the markdown-link policy."""
    problems = [link.describe() for link in find_broken_markdown_links(documents)]
    return apply_link_policy(policy, problems, kind="markdown link")


__all__ = [
    "BrokenMarkdownLink",
    "LinkCollectorExtension",
    "LinkCollectorTreeprocessor",
    "apply_link_policy",
    "check_markdown_links",
    "extract_links",
    "find_broken_markdown_links",
    "relative_doc_target",
]
