"""Heading anchors and table-of-contents collection.

:class:`HeadingAnchorTreeprocessor` walks the parsed document once, gives every
``h1``-``h6`` a stable ``id``, wraps its content in a self-link, and appends a
:class:`~docs_portal.renderer.models.TocEntry` to the accumulator it was
constructed with. A new accumulator is created for every render call, so
headings never leak from one document into the next.
"""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown import util
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from .models import TocEntry

if typ.TYPE_CHECKING:
    from markdown import Markdown

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_ESCAPED_CHAR = re.compile(f"{util.STX}([0-9]+){util.ETX}")
_PLACEHOLDER = re.compile(f"{util.STX}[^{util.ETX}]*{util.ETX}")
_NON_WORD = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """Return the anchor slug for ``text``.

    Lower-cases the text, strips characters that are neither word characters,
    whitespace nor hyphens, and collapses whitespace and hyphen runs into a
    single hyphen.

    Examples
    --------
    >>> slugify("Hello, World!  Again")
    'hello-world-again'
    """
    lowered = _NON_WORD.sub("", text.lower())
    hyphenated = _WHITESPACE.sub("-", lowered.strip())
    return _HYPHEN_RUN.sub("-", hyphenated).strip("-")


def unique_slug(base: str, used: set[str]) -> str:
    """Return ``base`` or the first free ``base-N`` suffix, recording it in ``used``."""
    candidate = base or "section"
    root = candidate
    suffix = 2
    while candidate in used:
        candidate = f"{root}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def heading_text(element: etree.Element) -> str:
    """Return the plain text of a parsed heading element."""
    raw = "".join(element.itertext())
    unescaped = _ESCAPED_CHAR.sub(lambda match: chr(int(match.group(1))), raw)
    return _PLACEHOLDER.sub("", unescaped).strip()


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Assign anchor ids to headings and collect them into a TOC accumulator."""

    def __init__(self, md: Markdown, toc: list[TocEntry]) -> None:
        super().__init__(md)
        self.toc = toc
        self._used: set[str] = set()

    def run(self, root: etree.Element) -> None:
        """Annotate every heading below ``root`` in document order."""
        headings = [element for element in root.iter() if element.tag in HEADING_TAGS]
        for element in headings:
            text = heading_text(element)
            slug = unique_slug(slugify(text), self._used)
            self.toc.append(TocEntry(text=text, level=int(element.tag[1]), slug=slug))
            element.set("id", slug)
            self._wrap_in_anchor(element, slug)

    @staticmethod
    def _wrap_in_anchor(element: etree.Element, slug: str) -> None:
        """Move the heading content into a self-referencing anchor.

        Anchors cannot nest, so a heading that already holds a link keeps its
        content and gets a trailing ``#`` self-link instead.
        """
        anchor = etree.Element("a", {"href": f"#{slug}", "class": "header-anchor"})
        if element.find(".//a") is not None:
            anchor.set("aria-label", "Link to this section")
            anchor.text = "#"
            last = element[-1]
            last.tail = f"{last.tail or ''} "
            element.append(anchor)
            return
        anchor.text = element.text
        element.text = None
        for child in list(element):
            element.remove(child)
            anchor.append(child)
        element.append(anchor)


class HeadingAnchorExtension(Extension):
    """Register :class:`HeadingAnchorTreeprocessor` against one accumulator."""

    def __init__(self, toc: list[TocEntry]) -> None:
        super().__init__()
        self.toc = toc

    def extendMarkdown(self, md: Markdown) -> None:  # noqa: N802
        """Register the heading treeprocessor after inline processing."""
        processor = HeadingAnchorTreeprocessor(md, self.toc)
        md.treeprocessors.register(processor, "portal_heading_anchors", 6)


__all__ = [
    "HeadingAnchorExtension",
    "HeadingAnchorTreeprocessor",
    "heading_text",
    "slugify",
    "unique_slug",
]
