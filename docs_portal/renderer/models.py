"""Value objects returned by the document rendering pipeline."""

from __future__ import annotations

import dataclasses as dc

from docs_portal._constants import DEFAULT_DIAGRAM_LANGUAGES


@dc.dataclass(frozen=True, slots=True)
class TocEntry:
    """One heading recorded while rendering a document.

    Attributes
    ----------
    text : str
        Plain heading text.
    level : int
        Heading level between 1 and 6.
    slug : str
        Anchor identifier, unique within the document.
    """

    text: str
    level: int
    slug: str


@dc.dataclass(frozen=True, slots=True)
class RenderedDocument:
    """HTML fragment and table of contents produced by one render call.

    Attributes
    ----------
    html : str
        Document body, prefixed with the table of contents when headings exist.
    toc : tuple[TocEntry, ...]
        Headings in document order.
    title : str | None
        Text of the first level-one heading, when present.
    """

    html: str
    toc: tuple[TocEntry, ...] = ()
    title: str | None = None


@dc.dataclass(frozen=True, slots=True)
class RenderOptions:
    """Rendering settings fixed for the lifetime of one build or server.

    Attributes
    ----------
    diagram_languages : frozenset[str]
        Fence languages emitted as client-rendered diagram containers.
    pygments_style : str
        Pygments style used for highlighted blocks and the stylesheet.
    """

    diagram_languages: frozenset[str] = frozenset(DEFAULT_DIAGRAM_LANGUAGES)
    pygments_style: str = "default"


__all__ = ["RenderOptions", "RenderedDocument", "TocEntry"]
