"""Helpers for rewriting relative Markdown document links.

Authors link documents to each other with plain relative paths
(``[setup](../guides/setup.md)``). The treeprocessor defined here resolves each
such target against the linking document's directory and hands it to
:func:`~docs_portal.paths.resolve_href`, so the same source produces working
links in dynamic mode (``/content/guides/setup.md``) and in a static build
(``/prefix/guides/setup.html``).
"""

from __future__ import annotations

import logging
import posixpath
import typing as typ
from urllib.parse import unquote, urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from docs_portal.errors import PathResolutionError
from docs_portal.paths import NodeKind, is_document_path, resolve_href

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from docs_portal.paths import RenderContext

logger = logging.getLogger(__name__)

_EXTERNAL_PREFIXES = ("http://", "https://", "mailto:", "tel:", "data:", "javascript:")


def rewrite_document_link(
    target: str | None, base_dir: str, context: RenderContext
) -> str | None:
    """Return the resolved href for a relative document link, or ``None``.

    Parameters
    ----------
    target : str or None
        Raw ``href`` from the Markdown source.
    base_dir : str
        Root-relative directory of the linking document (``""`` at the root).
    context : RenderContext
        Addressing scheme of the current render.

    Returns
    -------
    str or None
        The rewritten href, or ``None`` when the link is external, absolute,
        not a document, or escapes the content root.
    """
    if not target:
        return None
    if target.lower().startswith(_EXTERNAL_PREFIXES):
        return None
    if target.startswith(("#", "/")) or "://" in target:
        return None

    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or not is_document_path(parsed.path):
        return None

    joined = posixpath.normpath(posixpath.join(base_dir, unquote(parsed.path)))
    try:
        url = resolve_href(joined, NodeKind.DOCUMENT, context)
    except PathResolutionError:
        logger.debug("Leaving link '%s' untouched: outside the content root", target)
        return None

    if parsed.query:
        url = f"{url}?{parsed.query}"
    if parsed.fragment:
        url = f"{url}#{parsed.fragment}"
    return url


class DocumentLinkTreeprocessor(Treeprocessor):
    """Rewrite relative document links in the parsed tree."""

    def __init__(self, md: Markdown, base_dir: str, context: RenderContext) -> None:
        super().__init__(md)
        self.base_dir = base_dir
        self.context = context

    def run(self, root: Element) -> Element:
        """Rewrite every ``<a href>`` below ``root`` that targets a document."""
        for element in root.iter("a"):
            rewritten = rewrite_document_link(
                element.get("href"), self.base_dir, self.context
            )
            if rewritten:
                element.set("href", rewritten)
        return root


class DocumentLinkExtension(Extension):
    """Resolve relative ``.md`` links through the path resolver.

    ``document_path`` is the root-relative path of the document being
    rendered; links are resolved against its directory.
    """

    def __init__(self, document_path: str, context: RenderContext) -> None:
        super().__init__()
        self.base_dir = posixpath.dirname(document_path)
        self.context = context

    def extendMarkdown(self, md: Markdown) -> None:  # noqa: N802
        """Register the document-link treeprocessor on the Markdown instance."""
        processor = DocumentLinkTreeprocessor(md, self.base_dir, self.context)
        md.treeprocessors.register(processor, "portal_document_links", 15)


__all__ = [
    "DocumentLinkExtension",
    "DocumentLinkTreeprocessor",
    "rewrite_document_link",
]
