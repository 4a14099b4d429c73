"""Render one Markdown document into an HTML fragment plus its table of contents.

:func:`render_document` is a pure function: every call builds a fresh
``markdown.Markdown`` instance wired with three private extensions (fenced
blocks, heading anchors, document links) and a fresh TOC accumulator, so no
state survives from one document to the next. :class:`DocumentRenderer` binds
the per-build settings once and forwards to it.
"""

from __future__ import annotations

import logging
import typing as typ
from html import escape

from markdown import Markdown

from .fences import FencedBlockExtension, build_formatter
from .headings import HeadingAnchorExtension
from .link_rewriter import DocumentLinkExtension
from .models import RenderedDocument, RenderOptions, TocEntry

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docs_portal.paths import RenderContext

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ("fenced_code", "tables", "sane_lists")


def render_toc(entries: cabc.Sequence[TocEntry]) -> str:
    """Return the nested-list table of contents for ``entries``.

    Nesting is relative to the shallowest heading level present, so a document
    that starts at ``h2`` does not get an empty outer list.
    """
    if not entries:
        return ""
    base = min(entry.level for entry in entries)
    parts = ['<nav class="table-of-contents">', "<ul>"]
    depth = 0
    for entry in entries:
        level = entry.level - base
        while depth < level:
            parts.append("<ul>")
            depth += 1
        while depth > level:
            parts.append("</ul>")
            depth -= 1
        parts.append(
            f'<li class="toc-level-{entry.level}">'
            f'<a href="#{escape(entry.slug, quote=True)}">{escape(entry.text)}</a></li>'
        )
    parts.extend("</ul>" for _ in range(depth + 1))
    parts.append("</nav>")
    return "\n".join(parts)


def pygments_stylesheet(style: str = "default") -> str:
    """Return the CSS rules for code highlighted with Pygments ``style``."""
    return build_formatter(style).get_style_defs(".codehilite")


def _render(
    text: str, context: RenderContext, document_path: str, options: RenderOptions
) -> RenderedDocument:
    toc: list[TocEntry] = []
    md = Markdown(
        extensions=[
            *MARKDOWN_EXTENSIONS,
            FencedBlockExtension(
                options.diagram_languages, build_formatter(options.pygments_style)
            ),
            HeadingAnchorExtension(toc),
            DocumentLinkExtension(document_path, context),
        ],
        output_format="html",
    )
    body = md.convert(text)
    title = next((entry.text for entry in toc if entry.level == 1), None)
    if not toc:
        return RenderedDocument(html=body, toc=(), title=title)
    return RenderedDocument(
        html=f"{render_toc(toc)}\n{body}", toc=tuple(toc), title=title
    )


def render_document(
    raw_text: object,
    context: RenderContext,
    *,
    document_path: str = "",
    options: RenderOptions | None = None,
) -> RenderedDocument:
    """Render Markdown source into HTML under ``context``.

    Parameters
    ----------
    raw_text : object
        Markdown source. Anything that is not a ``str`` renders as empty.
    context : RenderContext
        Addressing scheme used when rewriting document links.
    document_path : str, optional
        Root-relative path of the document, used to resolve relative links.
    options : RenderOptions, optional
        Diagram languages and highlighting style; defaults apply when omitted.

    Returns
    -------
    RenderedDocument
        HTML with the table of contents prepended when headings exist. If
        rendering fails the raw source is returned escaped inside
        ``<pre><code>`` with an empty TOC.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        return RenderedDocument(html="")
    try:
        return _render(raw_text, context, document_path, options or RenderOptions())
    except Exception:  # noqa: BLE001 - a document must always produce output
        logger.exception("Rendering failed for '%s'", document_path or "<inline>")
        return RenderedDocument(html=f"<pre><code>{escape(raw_text)}</code></pre>")


class DocumentRenderer:
    """Render documents for one build or server with fixed settings.

    The instance keeps only immutable configuration; each :meth:`render` call
    is independent and safe to repeat across documents.
    """

    def __init__(
        self, context: RenderContext, options: RenderOptions | None = None
    ) -> None:
        """Bind the addressing context and rendering options.

        Parameters
        ----------
        context : RenderContext
            Addressing scheme for every document this renderer handles.
        options : RenderOptions, optional
            Diagram languages and Pygments style.
        """
        self.context = context
        self.options = options or RenderOptions()

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return pygments_stylesheet(self.options.pygments_style)

    def render(self, text: object, document_path: str = "") -> RenderedDocument:
        """Render ``text`` as the document at ``document_path``."""
        return render_document(
            text, self.context, document_path=document_path, options=self.options
        )


__all__ = [
    "DocumentRenderer",
    "pygments_stylesheet",
    "render_document",
    "render_toc",
]
