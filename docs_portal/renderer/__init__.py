"""Markdown rendering for portal documents."""

from .link_rewriter import DocumentLinkExtension
from .markdown_renderer import (
    DocumentRenderer,
    pygments_stylesheet,
    render_document,
    render_toc,
)
from .models import RenderedDocument, RenderOptions, TocEntry

__all__ = [
    "DocumentLinkExtension",
    "DocumentRenderer",
    "RenderOptions",
    "RenderedDocument",
    "TocEntry",
    "pygments_stylesheet",
    "render_document",
    "render_toc",
]
