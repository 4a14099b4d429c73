"""Map logical content paths to hrefs for the dynamic and static address schemes.

Every href the portal emits, whether in the navigation sidebar, a directory
listing, a rewritten Markdown link, or a breadcrumb, goes through
:func:`resolve_href`. The function is pure: it reads nothing from disk and
depends only on the path, the node kind, and an immutable
:class:`RenderContext`.

Two address schemes exist:

* **dynamic** roots every content path under ``/content/`` and leaves the
  ``.md`` extension untouched; the server decides what to render.
* **static** roots everything under an optional mount prefix (``""`` for a
  root-mounted site), rewrites ``.md`` to ``.html``, and resolves directories
  to their ``index.html`` via a trailing slash.

Examples
--------
>>> from docs_portal.paths import NodeKind, RenderContext, resolve_href
>>> resolve_href("guides/setup.md", NodeKind.DOCUMENT, RenderContext.dynamic())
'/content/guides/setup.md'
>>> resolve_href("guides", NodeKind.DIRECTORY, RenderContext.static("/site"))
'/site/guides/'
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ
from urllib.parse import quote

from ._constants import (
    DIRECTORY_INDEX_PAGE,
    DOCUMENT_EXTENSION,
    DYNAMIC_CONTENT_ROOT,
    STATIC_DOCUMENT_EXTENSION,
)
from .errors import PathResolutionError


class NodeKind(enum.StrEnum):
    """Kinds of content node the portal knows how to address."""

    DIRECTORY = "directory"
    DOCUMENT = "document"
    ASSET = "asset"


class RenderMode(enum.StrEnum):
    """Addressing scheme used for one server process or one static build."""

    DYNAMIC = "dynamic"
    STATIC = "static"


@dc.dataclass(frozen=True, slots=True)
class RenderContext:
    """Immutable addressing configuration threaded through every render call.

    Attributes
    ----------
    mode : RenderMode
        Whether hrefs target the dynamic server or the static file tree.
    prefix : str
        Mount point of a static site, normalized to ``""`` or ``"/segment"``.
        Always ``""`` in dynamic mode.
    """

    mode: RenderMode
    prefix: str = ""

    def __post_init__(self) -> None:
        """Normalize the prefix so callers may pass ``"site/"`` or ``"/site"``."""
        normalized = _normalize_prefix(self.prefix)
        if self.mode is RenderMode.DYNAMIC and normalized:
            msg = "Dynamic rendering contexts do not take a path prefix."
            raise ValueError(msg)
        object.__setattr__(self, "prefix", normalized)

    @classmethod
    def dynamic(cls) -> RenderContext:
        """Return the context used by the on-demand server."""
        return cls(RenderMode.DYNAMIC)

    @classmethod
    def static(cls, prefix: str = "") -> RenderContext:
        """Return a static-build context mounted at ``prefix``."""
        return cls(RenderMode.STATIC, prefix)

    @property
    def is_static(self) -> bool:
        """Return ``True`` when hrefs target the pre-rendered file tree."""
        return self.mode is RenderMode.STATIC


def _normalize_prefix(prefix: str) -> str:
    stripped = (prefix or "").strip().strip("/")
    return f"/{stripped}" if stripped else ""


def validate_content_path(path: str) -> str:
    """Return ``path`` unchanged when it is a safe, root-relative content path.

    Parameters
    ----------
    path : str
        Slash-separated path relative to the content root.

    Returns
    -------
    str
        The validated path.

    Raises
    ------
    PathResolutionError
        If the path is empty, absolute, contains a backslash or NUL byte, or
        has an empty, ``.`` or ``..`` segment.
    """
    if not isinstance(path, str) or not path:
        msg = "Content path must be a non-empty string."
        raise PathResolutionError(msg)
    if path.startswith("/"):
        msg = f"Content path '{path}' must be relative to the content root."
        raise PathResolutionError(msg)
    if "\\" in path or "\x00" in path:
        msg = f"Content path '{path}' contains a disallowed character."
        raise PathResolutionError(msg)
    for segment in path.split("/"):
        if segment in ("", ".", ".."):
            msg = f"Content path '{path}' contains a disallowed segment."
            raise PathResolutionError(msg)
    return path


def is_document_path(path: str) -> bool:
    """Return ``True`` when ``path`` names a Markdown document."""
    return path.lower().endswith(DOCUMENT_EXTENSION)


def _to_static_document(path: str) -> str:
    if is_document_path(path):
        return path[: -len(DOCUMENT_EXTENSION)] + STATIC_DOCUMENT_EXTENSION
    return path


def resolve_href(path: str, kind: NodeKind, context: RenderContext) -> str:
    """Return the href addressing ``path`` under ``context``.

    Parameters
    ----------
    path : str
        Root-relative content path, validated by :func:`validate_content_path`.
    kind : NodeKind
        Kind of node the path refers to.
    context : RenderContext
        Addressing scheme of the current build or server process.

    Returns
    -------
    str
        Percent-quoted href.

    Raises
    ------
    PathResolutionError
        If ``path`` is malformed or escapes the content root.
    """
    validate_content_path(path)
    if not context.is_static:
        return quote(f"{DYNAMIC_CONTENT_ROOT}/{path}", safe="/")
    match kind:
        case NodeKind.DIRECTORY:
            target = f"{context.prefix}/{path}/"
        case NodeKind.DOCUMENT:
            target = f"{context.prefix}/{_to_static_document(path)}"
        case NodeKind.ASSET:
            target = f"{context.prefix}/{path}"
        case _:
            typ.assert_never(kind)
    return quote(target, safe="/")


def static_to_document_path(url_path: str) -> str:
    """Return the content path of a static ``.html`` page path.

    >>> static_to_document_path("guides/setup.html")
    'guides/setup.md'
    """
    if url_path.lower().endswith(STATIC_DOCUMENT_EXTENSION):
        return url_path[: -len(STATIC_DOCUMENT_EXTENSION)] + DOCUMENT_EXTENSION
    return url_path


def home_href(context: RenderContext) -> str:
    """Return the href of the site's landing page."""
    return f"{context.prefix}/" if context.is_static else "/"


def output_relpath(path: str, kind: NodeKind) -> str:
    """Return where the static artifact for ``path`` lives under the output root.

    The content root itself (``""``) maps to the top-level ``index.html``.
    """
    if kind is NodeKind.DIRECTORY and path == "":
        return DIRECTORY_INDEX_PAGE
    validate_content_path(path)
    match kind:
        case NodeKind.DIRECTORY:
            return f"{path}/{DIRECTORY_INDEX_PAGE}"
        case NodeKind.DOCUMENT:
            return _to_static_document(path)
        case NodeKind.ASSET:
            return path
        case _:
            typ.assert_never(kind)


__all__ = [
    "NodeKind",
    "RenderContext",
    "RenderMode",
    "home_href",
    "is_document_path",
    "output_relpath",
    "resolve_href",
    "static_to_document_path",
    "validate_content_path",
]
