"""Render single pages on demand under the ``/content/`` addressing scheme.

:class:`DynamicSite` is the request-time counterpart of the static builder.
It answers one request path at a time, rebuilding the navigation tree for
every call so the sidebar always reflects the viewed page. Files that are not
documents are returned byte for byte with a guessed media type. Hosting it
behind an HTTP server is left to the caller; ``portal page`` drives it from
the command line.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import mimetypes
import typing as typ
from urllib.parse import unquote

from ._constants import DYNAMIC_CONTENT_ROOT
from .config import default_site_config
from .errors import PathResolutionError, PortalError
from .navigation import build_navigation
from .pages import PageComposer
from .paths import RenderContext, is_document_path, validate_content_path
from .renderer import DocumentRenderer

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    import collections.abc as cabc

    from .config import SiteConfig
    from .content_store import ContentStore
    from .navigation import NavigationNode

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_NOT_FOUND = 404
HTML_MEDIA_TYPE = "text/html; charset=utf-8"
DEFAULT_MEDIA_TYPE = "application/octet-stream"


@dc.dataclass(frozen=True, slots=True)
class PageResponse:
    """Status code and body for one request.

    Pages carry their markup in ``html``. Content assets carry raw bytes in
    ``payload`` together with the media type guessed from their name.
    """

    status: int
    html: str = ""
    media_type: str = HTML_MEDIA_TYPE
    payload: bytes | None = None

    @property
    def ok(self) -> bool:
        """Return ``True`` for a successful response."""
        return self.status == HTTP_OK

    @property
    def body(self) -> bytes:
        """Return the bytes to send to the client."""
        if self.payload is not None:
            return self.payload
        return self.html.encode("utf-8")


def request_to_content_path(request_path: str) -> str | None:
    """Return the content path addressed by ``request_path``.

    ``/`` and ``/content`` address the root (``""``). Paths that escape the
    content root or contain empty segments return ``None``.

    Examples
    --------
    >>> request_to_content_path("/content/guides/setup.md")
    'guides/setup.md'
    >>> request_to_content_path("/content/../secrets") is None
    True
    """
    current = unquote(request_path or "").strip()
    if current == DYNAMIC_CONTENT_ROOT or current.startswith(f"{DYNAMIC_CONTENT_ROOT}/"):
        current = current[len(DYNAMIC_CONTENT_ROOT) :]
    current = current.strip("/")
    if not current:
        return ""
    try:
        return validate_content_path(current)
    except PathResolutionError:
        return None


class DynamicSite:
    """Serve portal pages rendered at request time."""

    def __init__(
        self,
        store: ContentStore,
        config: SiteConfig | None = None,
        commit_info: cabc.Mapping[str, str] | None = None,
    ) -> None:
        """Bind the content store and rendering settings.

        Parameters
        ----------
        store : ContentStore
            Source of listings and documents.
        config : SiteConfig, optional
            Rendering settings; defaults apply when omitted.
        commit_info : Mapping[str, str], optional
            Commit banner data shown on every page.
        """
        self.store = store
        self.config = config or default_site_config()
        self.context = RenderContext.dynamic()
        self.renderer = DocumentRenderer(self.context, self.config.render_options)
        self.composer = PageComposer(
            self.context,
            site_name=self.config.site_name,
            commit_info=commit_info,
            index_document=self.config.index_document,
            diagram_languages=self.config.render_options.diagram_languages,
        )

    def render(self, request_path: str) -> PageResponse:
        """Return the page for ``request_path``.

        Directories render as listings, ``.md`` files as documents, and other
        files are returned as-is. Everything else gets a 404 page that still
        carries the navigation.
        """
        path = request_to_content_path(request_path)
        if path is None:
            logger.debug("Rejected request path '%s'", request_path)
            return self._not_found(request_path)
        if path and not is_document_path(path) and self.store.is_file(path):
            return self._asset(request_path, path)

        tree = self._navigation(path or None)
        try:
            if path == "" or self.store.is_directory(path):
                html = self._directory(path, tree)
            elif is_document_path(path) and self.store.is_file(path):
                document = self.renderer.render(self.store.read_text(path), path)
                html = self.composer.document_page(
                    path=path, document=document, tree=tree
                )
            else:
                return self._not_found(request_path, tree)
        except PortalError as exc:
            logger.warning("Could not render '%s': %s", request_path, exc)
            return self._not_found(request_path, tree)
        return PageResponse(status=HTTP_OK, html=html)

    def _asset(self, request_path: str, path: str) -> PageResponse:
        try:
            payload = self.store.read_bytes(path)
        except PortalError as exc:
            logger.warning("Could not read '%s': %s", request_path, exc)
            return self._not_found(request_path)
        media_type, _encoding = mimetypes.guess_type(path)
        return PageResponse(
            status=HTTP_OK,
            media_type=media_type or DEFAULT_MEDIA_TYPE,
            payload=payload,
        )

    def _navigation(self, viewed_path: str | None) -> list[NavigationNode]:
        return build_navigation(
            self.store,
            max_depth=self.config.max_depth,
            viewed_path=viewed_path,
            index_document=self.config.index_document,
        )

    def _directory(self, path: str, tree: list[NavigationNode]) -> str:
        entries = self.store.list_directory(path)
        index_path = (
            f"{path}/{self.config.index_document}"
            if path
            else self.config.index_document
        )
        index = None
        if self.store.is_file(index_path):
            index = self.renderer.render(self.store.read_text(index_path), index_path)
        return self.composer.directory_page(
            path=path, entries=entries, tree=tree, index=index
        )

    def _not_found(
        self, request_path: str, tree: list[NavigationNode] | None = None
    ) -> PageResponse:
        if tree is None:
            tree = self._navigation(None)
        html = self.composer.not_found_page(path=request_path, tree=tree)
        return PageResponse(status=HTTP_NOT_FOUND, html=html)


__all__ = ["DynamicSite", "PageResponse", "request_to_content_path"]
