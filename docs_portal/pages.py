"""Compose complete portal pages from rendered fragments.

:class:`PageComposer` owns the Jinja environment and turns navigation trees,
directory listings and rendered documents into full HTML documents. One
composer serves one addressing context: the static builder creates it with the
deploy prefix, the dynamic site with the ``/content/`` scheme. Every href in
the output comes from :func:`docs_portal.paths.resolve_href`, so the page
layer never builds URLs by hand.

Example
-------
>>> from docs_portal.pages import PageComposer
>>> from docs_portal.paths import RenderContext
>>> composer = PageComposer(RenderContext.static("/docs"))
>>> html = composer.not_found_page(path="missing.md", tree=[])  # doctest: +SKIP
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from ._constants import (
    CLIENT_ASSETS,
    DEFAULT_DIAGRAM_LANGUAGES,
    DEFAULT_INDEX_DOCUMENT,
    DIRECTORY_CONTENTS_HEADING,
    HOME_TITLE,
    NAVIGATION_MANIFEST,
    PYGMENTS_STYLESHEET,
)
from .navigation import build_breadcrumb, format_display_name
from .paths import NodeKind, home_href, is_document_path, resolve_href

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    import collections.abc as cabc

    from .content_store import ContentEntry
    from .navigation import NavigationNode
    from .paths import RenderContext
    from .renderer import RenderedDocument

DYNAMIC_ASSET_ROOT = "/static"

_FILE_ICONS = {
    ".md": "📄",
    ".pdf": "📕",
    ".txt": "📝",
    ".jpg": "🖼️",
    ".jpeg": "🖼️",
    ".png": "🖼️",
    ".gif": "🖼️",
    ".svg": "🖼️",
}
_DIRECTORY_ICON = "📁"
_DEFAULT_ICON = "📄"


def entry_icon(entry: ContentEntry) -> str:
    """Return the listing icon for ``entry``."""
    if entry.is_directory:
        return _DIRECTORY_ICON
    return _FILE_ICONS.get(entry.extension or "", _DEFAULT_ICON)


class PageComposer:
    """Render full pages for one addressing context."""

    def __init__(
        self,
        context: RenderContext,
        *,
        site_name: str = HOME_TITLE,
        commit_info: cabc.Mapping[str, str] | None = None,
        index_document: str = DEFAULT_INDEX_DOCUMENT,
        diagram_languages: cabc.Iterable[str] = DEFAULT_DIAGRAM_LANGUAGES,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the composer with its context and template directory.

        Parameters
        ----------
        context : RenderContext
            Addressing scheme for every link the composer emits.
        site_name : str, optional
            Title shown in the header and on the home page.
        commit_info : Mapping[str, str], optional
            Commit banner data; the banner is omitted when ``None``.
        index_document : str, optional
            File name whose content stands in for its directory; it is left
            out of directory listings.
        diagram_languages : Iterable[str], optional
            Fence languages rendered as diagram containers; pages holding one
            load the client-side diagram runtime.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        """
        self.context = context
        self.site_name = site_name
        self.commit_info = dict(commit_info) if commit_info else None
        self.index_document = index_document
        self.diagram_languages = tuple(sorted(diagram_languages))
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.page_template = self.env.get_template("page.jinja")
        self.navigation_template = self.env.get_template("navigation.jinja")
        self.listing_template = self.env.get_template("directory_listing.jinja")

    def asset_href(self, name: str) -> str:
        """Return the href of a bundled client file such as ``site.css``."""
        if self.context.is_static:
            return f"{self.context.prefix}/{name}"
        return f"{DYNAMIC_ASSET_ROOT}/{name}"

    def href(self, path: str, kind: NodeKind) -> str:
        """Return the href of the content node at ``path``."""
        if not path:
            return home_href(self.context)
        return resolve_href(path, kind, self.context)

    def render_navigation(self, tree: cabc.Sequence[NavigationNode]) -> Markup:
        """Render the sidebar tree as nested lists keyed by ``data-path``."""
        html = self.navigation_template.render(
            tree=tree, href=lambda node: self.href(node.path, node.kind)
        )
        return Markup(html)  # noqa: S704 - rendered by an autoescaping template

    def directory_listing(self, entries: cabc.Iterable[ContentEntry]) -> Markup:
        """Render the link list for one directory's entries."""
        rows = [
            {
                "name": entry.name,
                "type": "directory" if entry.is_directory else "file",
                "icon": entry_icon(entry),
                "href": self.href(entry.path, entry.kind),
            }
            for entry in entries
            if entry.name != self.index_document
        ]
        html = self.listing_template.render(entries=rows)
        return Markup(html)  # noqa: S704 - rendered by an autoescaping template

    def breadcrumb(self, path: str) -> list[dict[str, str]]:
        """Return breadcrumb links for ``path``, starting with the home page."""
        items = [{"name": "Home", "href": home_href(self.context)}]
        for item in build_breadcrumb(path):
            kind = (
                NodeKind.DOCUMENT if is_document_path(item.path) else NodeKind.DIRECTORY
            )
            items.append({"name": item.name, "href": self.href(item.path, kind)})
        return items

    def document_page(
        self,
        *,
        path: str,
        document: RenderedDocument,
        tree: cabc.Sequence[NavigationNode] | None,
    ) -> str:
        """Render the page for the Markdown document at ``path``."""
        title = document.title or format_display_name(path.rsplit("/", 1)[-1])
        content = Markup(  # noqa: S704 - produced by the document renderer
            f'<div class="markdown-content">\n{document.html}\n</div>'
        )
        return self._render_page(title=title, path=path, content=content, tree=tree)

    def directory_page(
        self,
        *,
        path: str,
        entries: cabc.Sequence[ContentEntry],
        tree: cabc.Sequence[NavigationNode] | None,
        index: RenderedDocument | None = None,
    ) -> str:
        """Render a directory page, optionally led by its index document.

        Parameters
        ----------
        path : str
            Root-relative directory path; ``""`` renders the home page.
        entries : Sequence[ContentEntry]
            Listing of the directory.
        tree : Sequence[NavigationNode] or None
            Sidebar navigation; ``None`` leaves the sidebar to the client
            script.
        index : RenderedDocument, optional
            Rendered index document shown above the listing.
        """
        title = self._directory_title(path)
        listing = self.directory_listing(entries)
        if index is not None and index.html:
            content = Markup(  # noqa: S704 - produced by the document renderer
                f'<div class="markdown-content">\n{index.html}\n</div>\n'
                f"<h2>{_DIRECTORY_ICON} {DIRECTORY_CONTENTS_HEADING}</h2>\n{listing}"
            )
        else:
            content = Markup("<h1>{}</h1>\n{}").format(title, listing)
        return self._render_page(
            title=index.title if index and index.title else title,
            path=path,
            content=content,
            tree=tree,
        )

    def not_found_page(
        self, *, path: str, tree: cabc.Sequence[NavigationNode] | None
    ) -> str:
        """Render the error page, still carrying the full navigation.

        ``path`` is echoed in the message when given; the static build passes
        ``""`` because one page serves every missing URL.
        """
        detail = (
            Markup("<p>Nothing lives at <code>{}</code>.</p>").format(path)
            if path
            else Markup("<p>The page you requested does not exist.</p>")
        )
        content = Markup(
            '<div class="not-found">\n<h1>Page not found</h1>\n{}\n'
            '<p><a href="{}">Back to the home page</a></p>\n</div>'
        ).format(detail, home_href(self.context))
        return self._render_page(
            title="Page not found", path="", content=content, tree=tree
        )

    def _directory_title(self, path: str) -> str:
        if not path:
            return self.site_name
        return format_display_name(path.rsplit("/", 1)[-1])

    def _render_page(
        self,
        *,
        title: str,
        path: str,
        content: Markup,
        tree: cabc.Sequence[NavigationNode] | None,
    ) -> str:
        prerendered = tree is not None
        manifest_url = (
            self.asset_href(NAVIGATION_MANIFEST) if self.context.is_static else ""
        )
        script, stylesheet = CLIENT_ASSETS
        return self.page_template.render(
            title=title,
            site_name=self.site_name,
            home_href=home_href(self.context),
            base_url=self.context.prefix,
            mode=str(self.context.mode),
            manifest_url=manifest_url,
            nav_prerendered=prerendered,
            navigation=self.render_navigation(tree) if prerendered else "",
            breadcrumb=self.breadcrumb(path) if path else [],
            content=content,
            has_diagrams=self._has_diagrams(content),
            diagram_selector=", ".join(
                f"div.{language}" for language in self.diagram_languages
            ),
            commit=self.commit_info,
            stylesheet_href=self.asset_href(stylesheet),
            pygments_href=self.asset_href(PYGMENTS_STYLESHEET),
            script_href=self.asset_href(script),
        )

    def _has_diagrams(self, content: str) -> bool:
        return any(
            f'<div class="{language}">' in content for language in self.diagram_languages
        )


__all__ = ["DYNAMIC_ASSET_ROOT", "PageComposer", "entry_icon"]
