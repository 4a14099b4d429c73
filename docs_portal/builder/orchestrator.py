"""Static site build orchestration.

:class:`SiteBuilder` turns a content tree into a deployable directory of HTML
in a fixed sequence of phases. Each phase runs to completion before the next
starts; :meth:`SiteBuilder.abort` is honoured only at those boundaries, so a
cancelled build never leaves a half-written page behind the phase that was in
progress.

Example
-------
>>> from pathlib import Path
>>> from docs_portal.builder import SiteBuilder
>>> from docs_portal.config import default_site_config
>>> from docs_portal.content_store import FileSystemContentStore
>>> config = default_site_config()
>>> builder = SiteBuilder(
...     FileSystemContentStore(Path("content")),
...     Path("docs"),
...     config.get_profile("local"),
...     config=config,
... )  # doctest: +SKIP
>>> builder.run().files  # doctest: +SKIP
12
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import enum
import json
import logging
import shutil
import typing as typ
from pathlib import Path

from docs_portal._constants import (
    CLIENT_ASSETS,
    NAVIGATION_MANIFEST,
    NOT_FOUND_PAGE,
    PYGMENTS_STYLESHEET,
    STATIC_DOCUMENT_EXTENSION,
)
from docs_portal.config import default_site_config
from docs_portal.content_store import FileSystemContentStore
from docs_portal.errors import BuildAborted, BuildSetupError, PortalError
from docs_portal.navigation import (
    ExpansionPolicy,
    build_navigation,
    count_nodes,
    navigable_pages,
)
from docs_portal.pages import PageComposer
from docs_portal.paths import NodeKind, RenderContext, output_relpath
from docs_portal.renderer import DocumentRenderer, pygments_stylesheet

from .link_fixup import LinkFixup

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    import collections.abc as cabc

    from docs_portal.config import DeployProfile, SiteConfig
    from docs_portal.content_store import ContentEntry, ContentStore
    from docs_portal.navigation import NavigationNode

logger = logging.getLogger(__name__)

STATIC_FILES_DIR = Path(__file__).resolve().parents[1] / "static"


class BuildPhase(enum.StrEnum):
    """Milestones a static build passes through, in order."""

    INIT = "init"
    NAVIGATION_BUILT = "navigation-built"
    MANIFEST_WRITTEN = "manifest-written"
    PAGES_WALKED = "pages-walked"
    ASSETS_COPIED = "assets-copied"
    ERROR_PAGE = "error-page"
    DONE = "done"


@dc.dataclass(frozen=True, slots=True)
class BuildReport:
    """Summary of one completed build."""

    files: int
    total_bytes: int
    pages_written: int
    pages_failed: int
    assets_copied: int

    @property
    def size_label(self) -> str:
        """Return ``total_bytes`` formatted for humans."""
        return format_bytes(self.total_bytes)


def format_bytes(size: int) -> str:
    """Return ``size`` as a short human-readable string.

    Examples
    --------
    >>> format_bytes(512)
    '512 B'
    >>> format_bytes(1536)
    '1.5 KB'
    """
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


class SiteBuilder:
    """Render every page of a content tree into a static output directory."""

    def __init__(
        self,
        store: ContentStore,
        output_root: Path,
        profile: DeployProfile,
        *,
        config: SiteConfig | None = None,
        commit_info: cabc.Mapping[str, str] | None = None,
        on_phase: cabc.Callable[[BuildPhase], None] | None = None,
    ) -> None:
        """Prepare a build without touching the filesystem.

        Parameters
        ----------
        store : ContentStore
            Source of directory listings and document text.
        output_root : Path
            Directory that receives the site. It is deleted and recreated.
        profile : DeployProfile
            Deploy target supplying the URL prefix and marker files.
        config : SiteConfig, optional
            Rendering settings; :func:`default_site_config` when omitted.
        commit_info : Mapping[str, str], optional
            Commit banner data stored in the manifest and shown on pages.
        on_phase : Callable[[BuildPhase], None], optional
            Called each time the build reaches a phase.
        """
        self.store = store
        self.output_root = output_root
        self.profile = profile
        self.config = config or default_site_config()
        self.commit_info = dict(commit_info) if commit_info else None
        self.on_phase = on_phase
        self.context = RenderContext.static(profile.prefix)
        self.renderer = DocumentRenderer(self.context, self.config.render_options)
        self.composer = PageComposer(
            self.context,
            site_name=self.config.site_name,
            commit_info=self.commit_info,
            index_document=self.config.index_document,
            diagram_languages=self.config.render_options.diagram_languages,
        )
        self.link_fixup = LinkFixup(self.context.prefix)
        self.phase: BuildPhase | None = None
        self._abort_requested = False
        self._pages_written = 0
        self._pages_failed = 0
        self._assets_copied = 0
        self._generated: set[str] = set()

    def abort(self) -> None:
        """Request cancellation at the next phase boundary."""
        self._abort_requested = True

    def run(self) -> BuildReport:
        """Execute every build phase and return the summary.

        Raises
        ------
        BuildSetupError
            If the output root overlaps the content root or cannot be
            recreated.
        BuildAborted
            If :meth:`abort` was called; raised at the next phase boundary.
        """
        if self._abort_requested:
            msg = "Build aborted before it started."
            raise BuildAborted(msg)
        self._prepare_output_root()
        self._generated = {
            *self.profile.markers,
            NAVIGATION_MANIFEST,
            NOT_FOUND_PAGE,
            PYGMENTS_STYLESHEET,
            *CLIENT_ASSETS,
        }
        self._advance(BuildPhase.INIT)

        tree = build_navigation(
            self.store,
            max_depth=self.config.max_depth,
            policy=ExpansionPolicy(expand_root=True),
            index_document=self.config.index_document,
        )
        self._advance(BuildPhase.NAVIGATION_BUILT)

        self._write_manifest(tree)
        self._advance(BuildPhase.MANIFEST_WRITTEN)

        assets: list[str] = []
        self._walk_directory("", tree, assets)
        self._advance(BuildPhase.PAGES_WALKED)

        self._copy_assets(assets)
        self._write_client_files()
        self._advance(BuildPhase.ASSETS_COPIED)

        self._write_html(
            self.output_root / NOT_FOUND_PAGE,
            self.composer.not_found_page(path="", tree=tree),
        )
        self._advance(BuildPhase.ERROR_PAGE)

        report = self._summarize()
        self._advance(BuildPhase.DONE)
        logger.info(
            "Built %d files (%s) into %s: %d pages, %d failed, %d assets",
            report.files,
            report.size_label,
            self.output_root,
            report.pages_written,
            report.pages_failed,
            report.assets_copied,
        )
        return report

    def _advance(self, phase: BuildPhase) -> None:
        self.phase = phase
        logger.info("Build phase: %s", phase)
        if self.on_phase is not None:
            self.on_phase(phase)
        if self._abort_requested and phase is not BuildPhase.DONE:
            msg = f"Build aborted after phase '{phase}'."
            raise BuildAborted(msg)

    def _prepare_output_root(self) -> None:
        output_root = self.output_root.resolve()
        if isinstance(self.store, FileSystemContentStore):
            content_root = self.store.root
            if not content_root.is_dir():
                msg = f"Content directory '{content_root}' does not exist."
                raise BuildSetupError(msg)
            if output_root == content_root or output_root in content_root.parents:
                msg = (
                    f"Output directory '{output_root}' would delete the content "
                    f"directory '{content_root}'."
                )
                raise BuildSetupError(msg)
            if content_root in output_root.parents:
                msg = f"Output directory '{output_root}' lies inside the content tree."
                raise BuildSetupError(msg)
        try:
            if output_root.exists():
                shutil.rmtree(output_root)
            output_root.mkdir(parents=True)
            for marker in self.profile.markers:
                (output_root / marker).touch()
        except OSError as exc:
            msg = f"Could not prepare output directory '{output_root}': {exc}"
            raise BuildSetupError(msg) from exc

    def _write_manifest(self, tree: list[NavigationNode]) -> None:
        manifest = {
            "tree": [node.to_dict() for node in tree],
            "pages": navigable_pages(tree),
            "metadata": {
                "buildTime": dt.datetime.now(dt.UTC).isoformat(),
                "commitInfo": self.commit_info,
                "itemCount": count_nodes(tree),
            },
        }
        path = self.output_root / NAVIGATION_MANIFEST
        path.write_text(
            json.dumps(manifest, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        logger.debug("Wrote %s", path)

    def _walk_directory(
        self, path: str, tree: list[NavigationNode], assets: list[str]
    ) -> None:
        """Write the pages below ``path`` depth-first and collect its assets."""
        try:
            entries = self.store.list_directory(path)
        except PortalError as exc:
            logger.warning("Skipping directory '%s': %s", path or ".", exc)
            self._pages_failed += 1
            return

        self._emit_page(path, NodeKind.DIRECTORY, tree, entries)
        for entry in entries:
            match entry.kind:
                case NodeKind.DIRECTORY:
                    self._walk_directory(entry.path, tree, assets)
                case NodeKind.DOCUMENT:
                    if entry.name != self.config.index_document:
                        self._emit_page(entry.path, NodeKind.DOCUMENT, tree)
                case NodeKind.ASSET:
                    assets.append(entry.path)
                case _:
                    typ.assert_never(entry.kind)

    def _emit_page(
        self,
        path: str,
        kind: NodeKind,
        tree: list[NavigationNode],
        entries: list[ContentEntry] | None = None,
    ) -> None:
        try:
            relpath = output_relpath(path, kind)
            self._generated.add(relpath)
            if kind is NodeKind.DIRECTORY:
                html = self._directory_html(path, entries or [], tree)
            else:
                document = self.renderer.render(self.store.read_text(path), path)
                html = self.composer.document_page(
                    path=path, document=document, tree=tree
                )
            self._write_html(self.output_root / relpath, html)
        except (PortalError, OSError) as exc:
            logger.warning("Skipping page '%s': %s", path or ".", exc)
            self._pages_failed += 1
            return
        self._pages_written += 1

    def _directory_html(
        self, path: str, entries: list[ContentEntry], tree: list[NavigationNode]
    ) -> str:
        index_entry = next(
            (
                entry
                for entry in entries
                if entry.kind is NodeKind.DOCUMENT
                and entry.name == self.config.index_document
            ),
            None,
        )
        index = None
        if index_entry is not None:
            index = self.renderer.render(
                self.store.read_text(index_entry.path), index_entry.path
            )
        return self.composer.directory_page(
            path=path, entries=entries, tree=tree, index=index
        )

    def _write_html(self, target: Path, html: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.link_fixup.apply(html), encoding="utf-8")
        logger.debug("Wrote %s", target)

    def _copy_assets(self, assets: list[str]) -> None:
        for path in assets:
            relpath = output_relpath(path, NodeKind.ASSET)
            if relpath in self._generated:
                logger.warning(
                    "Skipping asset '%s': it would replace a generated file", path
                )
                continue
            target = self.output_root / relpath
            try:
                payload = self.store.read_bytes(path)
                target.parent.mkdir(parents=True, exist_ok=True)
                if target.suffix.lower() == STATIC_DOCUMENT_EXTENSION:
                    text = payload.decode("utf-8")
                    target.write_text(self.link_fixup.apply(text), encoding="utf-8")
                else:
                    target.write_bytes(payload)
            except (PortalError, OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping asset '%s': %s", path, exc)
                continue
            self._assets_copied += 1
            logger.debug("Copied %s", target)

    def _write_client_files(self) -> None:
        for name in CLIENT_ASSETS:
            shutil.copyfile(STATIC_FILES_DIR / name, self.output_root / name)
        (self.output_root / PYGMENTS_STYLESHEET).write_text(
            pygments_stylesheet(self.config.pygments_style), encoding="utf-8"
        )

    def _summarize(self) -> BuildReport:
        files = [path for path in self.output_root.rglob("*") if path.is_file()]
        return BuildReport(
            files=len(files),
            total_bytes=sum(path.stat().st_size for path in files),
            pages_written=self._pages_written,
            pages_failed=self._pages_failed,
            assets_copied=self._assets_copied,
        )


__all__ = ["BuildPhase", "BuildReport", "SiteBuilder", "format_bytes"]
