"""File-access capability scoped to a content root.

The navigation builder, the dynamic renderer, and the static site builder
never touch the filesystem directly; they talk to a :class:`ContentStore`.
:class:`FileSystemContentStore` is the production implementation. Tests may
substitute any object that satisfies the protocol.

Listings are returned sorted by raw name so that every traversal of unchanged
content visits entries in the same order, whatever order the operating system
reports them in.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import posixpath
import typing as typ
from pathlib import Path

from ._constants import DOCUMENT_EXTENSION
from .errors import ContentAccessError, PathResolutionError
from .paths import NodeKind, validate_content_path

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class ContentEntry:
    """One row of a directory listing.

    Attributes
    ----------
    name : str
        Raw file or directory name.
    path : str
        Slash-separated path relative to the content root.
    kind : NodeKind
        ``DIRECTORY``, ``DOCUMENT`` (``.md`` files) or ``ASSET``.
    extension : str | None
        Lower-cased extension including the dot; ``None`` for directories.
    """

    name: str
    path: str
    kind: NodeKind
    extension: str | None

    @property
    def is_directory(self) -> bool:
        """Return ``True`` when the entry is a directory."""
        return self.kind is NodeKind.DIRECTORY

    def to_dict(self) -> dict[str, str | None]:
        """Return the listing contract form used by templates."""
        return {
            "name": self.name,
            "type": "directory" if self.is_directory else "file",
            "path": self.path,
            "extension": self.extension,
        }


class ContentStore(typ.Protocol):
    """Read-only view over the content root."""

    def list_directory(self, path: str = "") -> list[ContentEntry]:
        """Return the entries of the directory at ``path``."""
        ...

    def is_directory(self, path: str) -> bool:
        """Return ``True`` when ``path`` is a directory."""
        ...

    def is_file(self, path: str) -> bool:
        """Return ``True`` when ``path`` is a regular file."""
        ...

    def exists(self, path: str) -> bool:
        """Return ``True`` when ``path`` exists."""
        ...

    def read_text(self, path: str) -> str:
        """Return the UTF-8 contents of the file at ``path``."""
        ...

    def read_bytes(self, path: str) -> bytes:
        """Return the raw contents of the file at ``path``."""
        ...


def classify(name: str, *, is_dir: bool) -> tuple[NodeKind, str | None]:
    """Return the node kind and extension for a directory entry name."""
    if is_dir:
        return NodeKind.DIRECTORY, None
    extension = posixpath.splitext(name)[1].lower() or None
    if extension == DOCUMENT_EXTENSION:
        return NodeKind.DOCUMENT, extension
    return NodeKind.ASSET, extension


def join_content_path(parent: str, name: str) -> str:
    """Join a directory path and an entry name into a root-relative path."""
    return f"{parent}/{name}" if parent else name


class FileSystemContentStore:
    """Serve content from a directory on the local filesystem."""

    def __init__(self, root: Path) -> None:
        """Bind the store to ``root``.

        Parameters
        ----------
        root : Path
            Content root; every path handed to the store is relative to it.
        """
        self.root = root.resolve()

    def _locate(self, path: str) -> Path:
        """Return the absolute filesystem path for a root-relative content path."""
        if path in ("", "."):
            return self.root
        try:
            validate_content_path(path)
        except PathResolutionError as exc:
            raise ContentAccessError(path, str(exc)) from exc
        candidate = self.root.joinpath(*path.split("/"))
        resolved = candidate.resolve()
        if resolved != self.root and self.root not in resolved.parents:
            raise ContentAccessError(path, "resolves outside the content root")
        return candidate

    def list_directory(self, path: str = "") -> list[ContentEntry]:
        """Return the directory entries at ``path`` sorted by name.

        Raises
        ------
        ContentAccessError
            If the directory is missing, unreadable, or outside the root.
        """
        directory = self._locate(path)
        try:
            children = sorted(directory.iterdir(), key=lambda child: child.name)
            entries: list[ContentEntry] = []
            for child in children:
                kind, extension = classify(child.name, is_dir=child.is_dir())
                entries.append(
                    ContentEntry(
                        name=child.name,
                        path=join_content_path(path, child.name),
                        kind=kind,
                        extension=extension,
                    )
                )
        except OSError as exc:
            raise ContentAccessError(path, exc.strerror or str(exc)) from exc
        logger.debug("Listed %d entries under '%s'", len(entries), path or ".")
        return entries

    def is_directory(self, path: str) -> bool:
        """Return ``True`` when ``path`` is a directory inside the root."""
        try:
            return self._locate(path).is_dir()
        except (ContentAccessError, OSError):
            return False

    def is_file(self, path: str) -> bool:
        """Return ``True`` when ``path`` is a regular file inside the root."""
        try:
            return self._locate(path).is_file()
        except (ContentAccessError, OSError):
            return False

    def exists(self, path: str) -> bool:
        """Return ``True`` when ``path`` exists inside the root."""
        try:
            return self._locate(path).exists()
        except (ContentAccessError, OSError):
            return False

    def read_text(self, path: str) -> str:
        """Return the UTF-8 text of the document at ``path``."""
        try:
            return self._locate(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ContentAccessError(path, str(exc)) from exc

    def read_bytes(self, path: str) -> bytes:
        """Return the bytes of the file at ``path``."""
        try:
            return self._locate(path).read_bytes()
        except OSError as exc:
            raise ContentAccessError(path, exc.strerror or str(exc)) from exc


__all__ = [
    "ContentEntry",
    "ContentStore",
    "FileSystemContentStore",
    "classify",
    "join_content_path",
]
