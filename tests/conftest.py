"""Shared fixtures for docs_portal tests.

``make_content`` writes a content tree from a ``{relative_path: text}`` mapping
so each test declares exactly the files it needs. ``FlakyStore`` wraps the
filesystem store and refuses to list chosen directories, standing in for an
unreadable folder (permission bits do not stop a root test runner).
"""

from __future__ import annotations

import collections.abc as cabc
from pathlib import Path

import pytest

from docs_portal.content_store import ContentEntry, FileSystemContentStore
from docs_portal.errors import ContentAccessError

ContentFactory = cabc.Callable[[cabc.Mapping[str, str | bytes]], Path]

SAMPLE_TREE: dict[str, str | bytes] = {
    "a/index.md": "# Section A\n\nWelcome to section A.\n",
    "a/b.md": "# Page B\n\nSee [C](../c.md).\n",
    "c.md": "# Page C\n\n## Details\n\nBack to [B](a/b.md#page-b).\n",
}


@pytest.fixture
def make_content(tmp_path: Path) -> ContentFactory:
    """Return a factory that materialises a content tree under ``tmp_path``."""

    def _make(files: cabc.Mapping[str, str | bytes]) -> Path:
        root = tmp_path / "content"
        root.mkdir(exist_ok=True)
        for rel_path, payload in files.items():
            target = root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(payload, bytes):
                target.write_bytes(payload)
            else:
                target.write_text(payload, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def sample_root(make_content: ContentFactory) -> Path:
    """Return the ``a/index.md``, ``a/b.md``, ``c.md`` content tree."""
    return make_content(SAMPLE_TREE)


@pytest.fixture
def sample_store(sample_root: Path) -> FileSystemContentStore:
    """Return a filesystem store over the sample tree."""
    return FileSystemContentStore(sample_root)


class FlakyStore(FileSystemContentStore):
    """Filesystem store that fails to list the configured directories."""

    def __init__(self, root: Path, unreadable: cabc.Iterable[str]) -> None:
        super().__init__(root)
        self.unreadable = frozenset(unreadable)

    def list_directory(self, path: str = "") -> list[ContentEntry]:
        if path in self.unreadable:
            raise ContentAccessError(path, "Permission denied")
        return super().list_directory(path)


@pytest.fixture
def flaky_store_factory() -> cabc.Callable[..., FlakyStore]:
    """Return the :class:`FlakyStore` constructor."""
    return FlakyStore

