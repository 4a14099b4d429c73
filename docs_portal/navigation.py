"""Navigation tree builder.

Builds the sidebar tree from the content store. The tree is a view over the
directory hierarchy: only directories and Markdown documents appear, each node
carries its display name plus the expand/active state for one viewer context,
and siblings are ordered directories first, then case-insensitively by display
name. A tree is rebuilt for every page render and every static build; nodes
are frozen and never shared between requests.

Examples
--------
>>> from docs_portal.navigation import format_display_name
>>> format_display_name("getting_started-guide.md")
'Getting Started Guide'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import re
import typing as typ

from ._constants import DEFAULT_INDEX_DOCUMENT, DEFAULT_MAX_DEPTH, DOCUMENT_EXTENSION
from .errors import ContentAccessError
from .paths import NodeKind

if typ.TYPE_CHECKING:
    from .content_store import ContentEntry, ContentStore

logger = logging.getLogger(__name__)

_WORD_START = re.compile(r"\b\w")
_SEPARATORS = re.compile(r"[-_]")


class NavigationNodeDict(typ.TypedDict):
    """Manifest representation of a navigation node."""

    name: str
    path: str
    kind: str
    children: list[NavigationNodeDict]
    hasChildren: bool
    isExpanded: bool
    isActive: bool
    depth: int


@dc.dataclass(frozen=True, slots=True)
class NavigationNode:
    """Renderable, state-annotated projection of one content path."""

    name: str
    path: str
    kind: NodeKind
    children: tuple[NavigationNode, ...] = ()
    has_children: bool = False
    is_expanded: bool = False
    is_active: bool = False
    depth: int = 0

    @property
    def is_directory(self) -> bool:
        """Return ``True`` for directory nodes."""
        return self.kind is NodeKind.DIRECTORY

    def to_dict(self) -> NavigationNodeDict:
        """Convert to the camelCase dictionary stored in the manifest."""
        return {
            "name": self.name,
            "path": self.path,
            "kind": str(self.kind),
            "children": [child.to_dict() for child in self.children],
            "hasChildren": self.has_children,
            "isExpanded": self.is_expanded,
            "isActive": self.is_active,
            "depth": self.depth,
        }


@dc.dataclass(frozen=True, slots=True)
class ExpansionPolicy:
    """Default expansion rules applied when no active path forces a node open.

    Attributes
    ----------
    expand_root : bool
        Expand every directory at depth 0.
    default_expanded : bool
        Expand every directory regardless of depth.
    """

    expand_root: bool = True
    default_expanded: bool = False


@dc.dataclass(frozen=True, slots=True)
class BreadcrumbItem:
    """Ancestor link shown above a page."""

    name: str
    path: str


def format_display_name(filename: str) -> str:
    """Return the human-readable label for a raw file or directory name."""
    stem = filename
    if stem.endswith(DOCUMENT_EXTENSION):
        stem = stem[: -len(DOCUMENT_EXTENSION)]
    spaced = _SEPARATORS.sub(" ", stem)
    return _WORD_START.sub(lambda match: match.group(0).upper(), spaced)


def _on_active_path(path: str, viewed_path: str | None) -> bool:
    """Return ``True`` when ``path`` is ``viewed_path`` or one of its ancestors."""
    if not viewed_path:
        return False
    return viewed_path == path or viewed_path.startswith(f"{path}/")


def _sort_key(node: NavigationNode) -> tuple[int, str, str]:
    return (0 if node.is_directory else 1, node.name.casefold(), node.path)


def build_navigation(
    store: ContentStore,
    root_path: str = "",
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    current_depth: int = 0,
    viewed_path: str | None = None,
    policy: ExpansionPolicy | None = None,
    index_document: str = DEFAULT_INDEX_DOCUMENT,
) -> list[NavigationNode]:
    """Build the ordered navigation tree below ``root_path``.

    Parameters
    ----------
    store : ContentStore
        Source of directory listings.
    root_path : str, optional
        Root-relative directory to start from; ``""`` is the content root.
    max_depth : int, optional
        Listing stops once ``current_depth`` reaches this bound; deeper
        directories appear with an empty child list.
    current_depth : int, optional
        Depth of the nodes listed by this call.
    viewed_path : str or None, optional
        Path of the page being viewed. Every directory on the way to it is
        expanded and the matching node is marked active.
    policy : ExpansionPolicy or None, optional
        Expansion defaults. When ``None``, viewer-driven builds keep the root
        collapsed and context-free builds expand it.
    index_document : str, optional
        File name that represents its directory; it is not listed as a child.

    Returns
    -------
    list[NavigationNode]
        Sibling nodes, directories first, then by case-insensitive display
        name. A subtree that cannot be listed contributes an empty list.
    """
    if current_depth >= max_depth:
        return []
    if policy is None:
        policy = ExpansionPolicy(expand_root=viewed_path is None)

    try:
        entries = store.list_directory(root_path)
    except ContentAccessError as exc:
        logger.warning(
            "Could not build navigation for '%s': %s", root_path or ".", exc
        )
        return []

    nodes = [
        node
        for entry in entries
        if (
            node := _build_node(
                store,
                entry,
                max_depth=max_depth,
                depth=current_depth,
                viewed_path=viewed_path,
                policy=policy,
                index_document=index_document,
            )
        )
        is not None
    ]
    return sorted(nodes, key=_sort_key)


def _build_node(
    store: ContentStore,
    entry: ContentEntry,
    *,
    max_depth: int,
    depth: int,
    viewed_path: str | None,
    policy: ExpansionPolicy,
    index_document: str,
) -> NavigationNode | None:
    """Return the navigation node for ``entry`` or ``None`` when it is skipped."""
    match entry.kind:
        case NodeKind.DIRECTORY:
            children = tuple(
                build_navigation(
                    store,
                    entry.path,
                    max_depth=max_depth,
                    current_depth=depth + 1,
                    viewed_path=viewed_path,
                    policy=policy,
                    index_document=index_document,
                )
            )
            expanded = (
                _on_active_path(entry.path, viewed_path)
                or (depth == 0 and policy.expand_root)
                or policy.default_expanded
            )
            return NavigationNode(
                name=format_display_name(entry.name),
                path=entry.path,
                kind=NodeKind.DIRECTORY,
                children=children,
                has_children=bool(children),
                is_expanded=expanded,
                is_active=entry.path == viewed_path,
                depth=depth,
            )
        case NodeKind.DOCUMENT:
            if entry.name == index_document:
                return None
            return NavigationNode(
                name=format_display_name(entry.name),
                path=entry.path,
                kind=NodeKind.DOCUMENT,
                is_active=entry.path == viewed_path,
                depth=depth,
            )
        case NodeKind.ASSET:
            return None
        case _:
            typ.assert_never(entry.kind)


def iter_nodes(tree: cabc.Iterable[NavigationNode]) -> cabc.Iterator[NavigationNode]:
    """Yield every node of ``tree`` depth-first in sibling order."""
    for node in tree:
        yield node
        yield from iter_nodes(node.children)


def count_nodes(tree: cabc.Iterable[NavigationNode]) -> int:
    """Return the total number of nodes in ``tree``."""
    return sum(1 for _ in iter_nodes(tree))


def navigable_pages(tree: cabc.Iterable[NavigationNode]) -> list[str]:
    """Return the content path of every page reachable from the navigation.

    The content root (``""``) comes first, followed by each node in
    depth-first order.
    """
    return ["", *(node.path for node in iter_nodes(tree))]


def build_breadcrumb(path: str) -> list[BreadcrumbItem]:
    """Return the ancestor trail for ``path``, root first, ``path`` included."""
    parts = [part for part in path.split("/") if part]
    return [
        BreadcrumbItem(name=format_display_name(part), path="/".join(parts[: idx + 1]))
        for idx, part in enumerate(parts)
    ]


__all__ = [
    "BreadcrumbItem",
    "ExpansionPolicy",
    "NavigationNode",
    "NavigationNodeDict",
    "build_breadcrumb",
    "build_navigation",
    "count_nodes",
    "format_display_name",
    "iter_nodes",
    "navigable_pages",
]
