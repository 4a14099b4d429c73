"""Navigation state reconciliation shared by the server and the browser script.

A served page carries navigation state from three sources, applied in a fixed
order of precedence:

1. the state baked into the manifest or the server-rendered markup;
2. the active path derived from the current URL, which marks the viewed node
   active and forces every ancestor directory open;
3. per-path expand/collapse preferences the reader persisted earlier, applied
   only to nodes that are not on the active path.

:func:`reconcile_state` implements that merge as a pure function so the
precedence can be tested in isolation; ``static/app.js`` applies the same rules
to the DOM.

Examples
--------
>>> derive_viewed_path("/site/guides/setup.html", "/site")
'guides/setup.md'
>>> derive_viewed_path("/site/guides/", "/site")
'guides'
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from urllib.parse import unquote

from ._constants import DIRECTORY_INDEX_PAGE, DYNAMIC_CONTENT_ROOT
from .navigation import iter_nodes
from .paths import static_to_document_path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .navigation import NavigationNode


@dc.dataclass(frozen=True, slots=True)
class NodeState:
    """Interactive state of one rendered navigation node."""

    is_expanded: bool
    is_active: bool = False


def _decode_path(raw: str) -> str:
    """Percent-decode ``raw``, keeping it verbatim when an escape is malformed."""
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError:
        return raw


def derive_viewed_path(location_path: str, prefix: str = "") -> str | None:
    """Return the content path addressed by a browser location.

    Parameters
    ----------
    location_path : str
        ``window.location.pathname`` of the served page.
    prefix : str, optional
        Static mount prefix (``""`` for root-mounted sites).

    Returns
    -------
    str or None
        Canonical content path (``.md`` for documents, bare directory paths),
        or ``None`` for the home page.
    """
    current = _decode_path(location_path or "")
    normalized_prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""
    if normalized_prefix and (
        current == normalized_prefix or current.startswith(f"{normalized_prefix}/")
    ):
        current = current[len(normalized_prefix) :]
    if current == DYNAMIC_CONTENT_ROOT or current.startswith(f"{DYNAMIC_CONTENT_ROOT}/"):
        current = current[len(DYNAMIC_CONTENT_ROOT) :]
    current = current.strip("/")
    if current == DIRECTORY_INDEX_PAGE:
        return None
    if current.endswith(f"/{DIRECTORY_INDEX_PAGE}"):
        current = current[: -len(DIRECTORY_INDEX_PAGE) - 1]
    else:
        current = static_to_document_path(current)
    return current or None


def _ancestors(path: str) -> list[str]:
    parts = path.split("/")
    return ["/".join(parts[:idx]) for idx in range(1, len(parts))]


def reconcile_state(
    tree: cabc.Iterable[NavigationNode],
    viewed_path: str | None,
    persisted: cabc.Mapping[str, bool] | None = None,
) -> dict[str, NodeState]:
    """Merge manifest, active-path, and persisted state for every node.

    Parameters
    ----------
    tree : Iterable[NavigationNode]
        Navigation tree as built by the server or decoded from the manifest.
    viewed_path : str or None
        Content path of the current page, typically from
        :func:`derive_viewed_path`.
    persisted : Mapping[str, bool], optional
        Stored ``path -> expanded`` preferences.

    Returns
    -------
    dict[str, NodeState]
        Final state keyed by content path.
    """
    nodes = {node.path: node for node in iter_nodes(tree)}
    state = {
        path: NodeState(is_expanded=node.is_expanded) for path, node in nodes.items()
    }

    pinned: set[str] = set()
    if viewed_path:
        for ancestor in _ancestors(viewed_path):
            if ancestor in state:
                state[ancestor] = NodeState(is_expanded=True)
                pinned.add(ancestor)
        if viewed_path in nodes:
            node = nodes[viewed_path]
            state[viewed_path] = NodeState(
                is_expanded=node.is_directory or node.is_expanded, is_active=True
            )
            pinned.add(viewed_path)

    for path, expanded in (persisted or {}).items():
        if path in pinned or path not in state:
            continue
        state[path] = dc.replace(state[path], is_expanded=bool(expanded))
    return state


__all__ = ["NodeState", "derive_viewed_path", "reconcile_state"]
