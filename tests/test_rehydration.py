from __future__ import annotations

import pytest

from docs_portal.content_store import FileSystemContentStore
from docs_portal.navigation import ExpansionPolicy, build_navigation
from docs_portal.rehydration import NodeState, derive_viewed_path, reconcile_state


@pytest.mark.parametrize(
    ("location", "prefix", "expected"),
    [
        ("/second-brain/a/b.html", "/second-brain", "a/b.md"),
        ("/second-brain/a/", "/second-brain", "a"),
        ("/second-brain/a/index.html", "/second-brain", "a"),
        ("/second-brain/", "/second-brain", None),
        ("/second-brain/index.html", "/second-brain", None),
        ("/content/a/b.md", "", "a/b.md"),
        ("/content", "", None),
        ("/c.html", "", "c.md"),
        ("/my%20notes/day%20one.html", "", "my notes/day one.md"),
        ("/second-brain-old/x.html", "/second-brain", "second-brain-old/x.md"),
        ("/notes/bad%E0.html", "", "notes/bad%E0.md"),
    ],
)
def test_derive_viewed_path(location: str, prefix: str, expected: str | None) -> None:
    assert derive_viewed_path(location, prefix) == expected


@pytest.fixture
def collapsed_tree(make_content):
    store = FileSystemContentStore(
        make_content({"a/b/c.md": "x", "a/d.md": "y", "e/f.md": "z", "g.md": "w"})
    )
    return build_navigation(store, policy=ExpansionPolicy(expand_root=False))


def test_manifest_state_is_the_baseline(collapsed_tree) -> None:
    state = reconcile_state(collapsed_tree, None)
    assert state["a"] == NodeState(is_expanded=False)
    assert not any(node.is_active for node in state.values())


def test_active_path_expands_ancestors_and_marks_node(collapsed_tree) -> None:
    state = reconcile_state(collapsed_tree, "a/b/c.md")

    assert state["a"].is_expanded
    assert state["a/b"].is_expanded
    assert state["a/b/c.md"].is_active
    assert not state["e"].is_expanded


def test_viewed_directory_is_expanded_and_active(collapsed_tree) -> None:
    state = reconcile_state(collapsed_tree, "e")
    assert state["e"] == NodeState(is_expanded=True, is_active=True)


def test_persisted_state_applies_off_the_active_path(collapsed_tree) -> None:
    persisted = {"e": True, "a": False, "a/b": False, "unknown": True}

    state = reconcile_state(collapsed_tree, "a/b/c.md", persisted)

    assert state["e"].is_expanded
    assert state["a"].is_expanded
    assert state["a/b"].is_expanded
    assert "unknown" not in state


def test_persisted_state_without_active_path(collapsed_tree) -> None:
    state = reconcile_state(collapsed_tree, None, {"a": True})
    assert state["a"].is_expanded
