"""Tests for the static site builder."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import msgspec.json as msgspec_json
import pytest
from bs4 import BeautifulSoup

from docs_portal.builder import BuildPhase, SiteBuilder, format_bytes
from docs_portal.config import DeployProfile, default_site_config
from docs_portal.content_store import FileSystemContentStore
from docs_portal.errors import BuildAborted, BuildSetupError

GITHUB = DeployProfile(name="github", prefix="/second-brain", markers=(".nojekyll",))
LOCAL = DeployProfile(name="local")


def _build(
    store: FileSystemContentStore, output: Path, profile: DeployProfile = GITHUB, **kwargs
):
    return SiteBuilder(
        store, output, profile, config=default_site_config(), **kwargs
    ).run()


def _files(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def _manifest(root: Path) -> dict[str, typ.Any]:
    return msgspec_json.decode((root / "navigation.json").read_bytes())


def test_sample_tree_produces_expected_site(sample_store, tmp_path: Path) -> None:
    output = tmp_path / "site"

    report = _build(sample_store, output)

    assert set(_files(output)) == {
        ".nojekyll",
        "404.html",
        "a/b.html",
        "a/index.html",
        "app.js",
        "c.html",
        "index.html",
        "navigation.json",
        "pygments.css",
        "site.css",
    }
    assert report.pages_written == 4
    assert report.pages_failed == 0
    assert report.files == 10
    assert report.total_bytes == sum(len(data) for data in _files(output).values())


def test_manifest_lists_tree_and_pages(sample_store, tmp_path: Path) -> None:
    output = tmp_path / "site"
    _build(sample_store, output, commit_info={"hash": "abc123"})

    manifest = _manifest(output)

    assert list(manifest) == ["tree", "pages", "metadata"]
    assert [node["path"] for node in manifest["tree"]] == ["a", "c.md"]
    assert manifest["pages"] == ["", "a", "a/b.md", "c.md"]
    assert manifest["metadata"]["itemCount"] == 3
    assert manifest["metadata"]["commitInfo"] == {"hash": "abc123"}
    assert manifest["metadata"]["buildTime"]


def test_sibling_link_points_at_built_page(sample_store, tmp_path: Path) -> None:
    output = tmp_path / "site"
    _build(sample_store, output)

    soup = BeautifulSoup((output / "a/b.html").read_text(encoding="utf-8"), "html.parser")
    link = soup.select_one(".markdown-content a[href$='c.html']")

    assert link is not None
    assert link["href"] == "/second-brain/c.html"
    assert (output / "c.html").is_file()


def test_directory_page_includes_index_and_listing(sample_store, tmp_path: Path) -> None:
    output = tmp_path / "site"
    _build(sample_store, output)

    html = (output / "a/index.html").read_text(encoding="utf-8")
    soup = BeautifulSoup(html, "html.parser")

    assert "Welcome to section A." in soup.get_text()
    assert "Directory Contents" in soup.get_text()
    listing = [a["href"] for a in soup.select(".directory-listing a")]
    assert listing == ["/second-brain/a/b.html"]


def test_pages_carry_client_attributes(sample_store, tmp_path: Path) -> None:
    output = tmp_path / "site"
    _build(sample_store, output)

    body = BeautifulSoup(
        (output / "c.html").read_text(encoding="utf-8"), "html.parser"
    ).body

    assert body["data-base-url"] == "/second-brain"
    assert body["data-mode"] == "static"
    assert body["data-manifest-url"] == "/second-brain/navigation.json"
    assert body["data-nav-prerendered"] == "true"
    nav_paths = [li["data-path"] for li in body.select(".navigation li[data-path]")]
    assert nav_paths == ["a", "a/b.md", "c.md"]


def test_build_is_idempotent_apart_from_build_time(sample_store, tmp_path: Path) -> None:
    first, second = tmp_path / "one", tmp_path / "two"
    _build(sample_store, first)
    _build(sample_store, second)

    first_files, second_files = _files(first), _files(second)
    first_manifest, second_manifest = _manifest(first), _manifest(second)

    assert first_files.keys() == second_files.keys()
    for name in first_files:
        if name != "navigation.json":
            assert first_files[name] == second_files[name], name
    first_manifest["metadata"].pop("buildTime")
    second_manifest["metadata"].pop("buildTime")
    assert first_manifest == second_manifest


def test_rebuild_replaces_stale_output(sample_store, tmp_path: Path) -> None:
    output = tmp_path / "site"
    output.mkdir()
    (output / "stale.html").write_text("old", encoding="utf-8")

    _build(sample_store, output, LOCAL)

    assert not (output / "stale.html").exists()
    assert not (output / ".nojekyll").exists()


def test_assets_are_copied_and_html_assets_fixed(make_content, tmp_path: Path) -> None:
    root = make_content(
        {
            "doc.md": "![logo](img/logo.png)\n",
            "img/logo.png": b"\x89PNG\r\n",
            "raw/page.html": '<a href="/content/doc.md">doc</a>',
        }
    )
    output = tmp_path / "site"

    report = _build(FileSystemContentStore(root), output)

    assert (output / "img/logo.png").read_bytes() == b"\x89PNG\r\n"
    assert (output / "raw/page.html").read_text(encoding="utf-8") == (
        '<a href="/second-brain/doc.html">doc</a>'
    )
    assert report.assets_copied == 2


@pytest.mark.parametrize(
    ("asset", "generated", "marker"),
    [
        ("navigation.json", "navigation.json", '"tree"'),
        ("notes.html", "notes.html", "Rendered notes"),
        ("a/index.html", "a/index.html", "Section A"),
        ("app.js", "app.js", "navState"),
        ("404.html", "404.html", "Page not found"),
    ],
)
def test_content_assets_never_replace_generated_files(
    make_content, tmp_path: Path, asset: str, generated: str, marker: str
) -> None:
    root = make_content(
        {
            "notes.md": "# Rendered notes\n",
            "a/index.md": "# Section A\n",
            asset: "legacy export",
        }
    )
    output = tmp_path / "site"

    report = _build(FileSystemContentStore(root), output)

    text = (output / generated).read_text(encoding="utf-8")
    assert marker in text
    assert "legacy export" not in text
    assert report.assets_copied == 0


def test_manifest_survives_a_content_manifest(make_content, tmp_path: Path) -> None:
    root = make_content({"c.md": "# C\n", "navigation.json": '{"bogus": true}'})
    output = tmp_path / "site"

    _build(FileSystemContentStore(root), output)

    assert "tree" in _manifest(output)


def test_not_found_page_has_full_navigation(sample_store, tmp_path: Path) -> None:
    output = tmp_path / "site"
    _build(sample_store, output)

    soup = BeautifulSoup((output / "404.html").read_text(encoding="utf-8"), "html.parser")

    assert "Page not found" in soup.get_text()
    assert [li["data-path"] for li in soup.select(".navigation li[data-path]")] == [
        "a",
        "a/b.md",
        "c.md",
    ]


def test_unreadable_directory_is_skipped(
    sample_root, flaky_store_factory, tmp_path: Path
) -> None:
    store = flaky_store_factory(sample_root, unreadable={"a"})
    output = tmp_path / "site"

    report = _build(store, output)

    assert report.pages_failed == 1
    assert (output / "c.html").is_file()
    assert not (output / "a").exists()


def test_phases_are_reported_in_order(sample_store, tmp_path: Path) -> None:
    seen: list[BuildPhase] = []
    _build(sample_store, tmp_path / "site", on_phase=seen.append)
    assert seen == list(BuildPhase)


def test_abort_is_honoured_at_next_phase_boundary(sample_store, tmp_path: Path) -> None:
    output = tmp_path / "site"
    builder = SiteBuilder(sample_store, output, GITHUB, config=default_site_config())

    def _on_phase(phase: BuildPhase) -> None:
        if phase is BuildPhase.NAVIGATION_BUILT:
            builder.abort()

    builder.on_phase = _on_phase
    with pytest.raises(BuildAborted):
        builder.run()

    assert builder.phase is BuildPhase.NAVIGATION_BUILT
    assert not (output / "navigation.json").exists()


def test_output_equal_to_content_root_is_refused(sample_root, sample_store) -> None:
    with pytest.raises(BuildSetupError):
        _build(sample_store, sample_root)
    assert (sample_root / "c.md").is_file()


def test_output_containing_content_root_is_refused(
    sample_root, sample_store
) -> None:
    with pytest.raises(BuildSetupError):
        _build(sample_store, sample_root.parent)
    assert (sample_root / "c.md").is_file()


def test_missing_content_root_is_refused(tmp_path: Path) -> None:
    store = FileSystemContentStore(tmp_path / "nowhere")
    with pytest.raises(BuildSetupError, match="does not exist"):
        _build(store, tmp_path / "site")


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 B"), (1023, "1023 B"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5.0 MB")],
)
def test_format_bytes(size: int, expected: str) -> None:
    assert format_bytes(size) == expected
