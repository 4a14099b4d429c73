"""Unit tests for the Markdown document renderer."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from docs_portal.paths import RenderContext
from docs_portal.renderer import (
    DocumentRenderer,
    RenderOptions,
    TocEntry,
    pygments_stylesheet,
    render_document,
    render_toc,
)
from docs_portal.renderer.fences import highlight_code, build_formatter
from docs_portal.renderer.headings import slugify, unique_slug

STATIC = RenderContext.static("/second-brain")
DYNAMIC = RenderContext.dynamic()


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_headings_get_anchors_and_toc_entries() -> None:
    result = render_document("# Intro\n\n## Getting Started\n\ntext\n", STATIC)

    soup = _soup(result.html)
    heading = soup.find("h2")
    assert heading["id"] == "getting-started"
    assert heading.find("a", class_="header-anchor")["href"] == "#getting-started"
    assert result.toc == (
        TocEntry(text="Intro", level=1, slug="intro"),
        TocEntry(text="Getting Started", level=2, slug="getting-started"),
    )
    assert result.title == "Intro"


def test_heading_with_link_still_gets_self_link() -> None:
    result = render_document("# See [docs](x.md)\n", STATIC)

    heading = _soup(result.html).find("h1")
    assert heading["id"] == "see-docs"
    links = [(a["href"], a.get("class")) for a in heading.find_all("a")]
    assert links == [
        ("/second-brain/x.html", None),
        ("#see-docs", ["header-anchor"]),
    ]
    assert heading.find("a").find("a") is None


def test_toc_is_prepended_before_body() -> None:
    result = render_document("## One\n\n### Two\n", STATIC)

    soup = _soup(result.html)
    toc = soup.find("nav", class_="table-of-contents")
    assert toc is not None
    assert result.html.startswith('<nav class="table-of-contents">')
    assert [a["href"] for a in toc.find_all("a")] == ["#one", "#two"]
    assert toc.find("ul").find("ul") is not None


def test_toc_does_not_leak_between_renders() -> None:
    first = render_document("# Alpha\n\n## Shared\n", STATIC)
    second = render_document("# Beta\n\n## Shared\n", STATIC)

    assert [entry.text for entry in first.toc] == ["Alpha", "Shared"]
    assert [entry.text for entry in second.toc] == ["Beta", "Shared"]
    assert second.toc[1].slug == "shared"


def test_duplicate_headings_get_numbered_slugs() -> None:
    result = render_document("## Setup\n\n## Setup\n\n## Setup\n", STATIC)
    assert [entry.slug for entry in result.toc] == ["setup", "setup-2", "setup-3"]


def test_document_without_headings_has_no_toc() -> None:
    result = render_document("Just a paragraph.\n", STATIC)
    assert result.toc == ()
    assert "table-of-contents" not in result.html


@pytest.mark.parametrize("raw", [None, 42, b"# bytes", "", "   \n"])
def test_non_text_or_blank_input_renders_empty(raw: object) -> None:
    result = render_document(raw, STATIC)
    assert result.html == ""
    assert result.toc == ()


def test_md_links_are_rewritten_for_static_context() -> None:
    result = render_document(
        "[Sibling](sibling.md) [Up](../c.md#top) [Web](https://example.com/x.md)"
        " [Anchor](#here)\n",
        STATIC,
        document_path="a/b.md",
    )

    hrefs = [a["href"] for a in _soup(result.html).find_all("a")]
    assert hrefs == [
        "/second-brain/a/sibling.html",
        "/second-brain/c.html#top",
        "https://example.com/x.md",
        "#here",
    ]


def test_md_links_are_rewritten_for_dynamic_context() -> None:
    result = render_document("[Sibling](sibling.md)\n", DYNAMIC, document_path="a/b.md")
    assert _soup(result.html).find("a")["href"] == "/content/a/sibling.md"


def test_link_escaping_root_is_left_untouched() -> None:
    result = render_document("[Out](../../x.md)\n", STATIC, document_path="a/b.md")
    assert _soup(result.html).find("a")["href"] == "../../x.md"


def test_mermaid_fence_becomes_diagram_container() -> None:
    source = "```mermaid\ngraph TD\n  A --> B\n```\n"
    result = render_document(source, STATIC)

    diagram = _soup(result.html).find("div", class_="mermaid")
    assert diagram is not None
    assert "A --> B" in diagram.get_text()
    assert "codehilite" not in result.html


def test_diagram_languages_are_configurable() -> None:
    source = "```mermaid\ngraph TD\n```\n"
    result = render_document(
        source, STATIC, options=RenderOptions(diagram_languages=frozenset())
    )
    assert _soup(result.html).find("div", class_="mermaid") is None


def test_known_language_is_highlighted() -> None:
    result = render_document("```python\nprint('hi')\n```\n", STATIC)

    block = _soup(result.html).find("div", class_="codehilite")
    assert block is not None
    assert block["data-language"] == "python"
    assert "print" in block.get_text()


def test_unknown_language_still_renders_code() -> None:
    result = render_document("```nosuchlang\nhello <world>\n```\n", STATIC)

    soup = _soup(result.html)
    assert "hello <world>" in soup.get_text()
    assert soup.find("script") is None


def test_indented_fence_with_attributes_is_normalized() -> None:
    source = "- item\n\n  ```rust,no_run\n  fn main() {}\n  ```\n"
    result = render_document(source, STATIC)
    block = _soup(result.html).find("div", class_="codehilite")
    assert block["data-language"] == "rust"


def test_attribute_style_fence_keeps_its_language() -> None:
    result = render_document("```{.python}\nprint('hi')\n```\n", STATIC)
    block = _soup(result.html).find("div", class_="codehilite")
    assert block["data-language"] == "python"


def test_tilde_fences_are_highlighted() -> None:
    result = render_document("~~~python\nx = 1\n~~~\n", STATIC)
    assert _soup(result.html).find("div", class_="codehilite") is not None


def test_raw_html_code_blocks_are_left_alone() -> None:
    source = "<pre><code>raw &lt;b&gt;</code></pre>\n\n```python\nx = 1\n```\n"
    result = render_document(source, STATIC)
    assert "<pre><code>raw &lt;b&gt;</code></pre>" in result.html
    assert len(_soup(result.html).select("div.codehilite")) == 1


def test_highlight_failure_falls_back_to_plain_block(mocker) -> None:
    mocker.patch(
        "docs_portal.renderer.fences.highlight", side_effect=RuntimeError("boom")
    )
    html = highlight_code("x < 1", "python", build_formatter("default"))
    assert html == '<pre><code class="language-python">x &lt; 1</code></pre>'


def test_render_failure_returns_escaped_source(mocker) -> None:
    mocker.patch(
        "docs_portal.renderer.markdown_renderer.Markdown.convert",
        side_effect=RuntimeError("boom"),
    )
    result = render_document("# Title <b>\n", STATIC)
    assert result.html == "<pre><code># Title &lt;b&gt;\n</code></pre>"
    assert result.toc == ()


def test_render_toc_nests_relative_to_shallowest_level() -> None:
    html = render_toc(
        [TocEntry("A", 2, "a"), TocEntry("B", 3, "b"), TocEntry("C", 2, "c")]
    )
    soup = _soup(html)
    outer = soup.find("ul")
    assert [li["class"] for li in outer.find_all("li", recursive=False)] == [
        ["toc-level-2"],
        ["toc-level-2"],
    ]
    assert render_toc([]) == ""


def test_slug_helpers() -> None:
    used: set[str] = set()
    assert slugify("Hello, World!  Again") == "hello-world-again"
    assert unique_slug("", used) == "section"
    assert unique_slug("", used) == "section-2"


def test_document_renderer_binds_context() -> None:
    renderer = DocumentRenderer(STATIC)
    result = renderer.render("[x](y.md)\n", "dir/z.md")
    assert _soup(result.html).find("a")["href"] == "/second-brain/dir/y.html"
    assert ".codehilite" in renderer.stylesheet
    assert renderer.stylesheet == pygments_stylesheet("default")
