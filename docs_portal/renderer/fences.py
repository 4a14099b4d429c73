"""Fenced code blocks: diagram containers and best-effort syntax highlighting.

Python-Markdown's ``fenced_code`` extension finds the fences and stashes each
one as an escaped ``<pre><code class="language-*">`` block. The treeprocessor
here rewrites those stashed blocks: a fence tagged with a reserved diagram
language becomes ``<div class="mermaid">`` for a client-side renderer, and any
other fence is highlighted with Pygments using the declared language, then
lexer guessing, then a plain ``<pre><code>`` block when highlighting fails.
"""

from __future__ import annotations

import logging
import re
import typing as typ
from html import escape, unescape

from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

if typ.TYPE_CHECKING:
    import xml.etree.ElementTree as etree

    from markdown import Markdown
    from pygments.lexer import Lexer

logger = logging.getLogger(__name__)

FENCED_HTML_PATTERN = re.compile(
    r'^<pre(?: [^>]*)?><code(?: class="(?P<classes>[^"]*)")?>'
    r"(?P<code>.*)</code></pre>\Z",
    re.DOTALL,
)
LANGUAGE_CLASS_PREFIX = "language-"
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


def normalize_fenced_blocks(text: str) -> str:
    """Outdent fence markers and drop ``,attribute`` suffixes from fence labels."""
    without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

    def _strip_labels(match: re.Match[str]) -> str:
        fence, language, _extras = match.groups()
        return f"{fence}{language or ''}"

    return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


def _select_lexer(code: str, language: str | None) -> Lexer:
    """Return a lexer for the declared language, a guessed one, or plain text."""
    if language:
        try:
            return get_lexer_by_name(language)
        except ClassNotFound:
            logger.debug("No lexer named '%s'; guessing from content", language)
    try:
        return guess_lexer(code)
    except ClassNotFound:
        return TextLexer()


def plain_code_block(code: str, language: str | None = None) -> str:
    """Return ``code`` escaped inside an unhighlighted ``<pre><code>`` block."""
    lang_class = f' class="language-{escape(language, quote=True)}"' if language else ""
    return f"<pre><code{lang_class}>{escape(code, quote=False)}</code></pre>"


def diagram_block(code: str, language: str) -> str:
    """Return the container element a client-side diagram renderer picks up."""
    safe_lang = escape(language, quote=True)
    return f'<div class="{safe_lang}">{escape(code.rstrip(), quote=False)}</div>'


def highlight_code(code: str, language: str | None, formatter: HtmlFormatter) -> str:
    """Highlight ``code`` and tag the wrapper with its language.

    Highlighting problems never propagate: any error falls back to
    :func:`plain_code_block`.
    """
    try:
        lexer = _select_lexer(code, language)
        html = highlight(code, lexer, formatter)
    except Exception as exc:  # noqa: BLE001 - highlighting is best effort
        logger.warning("Highlighting failed for language '%s': %s", language, exc)
        return plain_code_block(code, language)
    label = language or (lexer.aliases[0] if lexer.aliases else "text")
    safe_lang = escape(label, quote=True)
    return CODEHILITE_OPEN_TAG.sub(
        f'<div class="codehilite" data-language="{safe_lang}">', html, 1
    )


def build_formatter(style: str) -> HtmlFormatter:
    """Return the shared HTML formatter configuration for ``style``."""
    return HtmlFormatter(style=style, cssclass="codehilite", wrapcode=True)


def fence_language(classes: str | None) -> str | None:
    """Return the language named by a ``language-*`` class, if any."""
    for name in (classes or "").split():
        if name.startswith(LANGUAGE_CLASS_PREFIX):
            return name[len(LANGUAGE_CLASS_PREFIX) :] or None
    return None


class FenceLabelPreprocessor(Preprocessor):
    """Normalize fence markers before ``fenced_code`` looks for blocks."""

    def run(self, lines: list[str]) -> list[str]:
        """Return ``lines`` with outdented fences and bare language labels."""
        return normalize_fenced_blocks("\n".join(lines)).split("\n")


class FenceCountPreprocessor(Preprocessor):
    """Record how many stash entries ``fenced_code`` produced.

    Runs straight after ``fenced_code`` and before raw HTML is stashed, so the
    first ``fenced_blocks`` entries are exactly the fences.
    """

    def __init__(self, md: Markdown, target: FencedBlockTreeprocessor) -> None:
        super().__init__(md)
        self.target = target

    def run(self, lines: list[str]) -> list[str]:
        self.target.fenced_blocks = len(self.md.htmlStash.rawHtmlBlocks)
        return lines


class FencedBlockTreeprocessor(Treeprocessor):
    """Turn the blocks ``fenced_code`` stashed into diagrams or highlighted HTML."""

    def __init__(
        self,
        md: Markdown,
        diagram_languages: frozenset[str],
        formatter: HtmlFormatter,
    ) -> None:
        super().__init__(md)
        self.diagram_languages = diagram_languages
        self.formatter = formatter
        self.fenced_blocks = 0

    def run(self, root: etree.Element) -> None:
        """Rewrite the stashed fence blocks in place."""
        blocks = self.md.htmlStash.rawHtmlBlocks
        for index in range(self.fenced_blocks):
            block = blocks[index]
            match = FENCED_HTML_PATTERN.match(block) if isinstance(block, str) else None
            if match is None:
                continue
            blocks[index] = self.render_block(
                unescape(match.group("code")), fence_language(match.group("classes"))
            )

    def render_block(self, code: str, language: str | None) -> str:
        """Return the diagram container or highlighted block for one fence."""
        if language and language.lower() in self.diagram_languages:
            return diagram_block(code, language.lower())
        return highlight_code(code, language, self.formatter)


class FencedBlockExtension(Extension):
    """Register fence normalization and rendering around ``fenced_code``.

    The ``fenced_code`` extension itself must be enabled on the same instance.
    """

    def __init__(self, diagram_languages: frozenset[str], formatter: HtmlFormatter) -> None:
        super().__init__()
        self.diagram_languages = diagram_languages
        self.formatter = formatter

    def extendMarkdown(self, md: Markdown) -> None:  # noqa: N802
        """Register label cleanup ahead of ``fenced_code`` and the block rewrite."""
        md.preprocessors.register(FenceLabelPreprocessor(md), "portal_fence_labels", 28)
        processor = FencedBlockTreeprocessor(md, self.diagram_languages, self.formatter)
        md.preprocessors.register(
            FenceCountPreprocessor(md, processor), "portal_fence_count", 24
        )
        md.treeprocessors.register(processor, "portal_fenced_blocks", 25)


__all__ = [
    "FencedBlockExtension",
    "FencedBlockTreeprocessor",
    "FenceCountPreprocessor",
    "FenceLabelPreprocessor",
    "build_formatter",
    "diagram_block",
    "fence_language",
    "highlight_code",
    "normalize_fenced_blocks",
    "plain_code_block",
]
