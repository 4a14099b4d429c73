"""Final link rewrite applied to every HTML file the static build emits.

The renderer already produces static hrefs for Markdown links it understands.
This pass catches what it cannot see: raw HTML embedded in documents, links
inside copied ``.html`` assets, and Markdown-style ``](page.md)`` text that
survived as literal characters. Code samples inside ``<pre>`` and ``<code>``
are left as written.

Examples
--------
>>> LinkFixup("/docs").apply('<a href="/content/guide/setup.md">Setup</a>')
'<a href="/docs/guide/setup.html">Setup</a>'
"""

from __future__ import annotations

import dataclasses as dc
import re

from docs_portal._constants import DYNAMIC_CONTENT_ROOT

_LOCAL_MD_HREF = re.compile(
    r'href="(?![A-Za-z][A-Za-z0-9+.-]*:)(?!//)([^"#?]+)\.md((?:[?#][^"]*)?)"'
)
_MARKDOWN_MD_LINK = re.compile(
    r"\]\((?![A-Za-z][A-Za-z0-9+.-]*:)(?!//)([^)\s#?]+)\.md((?:[?#][^)\s]*)?)\)"
)
_CODE_SPAN = re.compile(r"(<pre\b.*?</pre>|<code\b.*?</code>)", re.DOTALL | re.IGNORECASE)


@dc.dataclass(frozen=True, slots=True)
class LinkFixup:
    """Rewrite dynamic-scheme and ``.md`` links into the static scheme.

    Attributes
    ----------
    prefix : str
        Deploy prefix such as ``/second-brain``; ``""`` for root-mounted
        sites.
    """

    prefix: str = ""

    def __post_init__(self) -> None:
        """Normalize the prefix to ``""`` or ``/segment``."""
        stripped = self.prefix.strip("/")
        object.__setattr__(self, "prefix", f"/{stripped}" if stripped else "")

    def apply(self, html: str) -> str:
        """Return ``html`` with every rewrite rule applied.

        Applying the pass to its own output changes nothing.
        """
        root = DYNAMIC_CONTENT_ROOT
        fixed = html.replace(f'href="{root}/', f'href="{self.prefix}/')
        fixed = fixed.replace(f'href="{root}"', f'href="{self.prefix}/"')
        fixed = fixed.replace(f'src="{root}/', f'src="{self.prefix}/')
        fixed = _LOCAL_MD_HREF.sub(r'href="\1.html\2"', fixed)
        parts = _CODE_SPAN.split(fixed)
        for index in range(0, len(parts), 2):
            parts[index] = _MARKDOWN_MD_LINK.sub(r"](\1.html\2)", parts[index])
        return "".join(parts)


__all__ = ["LinkFixup"]
