"""Static site generation for the documentation portal.

The builder walks the content store once, writes one HTML page per directory
and document, copies every other file verbatim, and finishes with the
navigation manifest, the client script, and a ``404.html`` page. Every HTML
file passes through :class:`LinkFixup` so links work under the deploy prefix.
"""

from .link_fixup import LinkFixup
from .orchestrator import BuildPhase, BuildReport, SiteBuilder, format_bytes

__all__ = ["BuildPhase", "BuildReport", "LinkFixup", "SiteBuilder", "format_bytes"]
