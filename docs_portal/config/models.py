"""Typed dataclasses describing portal configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from docs_portal._constants import (
    DEFAULT_DIAGRAM_LANGUAGES,
    DEFAULT_INDEX_DOCUMENT,
    DEFAULT_MAX_DEPTH,
    HOME_TITLE,
)
from docs_portal.renderer.models import RenderOptions


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(frozen=True, slots=True)
class DeployProfile:
    """A named static deployment target.

    Attributes
    ----------
    name : str
        Profile identifier used on the command line (``github``, ``local``).
    prefix : str
        Mount point of the published site; ``""`` for a root-mounted host.
    markers : tuple[str, ...]
        Empty marker files the host expects in the output root.
    """

    name: str
    prefix: str = ""
    markers: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class SiteConfig:
    """Resolved portal configuration shared by the builder and the server."""

    site_name: str = HOME_TITLE
    content_dir: Path = Path("content")
    output_dir: Path = Path("docs")
    max_depth: int = DEFAULT_MAX_DEPTH
    index_document: str = DEFAULT_INDEX_DOCUMENT
    diagram_languages: tuple[str, ...] = DEFAULT_DIAGRAM_LANGUAGES
    pygments_style: str = "default"
    default_profile: str = "github"
    profiles: dict[str, DeployProfile] = dc.field(default_factory=dict)

    def get_profile(self, name: str | None) -> DeployProfile:
        """Return the named profile or fall back to the configured default."""
        key = name or self.default_profile
        try:
            return self.profiles[key]
        except KeyError as exc:
            available = ", ".join(sorted(self.profiles))
            msg = f"Unknown profile '{key}'. Known profiles: {available}"
            raise KeyError(msg) from exc

    @property
    def render_options(self) -> RenderOptions:
        """Return the renderer settings derived from this configuration."""
        return RenderOptions(
            diagram_languages=frozenset(lang.lower() for lang in self.diagram_languages),
            pygments_style=self.pygments_style,
        )


__all__ = ["DeployProfile", "SiteConfig", "SiteConfigError"]
