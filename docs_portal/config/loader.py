"""Load portal configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    DEFAULT_PROFILES,
    _merge_profiles,
    _optional_str,
    _positive_int,
    _string_list,
)
from .models import SiteConfig, SiteConfigError


def default_site_config() -> SiteConfig:
    """Return the configuration used when no YAML file is supplied."""
    return SiteConfig(profiles=dict(DEFAULT_PROFILES))


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the content tree and deploy targets.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/portal.yaml``). Relative ``content_dir`` and ``output_dir``
        values are resolved against the file's directory's parent when the
        file lives in a ``config/`` folder, otherwise against its directory.

    Returns
    -------
    SiteConfig
        Parsed configuration with built-in profiles merged in.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If a value has the wrong type or the default profile is unknown.

    Examples
    --------
    >>> from pathlib import Path
    >>> from docs_portal.config import load_site_config
    >>> config = load_site_config(Path("config/portal.yaml"))  # doctest: +SKIP
    >>> config.get_profile("local").prefix  # doctest: +SKIP
    ''
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = raw.get("defaults", {}) or {}
    if not isinstance(defaults, dict):
        msg = "'defaults' must be a mapping."
        raise SiteConfigError(msg)

    base = default_site_config()
    project_root = _project_root(path)
    profiles = _merge_profiles(raw.get("profiles"))
    default_profile = _optional_str(defaults.get("default_profile")) or base.default_profile
    if default_profile not in profiles:
        msg = f"Default profile '{default_profile}' is not defined."
        raise SiteConfigError(msg)

    diagram_languages = base.diagram_languages
    if "diagram_languages" in defaults:
        diagram_languages = _string_list(
            defaults["diagram_languages"], field="diagram_languages"
        )

    return SiteConfig(
        site_name=_optional_str(defaults.get("site_name")) or base.site_name,
        content_dir=_resolve_dir(
            project_root, defaults.get("content_dir"), base.content_dir
        ),
        output_dir=_resolve_dir(project_root, defaults.get("output_dir"), base.output_dir),
        max_depth=_positive_int(
            defaults.get("max_depth", base.max_depth), field="max_depth"
        ),
        index_document=_optional_str(defaults.get("index_document"))
        or base.index_document,
        diagram_languages=diagram_languages,
        pygments_style=_optional_str(defaults.get("pygments_style"))
        or base.pygments_style,
        default_profile=default_profile,
        profiles=profiles,
    )


def _project_root(config_path: Path) -> Path:
    """Return the directory relative paths in ``config_path`` are anchored to."""
    parent = config_path.resolve().parent
    return parent.parent if parent.name == "config" else parent


def _resolve_dir(root: Path, value: object | None, fallback: Path) -> Path:
    """Return ``value`` as a path anchored at ``root`` when it is relative."""
    text = _optional_str(value)
    candidate = Path(text) if text else fallback
    return candidate if candidate.is_absolute() else root / candidate


__all__ = ["default_site_config", "load_site_config"]
