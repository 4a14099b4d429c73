"""Load and validate portal configuration YAML.

This subpackage parses the project's ``portal.yaml`` file, merges configured
deploy profiles over the built-in ``github`` and ``local`` targets, anchors the
content and output directories, and produces frozen dataclasses
(:class:`SiteConfig`, :class:`DeployProfile`) that the builder, the dynamic
renderer, and the CLI consume. The primary entry point is
:func:`load_site_config`; :func:`default_site_config` returns the same defaults
without reading a file.

Examples
--------
>>> from docs_portal.config import default_site_config
>>> config = default_site_config()
>>> config.get_profile("github").prefix
'/second-brain'
>>> config.get_profile("local").prefix
''
"""

from .loader import default_site_config, load_site_config
from .models import DeployProfile, SiteConfig, SiteConfigError

__all__ = [
    "DeployProfile",
    "SiteConfig",
    "SiteConfigError",
    "default_site_config",
    "load_site_config",
]
