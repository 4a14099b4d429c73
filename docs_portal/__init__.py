"""Render a tree of Markdown documents as a navigable documentation portal.

The package serves the same content two ways: on demand under the
``/content/`` scheme (:class:`~docs_portal.dynamic.DynamicSite`) and as a
prefix-aware static site (:class:`~docs_portal.builder.SiteBuilder`). Both
share the navigation builder, the path resolver, and the document renderer.

Exports
-------
- ``app``: Cyclopts application behind the ``portal`` console script.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from docs_portal import main
>>> main()  # doctest: +SKIP
>>> from docs_portal import app
>>> "portal" in app.name
True
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
