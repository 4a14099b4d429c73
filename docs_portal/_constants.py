"""Common literal values used across docs_portal.

These constants keep file names, URL segments, and manifest keys centralized so
the renderer, the builder, templates, and tests import the same values without
drifting. Intended for internal use within the docs_portal package.

Examples
--------
>>> from docs_portal import _constants
>>> _constants.DYNAMIC_CONTENT_ROOT
'/content'
>>> _constants.DOCUMENT_EXTENSION
'.md'
"""

DOCUMENT_EXTENSION = ".md"
STATIC_DOCUMENT_EXTENSION = ".html"
DYNAMIC_CONTENT_ROOT = "/content"
DEFAULT_INDEX_DOCUMENT = "index.md"
DEFAULT_MAX_DEPTH = 3
DEFAULT_DIAGRAM_LANGUAGES = ("mermaid",)

NAVIGATION_MANIFEST = "navigation.json"
NOT_FOUND_PAGE = "404.html"
DIRECTORY_INDEX_PAGE = "index.html"
PYGMENTS_STYLESHEET = "pygments.css"
CLIENT_ASSETS = ("app.js", "site.css")

DIRECTORY_CONTENTS_HEADING = "Directory Contents"
HOME_TITLE = "Documentation Portal"
