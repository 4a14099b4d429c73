"""Cyclopts CLI entrypoint for building and previewing the documentation portal.

The ``portal`` console script defined here renders the content tree into a
static site for one deploy profile (``portal build``) or renders a single
request path through the dynamic ``/content/`` scheme (``portal page``). Every
option can also be supplied through an ``INPUT_``-prefixed environment
variable so the same command runs unchanged in CI.

Examples
--------
Build the GitHub Pages flavour of the site:

>>> from docs_portal.cli import app
>>> app(["build", "--profile", "github"])  # doctest: +SKIP

Preview one document on stdout:

>>> app(["page", "/content/guides/setup.md"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .builder import SiteBuilder
from .commit_info import read_commit_info
from .config import default_site_config, load_site_config
from .content_store import FileSystemContentStore
from .dynamic import DynamicSite

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .config import SiteConfig

DEFAULT_CONFIG = Path("config/portal.yaml")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="portal", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT
    )


def _load_config(config: Path | None) -> SiteConfig:
    """Load ``config`` or the default file, falling back to built-in defaults."""
    if config is not None:
        return load_site_config(config)
    if DEFAULT_CONFIG.exists():
        return load_site_config(DEFAULT_CONFIG)
    return default_site_config()


@app.command(help="Build the static site for a deploy profile.")
def build(
    *,
    profile: typ.Annotated[
        str | None,
        Parameter(help="Deploy profile (github, local)", env_var="INPUT_PROFILE"),
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to portal config", env_var="INPUT_CONFIG")
    ] = None,
    content_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the content folder", env_var="INPUT_CONTENT_DIR"),
    ] = None,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Log every file written", env_var="INPUT_VERBOSE")
    ] = False,
) -> None:
    """Render the content tree into a deployable static site.

    Parameters
    ----------
    profile : str or None, optional
        Deploy profile name; the configured ``default_profile`` when ``None``.
    config : Path or None, optional
        Path to ``portal.yaml``. ``config/portal.yaml`` is used when present,
        otherwise the built-in defaults.
    content_dir : Path or None, optional
        Content root overriding the configured one.
    output_dir : Path or None, optional
        Output root overriding the configured one. It is deleted and
        recreated.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    KeyError
        If ``profile`` names an unknown deploy profile.
    BuildSetupError
        If the output root cannot be prepared.
    """
    _configure_logging(verbose=verbose)
    site_config = _load_config(config)
    deploy_profile = site_config.get_profile(profile)
    content_root = content_dir or site_config.content_dir
    output_root = output_dir or site_config.output_dir

    builder = SiteBuilder(
        FileSystemContentStore(content_root),
        output_root,
        deploy_profile,
        config=site_config,
        commit_info=read_commit_info(content_root),
    )
    report = builder.run()
    print(
        f"wrote {report.files} files ({report.size_label}) "
        f"to {_format_path(output_root)}"
    )


@app.command(help="Render one request path through the dynamic /content/ scheme.")
def page(
    path: typ.Annotated[str, Parameter(help="Request path, e.g. /content/a.md")],
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to portal config", env_var="INPUT_CONFIG")
    ] = None,
    content_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the content folder", env_var="INPUT_CONTENT_DIR"),
    ] = None,
) -> None:
    """Print the response for ``path`` and exit non-zero when it is not found.

    Pages are printed as HTML; content assets are written to stdout as raw
    bytes.

    Parameters
    ----------
    path : str
        Request path such as ``/``, ``/content/guides`` or
        ``/content/guides/setup.md``.
    config : Path or None, optional
        Path to ``portal.yaml``; defaults as for :func:`build`.
    content_dir : Path or None, optional
        Content root overriding the configured one.

    Raises
    ------
    SystemExit
        With status ``1`` when the path does not resolve to a page.
    """
    _configure_logging(verbose=False)
    site_config = _load_config(config)
    content_root = content_dir or site_config.content_dir
    site = DynamicSite(
        FileSystemContentStore(content_root),
        site_config,
        commit_info=read_commit_info(content_root),
    )
    response = site.render(path)
    if response.payload is not None:
        sys.stdout.buffer.write(response.payload)
    else:
        print(response.html)
    if not response.ok:
        raise SystemExit(1)


def main() -> None:
    """Invoke the Cyclopts application that powers the ``portal`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
