"""Read the latest commit of the content repository for the page banner.

The result is an opaque mapping: the builder stores it in the navigation
manifest and the page templates print it, but nothing else interprets it.
When ``git`` is missing or the directory is not a repository the banner is
simply omitted.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

_FIELDS = {
    "hash": ["rev-parse", "--short", "HEAD"],
    "message": ["log", "-1", "--pretty=%B"],
    "dateRelative": ["log", "-1", "--pretty=%ar"],
    "dateISO": ["log", "-1", "--pretty=%aI"],
    "author": ["log", "-1", "--pretty=%an"],
    "branch": ["rev-parse", "--abbrev-ref", "HEAD"],
}


def read_commit_info(repo_path: Path) -> dict[str, str] | None:
    """Return display metadata for ``HEAD`` of the repository at ``repo_path``.

    Parameters
    ----------
    repo_path : Path
        Any directory inside the working tree.

    Returns
    -------
    dict[str, str] or None
        ``hash``, ``message``, ``dateRelative``, ``dateISO``, ``author`` and
        ``branch``; ``None`` when the metadata cannot be read.
    """
    git = shutil.which("git")
    if git is None:
        logger.debug("git not found on PATH; skipping commit banner")
        return None

    info: dict[str, str] = {}
    for key, args in _FIELDS.items():
        try:
            result = subprocess.run(  # noqa: S603 - fixed argument list
                [git, *args],
                cwd=repo_path,
                check=True,
                capture_output=True,
                text=True,
                timeout=10,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("Could not read commit %s from %s: %s", key, repo_path, exc)
            return None
        info[key] = result.stdout.strip()
    return info


__all__ = ["read_commit_info"]
