"""Resolve bare file names against an ordered list of candidate directories.

The candidate list is process-wide configuration. It is built once from the
environment (or set explicitly by the serve command / web lifespan) and then
only read:

1. FSBENCH_SEARCH_DIRS (os.pathsep separated) if set
2. Otherwise: uploads dir, <base>/files, <base>/files2
"""

import logging
import os
from pathlib import Path

from fsbench.errors import NotFoundError
from fsbench.utils import get_base_dir, get_uploads_dir


logger = logging.getLogger(__name__)

FALLBACK_DIR_NAMES = ('files', 'files2')

_search_dirs: tuple[Path, ...] | None = None


def default_search_dirs() -> tuple[Path, ...]:
    """Build the candidate directory list from environment variables."""
    env_dirs = os.getenv('FSBENCH_SEARCH_DIRS')
    if env_dirs:
        return tuple(Path(d.strip()).resolve() for d in env_dirs.split(os.pathsep) if d.strip())

    base = get_base_dir()
    return (get_uploads_dir(), *(base / name for name in FALLBACK_DIR_NAMES))


def set_search_dirs(dirs: list[str] | None) -> tuple[Path, ...]:
    """Replace the process-wide candidate list.

    Args:
        dirs: Directories in search order, or None to rebuild from the environment

    Returns:
        The resolved candidate list now in effect
    """
    global _search_dirs
    if dirs:
        _search_dirs = tuple(Path(d).resolve() for d in dirs)
    else:
        _search_dirs = default_search_dirs()
    return _search_dirs


def get_search_dirs() -> tuple[Path, ...]:
    if _search_dirs is None:
        return set_search_dirs(None)
    return _search_dirs


def locate(name: str, search_dirs: tuple[Path, ...] | None = None) -> Path:
    """Return the first existing ``<dir>/<name>`` across the candidate directories.

    Only existence is checked; the path may still turn out to be unreadable.

    Raises:
        NotFoundError: name is empty or no candidate directory contains it
    """
    dirs = get_search_dirs() if search_dirs is None else search_dirs
    if not name:
        raise NotFoundError(name, tuple(str(d) for d in dirs))

    for directory in dirs:
        candidate = Path(directory) / name
        if os.path.exists(candidate):
            return candidate

    raise NotFoundError(name, tuple(str(d) for d in dirs))
