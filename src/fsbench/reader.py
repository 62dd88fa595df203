"""Read a single file and classify the outcome"""

import logging
from pathlib import Path

from fsbench.errors import NotFoundError, ReadError
from fsbench.locator import locate
from fsbench.tasks import FileOutcome, FileStatus, FileTask


logger = logging.getLogger(__name__)


def load_bytes(path: Path) -> bytes:
    """Read the whole file into memory.

    Raises:
        ReadError: on any OSError (permissions, file removed after locate, directory, ...)
    """
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as e:
        raise ReadError(str(path), e.strerror or str(e)) from e


def read_file(path: Path, name: str) -> FileOutcome:
    """Read a located file. Content is discarded; only success or failure is reported."""
    try:
        data = load_bytes(path)
    except ReadError as e:
        logger.warning(f'File processing failed: {name}: {e}')
        return FileOutcome(name=name, status=FileStatus.READ_ERROR, detail=e.message)

    logger.debug(f'Read {len(data):,} bytes from {path}')
    return FileOutcome(name=name, status=FileStatus.SUCCESS)


def process_file(task: FileTask, search_dirs: tuple[Path, ...] | None = None) -> FileOutcome:
    """Locate then read one file. Always returns an outcome, never raises for per-file errors."""
    try:
        path = locate(task.name, search_dirs)
    except NotFoundError as e:
        logger.warning(f'File processing failed: {e}')
        return FileOutcome(name=task.name, status=FileStatus.NOT_FOUND, detail=str(e))

    return read_file(path, task.name)
