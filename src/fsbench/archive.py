"""Bundle uploaded files into a zip archive"""

import logging
import os
from pathlib import Path
from time import time
from zipfile import ZIP_DEFLATED, ZipFile


logger = logging.getLogger(__name__)

COMPRESSION_LEVEL = 9


def safe_upload_name(filename: str | None) -> str:
    """Strip directory components from a client-supplied file name.

    Raises:
        ValueError: nothing usable is left
    """
    name = os.path.basename((filename or '').replace('\\', '/'))
    if name in ('', '.', '..'):
        raise ValueError(f'Invalid upload file name: {filename!r}')
    return name


def archive_files(files: list[Path], dest_dir: Path, remove_sources: bool = True) -> Path:
    """Zip files into dest_dir/archive_<epoch-ms>.zip.

    Each file is stored under its base name. Source files are deleted after
    the archive is closed; a failed delete is logged and does not fail the call.

    Returns:
        Path to the created archive
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    archive_path = dest_dir / f'archive_{int(time() * 1000)}.zip'

    with ZipFile(archive_path, 'w', ZIP_DEFLATED, compresslevel=COMPRESSION_LEVEL) as zip_file:
        for path in files:
            zip_file.write(path, arcname=path.name)

    logger.info(f'Archive created: {archive_path} ({archive_path.stat().st_size:,} bytes)')

    if remove_sources:
        remove_files(files)

    return archive_path


def remove_files(files: list[Path]) -> None:
    """Delete files, logging and skipping any that cannot be removed."""
    for path in files:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f'Failed to delete uploaded file {path}: {e}')
