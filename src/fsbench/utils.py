"""Utility functions for fsbench"""

import logging
import os
from pathlib import Path


def get_int_env(key: str) -> int:
    """Get integer value from environment variable, return 0 if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return 0
    try:
        return int(val)
    except ValueError:
        return 0


def get_str_env(key: str, default: str) -> str:
    """
    Get string from environment variable, return default if not set.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        String value or default
    """
    return os.getenv(key, default)


def get_base_dir() -> Path:
    """Base directory that relative default directories hang off.

    FSBENCH_BASE_DIR if set, otherwise the current working directory.
    """
    return Path(get_str_env('FSBENCH_BASE_DIR', os.getcwd())).resolve()


def get_uploads_dir() -> Path:
    """Directory where uploaded files and generated archives live."""
    uploads = os.getenv('FSBENCH_UPLOADS_DIR')
    if uploads:
        return Path(uploads).resolve()
    return get_base_dir() / 'uploads'


def get_results_dir() -> Path:
    """Directory where experiment reports are written."""
    results = os.getenv('FSBENCH_RESULTS_DIR')
    if results:
        return Path(results).resolve()
    return get_base_dir() / 'results'


def get_default_workers() -> int:
    """Default worker count for CLI runs (FSBENCH_DEFAULT_WORKERS, falls back to 4)."""
    return get_int_env('FSBENCH_DEFAULT_WORKERS') or 4


class ShutdownFilter(logging.Filter):
    """
    Logging filter to suppress shutdown-related error tracebacks.

    Filters out KeyboardInterrupt, CancelledError, and SystemExit errors
    that occur during graceful shutdown of uvicorn/asyncio servers.
    """

    def filter(self, record):
        if record.levelname == 'ERROR':
            msg = str(record.getMessage())
            if any(x in msg for x in ['KeyboardInterrupt', 'CancelledError', 'Shutting down']):
                return False
            if record.exc_info:
                exc_type = record.exc_info[0]
                if exc_type and exc_type.__name__ in ('KeyboardInterrupt', 'CancelledError', 'SystemExit'):
                    return False
        return True


def setup_shutdown_filter():
    """
    Apply ShutdownFilter to uvicorn and asyncio loggers.

    Call this before running uvicorn to suppress shutdown tracebacks.
    """
    shutdown_filter = ShutdownFilter()
    for logger_name in ['uvicorn.error', 'uvicorn', 'asyncio']:
        logger = logging.getLogger(logger_name)
        logger.addFilter(shutdown_filter)
