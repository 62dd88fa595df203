"""Exception hierarchy for the benchmark engine.

Per-file errors (NotFoundError, ReadError) are always recovered into a
FileOutcome by the reader. WorkerFault and InvalidInput propagate to the
caller and fail the whole run.
"""


class BenchError(Exception):
    """Base class for all fsbench errors"""


class NotFoundError(BenchError):
    """File is absent from every candidate directory"""

    def __init__(self, name: str, searched: tuple[str, ...] = ()):
        self.name = name
        self.searched = searched
        super().__init__(f'File not found in any search directory: {name!r}')


class ReadError(BenchError):
    """I/O failure while reading a located file"""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f'Failed to read {path}: {message}')


class WorkerFault(BenchError):
    """The concurrent execution substrate failed, not an individual file"""

    def __init__(self, message: str, chunk_index: int | None = None):
        self.chunk_index = chunk_index
        super().__init__(message)


class InvalidInput(BenchError, ValueError):
    """Caller supplied unusable arguments; raised before any processing"""
