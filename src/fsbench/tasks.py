"""Work units and results passed between the runners and their callers"""

from dataclasses import dataclass, field
from enum import Enum


class FileStatus(str, Enum):
    """Outcome classification for a single file"""

    SUCCESS = 'success'
    NOT_FOUND = 'not_found'
    READ_ERROR = 'read_error'


@dataclass(frozen=True)
class FileTask:
    """A single file name to locate and read"""

    name: str


@dataclass(frozen=True)
class FileOutcome:
    """Result of processing one FileTask. Produced exactly once per task."""

    name: str
    status: FileStatus
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is FileStatus.SUCCESS

    @property
    def message(self) -> str:
        if self.ok:
            return f'File processed: {self.name}'
        return f'File processing failed: {self.name}'

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'status': self.status.value,
            'detail': self.detail,
            'message': self.message,
        }


@dataclass(frozen=True)
class Chunk:
    """Contiguous slice of the input assigned to one execution context"""

    index: int
    tasks: tuple[FileTask, ...]

    @property
    def names(self) -> list[str]:
        return [task.name for task in self.tasks]


@dataclass(frozen=True)
class ChunkReport:
    """Message a chunk worker sends back to the dispatcher when it is done"""

    index: int
    outcomes: tuple[FileOutcome, ...]
    elapsed: float = 0.0


@dataclass
class RunResult:
    """Complete output of one benchmark run: ordered outcomes plus timing.

    Attributes:
        outcomes: One outcome per input name, in input order
        elapsed_ms: Wall-clock duration of the run in whole milliseconds
        mode: 'sequential' or 'parallel'
        workers: Effective worker count after normalization
        chunks: Number of non-empty chunks dispatched (0 for sequential or empty input)
    """

    outcomes: list[FileOutcome] = field(default_factory=list)
    elapsed_ms: int = 0
    mode: str = 'sequential'
    workers: int = 1
    chunks: int = 0

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded

    @property
    def processing_time(self) -> str:
        return f'{self.elapsed_ms} ms'

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outcomes]

    def to_dict(self) -> dict:
        return {
            'mode': self.mode,
            'workers': self.workers,
            'chunks': self.chunks,
            'elapsed_ms': self.elapsed_ms,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'outcomes': [o.to_dict() for o in self.outcomes],
        }
