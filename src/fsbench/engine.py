"""Batch file-processing engine.

Two runners share the same per-file algorithm (locate, then read):

- run_sequential: one file in flight at a time, input order. This is the
  baseline the parallel runner is compared against.
- run_parallel: the input is split into ceil(N / K) sized contiguous chunks,
  every chunk is submitted to its own worker, each worker walks its chunk
  sequentially and reports a ChunkReport back through its future. The
  dispatcher joins on all futures and writes each report into the slot of
  its chunk index, so the final outcome list is in input order no matter
  which chunk finished first.

Per-file failures never escape a runner, they become outcomes. A failure of
the worker itself (exception escaping a chunk, broken process pool) fails the
whole run with WorkerFault.
"""

import logging
import math
from collections.abc import Callable, Sequence
from concurrent.futures import BrokenExecutor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from pathlib import Path
from time import perf_counter
from typing import Any

# Replaced with the real metrics module by fsbench.web
from fsbench.cli import prometheus as prom
from fsbench.errors import InvalidInput, WorkerFault
from fsbench.locator import get_search_dirs
from fsbench.reader import process_file
from fsbench.tasks import Chunk, ChunkReport, FileOutcome, FileTask, RunResult


logger = logging.getLogger(__name__)

EXECUTORS = ('thread', 'process')


def validate_file_names(names: Any) -> list[str]:
    """Check that names is a list of strings.

    Raises:
        InvalidInput: names is missing, not a list/tuple, or holds non-string entries
    """
    if names is None or not isinstance(names, (list, tuple)):
        raise InvalidInput('A list of file names is required')
    for name in names:
        if not isinstance(name, str):
            raise InvalidInput(f'File names must be strings, got {type(name).__name__}: {name!r}')
    return list(names)


def normalize_worker_count(value: Any) -> int:
    """Coerce a caller-supplied worker count to a positive int.

    Missing, zero, negative or non-numeric values degrade to 1 rather than
    raising. Numeric strings and floats are truncated ("2.5" -> 2).
    """
    if value is None or isinstance(value, bool):
        return 1
    try:
        count = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return count if count >= 1 else 1


def compute_chunk_size(total: int, worker_count: int) -> int:
    """ceil(total / worker_count); 0 for empty input."""
    if total <= 0:
        return 0
    return math.ceil(total / worker_count)


def split_into_chunks(names: Sequence[str], worker_count: int) -> list[Chunk]:
    """Split names into contiguous chunks of compute_chunk_size() names.

    The last chunk may be shorter. Chunks that would fall past the end of the
    list are not created, so at most worker_count chunks are returned and
    every name appears in exactly one chunk.
    """
    chunk_size = compute_chunk_size(len(names), worker_count)
    if chunk_size == 0:
        return []

    return [
        Chunk(index=i, tasks=tuple(FileTask(name) for name in names[start : start + chunk_size]))
        for i, start in enumerate(range(0, len(names), chunk_size))
    ]


def process_chunk(chunk: Chunk, search_dirs: tuple[Path, ...]) -> ChunkReport:
    """Worker body: process every task of one chunk in order."""
    start_time = perf_counter()
    outcomes = tuple(process_file(task, search_dirs) for task in chunk.tasks)
    elapsed = perf_counter() - start_time
    logger.debug(f'[CHUNK] {chunk.index}: {len(outcomes)} files in {elapsed:.3f}s')
    return ChunkReport(index=chunk.index, outcomes=outcomes, elapsed=elapsed)


def timed_run(
    mode: str,
    total: int,
    body: Callable[[], tuple[list[FileOutcome], int]],
    workers: int = 1,
) -> RunResult:
    """Measure wall time around body() and package it into a RunResult.

    Args:
        mode: 'sequential' or 'parallel', used for logs and metrics
        total: Number of names submitted
        body: Callable returning (ordered outcomes, number of chunks dispatched)
        workers: Effective worker count to report

    Raises:
        WorkerFault: propagated from body after being recorded
    """
    start_time = perf_counter()
    try:
        outcomes, chunks = body()
    except WorkerFault:
        duration = perf_counter() - start_time
        prom.record_run(mode, 'worker_fault', duration, total, [])
        prom.record_error('worker_fault')
        raise

    duration = perf_counter() - start_time
    result = RunResult(
        outcomes=outcomes,
        elapsed_ms=max(0, round(duration * 1000)),
        mode=mode,
        workers=workers,
        chunks=chunks,
    )
    prom.record_run(mode, 'success', duration, total, outcomes, chunks)
    logger.info(
        f'[{mode.upper()}] {total} files ({result.succeeded} ok, {result.failed} failed) '
        f'in {result.elapsed_ms} ms'
    )
    return result


def run_sequential(names: Any, search_dirs: Sequence[str | Path] | None = None) -> RunResult:
    """Process names one at a time, in input order.

    Raises:
        InvalidInput: names is not a list of strings
    """
    names = validate_file_names(names)
    dirs = _resolve_dirs(search_dirs)
    logger.debug(f'[SEQUENTIAL] Processing {len(names)} files')

    def body() -> tuple[list[FileOutcome], int]:
        return [process_file(FileTask(name), dirs) for name in names], 0

    return timed_run('sequential', len(names), body)


def run_parallel(
    names: Any,
    worker_count: Any = None,
    search_dirs: Sequence[str | Path] | None = None,
    executor: str = 'thread',
) -> RunResult:
    """Process names in worker_count contiguous chunks concurrently.

    Args:
        names: File names to process
        worker_count: Requested worker count; normalized with normalize_worker_count()
        search_dirs: Candidate directories, defaults to the process-wide list
        executor: 'thread' or 'process'

    Returns:
        RunResult with outcomes in input order

    Raises:
        InvalidInput: names is not a list of strings, or executor is unknown
        WorkerFault: a chunk worker failed
    """
    names = validate_file_names(names)
    if executor not in EXECUTORS:
        raise InvalidInput(f'Unknown executor {executor!r}, expected one of: {", ".join(EXECUTORS)}')

    workers = normalize_worker_count(worker_count)
    dirs = _resolve_dirs(search_dirs)

    def body() -> tuple[list[FileOutcome], int]:
        chunks = split_into_chunks(names, workers)
        if not chunks:
            return [], 0

        pool_size = min(workers, len(chunks))
        logger.debug(
            f'[PARALLEL] Dispatching {len(names)} files as {len(chunks)} chunks '
            f'of {len(chunks[0].tasks)} to {pool_size} {executor} workers'
        )

        slots: list[tuple[FileOutcome, ...] | None] = [None] * len(chunks)
        prom.active_workers.inc(pool_size)
        try:
            with _make_pool(executor, pool_size) as pool:
                future_to_chunk = {pool.submit(process_chunk, chunk, dirs): chunk for chunk in chunks}

                for future in as_completed(future_to_chunk):
                    chunk = future_to_chunk[future]
                    try:
                        report = future.result()
                    except Exception as e:
                        prom.worker_faults_total.inc()
                        logger.error(f'[PARALLEL] Chunk {chunk.index} worker failed: {e}')
                        raise WorkerFault(f'Worker for chunk {chunk.index} failed: {e}', chunk.index) from e

                    if report.index != chunk.index or len(report.outcomes) != len(chunk.tasks):
                        prom.worker_faults_total.inc()
                        raise WorkerFault(f'Worker for chunk {chunk.index} returned a malformed report', chunk.index)
                    slots[report.index] = report.outcomes
        except BrokenExecutor as e:
            prom.worker_faults_total.inc()
            raise WorkerFault(f'Worker pool failed: {e}') from e
        finally:
            prom.active_workers.dec(pool_size)

        return [outcome for slot in slots for outcome in slot], len(chunks)

    return timed_run('parallel', len(names), body, workers=workers)


def _make_pool(executor: str, pool_size: int):
    if executor == 'thread':
        return ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix='Chunk')
    return ProcessPoolExecutor(max_workers=pool_size)


def _resolve_dirs(search_dirs: Sequence[str | Path] | None) -> tuple[Path, ...]:
    if search_dirs is None:
        return get_search_dirs()
    return tuple(Path(d) for d in search_dirs)
