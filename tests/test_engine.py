"""Tests for the sequential and partitioned parallel runners"""

import math
import threading
import time
from concurrent.futures import BrokenExecutor, ThreadPoolExecutor

import pytest

from fsbench import engine
from fsbench.engine import (
    compute_chunk_size,
    normalize_worker_count,
    run_parallel,
    run_sequential,
    split_into_chunks,
    validate_file_names,
)
from fsbench.errors import InvalidInput, WorkerFault
from fsbench.tasks import ChunkReport, FileStatus


SCENARIO = ['a.txt', 'b.txt', 'c.txt', 'd.txt']
SCENARIO_STATUSES = [FileStatus.SUCCESS, FileStatus.NOT_FOUND, FileStatus.SUCCESS, FileStatus.NOT_FOUND]


def pairs(result):
    return [(o.name, o.status) for o in result.outcomes]


@pytest.fixture
def many_files(bench_dirs):
    """25 files spread across the three candidate directories"""
    names = []
    dirs = list(bench_dirs.values())
    for i in range(25):
        name = f'file_{i:02d}.txt'
        (dirs[i % 3] / name).write_text(f'content {i}\n' * (i + 1))
        names.append(name)
    return names


class TestNormalizeWorkerCount:
    @pytest.mark.parametrize(
        'value, expected',
        [
            (None, 1),
            (0, 1),
            (-3, 1),
            ('abc', 1),
            ('', 1),
            (True, 1),
            ([2], 1),
            (float('nan'), 1),
            (float('inf'), 1),
            (1, 1),
            (4, 4),
            ('4', 4),
            ('2.5', 2),
            (3.9, 3),
        ],
    )
    def test_values(self, value, expected):
        assert normalize_worker_count(value) == expected


class TestValidateFileNames:
    def test_accepts_list_and_tuple(self):
        assert validate_file_names(['a', 'b']) == ['a', 'b']
        assert validate_file_names(('a',)) == ['a']
        assert validate_file_names([]) == []

    @pytest.mark.parametrize('value', [None, 'a.txt', {'a.txt': 1}, 42])
    def test_rejects_non_lists(self, value):
        with pytest.raises(InvalidInput):
            validate_file_names(value)

    def test_rejects_non_string_entries(self):
        with pytest.raises(InvalidInput, match='strings'):
            validate_file_names(['a.txt', 3])

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            validate_file_names(None)


class TestChunking:
    """Chunks are contiguous, ceil(N/K) sized, and cover every name exactly once"""

    @pytest.mark.parametrize('total', [0, 1, 2, 3, 4, 5, 7, 10, 13, 100])
    @pytest.mark.parametrize('workers', [1, 2, 3, 4, 6, 8, 16, 200])
    def test_coverage(self, total, workers):
        names = [f'n{i}' for i in range(total)]
        chunks = split_into_chunks(names, workers)

        flattened = [name for chunk in chunks for name in chunk.names]
        assert flattened == names
        assert [c.index for c in chunks] == list(range(len(chunks)))
        assert len(chunks) <= workers
        assert all(c.tasks for c in chunks)

        if total:
            chunk_size = compute_chunk_size(total, workers)
            assert chunk_size == math.ceil(total / workers)
            assert len(chunks) == min(workers, math.ceil(total / chunk_size))
            assert all(len(c.tasks) == chunk_size for c in chunks[:-1])
            assert 1 <= len(chunks[-1].tasks) <= chunk_size

    def test_scenario_chunks(self):
        chunks = split_into_chunks(SCENARIO, 2)
        assert [c.names for c in chunks] == [['a.txt', 'b.txt'], ['c.txt', 'd.txt']]

    def test_fewer_chunks_than_workers(self):
        """5 names over 4 workers: chunk size 2, so only 3 chunks are needed"""
        chunks = split_into_chunks(['1', '2', '3', '4', '5'], 4)
        assert [c.names for c in chunks] == [['1', '2'], ['3', '4'], ['5']]

    def test_empty(self):
        assert compute_chunk_size(0, 4) == 0
        assert split_into_chunks([], 4) == []


class TestRunSequential:
    def test_scenario(self, scenario_files):
        result = run_sequential(SCENARIO)
        assert [o.name for o in result.outcomes] == SCENARIO
        assert [o.status for o in result.outcomes] == SCENARIO_STATUSES
        assert result.mode == 'sequential'
        assert result.succeeded == 2
        assert result.failed == 2
        assert result.elapsed_ms >= 0

    def test_empty(self, bench_dirs):
        result = run_sequential([])
        assert result.outcomes == []
        assert result.elapsed_ms >= 0

    def test_one_at_a_time(self, many_files, monkeypatch):
        """Never more than one file in flight"""
        in_flight = 0
        peak = 0
        lock = threading.Lock()
        original = engine.process_file

        def tracking(task, dirs):
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            try:
                return original(task, dirs)
            finally:
                with lock:
                    in_flight -= 1

        monkeypatch.setattr(engine, 'process_file', tracking)
        result = run_sequential(many_files)
        assert len(result.outcomes) == len(many_files)
        assert peak == 1

    def test_explicit_search_dirs(self, tmp_path):
        (tmp_path / 'x.txt').write_text('x')
        result = run_sequential(['x.txt', 'y.txt'], [str(tmp_path)])
        assert [o.status for o in result.outcomes] == [FileStatus.SUCCESS, FileStatus.NOT_FOUND]

    def test_invalid_input(self):
        with pytest.raises(InvalidInput):
            run_sequential(None)


class TestRunParallel:
    def test_scenario(self, scenario_files):
        result = run_parallel(SCENARIO, 2)
        assert [o.name for o in result.outcomes] == SCENARIO
        assert [o.status for o in result.outcomes] == SCENARIO_STATUSES
        assert result.mode == 'parallel'
        assert result.workers == 2
        assert result.chunks == 2

    @pytest.mark.parametrize('workers', [1, 2, 3, 4, 7, 25, 100])
    def test_order_and_count(self, many_files, workers):
        result = run_parallel(many_files, workers)
        assert [o.name for o in result.outcomes] == many_files
        assert all(o.ok for o in result.outcomes)

    @pytest.mark.parametrize('workers', [1, 3, 50])
    def test_empty(self, bench_dirs, workers):
        result = run_parallel([], workers)
        assert result.outcomes == []
        assert result.chunks == 0
        assert result.elapsed_ms >= 0

    def test_degradation_matches_sequential(self, scenario_files):
        sequential = pairs(run_sequential(SCENARIO))
        for value in (0, None, 1, 'not-a-number'):
            result = run_parallel(SCENARIO, value)
            assert result.workers == 1
            assert result.chunks == 1
            assert pairs(result) == sequential

    def test_failure_isolation(self, many_files):
        names = list(many_files)
        names.insert(10, 'missing.txt')
        result = run_parallel(names, 4)
        assert len(result.outcomes) == len(names)
        assert result.outcomes[10].status is FileStatus.NOT_FOUND
        assert all(o.ok for i, o in enumerate(result.outcomes) if i != 10)

    def test_idempotent(self, scenario_files):
        first = pairs(run_parallel(SCENARIO, 3))
        second = pairs(run_parallel(SCENARIO, 3))
        assert first == second

    def test_order_restored_when_first_chunk_finishes_last(self, many_files, monkeypatch):
        """Completion order is reversed, output order is still input order"""
        original = engine.process_file
        first_chunk = set(many_files[:5])
        completed = []

        def slow_first_chunk(task, dirs):
            if task.name in first_chunk:
                time.sleep(0.05)
            outcome = original(task, dirs)
            completed.append(task.name)
            return outcome

        monkeypatch.setattr(engine, 'process_file', slow_first_chunk)
        result = run_parallel(many_files, 5)

        assert completed[-1] in first_chunk
        assert [o.name for o in result.outcomes] == many_files

    def test_chunks_run_concurrently(self, many_files, monkeypatch):
        original = engine.process_file
        threads = set()

        def record_thread(task, dirs):
            threads.add(threading.current_thread().name)
            time.sleep(0.01)
            return original(task, dirs)

        monkeypatch.setattr(engine, 'process_file', record_thread)
        run_parallel(many_files, 4)
        assert len(threads) > 1
        assert all(name.startswith('Chunk') for name in threads)

    def test_process_executor(self, scenario_files):
        result = run_parallel(SCENARIO, 2, executor='process')
        assert [o.status for o in result.outcomes] == SCENARIO_STATUSES

    def test_unknown_executor(self, scenario_files):
        with pytest.raises(InvalidInput, match='executor'):
            run_parallel(SCENARIO, 2, executor='fibers')

    def test_invalid_names(self):
        with pytest.raises(InvalidInput):
            run_parallel('a.txt', 2)


class TestWorkerFault:
    """Failures of the execution substrate fail the whole run"""

    def test_exception_escaping_chunk(self, scenario_files, monkeypatch):
        original = engine.process_chunk

        def crashing(chunk, dirs):
            if chunk.index == 1:
                raise RuntimeError('worker crashed')
            return original(chunk, dirs)

        monkeypatch.setattr(engine, 'process_chunk', crashing)
        with pytest.raises(WorkerFault) as exc_info:
            run_parallel(SCENARIO, 2)
        assert exc_info.value.chunk_index == 1
        assert 'worker crashed' in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_malformed_report(self, scenario_files, monkeypatch):
        monkeypatch.setattr(engine, 'process_chunk', lambda chunk, dirs: ChunkReport(index=chunk.index, outcomes=()))
        with pytest.raises(WorkerFault, match='malformed'):
            run_parallel(SCENARIO, 2)

    def test_broken_pool(self, scenario_files, monkeypatch):
        class BrokenPool(ThreadPoolExecutor):
            def submit(self, *args, **kwargs):
                raise BrokenExecutor('pool is gone')

        monkeypatch.setattr(engine, '_make_pool', lambda executor, size: BrokenPool(max_workers=size))
        with pytest.raises(WorkerFault, match='pool is gone'):
            run_parallel(SCENARIO, 2)

    def test_per_file_errors_are_not_faults(self, bench_dirs):
        result = run_parallel(['x', 'y', 'z'], 3)
        assert [o.status for o in result.outcomes] == [FileStatus.NOT_FOUND] * 3
