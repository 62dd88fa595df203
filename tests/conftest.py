"""Pytest configuration and shared fixtures for fsbench tests.

This module provides auto-use fixtures that ensure test isolation,
particularly for directory configuration read from the environment.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from fsbench import locator


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Auto-use fixture that points every fsbench directory at a fresh temp dir.

    This fixture:
    1. Creates a temporary base directory
    2. Sets FSBENCH_BASE_DIR to it and clears other FSBENCH_* overrides
    3. Resets the process-wide search directory list
    4. Cleans up the directory after the test completes
    """
    base_dir = Path(tempfile.mkdtemp(prefix='fsbench_test_')).resolve()

    for key in ('FSBENCH_SEARCH_DIRS', 'FSBENCH_UPLOADS_DIR', 'FSBENCH_RESULTS_DIR', 'FSBENCH_DEFAULT_WORKERS'):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv('FSBENCH_BASE_DIR', str(base_dir))
    monkeypatch.setattr(locator, '_search_dirs', None)

    yield base_dir

    shutil.rmtree(base_dir, ignore_errors=True)


@pytest.fixture
def base_dir(isolate_environment):
    """The isolated FSBENCH_BASE_DIR for this test."""
    return isolate_environment


@pytest.fixture
def bench_dirs(base_dir):
    """Create the default uploads/, files/ and files2/ candidate directories.

    Returns:
        dict mapping directory name to its Path
    """
    dirs = {}
    for name in ('uploads', 'files', 'files2'):
        path = base_dir / name
        path.mkdir()
        dirs[name] = path
    return dirs


@pytest.fixture
def scenario_files(bench_dirs):
    """a.txt in files/, c.txt in files2/; b.txt and d.txt exist nowhere."""
    (bench_dirs['files'] / 'a.txt').write_text('alpha\n')
    (bench_dirs['files2'] / 'c.txt').write_text('gamma\n')
    return bench_dirs
