"""Experiment result reports.

A report summarizes one experiment: a single sequential run and one parallel
run per thread count, all over the same file list. Reports are plain UTF-8
text files named Result_<timestamp>.txt in the results directory.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path

from fsbench.models import SaveResultRequest
from fsbench.utils import get_results_dir


logger = logging.getLogger(__name__)


def format_report(data: SaveResultRequest) -> str:
    """Render the human-readable report body."""
    lines = [
        '[Experiment datetime]',
        data.experiment_datetime,
        '',
        '[Experiment conditions]',
        f'File count: {data.file_count}',
        '',
        '[Results]',
        f'- Single thread processing time: {data.single_thread_time}ms',
    ]
    for thread_count, elapsed in data.multi_thread_results.items():
        lines.append(f'- Multi thread processing time ({thread_count} threads): {elapsed}ms')
    return '\n'.join(lines)


def report_timestamp(now: datetime | None = None) -> str:
    """Compact UTC ISO-8601 timestamp, e.g. 20241019T101112345Z."""
    now = now or datetime.now(UTC)
    now = now.astimezone(UTC)
    return f'{now:%Y%m%dT%H%M%S}{now.microsecond // 1000:03d}Z'


def write_report(data: SaveResultRequest, results_dir: Path | None = None, now: datetime | None = None) -> Path:
    """Format the report and write it to a new timestamped file.

    Args:
        data: Experiment results
        results_dir: Target directory, created if missing (default: get_results_dir())
        now: Timestamp override for the file name

    Returns:
        Path of the written report
    """
    results_dir = Path(results_dir) if results_dir else get_results_dir()
    logger.debug(f'Results directory: {results_dir}')
    results_dir.mkdir(parents=True, exist_ok=True)

    file_path = results_dir / f'Result_{report_timestamp(now)}.txt'
    file_path.write_text(format_report(data), encoding='utf-8')
    logger.info(f'Experiment report saved: {file_path}')
    return file_path
