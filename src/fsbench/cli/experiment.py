"""CLI command for a full experiment: sequential baseline vs several worker counts."""

import json
import sys
from datetime import datetime

import click

from fsbench.engine import EXECUTORS, run_parallel, run_sequential
from fsbench.errors import InvalidInput, WorkerFault
from fsbench.models import SaveResultRequest
from fsbench.report import format_report, write_report


def parse_thread_counts(value: str) -> list[int]:
    """Parse a comma-separated list of positive worker counts, e.g. '1,2,4'."""
    counts = []
    for part in value.split(','):
        part = part.strip()
        if not part:
            continue
        try:
            count = int(part)
        except ValueError:
            raise click.BadParameter(f'Not an integer: {part!r}', param_hint='--threads')
        if count < 1:
            raise click.BadParameter(f'Thread counts must be >= 1, got {count}', param_hint='--threads')
        counts.append(count)
    if not counts:
        raise click.BadParameter('At least one thread count is required', param_hint='--threads')
    return counts


@click.command('experiment')
@click.argument('names', nargs=-1, required=True)
@click.option('--threads', '-t', default='2,4,8', show_default=True, help='Comma-separated worker counts to compare')
@click.option('--executor', type=click.Choice(EXECUTORS), default='thread', show_default=True)
@click.option(
    '--search-dir',
    '-d',
    'search_dirs',
    multiple=True,
    type=click.Path(file_okay=False),
    help='Candidate directory, searched in the order given (repeatable)',
)
@click.option('--save', is_flag=True, help='Write a Result_<timestamp>.txt report')
@click.option(
    '--results-dir',
    type=click.Path(file_okay=False),
    default=None,
    help='Directory for the report (default: FSBENCH_RESULTS_DIR or ./results)',
)
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
def experiment_command(
    names: tuple[str, ...],
    threads: str,
    executor: str,
    search_dirs: tuple[str, ...],
    save: bool,
    results_dir: str | None,
    json_output: bool,
):
    """Run the same file list sequentially and with each worker count, then summarize.

    \b
    Examples:
        fsbench experiment a.txt b.txt c.txt d.txt
        fsbench experiment $(ls files) --threads 1,2,4,8,16 --save
    """
    thread_counts = parse_thread_counts(threads)
    dirs = list(search_dirs) or None
    file_names = list(names)

    try:
        single = run_sequential(file_names, dirs)
        multi = {str(count): run_parallel(file_names, count, dirs, executor) for count in thread_counts}
    except InvalidInput as e:
        raise click.BadParameter(str(e))
    except WorkerFault as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    data = SaveResultRequest(
        experiment_datetime=datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        file_count=len(file_names),
        single_thread_time=single.elapsed_ms,
        multi_thread_results={count: result.elapsed_ms for count, result in multi.items()},
    )

    report_path = write_report(data, results_dir) if save else None

    if json_output:
        output = data.model_dump()
        output['failed_files'] = single.failed
        output['report_path'] = str(report_path) if report_path else None
        click.echo(json.dumps(output, indent=2))
        return

    click.echo(format_report(data))
    if single.failed:
        click.echo(f'\n{single.failed} of {len(file_names)} files could not be read', err=True)
    if report_path:
        click.echo(f'\nReport saved: {report_path}')
