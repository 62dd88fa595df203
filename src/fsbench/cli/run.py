"""CLI command for a single benchmark run."""

import json
import sys

import click

from fsbench.engine import EXECUTORS, run_parallel, run_sequential
from fsbench.errors import InvalidInput, WorkerFault
from fsbench.tasks import RunResult
from fsbench.utils import get_default_workers


@click.command('run')
@click.argument('names', nargs=-1)
@click.option('--threads', '-t', type=int, default=None, help='Worker count (default: FSBENCH_DEFAULT_WORKERS or 4)')
@click.option('--sequential', '-s', is_flag=True, help='Process files one at a time instead of in chunks')
@click.option(
    '--executor',
    type=click.Choice(EXECUTORS),
    default='thread',
    show_default=True,
    help='Execution substrate for parallel runs',
)
@click.option(
    '--search-dir',
    '-d',
    'search_dirs',
    multiple=True,
    type=click.Path(file_okay=False),
    help='Candidate directory, searched in the order given (repeatable)',
)
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
def run_command(
    names: tuple[str, ...],
    threads: int | None,
    sequential: bool,
    executor: str,
    search_dirs: tuple[str, ...],
    json_output: bool,
):
    """Locate and read files, then report per-file results and elapsed time.

    \b
    Examples:
        fsbench run a.txt b.txt c.txt            # parallel, default worker count
        fsbench run a.txt b.txt -t 2             # two chunks
        fsbench run a.txt b.txt --sequential     # baseline
        fsbench run a.txt -d ./data -d ./more    # custom search directories
    """
    dirs = list(search_dirs) or None

    try:
        if sequential:
            result = run_sequential(list(names), dirs)
        else:
            workers = threads if threads is not None else get_default_workers()
            result = run_parallel(list(names), workers, dirs, executor)
    except InvalidInput as e:
        raise click.BadParameter(str(e))
    except WorkerFault as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _output_human_readable(result)


def _output_human_readable(result: RunResult):
    for outcome in result.outcomes:
        line = outcome.message
        if outcome.detail:
            line = f'{line} ({outcome.detail})'
        click.echo(line, err=not outcome.ok)

    if result.mode == 'parallel':
        click.echo(
            f'Parallel run: {len(result.outcomes)} files, {result.chunks} chunks, '
            f'{result.workers} workers in {result.processing_time}'
        )
    else:
        click.echo(f'Sequential run: {len(result.outcomes)} files in {result.processing_time}')
    click.echo(f'  {result.succeeded} succeeded, {result.failed} failed')
