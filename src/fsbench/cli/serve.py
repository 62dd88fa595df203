"""CLI command to start the web API server."""

import os

import click

from fsbench.utils import setup_shutdown_filter


@click.command('serve')
@click.option('--host', default='0.0.0.0', show_default=True, help='Host to bind to')
@click.option('--port', default=8080, show_default=True, type=int, help='Port to bind to')
@click.option(
    '--base-dir',
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help='Base directory for uploads/, files/, files2/ and results/ (default: cwd)',
)
@click.option(
    '--search-dir',
    '-d',
    'search_dirs',
    multiple=True,
    type=click.Path(file_okay=False),
    help='Candidate directory, searched in the order given (repeatable). Overrides the defaults.',
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    show_default=True,
)
def serve_command(host: str, port: int, base_dir: str | None, search_dirs: tuple[str, ...], log_level: str):
    """Start the fsbench web API server.

    \b
    Examples:
        fsbench serve
        fsbench serve --port 9000 --base-dir /srv/bench
        fsbench serve -d /data/hot -d /data/cold
    """
    import uvicorn

    # The app lifespan reads its configuration from the environment
    if base_dir:
        os.environ['FSBENCH_BASE_DIR'] = os.path.abspath(base_dir)
    if search_dirs:
        os.environ['FSBENCH_SEARCH_DIRS'] = os.pathsep.join(os.path.abspath(d) for d in search_dirs)
    os.environ['FSBENCH_LOG_LEVEL'] = log_level.upper()

    setup_shutdown_filter()

    click.echo(f'Starting fsbench server on http://{host}:{port}')
    uvicorn.run('fsbench.web:app', host=host, port=port, log_level=log_level.lower())
