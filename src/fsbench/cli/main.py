"""Main CLI entry point with command groups"""

import multiprocessing

import click

from fsbench.__version__ import __version__
from fsbench.cli.experiment import experiment_command
from fsbench.cli.run import run_command
from fsbench.cli.serve import serve_command


class DefaultCommandGroup(click.Group):
    """Custom Click Group that allows a default command"""

    def parse_args(self, ctx, args):
        # During shell completion, don't redirect to default command
        if ctx.resilient_parsing:
            return super().parse_args(ctx, args)

        if args and args[0] in ('--help', '-h', '--version'):
            return super().parse_args(ctx, args)

        if args and args[0] in self.commands:
            return super().parse_args(ctx, args)

        # Otherwise, treat as run command (default)
        if args:
            return super().parse_args(ctx, ['run'] + args)
        return super().parse_args(ctx, args)


@click.group(cls=DefaultCommandGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name='fsbench')
@click.pass_context
def cli(ctx):
    """
    fsbench - sequential vs parallel file-read benchmark.

    \b
    Commands:
      fsbench <name> [name ...]        Read files and time the run (default command)
      fsbench experiment <name> ...    Sequential run plus one parallel run per thread count
      fsbench serve                    Start web API server

    \b
    Examples:
      fsbench a.txt b.txt c.txt -t 4
      fsbench run a.txt b.txt --sequential
      fsbench experiment *.txt --threads 1,2,4,8 --save
      fsbench serve --port 8080
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


cli.add_command(run_command, name='run')
cli.add_command(experiment_command, name='experiment')
cli.add_command(serve_command, name='serve')


def main():
    """Entry point for the CLI"""
    # Process executor support in frozen binaries
    multiprocessing.freeze_support()

    cli()


if __name__ == '__main__':
    main()
