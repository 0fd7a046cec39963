"""Main CLI entry point with command groups"""

import click

from rgstream.__version__ import __version__
from rgstream.cli.search import search_command
from rgstream.cli.serve import serve_command
from rgstream.config import configure_logging


class DefaultCommandGroup(click.Group):
    """Custom Click Group that allows a default command"""

    def parse_args(self, ctx, args):
        if ctx.resilient_parsing:
            return super().parse_args(ctx, args)

        if args and args[0] in ('--help', '-h', '--version'):
            return super().parse_args(ctx, args)

        if not args or args[0] in self.commands:
            return super().parse_args(ctx, args)

        # Otherwise, treat as search command (default)
        return super().parse_args(ctx, ['search'] + args)


@click.group(cls=DefaultCommandGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name='rgstream')
@click.pass_context
def cli(ctx):
    """
    rgstream - ripgrep search with structured, context-trimmed results.

    \b
    Commands:
      rgstream <query> <path>...   Search paths (default command)
      rgstream serve               Start web API server

    \b
    Examples:
      rgstream "error" /var/log
      rgstream "fail(ed|ure)" src/ --regex --context 20
      rgstream serve --port 8000
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


cli.add_command(search_command, name='search')
cli.add_command(serve_command, name='serve')


def main():
    """Entry point for the CLI"""
    configure_logging(default_level='WARNING')
    cli()


if __name__ == '__main__':
    main()
