"""CLI search command for rgstream"""

import sys

import click

from rgstream.config import DEFAULT_CONTEXT_WIDTH, PER_SPAN
from rgstream.engine import ProtocolError
from rgstream.models import SearchOptions
from rgstream.process import RipgrepNotFoundError
from rgstream.search import SearchRequestError, search


@click.command()
@click.argument('query', type=str, required=False)
@click.argument('paths', type=click.Path(exists=True), nargs=-1)
@click.option('--regex', '-r', is_flag=True, help="Treat QUERY as a regex (default: literal string)")
@click.option('--case-sensitive', '-s', 'usecase', is_flag=True, help="Case-sensitive search (default: ignore case)")
@click.option('--word', '-w', is_flag=True, help="Match whole words only")
@click.option(
    '--context',
    '-c',
    type=click.IntRange(min=0),
    default=DEFAULT_CONTEXT_WIDTH,
    show_default=True,
    help="Characters of context kept on each side of a match",
)
@click.option('--per-span', is_flag=True, default=PER_SPAN, help="One result per highlighted run instead of per line")
@click.option('--rg-path', type=click.Path(), help="Explicit path to the ripgrep binary")
@click.option('--json', 'output_json', is_flag=True, help="Output results as JSON")
@click.option('--no-color', is_flag=True, help="Disable colored output")
def search_command(query, paths, regex, usecase, word, context, per_span, rg_path, output_json, no_color):
    """
    Search PATHS for QUERY with ripgrep and print each match with its context.

    \b
    Examples:
        rgstream "error" /var/log                  # Literal, case-insensitive
        rgstream "err(or)?" /var/log --regex       # Regex search
        rgstream "Error" src/ -s -w --context 20   # Case-sensitive whole word
        rgstream "TODO" . --json                   # JSON output

    \b
    Requirements:
        - ripgrep must be installed on your system
          macOS: brew install ripgrep
          Ubuntu/Debian: apt install ripgrep
    """
    options = SearchOptions(regex=regex, usecase=usecase, word=word, context=context, per_span=per_span)

    try:
        response = search(query, list(paths), options, rg_path=rg_path)
    except SearchRequestError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)
    except RipgrepNotFoundError as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)
    except ProtocolError as e:
        click.echo(f"❌ Malformed ripgrep output: {e}", err=True)
        sys.exit(1)

    if output_json:
        click.echo(response.model_dump_json(indent=2))
    else:
        colorize = not no_color and sys.stdout.isatty()
        click.echo(response.to_cli(colorize=colorize))

    sys.exit(0)
