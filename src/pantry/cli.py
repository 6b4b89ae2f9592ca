"""Command-line interface for pantry (slash-command and @-mention catalog)."""

import json
import logging
import sys
from pathlib import Path
import click

from .config import entries_from_config, get_settings_path, load_settings, settings_from_config
from .entries import SEARCH_TYPES, SearchItem
from .loader import SearchLoader


def _print_items(items: list[SearchItem], limit: int, as_json: bool) -> None:
    shown = items[:limit]

    if as_json:
        click.echo(json.dumps([item.to_dict() for item in shown], indent=2, ensure_ascii=False))
        return

    if not shown:
        click.echo("No items found.")
        return

    width = max(len(item.name) for item in shown)
    for item in shown:
        label = f" [{item.label}]" if item.label else ''
        hint = f" {item.argument_hint}" if item.argument_hint else ''
        click.echo(f"  {item.name.ljust(width)}{hint}  {item.description[:70]}{label}")

    if len(items) > limit:
        click.echo(f"  ... and {len(items) - limit} more")


@click.group()
@click.version_option(package_name="pantry")
@click.option('--settings', 'settings_path', type=click.Path(dir_okay=False, path_type=Path),
              help="Settings file (default: ~/.claude/pantry/settings.yaml)")
@click.option('--verbose', '-v', is_flag=True, help="Log scan details to stderr")
@click.pass_context
def main(ctx, settings_path, verbose):
    """Pantry - browse and search slash commands and @-mentions."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format='%(levelname)s %(name)s: %(message)s',
        )

    config = load_settings(settings_path)
    try:
        entries = entries_from_config(config)
    except KeyError as e:
        raise click.UsageError(f"Entry is missing required key: {e.args[0]}")
    except TypeError as e:
        raise click.UsageError(f"Invalid entry in settings: {e}")

    ctx.ensure_object(dict)
    ctx.obj['settings_path'] = settings_path or get_settings_path()
    ctx.obj['loader'] = SearchLoader(entries, settings_from_config(config))


@main.command(name='list')
@click.argument('search_type', metavar='TYPE', type=click.Choice(SEARCH_TYPES))
@click.option('--limit', '-n', type=int, help="Maximum items to show (default: maxSuggestions)")
@click.option('--json', 'as_json', is_flag=True, help="Output as JSON")
@click.pass_context
def list_items(ctx, search_type, limit, as_json):
    """List all commands or mentions."""
    loader = ctx.obj['loader']
    items = loader.get_items(search_type)
    _print_items(items, limit or loader.get_max_suggestions(search_type), as_json)


@main.command()
@click.argument('search_type', metavar='TYPE', type=click.Choice(SEARCH_TYPES))
@click.argument('query')
@click.option('--limit', '-n', type=int, help="Maximum items to show (default: maxSuggestions)")
@click.option('--json', 'as_json', is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx, search_type, query, limit, as_json):
    """Search commands or mentions by name or description.

    Use "<prefix>:<text>" to search entries that require a search prefix,
    e.g. "agent:review".
    """
    loader = ctx.obj['loader']
    items = loader.search_items(search_type, query)
    _print_items(items, limit or loader.get_max_suggestions(search_type), as_json)


@main.command()
@click.pass_context
def entries(ctx):
    """Show configured entries and whether their paths exist."""
    loader = ctx.obj['loader']
    click.echo(f"Settings: {ctx.obj['settings_path']}")

    for entry in loader.entries:
        exists = entry.root.is_dir()
        marker = click.style("✓", fg='green') if exists else click.style("✗", fg='red')
        click.echo(f"\n{marker} [{entry.type}] {entry.source_id}")
        click.echo(f"    name: {entry.name}")
        click.echo(f"    description: {entry.description}")
        if entry.search_prefix:
            click.echo(f"    search prefix: {entry.search_prefix}:")
        if entry.order_by:
            click.echo(f"    order by: {entry.order_by}")

    for search_type in SEARCH_TYPES:
        prefixes = loader.get_search_prefixes(search_type)
        if prefixes:
            click.echo(f"\n{search_type} prefixes: {', '.join(prefixes)}")


if __name__ == '__main__':
    main()
