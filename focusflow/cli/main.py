"""Main CLI entry point for FocusFlow."""

import logging
import sys

import click

from .commands import (
    add,
    delete,
    done,
    edit,
    list_tasks,
    projects,
    settings,
    show,
    stats,
    status,
    toggle,
)


@click.group()
@click.option('--data-dir', type=click.Path(file_okay=False), help='Directory holding FocusFlow data (default: ./.focusflow)')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, data_dir, verbose):
    """FocusFlow - Local task tracking with streaks and analytics"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    ctx.ensure_object(dict)
    ctx.obj['data_dir'] = data_dir


# Register commands
cli.add_command(add)
cli.add_command(list_tasks)
cli.add_command(show)
cli.add_command(edit)
cli.add_command(status)
cli.add_command(done)
cli.add_command(toggle)
cli.add_command(delete)
cli.add_command(stats)
cli.add_command(projects)
cli.add_command(settings)


if __name__ == '__main__':
    cli()
