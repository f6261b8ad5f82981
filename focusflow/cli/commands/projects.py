"""Project commands."""

import sys

import click
from rich.console import Console
from rich.table import Table

from ...core.constants import DEFAULT_PROJECT_COLOR, PROJECT_COLORS
from ...core.query import group_by_project
from ..helpers import echo_storage_warning, get_controller


@click.group()
def projects():
    """Manage projects"""
    pass


@projects.command(name='list')
@click.pass_context
def list_projects(ctx):
    """List projects with their open task counts"""
    console = Console()
    controller = get_controller(ctx)
    state = controller.state

    if not state.projects:
        console.print("[yellow]No projects yet.[/yellow]")
        console.print("Use 'focusflow projects add' to create one.")
        return

    groups = group_by_project(state.tasks, state.projects)
    default_id = state.settings.default_project_id

    table = Table(title="Projects")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Color", style="green")
    table.add_column("Tasks", justify="right")
    for project in state.projects:
        name = f"{project.name} (default)" if project.id == default_id else project.name
        table.add_row(project.id, name, project.color, str(len(groups.get(project, []))))
    if None in groups:
        table.add_row("-", "No project", "", str(len(groups[None])))
    console.print(table)


@projects.command(name='add')
@click.argument('name')
@click.option('--color', type=click.Choice(PROJECT_COLORS), default=DEFAULT_PROJECT_COLOR,
              show_default=True, help='Color token')
@click.pass_context
def add_project(ctx, name, color):
    """Create a project"""
    if not name or name.isspace():
        click.echo("Error: Project name cannot be empty.", err=True)
        sys.exit(1)

    controller = get_controller(ctx)
    controller.create_project(name, color)
    echo_storage_warning(controller)

    project = controller.state.projects[-1]
    click.echo(f"✅ Project {project.id} created: {project.name}")
