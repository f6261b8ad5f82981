"""CLI Helper Functions for FocusFlow.

This module provides reusable helper functions for CLI commands to reduce
code duplication and standardize behavior across all commands.

The helpers provide:
- Building a hydrated controller from the command context
- Task ID resolution with short ID support
- Consistent table formatting for output
- Surfacing storage advisories
"""

import sys
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

import click
from tabulate import tabulate

from focusflow.core.constants import DATA_DIR_NAME
from focusflow.core.controller import DashboardController
from focusflow.core.storage import StateGateway
from focusflow.models.project import Project
from focusflow.models.task import Task, TaskPriority, TaskStatus
from focusflow.services.kv_store import FileStore


def get_data_dir(ctx: click.Context) -> Path:
    """Get the data directory chosen on the command line.

    Returns:
        The ``--data-dir`` value, or ``./.focusflow`` by default
    """
    obj = ctx.find_root().obj or {}
    data_dir = obj.get("data_dir")
    return Path(data_dir) if data_dir else Path.cwd() / DATA_DIR_NAME


def get_controller(ctx: click.Context) -> DashboardController:
    """Create and hydrate a controller backed by the data directory.

    Note:
        A storage advisory raised while loading is echoed to stderr.
    """
    gateway = StateGateway(FileStore(get_data_dir(ctx)))
    controller = DashboardController(gateway)
    controller.activate()
    echo_storage_warning(controller)
    return controller


def echo_storage_warning(controller: DashboardController) -> None:
    """Print and clear any pending storage advisory."""
    if controller.storage_warning:
        click.echo(click.style(f"Warning: {controller.storage_warning}", fg='yellow'), err=True)
        controller.dismiss_storage_warning()


def resolve_task(controller: DashboardController, task_id: str) -> Task:
    """Resolve a task ID with short ID support.

    Args:
        controller: The hydrated controller
        task_id: Full or partial task ID

    Returns:
        The resolved Task

    Note:
        Exits with error if task not found or multiple matches.
    """
    task = controller.get_task(task_id)
    if task:
        return task

    matching_tasks = [t for t in controller.state.tasks if t.id.startswith(task_id)]
    if len(matching_tasks) == 1:
        return matching_tasks[0]
    elif len(matching_tasks) > 1:
        click.echo(f"Error: Multiple tasks found starting with '{task_id}':", err=True)
        for match in matching_tasks:
            click.echo(f"  - {match.id}: {match.title}", err=True)
        sys.exit(1)
    else:
        click.echo(f"Error: No task found with ID: {task_id}", err=True)
        sys.exit(1)


STATUS_COLORS = {
    TaskStatus.TODO: 'white',
    TaskStatus.IN_PROGRESS: 'cyan',
    TaskStatus.DONE: 'green',
    TaskStatus.ARCHIVED: 'bright_black',
}

PRIORITY_COLORS = {
    TaskPriority.HIGH: 'red',
    TaskPriority.MEDIUM: 'yellow',
    TaskPriority.LOW: 'blue',
}


def format_due_date(due_date: Optional[date], today: Optional[date] = None) -> str:
    """Format a due date, highlighting overdue dates."""
    if not due_date:
        return ""
    text = due_date.isoformat()
    if today and due_date < today:
        return click.style(text, fg='red')
    return text


def format_task_table(tasks: Sequence[Task],
                      projects: Sequence[Project] = (),
                      today: Optional[date] = None,
                      max_title_length: int = 50) -> str:
    """Format tasks as a table with consistent styling.

    Args:
        tasks: List of tasks to display
        projects: Known projects, used to show project names
        today: Reference day for highlighting overdue tasks
        max_title_length: Maximum title length before truncation

    Returns:
        Formatted table string
    """
    headers = ["ID", "STATUS", "PRIORITY", "TITLE", "PROJECT", "DUE", "CREATED"]
    project_names = {project.id: project.name for project in projects}

    table_data = []
    for task_item in tasks:
        title = task_item.title
        if len(title) > max_title_length:
            title = title[:max_title_length-3] + "..."
        if task_item.is_pinned:
            title = "* " + title

        # Unknown project ids show as empty, like unassigned tasks
        project_name = project_names.get(task_item.project_id, "") if task_item.project_id else ""

        table_data.append([
            task_item.id[:8],
            click.style(task_item.status.value.upper(), fg=STATUS_COLORS[task_item.status]),
            click.style(task_item.priority.value, fg=PRIORITY_COLORS[task_item.priority]),
            title,
            project_name,
            format_due_date(task_item.due_date, today if not task_item.is_done else None),
            task_item.created_at.strftime("%Y-%m-%d %H:%M"),
        ])

    return tabulate(table_data, headers=headers, tablefmt="simple")
