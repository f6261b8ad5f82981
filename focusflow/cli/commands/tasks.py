"""Task commands."""

import sys

import click

from ...core.query import SortKey, filter_tasks, sort_tasks
from ...models.task import TaskPriority, TaskStatus
from ..helpers import (
    echo_storage_warning,
    format_task_table,
    get_controller,
    resolve_task,
)

STATUS_CHOICES = [status.value for status in TaskStatus]
PRIORITY_CHOICES = [priority.value for priority in TaskPriority]
DUE_DATE = click.DateTime(formats=['%Y-%m-%d'])


def _parse_due_or_none(ctx, param, value):
    """Accept a YYYY-MM-DD date or the literal "none"."""
    if value is None:
        return None
    if value.lower() == 'none':
        return 'none'
    return DUE_DATE.convert(value, param, ctx)


@click.command()
@click.argument('title')
@click.option('--description', '-d', help='Longer task description')
@click.option('--priority', '-p', type=click.Choice(PRIORITY_CHOICES), help='Task priority (default: medium)')
@click.option('--project', 'project_id', help='Project ID (default: the default project)')
@click.option('--due', type=DUE_DATE, help='Due date (YYYY-MM-DD)')
@click.option('--tag', 'tags', multiple=True, help='Tag to attach (repeatable)')
@click.pass_context
def add(ctx, title, description, priority, project_id, due, tags):
    """Add a new task"""
    if not title or title.isspace():
        click.echo("Error: Task title cannot be empty.", err=True)
        sys.exit(1)

    controller = get_controller(ctx)
    controller.create_task(
        title,
        description=description,
        project_id=project_id,
        priority=priority,
        due_date=due.date() if due else None,
        tags=tags,
    )
    echo_storage_warning(controller)

    task = controller.state.tasks[0]
    click.echo(f"✅ Task {task.id} created: {task.title}")


@click.command(name='list')
@click.option('--status', type=click.Choice(['all'] + STATUS_CHOICES), default='all',
              help='Filter by task status')
@click.option('--search', '-s', default='', help='Search title and description')
@click.option('--sort', 'sort_key', type=click.Choice([key.value for key in SortKey]),
              default=SortKey.CREATED.value, help='Sort order')
@click.pass_context
def list_tasks(ctx, status, search, sort_key):
    """List tasks"""
    controller = get_controller(ctx)
    state = controller.state

    tasks = sort_tasks(filter_tasks(state.tasks, status=status, query=search), sort_key)
    if not tasks:
        click.echo("No tasks match your filters.")
        return

    click.echo(format_task_table(tasks, state.projects, today=controller.engine.now().date()))


@click.command()
@click.argument('task_id')
@click.pass_context
def show(ctx, task_id):
    """Show task details"""
    controller = get_controller(ctx)
    task = resolve_task(controller, task_id)
    project = controller.state.find_project(task.project_id)

    click.echo(f"ID:          {task.id}")
    click.echo(f"Title:       {task.title}")
    click.echo(f"Status:      {task.status.value}")
    click.echo(f"Priority:    {task.priority.value}")
    click.echo(f"Project:     {project.name if project else '-'}")
    if task.due_date:
        click.echo(f"Due:         {task.due_date.isoformat()}")
    if task.tags:
        click.echo(f"Tags:        {', '.join(sorted(task.tags))}")
    click.echo(f"Created:     {task.created_at.isoformat()}")
    click.echo(f"Updated:     {task.updated_at.isoformat()}")
    if task.completed_at:
        click.echo(f"Completed:   {task.completed_at.isoformat()}")
    if task.description:
        click.echo("")
        click.echo(task.description)


@click.command()
@click.argument('task_id')
@click.option('--title', help='New title')
@click.option('--description', '-d', help='New description')
@click.option('--status', type=click.Choice(STATUS_CHOICES), help='New status')
@click.option('--priority', '-p', type=click.Choice(PRIORITY_CHOICES), help='New priority')
@click.option('--project', 'project_id', help='Project ID ("none" to unassign)')
@click.option('--due', callback=_parse_due_or_none, help='Due date (YYYY-MM-DD, "none" to clear)')
@click.option('--pin/--unpin', default=None, help='Pin the task to the top')
@click.option('--tag', 'tags', multiple=True, help='Replace tags (repeatable)')
@click.pass_context
def edit(ctx, task_id, title, description, status, priority, project_id, due, pin, tags):
    """Edit a task"""
    controller = get_controller(ctx)
    task = resolve_task(controller, task_id)

    patch = {}
    if title is not None:
        if title.isspace() or not title:
            click.echo("Error: Task title cannot be empty.", err=True)
            sys.exit(1)
        patch['title'] = title
    if description is not None:
        patch['description'] = description
    if status is not None:
        patch['status'] = status
    if priority is not None:
        patch['priority'] = priority
    if project_id is not None:
        patch['project_id'] = None if project_id.lower() == 'none' else project_id
    if due is not None:
        patch['due_date'] = None if due == 'none' else due.date()
    if pin is not None:
        patch['is_pinned'] = pin
    if tags:
        patch['tags'] = list(tags)

    if not patch:
        click.echo("Nothing to change.")
        return

    controller.update_task(task.id, patch)
    echo_storage_warning(controller)
    click.echo(f"✅ Task {task.id} updated")


@click.command()
@click.argument('task_ids', nargs=-1, required=True)
@click.option('--to', 'status', type=click.Choice(STATUS_CHOICES), required=True,
              help='Status to set')
@click.pass_context
def status(ctx, task_ids, status):
    """Set the status of one or more tasks"""
    controller = get_controller(ctx)
    ids = [resolve_task(controller, task_id).id for task_id in task_ids]

    controller.bulk_update_status(ids, status)
    echo_storage_warning(controller)
    click.echo(f"✅ {len(ids)} task(s) set to {status}")


@click.command()
@click.argument('task_ids', nargs=-1, required=True)
@click.pass_context
def done(ctx, task_ids):
    """Mark one or more tasks as done"""
    ctx.invoke(status, task_ids=task_ids, status=TaskStatus.DONE.value)


@click.command()
@click.argument('task_id')
@click.pass_context
def toggle(ctx, task_id):
    """Toggle a task between done and todo"""
    controller = get_controller(ctx)
    task = resolve_task(controller, task_id)

    controller.toggle_complete(task.id)
    echo_storage_warning(controller)
    updated = controller.get_task(task.id)
    click.echo(f"✅ Task {task.id} is now {updated.status.value}")


@click.command()
@click.argument('task_id')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def delete(ctx, task_id, yes):
    """Delete a task"""
    controller = get_controller(ctx)
    task = resolve_task(controller, task_id)

    if controller.state.settings.confirm_before_delete and not yes:
        click.confirm(f"Are you sure you want to delete '{task.title}'?", abort=True)

    controller.delete_task(task.id)
    echo_storage_warning(controller)
    click.echo(f"✅ Task {task.id} deleted successfully")
    click.echo(f"   Title: {task.title}")
