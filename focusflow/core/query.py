"""Filtering, searching, sorting and grouping of task lists."""
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..models.project import Project
from ..models.task import Task, TaskPriority, TaskStatus


class SortKey(Enum):
    """Orderings offered by the task list view."""
    CREATED = "created"
    PRIORITY = "priority"
    DUE = "due"


PRIORITY_ORDER = [TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.LOW]


def filter_tasks(tasks: Iterable[Task],
                 status: Optional[Union[TaskStatus, str]] = None,
                 query: str = "") -> List[Task]:
    """Filter tasks by status and a case-insensitive search term.

    Args:
        tasks: Tasks to filter
        status: Status to keep; None or "all" keeps every status
        query: Substring matched against title and description

    Returns:
        Matching tasks in their original order
    """
    if status == "all":
        status = None
    if isinstance(status, str):
        status = TaskStatus(status)

    term = query.strip().lower()
    matching = []
    for task in tasks:
        if status is not None and task.status is not status:
            continue
        if term and term not in task.title.lower() and term not in task.description.lower():
            continue
        matching.append(task)
    return matching


def sort_tasks(tasks: Iterable[Task], key: Union[SortKey, str] = SortKey.CREATED) -> List[Task]:
    """Sort tasks for display.

    ``created`` puts the newest first, ``priority`` goes high to low and
    ``due`` is ascending with undated tasks first. Sorting is stable.
    """
    key = SortKey(key)
    if key is SortKey.CREATED:
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)
    if key is SortKey.PRIORITY:
        return sorted(tasks, key=lambda t: PRIORITY_ORDER.index(t.priority))
    return sorted(tasks, key=lambda t: t.due_date or date.min)


def group_by_project(tasks: Iterable[Task],
                     projects: Sequence[Project]) -> Dict[Optional[Project], List[Task]]:
    """Group tasks by project in project order.

    Tasks without a project, or pointing at a project that no longer exists,
    are grouped under None, which comes last.
    """
    by_id = {project.id: project for project in projects}
    groups: Dict[Optional[Project], List[Task]] = {project: [] for project in projects}
    unassigned: List[Task] = []

    for task in tasks:
        project = by_id.get(task.project_id) if task.project_id else None
        if project is None:
            unassigned.append(task)
        else:
            groups[project].append(task)

    groups = {project: members for project, members in groups.items() if members}
    if unassigned:
        groups[None] = unassigned
    return groups
