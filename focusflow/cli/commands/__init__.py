"""FocusFlow CLI commands."""

from .projects import projects
from .settings import settings
from .stats import stats
from .tasks import add, delete, done, edit, list_tasks, show, status, toggle

__all__ = [
    'add',
    'list_tasks',
    'show',
    'edit',
    'status',
    'done',
    'toggle',
    'delete',
    'stats',
    'projects',
    'settings',
]
