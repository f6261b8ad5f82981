"""Analytics computed from the task list.

All functions here are pure: they take the current tasks (and the derived
completion history) and return new values without touching any state.
"""
from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence

from ..models.state import AnalyticsSummary, CompletionEntry
from ..models.task import ACTIVE_STATUSES, Task, TaskStatus
from ..utils.clock import day_key, utc_now
from .constants import STREAK_LOOKBACK_DAYS


def compute_completion_history(tasks: Iterable[Task]) -> tuple[CompletionEntry, ...]:
    """Count completed tasks per calendar day, oldest day first.

    Args:
        tasks: Tasks to aggregate; tasks without ``completed_at`` are ignored

    Returns:
        Tuple of CompletionEntry sorted by day key
    """
    counts = Counter(
        day_key(task.completed_at) for task in tasks if task.completed_at is not None
    )
    return tuple(CompletionEntry(date=key, count=counts[key]) for key in sorted(counts))


def completed_today_from_history(history: Sequence[CompletionEntry], key: str) -> Optional[int]:
    """Count for ``key`` from the history, None when the day has no entry."""
    for entry in history:
        if entry.date == key:
            return entry.count
    return None


def completed_on_day(tasks: Iterable[Task], key: str) -> int:
    """Count tasks whose completion falls on ``key`` by scanning the tasks."""
    return sum(
        1 for task in tasks
        if task.completed_at is not None and day_key(task.completed_at) == key
    )


def compute_streak(tasks: Sequence[Task], history: Sequence[CompletionEntry], today: date) -> int:
    """Consecutive days with at least one completion, counting back from today."""
    history_days = {entry.date for entry in history}
    task_days = {day_key(task.completed_at) for task in tasks if task.completed_at is not None}

    streak = 0
    for offset in range(STREAK_LOOKBACK_DAYS):
        key = day_key(today - timedelta(days=offset))
        if key in history_days or key in task_days:
            streak += 1
        else:
            break
    return streak


def compute_analytics(tasks: Sequence[Task],
                      history: Sequence[CompletionEntry],
                      today: Optional[date] = None) -> AnalyticsSummary:
    """Compute the dashboard summary.

    Args:
        tasks: Current task list
        history: Completion history derived from ``tasks``
        today: Day to treat as today (defaults to the current UTC date)

    Returns:
        AnalyticsSummary snapshot
    """
    if today is None:
        today = utc_now().date()

    total_tasks = len(tasks)
    completed_tasks = sum(1 for task in tasks if task.status is TaskStatus.DONE)
    active_tasks = sum(1 for task in tasks if task.status in ACTIVE_STATUSES)
    completion_rate = completed_tasks / total_tasks if total_tasks else 0.0

    today_key = day_key(today)
    tasks_completed_today = completed_today_from_history(history, today_key)
    if tasks_completed_today is None:
        tasks_completed_today = completed_on_day(tasks, today_key)

    return AnalyticsSummary(
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        active_tasks=active_tasks,
        completion_rate=completion_rate,
        streak_days=compute_streak(tasks, history, today),
        tasks_completed_today=tasks_completed_today,
    )
