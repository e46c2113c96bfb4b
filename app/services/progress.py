"""Project progress calculation.

Two modes exist and are called from different places:

* task ratio: used by every task mutation and the explicit progress endpoint
* weighted milestones + tasks: standalone utility, not part of the mutation flow
"""

import math
from collections.abc import Iterable, Mapping
from fractions import Fraction
from typing import Any, NamedTuple

from app.models.task import Task, TaskStatus

MILESTONE_WEIGHT = Fraction(1, 2)
TASK_WEIGHT = Fraction(1, 2)


class ProgressCounts(NamedTuple):
    total: int
    completed: int


def round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def compute_task_ratio(total: int, completed: int, override: int | None = None) -> int:
    """round(100 * completed / total); the override (or 0) when there are no tasks."""
    if total == 0:
        return override or 0
    return round_half_up(Fraction(100 * completed, total))


def task_ratio_progress(tasks: Iterable[Task], override: int | None = None) -> int:
    """Task-ratio progress over a project's full task set."""
    tasks = list(tasks)
    completed = sum(1 for task in tasks if task.status == TaskStatus.DONE)
    return compute_task_ratio(len(tasks), completed, override)


def compute_weighted(milestones: ProgressCounts, tasks: ProgressCounts) -> int:
    """Milestones and tasks weigh 50% each.

    An empty category contributes 0 instead of being left out.
    """
    milestone_ratio = Fraction(milestones.completed, milestones.total) if milestones.total else Fraction(0)
    task_ratio = Fraction(tasks.completed, tasks.total) if tasks.total else Fraction(0)
    return round_half_up((milestone_ratio * MILESTONE_WEIGHT + task_ratio * TASK_WEIGHT) * 100)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def calculate_project_progress(
    milestones: Iterable[Any] | None,
    tasks: Iterable[Any] | None,
) -> int:
    """Weighted progress from milestone and task collections.

    Milestones are mappings or objects with a ``completed`` flag; tasks carry
    a ``status`` that is ``done`` when finished.
    """
    milestones = list(milestones or [])
    tasks = list(tasks or [])
    milestone_counts = ProgressCounts(
        total=len(milestones),
        completed=sum(1 for m in milestones if _field(m, "completed")),
    )
    task_counts = ProgressCounts(
        total=len(tasks),
        completed=sum(1 for t in tasks if _field(t, "status") == TaskStatus.DONE),
    )
    return compute_weighted(milestone_counts, task_counts)
