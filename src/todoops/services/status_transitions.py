"""Status transition rules for tasks.

The allowed flow is NEW -> IN_PROGRESS -> COMPLETED. Staying in the same
status is always allowed; moving backwards or skipping a step is not.
"""

from collections import deque
from typing import Dict, FrozenSet, List, Optional

from ..models.task import TaskStatus

ALLOWED_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.NEW: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED}),
    TaskStatus.COMPLETED: frozenset(),
}


def is_transition_allowed(current: TaskStatus, target: TaskStatus) -> bool:
    """Check whether a task in ``current`` status may move to ``target``.

    Args:
        current: Status the task is in.
        target: Requested status.

    Returns:
        True if the transition is allowed. A transition to the same status
        is always allowed.
    """
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def allowed_targets(current: TaskStatus) -> List[TaskStatus]:
    """Return the statuses reachable from ``current`` in one step, in enum order."""
    targets = ALLOWED_TRANSITIONS.get(current, frozenset())
    return [status for status in TaskStatus if status in targets]


def transition_path(current: TaskStatus, target: TaskStatus) -> Optional[List[TaskStatus]]:
    """Return the statuses a task passes through to get from ``current`` to ``target``.

    The path excludes ``current`` and ends with ``target``; it is empty when
    both are the same. Every step is an allowed transition.

    Returns:
        List of statuses, or None when ``target`` cannot be reached.
    """
    paths = {current: []}
    frontier = deque([current])
    while frontier:
        status = frontier.popleft()
        if status == target:
            return paths[status]
        for next_status in allowed_targets(status):
            if next_status not in paths:
                paths[next_status] = paths[status] + [next_status]
                frontier.append(next_status)
    return None
