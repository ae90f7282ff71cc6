"""
Task status workflow.

Statuses move Not Started -> In Progress -> Pending Review -> Completed/Redo,
with Redo going back to In Progress. The path is advisory: any actor allowed
to work on the project may pick any status, except that a task sitting in
Pending Review can only be moved by the project leader.

"Done" is a legacy spelling of "Completed". It is accepted on input, stored as
"Completed", and treated as completed wherever it still appears in old rows.
"""
from django.db.models import Q
from django.utils import timezone

from project.permission import can_perform_task_actions, is_project_leader
from utils.exceptions import AccessDenied, InvalidTransition, ValidationFailed

NOT_STARTED = 'Not Started'
IN_PROGRESS = 'In Progress'
PENDING_REVIEW = 'Pending Review'
COMPLETED = 'Completed'
DONE = 'Done'
REDO = 'Redo'

STATUSES = [NOT_STARTED, IN_PROGRESS, PENDING_REVIEW, COMPLETED, DONE, REDO]
COMPLETED_STATUSES = (COMPLETED, DONE)
LEGACY_ALIASES = {DONE: COMPLETED}

PRIORITIES = ['Low', 'Medium', 'High']
DEFAULT_PRIORITY = 'Low'

_BY_LOWER = {s.lower(): s for s in STATUSES}


def normalize_status(value):
    """Canonical status for a write; raises ValidationFailed on unknown input."""
    label = _BY_LOWER.get(str(value or '').strip().lower())
    if label is None:
        raise ValidationFailed(f"Unknown task status '{value}'. Expected one of: {', '.join(STATUSES)}.")
    return LEGACY_ALIASES.get(label, label)


def bucket_status(value):
    """Status used for grouping and badges; blank or unknown reads as Not Started."""
    return _BY_LOWER.get(str(value or '').strip().lower(), NOT_STARTED)


def normalize_priority(value):
    if value in (None, ''):
        return DEFAULT_PRIORITY
    for priority in PRIORITIES:
        if str(value).strip().lower() == priority.lower():
            return priority
    raise ValidationFailed(f"Unknown priority '{value}'. Expected one of: {', '.join(PRIORITIES)}.")


def is_completed(task):
    return task.status in COMPLETED_STATUSES


def is_overdue(task, today=None):
    """
    A task is overdue when it has a due date earlier than today and is not
    completed. Never stored; every surface calls this.
    """
    if not task.due_date or is_completed(task):
        return False
    today = today or timezone.localdate()
    return task.due_date < today


def overdue_q(today=None, prefix=''):
    """ORM filter equivalent to is_overdue, for list endpoints."""
    today = today or timezone.localdate()
    return (
        Q(**{f'{prefix}due_date__isnull': False, f'{prefix}due_date__lt': today})
        & ~Q(**{f'{prefix}status__in': COMPLETED_STATUSES})
    )


def can_change_status(project, identity, task):
    if not can_perform_task_actions(project, identity):
        return False
    if task.status == PENDING_REVIEW:
        return is_project_leader(project, identity)
    return True


def change_status(project, identity, task, new_status):
    """
    Check a status change and return the status to store.

    Raises AccessDenied when the actor may not move the task and
    ValidationFailed for an unknown status.
    """
    if not can_perform_task_actions(project, identity):
        raise AccessDenied(
            'Only approved project members or the leader can change task status.',
            required_role='approved member',
        )
    if task.status == PENDING_REVIEW and not is_project_leader(project, identity):
        raise AccessDenied(
            'Only the project leader can change a task that is pending review.',
            required_role='leader',
        )
    return normalize_status(new_status)


def _review(project, identity, task, outcome, verb, past):
    if not is_project_leader(project, identity):
        raise AccessDenied(f'Only the project leader can {verb} tasks.', required_role='leader')
    if task.status != PENDING_REVIEW:
        raise InvalidTransition(
            f"Only tasks pending review can be {past}; this task is '{task.status or NOT_STARTED}'."
        )
    return outcome


def approve_task(project, identity, task):
    return _review(project, identity, task, COMPLETED, "approve", "approved")


def reject_task(project, identity, task):
    return _review(project, identity, task, REDO, "reject", "rejected")
