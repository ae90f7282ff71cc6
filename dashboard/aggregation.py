"""
Read-side projections over task lists.

Every function takes the tasks it should look at; nothing here touches the
database, so the same numbers come out of the dashboard, the task board and
the tests.
"""
from decimal import Decimal, ROUND_HALF_UP

from django.utils import timezone

from task import workflow
from utils.exceptions import ValidationFailed


def percent_complete(completed, total):
    if not total:
        return 0
    ratio = Decimal(completed) * 100 / Decimal(total)
    return int(ratio.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def task_totals(tasks, today=None):
    today = today or timezone.localdate()
    tasks = list(tasks)
    completed = sum(1 for t in tasks if workflow.is_completed(t))
    overdue = sum(1 for t in tasks if workflow.is_overdue(t, today))
    return {
        'total': len(tasks),
        'completed': completed,
        'overdue': overdue,
        'percent_complete': percent_complete(completed, len(tasks)),
    }


def user_totals(tasks, identity, today=None):
    """Same counters as task_totals, limited to tasks assigned to identity."""
    return task_totals([t for t in tasks if identity and t.assigned_to == identity], today)


def status_buckets(tasks):
    buckets = {s: 0 for s in workflow.STATUSES}
    for task in tasks:
        buckets[workflow.bucket_status(task.status)] += 1
    return buckets


def priority_buckets(tasks):
    buckets = {p: 0 for p in workflow.PRIORITIES}
    for task in tasks:
        try:
            priority = workflow.normalize_priority(task.priority)
        except ValidationFailed:
            priority = workflow.DEFAULT_PRIORITY
        buckets[priority] += 1
    return buckets


def recent_activity(tasks, limit=5):
    """Most recently updated tasks first; never-updated tasks are left out."""
    touched = [t for t in tasks if t.updated_at]
    touched.sort(key=lambda t: t.updated_at, reverse=True)
    return touched[:limit]


def project_breakdown(project, tasks, today=None):
    tasks = list(tasks)
    totals = task_totals(tasks, today)
    return {
        'project_id': project.id,
        'title': project.title,
        'role': project.role,
        **totals,
        'status_counts': status_buckets(tasks),
    }


def sort_by_due_date(tasks):
    """Earliest due date first; tasks without a due date go last."""
    return sorted(tasks, key=lambda t: (t.due_date is None, t.due_date or timezone.localdate()))


def group_by_status(tasks):
    groups = {s: [] for s in workflow.STATUSES}
    for task in tasks:
        groups[workflow.bucket_status(task.status)].append(task)
    return groups


def search_tasks(tasks, term):
    term = (term or '').strip().lower()
    if not term:
        return list(tasks)

    def matches(task):
        project = getattr(task, 'project', None)
        haystack = (
            task.title or '',
            task.description or '',
            getattr(project, 'title', '') or '',
        )
        return any(term in field.lower() for field in haystack)

    return [t for t in tasks if matches(t)]
