from django.db.models import Q
from django.utils import timezone
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dashboard.aggregation import (
    priority_buckets,
    project_breakdown,
    recent_activity,
    status_buckets,
    task_totals,
    user_totals,
)
from project.models import Project, ProjectMembers
from room.models import Room, RoomMember
from room.permission import identity_of
from task.adapters.serializers.task_serializer import TaskSerializer
from task.models import Task


def rooms_of(identity):
    return Room.objects.filter(
        Q(created_by=identity)
        | Q(members__email=identity, members__status=RoomMember.Status.APPROVED)
    ).distinct()


class DashboardViewset(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=['get'])
    def summary(self, request):
        """
        The caller's own counters over every task assigned to them, the same
        set the due-tasks and my-tasks views read, plus their room count.
        """
        identity = identity_of(request.user)
        today = timezone.localdate()
        rooms = rooms_of(identity)
        tasks = Task.objects.filter(assigned_to=identity)

        return Response({
            'identity': identity,
            'rooms': rooms.count(),
            **user_totals(tasks, identity, today),
        })

    @action(detail=False, methods=['get'])
    def taskboard(self, request):
        """
        Progress of every project the caller can open: one breakdown per
        project, the same counters over all of them, and the latest updates.
        """
        identity = identity_of(request.user)
        today = timezone.localdate()
        projects = (
            Project.objects.filter(
                Q(creator_email=identity)
                | Q(members__email=identity, members__status=ProjectMembers.Status.APPROVED)
            )
            .prefetch_related('tasks', 'tasks__comments')
            .distinct()
            .order_by('-created_at')
        )

        breakdown = []
        all_tasks = []
        for project in projects:
            tasks = list(project.tasks.all())
            all_tasks.extend(tasks)
            breakdown.append(project_breakdown(project, tasks, today))

        context = {'today': today}
        return Response({
            'projects': breakdown,
            'overall': {
                **task_totals(all_tasks, today),
                'status_counts': status_buckets(all_tasks),
                'priority_counts': priority_buckets(all_tasks),
            },
            'recent_activity': TaskSerializer(recent_activity(all_tasks), many=True, context=context).data,
        })
