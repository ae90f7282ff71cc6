from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from django.utils import timezone

from room.permission import identity_of
from task.adapters.serializers.task_serializer import TaskSerializer
from task.models import Task
from task.workflow import overdue_q


class DueTasksView(APIView):
    """
    Overdue tasks assigned to the caller: due before today and not completed.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        today = timezone.localdate()

        due_tasks = (
            Task.objects.filter(overdue_q(today), assigned_to=identity_of(request.user))
            .select_related('project')
            .prefetch_related('comments')
            .order_by('due_date', 'id')
        )

        serializer = TaskSerializer(due_tasks, many=True, context={'today': today})

        return Response({"due_tasks": serializer.data})
