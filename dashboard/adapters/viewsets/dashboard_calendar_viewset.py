from django.utils import timezone
from django.utils.dateparse import parse_date
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from dashboard.aggregation import search_tasks
from dashboard.adapters.viewsets.dashboard_count_card_viewset import rooms_of
from room.permission import identity_of
from task.adapters.serializers.task_serializer import TaskSerializer
from task.models import Task


class CalendarView(APIView):
    """
    Tasks due on one day across every room the caller belongs to.
    ?date=YYYY-MM-DD (defaults to today), optional ?search=
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(parameters=[
        OpenApiParameter(name='date', type=str, required=False),
        OpenApiParameter(name='search', type=str, required=False),
    ])
    def get(self, request):
        today = timezone.localdate()
        raw_date = request.query_params.get('date')
        day = today
        if raw_date:
            try:
                day = parse_date(raw_date)
            except ValueError:
                day = None
            if day is None:
                return Response({'error': f"Invalid date '{raw_date}'. Use YYYY-MM-DD."},
                                status=status.HTTP_400_BAD_REQUEST)

        tasks = (
            Task.objects.filter(project__room__in=rooms_of(identity_of(request.user)), due_date=day)
            .select_related('project')
            .prefetch_related('comments')
            .order_by('created_at', 'id')
        )
        tasks = search_tasks(tasks, request.query_params.get('search'))

        serializer = TaskSerializer(tasks, many=True, context={'today': today})
        return Response({'date': day, 'tasks': serializer.data})
