import logging

from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from dashboard.aggregation import group_by_status, search_tasks, sort_by_due_date
from project.models import Project, ProjectMembers
from project.permission import assignable_members, can_delete_task, can_perform_task_actions
from room.permission import identity_of, require
from task import workflow
from task.models import Task, TaskComment, TaskDiscussionMessage
from task.permission import TaskAccessPermission
from task.adapters.serializers.task_serializer import (
    TaskSerializer,
    TaskWriteSerializer,
    TaskAssignSerializer,
    TaskStatusSerializer,
    TaskCommentSerializer,
    TaskDiscussionMessageSerializer,
)
from utils.custom_paginator import CustomPaginator
from utils.exceptions import TaskHiveError, ValidationFailed
from utils.responses import error_response, first_error

logger = logging.getLogger(__name__)

TASK_ACTION_DENIED = 'Only approved project members or the leader can work on tasks.'


def _check_assignee(project, email):
    if email not in assignable_members(project):
        raise ValidationFailed(f"{email} is not an approved member of this project.")


class TaskViewSet(viewsets.ModelViewSet):
    """
    Tasks API:
    - tasks of every project the caller can open, filterable by ?project=
    - create/edit/assign/status/comment for approved members and the leader
    - review (approve/reject) and delete for the leader only
    - a cross-room "my tasks" view and a per-task discussion thread
    """
    serializer_class = TaskSerializer
    permission_classes = [IsAuthenticated, TaskAccessPermission]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["project", "status", "priority", "assigned_to"]
    search_fields = ["title", "description", "project__title"]
    ordering_fields = ["created_at", "due_date", "priority", "status"]
    http_method_names = ["get", "post", "patch", "delete"]

    def get_queryset(self):
        identity = identity_of(self.request.user)
        if not identity:
            return Task.objects.none()

        qs = Task.objects.filter(
            Q(project__creator_email=identity)
            | Q(project__members__email=identity, project__members__status=ProjectMembers.Status.APPROVED)
        )
        return (
            qs.select_related("project")
            .prefetch_related("comments", "project__members")
            .distinct()
            .order_by("created_at", "id")
        )

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return TaskWriteSerializer
        return TaskSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["today"] = timezone.localdate()
        return context

    def _read(self, task):
        task = (
            Task.objects.select_related("project")
            .prefetch_related("comments")
            .get(pk=task.pk)
        )
        return TaskSerializer(task, context=self.get_serializer_context()).data

    def _store(self, task, **changes):
        """Apply field changes and stamp updated_at in a single write."""
        for field, value in changes.items():
            setattr(task, field, value)
        task.updated_at = timezone.now()
        task.save(update_fields=[*changes.keys(), "updated_at"])

    @extend_schema(request=TaskWriteSerializer, responses={201: TaskSerializer})
    def create(self, request, *args, **kwargs):
        identity = identity_of(request.user)
        write_serializer = self.get_serializer(data=request.data)
        if not write_serializer.is_valid():
            return first_error(write_serializer)

        project = Project.objects.prefetch_related("members").get(
            pk=write_serializer.validated_data["project"].pk
        )
        try:
            require(can_perform_task_actions(project, identity), TASK_ACTION_DENIED, 'approved member')
            _check_assignee(project, write_serializer.validated_data["assigned_to"])
        except TaskHiveError as e:
            return error_response(e)

        with transaction.atomic():
            instance = write_serializer.save(status=workflow.NOT_STARTED)

        logger.info(f"Task {instance.id} created in project {project.id} by {identity}")
        data = self._read(instance)
        headers = self.get_success_headers(data)
        return Response(data, status=status.HTTP_201_CREATED, headers=headers)

    @extend_schema(request=TaskWriteSerializer, responses={200: TaskSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        try:
            require(can_perform_task_actions(instance.project, identity_of(request.user)),
                    TASK_ACTION_DENIED, 'approved member')
        except TaskHiveError as e:
            return error_response(e)

        write_serializer = self.get_serializer(instance, data=request.data, partial=partial)
        if not write_serializer.is_valid():
            return first_error(write_serializer)
        write_serializer.save(updated_at=timezone.now())
        return Response(self._read(instance))

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        identity = identity_of(request.user)
        try:
            require(can_delete_task(instance.project, identity),
                    'Only the project leader can delete tasks.', 'leader')
        except TaskHiveError as e:
            return error_response(e)

        task_id = instance.id
        instance.delete()
        logger.info(f"Task {task_id} deleted by {identity}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=TaskAssignSerializer, responses={200: TaskSerializer})
    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        """
        Reassign to an approved member of the project.
        Expects: {"assigned_to": "someone@example.com"}
        """
        task = self.get_object()
        serializer = TaskAssignSerializer(data=request.data)
        if not serializer.is_valid():
            return first_error(serializer)
        email = serializer.validated_data["assigned_to"]

        try:
            require(can_perform_task_actions(task.project, identity_of(request.user)),
                    TASK_ACTION_DENIED, 'approved member')
            _check_assignee(task.project, email)
        except TaskHiveError as e:
            return error_response(e)

        self._store(task, assigned_to=email)
        logger.info(f"Task {task.id} assigned to {email}")
        return Response(self._read(task))

    @extend_schema(request=TaskStatusSerializer, responses={200: TaskSerializer})
    @action(detail=True, methods=["post"])
    def set_status(self, request, pk=None):
        """
        Move a task to any workflow status. A task in Pending Review can only
        be moved by the leader.
        Expects: {"status": "In Progress"}
        """
        task = self.get_object()
        identity = identity_of(request.user)
        serializer = TaskStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return first_error(serializer)

        try:
            new_status = workflow.change_status(task.project, identity, task, serializer.validated_data["status"])
        except TaskHiveError as e:
            return error_response(e)

        try:
            self._store(task, status=new_status)
        except DatabaseError as e:
            logger.error(f"Error updating status of task {task.id}: {str(e)}")
            return Response({'error': str(e)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        logger.info(f"Task {task.id} moved to {new_status} by {identity}")
        return Response(self._read(task))

    def _review(self, request, decide):
        task = self.get_object()
        identity = identity_of(request.user)
        try:
            outcome = decide(task.project, identity, task)
        except TaskHiveError as e:
            return error_response(e)

        self._store(task, status=outcome)
        logger.info(f"Task {task.id} reviewed by {identity}: {outcome}")
        return Response(self._read(task))

    @extend_schema(request=None, responses={200: TaskSerializer})
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        return self._review(request, workflow.approve_task)

    @extend_schema(request=None, responses={200: TaskSerializer})
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        return self._review(request, workflow.reject_task)

    @extend_schema(request=TaskCommentSerializer, responses={201: TaskSerializer})
    @action(detail=True, methods=["post"])
    def comment(self, request, pk=None):
        """
        Append a comment to the task.
        Expects: {"text": "..."}
        """
        task = self.get_object()
        identity = identity_of(request.user)
        try:
            require(can_perform_task_actions(task.project, identity), TASK_ACTION_DENIED, 'approved member')
        except TaskHiveError as e:
            return error_response(e)

        serializer = TaskCommentSerializer(data=request.data)
        if not serializer.is_valid():
            return first_error(serializer)

        with transaction.atomic():
            TaskComment.objects.create(task=task, author=identity, text=serializer.validated_data["text"])
            self._store(task)
        return Response(self._read(task), status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[OpenApiParameter(name="search", type=str, required=False)],
        responses={200: TaskSerializer(many=True)},
    )
    @action(detail=False, methods=["get"])
    def mine(self, request):
        """
        Every task assigned to the caller across all rooms, earliest due
        date first and grouped into workflow columns.
        """
        identity = identity_of(request.user)
        tasks = Task.objects.filter(assigned_to=identity).select_related("project").prefetch_related("comments")
        tasks = sort_by_due_date(search_tasks(tasks, request.query_params.get("search")))

        context = self.get_serializer_context()
        groups = {
            label: TaskSerializer(items, many=True, context=context).data
            for label, items in group_by_status(tasks).items()
        }
        return Response({
            "tasks": TaskSerializer(tasks, many=True, context=context).data,
            "groups": groups,
        })

    @extend_schema(request=TaskDiscussionMessageSerializer, responses={200: TaskDiscussionMessageSerializer(many=True)})
    @action(detail=True, methods=["get", "post"])
    def discussion(self, request, pk=None):
        """
        GET: the task's discussion thread, oldest first, paginated.
        POST: add a message. Expects: {"text": "..."}
        """
        task = self.get_object()
        identity = identity_of(request.user)

        if request.method == "GET":
            messages = TaskDiscussionMessage.objects.filter(task=task)
            paginator = CustomPaginator()
            page = paginator.paginate_queryset(messages, request, view=self)
            serializer = TaskDiscussionMessageSerializer(page, many=True)
            return paginator.get_paginated_response(serializer.data)

        try:
            require(can_perform_task_actions(task.project, identity), TASK_ACTION_DENIED, 'approved member')
        except TaskHiveError as e:
            return error_response(e)

        serializer = TaskDiscussionMessageSerializer(data=request.data)
        if not serializer.is_valid():
            return first_error(serializer)
        message = serializer.save(task=task, room_id=task.project.room_id, user=identity)
        return Response(TaskDiscussionMessageSerializer(message).data, status=status.HTTP_201_CREATED)
