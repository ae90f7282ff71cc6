import logging

from django.db import transaction
from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from project.models import Project, ProjectMembers
from project.permission import (
    ProjectAccessPermission,
    assignable_members as approved_assignees,
    can_manage_members,
)
from project.adapters.serializers.project_serializer import (
    ProjectSerializer,
    ProjectWriteSerializer,
    ProjectMemberEmailSerializer,
    ProjectMemberStatusSerializer,
)
from room.models import Room, RoomMember
from room.permission import identity_of, can_create_project, require
from utils.exceptions import TaskHiveError
from utils.responses import error_response, first_error

logger = logging.getLogger(__name__)


class ProjectViewSet(viewsets.ModelViewSet):
    """
    Projects API with:
    - room-scoped listing: every room member sees the room's projects (so
      they can ask to join), details need leader or approved standing
    - self-service join requests that land as pending
    - leader-only approve/reject/remove of members
    """
    serializer_class = ProjectSerializer
    permission_classes = [IsAuthenticated, ProjectAccessPermission]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["room", "role"]
    search_fields = ["title", "description"]
    ordering_fields = ["created_at", "title"]
    http_method_names = ["get", "post"]

    def get_queryset(self):
        identity = identity_of(self.request.user)
        if not identity:
            return Project.objects.none()

        qs = Project.objects.filter(
            Q(room__created_by=identity)
            | Q(room__members__email=identity, room__members__status=RoomMember.Status.APPROVED)
            | Q(members__email=identity, members__status=ProjectMembers.Status.APPROVED)
        )
        return qs.prefetch_related("members").distinct().order_by("-created_at")

    def get_serializer_class(self):
        if self.action == "create":
            return ProjectWriteSerializer
        return ProjectSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["identity"] = identity_of(self.request.user)
        return context

    def _read(self, project):
        project = Project.objects.prefetch_related("members").get(pk=project.pk)
        return ProjectSerializer(project, context=self.get_serializer_context()).data

    @extend_schema(request=ProjectWriteSerializer, responses={201: ProjectSerializer})
    def create(self, request, *args, **kwargs):
        identity = identity_of(request.user)
        write_serializer = self.get_serializer(data=request.data)
        if not write_serializer.is_valid():
            return first_error(write_serializer)

        room = Room.objects.prefetch_related("members").get(pk=write_serializer.validated_data["room"].pk)
        try:
            require(can_create_project(room, identity),
                    'Only members of this room can create projects.', 'room member')
        except TaskHiveError as e:
            return error_response(e)

        with transaction.atomic():
            instance = write_serializer.save(creator_email=identity)

        logger.info(f"Project {instance.id} created in room {room.id} by {identity} as {instance.role}")
        data = self._read(instance)
        headers = self.get_success_headers(data)
        return Response(data, status=status.HTTP_201_CREATED, headers=headers)

    @extend_schema(request=None, responses={201: ProjectSerializer})
    @action(detail=True, methods=["post"])
    def request_join(self, request, pk=None):
        """
        Ask to join a project. The caller is listed as pending until the
        leader approves.
        """
        project = self.get_object()
        identity = identity_of(request.user)

        if identity == project.creator_email or identity in project.member_statuses:
            return Response(
                {"error": "You are already a member or pending for this project."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        ProjectMembers.objects.create(project=project, email=identity, status=ProjectMembers.Status.PENDING)
        logger.info(f"{identity} requested to join project {project.id}")
        return Response(
            {"message": f'Join request for "{project.title}" sent. Awaiting leader approval.',
             "project": self._read(project)},
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=ProjectMemberEmailSerializer, responses={201: ProjectSerializer})
    @action(detail=True, methods=["post"])
    def add_member(self, request, pk=None):
        """
        Invite an identity into the project as pending.
        Expects: {"email": "someone@example.com"}
        """
        project = self.get_object()
        serializer = ProjectMemberEmailSerializer(data=request.data)
        if not serializer.is_valid():
            return first_error(serializer)
        email = serializer.validated_data["email"]

        if email == project.creator_email or email in project.member_statuses:
            return Response(
                {"error": f"{email} is already listed for this project."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        ProjectMembers.objects.create(project=project, email=email, status=ProjectMembers.Status.PENDING)
        logger.info(f"{email} invited to project {project.id} by {identity_of(request.user)}")
        return Response(
            {"message": f"Invitation sent to {email}. Pending approval.", "project": self._read(project)},
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=ProjectMemberStatusSerializer, responses={200: ProjectSerializer})
    @action(detail=True, methods=["post"])
    def set_member_status(self, request, pk=None):
        """
        Leader approves or rejects a member.
        Expects: {"email": "someone@example.com", "status": "approved" | "rejected" | "pending"}
        """
        project = self.get_object()
        try:
            require(can_manage_members(project, identity_of(request.user)),
                    'Only the project leader can approve/reject members.', 'leader')
        except TaskHiveError as e:
            return error_response(e)

        serializer = ProjectMemberStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return first_error(serializer)
        email = serializer.validated_data["email"]
        new_status = serializer.validated_data["status"]

        if email == project.creator_email:
            return Response(
                {"error": "The project leader's own membership cannot be changed."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        updated = ProjectMembers.objects.filter(project=project, email=email).update(status=new_status)
        if not updated:
            return Response({"error": "Member not found."}, status=status.HTTP_404_NOT_FOUND)

        logger.info(f"Member {email} of project {project.id} set to {new_status}")
        return Response(
            {"message": f"Member {email} status updated to {new_status}.", "project": self._read(project)},
            status=status.HTTP_200_OK,
        )

    @extend_schema(request=ProjectMemberEmailSerializer, responses={200: ProjectSerializer})
    @action(detail=True, methods=["post"])
    def remove_member(self, request, pk=None):
        """
        Leader removes a member entry, whatever its status.
        Expects: {"email": "someone@example.com"}
        """
        project = self.get_object()
        try:
            require(can_manage_members(project, identity_of(request.user)),
                    'Only the project leader can remove members.', 'leader')
        except TaskHiveError as e:
            return error_response(e)

        serializer = ProjectMemberEmailSerializer(data=request.data)
        if not serializer.is_valid():
            return first_error(serializer)
        email = serializer.validated_data["email"]

        if email == project.creator_email:
            return Response(
                {"error": "The project leader cannot remove themselves."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        deleted, _ = ProjectMembers.objects.filter(project=project, email=email).delete()
        if not deleted:
            return Response({"error": "Member not found to remove."}, status=status.HTTP_404_NOT_FOUND)

        logger.info(f"{email} removed from project {project.id}")
        return Response(
            {"message": f"{email} removed from the project.", "project": self._read(project)},
            status=status.HTTP_200_OK,
        )

    @action(detail=True, methods=["get"])
    def assignable_members(self, request, pk=None):
        """Approved members a task can be assigned to."""
        project = self.get_object()
        return Response({"members": approved_assignees(project)})
