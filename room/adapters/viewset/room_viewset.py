import logging

from django.db import transaction
from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from room.models import Room, RoomMember
from room.permission import RoomAccessPermission, identity_of, is_room_owner, require
from room.adapters.serializers.room_serializer import (
    RoomSerializer,
    RoomWriteSerializer,
    AddRoomMemberSerializer,
)
from utils.exceptions import TaskHiveError
from utils.responses import error_response

logger = logging.getLogger(__name__)


class RoomViewSet(viewsets.ModelViewSet):
    """
    Rooms API:
    - list only the rooms the caller belongs to
    - any authenticated user may create a room and becomes its owner
    - rename, delete and member invites are owner-only
    """
    serializer_class = RoomSerializer
    permission_classes = [IsAuthenticated, RoomAccessPermission]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name"]
    ordering_fields = ["created_at", "name"]
    http_method_names = ["get", "post", "patch", "put", "delete"]

    def get_queryset(self):
        identity = identity_of(self.request.user)
        if not identity:
            return Room.objects.none()

        qs = Room.objects.filter(
            Q(created_by=identity)
            | Q(members__email=identity, members__status=RoomMember.Status.APPROVED)
        )
        return qs.prefetch_related("members").distinct().order_by("-created_at")

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return RoomWriteSerializer
        return RoomSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["identity"] = identity_of(self.request.user)
        return context

    def _read(self, room):
        room = Room.objects.prefetch_related("members").get(pk=room.pk)
        return RoomSerializer(room, context=self.get_serializer_context()).data

    @extend_schema(request=RoomWriteSerializer, responses={201: RoomSerializer})
    def create(self, request, *args, **kwargs):
        write_serializer = self.get_serializer(data=request.data)
        write_serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            instance = write_serializer.save(created_by=identity_of(request.user))

        logger.info(f"Room {instance.id} created by {instance.created_by}")
        data = self._read(instance)
        headers = self.get_success_headers(data)
        return Response(data, status=status.HTTP_201_CREATED, headers=headers)

    @extend_schema(request=RoomWriteSerializer, responses={200: RoomSerializer})
    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        try:
            require(is_room_owner(instance, identity_of(request.user)),
                    'Only the room owner can rename this room.', 'owner')
        except TaskHiveError as e:
            return error_response(e)

        write_serializer = self.get_serializer(instance, data=request.data, partial=partial)
        write_serializer.is_valid(raise_exception=True)
        instance = write_serializer.save()
        return Response(self._read(instance))

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            require(is_room_owner(instance, identity_of(request.user)),
                    'Only the room owner can delete this room.', 'owner')
        except TaskHiveError as e:
            return error_response(e)

        room_id = instance.id
        # Projects, tasks, comments and discussion messages go with the room.
        instance.delete()
        logger.info(f"Room {room_id} deleted by {identity_of(request.user)}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=AddRoomMemberSerializer, responses={201: RoomSerializer})
    @action(detail=True, methods=["post"])
    def add_member(self, request, pk=None):
        """
        Owner invites an identity; the invite admits the member immediately.
        Expects: {"email": "someone@example.com"}
        """
        room = self.get_object()
        try:
            require(is_room_owner(room, identity_of(request.user)),
                    'Only the room owner can add members.', 'owner')
        except TaskHiveError as e:
            return error_response(e)

        serializer = AddRoomMemberSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": serializer.errors["email"][0]}, status=status.HTTP_400_BAD_REQUEST)
        email = serializer.validated_data["email"]

        if email == room.created_by or room.members.filter(email=email).exists():
            return Response({"error": "User is already a member."}, status=status.HTTP_400_BAD_REQUEST)

        RoomMember.objects.create(room=room, email=email)
        logger.info(f"{email} added to room {room.id}")
        return Response(self._read(room), status=status.HTTP_201_CREATED)
