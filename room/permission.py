from rest_framework.permissions import BasePermission

from utils.exceptions import AccessDenied

ROOM_MEMBER = 'member'
ROOM_NON_MEMBER = 'non-member'


def identity_of(user):
    """The email identity every membership and assignment rule keys on."""
    if not user or user.is_anonymous:
        return None
    return (user.email or '').strip().lower() or None


def is_room_owner(room, identity):
    return bool(identity) and room.created_by == identity


def room_membership_status(room, identity):
    """
    Rooms only hold approved members, so standing is binary. The creator
    counts as a member even when no member row names them.
    """
    if identity and (is_room_owner(room, identity) or identity in room.member_emails):
        return ROOM_MEMBER
    return ROOM_NON_MEMBER


def is_room_member(room, identity):
    return room_membership_status(room, identity) == ROOM_MEMBER


def can_create_project(room, identity):
    return is_room_member(room, identity)


def require(allowed, message, required_role):
    if not allowed:
        raise AccessDenied(message, required_role=required_role)


class RoomAccessPermission(BasePermission):
    """
    Object permission for rooms: any member may read. Owner-only
    mutations are checked inside the viewset so the response can name the
    role that was missing.
    """
    message = 'You are not a member of this room.'

    def has_object_permission(self, request, view, obj):
        return is_room_member(obj, identity_of(request.user))
