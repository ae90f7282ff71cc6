from rest_framework.permissions import BasePermission

from project.permission import can_access_project
from room.permission import identity_of


class TaskAccessPermission(BasePermission):
    """
    A task is visible to whoever can open its project. Leader-only actions
    and the Pending Review lock are checked in the viewset so the response
    can name the role that was missing.
    """
    message = 'You are not an approved member of this task\'s project.'

    def has_object_permission(self, request, view, obj):
        return can_access_project(obj.project, identity_of(request.user))
