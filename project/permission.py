from rest_framework.permissions import BasePermission

from room.permission import identity_of

LEADER = 'leader'
APPROVED_MEMBER = 'approved_member'
PENDING_MEMBER = 'pending_member'
REJECTED_OR_NONE = 'rejected_or_none'


def is_project_leader(project, identity):
    return bool(identity) and identity == project.creator_email and project.role == 'leader'


def project_role(project, identity):
    """
    Classify an identity's standing in a project.

    The creator is the leader when they took the leader role, and otherwise
    an approved member whether or not a member row names them. Everyone else
    is classified by their member row: approved, pending, or (rejected or
    absent) no standing.
    """
    if not identity:
        return REJECTED_OR_NONE
    if identity == project.creator_email:
        return LEADER if project.role == 'leader' else APPROVED_MEMBER

    member_status = project.member_statuses.get(identity)
    if member_status == 'approved':
        return APPROVED_MEMBER
    if member_status == 'pending':
        return PENDING_MEMBER
    return REJECTED_OR_NONE


def can_access_project(project, identity):
    return project_role(project, identity) in (LEADER, APPROVED_MEMBER)


def can_perform_task_actions(project, identity):
    # Creating, assigning, moving and commenting share one gate.
    return project_role(project, identity) in (LEADER, APPROVED_MEMBER)


def can_manage_members(project, identity):
    return project_role(project, identity) == LEADER


def can_delete_task(project, identity):
    return project_role(project, identity) == LEADER


def assignable_members(project):
    """Approved identities, creator first, pending/rejected excluded."""
    emails = [project.creator_email] if project.creator_email else []
    for email, member_status in project.member_statuses.items():
        if member_status == 'approved' and email not in emails:
            emails.append(email)
    return emails


class ProjectAccessPermission(BasePermission):
    """
    Object permission for projects.

    - detail reads and member actions: leader or approved member
    - membership requests (`request_join`) are open to room members, which
      the viewset's queryset already guarantees
    - leader-only actions are checked in the viewset so the response names
      the required role
    """
    message = 'You are not an approved member of this project.'

    open_actions = ('request_join',)

    def has_object_permission(self, request, view, obj):
        if getattr(view, 'action', None) in self.open_actions:
            return True
        return can_access_project(obj, identity_of(request.user))
