import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from project.models import Project, ProjectMembers
from room.models import Room, RoomMember
from task.models import Task
from user.models import UserProfile

PASSWORD = 'Hive!pass42'


@pytest.fixture
def make_user(db):
    def _make(email, role='member'):
        user = User.objects.create_user(username=email, email=email, password=PASSWORD)
        UserProfile.objects.create(user=user, role=role)
        return user
    return _make


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def leader(make_user):
    return make_user('lead@x.com')


@pytest.fixture
def member(make_user):
    return make_user('member@x.com')


@pytest.fixture
def newcomer(make_user):
    """In the room but only pending on the project."""
    return make_user('new@x.com')


@pytest.fixture
def outsider(make_user):
    return make_user('out@x.com')


@pytest.fixture
def room(leader, member, newcomer):
    room = Room.objects.create(name='Studio', created_by=leader.email)
    for email in (leader.email, member.email, newcomer.email):
        RoomMember.objects.create(room=room, email=email)
    return room


@pytest.fixture
def project(room, leader, member, newcomer):
    project = Project.objects.create(room=room, title='Launch', creator_email=leader.email, role='leader')
    ProjectMembers.objects.create(project=project, email=leader.email, status=ProjectMembers.Status.APPROVED)
    ProjectMembers.objects.create(project=project, email=member.email, status=ProjectMembers.Status.APPROVED)
    ProjectMembers.objects.create(project=project, email=newcomer.email, status=ProjectMembers.Status.PENDING)
    return project


@pytest.fixture
def make_task(project, member):
    def _make(**fields):
        fields.setdefault('project', project)
        fields.setdefault('title', 'Write copy')
        fields.setdefault('assigned_to', member.email)
        return Task.objects.create(**fields)
    return _make
