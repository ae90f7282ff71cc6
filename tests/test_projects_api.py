import pytest

from project.models import Project, ProjectMembers

pytestmark = pytest.mark.django_db

PROJECTS = '/api/v1/projects/'


def test_room_member_creates_project_as_leader(client_for, room, member):
    response = client_for(member).post(PROJECTS, {
        'room': room.id,
        'title': 'Website',
        'role': 'leader',
        'members': ['new@x.com', {'email': 'lead@x.com', 'status': 'approved'}],
    }, format='json')
    assert response.status_code == 201
    body = response.json()
    assert body['creator_email'] == 'member@x.com'
    assert body['my_role'] == 'leader'
    assert body['is_leader'] is True
    statuses = {m['email']: m['status'] for m in body['members']}
    assert statuses == {'member@x.com': 'approved', 'new@x.com': 'pending', 'lead@x.com': 'pending'}


def test_outsider_cannot_create_project(client_for, room, outsider):
    response = client_for(outsider).post(PROJECTS, {'room': room.id, 'title': 'Sneaky'}, format='json')
    assert response.status_code == 403
    assert response.json()['required_role'] == 'room member'
    assert not Project.objects.filter(title='Sneaky').exists()


def test_project_title_required(client_for, room, member):
    response = client_for(member).post(PROJECTS, {'room': room.id, 'title': ' '}, format='json')
    assert response.status_code == 400


def test_creator_with_member_role_is_implicitly_approved(client_for, room, member):
    response = client_for(member).post(PROJECTS, {'room': room.id, 'title': 'Flat', 'role': 'member'}, format='json')
    body = response.json()
    assert body['my_role'] == 'approved_member'
    assert body['is_leader'] is False

    detail = client_for(member).get(f"{PROJECTS}{body['id']}/")
    assert detail.status_code == 200


def test_room_members_list_projects_but_pending_cannot_open(client_for, project, newcomer):
    client = client_for(newcomer)
    listed = client.get(PROJECTS, {'room': project.room_id}).json()
    assert [p['title'] for p in listed] == ['Launch']
    assert listed[0]['my_role'] == 'pending_member'

    assert client.get(f'{PROJECTS}{project.id}/').status_code == 403


def test_request_join_lands_as_pending(client_for, project, room, outsider, leader):
    room.members.create(email=outsider.email)

    response = client_for(outsider).post(f'{PROJECTS}{project.id}/request_join/')
    assert response.status_code == 201
    assert ProjectMembers.objects.get(project=project, email='out@x.com').status == 'pending'

    again = client_for(outsider).post(f'{PROJECTS}{project.id}/request_join/')
    assert again.status_code == 400

    assignable = client_for(leader).get(f'{PROJECTS}{project.id}/assignable_members/').json()['members']
    assert 'out@x.com' not in assignable


def test_add_member_starts_pending_until_leader_approves(client_for, project, leader, member):
    added = client_for(member).post(f'{PROJECTS}{project.id}/add_member/', {'email': 'Z@x.com'}, format='json')
    assert added.status_code == 201
    assert ProjectMembers.objects.get(project=project, email='z@x.com').status == 'pending'

    url = f'{PROJECTS}{project.id}/assignable_members/'
    assert 'z@x.com' not in client_for(leader).get(url).json()['members']

    denied = client_for(member).post(f'{PROJECTS}{project.id}/set_member_status/',
                                     {'email': 'z@x.com', 'status': 'approved'}, format='json')
    assert denied.status_code == 403
    assert denied.json()['required_role'] == 'leader'

    approved = client_for(leader).post(f'{PROJECTS}{project.id}/set_member_status/',
                                       {'email': 'z@x.com', 'status': 'approved'}, format='json')
    assert approved.status_code == 200
    assert client_for(leader).get(url).json()['members'] == ['lead@x.com', 'member@x.com', 'z@x.com']


def test_leader_rejects_and_removes(client_for, project, leader, newcomer):
    client = client_for(leader)
    rejected = client.post(f'{PROJECTS}{project.id}/set_member_status/',
                           {'email': newcomer.email, 'status': 'rejected'}, format='json')
    assert rejected.status_code == 200
    assert ProjectMembers.objects.get(project=project, email=newcomer.email).status == 'rejected'

    removed = client.post(f'{PROJECTS}{project.id}/remove_member/', {'email': newcomer.email}, format='json')
    assert removed.status_code == 200
    assert not ProjectMembers.objects.filter(project=project, email=newcomer.email).exists()

    missing = client.post(f'{PROJECTS}{project.id}/remove_member/', {'email': newcomer.email}, format='json')
    assert missing.status_code == 404


def test_creator_membership_is_protected(client_for, project, leader):
    client = client_for(leader)
    status_change = client.post(f'{PROJECTS}{project.id}/set_member_status/',
                                {'email': leader.email, 'status': 'rejected'}, format='json')
    assert status_change.status_code == 400

    removal = client.post(f'{PROJECTS}{project.id}/remove_member/', {'email': leader.email}, format='json')
    assert removal.status_code == 400
    assert ProjectMembers.objects.get(project=project, email=leader.email).status == 'approved'
