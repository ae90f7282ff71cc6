from datetime import timedelta

import pytest
from django.utils import timezone

from project.models import Project, ProjectMembers
from room.models import Room

pytestmark = pytest.mark.django_db

DASHBOARD = '/api/v1/dashboard/'


@pytest.fixture
def today():
    return timezone.localdate()


def test_summary_counts_callers_tasks_and_rooms(client_for, make_task, member, leader, today):
    make_task(status='In Progress', due_date=today - timedelta(days=1))
    make_task(status='Done', due_date=today - timedelta(days=10))
    make_task(status='Completed')
    make_task(assigned_to=leader.email)

    body = client_for(member).get(f'{DASHBOARD}summary/').json()
    assert body['identity'] == 'member@x.com'
    assert body['rooms'] == 1
    assert body['total'] == 3
    assert body['completed'] == 2
    assert body['overdue'] == 1
    assert body['percent_complete'] == 67


def test_summary_for_new_user_is_empty(client_for, outsider):
    body = client_for(outsider).get(f'{DASHBOARD}summary/').json()
    assert body == {
        'identity': 'out@x.com', 'rooms': 0,
        'total': 0, 'completed': 0, 'overdue': 0, 'percent_complete': 0,
    }


def test_creator_member_role_scenario(client_for, make_user, today):
    """A non-leader creator still sees their own overdue work."""
    creator = make_user('a@x.com')
    room = Room.objects.create(name='Solo', created_by=creator.email)
    project = Project.objects.create(room=room, title='Side', creator_email=creator.email, role='member')
    project.tasks.create(title='Late', assigned_to=creator.email, status='In Progress',
                         due_date=today - timedelta(days=1))

    body = client_for(creator).get(f'{DASHBOARD}summary/').json()
    assert (body['total'], body['completed'], body['overdue']) == (1, 0, 1)


def test_taskboard_breakdown_and_recent_activity(client_for, make_task, member, project, today):
    first = make_task(title='First', status='Completed')
    make_task(title='Second', status='In Progress', due_date=today - timedelta(days=2))
    make_task(title='Third')
    client = client_for(member)
    client.post(f'/api/v1/tasks/{first.id}/comment/', {'text': 'done!'}, format='json')

    body = client.get(f'{DASHBOARD}taskboard/').json()
    [launch] = body['projects']
    assert launch['project_id'] == project.id
    assert (launch['total'], launch['completed'], launch['overdue'], launch['percent_complete']) == (3, 1, 1, 33)
    assert launch['status_counts']['Not Started'] == 1
    assert body['overall']['priority_counts'] == {'Low': 3, 'Medium': 0, 'High': 0}
    assert [t['title'] for t in body['recent_activity']] == ['First']


def test_taskboard_hides_projects_caller_is_pending_on(client_for, project, newcomer):
    assert client_for(newcomer).get(f'{DASHBOARD}taskboard/').json()['projects'] == []
    ProjectMembers.objects.filter(project=project, email=newcomer.email).update(status='approved')
    assert len(client_for(newcomer).get(f'{DASHBOARD}taskboard/').json()['projects']) == 1


def test_calendar_lists_tasks_due_on_day(client_for, make_task, outsider, member, today):
    make_task(title='Today A', due_date=today)
    make_task(title='Today B', due_date=today, description='press release')
    make_task(title='Tomorrow', due_date=today + timedelta(days=1))

    body = client_for(member).get(f'{DASHBOARD}calendar/').json()
    assert [t['title'] for t in body['tasks']] == ['Today A', 'Today B']

    tomorrow = (today + timedelta(days=1)).isoformat()
    body = client_for(member).get(f'{DASHBOARD}calendar/', {'date': tomorrow}).json()
    assert [t['title'] for t in body['tasks']] == ['Tomorrow']

    body = client_for(member).get(f'{DASHBOARD}calendar/', {'search': 'PRESS'}).json()
    assert [t['title'] for t in body['tasks']] == ['Today B']

    assert client_for(outsider).get(f'{DASHBOARD}calendar/').json()['tasks'] == []


def test_calendar_rejects_bad_date(client_for, member):
    response = client_for(member).get(f'{DASHBOARD}calendar/', {'date': 'tomorrow'})
    assert response.status_code == 400


def test_due_tasks_are_callers_overdue_tasks(client_for, make_task, member, leader, today):
    make_task(title='Late', status='In Progress', due_date=today - timedelta(days=1))
    make_task(title='Due today', due_date=today)
    make_task(title='Finished late', status='Done', due_date=today - timedelta(days=4))
    make_task(title='Someone else', assigned_to=leader.email, due_date=today - timedelta(days=1))

    body = client_for(member).get(f'{DASHBOARD}due-tasks/').json()
    assert [t['title'] for t in body['due_tasks']] == ['Late']


def test_project_member_outside_the_room_sees_consistent_counts(client_for, make_user, project, leader, today):
    guest = make_user('ext@x.com')
    lead = client_for(leader)
    assert lead.post(f'/api/v1/projects/{project.id}/add_member/', {'email': guest.email},
                     format='json').status_code == 201
    assert lead.post(f'/api/v1/projects/{project.id}/set_member_status/',
                     {'email': guest.email, 'status': 'approved'}, format='json').status_code == 200
    assert lead.post('/api/v1/tasks/', {
        'project': project.id, 'title': 'Outside help', 'assigned_to': guest.email,
        'due_date': (today - timedelta(days=2)).isoformat(),
    }, format='json').status_code == 201

    client = client_for(guest)
    summary = client.get(f'{DASHBOARD}summary/').json()
    due_tasks = client.get(f'{DASHBOARD}due-tasks/').json()['due_tasks']
    mine = client.get('/api/v1/tasks/mine/').json()['tasks']
    assert summary['rooms'] == 0
    assert summary['overdue'] == len(due_tasks) == len(mine) == 1
    assert summary['total'] == 1

    assert client.get(f'/api/v1/projects/{project.id}/').status_code == 200
    members = client.get(f'/api/v1/projects/{project.id}/assignable_members/').json()['members']
    assert guest.email in members
