from datetime import timedelta

import pytest
from django.utils import timezone

from task.models import Task, TaskDiscussionMessage

pytestmark = pytest.mark.django_db

TASKS = '/api/v1/tasks/'


def url(task, action=''):
    return f'{TASKS}{task.id}/{action + "/" if action else ""}'


class TestCreate:
    def test_member_creates_task_for_approved_assignee(self, client_for, project, member, leader):
        response = client_for(member).post(TASKS, {
            'project': project.id,
            'title': 'Draft homepage',
            'assigned_to': 'LEAD@x.com',
            'priority': 'high',
            'due_date': '2030-01-01',
        }, format='json')
        assert response.status_code == 201
        body = response.json()
        assert body['status'] == 'Not Started'
        assert body['priority'] == 'High'
        assert body['assigned_to'] == 'lead@x.com'
        assert body['is_overdue'] is False
        assert body['updated_at'] is None

    def test_priority_defaults_to_low(self, client_for, project, member):
        response = client_for(member).post(TASKS, {
            'project': project.id, 'title': 'Small thing', 'assigned_to': member.email,
        }, format='json')
        assert response.json()['priority'] == 'Low'

    def test_title_and_assignee_are_required(self, client_for, project, member):
        client = client_for(member)
        no_title = client.post(TASKS, {'project': project.id, 'title': '  ', 'assigned_to': member.email}, format='json')
        assert no_title.status_code == 400
        no_assignee = client.post(TASKS, {'project': project.id, 'title': 'Orphan'}, format='json')
        assert no_assignee.status_code == 400
        assert no_assignee.json()['error'] == 'Please assign the task to a member.'
        assert not Task.objects.exists()

    def test_pending_member_cannot_be_assigned(self, client_for, project, member, newcomer):
        response = client_for(member).post(TASKS, {
            'project': project.id, 'title': 'Nope', 'assigned_to': newcomer.email,
        }, format='json')
        assert response.status_code == 400
        assert 'not an approved member' in response.json()['error']

    def test_pending_member_cannot_create(self, client_for, project, newcomer, member):
        response = client_for(newcomer).post(TASKS, {
            'project': project.id, 'title': 'Eager', 'assigned_to': member.email,
        }, format='json')
        assert response.status_code == 403
        assert response.json()['required_role'] == 'approved member'


class TestVisibility:
    def test_tasks_filtered_by_project_and_hidden_from_pending(self, client_for, make_task, project, member, newcomer):
        make_task(title='One')
        make_task(title='Two')

        titles = [t['title'] for t in client_for(member).get(TASKS, {'project': project.id}).json()]
        assert titles == ['One', 'Two']
        assert client_for(newcomer).get(TASKS, {'project': project.id}).json() == []

    def test_overdue_flag_on_read(self, client_for, make_task, member):
        task = make_task(status='In Progress', due_date=timezone.localdate() - timedelta(days=1))
        body = client_for(member).get(url(task)).json()
        assert body['is_overdue'] is True
        assert body['status_bucket'] == 'In Progress'


class TestEdit:
    def test_patch_edits_fields_and_stamps_update(self, client_for, make_task, member):
        task = make_task()
        response = client_for(member).patch(url(task), {'title': 'Rewritten', 'priority': 'medium'}, format='json')
        assert response.status_code == 200
        body = response.json()
        assert body['title'] == 'Rewritten'
        assert body['priority'] == 'Medium'
        assert body['updated_at'] is not None

    def test_assign_requires_approved_member(self, client_for, make_task, member, leader, newcomer):
        task = make_task()
        client = client_for(member)
        assert client.post(url(task, 'assign'), {'assigned_to': newcomer.email}, format='json').status_code == 400

        response = client.post(url(task, 'assign'), {'assigned_to': leader.email}, format='json')
        assert response.status_code == 200
        assert response.json()['assigned_to'] == 'lead@x.com'


class TestStatus:
    def test_member_moves_task_and_legacy_done_is_stored_completed(self, client_for, make_task, member):
        task = make_task(due_date=timezone.localdate() - timedelta(days=3))
        client = client_for(member)
        assert client.post(url(task, 'set_status'), {'status': 'In Progress'}, format='json').json()['is_overdue']

        response = client.post(url(task, 'set_status'), {'status': 'done'}, format='json')
        assert response.status_code == 200
        assert response.json()['status'] == 'Completed'
        assert response.json()['is_overdue'] is False

    def test_unknown_status_rejected_and_state_kept(self, client_for, make_task, member):
        task = make_task(status='In Progress')
        response = client_for(member).post(url(task, 'set_status'), {'status': 'Shipped'}, format='json')
        assert response.status_code == 400
        task.refresh_from_db()
        assert task.status == 'In Progress'
        assert task.updated_at is None

    def test_pending_review_locked_to_leader(self, client_for, make_task, member, leader):
        task = make_task(status='Pending Review')
        denied = client_for(member).post(url(task, 'set_status'), {'status': 'In Progress'}, format='json')
        assert denied.status_code == 403
        assert denied.json()['required_role'] == 'leader'

        allowed = client_for(leader).post(url(task, 'set_status'), {'status': 'In Progress'}, format='json')
        assert allowed.status_code == 200


class TestReview:
    def test_leader_approves_and_rejects_pending_review(self, client_for, make_task, leader):
        client = client_for(leader)
        approved = client.post(url(make_task(status='Pending Review'), 'approve'))
        assert approved.status_code == 200
        assert approved.json()['status'] == 'Completed'

        rejected = client.post(url(make_task(status='Pending Review'), 'reject'))
        assert rejected.json()['status'] == 'Redo'

    def test_review_outside_pending_review_conflicts(self, client_for, make_task, leader):
        task = make_task(status='In Progress')
        response = client_for(leader).post(url(task, 'approve'))
        assert response.status_code == 409
        task.refresh_from_db()
        assert task.status == 'In Progress'

    def test_member_cannot_review(self, client_for, make_task, member):
        response = client_for(member).post(url(make_task(status='Pending Review'), 'reject'))
        assert response.status_code == 403


class TestCommentsAndDelete:
    def test_comment_appends(self, client_for, make_task, member):
        task = make_task()
        client = client_for(member)
        response = client.post(url(task, 'comment'), {'text': ' Looks good '}, format='json')
        assert response.status_code == 201
        comments = response.json()['comments']
        assert [(c['text'], c['author']) for c in comments] == [('Looks good', 'member@x.com')]

        assert client.post(url(task, 'comment'), {'text': '   '}, format='json').status_code == 400

    def test_only_leader_deletes(self, client_for, make_task, member, leader):
        task = make_task()
        assert client_for(member).delete(url(task)).status_code == 403
        assert client_for(leader).delete(url(task)).status_code == 204
        assert not Task.objects.filter(pk=task.pk).exists()


class TestMine:
    def test_my_tasks_sorted_grouped_and_searchable(self, client_for, make_task, member, leader):
        today = timezone.localdate()
        make_task(title='Later', due_date=today + timedelta(days=5))
        make_task(title='Undated')
        make_task(title='Soon', due_date=today, status='In Progress')
        make_task(title='Not mine', assigned_to=leader.email)

        body = client_for(member).get(f'{TASKS}mine/').json()
        assert [t['title'] for t in body['tasks']] == ['Soon', 'Later', 'Undated']
        assert [t['title'] for t in body['groups']['In Progress']] == ['Soon']
        assert [t['title'] for t in body['groups']['Not Started']] == ['Later', 'Undated']

        searched = client_for(member).get(f'{TASKS}mine/', {'search': 'launch'}).json()
        assert len(searched['tasks']) == 3
        searched = client_for(member).get(f'{TASKS}mine/', {'search': 'soon'}).json()
        assert [t['title'] for t in searched['tasks']] == ['Soon']


class TestDiscussion:
    def test_post_and_read_thread(self, client_for, make_task, member, leader, project):
        task = make_task()
        assert client_for(member).post(url(task, 'discussion'), {'text': 'first'}, format='json').status_code == 201
        assert client_for(leader).post(url(task, 'discussion'), {'text': 'second'}, format='json').status_code == 201

        message = TaskDiscussionMessage.objects.first()
        assert message.room_id == project.room_id

        page = client_for(member).get(url(task, 'discussion')).json()
        assert page['count'] == 2
        assert [(m['user'], m['text']) for m in page['results']] == [
            ('member@x.com', 'first'), ('lead@x.com', 'second'),
        ]

    def test_empty_message_rejected(self, client_for, make_task, member):
        response = client_for(member).post(url(make_task(), 'discussion'), {'text': ''}, format='json')
        assert response.status_code == 400
