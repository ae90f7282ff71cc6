from django.db import models

from task import workflow


class Task(models.Model):
    STATUS_CHOICES = [(s, s) for s in workflow.STATUSES]
    PRIORITY_CHOICES = [(p, p) for p in workflow.PRIORITIES]

    project = models.ForeignKey('project.Project', on_delete=models.CASCADE, related_name='tasks')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    due_date = models.DateField(null=True, blank=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=workflow.DEFAULT_PRIORITY)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=workflow.NOT_STARTED)
    assigned_to = models.EmailField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    # Stamped by every mutation after creation; drives the recent-activity feed.
    updated_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return self.title

    class Meta:
        ordering = ['created_at', 'id']


class TaskComment(models.Model):
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='comments')
    text = models.TextField()
    author = models.EmailField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.author}: {self.text[:40]}"


class TaskDiscussionMessage(models.Model):
    """Chat-style discussion on a task, kept apart from the task's comments."""
    room = models.ForeignKey('room.Room', on_delete=models.CASCADE, related_name='discussion_messages')
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='discussion_messages')
    text = models.TextField()
    user = models.EmailField()
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['timestamp', 'id']
