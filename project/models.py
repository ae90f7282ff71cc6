from django.db import models


class Project(models.Model):
    ROLE_CHOICES = [
        ('leader', 'Leader'),
        ('member', 'Member'),
    ]

    room = models.ForeignKey('room.Room', on_delete=models.CASCADE, related_name='projects')
    title = models.CharField(max_length=555)
    description = models.TextField(blank=True, default='')
    creator_email = models.EmailField()
    # Whether the creator took the leader seat when creating the project.
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='member')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title

    class Meta:
        ordering = ['-created_at']

    @property
    def member_statuses(self):
        """email -> status for every member row (uses the prefetch cache)."""
        return {m.email: m.status for m in self.members.all()}


class ProjectMembers(models.Model):
    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='members')
    email = models.EmailField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('project', 'email')
        ordering = ['joined_at', 'id']
        verbose_name_plural = 'Project members'

    def __str__(self):
        return f"{self.email} ({self.status}) - {self.project.title}"
