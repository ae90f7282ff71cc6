from django.db import models


class Room(models.Model):
    name = models.CharField(max_length=255)
    created_by = models.EmailField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['-created_at']

    @property
    def member_emails(self):
        """Approved member identities, creator included even when not listed."""
        emails = [m.email for m in self.members.all() if m.status == RoomMember.Status.APPROVED]
        if self.created_by and self.created_by not in emails:
            emails.insert(0, self.created_by)
        return emails


class RoomMember(models.Model):
    class Status(models.TextChoices):
        # Rooms have no pending state: the owner's invite admits immediately.
        APPROVED = 'approved', 'Approved'

    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='members')
    email = models.EmailField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.APPROVED)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('room', 'email')
        ordering = ['added_at', 'id']

    def __str__(self):
        return f"{self.email} in {self.room.name}"
