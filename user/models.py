from django.db import models
from django.contrib.auth.models import User


class UserProfile(models.Model):
    # Shown next to the user's name; never consulted by any permission check.
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('member', 'Member'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='member')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.user.email or self.user.username


def display_role(user):
    """Global role for display, defaulting to 'member' when no profile exists."""
    profile = getattr(user, 'profile', None)
    return profile.role if profile else 'member'
