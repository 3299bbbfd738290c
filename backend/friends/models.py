from django.db import models
from django.db.models.functions import Greatest, Least
from django.conf import settings


class Friendship(models.Model):
    """
    Relationship between two users.

    Created by `user` (the requester) towards `friend` (the target).
    PENDING rows are directed; ACCEPTED rows are read in both directions.
    A pair of users has at most one row, whichever way it points.
    """

    STATUS_PENDING = 'PENDING'
    STATUS_ACCEPTED = 'ACCEPTED'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='friendships_sent'
    )

    friend = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='friendships_received'
    )

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'friendships'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'friend'],
                name='unique_user_friend'
            ),
            models.UniqueConstraint(
                Least('user', 'friend'),
                Greatest('user', 'friend'),
                name='unique_friendship_pair'
            ),
        ]

    def __str__(self):
        return f"Friendship #{self.id} - {self.user} -> {self.friend} ({self.status})"
