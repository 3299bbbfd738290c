from django.db import models
from django.conf import settings


class Post(models.Model):
    """Short-lived nearby activity posted by a user"""

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='posts'
    )

    title = models.CharField(max_length=255, blank=True)
    content = models.TextField()
    price = models.CharField(max_length=50, default='Free')
    category = models.CharField(max_length=50, default='General')
    image_url = models.TextField(null=True, blank=True)  # data URL

    # Where the activity happens
    latitude = models.FloatField()
    longitude = models.FloatField()

    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'posts'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['latitude', 'longitude'], name='post_lat_lng_idx'),
            models.Index(fields=['active', 'created_at'], name='post_active_created_idx'),
        ]

    def __str__(self):
        return f"Post #{self.id} - {self.author} - {self.title}"


class JoinRequest(models.Model):
    """A user's request to take part in someone else's post"""

    STATUS_PENDING = 'PENDING'
    STATUS_ACCEPTED = 'ACCEPTED'
    STATUS_REJECTED = 'REJECTED'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='join_requests'
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='join_requests'
    )

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'join_requests'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['post', 'sender'],
                name='unique_post_sender'
            )
        ]

    def __str__(self):
        return f"JoinRequest #{self.id} - Post {self.post_id} <- {self.sender} ({self.status})"
