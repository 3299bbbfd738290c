from django.db import models
from django.conf import settings


class Message(models.Model):
    """Direct message between two users. Rows are never edited after creation."""

    TYPE_TEXT = 'text'
    TYPE_IMAGE = 'image'
    TYPE_LOCATION = 'location'

    TYPE_CHOICES = [
        (TYPE_TEXT, 'Text'),
        (TYPE_IMAGE, 'Image'),
        (TYPE_LOCATION, 'Location'),
    ]

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_messages'
    )

    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='received_messages'
    )

    content = models.TextField()
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_TEXT)

    # Media payloads
    image_url = models.TextField(null=True, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'messages'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['sender', 'receiver', 'created_at'], name='msg_pair_created_idx'),
            models.Index(fields=['receiver', 'created_at'], name='msg_receiver_created_idx'),
        ]

    def __str__(self):
        return f"Message #{self.id} - {self.sender_id} -> {self.receiver_id} ({self.type})"
