"""
Direct message storage and per-conversation history.

Messages are append-only; a conversation is never stored, it is the set of
rows exchanged between two user ids.
"""

import logging
from datetime import datetime, timezone as dt_timezone
from typing import Optional

from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils.dateparse import parse_datetime
from django.utils import timezone

from chat.models import Message
from common.constants import DEFAULT_MESSAGE_PAGE, MAX_PAGE_SIZE
from common.exceptions import ResourceNotFound, ValidationFailed

User = get_user_model()
logger = logging.getLogger(__name__)

VALID_TYPES = (Message.TYPE_TEXT, Message.TYPE_IMAGE, Message.TYPE_LOCATION)
IMAGE_DATA_PREFIX = "data:image/"


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_message_payload(
    content,
    message_type: str,
    image_url=None,
    latitude=None,
    longitude=None,
) -> dict:
    """
    Check a message before it is stored and return the model fields to save.

    Raises:
        ValidationFailed: On a bad type, a missing image data URL or
            missing/out-of-range coordinates.
    """
    if not content or not isinstance(content, str):
        raise ValidationFailed("Invalid content")

    if message_type not in VALID_TYPES:
        raise ValidationFailed("Invalid message type")

    fields = {"content": content, "type": message_type}

    if message_type == Message.TYPE_IMAGE:
        if not image_url or not isinstance(image_url, str):
            raise ValidationFailed("Image URL is required for image messages")
        if not image_url.startswith(IMAGE_DATA_PREFIX):
            raise ValidationFailed("Invalid image data")
        fields["image_url"] = image_url

    elif message_type == Message.TYPE_LOCATION:
        if not _is_number(latitude) or not _is_number(longitude):
            raise ValidationFailed("Valid latitude and longitude are required for location messages")
        if latitude < -90 or latitude > 90 or longitude < -180 or longitude > 180:
            raise ValidationFailed("Invalid coordinates")
        fields["latitude"] = float(latitude)
        fields["longitude"] = float(longitude)

    return fields


def send_message(
    sender,
    receiver_id,
    content,
    message_type: Optional[str] = None,
    image_url=None,
    latitude=None,
    longitude=None,
) -> Message:
    """
    Store one message from `sender` to the user `receiver_id`.

    Returns:
        The created Message with its sender loaded.

    Raises:
        ValidationFailed: If the payload is invalid.
        ResourceNotFound: If the receiver does not exist.
    """
    if receiver_id in (None, ""):
        raise ValidationFailed("Invalid receiver_id")

    fields = validate_message_payload(
        content,
        message_type or Message.TYPE_TEXT,
        image_url=image_url,
        latitude=latitude,
        longitude=longitude,
    )

    try:
        receiver = User.objects.filter(pk=receiver_id).first()
    except (TypeError, ValueError):
        raise ValidationFailed("Invalid receiver_id")
    if receiver is None:
        raise ResourceNotFound("Receiver not found")

    message = Message.objects.create(sender=sender, receiver=receiver, **fields)
    logger.debug("Message %s stored: %s -> %s (%s)", message.id, sender.id, receiver.id, message.type)
    return message


def create_text_message(sender_id, receiver_id, content: str) -> Message:
    """Store a plain text message between two known user ids (system follow-ups)."""
    return Message.objects.create(
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        type=Message.TYPE_TEXT,
    )


def parse_since(since):
    """Parse an ISO-8601 `since` value; naive values are read as UTC."""
    if since in (None, ""):
        return None
    try:
        parsed = parse_datetime(since)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationFailed("Invalid since timestamp")
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def list_messages(user, other_id, since=None, take=DEFAULT_MESSAGE_PAGE, skip=0):
    """
    Messages exchanged between `user` and `other_id`, newest first.

    Args:
        user: The requesting user
        other_id: The counterpart's user id
        since: Only messages created strictly after this (ISO string or datetime)
        take: Page size, capped at MAX_PAGE_SIZE
        skip: Offset for pagination

    Returns:
        List of Message instances with senders loaded
    """
    take = max(0, min(int(take), MAX_PAGE_SIZE))
    skip = max(0, int(skip))

    qs = Message.objects.filter(
        Q(sender=user, receiver_id=other_id) | Q(sender_id=other_id, receiver=user)
    )

    if since is not None:
        since_dt = since if isinstance(since, datetime) else parse_since(since)
        if since_dt is not None:
            qs = qs.filter(created_at__gt=since_dt)

    qs = qs.select_related("sender").order_by("-created_at", "-id")
    return list(qs[skip:skip + take])
