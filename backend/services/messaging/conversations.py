"""
Conversation list built from the flat message table.

A single newest-first pass over the user's recent messages records the first
message seen per counterpart. Because the scan is newest first, that message
is the latest one in the conversation; only the final list is sorted.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List

from django.db.models import Q

from chat.models import Message
from common.constants import CONVERSATION_SCAN_LIMIT, MAX_CONVERSATIONS

PHOTO_PREVIEW = "\U0001F4F7 Photo"
LOCATION_PREVIEW = "\U0001F4CD Location"


@dataclass
class Conversation:
    """Latest message between the requesting user and one counterpart."""
    user: object
    last_message: str
    timestamp: datetime
    type: str


def preview_for(message: Message) -> str:
    if message.type == Message.TYPE_IMAGE:
        return PHOTO_PREVIEW
    if message.type == Message.TYPE_LOCATION:
        return LOCATION_PREVIEW
    return message.content


def aggregate_conversations(user_id, messages, limit: int = MAX_CONVERSATIONS) -> List[Conversation]:
    """
    Collapse newest-first messages into one Conversation per counterpart.

    Args:
        user_id: Id of the user whose inbox is being built
        messages: Iterable of Message rows involving the user, newest first
        limit: Maximum number of conversations returned

    Returns:
        Conversations sorted by their latest message, newest first
    """
    latest: Dict[int, Conversation] = {}
    for message in messages:
        if message.sender_id == user_id:
            other = message.receiver
        else:
            other = message.sender
        if other.id in latest:
            continue
        latest[other.id] = Conversation(
            user=other,
            last_message=preview_for(message),
            timestamp=message.created_at,
            type=message.type,
        )

    conversations = sorted(latest.values(), key=lambda c: c.timestamp, reverse=True)
    return conversations[:limit]


def list_conversations(user) -> List[Conversation]:
    """Conversation list for `user`, built from their most recent messages."""
    recent = (
        Message.objects.filter(Q(sender=user) | Q(receiver=user))
        .select_related("sender", "receiver")
        .order_by("-created_at", "-id")[:CONVERSATION_SCAN_LIMIT]
    )
    return aggregate_conversations(user.id, recent)
