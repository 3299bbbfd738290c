"""
Messaging service.

This module handles:
    - Validating and storing direct messages
    - Paged / incremental message history between two users
    - Building the conversation list from the flat message table
"""

from .messages import (
    send_message,
    create_text_message,
    list_messages,
    parse_since,
    validate_message_payload,
)
from .conversations import (
    Conversation,
    aggregate_conversations,
    list_conversations,
    preview_for,
    PHOTO_PREVIEW,
    LOCATION_PREVIEW,
)

__all__ = [
    "send_message",
    "create_text_message",
    "list_messages",
    "parse_since",
    "validate_message_payload",
    "Conversation",
    "aggregate_conversations",
    "list_conversations",
    "preview_for",
    "PHOTO_PREVIEW",
    "LOCATION_PREVIEW",
]
