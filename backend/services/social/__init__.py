"""
Social graph service.

This module handles:
    - Friendship requests, acceptance and rejection
    - Join requests on posts and their follow-up messages
"""

from .friendships import (
    request_friendship,
    accept_friendship,
    reject_friendship,
    find_friendship_between,
    friendship_status_map,
    accepted_friend_ids,
    get_friends_overview,
)
from .join_requests import (
    create_join_request,
    respond_to_join_request,
    list_join_requests,
    send_follow_up_message,
    acceptance_message,
    join_request_message,
)

__all__ = [
    # Friendships
    "request_friendship",
    "accept_friendship",
    "reject_friendship",
    "find_friendship_between",
    "friendship_status_map",
    "accepted_friend_ids",
    "get_friends_overview",
    # Join requests
    "create_join_request",
    "respond_to_join_request",
    "list_join_requests",
    "send_follow_up_message",
    "acceptance_message",
    "join_request_message",
]
