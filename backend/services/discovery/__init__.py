"""
Proximity discovery service.

This module handles:
    - The 1 km post feed and post creation
    - Polling for newly created nearby posts
    - Nearby user discovery, search and the user directory
"""

from .posts import (
    find_nearby_posts,
    poll_new_nearby_posts,
    create_post,
    expire_posts_older_than,
)
from .users import (
    find_nearby_users,
    search_users,
    list_other_users,
    update_user_location,
)

__all__ = [
    # Posts
    "find_nearby_posts",
    "poll_new_nearby_posts",
    "create_post",
    "expire_posts_older_than",
    # Users
    "find_nearby_users",
    "search_users",
    "list_other_users",
    "update_user_location",
]
