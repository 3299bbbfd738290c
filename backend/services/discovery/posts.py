"""
Proximity post feed and the new-nearby-posts poll.

Both use the same two stages: a fixed +/-0.02 degree box evaluated by the
database, then an exact Haversine cutoff of 1 km in Python.
"""

import logging
from datetime import timedelta
from typing import List

from django.db.models import Prefetch
from django.utils import timezone

from common.constants import (
    NOTIFICATION_DEFAULT_WINDOW_MINUTES,
    POST_BOX_DEGREES,
    POST_RADIUS_KM,
)
from common.exceptions import ValidationFailed
from common.utils import fixed_box, within_radius
from posts.models import JoinRequest, Post

logger = logging.getLogger(__name__)

IMAGE_DATA_PREFIX = "data:image/"


def _post_coords(post):
    return post.latitude, post.longitude


def active_posts_in_box(lat: float, lng: float):
    """Queryset of active posts inside the fixed pre-filter box."""
    min_lat, max_lat, min_lng, max_lng = fixed_box(lat, lng, POST_BOX_DEGREES)
    return Post.objects.filter(
        active=True,
        latitude__gte=min_lat,
        latitude__lte=max_lat,
        longitude__gte=min_lng,
        longitude__lte=max_lng,
    )


def find_nearby_posts(lat: float, lng: float) -> List[Post]:
    """
    Active posts within POST_RADIUS_KM of (lat, lng), newest first.

    Each post comes with its author and join requests loaded.
    """
    candidates = (
        active_posts_in_box(lat, lng)
        .select_related("author")
        .prefetch_related(
            Prefetch("join_requests", queryset=JoinRequest.objects.only("post", "sender", "status"))
        )
        .order_by("-created_at", "-id")
    )

    nearby = within_radius(lat, lng, candidates, POST_RADIUS_KM, _post_coords)
    return [post for post, _ in nearby]


def poll_new_nearby_posts(lat: float, lng: float, since=None) -> List[Post]:
    """
    Active posts created after `since` within POST_RADIUS_KM of (lat, lng).

    The client owns `since` and advances it between polls; without one the
    last hour is used.
    """
    if since is None:
        since = timezone.now() - timedelta(minutes=NOTIFICATION_DEFAULT_WINDOW_MINUTES)

    candidates = (
        active_posts_in_box(lat, lng)
        .filter(created_at__gt=since)
        .only("id", "content", "latitude", "longitude", "created_at")
        .order_by("-created_at", "-id")
    )

    nearby = within_radius(lat, lng, candidates, POST_RADIUS_KM, _post_coords)
    return [post for post, _ in nearby]


def default_title(content: str) -> str:
    return content[:50] + ("..." if len(content) > 50 else "")


def create_post(
    author,
    content: str,
    lat: float,
    lng: float,
    title: str = None,
    price: str = None,
    category: str = None,
    image_url: str = None,
) -> Post:
    """
    Publish a post at (lat, lng).

    Missing title defaults to the first 50 characters of the content.
    """
    if image_url and not image_url.startswith(IMAGE_DATA_PREFIX):
        raise ValidationFailed("Invalid image data")

    post = Post.objects.create(
        author=author,
        title=title or default_title(content),
        content=content,
        price=price or "Free",
        category=category or "General",
        image_url=image_url or None,
        latitude=lat,
        longitude=lng,
    )

    logger.info("Post %s created by %s at (%s, %s)", post.id, author.id, lat, lng)
    return post


def expire_posts_older_than(hours: int, dry_run: bool = False) -> int:
    """Deactivate active posts older than `hours`. Returns how many matched."""
    cutoff = timezone.now() - timedelta(hours=hours)
    stale = Post.objects.filter(active=True, created_at__lt=cutoff)
    count = stale.count()
    if not dry_run and count:
        stale.update(active=False)
        logger.info("Deactivated %d posts older than %d hours", count, hours)
    return count
