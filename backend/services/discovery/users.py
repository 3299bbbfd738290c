"""
User directory: nearby discovery, search and the full user list.

Every listing is annotated with the caller's friendship status towards each
user, looked up once per request.
"""

import logging
from typing import List, Tuple

from django.contrib.auth import get_user_model
from django.db.models import Q

from common.constants import (
    DEFAULT_DISCOVERY_RADIUS_KM,
    MIN_SEARCH_LENGTH,
    USER_SEARCH_LIMIT,
)
from common.utils import bounding_box, within_radius
from friends.models import Friendship
from services.social import friendship_status_map

User = get_user_model()
logger = logging.getLogger(__name__)


def find_nearby_users(user, lat: float, lng: float, radius_km: float = DEFAULT_DISCOVERY_RADIUS_KM) -> List[dict]:
    """
    Other users whose last-known location is within `radius_km` of (lat, lng).

    Returns:
        List of dicts {"user", "distance", "friendship_status"} sorted closest first
    """
    min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)

    candidates = User.objects.exclude(id=user.id).filter(
        current_latitude__isnull=False,
        current_longitude__isnull=False,
        current_latitude__gte=min_lat,
        current_latitude__lte=max_lat,
    )
    # Skip the longitude pre-filter when the box wraps the antimeridian
    if min_lng >= -180 and max_lng <= 180:
        candidates = candidates.filter(
            current_longitude__gte=min_lng,
            current_longitude__lte=max_lng,
        )

    nearby: List[Tuple[object, float]] = within_radius(
        lat, lng, candidates, radius_km,
        lambda u: (u.current_latitude, u.current_longitude),
    )
    nearby.sort(key=lambda item: item[1])

    statuses = friendship_status_map(user)
    return [
        {
            "user": other,
            "distance": round(distance, 3),
            "friendship_status": statuses.get(other.id),
        }
        for other, distance in nearby
    ]


def search_users(user, query: str) -> List[dict]:
    """Name/email substring search; queries shorter than MIN_SEARCH_LENGTH return nothing."""
    query = (query or "").strip()
    if len(query) < MIN_SEARCH_LENGTH:
        return []

    matches = (
        User.objects.exclude(id=user.id)
        .filter(Q(email__icontains=query) | Q(name__icontains=query))
        .order_by("name", "id")[:USER_SEARCH_LIMIT]
    )

    statuses = friendship_status_map(user)
    return [
        {
            "user": other,
            "is_friend": other.id in statuses,
            "friendship_status": statuses.get(other.id),
        }
        for other in matches
    ]


def list_other_users(user) -> List[dict]:
    """Every other user, newest accounts first."""
    statuses = friendship_status_map(user)
    return [
        {
            "user": other,
            "is_friend": statuses.get(other.id) == Friendship.STATUS_ACCEPTED,
            "friendship_status": statuses.get(other.id),
        }
        for other in User.objects.exclude(id=user.id).order_by("-date_joined", "-id")
    ]


def update_user_location(user, lat: float, lng: float):
    user.current_latitude = lat
    user.current_longitude = lng
    user.save(update_fields=["current_latitude", "current_longitude"])
    logger.debug("Location updated for user %s", user.id)
    return user
