"""
Friendship graph operations.

Transitions:
    no row  -> PENDING   (request by user id, directed requester -> target)
    no row  -> ACCEPTED  (request by email, the requester knows the target)
    PENDING -> ACCEPTED  (only the target may accept)
    PENDING -> deleted   (only the target may reject)
"""

import logging
from typing import Dict, List, Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Prefetch, Q

from common.constants import FRIENDS_POSTS_LIMIT
from common.exceptions import ConflictError, ResourceNotFound, ValidationFailed
from friends.models import Friendship
from posts.models import JoinRequest, Post

User = get_user_model()
logger = logging.getLogger(__name__)


def find_friendship_between(user_id, other_id) -> Optional[Friendship]:
    """Return the row linking two users in either direction, if any."""
    return Friendship.objects.filter(
        Q(user_id=user_id, friend_id=other_id) | Q(user_id=other_id, friend_id=user_id)
    ).first()


@transaction.atomic
def request_friendship(user, friend_email: Optional[str] = None, friend_id=None) -> Friendship:
    """
    Create a friendship from `user` to another user.

    A target picked by id (nearby / directory lists) gets a PENDING request.
    A target looked up by email is accepted immediately.

    Raises:
        ValidationFailed: Neither target given, or the target is the requester.
        ResourceNotFound: The target user does not exist.
        ConflictError: The pair is already linked in either direction.
    """
    if friend_id not in (None, ""):
        target = User.objects.filter(pk=friend_id).first()
        new_status = Friendship.STATUS_PENDING
    elif friend_email:
        target = User.objects.filter(email__iexact=friend_email).first()
        new_status = Friendship.STATUS_ACCEPTED
    else:
        raise ValidationFailed("Must provide friend_email or friend_id")

    if target is None:
        raise ResourceNotFound("User not found")

    if target.id == user.id:
        raise ValidationFailed("Cannot add yourself as a friend")

    if find_friendship_between(user.id, target.id):
        raise ConflictError("Friendship already exists")

    try:
        with transaction.atomic():
            friendship = Friendship.objects.create(user=user, friend=target, status=new_status)
    except IntegrityError:
        raise ConflictError("Friendship already exists")

    logger.info(
        "Friendship %s created: %s -> %s (%s)",
        friendship.id, user.id, target.id, new_status
    )
    return friendship


def _get_pending_for_target(user, friendship_id) -> Friendship:
    try:
        return Friendship.objects.select_related("user").get(
            id=friendship_id,
            friend=user,
            status=Friendship.STATUS_PENDING,
        )
    except (Friendship.DoesNotExist, ValueError):
        raise ResourceNotFound("Friend request not found")


@transaction.atomic
def accept_friendship(user, friendship_id) -> Friendship:
    """Accept a PENDING request addressed to `user`."""
    friendship = _get_pending_for_target(user, friendship_id)
    friendship.status = Friendship.STATUS_ACCEPTED
    friendship.save(update_fields=["status"])

    logger.info("Friendship %s accepted by %s", friendship.id, user.id)
    return friendship


@transaction.atomic
def reject_friendship(user, friendship_id) -> None:
    """Delete a PENDING request addressed to `user`."""
    friendship = _get_pending_for_target(user, friendship_id)
    friendship.delete()

    logger.info("Friend request %s rejected by %s", friendship_id, user.id)


def friendship_status_map(user) -> Dict[int, str]:
    """Map of counterpart user id -> friendship status for every row involving `user`."""
    rows = Friendship.objects.filter(Q(user=user) | Q(friend=user)).values_list(
        "user_id", "friend_id", "status"
    )
    statuses = {}
    for user_id, friend_id, status in rows:
        other_id = friend_id if user_id == user.id else user_id
        statuses[other_id] = status
    return statuses


def accepted_friend_ids(user) -> List[int]:
    rows = Friendship.objects.filter(
        Q(user=user) | Q(friend=user),
        status=Friendship.STATUS_ACCEPTED,
    ).values_list("user_id", "friend_id")
    return [friend_id if user_id == user.id else user_id for user_id, friend_id in rows]


def get_friends_overview(user) -> dict:
    """
    Everything the friends screen needs in one call.

    Returns:
        {
            "friends": accepted friends,
            "posts": their latest active posts, each with the caller's join requests,
            "pending_requests": PENDING rows addressed to the caller,
        }
    """
    friend_ids = accepted_friend_ids(user)

    friends = list(User.objects.filter(id__in=friend_ids))

    posts = list(
        Post.objects.filter(author_id__in=friend_ids, active=True)
        .select_related("author")
        .prefetch_related(
            Prefetch(
                "join_requests",
                queryset=JoinRequest.objects.filter(sender=user),
                to_attr="my_join_requests",
            )
        )
        .order_by("-created_at")[:FRIENDS_POSTS_LIMIT]
    )

    pending_requests = list(
        Friendship.objects.filter(friend=user, status=Friendship.STATUS_PENDING)
        .select_related("user")
    )

    return {
        "friends": friends,
        "posts": posts,
        "pending_requests": pending_requests,
    }
