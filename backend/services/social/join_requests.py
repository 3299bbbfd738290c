"""
Join-request workflow for posts.

States: PENDING -> ACCEPTED | REJECTED (both terminal).

Creating a request messages the post author; accepting one messages the
requester with a directions link to the post. Those follow-up messages are
best-effort: a failure is logged and queued for retry, and the state change
that triggered it is kept.
"""

import logging
from typing import List, Tuple

from django.db import IntegrityError, transaction

from common.constants import DEFAULT_JOIN_REQUEST_PAGE, MAX_PAGE_SIZE
from common.exceptions import ResourceNotFound, ValidationFailed
from posts.models import JoinRequest, Post
from services.messaging import create_text_message

logger = logging.getLogger(__name__)

MAPS_DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1&destination={lat},{lng}"

RESPONSE_STATUSES = (JoinRequest.STATUS_ACCEPTED, JoinRequest.STATUS_REJECTED)


def post_label(post: Post) -> str:
    return post.title or post.content[:50]


def join_request_message(sender, post: Post) -> str:
    return (
        f'{sender.name or "Someone"} wants to join your event: "{post_label(post)}". '
        f"Check your notifications to accept or reject."
    )


def acceptance_message(post: Post) -> str:
    link = MAPS_DIRECTIONS_URL.format(lat=post.latitude, lng=post.longitude)
    return f"I've accepted your request! Here is my location: {link}"


def send_follow_up_message(sender_id, receiver_id, content: str) -> bool:
    """
    Store a follow-up message without letting a failure escape.

    On failure the message is handed to the retry task.

    Returns:
        True if the message was stored now, False otherwise
    """
    try:
        create_text_message(sender_id, receiver_id, content)
        return True
    except Exception:
        logger.exception(
            "Failed to store follow-up message %s -> %s; queueing retry",
            sender_id, receiver_id
        )

    try:
        from chat.tasks import deliver_follow_up_message
        deliver_follow_up_message.delay(sender_id, receiver_id, content)
    except Exception:
        logger.exception("Failed to queue follow-up message retry %s -> %s", sender_id, receiver_id)
    return False


def create_join_request(sender, post_id) -> Tuple[JoinRequest, bool]:
    """
    Ask to join a post. Sending the same request again returns the existing one.

    Returns:
        (join_request, created)

    Raises:
        ResourceNotFound: If the post does not exist.
        ValidationFailed: If the sender authored the post.
    """
    if post_id in (None, ""):
        raise ValidationFailed("post_id is required")

    try:
        post = Post.objects.select_related("author").get(id=post_id)
    except (Post.DoesNotExist, ValueError):
        raise ResourceNotFound("Post not found")

    if post.author_id == sender.id:
        raise ValidationFailed("Cannot request to join your own post")

    existing = JoinRequest.objects.filter(post=post, sender=sender).first()
    if existing:
        return existing, False

    try:
        with transaction.atomic():
            join_request = JoinRequest.objects.create(post=post, sender=sender)
    except IntegrityError:
        # Lost a race with an identical request
        return JoinRequest.objects.get(post=post, sender=sender), False

    logger.info("Join request %s created for post %s by %s", join_request.id, post.id, sender.id)

    send_follow_up_message(sender.id, post.author_id, join_request_message(sender, post))

    return join_request, True


def respond_to_join_request(author, request_id, new_status: str) -> JoinRequest:
    """
    Accept or reject a PENDING request on one of `author`'s posts.

    Raises:
        ValidationFailed: Unknown status, or the request was already answered.
        ResourceNotFound: No such request on the author's posts.
    """
    if new_status not in RESPONSE_STATUSES:
        raise ValidationFailed("Status must be ACCEPTED or REJECTED")

    try:
        join_request = JoinRequest.objects.select_related("post", "sender").get(
            id=request_id,
            post__author=author,
        )
    except (JoinRequest.DoesNotExist, ValueError):
        raise ResourceNotFound("Join request not found")

    if join_request.status != JoinRequest.STATUS_PENDING:
        raise ValidationFailed(f"Join request is already {join_request.status}")

    # Only the response that moves the row out of PENDING wins
    updated = JoinRequest.objects.filter(
        id=join_request.id,
        status=JoinRequest.STATUS_PENDING,
    ).update(status=new_status)
    if updated != 1:
        current = JoinRequest.objects.filter(id=join_request.id).values_list("status", flat=True).first()
        raise ValidationFailed(f"Join request is already {current}")

    join_request.status = new_status

    logger.info("Join request %s %s by %s", join_request.id, new_status, author.id)

    if new_status == JoinRequest.STATUS_ACCEPTED:
        send_follow_up_message(
            author.id,
            join_request.sender_id,
            acceptance_message(join_request.post),
        )

    return join_request


def list_join_requests(author, take=DEFAULT_JOIN_REQUEST_PAGE, skip=0) -> List[JoinRequest]:
    """Requests made on `author`'s posts, newest first."""
    take = max(0, min(int(take), MAX_PAGE_SIZE))
    skip = max(0, int(skip))

    qs = (
        JoinRequest.objects.filter(post__author=author)
        .select_related("sender", "post")
        .order_by("-created_at", "-id")
    )
    return list(qs[skip:skip + take])
