"""Push subscription registry."""

import logging

from django.db import transaction

from common.exceptions import ValidationFailed
from notifications.models import PushSubscription

logger = logging.getLogger(__name__)


@transaction.atomic
def subscribe(user, endpoint: str, p256dh: str, auth: str) -> PushSubscription:
    """
    Register (or re-bind) a device endpoint for `user`.

    Endpoints are unique: subscribing a known endpoint updates its keys and owner.
    """
    if not endpoint or not p256dh or not auth:
        raise ValidationFailed("endpoint and keys.p256dh / keys.auth are required")

    subscription, created = PushSubscription.objects.update_or_create(
        endpoint=endpoint,
        defaults={"user": user, "p256dh": p256dh, "auth": auth},
    )
    logger.info(
        "Push subscription %s %s for user %s",
        subscription.id, "created" if created else "updated", user.id
    )
    return subscription
