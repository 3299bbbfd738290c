"""
Web push fan-out.

One PushSender exists per process. It owns the thread pool used to deliver a
notification to all of a user's devices at once and the VAPID credentials.
A subscription answered with 410 Gone is deleted; every other failure is
logged and does not affect the rest of the batch.
"""

import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from django.conf import settings
from pywebpush import WebPushException, webpush

from notifications.models import PushSubscription

logger = logging.getLogger(__name__)

GONE = 410


@dataclass
class PushResult:
    """Outcome of one fan-out batch."""
    attempted: int = 0
    delivered: int = 0
    removed: List[str] = field(default_factory=list)
    failed: int = 0


def build_payload(title: str, body: str, url: Optional[str] = None) -> str:
    return json.dumps({"title": title, "body": body, "url": url or "/"})


def _status_of(exc: WebPushException) -> Optional[int]:
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


class PushSender:
    """Delivers push payloads to every registered device of a user."""

    def __init__(self, vapid_private_key: str, vapid_claims_email: str, max_workers: int = 8):
        self.vapid_private_key = vapid_private_key
        self.vapid_claims = {"sub": vapid_claims_email}
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="webpush")

    @property
    def configured(self) -> bool:
        return bool(self.vapid_private_key)

    def _deliver(self, subscription: PushSubscription, payload: str) -> str:
        """Send to one device. Returns "sent", "gone" or "failed"."""
        try:
            webpush(
                subscription_info=subscription.as_subscription_info(),
                data=payload,
                vapid_private_key=self.vapid_private_key,
                vapid_claims=dict(self.vapid_claims),
            )
            return "sent"
        except WebPushException as exc:
            if _status_of(exc) == GONE:
                return "gone"
            logger.error("Push error for subscription %s: %s", subscription.id, exc)
            return "failed"
        except Exception:
            logger.exception("Unexpected push error for subscription %s", subscription.id)
            return "failed"

    def send_to_user(self, user_id, title: str, body: str, url: Optional[str] = None) -> PushResult:
        """
        Fan a notification out to all of `user_id`'s subscriptions.

        Deliveries run concurrently; the call returns once all of them finished.
        """
        subscriptions = list(PushSubscription.objects.filter(user_id=user_id))
        result = PushResult(attempted=len(subscriptions))
        if not subscriptions:
            return result

        if not self.configured:
            logger.warning("VAPID keys not configured; skipping push to user %s", user_id)
            result.failed = len(subscriptions)
            return result

        payload = build_payload(title, body, url)
        outcomes = list(self._executor.map(lambda sub: self._deliver(sub, payload), subscriptions))

        for subscription, outcome in zip(subscriptions, outcomes):
            if outcome == "sent":
                result.delivered += 1
            elif outcome == "gone":
                result.removed.append(subscription.endpoint)
            else:
                result.failed += 1

        if result.removed:
            PushSubscription.objects.filter(endpoint__in=result.removed).delete()
            logger.info("Removed %d expired push subscriptions for user %s", len(result.removed), user_id)

        return result

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)


_sender: Optional[PushSender] = None
_sender_lock = threading.Lock()


def get_push_sender() -> PushSender:
    """Process-wide PushSender, built from settings on first use."""
    global _sender
    with _sender_lock:
        if _sender is None:
            _sender = PushSender(
                vapid_private_key=settings.VAPID_PRIVATE_KEY,
                vapid_claims_email=settings.VAPID_CLAIMS_EMAIL,
                max_workers=settings.PUSH_MAX_WORKERS,
            )
        return _sender


def shutdown_push_sender():
    global _sender
    with _sender_lock:
        if _sender is not None:
            _sender.shutdown(wait=False)
            _sender = None
