"""Celery tasks for chat background processing."""

from celery import shared_task
import logging

from common.exceptions import DependencyFailure

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=30)
def deliver_follow_up_message(self, sender_id: int, receiver_id: int, content: str):
    """
    Retry storing a follow-up message that failed inside a request.

    Scheduled by the join-request workflow when the automatic message to the
    post author (or back to the requester) could not be written. Once the
    retries are used up the message is given up as a DependencyFailure.
    """
    from services.messaging import create_text_message

    try:
        message = create_text_message(sender_id, receiver_id, content)
        logger.info("Follow-up message %s delivered on retry (%s -> %s)", message.id, sender_id, receiver_id)
        return message.id
    except Exception as exc:
        logger.warning(
            "Follow-up message %s -> %s failed (attempt %s): %s",
            sender_id, receiver_id, self.request.retries + 1, exc
        )
        if self.request.retries >= self.max_retries:
            raise DependencyFailure(
                f"Follow-up message {sender_id} -> {receiver_id} could not be stored"
            ) from exc
        raise self.retry(exc=exc)
