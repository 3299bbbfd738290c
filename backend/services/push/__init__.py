"""
Push notification service.

This module handles:
    - The push subscription registry (upsert by endpoint)
    - Concurrent fan-out to a user's devices with 410 clean-up
"""

from .sender import (
    PushSender,
    PushResult,
    build_payload,
    get_push_sender,
    shutdown_push_sender,
)
from .subscriptions import subscribe

__all__ = [
    "PushSender",
    "PushResult",
    "build_payload",
    "get_push_sender",
    "shutdown_push_sender",
    "subscribe",
]
