"""
Best-effort change notifications over Redis pub/sub.

Publishing happens after the owning transaction has committed. A missing
REDIS_URL turns every publish into a no-op, and a failed publish is logged
and dropped; it never fails the write that triggered it.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import redis
import structlog

from hotel_inventory.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

BOOKING_CREATED = "booking.created"
BOOKING_UPDATED = "booking.updated"
BOOKING_CANCELLED = "booking.cancelled"
BLOCK_CREATED = "inventory.block.created"
BLOCK_DELETED = "inventory.block.deleted"
ROOM_STATUS_CHANGED = "room.status_changed"


class ChangeNotifier:
    """
    Publish inventory change events to a Redis channel.

    Example:
        >>> notifier = ChangeNotifier(redis_url=None)
        >>> notifier.publish("booking.created", booking_id="...")  # no-op
        False
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        channel: str = "inventory",
        client: Optional[redis.Redis] = None,
    ):
        self.channel = channel
        self._client = client
        if self._client is None and redis_url:
            self._client = redis.from_url(
                redis_url,
                socket_connect_timeout=2,
                socket_timeout=2,
            )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def publish(self, event_type: str, **payload: Any) -> bool:
        """
        Publish one event.

        Returns:
            bool: True if the message was handed to Redis, False otherwise
        """
        if self._client is None:
            return False

        message = json.dumps(
            {"type": event_type, "timestamp": utc_now().isoformat(), "data": payload},
            default=str,
        )
        try:
            self._client.publish(self.channel, message)
        except redis.RedisError as e:
            logger.warning("change_notification_failed", event_type=event_type, error=str(e))
            return False

        logger.debug("change_notification_published", event_type=event_type, channel=self.channel)
        return True

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
