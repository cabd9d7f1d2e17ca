"""
Event bus adapter.

Topics are dramatiq queues; a published payload becomes a message for the
actor that owns the topic (see TOPIC_ACTORS). Delivery is at-least-once with
no ordering guarantee across messages, so every consumer must be safe to
re-apply.
"""

import logging
from typing import Any, Dict, Protocol

import dramatiq
import redis

from raseed.errors import TransientIO, ValidationError
from raseed.utils.constants import TOPIC_ACTORS

logger = logging.getLogger(__name__)


class EventBus(Protocol):
    """Publish capability used by the pipelines."""

    async def publish(self, topic: str, payload: Dict[str, Any]) -> str:
        ...


class DramatiqEventBus:
    """EventBus that enqueues messages on a dramatiq broker."""

    def __init__(self, broker: dramatiq.Broker):
        self._broker = broker

    async def publish(self, topic: str, payload: Dict[str, Any]) -> str:
        """
        Enqueue `payload` on `topic`.

        Returns:
            The dramatiq message id.

        Raises:
            ValidationError: If the topic has no registered owner.
            TransientIO: If the broker connection fails.
        """
        actor_name = TOPIC_ACTORS.get(topic)
        if actor_name is None:
            raise ValidationError(f"Unknown topic: {topic}")

        message = dramatiq.Message(
            queue_name=topic,
            actor_name=actor_name,
            args=(payload,),
            kwargs={},
            options={},
        )

        try:
            self._broker.declare_queue(topic)
            self._broker.enqueue(message)
        except (redis.RedisError, OSError) as e:
            raise TransientIO(f"publish to {topic} failed: {e}") from e

        logger.info(f"Published message {message.message_id} to {topic}")
        return message.message_id
