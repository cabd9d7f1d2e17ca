"""
Dramatiq actors, one per consumed topic.

Actors are declared by register_actors() rather than at import time so the
dependencies they use are passed in explicitly (and can be fakes in tests).
"""

import logging
from typing import Any, Callable, Dict

import dramatiq

from raseed.config import Settings
from raseed.errors import TransientIO
from raseed.services.dependencies import PipelineDependencies
from raseed.utils.constants import TOPIC_ACTORS
from raseed.workers.handlers import ROUTES, run_pipeline

logger = logging.getLogger(__name__)


def make_retry_policy(max_retries: int) -> Callable[[int, Exception], bool]:
    """retry_when callback: retry TransientIO only, up to `max_retries` times."""

    def should_retry(retries_so_far: int, exception: Exception) -> bool:
        return isinstance(exception, TransientIO) and retries_so_far < max_retries

    return should_retry


def register_actors(
    broker: dramatiq.Broker,
    deps: PipelineDependencies,
    settings: Settings,
) -> Dict[str, dramatiq.Actor]:
    """
    Declare the pipeline actors on `broker`.

    Returns:
        Actors keyed by the topic (queue) they consume.
    """
    retry_policy = make_retry_policy(settings.WORKER_MAX_RETRIES)
    actors: Dict[str, dramatiq.Actor] = {}

    for topic in ROUTES:
        actor_name = TOPIC_ACTORS[topic]

        def consume(payload: Any, _topic: str = topic) -> None:
            run_pipeline(deps, _topic, payload)

        consume.__name__ = actor_name
        actors[topic] = dramatiq.actor(
            consume,
            actor_name=actor_name,
            queue_name=topic,
            broker=broker,
            retry_when=retry_policy,
            time_limit=settings.WORKER_TIME_LIMIT_MS,
        )
        logger.info(f"Registered actor {actor_name} on queue {topic}")

    return actors
