"""Dramatiq broker configuration for the pipeline workers."""

import logging

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import AgeLimit, Retries, ShutdownNotifications, TimeLimit

from raseed.config import Settings

logger = logging.getLogger(__name__)


def _has_middleware(broker: dramatiq.Broker, middleware_cls: type) -> bool:
    return any(isinstance(m, middleware_cls) for m in broker.middleware)


def configure_broker(settings: Settings) -> RedisBroker:
    """
    Create the Redis broker, make sure the middleware the actors rely on is
    installed, and set it as the global dramatiq broker.

    Retries are driven per actor by `retry_when` (TransientIO only), with
    exponential backoff between 5s and 1m.
    """
    broker = RedisBroker(url=settings.DRAMATIQ_BROKER_URL)

    if not _has_middleware(broker, AgeLimit):
        broker.add_middleware(AgeLimit())
    if not _has_middleware(broker, TimeLimit):
        broker.add_middleware(TimeLimit())
    if not _has_middleware(broker, ShutdownNotifications):
        broker.add_middleware(ShutdownNotifications())
    if not _has_middleware(broker, Retries):
        broker.add_middleware(Retries(min_backoff=5000, max_backoff=60000))

    dramatiq.set_broker(broker)
    logger.info("Dramatiq broker configured")
    return broker


def configure_publisher(settings: Settings) -> RedisBroker:
    """
    Create the Redis broker the pipelines publish events through.

    It shares the worker broker's Redis but is never handed to a Worker and
    is not set as the global broker. Queues it declares, such as
    notification-events, therefore get no consumer in this process and the
    messages stay in Redis for the service that owns them.
    """
    publisher = RedisBroker(url=settings.DRAMATIQ_BROKER_URL)
    logger.info("Dramatiq publisher configured")
    return publisher
