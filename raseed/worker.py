"""
Dramatiq worker entry point.

Configures the Redis broker, builds the pipeline dependencies once for this
process and registers one actor per consumed topic.

Events the pipelines produce (notification-events) go out through a separate
publisher broker, so this worker only ever consumes the topics in ROUTES.

Run with:
    dramatiq raseed.worker --processes 1 --threads 4
"""

import logging

from raseed.config import settings
from raseed.utils.logging import LOG_FORMAT, get_logger
from raseed.workers import build_dependencies, configure_broker, configure_publisher, register_actors

logging.basicConfig(level=settings.LOG_LEVEL, format=LOG_FORMAT)

broker = configure_broker(settings)
deps = build_dependencies(settings, configure_publisher(settings))
actors = register_actors(broker, deps, settings)

logger = get_logger(__name__)
logger.info(f"Worker ready: {', '.join(sorted(actors))}")
