"""
Worker runtime: broker setup, actor registration and event routing.
"""

from .actors import make_retry_policy, register_actors
from .broker import configure_broker, configure_publisher
from .dependencies import build_dependencies
from .handlers import ROUTES, decode_event, run_pipeline

__all__ = [
    "ROUTES",
    "build_dependencies",
    "configure_broker",
    "configure_publisher",
    "decode_event",
    "make_retry_policy",
    "register_actors",
    "run_pipeline",
]
