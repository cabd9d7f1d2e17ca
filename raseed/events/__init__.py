"""
Event transport for the pipeline workers (dramatiq over Redis).
"""

from .bus import DramatiqEventBus, EventBus

__all__ = ["DramatiqEventBus", "EventBus"]
