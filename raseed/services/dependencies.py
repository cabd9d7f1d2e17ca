"""
Explicit dependencies handed to every pipeline.

Pipelines never reach for module-level clients: the worker builds one
PipelineDependencies per process and passes it in, and tests pass fakes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from raseed.agents.extraction.adapter import Extractor
from raseed.db.record_store import RecordStore
from raseed.events.bus import EventBus
from raseed.schemas.common import utc_now
from raseed.services.image_loader import ImageLoader


@dataclass
class PipelineDependencies:
    store: RecordStore
    bus: EventBus
    extractor: Extractor
    image_loader: ImageLoader
    clock: Callable[[], datetime] = field(default=utc_now)
