"""Construction of the production pipeline dependencies (once per worker process)."""

import logging

import dramatiq
from google import genai

from raseed.agents.extraction.adapter import GeminiExtractionAdapter
from raseed.config import Settings
from raseed.db.client import get_service_role_client
from raseed.db.record_store import SupabaseRecordStore
from raseed.events.bus import DramatiqEventBus
from raseed.services.dependencies import PipelineDependencies
from raseed.services.image_loader import HttpImageLoader

logger = logging.getLogger(__name__)


def build_dependencies(settings: Settings, publisher: dramatiq.Broker) -> PipelineDependencies:
    """
    Build the Supabase store, dramatiq bus, Gemini adapter and image loader.

    `publisher` must not be the broker the worker consumes from (see
    configure_publisher), or the worker would pick up its own outgoing
    notifications.

    Raises:
        ValueError: If Supabase or Gemini credentials are missing.
    """
    if not settings.GOOGLE_API_KEY:
        raise ValueError(
            "GOOGLE_API_KEY is not configured. "
            "Please set it in your .env file to run the pipeline workers."
        )

    deps = PipelineDependencies(
        store=SupabaseRecordStore(get_service_role_client(settings)),
        bus=DramatiqEventBus(publisher),
        extractor=GeminiExtractionAdapter(
            client=genai.Client(api_key=settings.GOOGLE_API_KEY),
            model=settings.GEMINI_MODEL,
            timeout_seconds=settings.EXTRACTION_TIMEOUT_SECONDS,
        ),
        image_loader=HttpImageLoader(timeout_seconds=settings.IMAGE_DOWNLOAD_TIMEOUT_SECONDS),
    )

    logger.info(f"Pipeline dependencies ready (model={settings.GEMINI_MODEL})")
    return deps
