"""
Pytest configuration for Raseed pipeline tests.

Sets up the test environment and in-memory stand-ins for the record store,
event bus, Gemini adapter and image loader.
"""
import copy
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("GOOGLE_API_KEY", "test-google-api-key")

from raseed.agents.extraction.adapter import ImagePayload  # noqa: E402
from raseed.agents.extraction.parsing import parse_model_json  # noqa: E402
from raseed.db.record_store import apply_nested_updates  # noqa: E402
from raseed.errors import NotFound  # noqa: E402
from raseed.services.dependencies import PipelineDependencies  # noqa: E402

FIXED_NOW = datetime(2025, 7, 20, 12, 0, 0, tzinfo=timezone.utc)


class InMemoryRecordStore:
    """
    RecordStore backed by dicts, with the same semantics as SupabaseRecordStore.

    `failures[(operation, collection)]` makes every matching call raise the
    given exception (e.g. TransientIO) instead of touching the data.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self.calls: List[Tuple[str, str, str]] = []

    def _check(self, operation: str, collection: str, record_id: str = "") -> None:
        self.calls.append((operation, collection, record_id))
        error = self.failures.get((operation, collection))
        if error is not None:
            raise error

    def seed(self, collection: str, record: Dict[str, Any]) -> None:
        self.collections.setdefault(collection, {})[record["id"]] = copy.deepcopy(record)

    def all(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.get(collection, {})

    async def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        self._check("get", collection, record_id)
        record = self.all(collection).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def set(self, collection: str, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        self._check("set", collection, record_id)
        row = {**copy.deepcopy(data), "id": record_id}
        self.collections.setdefault(collection, {})[record_id] = row
        return copy.deepcopy(row)

    async def update(self, collection: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        self._check("update", collection, record_id)
        current = self.all(collection).get(record_id)
        if current is None:
            raise NotFound(collection, record_id)
        updated = apply_nested_updates(current, fields)
        self.collections[collection][record_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, collection: str, record_id: str) -> None:
        self._check("delete", collection, record_id)
        if record_id not in self.all(collection):
            raise NotFound(collection, record_id)
        del self.collections[collection][record_id]

    async def filter_by(
        self,
        collection: str,
        field: str,
        value: Any,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self._check("filter_by", collection)
        rows = [row for row in self.all(collection).values() if row.get(field) == value]
        if order_by:
            rows.sort(key=lambda row: str(row.get(order_by) or ""), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)


class RecordingEventBus:
    """EventBus that keeps published payloads in memory."""

    def __init__(self):
        self.published: List[Tuple[str, Dict[str, Any]]] = []
        self.error: Optional[Exception] = None

    async def publish(self, topic: str, payload: Dict[str, Any]) -> str:
        if self.error is not None:
            raise self.error
        self.published.append((topic, copy.deepcopy(payload)))
        return f"msg-{len(self.published)}"

    def on(self, topic: str) -> List[Dict[str, Any]]:
        return [payload for published_topic, payload in self.published if published_topic == topic]


class ScriptedExtractor:
    """
    Extractor replaying canned model replies.

    Each reply is raw model text (parsed exactly like the Gemini adapter
    does, fences included) or an exception to raise.
    """

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    async def extract(self, prompt, schema, image=None, system_instruction=None):
        self.calls.append(
            {"prompt": prompt, "schema": schema, "image": image, "system_instruction": system_instruction}
        )
        if not self.replies:
            raise AssertionError("ScriptedExtractor ran out of replies")
        reply = self.replies[0] if len(self.replies) == 1 else self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return parse_model_json(reply, schema)


class StaticImageLoader:
    """ImageLoader returning the same bytes for every URL."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.loaded: List[str] = []

    async def load(self, image_url: str) -> ImagePayload:
        self.loaded.append(image_url)
        if self.error is not None:
            raise self.error
        return ImagePayload(data=b"\xff\xd8\xff-receipt", mime_type="image/jpeg")


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def bus():
    return RecordingEventBus()


@pytest.fixture
def extractor():
    return ScriptedExtractor()


@pytest.fixture
def image_loader():
    return StaticImageLoader()


@pytest.fixture
def deps(store, bus, extractor, image_loader):
    """Pipeline dependencies wired to the in-memory fakes and a fixed clock."""
    return PipelineDependencies(
        store=store,
        bus=bus,
        extractor=extractor,
        image_loader=image_loader,
        clock=lambda: FIXED_NOW,
    )
