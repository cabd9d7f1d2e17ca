"""
Record store adapter.

Pipelines see the persistence layer as a document store: records live in
named collections, keyed by string id, and can be read, replaced, partially
updated (including nested JSON fields via dotted paths), deleted and
filtered by a single field.

SupabaseRecordStore implements that capability on Supabase tables, one table
per collection with an `id` primary key and JSON columns for nested data.
Library failures are translated into the pipeline error taxonomy here so
callers only ever see TransientIO or NotFound (anything else is a bug and
propagates untouched).
"""

import asyncio
import copy
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, TypeVar, cast

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from raseed.errors import NotFound, TransientIO

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgREST / Postgres codes that mean "try again later" rather than "bad request"
TRANSIENT_ERROR_CODES = {
    "PGRST000",  # could not connect to the database
    "PGRST001",  # internal connection error
    "PGRST002",  # schema cache not ready
    "PGRST003",  # timed out acquiring a pool connection
    "40001",     # serialization failure
    "40P01",     # deadlock detected
    "53300",     # too many connections
    "57014",     # statement timeout
    "57P01",     # admin shutdown
}


class RecordStore(Protocol):
    """Document-store capability used by every pipeline."""

    async def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        ...

    async def set(self, collection: str, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def update(self, collection: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def delete(self, collection: str, record_id: str) -> None:
        ...

    async def filter_by(
        self,
        collection: str,
        field: str,
        value: Any,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        ...


def apply_nested_updates(record: Dict[str, Any], fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply dotted-path updates to a copy of `record`.

    "data.status" sets record["data"]["status"], creating intermediate
    objects as needed. Plain keys replace the top-level value.

    Returns:
        The updated copy; `record` itself is left untouched.
    """
    updated = copy.deepcopy(record)
    for path, value in fields.items():
        keys = path.split(".")
        target = updated
        for key in keys[:-1]:
            child = target.get(key)
            if not isinstance(child, dict):
                child = {}
                target[key] = child
            target = child
        target[keys[-1]] = value
    return updated


def classify_store_error(operation: str, error: Exception) -> Exception:
    """Map a Supabase/httpx exception to TransientIO when it is worth retrying."""
    if isinstance(error, httpx.HTTPError):
        return TransientIO(f"{operation} failed: {type(error).__name__}: {error}")
    if isinstance(error, APIError) and error.code in TRANSIENT_ERROR_CODES:
        return TransientIO(f"{operation} failed: {error.code} {error.message}")
    return error


class SupabaseRecordStore:
    """RecordStore backed by Supabase (PostgREST) tables."""

    def __init__(self, client: Client):
        self._client = client

    async def _run(self, operation: str, call: Callable[[], T]) -> T:
        """
        Run a blocking supabase-py call in a worker thread.

        The supabase client is synchronous, so `.execute()` is kept off the
        event loop. Library failures are classified on the way out.
        """
        try:
            return await asyncio.to_thread(call)
        except (httpx.HTTPError, APIError) as e:
            classified = classify_store_error(operation, e)
            if classified is e:
                logger.error(f"{operation} failed with non-retryable store error: {e}")
                raise
            logger.warning(str(classified))
            raise classified from e

    async def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one record by id, or None when it does not exist."""
        result = await self._run(
            f"get {collection}/{record_id}",
            lambda: self._client.table(collection).select("*").eq("id", record_id).limit(1).execute(),
        )
        if not result.data:
            return None
        return cast(Dict[str, Any], result.data[0])

    async def set(self, collection: str, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create or fully replace a record (upsert on id)."""
        row = {**data, "id": record_id}
        result = await self._run(
            f"set {collection}/{record_id}",
            lambda: self._client.table(collection).upsert(row).execute(),
        )
        if not result.data:
            return row
        return cast(Dict[str, Any], result.data[0])

    async def update(self, collection: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partially update an existing record.

        Keys may be dotted paths into JSON columns ("data.status"). Nested
        paths are applied read-modify-write on the owning column; the write
        itself is last-writer-wins.

        Raises:
            NotFound: If no record has this id.
        """
        values = {key: value for key, value in fields.items() if "." not in key}
        nested = {key: value for key, value in fields.items() if "." in key}

        if nested:
            current = await self.get(collection, record_id)
            if current is None:
                raise NotFound(collection, record_id)
            merged = apply_nested_updates(current, nested)
            for column in {key.split(".", 1)[0] for key in nested}:
                values[column] = merged[column]

        result = await self._run(
            f"update {collection}/{record_id}",
            lambda: self._client.table(collection).update(values).eq("id", record_id).execute(),
        )
        if not result.data:
            raise NotFound(collection, record_id)
        return cast(Dict[str, Any], result.data[0])

    async def delete(self, collection: str, record_id: str) -> None:
        """
        Delete a record.

        Raises:
            NotFound: If no record has this id.
        """
        result = await self._run(
            f"delete {collection}/{record_id}",
            lambda: self._client.table(collection).delete().eq("id", record_id).execute(),
        )
        if not result.data:
            raise NotFound(collection, record_id)

    async def filter_by(
        self,
        collection: str,
        field: str,
        value: Any,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return records whose `field` equals `value`, optionally ordered and capped."""
        def call():
            request = self._client.table(collection).select("*").eq(field, value)
            if order_by:
                request = request.order(order_by, desc=descending)
            if limit is not None:
                request = request.limit(limit)
            return request.execute()

        result = await self._run(f"filter {collection} by {field}", call)
        return cast(List[Dict[str, Any]], result.data or [])
