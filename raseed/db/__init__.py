"""
Persistence layer for the pipeline workers.

Includes:
- Service-role Supabase client factory
- RecordStore protocol and its Supabase implementation
"""

from .client import get_service_role_client
from .record_store import RecordStore, SupabaseRecordStore, apply_nested_updates

__all__ = [
    "get_service_role_client",
    "RecordStore",
    "SupabaseRecordStore",
    "apply_nested_updates",
]
