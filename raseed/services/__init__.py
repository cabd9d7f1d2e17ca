"""
Service layer for the Raseed pipelines.

Contains the event-driven pipelines that:
- Read the records an event refers to
- Call the Extraction Adapter (Gemini) where needed
- Reconcile results back into the record store
- Derive wallet passes and notifications

Services receive their collaborators explicitly (PipelineDependencies) and
never construct clients themselves.
"""

from .dependencies import PipelineDependencies
from .freshness import compute_freshness_status
from .query_pipeline import process_query
from .receipt_pipeline import process_receipt_upload
from .stock_pipeline import process_stock_mutation
from .third_party_pipeline import process_third_party_event
from .wallet_pass_service import (
    delete_wallet_pass,
    integration_pass_id,
    upsert_wallet_pass,
    wallet_pass_id,
)

__all__ = [
    "PipelineDependencies",
    "compute_freshness_status",
    "process_query",
    "process_receipt_upload",
    "process_stock_mutation",
    "process_third_party_event",
    "delete_wallet_pass",
    "integration_pass_id",
    "upsert_wallet_pass",
    "wallet_pass_id",
]
