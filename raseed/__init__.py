"""
Raseed: background pipelines for a receipt-driven personal finance assistant.

Workers consume upload, query, inventory and integration events, call Gemini
for extraction, reconcile results into Supabase and derive wallet passes.
"""

__version__ = "0.1.0"
