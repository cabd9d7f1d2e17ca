"""
Receipt extraction prompts (multimodal, single-shot).
"""

from raseed.agents.receipt.prompts import (
    RECEIPT_SYSTEM_PROMPT,
    build_receipt_extraction_prompt,
)

__all__ = ["RECEIPT_SYSTEM_PROMPT", "build_receipt_extraction_prompt"]
