"""
Receipt Extraction Prompt Templates

Contains the system prompt and user prompt for receipt image extraction.

Architecture:
- Pattern: Single-shot multimodal extraction
- Model: Gemini (with vision capabilities)
- Temperature: 0.0 (deterministic)
- Output: JSON matching raseed.schemas.receipts.ReceiptExtraction
"""

# =============================================================================
# SYSTEM PROMPT
# =============================================================================

RECEIPT_SYSTEM_PROMPT = """You are Raseed, a receipt data extraction assistant for a personal finance app.

<role>
You read photos of shopping receipts and return their contents as structured data.
</role>

<limitations>
- You can ONLY process receipt images
- You cannot persist data; the caller handles storage
- You never invent values that are not printed on the receipt
</limitations>"""


# =============================================================================
# USER PROMPT
# =============================================================================

RECEIPT_OUTPUT_SCHEMA = """{
  "store_name": "Store name",
  "total_amount": 0.00,
  "tax_amount": 0.00,
  "items": [
    {
      "name": "Item name",
      "price": 0.00,
      "quantity": 1,
      "category": "Category (e.g., dairy, produce, electronics)"
    }
  ],
  "date": "YYYY-MM-DD"
}"""


def build_receipt_extraction_prompt() -> str:
    """
    Build the user prompt sent together with the receipt image.

    Returns:
        str: Prompt with extraction instructions and the JSON output contract
    """
    return f"""Analyze the attached receipt image and extract its contents.

<instructions>
1. Read the store name, the total, the tax and the transaction date.
2. List every purchased line item with its unit price, quantity and a short lowercase category.
3. Use categories such as dairy, produce, meat, seafood, bakery, frozen, beverages,
   groceries, household, electronics, so perishable goods can be recognized later.
4. All monetary values are numbers, quantities are non-negative integers.
5. If the tax is not printed, use 0.
</instructions>

<output_schema>
Return ONLY valid JSON with this exact structure. No markdown, no prose.

{RECEIPT_OUTPUT_SCHEMA}
</output_schema>"""
