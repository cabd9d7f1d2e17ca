"""
Tests for receipt and query prompt builders.
"""

from raseed.agents.query.prompts import NO_HISTORY_CONTEXT, build_query_prompt, build_receipt_context
from raseed.agents.receipt.prompts import build_receipt_extraction_prompt
from raseed.schemas.common import QueryIntent
from raseed.schemas.receipts import Item, Receipt


class TestBuildReceiptContext:

    def test_empty_history(self):
        assert build_receipt_context([]) == NO_HISTORY_CONTEXT

    def test_receipts_and_items_are_listed(self):
        receipts = [
            Receipt(
                id="r1",
                user_id="u1",
                store_name="Fresh Mart",
                total_amount=12.5,
                date="2025-07-01",
                items=[Item(name="Milk", price=2.5, category="dairy")],
            ),
            Receipt(id="r2", user_id="u1"),
        ]

        context = build_receipt_context(receipts)

        assert context.splitlines() == [
            "Recent Receipts:",
            "- Fresh Mart: $12.50 on 2025-07-01",
            "  * Milk (dairy)",
            "- Unknown store: $0.00 on unknown date",
        ]


class TestBuildQueryPrompt:

    def test_prompt_contains_query_context_and_every_intent(self):
        prompt = build_query_prompt("What can I cook?", "hi", "- Fresh Mart: $12.50 on 2025-07-01")

        assert "What can I cook?" in prompt
        assert 'language="hi"' in prompt
        assert "Fresh Mart" in prompt
        for intent in QueryIntent:
            assert intent.value in prompt


def test_receipt_prompt_asks_for_json_contract():
    prompt = build_receipt_extraction_prompt()

    assert '"store_name"' in prompt
    assert '"total_amount"' in prompt
    assert '"items"' in prompt
