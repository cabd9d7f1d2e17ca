"""
AI components for the Raseed pipelines.

1. Extraction Adapter (raseed.agents.extraction)
   - Single-shot Gemini call returning validated JSON

2. Receipt prompts (raseed.agents.receipt)
   - Multimodal extraction of store, totals and items from a receipt photo

3. Query prompts (raseed.agents.query)
   - Conversational answer grounded in the user's receipt history
"""
