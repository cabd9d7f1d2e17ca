"""
Extraction Adapter Package

Wraps the Gemini call and the parsing of its free-text reply.

Main Components:
- adapter: GeminiExtractionAdapter, the Extractor protocol and ImagePayload
- parsing: code-fence stripping and schema validation of model output
"""

from raseed.agents.extraction.adapter import (
    Extractor,
    GeminiExtractionAdapter,
    ImagePayload,
)
from raseed.agents.extraction.parsing import parse_model_json, strip_code_fences

__all__ = [
    "Extractor",
    "GeminiExtractionAdapter",
    "ImagePayload",
    "parse_model_json",
    "strip_code_fences",
]
