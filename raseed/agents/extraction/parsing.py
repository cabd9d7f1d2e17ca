"""
Parsing of free-text model output into validated schemas.

Gemini is asked for bare JSON but regularly wraps it in a Markdown fence.
The fence is stripped; nothing else is repaired. Output that still fails to
parse or validate is reported as MalformedModelOutput with the raw text.
"""

import json
import re
from typing import Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from raseed.errors import MalformedModelOutput

ModelT = TypeVar("ModelT", bound=BaseModel)

# ```json ... ``` or ``` ... ``` wrapping the whole payload
_FENCE_PATTERN = re.compile(r"^```[a-zA-Z]*\s*\n?([\s\S]*?)\n?```$")


def strip_code_fences(text: str) -> str:
    """
    Remove a Markdown code fence wrapping the whole response, if present.

    >>> strip_code_fences('```json\\n{"a": 1}\\n```')
    '{"a": 1}'
    """
    cleaned = text.strip()
    match = _FENCE_PATTERN.match(cleaned)
    if match:
        return match.group(1).strip()
    return cleaned


def parse_model_json(text: str, schema: Type[ModelT]) -> ModelT:
    """
    Parse model output into `schema`.

    Raises:
        MalformedModelOutput: If the text is not JSON or does not match the
            schema. The exception carries the unmodified text.
    """
    cleaned = strip_code_fences(text)

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedModelOutput(f"Model output is not valid JSON: {e}", raw_text=text) from e

    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise MalformedModelOutput(
            f"Model output does not match {schema.__name__}: {e.error_count()} error(s)",
            raw_text=text,
        ) from e
