"""
Extraction Adapter

Single-shot Gemini call: one prompt (plus an optional image) in, one
validated pydantic model out. The adapter holds no per-call state and writes
nothing, so callers may retry it freely.

Failure mapping:
- timeout, 5xx, 429          -> TransientIO (redelivered by the transport)
- other 4xx                  -> ValidationError (the request itself is bad)
- empty or unparseable text  -> MalformedModelOutput (raw text attached)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Type

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from raseed.agents.extraction.parsing import ModelT, parse_model_json
from raseed.errors import MalformedModelOutput, TransientIO, ValidationError
from raseed.utils.logging import truncate_for_log

logger = logging.getLogger(__name__)

RETRYABLE_CLIENT_CODES = {408, 429}


@dataclass(frozen=True)
class ImagePayload:
    """Image bytes sent alongside the prompt."""
    data: bytes
    mime_type: str = "image/jpeg"


class Extractor(Protocol):
    """Extraction capability used by the pipelines."""

    async def extract(
        self,
        prompt: str,
        schema: Type[ModelT],
        image: Optional[ImagePayload] = None,
        system_instruction: Optional[str] = None,
    ) -> ModelT:
        ...


class GeminiExtractionAdapter:
    """Extractor backed by the Google Gen AI SDK."""

    def __init__(
        self,
        client: genai.Client,
        model: str = "gemini-2.5-flash",
        timeout_seconds: float = 60.0,
        temperature: float = 0.0,
    ):
        self._client = client
        self._model = model
        self._timeout_seconds = timeout_seconds
        self._temperature = temperature

    async def extract(
        self,
        prompt: str,
        schema: Type[ModelT],
        image: Optional[ImagePayload] = None,
        system_instruction: Optional[str] = None,
    ) -> ModelT:
        """
        Send `prompt` (and `image`) to Gemini and parse the reply into `schema`.

        Args:
            prompt: Complete user prompt, including the JSON output contract
            schema: Pydantic model the reply must validate against
            image: Optional image bytes (receipt photo)
            system_instruction: Optional role prompt

        Returns:
            A validated `schema` instance.

        Raises:
            TransientIO: Timeout, server error or rate limiting.
            ValidationError: The model rejected the request (4xx).
            MalformedModelOutput: The reply is empty or not the expected JSON.
        """
        parts = [types.Part(text=prompt)]
        if image is not None:
            parts.append(
                types.Part(inline_data=types.Blob(mime_type=image.mime_type, data=image.data))
            )

        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=self._temperature,
            response_mime_type="application/json",
        )

        logger.debug(
            f"Sending extraction request to {self._model} "
            f"(schema={schema.__name__}, image={'yes' if image else 'no'})"
        )

        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model,
                    contents=[types.Content(role="user", parts=parts)],
                    config=config,
                ),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise TransientIO(
                f"Extraction timed out after {self._timeout_seconds:.0f}s"
            ) from e
        except genai_errors.ServerError as e:
            raise TransientIO(f"Gemini server error {e.code}: {e.message}") from e
        except genai_errors.ClientError as e:
            if e.code in RETRYABLE_CLIENT_CODES:
                raise TransientIO(f"Gemini throttled the request ({e.code})") from e
            raise ValidationError(f"Gemini rejected the request ({e.code}): {e.message}") from e

        text = (response.text or "").strip() if response.candidates else ""
        if not text:
            raise MalformedModelOutput("Model returned no text", raw_text="")

        try:
            result = parse_model_json(text, schema)
        except MalformedModelOutput as e:
            logger.error(f"{e.message}. Raw output: {truncate_for_log(e.raw_text)}")
            raise

        logger.info(f"Extraction completed: schema={schema.__name__}")
        return result
