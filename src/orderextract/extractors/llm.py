"""LLM-based purchase-order extraction using OpenAI."""

import base64
import json
import logging
import re
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from ..config import get_settings
from ..core.exceptions import ExtractionError
from .base import BaseExtractor
from .prompts import SYSTEM_PROMPT, get_extraction_prompt

logger = logging.getLogger(__name__)

_CODE_FENCE_OPEN = re.compile(r"```json\s*")
_TRAILING_COMMA = re.compile(r",\s*$")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences around a JSON answer."""
    return _CODE_FENCE_OPEN.sub("", text).replace("```", "").strip()


def repair_truncated_json(text: str) -> str:
    """
    Close brackets left open by a truncated JSON answer.

    Closes an unterminated string, drops a trailing comma, then appends the
    closers for every bracket still open, innermost first. Brackets inside
    string literals are ignored.
    """
    stack: list[str] = []
    in_string = False
    escaped = False

    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "[{":
            stack.append("]" if ch == "[" else "}")
        elif ch in "]}" and stack:
            stack.pop()

    fixed = text + '"' if in_string else text
    fixed = _TRAILING_COMMA.sub("", fixed)
    return fixed + "".join(reversed(stack))


def parse_extraction_text(text: str, repair: bool = False) -> dict[str, Any]:
    """
    Decode the extraction service's answer.

    Args:
        text: Raw message content
        repair: Attempt bracket repair when the answer does not parse

    Returns:
        Decoded JSON object

    Raises:
        ExtractionError: If the answer is empty, not JSON, or not an object
    """
    clean = strip_code_fences(text or "")
    if not clean:
        raise ExtractionError("Extraction service returned an empty response")

    try:
        data = json.loads(clean)
    except json.JSONDecodeError as e:
        if not repair:
            raise ExtractionError(f"Extraction response is not valid JSON: {e}") from e
        logger.warning("Extraction response is not valid JSON, attempting bracket repair")
        try:
            data = json.loads(repair_truncated_json(clean))
        except json.JSONDecodeError as repair_error:
            raise ExtractionError(
                f"Extraction response is not valid JSON after repair: {repair_error}"
            ) from repair_error

    if not isinstance(data, dict):
        raise ExtractionError(f"Extraction response must be a JSON object, got {type(data).__name__}")
    return data


class OrderExtractor(BaseExtractor):
    """Extract purchase-order data with an OpenAI vision-capable model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client: AsyncOpenAI | None = None,
    ):
        """
        Initialize the extractor.

        Args:
            api_key: OpenAI API key. If None, uses settings.
            model: Model to use. If None, uses settings.
            client: Pre-built client (tests, custom transports)
        """
        settings = get_settings()
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.llm_model
        self.max_tokens = settings.llm_max_tokens
        self.timeout = settings.llm_timeout_seconds
        self.repair = settings.repair_truncated_json
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-load OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def extract(
        self,
        content: bytes,
        media_type: str,
        filename: str | None = None,
    ) -> dict[str, Any]:
        """Send the document to the model and decode its JSON answer."""
        if not self.supports_media_type(media_type):
            raise ExtractionError(f"Unsupported media type: {media_type}")

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    self._document_part(content, media_type, filename),
                    {"type": "text", "text": get_extraction_prompt()},
                ],
            },
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=0.1,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error(f"Extraction call failed for {filename}: {e}")
            raise ExtractionError(f"Extraction service error: {e}") from e

        if not response.choices:
            raise ExtractionError("Extraction service returned no choices")

        text = response.choices[0].message.content or ""
        return parse_extraction_text(text, repair=self.repair)

    def _document_part(self, content: bytes, media_type: str, filename: str | None) -> dict[str, Any]:
        """Build the message part carrying the document."""
        encoded = base64.b64encode(content).decode("ascii")
        data_url = f"data:{media_type};base64,{encoded}"

        if media_type.startswith("image/"):
            return {"type": "image_url", "image_url": {"url": data_url}}

        return {
            "type": "file",
            "file": {"filename": filename or "document.pdf", "file_data": data_url},
        }
