"""
Google Gemini client for DisasterAlert.
Thin wrapper over the google-genai SDK for JSON prompts and image prompts.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from google import genai
from google.genai import types

from disasteralert.core.config import settings

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block, if any."""
    return _CODE_FENCE.sub("", text.strip()).strip()


class GeminiClient:
    """Calls Gemini models for structured text and image understanding."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        text_model: Optional[str] = None,
        vision_model: Optional[str] = None,
        timeout: float = 30.0
    ):
        api_key = api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GEMINI_API_KEY not configured")

        self.text_model = text_model or settings.gemini_text_model
        self.vision_model = vision_model or settings.gemini_vision_model
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )
        logger.info(
            "Gemini client configured: text_model=%s, vision_model=%s",
            self.text_model,
            self.vision_model,
        )

    def generate_json(self, prompt: str) -> Dict[str, Any]:
        """
        Send a text prompt and parse the reply as a JSON object.

        Raises:
            ValueError: If the reply is empty or not a JSON object
        """
        response = self.client.models.generate_content(
            model=self.text_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
            ),
        )

        raw_text = self._response_text(response)
        if not raw_text:
            raise ValueError("Gemini response did not contain text to parse as JSON")

        result = json.loads(strip_code_fences(raw_text))
        if not isinstance(result, dict):
            raise ValueError(f"Expected a JSON object from Gemini, got {type(result).__name__}")
        return result

    def describe_image(self, prompt: str, image_data: bytes, mime_type: str) -> str:
        """Send an image with a prompt and return the reply text (may be empty)."""
        response = self.client.models.generate_content(
            model=self.vision_model,
            contents=[
                prompt,
                types.Part.from_bytes(data=image_data, mime_type=mime_type),
            ],
        )
        return self._response_text(response).strip()

    @staticmethod
    def _response_text(response: Any) -> str:
        # Prefer response.text, fall back to the first candidate part
        raw_text = getattr(response, "text", None)
        if not raw_text and getattr(response, "candidates", None):
            first = response.candidates[0]
            content = getattr(first, "content", None)
            parts = getattr(content, "parts", None) or []
            if parts:
                raw_text = getattr(parts[0], "text", None)
        return raw_text or ""
