"""
Photo description for user-submitted incident images.

A Gemini vision model describes the scene in one or two sentences; when it
is unavailable or fails, a category template is used instead.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import List, Optional

from disasteralert.core.config import Settings, settings as default_settings
from disasteralert.core.constants import (
    CATEGORY_DESCRIPTION_TEMPLATES,
    GENERIC_DESCRIPTION_TEMPLATE,
    DESCRIPTION_EXCERPT_LENGTH,
    IMAGE_MIME_TYPES,
    DEFAULT_IMAGE_MIME_TYPE,
)
from disasteralert.enrichment.chain import ProviderChain
from disasteralert.ingestion.gemini_client import GeminiClient

logger = logging.getLogger(__name__)


def guess_mime_type(filename: Optional[str]) -> str:
    """MIME type from the upload's file extension."""
    ext = os.path.splitext(filename or "")[1].lower()
    return IMAGE_MIME_TYPES.get(ext, DEFAULT_IMAGE_MIME_TYPE)


def template_description(category: Optional[str], description: Optional[str] = None) -> str:
    """
    Deterministic description keyed by category.

    Pure string formatting; never fails and never returns an empty string.
    """
    text = CATEGORY_DESCRIPTION_TEMPLATES.get(category or "", GENERIC_DESCRIPTION_TEMPLATE)

    if description and description.strip():
        text += f" Additional context: {description[:DESCRIPTION_EXCERPT_LENGTH]}."

    return text


class DescriptionProvider(ABC):
    """Photo description capability."""

    name: str = "description_provider"

    @abstractmethod
    def describe(
        self,
        image_data: bytes,
        mime_type: str,
        category: Optional[str],
        description: Optional[str],
    ) -> Optional[str]:
        """Return a short description, or None/empty on failure."""


class GeminiVisionProvider(DescriptionProvider):
    """Describes the photo with a Gemini vision model."""

    name = "gemini_vision"

    PROMPT = """Analyze this emergency incident photo. Category: {category}.
Description: {description}.

Provide a brief, factual description of what you see in the image (e.g., accident/fire/flood/electrical issue).
Keep it short (1-2 sentences) and focus on visible evidence."""

    def __init__(self, client: GeminiClient):
        self.client = client

    def describe(self, image_data, mime_type, category, description):
        prompt = self.PROMPT.format(
            category=category or "Unknown",
            description=description or "No description provided",
        )
        return self.client.describe_image(prompt, image_data, mime_type)


class CategoryTemplateProvider(DescriptionProvider):
    """Terminal provider: category template plus a short excerpt of the reporter's text."""

    name = "category_template"

    def describe(self, image_data, mime_type, category, description):
        return template_description(category, description)


class PhotoDescriptionProviderChain(ProviderChain[DescriptionProvider, str]):
    """Always ends with a non-empty description."""

    async def describe(
        self,
        image_data: bytes,
        filename: Optional[str],
        category: Optional[str],
        description: Optional[str] = None,
    ) -> str:
        """
        Args:
            image_data: Photo bytes
            filename: Upload filename, used to pick the MIME type
            category: Incident category
            description: Reporter's free text

        Returns:
            Non-empty description string
        """
        mime_type = guess_mime_type(filename)
        text, _ = await self.first_success(
            lambda p: p.describe(image_data, mime_type, category, description),
            accept=lambda t: isinstance(t, str) and bool(t.strip()),
            label=f" for {category or 'unknown'} photo",
        )

        if text is None:
            # Chains built without the template provider still end here
            return template_description(category, description)

        return text.strip()


def build_description_chain(
    config: Optional[Settings] = None,
    gemini_client: Optional[GeminiClient] = None,
) -> PhotoDescriptionProviderChain:
    """Build the default chain: Gemini vision if configured, then templates."""
    config = config or default_settings
    timeout = config.provider_timeout_seconds
    providers: List[DescriptionProvider] = []

    if gemini_client is None and config.gemini_api_key:
        gemini_client = GeminiClient(api_key=config.gemini_api_key, timeout=timeout)
    if gemini_client is not None:
        providers.append(GeminiVisionProvider(gemini_client))

    providers.append(CategoryTemplateProvider())

    logger.info(f"Photo description chain: {[p.name for p in providers]}")
    return PhotoDescriptionProviderChain(providers, timeout_seconds=timeout)
