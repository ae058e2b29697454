"""
Incident enrichment pipeline.

Resolves coordinates, address and photo description for a new report and
stores the incident only once both provider chains have finished.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from disasteralert.core.constants import CATEGORY_VALUES
from disasteralert.core.exceptions import (
    InvalidCategoryError,
    MissingFieldError,
    MissingPhotoError,
)
from disasteralert.core.geo_utils import build_search_link
from disasteralert.core.time_utils import format_display_datetime
from disasteralert.crowdsource.photo_store import PhotoStore
from disasteralert.crowdsource.report_handler import IncidentHandler
from disasteralert.database.models import Incident
from disasteralert.enrichment.address import AddressBundle, GeocodeResult
from disasteralert.enrichment.coordinate_resolver import CoordinateResolver
from disasteralert.enrichment.geocode_chain import GeocodeProviderChain
from disasteralert.enrichment.photo_description import PhotoDescriptionProviderChain

logger = logging.getLogger(__name__)

LOCATION_TEXT_FALLBACK = "location_text"


@dataclass
class IncidentSubmission:
    """Raw report as received from a reporter."""
    title: Optional[str]
    category: Optional[str]
    photo_data: Optional[bytes]
    photo_filename: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    latitude: Any = None
    longitude: Any = None
    user_id: Optional[str] = None


@dataclass
class EnrichedIncident:
    """Stored incident together with how it was resolved."""
    incident: Incident
    address: AddressBundle
    photo_description: str
    geocode_provider: str
    coordinate_source: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        """Flat success payload returned to the reporter."""
        return {
            "status": "success",
            "id": self.incident.id,
            "latitude": self.incident.latitude,
            "longitude": self.incident.longitude,
            **self.address.to_dict(),
            "photo_analysis": self.photo_description,
            "user_description": self.incident.description or "",
            "reported_datetime": format_display_datetime(self.incident.created_at),
        }


def location_text_bundle(location: Optional[str]) -> GeocodeResult:
    """Address for a report without coordinates, built from the typed location only."""
    text = (location or "").strip()
    return GeocodeResult(
        address=AddressBundle(
            place_name=text,
            full_address=text,
            map_link=build_search_link(text),
        ),
        provider=LOCATION_TEXT_FALLBACK,
    )


class IncidentEnrichmentPipeline:
    """
    Orchestrates CoordinateResolver, the geocoding chain and the photo
    description chain, then persists the incident.

    The only hard failures are precondition violations (checked before any
    provider runs) and storage errors.
    """

    def __init__(
        self,
        handler: IncidentHandler,
        photo_store: PhotoStore,
        geocode_chain: GeocodeProviderChain,
        description_chain: PhotoDescriptionProviderChain,
        coordinate_resolver: Optional[CoordinateResolver] = None,
    ):
        self.handler = handler
        self.photo_store = photo_store
        self.geocode_chain = geocode_chain
        self.description_chain = description_chain
        self.coordinate_resolver = coordinate_resolver or CoordinateResolver()

    @staticmethod
    def validate(submission: IncidentSubmission) -> None:
        """
        Check preconditions. The photo is checked first.

        Raises:
            MissingPhotoError: No photo bytes
            MissingFieldError: Title or category missing
            InvalidCategoryError: Category outside the supported set
        """
        if not submission.photo_data:
            raise MissingPhotoError()
        if not (submission.title or "").strip() or not (submission.category or "").strip():
            raise MissingFieldError("Title and category are required")
        if submission.category not in CATEGORY_VALUES:
            raise InvalidCategoryError(
                f"Category must be one of {', '.join(CATEGORY_VALUES)}"
            )

    async def submit(self, submission: IncidentSubmission) -> EnrichedIncident:
        """
        Enrich and store a new report.

        Args:
            submission: Raw report

        Returns:
            EnrichedIncident for the stored row
        """
        self.validate(submission)

        resolution = self.coordinate_resolver.resolve(
            image_data=submission.photo_data,
            latitude=submission.latitude,
            longitude=submission.longitude,
            location=submission.location,
        )
        if resolution.found:
            logger.info(f"Coordinates from {resolution.source.value}: {resolution.coordinates.to_tuple()}")
        else:
            logger.info("No coordinates resolved; using the typed location only")

        # The chains are independent; both finish before anything is stored
        geocoded, photo_description = await asyncio.gather(
            self._resolve_address(resolution.coordinates, submission.location),
            self.description_chain.describe(
                submission.photo_data,
                submission.photo_filename,
                submission.category,
                submission.description,
            ),
        )

        # Photo is written after enrichment and removed if the insert fails
        image_url = self.photo_store.save(submission.photo_data, submission.photo_filename)
        coords = resolution.coordinates
        try:
            incident = self.handler.create_incident(
                title=submission.title.strip(),
                category=submission.category,
                image_url=image_url,
                photo_description=photo_description,
                address=geocoded.address,
                latitude=coords.latitude if coords else None,
                longitude=coords.longitude if coords else None,
                description=submission.description,
                location=submission.location,
                user_id=submission.user_id,
            )
        except Exception:
            self.photo_store.delete(image_url)
            raise

        return EnrichedIncident(
            incident=incident,
            address=geocoded.address,
            photo_description=photo_description,
            geocode_provider=geocoded.provider,
            coordinate_source=resolution.source.value if resolution.source else None,
        )

    async def enrich_location(self, latitude: float, longitude: float) -> GeocodeResult:
        """Geocode a bare coordinate without creating an incident."""
        return await self.geocode_chain.resolve(latitude, longitude)

    async def _resolve_address(self, coords, location: Optional[str]) -> GeocodeResult:
        if coords is None:
            return location_text_bundle(location)
        return await self.geocode_chain.resolve(coords.latitude, coords.longitude)
