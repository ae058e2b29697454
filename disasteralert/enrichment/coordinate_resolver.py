"""
Coordinate resolution for new incident reports.

Picks the authoritative (latitude, longitude) from, in priority order,
the photo's EXIF GPS tags, the explicit latitude/longitude fields, and a
"lat, lng" pair typed into the free-text location.
"""

import io
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from PIL import ExifTags, Image, UnidentifiedImageError

from disasteralert.core.geo_utils import Coordinates, parse_coordinate_pair

logger = logging.getLogger(__name__)

_NUMBER = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)"
COORDINATE_TEXT_PATTERN = re.compile(rf"^\s*({_NUMBER})\s*,\s*({_NUMBER})\s*$")


class CoordinateSource(str, Enum):
    """Where the winning coordinates came from."""
    EXIF = "exif"
    EXPLICIT = "explicit"
    TEXT = "text"


@dataclass(frozen=True)
class CoordinateResolution:
    """Outcome of coordinate resolution; both fields are None when nothing matched."""
    coordinates: Optional[Coordinates] = None
    source: Optional[CoordinateSource] = None

    @property
    def found(self) -> bool:
        return self.coordinates is not None


def _dms_to_degrees(value: Any) -> float:
    """Convert an EXIF (degrees, minutes, seconds) rational triple to degrees."""
    if isinstance(value, (tuple, list)):
        parts = [float(v) for v in value][:3]
        parts += [0.0] * (3 - len(parts))
        degrees, minutes, seconds = parts
        return degrees + minutes / 60.0 + seconds / 3600.0
    return float(value)


def _ref(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    return str(value or "").strip("\x00 ").upper()


def extract_exif_gps(image_data: Optional[bytes]) -> Optional[Coordinates]:
    """
    Read GPS coordinates embedded in an image's EXIF metadata.

    Returns None when the image has no GPS block, either tag is missing,
    the values do not parse, or the bytes are not a readable image
    (including headers that trip Pillow's decompression bomb limit).
    """
    if not image_data:
        return None

    try:
        with Image.open(io.BytesIO(image_data)) as image:
            gps = image.getexif().get_ifd(ExifTags.IFD.GPSInfo)
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
        logger.debug(f"No readable EXIF in upload: {e}")
        return None
    except Image.DecompressionBombError as e:
        logger.warning(f"Upload header declares an oversized image: {e}")
        return None
    except Exception as e:
        logger.warning(f"EXIF read failed: {type(e).__name__}: {e}")
        return None

    lat_raw = gps.get(ExifTags.GPS.GPSLatitude)
    lon_raw = gps.get(ExifTags.GPS.GPSLongitude)
    if lat_raw is None or lon_raw is None:
        return None

    try:
        latitude = _dms_to_degrees(lat_raw)
        longitude = _dms_to_degrees(lon_raw)
    except (TypeError, ValueError, ZeroDivisionError) as e:
        logger.warning(f"Malformed EXIF GPS tags: {e}")
        return None

    if _ref(gps.get(ExifTags.GPS.GPSLatitudeRef)) == "S":
        latitude = -latitude
    if _ref(gps.get(ExifTags.GPS.GPSLongitudeRef)) == "W":
        longitude = -longitude

    return parse_coordinate_pair(latitude, longitude)


def parse_location_text(location: Optional[str]) -> Optional[Coordinates]:
    """Parse a strict "<number>, <number>" location string."""
    if not location:
        return None
    match = COORDINATE_TEXT_PATTERN.match(location)
    if not match:
        return None
    return parse_coordinate_pair(match.group(1), match.group(2))


class CoordinateResolver:
    """
    Decides the coordinates of a new report.

    Local and synchronous; never raises on bad input. The first source that
    yields a valid pair wins and sources are never blended.
    """

    def resolve(
        self,
        image_data: Optional[bytes] = None,
        latitude: Any = None,
        longitude: Any = None,
        location: Optional[str] = None,
    ) -> CoordinateResolution:
        """
        Args:
            image_data: Uploaded photo bytes
            latitude: Explicit latitude (number or numeric string)
            longitude: Explicit longitude (number or numeric string)
            location: Free-text location typed by the reporter

        Returns:
            CoordinateResolution (coordinates None if no source matched)
        """
        coords = extract_exif_gps(image_data)
        if coords is not None:
            return CoordinateResolution(coords, CoordinateSource.EXIF)

        coords = parse_coordinate_pair(latitude, longitude)
        if coords is not None:
            return CoordinateResolution(coords, CoordinateSource.EXPLICIT)

        coords = parse_location_text(location)
        if coords is not None:
            return CoordinateResolution(coords, CoordinateSource.TEXT)

        return CoordinateResolution()
