"""
Pytest configuration and fixtures
"""
import io
import struct
import time
import pytest
import sys
import zlib
from pathlib import Path

from PIL import ExifTags, Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from disasteralert.crowdsource.photo_store import PhotoStore
from disasteralert.crowdsource.report_handler import IncidentHandler
from disasteralert.database.connection import DatabaseConnection
from disasteralert.enrichment.address import AddressBundle
from disasteralert.enrichment.geocode_chain import LocationProvider
from disasteralert.enrichment.photo_description import DescriptionProvider


# Bengaluru city centre
BENGALURU = (12.9716, 77.5946)


class FakeLocationProvider(LocationProvider):
    """Records calls; returns a fixed bundle, raises, or stalls."""

    def __init__(self, name, bundle=None, error=None, delay=0.0):
        self.name = name
        self.bundle = bundle
        self.error = error
        self.delay = delay
        self.calls = []

    def reverse_geocode(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.bundle


class FakeDescriptionProvider(DescriptionProvider):
    """Records calls; returns fixed text or raises."""

    def __init__(self, name, text=None, error=None, delay=0.0):
        self.name = name
        self.text = text
        self.error = error
        self.delay = delay
        self.calls = []

    def describe(self, image_data, mime_type, category, description):
        self.calls.append((mime_type, category, description))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def location_provider_cls():
    return FakeLocationProvider


@pytest.fixture
def description_provider_cls():
    return FakeDescriptionProvider


@pytest.fixture
def bengaluru():
    return BENGALURU


@pytest.fixture
def sample_address():
    """Address bundle as a geocoder would return it for Bengaluru."""
    return AddressBundle(
        place_name="Vidhana Soudha",
        full_address="Dr Ambedkar Veedhi, Sampangi Rama Nagara, Bengaluru, Karnataka 560001, India",
        nearest_landmark="Vidhana Soudha",
        area="Sampangi Rama Nagara",
        city="Bengaluru",
        taluk="Bengaluru North",
        district="Bengaluru Urban",
        state="Karnataka",
        pincode="560001",
        country="India",
    )


@pytest.fixture
def db(tmp_path):
    """Fresh SQLite database with tables and default departments."""
    database = DatabaseConnection(f"sqlite:///{tmp_path / 'test.db'}")
    database.create_tables()
    database.seed_departments()
    yield database
    database.close()


@pytest.fixture
def handler(db):
    return IncidentHandler(db)


@pytest.fixture
def photo_store(tmp_path):
    return PhotoStore(upload_dir=str(tmp_path / "uploads"), url_prefix="/uploads")


@pytest.fixture
def make_incident(handler):
    """Insert an incident directly, bypassing enrichment."""
    def _make(latitude=None, longitude=None, category="Fire", title="Test incident",
              user_id="user-1", address=None, **kwargs):
        return handler.create_incident(
            title=title,
            category=category,
            image_url="/uploads/test.jpg",
            photo_description="Test description",
            address=address or AddressBundle(),
            latitude=latitude,
            longitude=longitude,
            user_id=user_id,
            **kwargs,
        )
    return _make


def _jpeg_bytes(gps=None):
    image = Image.new("RGB", (16, 16), color=(200, 80, 40))
    buffer = io.BytesIO()
    if gps is None:
        image.save(buffer, format="JPEG")
    else:
        exif = Image.Exif()
        exif[ExifTags.IFD.GPSInfo] = gps
        image.save(buffer, format="JPEG", exif=exif)
    return buffer.getvalue()


@pytest.fixture
def plain_jpeg():
    """JPEG without EXIF metadata."""
    return _jpeg_bytes()


@pytest.fixture
def gps_jpeg():
    """JPEG tagged at 12deg 58' 18" N, 77deg 35' 42" E."""
    return _jpeg_bytes({
        ExifTags.GPS.GPSLatitudeRef: "N",
        ExifTags.GPS.GPSLatitude: (12.0, 58.0, 18.0),
        ExifTags.GPS.GPSLongitudeRef: "E",
        ExifTags.GPS.GPSLongitude: (77.0, 35.0, 42.0),
    })


@pytest.fixture
def southwest_gps_jpeg():
    """JPEG tagged at 33deg 52' 12" S, 151deg 12' 36" W."""
    return _jpeg_bytes({
        ExifTags.GPS.GPSLatitudeRef: "S",
        ExifTags.GPS.GPSLatitude: (33.0, 52.0, 12.0),
        ExifTags.GPS.GPSLongitudeRef: "W",
        ExifTags.GPS.GPSLongitude: (151.0, 12.0, 36.0),
    })


def _png_chunk(kind, data):
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


@pytest.fixture
def oversized_png():
    """PNG header declaring 30000x30000 pixels, past Pillow's bomb limit."""
    header = struct.pack(">IIBBBBB", 30000, 30000, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", b"")
        + _png_chunk(b"IEND", b"")
    )
