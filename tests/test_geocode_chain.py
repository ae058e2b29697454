"""
Tests for the reverse geocoding chain and its providers
"""
import asyncio
import pytest
from unittest.mock import patch, MagicMock

import httpx

import sys
sys.path.insert(0, '.')

from disasteralert.core.config import Settings
from disasteralert.enrichment.address import AddressBundle
from disasteralert.enrichment.geocode_chain import (
    COORDINATE_FALLBACK,
    GeminiLocationProvider,
    GeocodeProviderChain,
    GoogleGeocodingProvider,
    NominatimProvider,
    build_geocode_chain,
)
from disasteralert.ingestion.google_geocoding_client import GoogleGeocodingClient
from disasteralert.ingestion.nominatim_client import NominatimClient

LAT, LNG = 12.9716, 77.5946
MAP_LINK = "https://www.google.com/maps?q=12.9716,77.5946"


def _mock_http_client(mock_client, payload):
    """Wire a patched httpx.Client so `with httpx.Client(...)` returns a canned JSON body."""
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.json.return_value = payload
    mock_response.raise_for_status.return_value = None

    mock_client_instance = MagicMock()
    mock_client_instance.get.return_value = mock_response
    mock_client.return_value.__enter__ = MagicMock(return_value=mock_client_instance)
    mock_client.return_value.__exit__ = MagicMock(return_value=False)
    return mock_client_instance


class TestGeocodeProviderChain:
    """Test suite for provider ordering and fallback."""

    def test_first_success_stops_chain(self, location_provider_cls, sample_address):
        first = location_provider_cls("gemini", bundle=sample_address)
        second = location_provider_cls("google", bundle=sample_address)
        chain = GeocodeProviderChain([first, second], timeout_seconds=1.0)

        result = asyncio.run(chain.resolve(LAT, LNG))

        assert result.provider == "gemini"
        assert result.address.full_address == sample_address.full_address
        assert second.calls == []

    def test_failure_advances_to_next(self, location_provider_cls, sample_address):
        failing = location_provider_cls("gemini", error=RuntimeError("quota exceeded"))
        working = location_provider_cls("google", bundle=sample_address)
        chain = GeocodeProviderChain([failing, working], timeout_seconds=1.0)

        result = asyncio.run(chain.resolve(LAT, LNG))

        assert result.provider == "google"
        assert failing.calls == [(LAT, LNG)]
        assert working.calls == [(LAT, LNG)]

    def test_unusable_result_advances(self, location_provider_cls, sample_address):
        empty = location_provider_cls("gemini", bundle=AddressBundle(city="Bengaluru"))
        none = location_provider_cls("google", bundle=None)
        working = location_provider_cls("nominatim", bundle=sample_address)
        chain = GeocodeProviderChain([empty, none, working], timeout_seconds=1.0)

        result = asyncio.run(chain.resolve(LAT, LNG))

        assert result.provider == "nominatim"

    def test_timeout_advances(self, location_provider_cls, sample_address):
        slow = location_provider_cls("gemini", bundle=sample_address, delay=0.5)
        working = location_provider_cls("google", bundle=AddressBundle(full_address="Fallback address"))
        chain = GeocodeProviderChain([slow, working], timeout_seconds=0.1)

        result = asyncio.run(chain.resolve(LAT, LNG))

        # The late reply from the slow provider is never used
        assert result.provider == "google"
        assert result.address.full_address == "Fallback address"

    def test_all_fail_gives_coordinate_fallback(self, location_provider_cls):
        chain = GeocodeProviderChain([
            location_provider_cls("gemini", error=RuntimeError("down")),
            location_provider_cls("google", error=httpx.ConnectError("refused")),
            location_provider_cls("nominatim", bundle=None),
        ], timeout_seconds=1.0)

        result = asyncio.run(chain.resolve(LAT, LNG))

        assert result.provider == COORDINATE_FALLBACK
        assert result.is_fallback
        assert all(value == "" for value in result.address.structured_fields.values())
        assert result.address.map_link == MAP_LINK

    def test_map_link_always_from_coordinates(self, location_provider_cls, sample_address):
        bundle = AddressBundle.from_mapping({**sample_address.to_dict(), "map_link": "https://example.com/x"})
        chain = GeocodeProviderChain([location_provider_cls("gemini", bundle=bundle)], timeout_seconds=1.0)

        result = asyncio.run(chain.resolve(LAT, LNG))

        assert result.address.map_link == MAP_LINK

    def test_empty_chain(self):
        result = asyncio.run(GeocodeProviderChain([], timeout_seconds=1.0).resolve(LAT, LNG))
        assert result.provider == COORDINATE_FALLBACK


class TestBuildGeocodeChain:
    """Test suite for chain construction from settings."""

    def test_only_nominatim_without_keys(self):
        config = Settings(gemini_api_key=None, google_maps_api_key=None)
        chain = build_geocode_chain(config)
        assert chain.provider_names == ["nominatim"]

    def test_google_with_key(self):
        config = Settings(gemini_api_key=None, google_maps_api_key="test_key")
        chain = build_geocode_chain(config)
        assert chain.provider_names == ["google", "nominatim"]

    def test_gemini_client_first(self):
        config = Settings(gemini_api_key=None, google_maps_api_key="test_key")
        chain = build_geocode_chain(config, gemini_client=MagicMock())
        assert chain.provider_names == ["gemini", "google", "nominatim"]
        assert chain.timeout_seconds == config.provider_timeout_seconds


class TestGeminiLocationProvider:
    """Test suite for the Gemini provider."""

    def test_maps_json_reply(self):
        client = MagicMock()
        client.generate_json.return_value = {
            "place_name": "Cubbon Park",
            "full_address": "Kasturba Road, Bengaluru, Karnataka 560001, India",
            "city": "Bengaluru",
            "pincode": 560001,
            "unexpected": "ignored",
        }

        bundle = GeminiLocationProvider(client).reverse_geocode(LAT, LNG)

        assert bundle.place_name == "Cubbon Park"
        assert bundle.pincode == "560001"
        assert bundle.taluk == ""
        prompt = client.generate_json.call_args[0][0]
        assert "Latitude: 12.9716" in prompt
        assert "Longitude: 77.5946" in prompt

    def test_propagates_client_errors(self):
        client = MagicMock()
        client.generate_json.side_effect = ValueError("not JSON")
        with pytest.raises(ValueError):
            GeminiLocationProvider(client).reverse_geocode(LAT, LNG)


class TestGoogleGeocoding:
    """Test suite for the Google Geocoding client and provider."""

    def test_client_without_api_key(self):
        with pytest.raises(ValueError):
            GoogleGeocodingClient(api_key="")

    @patch('disasteralert.ingestion.google_geocoding_client.httpx.Client')
    def test_reverse_geocode(self, mock_client):
        instance = _mock_http_client(mock_client, {
            "status": "OK",
            "results": [{
                "formatted_address": "MG Road, Shivaji Nagar, Bengaluru, Karnataka 560001, India",
                "place_id": "abc123",
                "address_components": [
                    {"long_name": "MG Road", "short_name": "MG Rd", "types": ["route"]},
                    {"long_name": "Shivaji Nagar", "types": ["sublocality_level_1", "sublocality"]},
                    {"long_name": "Bengaluru", "types": ["locality", "political"]},
                    {"long_name": "Bangalore Urban", "types": ["administrative_area_level_2"]},
                    {"long_name": "Karnataka", "types": ["administrative_area_level_1"]},
                    {"long_name": "India", "types": ["country"]},
                    {"long_name": "560001", "types": ["postal_code"]},
                ],
            }],
        })

        provider = GoogleGeocodingProvider(GoogleGeocodingClient(api_key="test_key"))
        bundle = provider.reverse_geocode(LAT, LNG)

        assert bundle.full_address.startswith("MG Road")
        assert bundle.area == "Shivaji Nagar"
        assert bundle.taluk == "Shivaji Nagar"
        assert bundle.city == "Bengaluru"
        assert bundle.district == "Bangalore Urban"
        assert bundle.state == "Karnataka"
        assert bundle.pincode == "560001"
        assert bundle.country == "India"

        params = instance.get.call_args.kwargs["params"]
        assert params["latlng"] == "12.9716,77.5946"
        assert params["key"] == "test_key"

    @patch('disasteralert.ingestion.google_geocoding_client.httpx.Client')
    def test_zero_results(self, mock_client):
        _mock_http_client(mock_client, {"status": "ZERO_RESULTS", "results": []})
        client = GoogleGeocodingClient(api_key="test_key")
        assert client.reverse_geocode(LAT, LNG) is None
        assert GoogleGeocodingProvider(client).reverse_geocode(LAT, LNG) is None


class TestNominatim:
    """Test suite for the Nominatim client and provider."""

    @patch('disasteralert.ingestion.nominatim_client.httpx.Client')
    def test_reverse(self, mock_client):
        instance = _mock_http_client(mock_client, {
            "display_name": "Cubbon Park, Ambedkar Veedhi, Bengaluru, Karnataka, 560001, India",
            "osm_id": 123,
            "osm_type": "way",
            "address": {
                "leisure": "Cubbon Park",
                "suburb": "Sampangi Rama Nagara",
                "city": "Bengaluru",
                "county": "Bangalore North",
                "state_district": "Bangalore Urban",
                "state": "Karnataka",
                "postcode": "560001",
                "country": "India",
            },
        })

        provider = NominatimProvider(NominatimClient(base_url="https://nominatim.example.org/"))
        bundle = provider.reverse_geocode(LAT, LNG)

        assert bundle.full_address.startswith("Cubbon Park")
        assert bundle.nearest_landmark == "Cubbon Park"
        assert bundle.area == "Sampangi Rama Nagara"
        assert bundle.city == "Bengaluru"
        assert bundle.taluk == "Bangalore North"
        assert bundle.state == "Karnataka"
        assert bundle.pincode == "560001"

        assert instance.get.call_args[0][0] == "https://nominatim.example.org/reverse"
        assert mock_client.call_args.kwargs["headers"]["User-Agent"]

    @patch('disasteralert.ingestion.nominatim_client.httpx.Client')
    def test_unable_to_geocode(self, mock_client):
        _mock_http_client(mock_client, {"error": "Unable to geocode"})
        assert NominatimClient().reverse(0.0, 0.0) is None
