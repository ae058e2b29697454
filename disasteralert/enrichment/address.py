"""
Resolved address bundle shared by every geocoding provider.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class AddressBundle:
    """
    Fixed-schema structured location for an incident.

    Every field is a string; a field the producing provider did not supply
    is the empty string.
    """
    place_name: str = ""
    full_address: str = ""
    nearest_landmark: str = ""
    area: str = ""
    city: str = ""
    taluk: str = ""
    district: str = ""
    state: str = ""
    pincode: str = ""
    country: str = ""
    map_link: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AddressBundle":
        """Build from a loosely typed mapping, ignoring unknown keys."""
        values = {}
        for f in fields(cls):
            raw = data.get(f.name)
            values[f.name] = "" if raw is None else str(raw).strip()
        return cls(**values)

    @property
    def is_usable(self) -> bool:
        """A provider result counts only if it carries a full address."""
        return bool(self.full_address.strip())

    @property
    def structured_fields(self) -> Dict[str, str]:
        """Every field except the map link."""
        return {k: v for k, v in self.to_dict().items() if k != "map_link"}

    def with_map_link(self, map_link: str) -> "AddressBundle":
        return replace(self, map_link=map_link)

    def to_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class GeocodeResult:
    """Address bundle plus the name of the provider that produced it."""
    address: AddressBundle
    provider: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def is_fallback(self) -> bool:
        return self.provider in ("coordinates", "location_text")
