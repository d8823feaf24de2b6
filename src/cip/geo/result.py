"""Result type for best-effort geolocation lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from cip.models import LocationDescriptor, Provenance


@dataclass(frozen=True)
class GeoResult:
    """Either a resolved descriptor or a failure sentinel with null fields."""

    descriptor: LocationDescriptor
    is_vpn: bool = False
    is_datacenter: bool = False
    isp: Optional[str] = None
    error: Optional[str] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, provenance: Provenance, error: str) -> "GeoResult":
        return cls(descriptor=LocationDescriptor(provenance=provenance), error=error)
