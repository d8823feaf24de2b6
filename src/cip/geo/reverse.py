"""Reverse geocoding of device coordinates (BigDataCloud compatible)."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from cip.config import Settings
from cip.geo.result import GeoResult
from cip.models import LocationDescriptor, Provenance
from cip.utils.logging import get_logger


logger = get_logger(__name__)


def reverse_geocode(
    lat: float,
    lng: float,
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> GeoResult:
    """Resolve a latitude/longitude pair to a place. Never raises."""
    settings = settings or Settings()
    params = {"latitude": lat, "longitude": lng, "localityLanguage": "en"}

    try:
        if client is None:
            with httpx.Client(timeout=settings.geo_timeout_seconds) as own_client:
                payload = _get_json(own_client, settings.reverse_geo_base_url, params)
        else:
            payload = _get_json(client, settings.reverse_geo_base_url, params)
    except Exception as exc:
        logger.warning("geo.reverse.failed error=%s", exc)
        return GeoResult.failed(Provenance.DEVICE, str(exc))

    return GeoResult(
        descriptor=LocationDescriptor(
            city=payload.get("city") or payload.get("locality") or None,
            region=payload.get("principalSubdivision") or None,
            country=payload.get("countryName") or None,
            country_code=payload.get("countryCode") or None,
            provenance=Provenance.DEVICE,
        )
    )


def _get_json(client: httpx.Client, url: str, params: dict[str, Any]) -> dict[str, Any]:
    response = client.get(url, params=params)
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError("unexpected reverse geocode response shape")
    return payload
