"""Network-address geolocation (ip-api.com compatible)."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from cip.config import Settings
from cip.geo.result import GeoResult
from cip.models import LocationDescriptor, Provenance
from cip.utils.logging import get_logger


logger = get_logger(__name__)

LOOKUP_FIELDS = (
    "status,message,country,countryCode,region,regionName,city,isp,mobile,proxy,hosting"
)


def lookup_network(
    address: str,
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> GeoResult:
    """Resolve a network address to a place. Never raises."""
    settings = settings or Settings()
    if not address or address == "unknown":
        return GeoResult.failed(Provenance.NETWORK, "no routable address")

    url = f"{settings.ip_geo_base_url.rstrip('/')}/{address}"
    try:
        if client is None:
            with httpx.Client(timeout=settings.geo_timeout_seconds) as own_client:
                payload = _get_json(own_client, url)
        else:
            payload = _get_json(client, url)
    except Exception as exc:
        logger.warning("geo.network.failed address=%s error=%s", address, exc)
        return GeoResult.failed(Provenance.NETWORK, str(exc))

    if payload.get("status") == "fail":
        message = payload.get("message") or "lookup failed"
        logger.info("geo.network.provider_fail address=%s message=%s", address, message)
        return GeoResult.failed(Provenance.NETWORK, message)

    return _to_result(payload)


def _get_json(client: httpx.Client, url: str) -> dict[str, Any]:
    response = client.get(url, params={"fields": LOOKUP_FIELDS})
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError("unexpected lookup response shape")
    return payload


def _to_result(payload: dict[str, Any]) -> GeoResult:
    descriptor = LocationDescriptor(
        city=payload.get("city") or None,
        region=payload.get("regionName") or None,
        country=payload.get("country") or None,
        country_code=payload.get("countryCode") or None,
        provenance=Provenance.NETWORK,
    )
    return GeoResult(
        descriptor=descriptor,
        is_vpn=bool(payload.get("proxy")),
        is_datacenter=bool(payload.get("hosting")),
        isp=payload.get("isp") or None,
    )
