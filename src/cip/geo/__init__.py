"""Geolocation resolver."""

from cip.geo.network import lookup_network
from cip.geo.result import GeoResult
from cip.geo.reverse import reverse_geocode

__all__ = ["GeoResult", "lookup_network", "reverse_geocode"]
