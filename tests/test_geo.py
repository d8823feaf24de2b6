import httpx

from cip.config import Settings
from cip.geo import lookup_network, reverse_geocode
from cip.models import Provenance


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_network_lookup_maps_provider_fields():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "status": "success",
                "country": "Germany",
                "countryCode": "DE",
                "regionName": "Bavaria",
                "city": "Munich",
                "isp": "Deutsche Telekom AG",
                "proxy": False,
                "hosting": True,
            },
        )

    result = lookup_network("203.0.113.7", settings=Settings(), client=_client(handler))

    assert result.ok
    assert result.descriptor.city == "Munich"
    assert result.descriptor.region == "Bavaria"
    assert result.descriptor.country_code == "DE"
    assert result.descriptor.provenance is Provenance.NETWORK
    assert result.is_datacenter is True
    assert result.is_vpn is False
    assert result.isp == "Deutsche Telekom AG"
    assert seen[0].url.path == "/json/203.0.113.7"
    assert "hosting" in seen[0].url.params["fields"]


def test_network_lookup_provider_failure_is_null_result():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "fail", "message": "private range"})

    result = lookup_network("10.0.0.1", settings=Settings(), client=_client(handler))

    assert not result.ok
    assert result.error == "private range"
    assert result.descriptor.city is None
    assert result.descriptor.country_code is None


def test_network_lookup_http_error_is_null_result():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    result = lookup_network("203.0.113.7", settings=Settings(), client=_client(handler))

    assert not result.ok
    assert result.is_vpn is False


def test_network_lookup_transport_error_is_null_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    result = lookup_network("203.0.113.7", settings=Settings(), client=_client(handler))

    assert not result.ok
    assert result.descriptor.country is None


def test_network_lookup_skips_unknown_address():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    result = lookup_network("unknown", settings=Settings(), client=_client(handler))

    assert not result.ok
    assert calls == []


def test_reverse_geocode_prefers_city_then_locality():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "city": "",
                "locality": "Mitte",
                "principalSubdivision": "Berlin",
                "countryName": "Germany",
                "countryCode": "DE",
            },
        )

    result = reverse_geocode(52.52, 13.405, settings=Settings(), client=_client(handler))

    assert result.ok
    assert result.descriptor.city == "Mitte"
    assert result.descriptor.region == "Berlin"
    assert result.descriptor.country == "Germany"
    assert result.descriptor.provenance is Provenance.DEVICE
    params = seen[0].url.params
    assert params["latitude"] == "52.52"
    assert params["longitude"] == "13.405"
    assert params["localityLanguage"] == "en"


def test_reverse_geocode_failure_is_null_result():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    result = reverse_geocode(0.0, 0.0, settings=Settings(), client=_client(handler))

    assert not result.ok
    assert result.descriptor.city is None
    assert result.descriptor.provenance is Provenance.DEVICE
