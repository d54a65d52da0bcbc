"""
tests/unit/test_cloudflare_client.py

Unit tests for providers/cloudflare_client.py.
All Cloudflare API calls are intercepted by respx; no real network traffic.
"""

from __future__ import annotations

import json

import httpx
import pytest

from exceptions import DnsProviderError
from providers.cloudflare_client import CloudflareClient
from providers.dns_provider import DNSProvider, DnsRecord, DnsZone

_ZONE = "zone123"
_TOKEN = "test-token"
_BASE = "https://api.cloudflare.com/client/v4"


def _cf_response(result, success=True):
    """Helper: build a Cloudflare-shaped JSON response dict."""
    return {"success": success, "result": result, "errors": []}


def _record_dict(**kwargs):
    return {
        "id": kwargs.get("id", "rec1"),
        "name": kwargs.get("name", "home.example.com"),
        "content": kwargs.get("content", "1.2.3.4"),
        "type": "A",
        "ttl": kwargs.get("ttl", 1),
        "proxied": kwargs.get("proxied", False),
        "zone_id": _ZONE,
    }


@pytest.mark.asyncio
async def test_client_satisfies_protocol(http_client):
    assert isinstance(CloudflareClient(http_client, _TOKEN), DNSProvider)


# ---------------------------------------------------------------------------
# list_zones
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_zones_filters_by_name(mock_http, http_client):
    """list_zones sends the name filter and the bearer token."""
    route = mock_http.get(f"{_BASE}/zones", params={"name": "example.com"}).mock(
        return_value=httpx.Response(200, json=_cf_response([{"id": "Z1", "name": "example.com"}]))
    )
    cf = CloudflareClient(http_client, _TOKEN)
    zones = await cf.list_zones("example.com")

    assert zones == [DnsZone(id="Z1", name="example.com")]
    assert route.calls.last.request.headers["Authorization"] == f"Bearer {_TOKEN}"


@pytest.mark.asyncio
async def test_list_zones_returns_empty_list_when_no_match(mock_http, http_client):
    mock_http.get(f"{_BASE}/zones").mock(return_value=httpx.Response(200, json=_cf_response([])))
    cf = CloudflareClient(http_client, _TOKEN)
    assert await cf.list_zones("missing.com") == []


# ---------------------------------------------------------------------------
# list_records
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_records_returns_records(mock_http, http_client):
    """list_records returns DnsRecord instances filtered by type and name."""
    route = mock_http.get(f"{_BASE}/zones/{_ZONE}/dns_records").mock(
        return_value=httpx.Response(200, json=_cf_response([_record_dict()]))
    )
    cf = CloudflareClient(http_client, _TOKEN)
    records = await cf.list_records(_ZONE, "home.example.com")

    assert len(records) == 1
    assert isinstance(records[0], DnsRecord)
    assert records[0].content == "1.2.3.4"
    params = route.calls.last.request.url.params
    assert params["type"] == "A"
    assert params["name"] == "home.example.com"


@pytest.mark.asyncio
async def test_list_records_returns_empty_list_when_not_found(mock_http, http_client):
    mock_http.get(f"{_BASE}/zones/{_ZONE}/dns_records").mock(
        return_value=httpx.Response(200, json=_cf_response([]))
    )
    cf = CloudflareClient(http_client, _TOKEN)
    assert await cf.list_records(_ZONE, "missing.example.com") == []


@pytest.mark.asyncio
async def test_list_records_raises_on_api_failure(mock_http, http_client):
    """list_records raises DnsProviderError when success=false."""
    mock_http.get(f"{_BASE}/zones/{_ZONE}/dns_records").mock(
        return_value=httpx.Response(
            200, json={"success": False, "errors": [{"message": "bad token"}], "result": []}
        )
    )
    cf = CloudflareClient(http_client, _TOKEN)
    with pytest.raises(DnsProviderError):
        await cf.list_records(_ZONE, "home.example.com")


@pytest.mark.asyncio
async def test_list_records_raises_on_http_error(mock_http, http_client):
    """list_records raises DnsProviderError on HTTP 401."""
    mock_http.get(f"{_BASE}/zones/{_ZONE}/dns_records").mock(
        return_value=httpx.Response(401, json={"errors": ["unauthorized"]})
    )
    cf = CloudflareClient(http_client, _TOKEN)
    with pytest.raises(DnsProviderError):
        await cf.list_records(_ZONE, "home.example.com")


@pytest.mark.asyncio
async def test_list_records_raises_on_network_error(mock_http, http_client):
    mock_http.get(f"{_BASE}/zones/{_ZONE}/dns_records").mock(
        side_effect=httpx.ConnectError("connection refused")
    )
    cf = CloudflareClient(http_client, _TOKEN)
    with pytest.raises(DnsProviderError) as exc_info:
        await cf.list_records(_ZONE, "home.example.com")
    assert exc_info.value.is_transient()


@pytest.mark.asyncio
async def test_list_records_raises_on_non_json_body(mock_http, http_client):
    mock_http.get(f"{_BASE}/zones/{_ZONE}/dns_records").mock(
        return_value=httpx.Response(200, text="<html>gateway</html>")
    )
    cf = CloudflareClient(http_client, _TOKEN)
    with pytest.raises(DnsProviderError):
        await cf.list_records(_ZONE, "home.example.com")


# ---------------------------------------------------------------------------
# update_record
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_update_record_returns_updated_record(mock_http, http_client):
    """update_record returns the updated DnsRecord with the new IP."""
    mock_http.patch(f"{_BASE}/zones/{_ZONE}/dns_records/rec1").mock(
        return_value=httpx.Response(200, json=_cf_response(_record_dict(content="9.9.9.9")))
    )
    cf = CloudflareClient(http_client, _TOKEN)
    result = await cf.update_record(_ZONE, "rec1", "home.example.com", "9.9.9.9")

    assert result.content == "9.9.9.9"


@pytest.mark.asyncio
async def test_update_record_leaves_proxied_and_ttl_untouched(mock_http, http_client):
    """The PATCH body carries only type, name and content."""
    route = mock_http.patch(f"{_BASE}/zones/{_ZONE}/dns_records/rec1").mock(
        return_value=httpx.Response(200, json=_cf_response(_record_dict(content="9.9.9.9", proxied=True)))
    )
    cf = CloudflareClient(http_client, _TOKEN)
    await cf.update_record(_ZONE, "rec1", "home.example.com", "9.9.9.9")

    body = json.loads(route.calls.last.request.content)
    assert body == {"type": "A", "name": "home.example.com", "content": "9.9.9.9"}


@pytest.mark.asyncio
async def test_update_record_raises_on_rate_limit(mock_http, http_client):
    mock_http.patch(f"{_BASE}/zones/{_ZONE}/dns_records/rec1").mock(
        return_value=httpx.Response(429, text="rate limited")
    )
    cf = CloudflareClient(http_client, _TOKEN)
    with pytest.raises(DnsProviderError):
        await cf.update_record(_ZONE, "rec1", "home.example.com", "9.9.9.9")


# ---------------------------------------------------------------------------
# Malformed result items
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_zones_raises_provider_error_when_zone_has_no_id(mock_http, http_client):
    """A 2xx envelope whose zone lacks an id is still a DnsProviderError."""
    mock_http.get(f"{_BASE}/zones").mock(
        return_value=httpx.Response(200, json=_cf_response([{"name": "example.com"}]))
    )
    cf = CloudflareClient(http_client, _TOKEN)
    with pytest.raises(DnsProviderError) as exc_info:
        await cf.list_zones("example.com")
    assert exc_info.value.is_transient()


@pytest.mark.asyncio
async def test_list_records_raises_provider_error_on_non_object_item(mock_http, http_client):
    mock_http.get(f"{_BASE}/zones/{_ZONE}/dns_records").mock(
        return_value=httpx.Response(200, json=_cf_response(["rec1"]))
    )
    cf = CloudflareClient(http_client, _TOKEN)
    with pytest.raises(DnsProviderError):
        await cf.list_records(_ZONE, "home.example.com")


@pytest.mark.asyncio
async def test_update_record_raises_provider_error_when_record_has_no_id(mock_http, http_client):
    mock_http.patch(f"{_BASE}/zones/{_ZONE}/dns_records/rec1").mock(
        return_value=httpx.Response(200, json=_cf_response({"name": "home.example.com"}))
    )
    cf = CloudflareClient(http_client, _TOKEN)
    with pytest.raises(DnsProviderError):
        await cf.update_record(_ZONE, "rec1", "home.example.com", "9.9.9.9")
