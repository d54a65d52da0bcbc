"""
providers/cloudflare_client.py

Responsibility: Implements the DNSProvider protocol using the Cloudflare REST API.
All Cloudflare HTTP calls are concentrated here; no other file may call the
Cloudflare API directly.
Does NOT: cache identifiers, decide on retries, or contain scheduling logic.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from exceptions import DnsProviderError
from providers.dns_provider import DnsRecord, DnsZone

logger = logging.getLogger(__name__)

_CLOUDFLARE_BASE = "https://api.cloudflare.com/client/v4"


class CloudflareClient:
    """
    Implements DNSProvider for the Cloudflare DNS REST API (v4).

    All outbound Cloudflare requests go through the injected httpx.AsyncClient,
    making this class fully testable without real network calls (use respx.mock).
    The client holds no per-call state, so one instance is shared by every
    concurrent resolution and update task of a run.

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
        - DNSProvider: this class satisfies the protocol contract
    """

    def __init__(self, http_client: httpx.AsyncClient, api_token: str) -> None:
        """
        Initialises the client with an HTTP client and a Cloudflare API token.

        Args:
            http_client: A long-lived httpx.AsyncClient instance. Its timeout
                         bounds every individual API call.
            api_token: A Cloudflare API token with Zone:Read and DNS:Edit.
        """
        self._client = http_client
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }

    # ---------------------------------------------------------------------------
    # DNSProvider implementation
    # ---------------------------------------------------------------------------

    async def list_zones(self, name: str) -> list[DnsZone]:
        """
        Lists the account's zones whose name equals `name`.

        Args:
            name: The zone name, e.g. "example.com".

        Returns:
            A list of DnsZone instances, possibly empty.

        Raises:
            DnsProviderError: If the Cloudflare API returns an error.
        """
        url = f"{_CLOUDFLARE_BASE}/zones"
        params = {"name": name}

        logger.debug("GET %s params=%s", url, params)
        data = await self._request("GET", url, params=params)

        return [self._parse_zone(z) for z in data.get("result") or []]

    async def list_records(self, zone_id: str, name: str) -> list[DnsRecord]:
        """
        Lists A-records in the zone whose name equals `name`.

        Args:
            zone_id: The Cloudflare zone ID.
            name: The fully-qualified DNS name to look up.

        Returns:
            A list of DnsRecord instances, possibly empty.

        Raises:
            DnsProviderError: If the Cloudflare API returns an error.
        """
        url = f"{_CLOUDFLARE_BASE}/zones/{zone_id}/dns_records"
        params = {"type": "A", "name": name}

        logger.debug("GET %s params=%s", url, params)
        data = await self._request("GET", url, params=params)

        return [self._parse_record(r) for r in data.get("result") or []]

    async def update_record(
        self, zone_id: str, record_id: str, name: str, address: str
    ) -> DnsRecord:
        """
        Points an existing A-record at a new IPv4 address.

        PATCH is used so proxied and TTL keep whatever values the record
        already has on Cloudflare.

        Args:
            zone_id: The Cloudflare zone ID.
            record_id: The Cloudflare record ID.
            name: The record's current name (sent unchanged).
            address: The new IPv4 address to write.

        Returns:
            The updated DnsRecord.

        Raises:
            DnsProviderError: If the Cloudflare API returns an error.
        """
        url = f"{_CLOUDFLARE_BASE}/zones/{zone_id}/dns_records/{record_id}"
        payload: dict[str, Any] = {
            "type": "A",
            "name": name,
            "content": address,
        }

        logger.debug("PATCH %s payload=%s", url, payload)
        data = await self._request("PATCH", url, json=payload)

        result = data.get("result")
        if not isinstance(result, dict):
            raise DnsProviderError(f"Cloudflare API returned no record for PATCH {url}")
        return self._parse_record(result)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Sends an authenticated HTTP request to the Cloudflare API.

        Args:
            method: HTTP verb ("GET", "PATCH").
            url: Full URL of the Cloudflare API endpoint.
            params: Optional query-string parameters.
            json: Optional JSON request body.

        Returns:
            The parsed JSON response body as a dict.

        Raises:
            DnsProviderError: If the HTTP call fails, the body is not JSON, or
                              the API returns success=false in the response body.
        """
        try:
            response = await self._client.request(
                method, url, headers=self._headers, params=params, json=json
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DnsProviderError(
                f"Cloudflare API error {exc.response.status_code} for {method} {url}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except httpx.RequestError as exc:
            raise DnsProviderError(
                f"Network error calling Cloudflare API ({method} {url}): {exc}"
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise DnsProviderError(
                f"Cloudflare API returned a non-JSON body for {method} {url}"
            ) from exc

        # NOTE: Cloudflare wraps all responses in {"success": bool, "result": ...}
        if not isinstance(body, dict) or not body.get("success", False):
            errors = body.get("errors", []) if isinstance(body, dict) else body
            raise DnsProviderError(
                f"Cloudflare API returned success=false for {method} {url}. "
                f"Errors: {errors}"
            )

        return body

    @staticmethod
    def _parse_zone(raw: dict[str, Any]) -> DnsZone:
        try:
            return DnsZone(id=raw["id"], name=raw.get("name", ""))
        except (KeyError, TypeError, AttributeError) as exc:
            raise DnsProviderError(f"Cloudflare API returned a malformed zone: {raw!r}") from exc

    @staticmethod
    def _parse_record(raw: dict[str, Any]) -> DnsRecord:
        """
        Converts a raw Cloudflare API record dict into a typed DnsRecord.

        Args:
            raw: A single record object from the Cloudflare API response.

        Returns:
            A DnsRecord populated from the raw dict.

        Raises:
            DnsProviderError: If the object has no "id" or is not a dict.
        """
        try:
            return DnsRecord(
                id=raw["id"],
                name=raw.get("name", ""),
                content=raw.get("content", ""),
                type=raw.get("type", "A"),
                ttl=raw.get("ttl", 1),
                proxied=raw.get("proxied", False),
                zone_id=raw.get("zone_id", ""),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise DnsProviderError(f"Cloudflare API returned a malformed record: {raw!r}") from exc
