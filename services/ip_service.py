"""
services/ip_service.py

Responsibility: Fetches the current public IPv4 address of the host machine.
Does NOT: resolve DNS identifiers, interact with Cloudflare, or read options.
"""

from __future__ import annotations

import ipaddress
import logging

import httpx

from exceptions import IpFetchError

logger = logging.getLogger(__name__)

# NOTE: Both services return the caller's public IPv4 as plain text.
# They are tried in order; the second is only consulted if the first fails.
_IP_PROVIDER_URLS = (
    "https://checkip.amazonaws.com",
    "https://api.ipify.org",
)


class IpService:
    """
    Fetches the host machine's current public IPv4 address.

    Uses an injected httpx.AsyncClient so the service is fully testable
    without real network calls (use respx.mock in tests).

    Collaborators:
        - httpx.AsyncClient: injected; must be kept alive externally
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        provider_urls: tuple[str, ...] = _IP_PROVIDER_URLS,
    ) -> None:
        """
        Initialises the service with a shared HTTP client.

        Args:
            http_client: A long-lived httpx.AsyncClient instance created
                         during application startup.
            provider_urls: Plain-text IP echo endpoints, tried in order.
        """
        self._client = http_client
        self._urls = provider_urls

    async def get_public_ip(self) -> str:
        """
        Returns the current public IPv4 address of the host machine.

        Returns:
            The public IP address as a plain string, e.g. "1.2.3.4".

        Raises:
            IpFetchError: If no provider is reachable or none returns a
                          valid IPv4 address.
        """
        failures: list[str] = []
        for url in self._urls:
            try:
                ip = await self._fetch(url)
            except IpFetchError as exc:
                logger.debug("IP provider %s failed: %s", url, exc)
                failures.append(str(exc))
                continue
            logger.debug("Current public IP: %s (via %s)", ip, url)
            return ip

        raise IpFetchError(
            "failed to determine public IPv4 address: " + "; ".join(failures)
        )

    async def _fetch(self, url: str) -> str:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise IpFetchError(
                f"IP provider {url} returned status {exc.response.status_code}."
            ) from exc
        except httpx.RequestError as exc:
            raise IpFetchError(f"Could not reach IP provider ({url}): {exc}") from exc

        text = response.text.strip()
        try:
            return str(ipaddress.IPv4Address(text))
        except ValueError as exc:
            raise IpFetchError(
                f"IP provider {url} returned a non-IPv4 body: {text[:50]!r}"
            ) from exc
