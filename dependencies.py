"""
dependencies.py

Responsibility: Builds the long-lived collaborators of a process (HTTP client,
identifier cache) and wires them into a ready-to-run DnsService.
Does NOT: contain business logic, option parsing, or scheduling.
"""

from __future__ import annotations

import httpx

from config import Settings
from providers.cloudflare_client import CloudflareClient
from providers.dns_provider import DNSProvider
from repositories.identifier_cache import IdentifierCache
from services.dns_service import DnsService
from services.ip_service import IpService
from services.name_resolver import NameResolver
from services.update_dispatcher import UpdateDispatcher

# ---------------------------------------------------------------------------
# Infrastructure: shared process-level resources
# ---------------------------------------------------------------------------


def get_http_client(settings: Settings) -> httpx.AsyncClient:
    """
    Returns a new httpx.AsyncClient for the whole process.

    The client is created once and reused for every run so connections
    are pooled. Its timeout bounds each individual network call.

    Args:
        settings: Supplies the per-call timeout.

    Returns:
        An httpx.AsyncClient; the caller owns it and must close it.
    """
    return httpx.AsyncClient(timeout=settings.http_timeout)


def get_identifier_cache(settings: Settings) -> IdentifierCache:
    """
    Returns an empty cache sized for the configured zone and records.

    Args:
        settings: Supplies the record names.

    Returns:
        An IdentifierCache with one slot per record plus one for the zone.
    """
    return IdentifierCache.for_names(settings.records)


# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------


def get_dns_provider(settings: Settings, http_client: httpx.AsyncClient) -> DNSProvider:
    """
    Provides a CloudflareClient initialised with the configured API token.

    Args:
        settings: Supplies the API token.
        http_client: The process-level httpx.AsyncClient.

    Returns:
        A CloudflareClient instance satisfying the DNSProvider protocol.
    """
    return CloudflareClient(http_client=http_client, api_token=settings.api_token)


def get_dns_service(
    settings: Settings,
    http_client: httpx.AsyncClient,
    cache: IdentifierCache,
    dns_provider: DNSProvider | None = None,
) -> DnsService:
    """
    Provides a fully wired DnsService.

    Args:
        settings: Zone, records and cache TTL.
        http_client: The process-level httpx.AsyncClient.
        cache: The process-level identifier cache, shared by every run.
        dns_provider: Overrides the Cloudflare provider (tests).

    Returns:
        A DnsService instance ready to run.
    """
    provider = dns_provider or get_dns_provider(settings, http_client)
    return DnsService(
        resolver=NameResolver(provider, cache, settings.cache_ttl),
        dispatcher=UpdateDispatcher(provider),
        ip_service=IpService(http_client),
        zone_name=settings.zone,
        record_names=settings.records,
    )
