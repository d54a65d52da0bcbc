"""
services/name_resolver.py

Responsibility: Maps the configured zone name and record names to provider
identifiers, consulting the IdentifierCache before calling the DNSProvider.
Does NOT: update records, create or delete anything at the provider, or
retry failed lookups.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from exceptions import RecordNotFoundError, ZoneNotFoundError
from providers.dns_provider import DNSProvider
from repositories.identifier_cache import IdentifierCache
from services.fanout import fan_out
from services.models import ResolvedName

logger = logging.getLogger(__name__)


def zone_cache_key(name: str) -> str:
    return f"zone:{name}"


def record_cache_key(zone_id: str, name: str) -> str:
    # An apex record shares its name with the zone; the prefix keeps them apart.
    return f"record:{zone_id}:{name}"


class NameResolver:
    """
    Resolves zone and record names to provider identifiers.

    Lookups are pure: the first match wins, an empty result is the only
    checked error, and provider state is never modified. Successful lookups
    are written back to the cache when the TTL is positive.

    Collaborators:
        - DNSProvider: lists zones and records (e.g. CloudflareClient)
        - IdentifierCache: shared across runs; the only mutable shared state
    """

    def __init__(self, dns_provider: DNSProvider, cache: IdentifierCache, ttl: float) -> None:
        """
        Initialises the resolver.

        Args:
            dns_provider: Any DNSProvider implementation.
            cache: The process-wide identifier cache.
            ttl: Seconds a fetched identifier stays cached; 0 disables caching.
        """
        self._provider = dns_provider
        self._cache = cache
        self._ttl = ttl

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    async def resolve_zone(self, name: str) -> ResolvedName:
        """
        Returns the provider identifier of the zone called `name`.

        Raises:
            ZoneNotFoundError: If the provider has no zone with that name.
            DnsProviderError: If the provider call fails.
        """
        key = zone_cache_key(name)
        cached = self._lookup_cache(key, name)
        if cached is not None:
            return cached

        zones = await self._provider.list_zones(name)
        if not zones:
            raise ZoneNotFoundError(name)

        zone_id = zones[0].id
        self._cache.put(key, zone_id, self._ttl)
        logger.info("Zone found: %s (%s)", name, zone_id)
        return ResolvedName(name, zone_id)

    async def resolve_record(self, zone_id: str, name: str) -> ResolvedName:
        """
        Returns the provider identifier of the A-record called `name`.

        Raises:
            RecordNotFoundError: If the zone has no A-record with that name.
            DnsProviderError: If the provider call fails.
        """
        key = record_cache_key(zone_id, name)
        cached = self._lookup_cache(key, name)
        if cached is not None:
            return cached

        records = await self._provider.list_records(zone_id, name)
        if not records:
            raise RecordNotFoundError(name)

        record_id = records[0].id
        self._cache.put(key, record_id, self._ttl)
        logger.info("DNS record found: %s (%s)", name, record_id)
        return ResolvedName(name, record_id)

    async def resolve_records(self, zone_id: str, names: Sequence[str]) -> list[ResolvedName]:
        """
        Resolves every record name concurrently, one task per name.

        Duplicate names are resolved independently. The first failure
        observed cancels the remaining lookups and propagates.

        Args:
            zone_id: The already-resolved zone identifier.
            names: Record names, in configuration order.

        Returns:
            One ResolvedName per input name, in input order.
        """
        return await fan_out(self.resolve_record(zone_id, name) for name in names)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    def _lookup_cache(self, key: str, name: str) -> ResolvedName | None:
        provider_id = self._cache.get(key)
        if provider_id is None:
            logger.debug("Identifier cache miss: %s", key)
            return None
        logger.debug("Identifier cache hit: %s (%s)", key, provider_id)
        return ResolvedName(name, provider_id, cached=True)
