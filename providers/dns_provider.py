"""
providers/dns_provider.py

Responsibility: Defines the DNSProvider Protocol and the DnsZone / DnsRecord
value objects.
Does NOT: make HTTP calls, cache identifiers, or implement any provider logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Value objects: stable shapes returned by all DNSProvider implementations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DnsZone:
    """A provider-managed domain, e.g. "example.com"."""

    # Provider-assigned unique identifier for the zone
    id: str

    name: str


@dataclass(frozen=True)
class DnsRecord:
    """
    Represents a single DNS A-record as returned by a DNSProvider.

    Using a dataclass (not a raw dict) ensures all callers receive a
    consistent, typed shape regardless of which provider is active.
    """

    # Provider-assigned unique identifier for the record
    id: str

    # Fully-qualified DNS name, e.g. "home.example.com"
    name: str

    # Current IP address stored in the record
    content: str

    # Record type; this application only manages "A" records
    type: str = "A"

    # TTL in seconds; 1 means "automatic" on Cloudflare
    ttl: int = 1

    # Whether the record is proxied through the provider's CDN
    proxied: bool = False

    # The zone ID to which this record belongs
    zone_id: str = ""


# ---------------------------------------------------------------------------
# Abstract interface: the three calls the reconciliation core consumes
# ---------------------------------------------------------------------------


@runtime_checkable
class DNSProvider(Protocol):
    """
    Abstract protocol for the DNS lookups and updates a reconciliation run needs.

    NameResolver and UpdateDispatcher depend on this abstraction, never on
    a concrete implementation, so tests can substitute an AsyncMock.
    """

    async def list_zones(self, name: str) -> list[DnsZone]:
        """
        Lists zones whose name matches exactly.

        Args:
            name: The zone name to filter by, e.g. "example.com".

        Returns:
            Matching zones, possibly empty.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...

    async def list_records(self, zone_id: str, name: str) -> list[DnsRecord]:
        """
        Lists A-records in a zone whose name matches exactly.

        Args:
            zone_id: The provider-assigned zone identifier.
            name: The fully-qualified DNS name to filter by.

        Returns:
            Matching records, possibly empty.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...

    async def update_record(
        self, zone_id: str, record_id: str, name: str, address: str
    ) -> DnsRecord:
        """
        Points an existing A-record at a new IPv4 address.

        Only the name and content are sent; proxied and TTL are left as the
        provider has them.

        Args:
            zone_id: The provider-assigned zone identifier.
            record_id: The provider-assigned record identifier.
            name: The record's own name (preserved, never renamed).
            address: The new IPv4 address.

        Returns:
            The updated DnsRecord as confirmed by the provider.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...
