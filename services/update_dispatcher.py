"""
services/update_dispatcher.py

Responsibility: Issues one concurrent "set address" call per resolved record
and collects a per-record UpdateOutcome.
Does NOT: resolve identifiers, retry failed updates, or decide whether the
run as a whole failed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from exceptions import DnsProviderError
from providers.dns_provider import DNSProvider
from services.fanout import fan_out
from services.models import ResolvedName, UpdateOutcome

logger = logging.getLogger(__name__)


class UpdateDispatcher:
    """
    Points every resolved record at a new address, all calls in flight at once.

    A failed call never cancels its siblings: every call is awaited and the
    failure is recorded in that record's outcome.

    Collaborators:
        - DNSProvider: performs the update call (e.g. CloudflareClient)
    """

    def __init__(self, dns_provider: DNSProvider) -> None:
        self._provider = dns_provider

    async def dispatch(
        self,
        zone_id: str,
        resolved_records: Sequence[ResolvedName],
        new_address: str,
    ) -> list[UpdateOutcome]:
        """
        Updates every record to `new_address` concurrently.

        Args:
            zone_id: The resolved zone identifier.
            resolved_records: Records whose identifiers were resolved this run.
            new_address: The public IPv4 address to write.

        Returns:
            One UpdateOutcome per resolved record, in input order.
        """
        return await fan_out(
            self._update_one(zone_id, record, new_address) for record in resolved_records
        )

    async def _update_one(self, zone_id: str, record: ResolvedName, address: str) -> UpdateOutcome:
        try:
            updated = await self._provider.update_record(
                zone_id, record.provider_id, record.logical_name, address
            )
        except DnsProviderError as exc:
            logger.error("DNS record update failed: %s (%s): %s", record.logical_name, record.provider_id, exc)
            return UpdateOutcome(record.logical_name, record.provider_id, error=exc)

        logger.info("DNS record updated: %s (%s) -> %s", record.logical_name, record.provider_id, updated.content)
        return UpdateOutcome(record.logical_name, record.provider_id, address=updated.content)
