"""
services/dns_service.py

Responsibility: Orchestrates one reconciliation run: public IP and zone in
parallel, then every record identifier in parallel, then every update in
parallel.
Does NOT: make HTTP calls directly, retry failed runs, or schedule runs.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from services.fanout import fan_out
from services.ip_service import IpService
from services.models import RunResult
from services.name_resolver import NameResolver
from services.update_dispatcher import UpdateDispatcher

logger = logging.getLogger(__name__)


class DnsService:
    """
    Runs a single pass that points every configured record at the public IP.

    A record is only updated once its own identifier, the zone identifier
    and the public IP have all been determined in the same run. Any failure
    before update dispatch aborts the run without a single update call.
    Unchanged addresses are still written; there is no "already up to date"
    short-circuit.

    Collaborators:
        - NameResolver: zone / record identifiers, cache first
        - UpdateDispatcher: concurrent update calls
        - IpService: provides the current public IP
    """

    def __init__(
        self,
        resolver: NameResolver,
        dispatcher: UpdateDispatcher,
        ip_service: IpService,
        zone_name: str,
        record_names: Sequence[str],
    ) -> None:
        """
        Initialises the service with all required collaborators.

        Args:
            resolver: Resolves the zone and record names.
            dispatcher: Sends the update calls.
            ip_service: Provides the current public IP of the host machine.
            zone_name: The configured zone, e.g. "example.com".
            record_names: The configured record names, duplicates allowed.
        """
        self._resolver = resolver
        self._dispatcher = dispatcher
        self._ip_service = ip_service
        self._zone_name = zone_name
        self._record_names = tuple(record_names)

    async def run(self) -> RunResult:
        """
        Runs one reconciliation pass.

        Returns:
            A RunResult holding one UpdateOutcome per configured record.
            Individual update failures are recorded there, not raised; call
            RunResult.raise_for_failures() to treat them as a run failure.

        Raises:
            IpFetchError: If the public IP cannot be determined.
            ZoneNotFoundError: If the zone does not exist.
            RecordNotFoundError: If any record does not exist.
            DnsProviderError: If a lookup call fails.
        """
        started = time.monotonic()

        public_ip, zone = await fan_out(
            [
                self._ip_service.get_public_ip(),
                self._resolver.resolve_zone(self._zone_name),
            ]
        )
        logger.debug("Public IPv4 address: %s", public_ip)

        records = await self._resolver.resolve_records(zone.provider_id, self._record_names)
        outcomes = await self._dispatcher.dispatch(zone.provider_id, records, public_ip)

        result = RunResult(
            public_ip=public_ip,
            zone=zone,
            outcomes=outcomes,
            duration=time.monotonic() - started,
        )
        failed = len(result.failures)
        logger.info(
            "Reconciliation pass: %d record(s) updated to %s, %d failed.",
            len(outcomes) - failed,
            public_ip,
            failed,
        )
        return result
