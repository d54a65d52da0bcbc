"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application
and classifies each one as transient (worth retrying) or permanent.
Does NOT: contain business logic, logging, retry loops, or HTTP handling.
"""

from __future__ import annotations


class DdnsError(Exception):
    """
    Base class for every failure a reconciliation run can surface.

    Subclasses override is_transient(). The scheduler's retry loop is the
    only caller that inspects it.
    """

    def is_transient(self) -> bool:
        """
        Returns True if retrying the same run may succeed.

        Returns:
            False for the base class; subclasses decide.
        """
        return False


class IpFetchError(DdnsError):
    """
    Raised by IpService when the public IP address cannot be determined.

    This may occur due to network connectivity issues or an unexpected
    response from every upstream IP provider.
    """

    def is_transient(self) -> bool:
        return True


class DnsProviderError(DdnsError):
    """
    Raised by any DNSProvider implementation when a DNS API call fails.

    Covers transport errors, non-2xx responses, authentication failures,
    rate limiting and malformed response bodies.
    """

    def is_transient(self) -> bool:
        return True


class ZoneNotFoundError(DdnsError):
    """Raised when the provider account has no zone with the configured name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"zone not found: {name}")
        self.name = name


class RecordNotFoundError(DdnsError):
    """Raised when the zone has no A-record with the configured name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"DNS record not found: {name}")
        self.name = name


class ScheduleParseError(DdnsError):
    """
    Raised at daemon startup when the schedule string is malformed, or when a
    valid schedule has no upcoming fire time.
    """


class ConfigError(DdnsError):
    """
    Raised by Settings when the supplied options cannot describe a run
    (missing token, zone or records, negative TTL, etc.).
    """
