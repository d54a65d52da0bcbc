"""
scheduler.py

Responsibility: Parses the schedule string into an APScheduler trigger, wraps
a reconciliation run in the bounded retry policy, and drives repeated runs in
daemon mode.
Does NOT: contain DNS business logic, option parsing, or HTTP calls directly
(those are delegated entirely to DnsService and its collaborators).
"""

from __future__ import annotations

import asyncio
import logging
import random
import re
import time
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from exceptions import DdnsError, ScheduleParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Sub-second so clock corrections and stop requests are noticed promptly
_POLL_INTERVAL = 0.5

_INTERVAL_RE = re.compile(r"^(?:@every\s+)?(\d+(?:\.\d+)?)\s*([smhd]?)$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}

_ALIASES = {
    "@hourly": "0 0 * * * *",
    "@daily": "0 0 0 * * *",
    "@midnight": "0 0 0 * * *",
    "@weekly": "0 0 0 * * sun",
}

# Field order of each accepted cron shape
_CRON_FIELDS = {
    5: ("minute", "hour", "day", "month", "day_of_week"),
    6: ("second", "minute", "hour", "day", "month", "day_of_week"),
    7: ("second", "minute", "hour", "day", "month", "day_of_week", "year"),
}

# One comma-separated part of a numeric day-of-week field: "*", "n" or "a-b", optional "/step"
_WEEKDAY_PART_RE = re.compile(r"^(\*|\d+(?:-\d+)?)(?:/(\d+))?$")


# ---------------------------------------------------------------------------
# Schedule parsing
# ---------------------------------------------------------------------------


def parse_schedule(text: str) -> BaseTrigger:
    """
    Converts a schedule string into an APScheduler trigger (UTC).

    Accepted forms:
        - fixed interval: "@every 5m", "300s", "5m", "1h", "1d", "300"
        - cron with 5 fields: minute hour day month day_of_week (numeric
          weekdays use crontab numbering, 0 or 7 = Sunday)
        - cron with 6 fields: second first
        - cron with 7 fields: second first, year last ("0 */5 * * * * *")
        - aliases: @hourly, @daily, @midnight, @weekly

    Args:
        text: Cron expression or interval string.

    Returns:
        An IntervalTrigger or CronTrigger with at least one upcoming fire time.

    Raises:
        ScheduleParseError: If the string is malformed or never fires.
    """
    expr = " ".join((text or "").split())
    expr = _ALIASES.get(expr.lower(), expr)
    if not expr:
        raise ScheduleParseError("empty schedule")

    trigger: BaseTrigger
    match = _INTERVAL_RE.match(expr)
    if match:
        seconds = float(match.group(1)) * _UNIT_SECONDS[match.group(2).lower()]
        if seconds <= 0:
            raise ScheduleParseError(f"interval must be positive: {text!r}")
        trigger = IntervalTrigger(seconds=seconds, timezone=timezone.utc)
    else:
        fields = expr.split(" ")
        names = _CRON_FIELDS.get(len(fields))
        if names is None:
            raise ScheduleParseError(
                f"cron schedule needs 5, 6 or 7 fields, got {len(fields)}: {text!r}"
            )
        values = dict(zip(names, fields))
        values["day_of_week"] = _crontab_weekdays(values["day_of_week"])
        try:
            trigger = CronTrigger(timezone=timezone.utc, **values)
        except ValueError as exc:
            raise ScheduleParseError(f"invalid cron schedule {text!r}: {exc}") from exc

    if trigger.get_next_fire_time(None, datetime.now(timezone.utc)) is None:
        raise ScheduleParseError(f"schedule {text!r} has no upcoming fire time")
    return trigger


def _crontab_weekdays(field: str) -> str:
    """
    Rewrites a numeric crontab day-of-week field in APScheduler numbering.

    Crontab counts 0 (or 7) = Sunday, 1 = Monday; APScheduler counts
    0 = Monday, 6 = Sunday. Numeric parts are expanded to an explicit list so
    ranges and steps keep their crontab meaning. Fields without digits
    ("*", "mon-fri", "sun") mean the same in both dialects and pass through.

    Raises:
        ScheduleParseError: If a part is out of range or mixes names and numbers.
    """
    if not any(ch.isdigit() for ch in field):
        return field

    days: set[int] = set()
    for part in field.split(","):
        match = _WEEKDAY_PART_RE.match(part)
        if match is None:
            raise ScheduleParseError(f"invalid day-of-week {part!r} in {field!r}")
        base, step = match.group(1), int(match.group(2) or 1)
        if base == "*":
            first, last = 0, 6
        elif "-" in base:
            first, last = (int(v) for v in base.split("-"))
        else:
            first = int(base)
            last = 6 if match.group(2) else first
        if step < 1 or not 0 <= first <= last <= 7:
            raise ScheduleParseError(f"invalid day-of-week {part!r} in {field!r}")
        days.update(day % 7 for day in range(first, last + 1, step))

    return ",".join(str(day) for day in sorted((day - 1) % 7 for day in days))


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff with random jitter for transient run failures.

    The n-th retry (n from 0) waits base_delay * factor**n scaled by a random
    factor in [1, 1 + jitter]. With factor > 1 + jitter every wait is longer
    than the one before it.
    """

    max_retries: int = 3
    base_delay: float = 0.01
    factor: float = 10.0
    jitter: float = 0.5

    def delays(self, rng: random.Random | None = None) -> Iterator[float]:
        """Yields the wait before each retry, max_retries values in total."""
        source = rng or random
        for n in range(self.max_retries):
            yield self.base_delay * self.factor**n * (1 + source.uniform(0, self.jitter))


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """
    Awaits `operation()`, retrying transient DdnsErrors per `policy`.

    Args:
        operation: Starts one complete run each time it is called.
        policy: Bounds the number of retries and the waits between them.
        sleep: Awaitable sleep, injectable for tests.

    Returns:
        Whatever the first successful attempt returned.

    Raises:
        DdnsError: A permanent error immediately, or the last transient
                   error once the retry budget is spent.
    """
    delays = policy.delays()
    attempt = 1
    while True:
        try:
            return await operation()
        except DdnsError as exc:
            if not exc.is_transient():
                logger.debug("Permanent failure on attempt %d, not retrying.", attempt)
                raise
            delay = next(delays, None)
            if delay is None:
                logger.error("Giving up after %d attempt(s): %s", attempt, exc)
                raise
            logger.warning("Attempt %d failed: %s; retrying in %.3fs.", attempt, exc, delay)
            await sleep(delay)
            attempt += 1


# ---------------------------------------------------------------------------
# Daemon loop
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Daemon:
    """
    Runs reconciliation passes forever on a schedule.

    Runs are strictly sequential: the next fire time is computed only after
    the current run and all its retries have finished, so fire times missed
    during a long run are skipped rather than queued. The loop ends only by
    raising (permanent error, exhausted retries, exhausted schedule) or when
    the optional stop_event is set between runs.

    Collaborators:
        - run_once: one reconciliation pass; raises DdnsError on failure
        - BaseTrigger: APScheduler trigger from parse_schedule()
        - RetryPolicy: bounds retries of transient failures
    """

    def __init__(
        self,
        run_once: Callable[[], Awaitable[Any]],
        trigger: BaseTrigger,
        retry_policy: RetryPolicy | None = None,
        *,
        poll_interval: float = _POLL_INTERVAL,
        now: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        stop_event: asyncio.Event | None = None,
        run_on_start: bool = False,
    ) -> None:
        """
        Initialises the daemon.

        Args:
            run_once: Callable starting one reconciliation pass.
            trigger: Decides when passes fire.
            retry_policy: Retry bounds; defaults to RetryPolicy().
            poll_interval: Longest single sleep while waiting for a fire time.
            now: Returns the current aware UTC datetime, injectable for tests.
            sleep: Awaitable sleep, injectable for tests.
            stop_event: When set, the loop returns before the next pass.
            run_on_start: Run once immediately before following the schedule.
        """
        self._run_once = run_once
        self._trigger = trigger
        self._policy = retry_policy or RetryPolicy()
        self._poll_interval = poll_interval
        self._now = now
        self._sleep = sleep
        self._stop_event = stop_event
        self._run_on_start = run_on_start
        self.runs = 0

    async def serve_forever(self) -> None:
        """
        Waits for each fire time and runs a pass with retry, indefinitely.

        Returns:
            None, only after stop_event has been set.

        Raises:
            DdnsError: Whatever ended the last run with retry.
            ScheduleParseError: If the trigger has no further fire times.
        """
        previous: datetime | None = None
        immediate = self._run_on_start

        while not self._stopped():
            if immediate:
                immediate = False
                fire_time = self._now()
            else:
                fire_time = self._next_fire_time(previous)
                logger.info("Update DNS records at %s", fire_time.isoformat())
                if not await self._wait_until(fire_time):
                    break

            started = time.monotonic()
            await run_with_retry(self._run_once, self._policy, sleep=self._sleep)
            self.runs += 1
            logger.info("Done in %dms", (time.monotonic() - started) * 1000)
            previous = fire_time

        logger.info("Daemon stopped.")

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    def _stopped(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    def _next_fire_time(self, previous: datetime | None) -> datetime:
        reference = self._now()
        # Never hand back the fire time that was just served.
        if previous is not None and reference <= previous:
            reference = previous + timedelta(microseconds=1)

        fire_time = self._trigger.get_next_fire_time(None, reference)
        if fire_time is None:
            raise ScheduleParseError("schedule has no further fire times")
        return fire_time

    async def _wait_until(self, fire_time: datetime) -> bool:
        """Sleeps in poll_interval steps; returns False if stopped first."""
        while True:
            if self._stopped():
                return False
            remaining = (fire_time - self._now()).total_seconds()
            if remaining <= 0:
                return True
            await self._sleep(min(self._poll_interval, remaining))
