"""
cli.py

Responsibility: Command-line entry point. Reads options (flags or environment
variables), configures logging, and runs one reconciliation pass or the
daemon loop, mapping the outcome to the process exit status.
Does NOT: contain DNS business logic, retry classification, or HTTP calls.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

import click

from config import DEFAULTS, Settings
from dependencies import get_dns_service, get_http_client, get_identifier_cache
from exceptions import ConfigError, DdnsError
from logger import configure_logging
from scheduler import Daemon, RetryPolicy, parse_schedule
from services.models import RunResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


async def serve(settings: Settings, stop_event: asyncio.Event | None = None) -> int:
    """
    Runs once (single-shot) or forever (daemon) and returns an exit status.

    The HTTP client and the identifier cache are created here once and
    shared by every run of the process.

    Args:
        settings: Validated settings.
        stop_event: Daemon mode only; when set, the loop ends between runs.

    Returns:
        EXIT_OK after a successful single-shot run. In daemon mode only a
        stop request returns (with 128 + signal number, or EXIT_FAILURE
        when no signal was recorded).

    Raises:
        DdnsError: Any failure that ends the run or the daemon.
    """
    # Parse before touching the network; a bad schedule is fatal at startup.
    trigger = parse_schedule(settings.schedule) if settings.daemon else None

    async with get_http_client(settings) as http_client:
        service = get_dns_service(settings, http_client, get_identifier_cache(settings))

        async def run_once() -> RunResult:
            result = await service.run()
            result.raise_for_failures()
            return result

        if trigger is None:
            await run_once()
            return EXIT_OK

        stop_event = stop_event or asyncio.Event()
        received = _install_signal_handlers(stop_event)
        daemon = Daemon(
            run_once,
            trigger,
            RetryPolicy(),
            stop_event=stop_event,
            run_on_start=settings.run_on_start,
        )
        await daemon.serve_forever()
        return 128 + received[0] if received else EXIT_FAILURE


def _install_signal_handlers(stop_event: asyncio.Event) -> list[int]:
    """
    Sets `stop_event` on SIGINT/SIGTERM and records which signal arrived.

    Platforms without loop signal support keep the default handlers.
    """
    received: list[int] = []
    loop = asyncio.get_running_loop()

    def _handle(signum: int) -> None:
        logger.info("Received signal %d, stopping after the current run.", signum)
        received.append(signum)
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _handle, int(sig))
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handlers unavailable for %s.", sig.name)
    return received


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-t", "--token", envvar="CLOUDFLARE_TOKEN", required=True, help="Cloudflare API token.")
@click.option("-z", "--zone", envvar="CLOUDFLARE_ZONE", required=True, help="Cloudflare zone name, e.g. example.com.")
@click.option(
    "-r",
    "--records",
    envvar="CLOUDFLARE_RECORDS",
    required=True,
    help="Record names separated with commas, e.g. a.example.com,b.example.com.",
)
@click.option("-d", "--daemon", is_flag=True, envvar="DAEMON", default=DEFAULTS["daemon"], help="Run forever on the schedule.")
@click.option(
    "-c",
    "--cron",
    "schedule",
    envvar="CRON",
    default=DEFAULTS["schedule"],
    show_default=True,
    help="Cron expression (5, 6 or 7 fields; weekday 0 or 7 = Sunday) or interval such as '@every 5m'. Daemon mode only.",
)
@click.option(
    "--cache-ttl",
    envvar="CACHE_TTL",
    type=click.FloatRange(min=0),
    default=DEFAULTS["cache_ttl"],
    show_default=True,
    help="Seconds to cache zone and record identifiers; 0 disables caching.",
)
@click.option(
    "--http-timeout",
    envvar="HTTP_TIMEOUT",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULTS["http_timeout"],
    show_default=True,
    help="Timeout in seconds for each network call.",
)
@click.option(
    "--run-on-start",
    is_flag=True,
    envvar="RUN_ON_START",
    default=DEFAULTS["run_on_start"],
    help="Daemon mode: run once immediately instead of waiting for the first tick.",
)
@click.option("--debug", is_flag=True, envvar="DEBUG", default=DEFAULTS["debug"], help="Debug logging.")
def main(
    token: str,
    zone: str,
    records: str,
    daemon: bool,
    schedule: str,
    cache_ttl: float,
    http_timeout: float,
    run_on_start: bool,
    debug: bool,
) -> None:
    """Keep Cloudflare A-records pointed at this host's public IPv4 address."""
    configure_logging(debug)

    try:
        settings = Settings.build(
            token,
            zone,
            records,
            daemon=daemon,
            schedule=schedule,
            cache_ttl=cache_ttl,
            http_timeout=http_timeout,
            run_on_start=run_on_start,
            debug=debug,
        )
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc

    try:
        status = asyncio.run(serve(settings))
    except DdnsError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        sys.exit(EXIT_FAILURE)
    sys.exit(status)


if __name__ == "__main__":
    main()
