"""
Main application entry point for PR Watcher.

This module configures logging, loads the configuration and runs the poll
scheduler until interrupted.
"""

import argparse
import asyncio
import logging
import signal
import sys

import structlog

from .config import DEFAULT_CONFIG_PATH, Settings, load_settings
from .exceptions import ConfigurationError
from .models import NewComments, NewCommits, NewPR, PRChange, StatusChanged
from .polling import PollScheduler

logger = structlog.get_logger(__name__)


def setup_logging(settings: Settings) -> None:
    """Configure structured logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level), format="%(message)s"
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if settings.log_format == "json"
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def describe_change(change: PRChange) -> str:
    """Render a change as a one-line summary."""
    pr = change.pull_request
    prefix = f"{change.repository}#{pr.number}"
    change_type = change.change_type

    if isinstance(change_type, NewPR):
        return f"{prefix} new PR by {pr.author}: {pr.title}"
    elif isinstance(change_type, NewCommits):
        return (
            f"{prefix} new commits {change_type.old_sha[:7]} -> "
            f"{change_type.new_sha[:7]}: {pr.title}"
        )
    elif isinstance(change_type, NewComments):
        return f"{prefix} {change_type.count} new comment(s): {pr.title}"
    elif isinstance(change_type, StatusChanged):
        return (
            f"{prefix} status {change_type.from_status} -> "
            f"{change_type.to_status}: {pr.title}"
        )
    return prefix


def log_changes(changes: list[PRChange]) -> None:
    """Default change handler: log each change in the batch."""
    for change in changes:
        logger.info(
            describe_change(change),
            repository=change.repository,
            pr_number=change.pull_request.number,
            url=change.pull_request.html_url,
        )


async def run(settings: Settings) -> None:
    """Run the scheduler until SIGINT or SIGTERM."""
    scheduler = PollScheduler.from_settings(settings)
    shutdown = asyncio.Event()

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, shutdown.set)

    scheduler.start(log_changes)
    try:
        await shutdown.wait()
    finally:
        logger.info("Shutting down")
        scheduler.stop()
        await scheduler.join()


async def run_once(settings: Settings) -> int:
    """Run a single poll cycle and print its changes."""
    scheduler = PollScheduler.from_settings(settings)
    result = await scheduler.poll_now()
    if result is None:
        return 1

    for change in result.delivered:
        print(describe_change(change))
    print(
        f"{len(result.repositories_polled)} repositories polled, "
        f"{len(result.failed_repositories)} failed, "
        f"{len(result.delivered)} changes"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Console entry point."""
    parser = argparse.ArgumentParser(
        description="Watch GitHub repositories for new pull requests and commits"
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the JSON config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Poll a single time and exit",
    )
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)

    if args.once:
        return asyncio.run(run_once(settings))

    asyncio.run(run(settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())
