"""
Poll scheduler for PR Watcher.

Drives the polling orchestrator from a recurring timer and exposes the
control surface used by the application shell.
"""

import asyncio

import structlog

from ..config import Settings
from ..models import PollCycleResult
from .discovery import ClientFactory
from .orchestrator import ChangeHandler, PollingOrchestrator

logger = structlog.get_logger(__name__)


class PollScheduler:
    """
    Starts and stops periodic polling.

    ``start`` is idempotent while polling is active, so there is never more
    than one recurring timer. ``stop`` cancels only the timer; a cycle that
    is already running completes and still delivers its batch.
    """

    def __init__(self, orchestrator: PollingOrchestrator, interval_seconds: float):
        """
        Initialize the scheduler.

        Args:
            orchestrator: Runs individual poll cycles
            interval_seconds: Delay between recurring cycles
        """
        self.orchestrator = orchestrator
        self.interval_seconds = interval_seconds

        self._active = False
        self._handler: ChangeHandler | None = None
        self._tick_task: asyncio.Task[None] | None = None
        self._cycles: set[asyncio.Task[PollCycleResult | None]] = set()

    @classmethod
    def from_settings(
        cls, settings: Settings, client_factory: ClientFactory | None = None
    ) -> "PollScheduler":
        """Build a scheduler and orchestrator from settings."""
        orchestrator = PollingOrchestrator(settings, client_factory=client_factory)
        return cls(orchestrator, settings.poll_interval_seconds)

    @property
    def is_polling(self) -> bool:
        """Whether recurring polling is active."""
        return self._active

    def start(self, handler: ChangeHandler) -> None:
        """
        Start polling for PR updates.

        Must be called from a running event loop. Schedules the recurring
        tick and triggers one immediate cycle.

        Args:
            handler: Invoked with each non-empty change batch
        """
        if self._active:
            logger.warning("Polling already running")
            return

        self._active = True
        self._handler = handler
        self._tick_task = asyncio.create_task(self._tick_loop())

        logger.info("Starting poll scheduler", interval_seconds=self.interval_seconds)
        self._spawn_cycle()

    def stop(self) -> None:
        """Stop polling. Safe to call when not polling."""
        if self._tick_task is not None:
            self._tick_task.cancel()
            self._tick_task = None

        if self._active:
            logger.info("Stopping poll scheduler")

        self._active = False
        self._handler = None

    async def poll_now(self) -> PollCycleResult | None:
        """Run one poll cycle immediately, independent of the timer."""
        return await self._run_cycle(self._handler)

    def clear_state(self) -> None:
        """Wipe stored snapshots and the discovery cache."""
        self.orchestrator.clear_state()
        logger.info("Polling state cleared")

    async def join(self) -> None:
        """Wait for every in-flight timer-triggered cycle to finish."""
        while self._cycles:
            await asyncio.gather(*list(self._cycles))

    def _spawn_cycle(self) -> asyncio.Task[PollCycleResult | None]:
        task = asyncio.create_task(self._run_cycle(self._handler))
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)
        return task

    async def _tick_loop(self) -> None:
        """Recurring timer; a slow cycle delays the next tick instead of overlapping."""
        while True:
            await asyncio.sleep(self.interval_seconds)
            await asyncio.shield(self._spawn_cycle())

    async def _run_cycle(
        self, handler: ChangeHandler | None
    ) -> PollCycleResult | None:
        try:
            return await self.orchestrator.poll(handler)
        except Exception as e:
            logger.error("Error in polling cycle", error=str(e))
            return None
