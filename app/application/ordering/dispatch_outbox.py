"""
Outbox dispatcher: relays staged domain events to the outside world.

Reads unpublished outbox records in staging order, delivers each one
through the EventPublisher port and marks a record published only after
its delivery was confirmed. Delivery stops at the first failure so that
later events are never relayed ahead of an earlier one.

Runs periodically as an asyncio task started from the application lifespan:

    dispatcher.start()        # begin polling
    await dispatcher.stop()   # graceful shutdown
    await dispatcher.dispatch_once()  # single pass, e.g. from tests
"""

import asyncio
import contextlib
import logging
from typing import Optional

from app.application.ordering.dtos import DispatchOutboxResult
from app.domain.ordering.errors import EventPublicationError
from app.domain.ordering.ports import Clock, EventPublisher, OutboxStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100
DEFAULT_INTERVAL_SECONDS = 5.0


class OutboxDispatcher:
    """Polls the outbox and forwards events with at-least-once semantics."""

    def __init__(
        self,
        outbox: OutboxStore,
        publisher: EventPublisher,
        clock: Clock,
        batch_size: int = DEFAULT_BATCH_SIZE,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        self._outbox = outbox
        self._publisher = publisher
        self._clock = clock
        self._batch_size = batch_size
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def dispatch_once(self) -> DispatchOutboxResult:
        """Deliver one batch of pending events.

        Returns:
            Counts of delivered and failed records for this pass.
        """
        records = await self._outbox.fetch_unpublished(self._batch_size)
        if not records:
            return DispatchOutboxResult(delivered=0)

        delivered: list[str] = []
        failed: list[str] = []
        for record in records:
            try:
                await self._publisher.deliver(record)
            except EventPublicationError as exc:
                logger.error(
                    "Delivery of event %s (%s) failed: %s",
                    record.id,
                    record.type,
                    exc.message,
                )
                failed.append(record.id)
                break
            delivered.append(record.id)

        if delivered:
            await self._outbox.mark_published(delivered, self._clock.now())
            logger.info("Relayed %d outbox event(s).", len(delivered))

        return DispatchOutboxResult(
            delivered=len(delivered),
            failed=len(failed),
            failed_event_ids=failed,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start polling in the running event loop."""
        if self.is_running:
            logger.warning("Outbox dispatcher already running.")
            return
        self._task = asyncio.create_task(self._run(), name="outbox-dispatcher")
        logger.info("Outbox dispatcher started (interval=%.1fs).", self._interval)

    async def stop(self) -> None:
        """Cancel the polling task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Outbox dispatcher stopped.")

    async def _run(self) -> None:
        while True:
            try:
                await self.dispatch_once()
            except Exception:
                logger.exception("Outbox dispatch pass failed.")
            await asyncio.sleep(self._interval)
