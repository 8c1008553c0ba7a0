"""Background delivery of outbox events.

Each run pages through pending events oldest first, hands every payload to
the channel and marks it delivered on success. A failed publish is logged and
left pending for the next run. Delivery is at-least-once: a crash between a
successful publish and ``mark_delivered`` republishes the event next time,
so consumers must be idempotent.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session

from .channels import MessageChannel
from .outbox import EventOutbox, OutboxCursor


logger = logging.getLogger(__name__)


@dataclass
class PublishReport:
    pages: int = 0
    published: int = 0
    failed: int = 0
    skipped: bool = False


class OutboxPublisher:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        channel: MessageChannel,
        *,
        page_size: int = 100,
        interval_seconds: float = 5.0,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.session_factory = session_factory
        self.channel = channel
        self.page_size = page_size
        self.interval_seconds = interval_seconds

        self._run_lock = threading.Lock()
        self._task: Optional[asyncio.Task] = None
        self._stopping: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> PublishReport:
        """Drain every event pending at call time. Never overlaps itself."""
        if not self._run_lock.acquire(blocking=False):
            logger.debug("outbox.publish.skipped")
            return PublishReport(skipped=True)
        try:
            with self.session_factory() as session:
                return self._drain(EventOutbox(session))
        finally:
            self._run_lock.release()

    def _drain(self, outbox: EventOutbox) -> PublishReport:
        report = PublishReport()
        cursor: Optional[OutboxCursor] = None

        while True:
            page = outbox.page_undelivered(self.page_size, after=cursor)
            report.pages += 1
            if page:
                cursor = OutboxCursor.after(page[-1])

            for event in page:
                if self._publish(event.id, event.payload, event.kind.value):
                    outbox.mark_delivered(event.id)
                    report.published += 1
                else:
                    report.failed += 1

            if len(page) < self.page_size:
                break

        if report.published or report.failed:
            logger.info(
                "outbox.publish.finished",
                extra={
                    "pages": report.pages,
                    "published": report.published,
                    "failed": report.failed,
                },
            )
        return report

    def _publish(self, event_id: int, payload: str, kind: str) -> bool:
        try:
            delivered = self.channel.publish(payload, kind=kind)
        except Exception:
            # Any channel error leaves the event pending for the next run.
            logger.exception("outbox.publish.failed", extra={"event_id": event_id})
            return False
        if not delivered:
            logger.error("outbox.publish.failed", extra={"event_id": event_id})
        return delivered

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self) -> None:
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._loop(), name="outbox-publisher")
        logger.info(
            "outbox.publisher.started",
            extra={"interval_seconds": self.interval_seconds, "page_size": self.page_size},
        )

    async def stop(self) -> None:
        """Stop the loop, letting a run already in progress finish first."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None
        logger.info("outbox.publisher.stopped")

    async def _loop(self) -> None:
        # Fixed delay between runs: the next run starts only after this one ends.
        while not self._stopping.is_set():
            try:
                await asyncio.to_thread(self.run_once)
            except Exception:
                logger.exception("outbox.publisher.run_failed")
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
