"""Audit outbox.

Pipeline services record audit events synchronously into a bounded queue;
a background worker delivers them to the audit sink with retries. Audit
writes are fire-and-forget from the caller's point of view: a sink outage
never fails the operation that produced the event.

Events that exhaust their retries, or arrive while the queue is full, are
logged at error level and kept in ``dead_letters`` for inspection.
"""

from __future__ import annotations

import asyncio
from typing import Any
from uuid import UUID

from src.application.ports.audit_sink import AuditQuery, AuditSinkProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.base import LoggingMixin
from src.domain.models.audit_event import ActorKind, AuditEvent, AuditEventType

DEFAULT_QUEUE_SIZE = 1000
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 0.05


class AuditOutbox(LoggingMixin):
    """Bounded, retrying outbox in front of the audit sink.

    Attributes:
        _sink: Destination for audit events.
        _time_authority: Clock used to stamp events.
        _queue: Pending events.
        _worker: Background delivery task, once started.
    """

    def __init__(
        self,
        sink: AuditSinkProtocol,
        time_authority: TimeAuthorityProtocol,
        max_queue_size: int = DEFAULT_QUEUE_SIZE,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")
        self._sink = sink
        self._time_authority = time_authority
        self._queue: asyncio.Queue[AuditEvent] = asyncio.Queue(maxsize=max_queue_size)
        self._max_attempts = max_attempts
        self._retry_delay_seconds = retry_delay_seconds
        self._worker: asyncio.Task[None] | None = None
        self._dead_letters: list[AuditEvent] = []
        self._init_logger(component="audit")

    @property
    def pending(self) -> int:
        """Events waiting for delivery."""
        return self._queue.qsize()

    @property
    def dead_letters(self) -> list[AuditEvent]:
        """Events that could not be delivered."""
        return list(self._dead_letters)

    def record(
        self,
        event_type: AuditEventType,
        actor_kind: ActorKind,
        subject_type: str,
        subject_id: UUID | str,
        actor_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditEvent:
        """Stamp and enqueue an audit event. Never raises on a full queue.

        Returns:
            The event that was enqueued (or dead-lettered).
        """
        event = AuditEvent.create(
            event_type=event_type,
            actor_kind=actor_kind,
            subject_type=subject_type,
            subject_id=subject_id,
            created_at=self._time_authority.now(),
            actor_id=actor_id,
            details=details,
        )
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self._dead_letters.append(event)
            self._log.error(
                "audit_event_dropped",
                reason="queue_full",
                event_id=str(event.id),
                event_type=event.event_type.value,
            )
        return event

    def start(self) -> None:
        """Start the background delivery worker."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run())
            self._log.info("audit_outbox_started")

    async def stop(self) -> None:
        """Deliver everything pending, then stop the worker."""
        await self.flush()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
            self._log.info("audit_outbox_stopped")

    async def flush(self) -> None:
        """Wait until every queued event has been delivered or dead-lettered."""
        if self._worker is not None and not self._worker.done():
            await self._queue.join()
            return
        while not self._queue.empty():
            event = self._queue.get_nowait()
            try:
                await self._deliver(event)
            finally:
                self._queue.task_done()

    async def query(self, query: AuditQuery) -> tuple[list[AuditEvent], int]:
        """Read the audit trail, newest first, after flushing pending events."""
        await self.flush()
        return await self._sink.query(query)

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._deliver(event)
            finally:
                self._queue.task_done()

    async def _deliver(self, event: AuditEvent) -> None:
        log = self._log_operation(
            "deliver",
            event_id=str(event.id),
            event_type=event.event_type.value,
        )
        for attempt in range(1, self._max_attempts + 1):
            try:
                await self._sink.append(event)
                return
            except Exception as exc:
                log.warning(
                    "audit_append_failed",
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    error=str(exc),
                )
                if attempt < self._max_attempts:
                    await asyncio.sleep(self._retry_delay_seconds * attempt)
        self._dead_letters.append(event)
        log.error("audit_event_dropped", reason="retries_exhausted")
