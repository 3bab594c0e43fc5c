"""Unit tests for AuditOutbox."""

from __future__ import annotations

import pytest

from src.application.ports.audit_sink import MAX_AUDIT_PAGE_SIZE, AuditQuery
from src.application.services.audit_outbox import AuditOutbox
from src.domain.models.audit_event import ActorKind, AuditEventType
from src.infrastructure.stubs import AuditSinkStub
from tests.helpers import FakeTimeAuthority


def _record(outbox: AuditOutbox, subject_id: str = "s-1") -> None:
    outbox.record(
        AuditEventType.SUBMISSION_CREATED,
        ActorKind.HUMAN,
        subject_type="submission",
        subject_id=subject_id,
        actor_id="user-1",
    )


class TestDelivery:
    """Tests for record() and flush()."""

    @pytest.mark.asyncio
    async def test_record_then_flush(
        self, outbox: AuditOutbox, audit_sink: AuditSinkStub, fake_time: FakeTimeAuthority
    ) -> None:
        _record(outbox)
        assert outbox.pending == 1

        await outbox.flush()

        assert outbox.pending == 0
        assert len(audit_sink.events) == 1
        event = audit_sink.events[0]
        assert event.created_at == fake_time.now()
        assert event.actor_id == "user-1"

    @pytest.mark.asyncio
    async def test_retry_then_succeed(
        self, outbox: AuditOutbox, audit_sink: AuditSinkStub
    ) -> None:
        audit_sink.fail_next(2)
        _record(outbox)

        await outbox.flush()

        assert audit_sink.append_attempts == 3
        assert len(audit_sink.events) == 1
        assert outbox.dead_letters == []

    @pytest.mark.asyncio
    async def test_dead_letter_after_retries(
        self, outbox: AuditOutbox, audit_sink: AuditSinkStub
    ) -> None:
        """A sink outage never raises into the caller."""
        audit_sink.fail_next(3)
        _record(outbox)

        await outbox.flush()

        assert audit_sink.events == []
        assert len(outbox.dead_letters) == 1

    def test_full_queue_dead_letters(
        self, audit_sink: AuditSinkStub, fake_time: FakeTimeAuthority
    ) -> None:
        outbox = AuditOutbox(audit_sink, fake_time, max_queue_size=1)

        _record(outbox, "first")
        _record(outbox, "second")

        assert outbox.pending == 1
        assert [e.subject_id for e in outbox.dead_letters] == ["second"]

    def test_invalid_attempts(
        self, audit_sink: AuditSinkStub, fake_time: FakeTimeAuthority
    ) -> None:
        with pytest.raises(ValueError):
            AuditOutbox(audit_sink, fake_time, max_attempts=0)


class TestWorker:
    """Tests for the background worker."""

    @pytest.mark.asyncio
    async def test_worker_delivers(
        self, audit_sink: AuditSinkStub, fake_time: FakeTimeAuthority
    ) -> None:
        outbox = AuditOutbox(audit_sink, fake_time, retry_delay_seconds=0)
        outbox.start()
        try:
            _record(outbox, "a")
            _record(outbox, "b")
            await outbox.flush()
        finally:
            await outbox.stop()

        assert [e.subject_id for e in audit_sink.events] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_stop_drains_queue(
        self, audit_sink: AuditSinkStub, fake_time: FakeTimeAuthority
    ) -> None:
        outbox = AuditOutbox(audit_sink, fake_time, retry_delay_seconds=0)
        outbox.start()
        _record(outbox)

        await outbox.stop()

        assert len(audit_sink.events) == 1
        assert outbox.pending == 0


class TestQuery:
    """Tests for query()."""

    @pytest.mark.asyncio
    async def test_query_flushes_first(
        self, outbox: AuditOutbox, audit_sink: AuditSinkStub
    ) -> None:
        _record(outbox)
        outbox.record(
            AuditEventType.VOTE_CAST,
            ActorKind.AI,
            subject_type="voting_session",
            subject_id="v-1",
        )

        events, total = await outbox.query(AuditQuery(actor_kind=ActorKind.AI))

        assert total == 1
        assert events[0].event_type == AuditEventType.VOTE_CAST
        assert len(audit_sink.events) == 2

    def test_page_size_capped(self) -> None:
        query = AuditQuery(limit=10_000)

        assert query.limit == MAX_AUDIT_PAGE_SIZE
