"""Revision proposal workflow.

Edits to published entries go through:
    propose -> screening -> discussion (fixed window) -> voting -> apply | reject

Screening uses the stricter revision threshold. Approved revisions are
applied with a pre-change version snapshot in one atomic write. Each
rejection extends the proposer's cooldown on that entry, escalating once
the rejection count reaches the configured level.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

from src.application.ports.entry_repository import EntryRepositoryProtocol
from src.application.ports.panel_evaluator import PanelEvaluatorProtocol
from src.application.ports.revision_repository import RevisionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.audit_outbox import AuditOutbox
from src.application.services.base import LoggingMixin
from src.application.services.compliance_scorer import (
    DEFAULT_CALL_TIMEOUT_SECONDS,
    ComplianceScorer,
)
from src.application.services.consensus_engine import ConsensusEngine
from src.config.governance_config import DEFAULT_REVISION_CONFIG, RevisionConfig
from src.domain.errors.compliance import ComplianceError
from src.domain.errors.evaluator import (
    EvaluatorResponseError,
    EvaluatorUnavailableError,
)
from src.domain.errors.placement import EntryNotFoundError
from src.domain.errors.revision import (
    DiscussionWindowOpenError,
    InvalidRevisionError,
    InvalidRevisionStateError,
    RevisionCooldownActiveError,
    RevisionNotApprovedError,
    RevisionNotFoundError,
)
from src.domain.models.audit_event import ActorKind, AuditEventType
from src.domain.models.compliance import CheckType
from src.domain.models.published_entry import ChangeType, EntryVersion, PublishedEntry
from src.domain.models.revision_proposal import (
    CooldownRecord,
    CouncilMember,
    DiscussionAuthorKind,
    DiscussionEntry,
    RevisionProposal,
    RevisionStatus,
    RevisionSynthesis,
)
from src.domain.models.voting_session import SessionStatus, SubjectType, VotingSession

# Statuses a proposer may withdraw from
WITHDRAWABLE_STATUSES: tuple[RevisionStatus, ...] = (
    RevisionStatus.PROPOSED,
    RevisionStatus.DISCUSSION,
)


class RevisionWorkflowService(LoggingMixin):
    """Service for the revision proposal lifecycle.

    Attributes:
        _revisions: Proposal, cooldown and discussion storage.
        _entries: Published entries and version history.
        _scorer: Compliance scorer for revision screening.
        _engine: Consensus engine for revision votes.
        _evaluator: Council analyses and synthesis.
        _audit: Audit outbox.
        _time: Time authority.
        _config: Discussion window and cooldown settings.
    """

    def __init__(
        self,
        revisions: RevisionRepositoryProtocol,
        entries: EntryRepositoryProtocol,
        scorer: ComplianceScorer,
        engine: ConsensusEngine,
        evaluator: PanelEvaluatorProtocol,
        audit: AuditOutbox,
        time_authority: TimeAuthorityProtocol,
        config: RevisionConfig = DEFAULT_REVISION_CONFIG,
        call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS,
    ) -> None:
        self._revisions = revisions
        self._entries = entries
        self._scorer = scorer
        self._engine = engine
        self._evaluator = evaluator
        self._audit = audit
        self._time = time_authority
        self._config = config
        self._call_timeout_seconds = call_timeout_seconds
        self._init_logger(component="revision")

    async def get(self, proposal_id: UUID) -> RevisionProposal:
        """Fetch a proposal.

        Raises:
            RevisionNotFoundError: Unknown proposal.
        """
        proposal = await self._revisions.get(proposal_id)
        if proposal is None:
            raise RevisionNotFoundError(proposal_id)
        return proposal

    async def propose(
        self,
        entry_id: str,
        proposer_id: str,
        proposed_text: str,
        rationale: str,
    ) -> RevisionProposal:
        """Propose a revision and screen it immediately.

        Returns:
            The proposal after screening: in discussion, rejected, or still
            proposed when screening could not run.

        Raises:
            InvalidRevisionError: Empty or unchanged text, or empty rationale.
            EntryNotFoundError: Unknown entry.
            RevisionCooldownActiveError: Proposer is cooling down on the entry.
        """
        log = self._log_operation("propose", entry_id=entry_id, proposer_id=proposer_id)

        if not proposed_text.strip():
            raise InvalidRevisionError("proposed_text", "must not be empty")
        if not rationale.strip():
            raise InvalidRevisionError("rationale", "must not be empty")

        entry = await self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        if proposed_text.strip() == entry.text_ko.strip():
            raise InvalidRevisionError("proposed_text", "identical to the current text")

        now = self._time.now()
        cooldown = await self._revisions.get_cooldown(entry_id, proposer_id)
        if cooldown is not None and cooldown.is_active_at(now):
            log.info("revision_in_cooldown", cooldown_until=cooldown.cooldown_until.isoformat())
            raise RevisionCooldownActiveError(entry_id, proposer_id, cooldown.cooldown_until)

        proposal = RevisionProposal.create(
            entry_id=entry_id,
            proposer_id=proposer_id,
            original_text=entry.text_ko,
            proposed_text=proposed_text,
            rationale=rationale,
            created_at=now,
        )
        await self._revisions.save(proposal)
        self._audit.record(
            AuditEventType.REVISION_PROPOSED,
            ActorKind.HUMAN,
            subject_type="revision",
            subject_id=proposal.id,
            actor_id=proposer_id,
            details={"entry_id": entry_id, "entry_version": entry.version},
        )
        log.info("revision_proposed", proposal_id=str(proposal.id))

        try:
            return await self.screen(proposal.id)
        except ComplianceError as exc:
            log.warning("revision_screening_deferred", error=str(exc))
            return await self.get(proposal.id)

    async def screen(self, proposal_id: UUID) -> RevisionProposal:
        """Screen a proposed revision against the revision threshold.

        Compliant proposals enter discussion and the council is asked for
        analyses; others are rejected.

        Raises:
            InvalidRevisionStateError: Proposal is not in proposed status.
            NoActivePrinciplesError: Status is restored to proposed.
        """
        log = self._log_operation("screen", proposal_id=str(proposal_id))
        proposal = await self.get(proposal_id)
        if proposal.status != RevisionStatus.PROPOSED:
            raise InvalidRevisionStateError(proposal_id, proposal.status, operation="screen")

        proposal = proposal.with_status(RevisionStatus.SCREENING, self._time.now())
        await self._revisions.update(proposal)

        try:
            result = await self._scorer.check(
                proposal.proposed_text, CheckType.REVISION, subject_id=proposal.id
            )
        except Exception:
            await self._revisions.update(
                proposal.with_status(RevisionStatus.PROPOSED, self._time.now())
            )
            log.error("revision_screening_failed")
            raise

        if not result.compliant:
            await self._revisions.update(
                proposal.with_status(
                    proposal.status,
                    self._time.now(),
                    compliance_score=result.overall_score,
                )
            )
            log.info("revision_screening_rejected", overall_score=result.overall_score)
            return await self.reject(proposal_id, reason=result.recommendation)

        now = self._time.now()
        proposal = proposal.with_status(
            RevisionStatus.DISCUSSION,
            now,
            compliance_score=result.overall_score,
            discussion_ends_at=now + self._config.discussion_window,
        )
        await self._revisions.update(proposal)
        log.info(
            "revision_discussion_opened",
            overall_score=result.overall_score,
            discussion_ends_at=proposal.discussion_ends_at.isoformat(),
        )
        await self.start_discussion(proposal_id)
        return await self.get(proposal_id)

    async def start_discussion(self, proposal_id: UUID) -> list[DiscussionEntry]:
        """Ask every active council member for an analysis, concurrently.

        Failed analyses are logged and skipped.

        Returns:
            The analyses that were written.
        """
        log = self._log_operation("start_discussion", proposal_id=str(proposal_id))
        proposal = await self._require_status(
            proposal_id, RevisionStatus.DISCUSSION, "start discussion on"
        )

        members = await self._revisions.list_active_council_members()
        analyses = await asyncio.gather(
            *(self._member_analysis(member, proposal) for member in members)
        )
        written = [entry for entry in analyses if entry is not None]

        self._audit.record(
            AuditEventType.DISCUSSION_CREATED,
            ActorKind.AI,
            subject_type="revision",
            subject_id=proposal_id,
            details={
                "council_members": len(members),
                "analyses_written": len(written),
                "discussion_ends_at": proposal.discussion_ends_at.isoformat()
                if proposal.discussion_ends_at
                else None,
            },
        )
        log.info(
            "discussion_started",
            council_members=len(members),
            analyses_written=len(written),
        )
        return written

    async def add_comment(
        self, proposal_id: UUID, author_id: str, content: str
    ) -> DiscussionEntry:
        """Add a human comment to an open discussion.

        Raises:
            InvalidRevisionError: Empty content.
            InvalidRevisionStateError: Proposal is not in discussion.
        """
        if not content.strip():
            raise InvalidRevisionError("content", "must not be empty")
        await self._require_status(proposal_id, RevisionStatus.DISCUSSION, "comment on")
        entry = DiscussionEntry.create(
            proposal_id=proposal_id,
            author_kind=DiscussionAuthorKind.HUMAN,
            author_id=author_id,
            content=content,
            created_at=self._time.now(),
        )
        await self._revisions.add_discussion_entry(entry)
        return entry

    async def ai_analysis(self, proposal_id: UUID) -> RevisionSynthesis:
        """Synthesize the proposal and its discussion into a recommendation.

        Malformed evaluator output is kept verbatim in a conditional
        synthesis. The synthesis is stored as an AI discussion entry.

        Raises:
            InvalidRevisionStateError: Proposal is not in discussion.
            EvaluatorUnavailableError: The evaluator could not be reached.
        """
        log = self._log_operation("ai_analysis", proposal_id=str(proposal_id))
        proposal = await self._require_status(
            proposal_id, RevisionStatus.DISCUSSION, "analyze"
        )
        discussion = await self._revisions.list_discussion(proposal_id)

        try:
            synthesis = await asyncio.wait_for(
                self._evaluator.synthesize_revision(proposal, discussion),
                timeout=self._call_timeout_seconds,
            )
        except EvaluatorResponseError as exc:
            log.warning("synthesis_unparseable", error=str(exc))
            synthesis = RevisionSynthesis.unparseable(exc.raw_response)
        except asyncio.TimeoutError:
            raise EvaluatorUnavailableError(
                "panel_evaluator", "synthesis timed out"
            ) from None

        await self._revisions.add_discussion_entry(
            DiscussionEntry.create(
                proposal_id=proposal_id,
                author_kind=DiscussionAuthorKind.AI_COUNCIL,
                author_id=None,
                content=synthesis.format(),
                created_at=self._time.now(),
                is_ai_analysis=True,
            )
        )
        self._audit.record(
            AuditEventType.DISCUSSION_CREATED,
            ActorKind.AI,
            subject_type="revision",
            subject_id=proposal_id,
            details={
                "action": "synthesis",
                "recommendation": synthesis.recommendation.value,
                "parse_failed": synthesis.parse_failed,
                "discussion_entries": len(discussion),
            },
        )
        log.info(
            "synthesis_recorded",
            recommendation=synthesis.recommendation.value,
            parse_failed=synthesis.parse_failed,
        )
        return synthesis

    async def start_vote(self, proposal_id: UUID) -> VotingSession:
        """Open the revision vote once the discussion window has elapsed.

        Raises:
            InvalidRevisionStateError: Proposal is not in discussion.
            DiscussionWindowOpenError: The window has not elapsed.
        """
        log = self._log_operation("start_vote", proposal_id=str(proposal_id))
        proposal = await self._require_status(
            proposal_id, RevisionStatus.DISCUSSION, "start a vote on"
        )
        if proposal.discussion_open_at(self._time.now()):
            raise DiscussionWindowOpenError(proposal_id, proposal.discussion_ends_at)

        session = await self._engine.create_session(
            proposal.id,
            SubjectType.REVISION,
            title=f"Revision of {proposal.entry_id}",
        )
        await self._revisions.update(
            proposal.with_status(
                RevisionStatus.VOTING,
                self._time.now(),
                voting_session_id=session.id,
            )
        )
        log.info("revision_vote_started", session_id=str(session.id))
        return session

    async def apply(self, proposal_id: UUID) -> PublishedEntry:
        """Apply an approved revision to its entry.

        Writes the pre-change snapshot and the updated entry atomically.

        Raises:
            InvalidRevisionStateError: Proposal is not in voting.
            RevisionNotApprovedError: The session outcome is not approved.
            EntryNotFoundError: The entry disappeared.
            StaleEntryVersionError: The entry changed since it was read.
        """
        log = self._log_operation("apply", proposal_id=str(proposal_id))
        proposal = await self._require_status(proposal_id, RevisionStatus.VOTING, "apply")
        session = await self._engine.get_session(proposal.voting_session_id)
        if session.status != SessionStatus.APPROVED:
            raise RevisionNotApprovedError(proposal_id, session.status.value)

        entry = await self._entries.get(proposal.entry_id)
        if entry is None:
            raise EntryNotFoundError(proposal.entry_id)

        now = self._time.now()
        snapshot = EntryVersion.snapshot(
            entry,
            change_type=ChangeType.COMMUNITY_REVISION,
            change_summary=proposal.rationale,
            changed_by=proposal.proposer_id,
            created_at=now,
            voting_session_id=session.id,
        )
        updated = entry.with_revision(
            text_ko=proposal.proposed_text, text_en=entry.text_en, updated_at=now
        )
        await self._entries.apply_revision(snapshot, updated, expected_version=entry.version)
        await self._revisions.update(proposal.with_status(RevisionStatus.APPROVED, now))

        self._audit.record(
            AuditEventType.REVISION_APPROVED,
            ActorKind.SYSTEM,
            subject_type="entry",
            subject_id=entry.id,
            details={
                "proposal_id": str(proposal_id),
                "voting_session_id": str(session.id),
                "previous_version": entry.version,
                "new_version": updated.version,
            },
        )
        log.info("revision_applied", entry_id=entry.id, new_version=updated.version)
        return updated

    async def finalize(self, proposal_id: UUID) -> RevisionProposal:
        """Close the revision vote and apply or reject according to its outcome."""
        proposal = await self._require_status(proposal_id, RevisionStatus.VOTING, "finalize")
        session = await self._engine.close(proposal.voting_session_id)
        if session.status == SessionStatus.APPROVED:
            await self.apply(proposal_id)
            return await self.get(proposal_id)
        return await self.reject(proposal_id, reason=f"Voting outcome {session.status.value}")

    async def reject(self, proposal_id: UUID, reason: str) -> RevisionProposal:
        """Reject a proposal and extend the proposer's cooldown on the entry.

        Raises:
            InvalidRevisionStateError: Proposal already finished.
        """
        log = self._log_operation("reject", proposal_id=str(proposal_id))
        proposal = await self.get(proposal_id)
        if proposal.status.is_terminal():
            raise InvalidRevisionStateError(proposal_id, proposal.status, operation="reject")

        now = self._time.now()
        previous = await self._revisions.get_cooldown(proposal.entry_id, proposal.proposer_id)
        rejection_count = (previous.rejection_count if previous else 0) + 1
        cooldown_until = now + self._config.cooldown_for(rejection_count)
        await self._revisions.upsert_cooldown(
            CooldownRecord(
                entry_id=proposal.entry_id,
                proposer_id=proposal.proposer_id,
                rejection_count=rejection_count,
                cooldown_until=cooldown_until,
            )
        )
        proposal = proposal.with_status(
            RevisionStatus.REJECTED,
            now,
            rejection_count=rejection_count,
            cooldown_until=cooldown_until,
            rejection_reason=reason,
        )
        await self._revisions.update(proposal)

        self._audit.record(
            AuditEventType.REVISION_PROPOSED,
            ActorKind.SYSTEM,
            subject_type="revision",
            subject_id=proposal_id,
            details={
                "action": "reject",
                "reason": reason,
                "rejection_count": rejection_count,
                "cooldown_until": cooldown_until.isoformat(),
            },
        )
        log.info(
            "revision_rejected",
            rejection_count=rejection_count,
            cooldown_until=cooldown_until.isoformat(),
        )
        return proposal

    async def withdraw(self, proposal_id: UUID, proposer_id: str) -> RevisionProposal:
        """Withdraw a proposal before voting starts.

        Raises:
            InvalidRevisionError: Caller is not the proposer.
            InvalidRevisionStateError: Proposal is past discussion.
        """
        proposal = await self.get(proposal_id)
        if proposal.proposer_id != proposer_id:
            raise InvalidRevisionError("proposer_id", "only the proposer may withdraw")
        if proposal.status not in WITHDRAWABLE_STATUSES:
            raise InvalidRevisionStateError(proposal_id, proposal.status, operation="withdraw")
        proposal = proposal.with_status(RevisionStatus.WITHDRAWN, self._time.now())
        await self._revisions.update(proposal)
        self._audit.record(
            AuditEventType.REVISION_PROPOSED,
            ActorKind.HUMAN,
            subject_type="revision",
            subject_id=proposal_id,
            actor_id=proposer_id,
            details={"action": "withdraw"},
        )
        return proposal

    async def _member_analysis(
        self, member: CouncilMember, proposal: RevisionProposal
    ) -> DiscussionEntry | None:
        try:
            content = await asyncio.wait_for(
                self._evaluator.analyze_revision(member, proposal),
                timeout=self._call_timeout_seconds,
            )
        except Exception as exc:
            self._log.warning(
                "council_analysis_failed",
                proposal_id=str(proposal.id),
                member_id=member.id,
                error=str(exc) or type(exc).__name__,
            )
            return None
        entry = DiscussionEntry.create(
            proposal_id=proposal.id,
            author_kind=DiscussionAuthorKind.AI_COUNCIL,
            author_id=member.id,
            content=content,
            created_at=self._time.now(),
            is_ai_analysis=True,
        )
        await self._revisions.add_discussion_entry(entry)
        return entry

    async def _require_status(
        self, proposal_id: UUID, status: RevisionStatus, operation: str
    ) -> RevisionProposal:
        proposal = await self.get(proposal_id)
        if proposal.status != status:
            raise InvalidRevisionStateError(proposal_id, proposal.status, operation)
        return proposal
