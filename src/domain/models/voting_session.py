"""Voting session aggregate and tally rules.

A session is opened for one subject, collects human and automated votes
during a fixed window, and is tallied against quorum and an approval
threshold fixed at creation.

Status flow:
    pending -> active -> tallying -> approved | rejected | quorum_failed
    Any non-terminal status may also move to flagged.

Tally rules:
    approval_rate = total_for / (total_for + total_against), abstains excluded
    quorum_met    = eligible_human_count == 0
                    or human_votes_cast / eligible_human_count >= quorum_fraction
    Quorum failure overrides approval.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from uuid6 import uuid7

from src.domain.models.vote import VoteChoice, VoterKind


class SubjectType(Enum):
    """What a session decides on; selects the approval threshold."""

    NEW_SUBMISSION = "new_submission"
    REVISION = "revision"
    AMENDMENT = "amendment"
    ARCHIVE_RESTORE = "archive_restore"


class SessionStatus(Enum):
    """Status of a voting session."""

    PENDING = "pending"
    ACTIVE = "active"
    TALLYING = "tallying"
    APPROVED = "approved"
    REJECTED = "rejected"
    QUORUM_FAILED = "quorum_failed"
    FLAGGED = "flagged"

    def is_terminal(self) -> bool:
        """True for outcome statuses."""
        return self in TERMINAL_SESSION_STATUSES

    def can_transition_to(self, target: SessionStatus) -> bool:
        """Check the transition matrix."""
        return target in SESSION_TRANSITION_MATRIX[self]


TERMINAL_SESSION_STATUSES: frozenset[SessionStatus] = frozenset(
    {
        SessionStatus.APPROVED,
        SessionStatus.REJECTED,
        SessionStatus.QUORUM_FAILED,
        SessionStatus.FLAGGED,
    }
)

SESSION_TRANSITION_MATRIX: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.PENDING: frozenset({SessionStatus.ACTIVE, SessionStatus.FLAGGED}),
    SessionStatus.ACTIVE: frozenset({SessionStatus.TALLYING, SessionStatus.FLAGGED}),
    SessionStatus.TALLYING: frozenset(
        {
            SessionStatus.APPROVED,
            SessionStatus.REJECTED,
            SessionStatus.QUORUM_FAILED,
            SessionStatus.FLAGGED,
        }
    ),
    SessionStatus.APPROVED: frozenset(),
    SessionStatus.REJECTED: frozenset(),
    SessionStatus.QUORUM_FAILED: frozenset(),
    SessionStatus.FLAGGED: frozenset(),
}


@dataclass(frozen=True, eq=True)
class VoteCounters:
    """Per-channel vote counters."""

    human_for: int = 0
    human_against: int = 0
    human_abstain: int = 0
    automated_for: int = 0
    automated_against: int = 0
    automated_abstain: int = 0

    def incremented(self, kind: VoterKind, choice: VoteChoice) -> VoteCounters:
        """Return counters with one more vote in the matching cell."""
        prefix = "human" if kind == VoterKind.HUMAN else "automated"
        name = f"{prefix}_{choice.value}"
        return replace(self, **{name: getattr(self, name) + 1})

    @property
    def total_for(self) -> int:
        return self.human_for + self.automated_for

    @property
    def total_against(self) -> int:
        return self.human_against + self.automated_against

    @property
    def human_votes_cast(self) -> int:
        return self.human_for + self.human_against + self.human_abstain

    @property
    def automated_votes_cast(self) -> int:
        return self.automated_for + self.automated_against + self.automated_abstain

    @property
    def approval_rate(self) -> float:
        """Share of non-abstain votes that are for, 0 when there are none."""
        decisive = self.total_for + self.total_against
        if decisive == 0:
            return 0.0
        return self.total_for / decisive


@dataclass(frozen=True, eq=True)
class TallyResult:
    """Outcome of tallying a session.

    Attributes:
        session_id: The tallied session.
        counters: Counter snapshot the outcome was computed from.
        approval_rate: Rounded to 4 decimals.
        approval_threshold: Threshold fixed at creation.
        quorum_met: Whether enough eligible humans voted.
        outcome: approved, rejected or quorum_failed.
    """

    session_id: UUID
    counters: VoteCounters
    approval_rate: float
    approval_threshold: float
    quorum_met: bool
    outcome: SessionStatus


@dataclass(frozen=True, eq=True)
class VotingSession:
    """A time-boxed vote on one subject.

    Attributes:
        id: UUIDv7 identifier.
        subject_id: The submission or revision proposal under vote.
        subject_type: Selects the approval threshold.
        title: Display title.
        approval_threshold: Fixed at creation; never changes.
        quorum_fraction: Fraction of eligible humans that must vote.
        eligible_human_count: Snapshot taken at creation.
        counters: Per-channel vote counters.
        status: Session status.
        starts_at: Window start.
        ends_at: Window end; votes at or after this instant are rejected.
        automated_panel_size: Automated voters generated for the session.
        flag_reason: Why the session was flagged, if it was.
    """

    id: UUID
    subject_id: UUID
    subject_type: SubjectType
    title: str
    approval_threshold: float
    quorum_fraction: float
    eligible_human_count: int
    status: SessionStatus
    starts_at: datetime
    ends_at: datetime
    counters: VoteCounters = VoteCounters()
    automated_panel_size: int = 0
    flag_reason: str | None = None

    @classmethod
    def create(
        cls,
        subject_id: UUID,
        subject_type: SubjectType,
        title: str,
        approval_threshold: float,
        quorum_fraction: float,
        eligible_human_count: int,
        starts_at: datetime,
        ends_at: datetime,
    ) -> VotingSession:
        """Open a new active session.

        Raises:
            ValueError: If the window is empty or the counts are negative.
        """
        if ends_at <= starts_at:
            raise ValueError("ends_at must be after starts_at")
        if eligible_human_count < 0:
            raise ValueError("eligible_human_count must be non-negative")
        return cls(
            id=uuid7(),
            subject_id=subject_id,
            subject_type=subject_type,
            title=title,
            approval_threshold=approval_threshold,
            quorum_fraction=quorum_fraction,
            eligible_human_count=eligible_human_count,
            status=SessionStatus.ACTIVE,
            starts_at=starts_at,
            ends_at=ends_at,
        )

    def with_status(self, status: SessionStatus, **changes: object) -> VotingSession:
        """Return a copy in the given status.

        Raises:
            InvalidSessionTransitionError: If the matrix forbids the move.
        """
        from src.domain.errors.voting import InvalidSessionTransitionError

        if not self.status.can_transition_to(status):
            raise InvalidSessionTransitionError(self.status, status)
        return replace(self, status=status, **changes)

    def with_vote(self, kind: VoterKind, choice: VoteChoice) -> VotingSession:
        """Return a copy with one more vote counted."""
        return replace(self, counters=self.counters.incremented(kind, choice))

    def is_open_at(self, now: datetime) -> bool:
        """True when the session is active and its window has not ended."""
        return self.status == SessionStatus.ACTIVE and now < self.ends_at

    @property
    def quorum_met(self) -> bool:
        if self.eligible_human_count == 0:
            return True
        return (
            self.counters.human_votes_cast / self.eligible_human_count
            >= self.quorum_fraction
        )

    def compute_tally(self) -> TallyResult:
        """Compute the outcome from the current counters."""
        approval_rate = self.counters.approval_rate
        quorum_met = self.quorum_met
        if not quorum_met:
            outcome = SessionStatus.QUORUM_FAILED
        elif approval_rate >= self.approval_threshold:
            outcome = SessionStatus.APPROVED
        else:
            outcome = SessionStatus.REJECTED
        return TallyResult(
            session_id=self.id,
            counters=self.counters,
            approval_rate=round(approval_rate, 4),
            approval_threshold=self.approval_threshold,
            quorum_met=quorum_met,
            outcome=outcome,
        )
