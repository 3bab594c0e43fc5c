"""Unit tests for the voting session aggregate and its tally rules.

Key Test Scenarios:
1. Approval rate excludes abstentions
2. Quorum failure overrides approval
3. Threshold and quorum boundaries are inclusive
4. Status transitions follow the matrix
5. Window and counter bookkeeping
"""

from datetime import timedelta

import pytest
from uuid6 import uuid7

from src.domain.errors.voting import InvalidSessionTransitionError
from src.domain.models.vote import VoteChoice, VoterKind
from src.domain.models.voting_session import (
    SessionStatus,
    SubjectType,
    VoteCounters,
    VotingSession,
)
from tests.helpers.factories import make_session
from tests.helpers.fake_time_authority import DEFAULT_FROZEN_AT


class TestVoteCounters:
    """Tests for per-channel counters."""

    def test_incremented_touches_one_cell(self) -> None:
        """Incrementing a human abstain changes only that cell."""
        counters = VoteCounters().incremented(VoterKind.HUMAN, VoteChoice.ABSTAIN)

        assert counters.human_abstain == 1
        assert counters.human_votes_cast == 1
        assert counters.automated_votes_cast == 0
        assert counters.total_for == 0

    def test_totals_combine_channels(self) -> None:
        """total_for and total_against add human and automated votes."""
        counters = VoteCounters(
            human_for=2, automated_for=3, human_against=1, automated_against=4
        )

        assert counters.total_for == 5
        assert counters.total_against == 5

    def test_approval_rate_excludes_abstentions(self) -> None:
        """Abstentions do not dilute the approval rate."""
        counters = VoteCounters(human_for=2, human_abstain=5, automated_abstain=5)

        assert counters.approval_rate == 1.0

    def test_approval_rate_zero_without_decisive_votes(self) -> None:
        """No for/against votes gives a rate of 0."""
        assert VoteCounters(human_abstain=3).approval_rate == 0.0


class TestComputeTally:
    """Tests for VotingSession.compute_tally()."""

    def test_approved_when_rate_meets_threshold(self) -> None:
        """7 for / 3 against with quorum met approves at 0.60."""
        session = make_session(
            counters=VoteCounters(
                human_for=4, human_against=1, automated_for=3, automated_against=2
            ),
            eligible_human_count=10,
        )

        result = session.compute_tally()

        assert result.outcome == SessionStatus.APPROVED
        assert result.approval_rate == 0.7
        assert result.quorum_met is True

    def test_rate_equal_to_threshold_approves(self) -> None:
        """The threshold comparison is inclusive."""
        session = make_session(
            counters=VoteCounters(human_for=3, human_against=2),
            eligible_human_count=10,
        )

        assert session.compute_tally().outcome == SessionStatus.APPROVED

    def test_rejected_below_threshold(self) -> None:
        """A rate below the threshold rejects."""
        session = make_session(
            counters=VoteCounters(human_for=1, human_against=2),
            eligible_human_count=10,
        )

        result = session.compute_tally()

        assert result.outcome == SessionStatus.REJECTED
        assert result.approval_rate == 0.3333

    def test_quorum_failure_overrides_unanimous_approval(self) -> None:
        """5 of 100 eligible humans is below a 10% quorum."""
        session = make_session(
            counters=VoteCounters(human_for=5, automated_for=10),
            eligible_human_count=100,
        )

        result = session.compute_tally()

        assert result.outcome == SessionStatus.QUORUM_FAILED
        assert result.approval_rate == 1.0
        assert result.quorum_met is False

    def test_quorum_boundary_is_inclusive(self) -> None:
        """1 of 10 eligible humans meets a 10% quorum."""
        session = make_session(
            counters=VoteCounters(human_for=1), eligible_human_count=10
        )

        assert session.quorum_met is True

    def test_human_abstain_counts_toward_quorum(self) -> None:
        """Abstaining humans count as participation."""
        session = make_session(
            counters=VoteCounters(human_abstain=2, automated_for=5),
            eligible_human_count=10,
        )

        assert session.quorum_met is True
        assert session.compute_tally().outcome == SessionStatus.APPROVED

    def test_zero_eligible_humans_always_meets_quorum(self) -> None:
        """With nobody eligible, the automated panel decides alone."""
        session = make_session(
            counters=VoteCounters(automated_for=4, automated_against=1),
            eligible_human_count=0,
        )

        result = session.compute_tally()

        assert result.quorum_met is True
        assert result.outcome == SessionStatus.APPROVED

    def test_automated_votes_do_not_count_toward_quorum(self) -> None:
        """Quorum is computed from human participation only."""
        session = make_session(
            counters=VoteCounters(automated_for=50), eligible_human_count=10
        )

        assert session.quorum_met is False

    def test_tally_is_repeatable(self) -> None:
        """The same counters give the same result."""
        session = make_session(
            counters=VoteCounters(human_for=3, human_against=1),
            eligible_human_count=5,
        )

        assert session.compute_tally() == session.compute_tally()

    def test_uses_threshold_fixed_on_session(self) -> None:
        """A stricter session threshold rejects the same counters."""
        counters = VoteCounters(human_for=13, human_against=7)
        lenient = make_session(counters=counters, approval_threshold=0.60)
        strict = make_session(counters=counters, approval_threshold=0.70)

        assert lenient.compute_tally().outcome == SessionStatus.APPROVED
        assert strict.compute_tally().outcome == SessionStatus.REJECTED


class TestSessionLifecycle:
    """Tests for creation, transitions and the voting window."""

    def test_create_opens_active_session(self) -> None:
        """create() returns an active session with empty counters."""
        session = VotingSession.create(
            subject_id=uuid7(),
            subject_type=SubjectType.REVISION,
            title="Revision of 1:1",
            approval_threshold=0.7,
            quorum_fraction=0.1,
            eligible_human_count=3,
            starts_at=DEFAULT_FROZEN_AT,
            ends_at=DEFAULT_FROZEN_AT + timedelta(days=7),
        )

        assert session.status == SessionStatus.ACTIVE
        assert session.counters == VoteCounters()
        assert session.automated_panel_size == 0

    def test_create_rejects_empty_window(self) -> None:
        """ends_at must be after starts_at."""
        with pytest.raises(ValueError, match="ends_at"):
            VotingSession.create(
                subject_id=uuid7(),
                subject_type=SubjectType.NEW_SUBMISSION,
                title="t",
                approval_threshold=0.6,
                quorum_fraction=0.1,
                eligible_human_count=0,
                starts_at=DEFAULT_FROZEN_AT,
                ends_at=DEFAULT_FROZEN_AT,
            )

    def test_create_rejects_negative_eligible_count(self) -> None:
        """eligible_human_count must be non-negative."""
        with pytest.raises(ValueError, match="eligible_human_count"):
            VotingSession.create(
                subject_id=uuid7(),
                subject_type=SubjectType.NEW_SUBMISSION,
                title="t",
                approval_threshold=0.6,
                quorum_fraction=0.1,
                eligible_human_count=-1,
                starts_at=DEFAULT_FROZEN_AT,
                ends_at=DEFAULT_FROZEN_AT + timedelta(days=1),
            )

    def test_active_to_tallying_allowed(self) -> None:
        """active -> tallying is in the matrix."""
        session = make_session().with_status(SessionStatus.TALLYING)

        assert session.status == SessionStatus.TALLYING

    def test_active_to_approved_rejected(self) -> None:
        """An outcome can only be reached from tallying."""
        with pytest.raises(InvalidSessionTransitionError):
            make_session().with_status(SessionStatus.APPROVED)

    def test_terminal_status_is_final(self) -> None:
        """No transition leaves a terminal status."""
        session = make_session(status=SessionStatus.REJECTED)

        with pytest.raises(InvalidSessionTransitionError):
            session.with_status(SessionStatus.FLAGGED)

    def test_flag_allowed_from_pending(self) -> None:
        """Any non-terminal status may be flagged."""
        session = make_session(status=SessionStatus.PENDING)

        assert session.with_status(SessionStatus.FLAGGED).status == SessionStatus.FLAGGED

    def test_window_end_is_exclusive(self) -> None:
        """Votes at exactly ends_at are outside the window."""
        session = make_session(window=timedelta(days=7))

        assert session.is_open_at(session.ends_at - timedelta(seconds=1))
        assert not session.is_open_at(session.ends_at)

    def test_with_vote_increments_counters(self) -> None:
        """with_vote returns a copy with one more vote."""
        session = make_session()

        updated = session.with_vote(VoterKind.AUTOMATED, VoteChoice.AGAINST)

        assert updated.counters.automated_against == 1
        assert session.counters.automated_against == 0
