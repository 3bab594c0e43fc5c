"""Voting routes: sessions, human votes, the automated panel and tallies.

Operator calls (create, panel, tally, close, flag) require an actor id for
attribution but carry no role check.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from src.api.dependencies.governance import (
    get_actor_id,
    get_consensus_engine,
    get_rate_limiter,
    get_refinement_service,
    get_revision_service,
    get_time_authority,
)
from src.api.middleware.rate_limiter import enforce_rate_limit
from src.api.models.voting import (
    CastVoteRequest,
    CreateSessionRequest,
    FlagSessionRequest,
    PanelResponse,
    PanelVoterModel,
    TallyResponse,
    VoteCountsModel,
    VoteResponse,
    VotingSessionListResponse,
    VotingSessionResponse,
)
from src.api.problem_details import to_http_exception
from src.application.ports.rate_limiter import RateLimiterPort
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.consensus_engine import ConsensusEngine
from src.application.services.refinement_service import RefinementService
from src.application.services.revision_workflow_service import (
    RevisionWorkflowService,
)
from src.bootstrap.governance import VOTE_ACTION
from src.domain.exceptions import GovernanceError
from src.domain.models.vote import VoterKind
from src.domain.models.voting_session import SubjectType, VoteCounters, VotingSession

router = APIRouter(prefix="/v1/voting", tags=["voting"])


def _counts(c: VoteCounters) -> VoteCountsModel:
    return VoteCountsModel(
        human_for=c.human_for,
        human_against=c.human_against,
        human_abstain=c.human_abstain,
        automated_for=c.automated_for,
        automated_against=c.automated_against,
        automated_abstain=c.automated_abstain,
    )


def _session_response(session: VotingSession) -> VotingSessionResponse:
    c = session.counters
    return VotingSessionResponse(
        id=session.id,
        subject_id=session.subject_id,
        subject_type=session.subject_type.value,
        title=session.title,
        status=session.status.value,
        approval_threshold=session.approval_threshold,
        quorum_fraction=session.quorum_fraction,
        eligible_human_count=session.eligible_human_count,
        counts=_counts(c),
        approval_rate=round(c.approval_rate, 4),
        quorum_met=session.quorum_met,
        automated_panel_size=session.automated_panel_size,
        starts_at=session.starts_at,
        ends_at=session.ends_at,
        flag_reason=session.flag_reason,
    )


@router.post(
    "/sessions/{session_id}/votes",
    response_model=VoteResponse,
    status_code=201,
    summary="Cast a human vote",
)
async def cast_vote(
    session_id: UUID,
    request_data: CastVoteRequest,
    request: Request,
    actor_id: str = Depends(get_actor_id),
    engine: ConsensusEngine = Depends(get_consensus_engine),
    rate_limiter: RateLimiterPort = Depends(get_rate_limiter),
    time_authority: TimeAuthorityProtocol = Depends(get_time_authority),
) -> VoteResponse:
    """Record one vote per actor per session. A second vote is a 409."""
    try:
        await enforce_rate_limit(rate_limiter, time_authority, VOTE_ACTION, actor_id)
        vote = await engine.cast_vote(
            session_id,
            voter_id=actor_id,
            choice=request_data.choice,
            voter_kind=VoterKind.HUMAN,
            rationale=request_data.rationale,
        )
        await rate_limiter.record(VOTE_ACTION, actor_id)
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    return VoteResponse(
        vote_id=vote.id,
        session_id=vote.session_id,
        voter_id=vote.voter_id,
        choice=vote.choice.value,
        cast_at=vote.cast_at,
    )


@router.get(
    "/sessions",
    response_model=VotingSessionListResponse,
    summary="List open voting sessions",
)
async def list_sessions(
    engine: ConsensusEngine = Depends(get_consensus_engine),
) -> VotingSessionListResponse:
    sessions = await engine.list_active_sessions()
    return VotingSessionListResponse(
        sessions=[_session_response(s) for s in sessions],
        total=len(sessions),
    )


async def _subject_text(
    session: VotingSession,
    refinement: RefinementService,
    revisions: RevisionWorkflowService,
) -> str:
    """Text the panel judges: latest refinement, or the proposed revision."""
    if session.subject_type == SubjectType.NEW_SUBMISSION:
        return await refinement.latest_text(session.subject_id)
    if session.subject_type == SubjectType.REVISION:
        proposal = await revisions.get(session.subject_id)
        return proposal.proposed_text
    return session.title


@router.post(
    "/sessions",
    response_model=VotingSessionResponse,
    status_code=201,
    summary="Open a voting session",
    dependencies=[Depends(get_actor_id)],
)
async def create_session(
    request_data: CreateSessionRequest,
    request: Request,
    engine: ConsensusEngine = Depends(get_consensus_engine),
) -> VotingSessionResponse:
    """Open an active session. A subject with an open session is a 409."""
    try:
        session = await engine.create_session(
            request_data.subject_id,
            SubjectType(request_data.subject_type),
            title=request_data.title,
        )
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    return _session_response(session)


@router.post(
    "/sessions/{session_id}/panel",
    response_model=PanelResponse,
    summary="Convene the automated panel",
    dependencies=[Depends(get_actor_id)],
)
async def convene_panel(
    session_id: UUID,
    request: Request,
    engine: ConsensusEngine = Depends(get_consensus_engine),
    refinement: RefinementService = Depends(get_refinement_service),
    revisions: RevisionWorkflowService = Depends(get_revision_service),
) -> PanelResponse:
    """Generate the automated voters once per session and record their votes."""
    try:
        session = await engine.get_session(session_id)
        subject_text = await _subject_text(session, refinement, revisions)
        voters = await engine.generate_automated_voters(session_id, subject_text)
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    return PanelResponse(
        session_id=session_id,
        panel_size=len(voters),
        voters=[
            PanelVoterModel(
                voter_id=v.id,
                perspective=v.perspective.name,
                category=v.category.value,
                choice=v.judgment.vote.value,
                reasoning=v.judgment.reasoning,
                confidence=v.judgment.confidence,
                evaluation_failed=v.evaluation_failed,
            )
            for v in voters
        ],
    )


@router.post(
    "/sessions/{session_id}/tally",
    response_model=TallyResponse,
    summary="Tally a session",
    dependencies=[Depends(get_actor_id)],
)
async def tally_session(
    session_id: UUID,
    request: Request,
    engine: ConsensusEngine = Depends(get_consensus_engine),
) -> TallyResponse:
    """Compute the outcome. A finished session reports its stored outcome."""
    try:
        result = await engine.tally(session_id)
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    return TallyResponse(
        session_id=result.session_id,
        outcome=result.outcome.value,
        approval_rate=result.approval_rate,
        approval_threshold=result.approval_threshold,
        quorum_met=result.quorum_met,
        counts=_counts(result.counters),
    )


@router.post(
    "/sessions/{session_id}/close",
    response_model=VotingSessionResponse,
    summary="Tally if needed and end the window",
    dependencies=[Depends(get_actor_id)],
)
async def close_session(
    session_id: UUID,
    request: Request,
    engine: ConsensusEngine = Depends(get_consensus_engine),
) -> VotingSessionResponse:
    try:
        return _session_response(await engine.close(session_id))
    except GovernanceError as e:
        raise to_http_exception(e, request) from None


@router.post(
    "/sessions/{session_id}/flag",
    response_model=VotingSessionResponse,
    summary="Flag a session for review",
    dependencies=[Depends(get_actor_id)],
)
async def flag_session(
    session_id: UUID,
    request_data: FlagSessionRequest,
    request: Request,
    engine: ConsensusEngine = Depends(get_consensus_engine),
) -> VotingSessionResponse:
    """Stop a session without an outcome. Finished sessions cannot be flagged."""
    try:
        return _session_response(await engine.flag(session_id, request_data.reason))
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
