"""Revision proposal routes.

Intake, discussion and the revision vote. Withdrawal is limited to the
proposer; the other steps only require an actor id.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from src.api.dependencies.governance import get_actor_id, get_revision_service
from src.api.models.revision import (
    CommentRequest,
    DiscussionEntryResponse,
    ProposeRevisionRequest,
    RejectRevisionRequest,
    RevisionResponse,
    RevisionVoteResponse,
    SynthesisResponse,
)
from src.api.problem_details import to_http_exception
from src.application.services.revision_workflow_service import (
    RevisionWorkflowService,
)
from src.domain.exceptions import GovernanceError
from src.domain.models.revision_proposal import RevisionProposal

router = APIRouter(prefix="/v1/revisions", tags=["revisions"])


def _to_response(proposal: RevisionProposal) -> RevisionResponse:
    return RevisionResponse(
        id=proposal.id,
        entry_id=proposal.entry_id,
        proposer_id=proposal.proposer_id,
        status=proposal.status.value,
        compliance_score=proposal.compliance_score,
        discussion_ends_at=proposal.discussion_ends_at,
        voting_session_id=proposal.voting_session_id,
        rejection_reason=proposal.rejection_reason,
        rejection_count=proposal.rejection_count,
        cooldown_until=proposal.cooldown_until,
        created_at=proposal.created_at,
    )


@router.post(
    "",
    response_model=RevisionResponse,
    status_code=201,
    summary="Propose a revision to a published entry",
)
async def propose_revision(
    request_data: ProposeRevisionRequest,
    request: Request,
    actor_id: str = Depends(get_actor_id),
    service: RevisionWorkflowService = Depends(get_revision_service),
) -> RevisionResponse:
    """Create and screen a revision proposal.

    Proposals from an actor in cooldown for the entry are refused with 409.
    """
    try:
        proposal = await service.propose(
            entry_id=request_data.entry_id,
            proposer_id=actor_id,
            proposed_text=request_data.proposed_text,
            rationale=request_data.rationale,
        )
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    return _to_response(proposal)


@router.get(
    "/{proposal_id}",
    response_model=RevisionResponse,
    summary="Get a revision proposal",
)
async def get_revision(
    proposal_id: UUID,
    request: Request,
    service: RevisionWorkflowService = Depends(get_revision_service),
) -> RevisionResponse:
    try:
        return _to_response(await service.get(proposal_id))
    except GovernanceError as e:
        raise to_http_exception(e, request) from None


@router.post(
    "/{proposal_id}/comments",
    response_model=DiscussionEntryResponse,
    status_code=201,
    summary="Comment on a proposal in discussion",
)
async def add_comment(
    proposal_id: UUID,
    request_data: CommentRequest,
    request: Request,
    actor_id: str = Depends(get_actor_id),
    service: RevisionWorkflowService = Depends(get_revision_service),
) -> DiscussionEntryResponse:
    try:
        entry = await service.add_comment(proposal_id, actor_id, request_data.content)
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    return DiscussionEntryResponse(
        id=entry.id,
        proposal_id=entry.proposal_id,
        author_kind=entry.author_kind.value,
        author_id=entry.author_id,
        content=entry.content,
        is_ai_analysis=entry.is_ai_analysis,
        created_at=entry.created_at,
    )


@router.post(
    "/{proposal_id}/analysis",
    response_model=SynthesisResponse,
    summary="Synthesize the discussion into a recommendation",
    dependencies=[Depends(get_actor_id)],
)
async def analyze_revision(
    proposal_id: UUID,
    request: Request,
    service: RevisionWorkflowService = Depends(get_revision_service),
) -> SynthesisResponse:
    """Run the synthesis pass.

    Malformed evaluator output still answers 200 with parse_failed set.
    """
    try:
        synthesis = await service.ai_analysis(proposal_id)
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    return SynthesisResponse(
        proposal_id=proposal_id,
        necessity=synthesis.necessity,
        meaning_diff=synthesis.meaning_diff,
        impact=synthesis.impact,
        community_summary=synthesis.community_summary,
        recommendation=synthesis.recommendation.value,
        reasoning=synthesis.reasoning,
        parse_failed=synthesis.parse_failed,
    )


@router.post(
    "/{proposal_id}/vote",
    response_model=RevisionVoteResponse,
    status_code=201,
    summary="Open the revision vote",
    dependencies=[Depends(get_actor_id)],
)
async def start_vote(
    proposal_id: UUID,
    request: Request,
    service: RevisionWorkflowService = Depends(get_revision_service),
) -> RevisionVoteResponse:
    """Open the vote once discussion has ended; earlier is a 409."""
    try:
        session = await service.start_vote(proposal_id)
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    return RevisionVoteResponse(
        proposal_id=proposal_id,
        session_id=session.id,
        approval_threshold=session.approval_threshold,
        ends_at=session.ends_at,
    )


@router.post(
    "/{proposal_id}/finalize",
    response_model=RevisionResponse,
    summary="Close the vote and apply or reject",
    dependencies=[Depends(get_actor_id)],
)
async def finalize_revision(
    proposal_id: UUID,
    request: Request,
    service: RevisionWorkflowService = Depends(get_revision_service),
) -> RevisionResponse:
    try:
        return _to_response(await service.finalize(proposal_id))
    except GovernanceError as e:
        raise to_http_exception(e, request) from None


@router.post(
    "/{proposal_id}/reject",
    response_model=RevisionResponse,
    summary="Reject a proposal",
    dependencies=[Depends(get_actor_id)],
)
async def reject_revision(
    proposal_id: UUID,
    request_data: RejectRevisionRequest,
    request: Request,
    service: RevisionWorkflowService = Depends(get_revision_service),
) -> RevisionResponse:
    """Reject and extend the proposer's cooldown on the entry."""
    try:
        return _to_response(await service.reject(proposal_id, request_data.reason))
    except GovernanceError as e:
        raise to_http_exception(e, request) from None


@router.post(
    "/{proposal_id}/withdraw",
    response_model=RevisionResponse,
    summary="Withdraw your own proposal",
)
async def withdraw_revision(
    proposal_id: UUID,
    request: Request,
    actor_id: str = Depends(get_actor_id),
    service: RevisionWorkflowService = Depends(get_revision_service),
) -> RevisionResponse:
    try:
        return _to_response(await service.withdraw(proposal_id, actor_id))
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
