"""Submission routes: intake, refinement and placement.

Writes are attributed to the X-Actor-ID caller. Intake is rate limited per
actor and the limit is recorded only after the submission persists.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from src.api.dependencies.governance import (
    get_actor_id,
    get_placement_service,
    get_rate_limiter,
    get_refinement_service,
    get_submission_service,
    get_time_authority,
)
from src.api.middleware.rate_limiter import enforce_rate_limit
from src.api.models.submission import (
    AdvanceRefinementRequest,
    EntryResponse,
    PlaceRequest,
    PrincipleScoreModel,
    RefinementResponse,
    ScreeningSummary,
    SubmissionResponse,
    SubmitRequest,
)
from src.api.problem_details import to_http_exception
from src.application.ports.rate_limiter import RateLimiterPort
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.placement_service import PlacementService
from src.application.services.refinement_service import RefinementService
from src.application.services.submission_service import (
    SubmissionService,
    SubmissionStatusView,
)
from src.bootstrap.governance import SUBMISSION_ACTION
from src.domain.exceptions import GovernanceError
from src.domain.models.compliance import ComplianceEvaluation
from src.domain.models.refinement import RefinementStage

router = APIRouter(prefix="/v1/submissions", tags=["submissions"])


def _screening_summary(evaluation: ComplianceEvaluation) -> ScreeningSummary:
    compliance = evaluation.compliance
    return ScreeningSummary(
        recommendation=evaluation.recommendation.value,
        overall_score=compliance.overall_score,
        threshold=compliance.threshold,
        compliant=compliance.compliant,
        is_safe=evaluation.safety.is_safe,
        safety_flags=[flag.value for flag in evaluation.safety.flags],
        language_score=evaluation.language.score,
        principle_scores=[
            PrincipleScoreModel(
                principle_id=s.principle_id,
                principle_name=s.principle_name,
                weight=s.weight,
                score=s.score,
                rationale=s.rationale,
                failed=s.failed,
            )
            for s in compliance.principle_scores
        ],
        summary=compliance.recommendation,
        evaluated_at=evaluation.created_at,
    )


def _to_response(view: SubmissionStatusView) -> SubmissionResponse:
    submission = view.submission
    return SubmissionResponse(
        id=submission.id,
        owner_id=submission.owner_id,
        submission_type=submission.submission_type.value,
        title=submission.title,
        status=submission.status.value,
        refinement_stage=view.refinement_stage.value,
        compliance_score=submission.compliance_score,
        rejection_reason=submission.rejection_reason,
        related_entry_id=submission.related_entry_id,
        screening=(
            _screening_summary(view.latest_evaluation)
            if view.latest_evaluation
            else None
        ),
        created_at=submission.created_at,
        updated_at=submission.updated_at,
    )


@router.post(
    "",
    response_model=SubmissionResponse,
    status_code=201,
    summary="Submit text for screening",
)
async def submit(
    request_data: SubmitRequest,
    request: Request,
    actor_id: str = Depends(get_actor_id),
    service: SubmissionService = Depends(get_submission_service),
    rate_limiter: RateLimiterPort = Depends(get_rate_limiter),
    time_authority: TimeAuthorityProtocol = Depends(get_time_authority),
) -> SubmissionResponse:
    """Create a submission and screen it unless it is a draft.

    A screening service outage leaves the submission in submitted status
    rather than failing the request.
    """
    try:
        await enforce_rate_limit(
            rate_limiter, time_authority, SUBMISSION_ACTION, actor_id
        )
        submission = await service.submit(
            owner_id=actor_id,
            submission_type=request_data.submission_type,
            title=request_data.title,
            text=request_data.text,
            draft=request_data.draft,
        )
        await rate_limiter.record(SUBMISSION_ACTION, actor_id)
        return _to_response(await service.get_status(submission.id))
    except GovernanceError as e:
        raise to_http_exception(e, request) from None


@router.get(
    "/{submission_id}",
    response_model=SubmissionResponse,
    summary="Get submission status",
)
async def get_submission(
    submission_id: UUID,
    request: Request,
    service: SubmissionService = Depends(get_submission_service),
) -> SubmissionResponse:
    try:
        return _to_response(await service.get_status(submission_id))
    except GovernanceError as e:
        raise to_http_exception(e, request) from None


@router.post(
    "/{submission_id}/refinements",
    response_model=RefinementResponse,
    status_code=201,
    summary="Advance the refinement stage",
    dependencies=[Depends(get_actor_id)],
)
async def advance_refinement(
    submission_id: UUID,
    request_data: AdvanceRefinementRequest,
    request: Request,
    service: RefinementService = Depends(get_refinement_service),
) -> RefinementResponse:
    """Rewrite the latest text into the next stage.

    A low similarity to the previous text is reported in warning and does
    not block the step.
    """
    try:
        outcome = await service.advance(
            submission_id, RefinementStage(request_data.target_stage)
        )
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    record = outcome.record
    return RefinementResponse(
        id=record.id,
        submission_id=record.submission_id,
        stage=record.stage.value,
        text_ko=record.text_ko,
        text_en=record.text_en,
        similarity_to_previous=record.similarity_to_previous,
        change_summary=record.change_summary,
        similarity_warning=record.similarity_warning,
        warning=outcome.warning,
        model=record.model,
        created_at=record.created_at,
    )


@router.post(
    "/{submission_id}/placement",
    response_model=EntryResponse,
    status_code=201,
    summary="Place an approved submission in the canon",
    dependencies=[Depends(get_actor_id)],
)
async def place_submission(
    submission_id: UUID,
    request: Request,
    request_data: PlaceRequest | None = None,
    service: PlacementService = Depends(get_placement_service),
) -> EntryResponse:
    """Insert the approved text as a new entry at version 1.

    Without a chapter the placement analyzer picks one; a taken entry id is
    a 409 and nothing is written.
    """
    manual = request_data or PlaceRequest()
    try:
        entry = await service.place(
            submission_id,
            force_chapter=manual.chapter,
            force_position=manual.position,
        )
    except GovernanceError as e:
        raise to_http_exception(e, request) from None
    return EntryResponse(
        id=entry.id,
        chapter=entry.chapter,
        verse=entry.verse,
        theme=entry.theme,
        text_ko=entry.text_ko,
        text_en=entry.text_en,
        version=entry.version,
        origin=entry.origin.value,
        source_submission_id=entry.source_submission_id,
        traditions=list(entry.traditions),
        reflection=entry.reflection,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )
