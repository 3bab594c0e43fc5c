"""RFC 7807 problem details for domain errors.

Every route maps GovernanceError subclasses through to_http_exception so
status codes and problem types are consistent across the API:
    400 validation, 404 not found, 409 constraint violation,
    429 rate limit, 502/503 external service.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request

from src.domain.errors import (
    ActiveSessionExistsError,
    ComplianceError,
    DiscussionWindowOpenError,
    DuplicateVoteError,
    EntryNotFoundError,
    EvaluatorResponseError,
    EvaluatorUnavailableError,
    InvalidRevisionError,
    InvalidRevisionStateError,
    InvalidSessionStateError,
    InvalidSessionTransitionError,
    InvalidStageTransitionError,
    InvalidSubmissionError,
    InvalidVoteChoiceError,
    PlacementCollisionError,
    RateLimitExceededError,
    RefinementFailedError,
    RevisionCooldownActiveError,
    RevisionNotApprovedError,
    RevisionNotFoundError,
    StaleEntryVersionError,
    SubmissionNotFoundError,
    SubmissionStateError,
    VotingSessionNotFoundError,
    VotingWindowClosedError,
)
from src.domain.exceptions import GovernanceError

PROBLEM_TYPE_PREFIX = "urn:scripture-evolution"

# First match wins; subclasses must precede their bases.
_PROBLEM_TYPES: tuple[tuple[type[GovernanceError], int, str, str], ...] = (
    (RateLimitExceededError, 429, "rate-limit:exceeded", "Rate Limit Exceeded"),
    (SubmissionNotFoundError, 404, "submission:not-found", "Submission Not Found"),
    (VotingSessionNotFoundError, 404, "voting:session-not-found", "Voting Session Not Found"),
    (RevisionNotFoundError, 404, "revision:not-found", "Revision Not Found"),
    (EntryNotFoundError, 404, "entry:not-found", "Entry Not Found"),
    (DuplicateVoteError, 409, "voting:already-voted", "Already Voted"),
    (VotingWindowClosedError, 409, "voting:window-closed", "Voting Window Closed"),
    (ActiveSessionExistsError, 409, "voting:session-exists", "Voting Session Already Open"),
    (InvalidSessionTransitionError, 409, "voting:invalid-transition", "Invalid Session Transition"),
    (PlacementCollisionError, 409, "entry:collision", "Entry Id Collision"),
    (StaleEntryVersionError, 409, "entry:stale-version", "Entry Version Changed"),
    (RevisionCooldownActiveError, 409, "revision:cooldown", "Revision Cooldown Active"),
    (DiscussionWindowOpenError, 409, "revision:discussion-open", "Discussion Window Open"),
    (RevisionNotApprovedError, 409, "revision:not-approved", "Revision Not Approved"),
    (InvalidSubmissionError, 400, "submission:invalid", "Invalid Submission"),
    (SubmissionStateError, 400, "submission:invalid-state", "Invalid Submission State"),
    (InvalidVoteChoiceError, 400, "voting:invalid-choice", "Invalid Vote Choice"),
    (InvalidSessionStateError, 400, "voting:invalid-state", "Invalid Session State"),
    (InvalidRevisionError, 400, "revision:invalid", "Invalid Revision"),
    (InvalidRevisionStateError, 400, "revision:invalid-state", "Invalid Revision State"),
    (InvalidStageTransitionError, 400, "refinement:invalid-transition", "Invalid Stage Transition"),
    (RefinementFailedError, 502, "refinement:failed", "Refinement Failed"),
    (EvaluatorResponseError, 502, "evaluator:bad-response", "Evaluator Response Invalid"),
    (EvaluatorUnavailableError, 503, "evaluator:unavailable", "Evaluator Unavailable"),
    (ComplianceError, 503, "compliance:unavailable", "Compliance Check Unavailable"),
)


def _extensions(exc: GovernanceError) -> dict[str, Any]:
    if isinstance(exc, RateLimitExceededError):
        return {
            "action": exc.action,
            "current_count": exc.current_count,
            "limit": exc.limit,
            "rate_limit_remaining": 0,
            "rate_limit_reset_at": exc.reset_at.isoformat(),
        }
    if isinstance(exc, RevisionCooldownActiveError):
        return {
            "entry_id": exc.entry_id,
            "cooldown_until": exc.cooldown_until.isoformat(),
        }
    if isinstance(exc, DuplicateVoteError):
        return {"session_id": str(exc.session_id), "voter_kind": exc.voter_kind.value}
    if isinstance(exc, VotingWindowClosedError):
        return {"session_id": str(exc.session_id), "ends_at": exc.ends_at.isoformat()}
    if isinstance(exc, (InvalidSubmissionError, InvalidRevisionError)):
        return {"field": exc.field}
    return {}


def to_http_exception(exc: GovernanceError, request: Request) -> HTTPException:
    """Build the HTTPException for a domain error."""
    status, slug, title = 500, "governance:error", "Governance Error"
    for error_type, error_status, error_slug, error_title in _PROBLEM_TYPES:
        if isinstance(exc, error_type):
            status, slug, title = error_status, error_slug, error_title
            break

    detail: dict[str, Any] = {
        "type": f"{PROBLEM_TYPE_PREFIX}:{slug}",
        "title": title,
        "status": status,
        "detail": str(exc),
        "instance": str(request.url),
        **_extensions(exc),
    }
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    return HTTPException(status_code=status, detail=detail, headers=headers)
