"""
API models (Pydantic DTOs) for the governance pipeline.

This module contains all Pydantic request/response models
used by API endpoints.
"""

from src.api.models.audit import AuditEventResponse, AuditPageResponse
from src.api.models.health import HealthResponse
from src.api.models.revision import (
    CommentRequest,
    DiscussionEntryResponse,
    ProposeRevisionRequest,
    RejectRevisionRequest,
    RevisionResponse,
    RevisionVoteResponse,
    SynthesisResponse,
)
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

__all__: list[str] = [
    "AdvanceRefinementRequest",
    "AuditEventResponse",
    "AuditPageResponse",
    "CastVoteRequest",
    "CommentRequest",
    "CreateSessionRequest",
    "DiscussionEntryResponse",
    "EntryResponse",
    "FlagSessionRequest",
    "HealthResponse",
    "PanelResponse",
    "PanelVoterModel",
    "PlaceRequest",
    "PrincipleScoreModel",
    "ProposeRevisionRequest",
    "RefinementResponse",
    "RejectRevisionRequest",
    "RevisionResponse",
    "RevisionVoteResponse",
    "ScreeningSummary",
    "SubmissionResponse",
    "SubmitRequest",
    "SynthesisResponse",
    "TallyResponse",
    "VoteCountsModel",
    "VoteResponse",
    "VotingSessionListResponse",
    "VotingSessionResponse",
]
