"""Domain models for the governance pipeline.

Contains value objects and aggregates that represent core business
concepts. These models are immutable and contain no infrastructure
dependencies.
"""

from src.domain.models.audit_event import ActorKind, AuditEvent, AuditEventType
from src.domain.models.automated_voter import (
    AutomatedVoter,
    PanelComposition,
    PanelJudgment,
    Perspective,
    PerspectiveCategory,
)
from src.domain.models.compliance import (
    CheckType,
    ComplianceEvaluation,
    ComplianceResult,
    Principle,
    PrincipleScore,
    ScreeningRecommendation,
)
from src.domain.models.published_entry import (
    ChangeType,
    ChapterSummary,
    EntryVersion,
    PlacementDecision,
    PublishedEntry,
)
from src.domain.models.refinement import RefinementRecord, RefinementStage
from src.domain.models.revision_proposal import (
    CouncilMember,
    DiscussionEntry,
    RevisionProposal,
    RevisionStatus,
    RevisionSynthesis,
)
from src.domain.models.submission import Submission, SubmissionStatus, SubmissionType
from src.domain.models.vote import Vote, VoteChoice, VoterKind
from src.domain.models.voting_session import (
    SessionStatus,
    SubjectType,
    TallyResult,
    VotingSession,
)

__all__: list[str] = [
    "ActorKind",
    "AuditEvent",
    "AuditEventType",
    "AutomatedVoter",
    "ChangeType",
    "ChapterSummary",
    "CheckType",
    "ComplianceEvaluation",
    "ComplianceResult",
    "CouncilMember",
    "DiscussionEntry",
    "EntryVersion",
    "PanelComposition",
    "PanelJudgment",
    "Perspective",
    "PerspectiveCategory",
    "PlacementDecision",
    "Principle",
    "PrincipleScore",
    "PublishedEntry",
    "RefinementRecord",
    "RefinementStage",
    "RevisionProposal",
    "RevisionStatus",
    "RevisionSynthesis",
    "ScreeningRecommendation",
    "SessionStatus",
    "SubjectType",
    "Submission",
    "SubmissionStatus",
    "SubmissionType",
    "TallyResult",
    "Vote",
    "VoteChoice",
    "VoterKind",
    "VotingSession",
]
