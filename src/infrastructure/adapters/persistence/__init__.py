"""PostgreSQL adapters for the repository ports."""

from src.infrastructure.adapters.persistence.audit_sink import PostgresAuditSink
from src.infrastructure.adapters.persistence.contributor_directory import (
    PostgresContributorDirectory,
)
from src.infrastructure.adapters.persistence.entry_repository import (
    PostgresEntryRepository,
)
from src.infrastructure.adapters.persistence.principle_repository import (
    PostgresPrincipleRepository,
)
from src.infrastructure.adapters.persistence.refinement_repository import (
    PostgresRefinementRepository,
)
from src.infrastructure.adapters.persistence.revision_repository import (
    PostgresRevisionRepository,
)
from src.infrastructure.adapters.persistence.submission_repository import (
    PostgresSubmissionRepository,
)
from src.infrastructure.adapters.persistence.voting_repository import (
    PostgresVotingRepository,
)

__all__: list[str] = [
    "PostgresAuditSink",
    "PostgresContributorDirectory",
    "PostgresEntryRepository",
    "PostgresPrincipleRepository",
    "PostgresRefinementRepository",
    "PostgresRevisionRepository",
    "PostgresSubmissionRepository",
    "PostgresVotingRepository",
]
