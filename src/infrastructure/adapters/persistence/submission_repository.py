"""PostgreSQL submission repository.

Submissions are updated in place; screening evaluations are append-only
rows with the nested results stored as JSONB.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domain.errors.submission import SubmissionNotFoundError
from src.domain.models.compliance import (
    CheckType,
    ComplianceEvaluation,
    ComplianceResult,
    LanguageQuality,
    PlagiarismResult,
    PrincipleScore,
    SafetyAssessment,
    SafetyFlag,
    ScreeningRecommendation,
)
from src.domain.models.submission import Submission, SubmissionStatus, SubmissionType
from src.infrastructure.adapters.persistence.json_columns import dump_json, load_json

_SUBMISSION_COLUMNS = """
    id, owner_id, submission_type, title, raw_text, status, compliance_score,
    rejection_reason, related_entry_id, created_at, updated_at
"""


def _submission_params(submission: Submission) -> dict[str, Any]:
    return {
        "id": submission.id,
        "owner_id": submission.owner_id,
        "submission_type": submission.submission_type.value,
        "title": submission.title,
        "raw_text": submission.raw_text,
        "status": submission.status.value,
        "compliance_score": submission.compliance_score,
        "rejection_reason": submission.rejection_reason,
        "related_entry_id": submission.related_entry_id,
        "created_at": submission.created_at,
        "updated_at": submission.updated_at,
    }


def _row_to_submission(row: Mapping[str, Any]) -> Submission:
    return Submission(
        id=UUID(str(row["id"])),
        owner_id=row["owner_id"],
        submission_type=SubmissionType(row["submission_type"]),
        title=row["title"],
        raw_text=row["raw_text"],
        status=SubmissionStatus(row["status"]),
        compliance_score=row["compliance_score"],
        rejection_reason=row["rejection_reason"],
        related_entry_id=row["related_entry_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_evaluation(row: Mapping[str, Any]) -> ComplianceEvaluation:
    safety = load_json(row["safety"])
    language = load_json(row["language"])
    plagiarism = load_json(row["plagiarism"])
    compliance = ComplianceResult(
        check_type=CheckType(row["check_type"]),
        overall_score=row["overall_score"],
        threshold=row["threshold"],
        compliant=row["compliant"],
        principle_scores=tuple(
            PrincipleScore(**score) for score in load_json(row["principle_scores"])
        ),
        recommendation=row["compliance_recommendation"],
    )
    return ComplianceEvaluation(
        id=UUID(str(row["id"])),
        subject_id=UUID(str(row["subject_id"])),
        compliance=compliance,
        safety=SafetyAssessment(
            is_safe=safety["is_safe"],
            flags=tuple(SafetyFlag(flag) for flag in safety["flags"]),
            reasoning=safety["reasoning"],
        ),
        language=LanguageQuality(**language),
        plagiarism=PlagiarismResult(**plagiarism),
        recommendation=ScreeningRecommendation(row["recommendation"]),
        created_at=row["created_at"],
    )


class PostgresSubmissionRepository:
    """SubmissionRepositoryProtocol over the submissions tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, submission: Submission) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text(f"""
                    INSERT INTO submissions ({_SUBMISSION_COLUMNS})
                    VALUES (
                        :id, :owner_id, :submission_type, :title, :raw_text,
                        :status, :compliance_score, :rejection_reason,
                        :related_entry_id, :created_at, :updated_at
                    )
                """),
                _submission_params(submission),
            )

    async def get(self, submission_id: UUID) -> Submission | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {_SUBMISSION_COLUMNS} FROM submissions WHERE id = :id"),
                {"id": submission_id},
            )
            row = result.mappings().first()
            return _row_to_submission(row) if row else None

    async def update(self, submission: Submission) -> None:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("""
                    UPDATE submissions SET
                        status = :status,
                        compliance_score = :compliance_score,
                        rejection_reason = :rejection_reason,
                        related_entry_id = :related_entry_id,
                        updated_at = :updated_at
                    WHERE id = :id
                """),
                _submission_params(submission),
            )
            if result.rowcount == 0:
                raise SubmissionNotFoundError(submission.id)

    async def save_evaluation(self, evaluation: ComplianceEvaluation) -> None:
        compliance = evaluation.compliance
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO compliance_evaluations (
                        id, subject_id, check_type, overall_score, threshold,
                        compliant, principle_scores, compliance_recommendation,
                        safety, language, plagiarism, recommendation, created_at
                    ) VALUES (
                        :id, :subject_id, :check_type, :overall_score, :threshold,
                        :compliant, CAST(:principle_scores AS JSONB),
                        :compliance_recommendation, CAST(:safety AS JSONB),
                        CAST(:language AS JSONB), CAST(:plagiarism AS JSONB),
                        :recommendation, :created_at
                    )
                """),
                {
                    "id": evaluation.id,
                    "subject_id": evaluation.subject_id,
                    "check_type": compliance.check_type.value,
                    "overall_score": compliance.overall_score,
                    "threshold": compliance.threshold,
                    "compliant": compliance.compliant,
                    "principle_scores": dump_json(
                        [
                            {
                                "principle_id": s.principle_id,
                                "principle_name": s.principle_name,
                                "weight": s.weight,
                                "score": s.score,
                                "rationale": s.rationale,
                                "failed": s.failed,
                            }
                            for s in compliance.principle_scores
                        ]
                    ),
                    "compliance_recommendation": compliance.recommendation,
                    "safety": dump_json(
                        {
                            "is_safe": evaluation.safety.is_safe,
                            "flags": [f.value for f in evaluation.safety.flags],
                            "reasoning": evaluation.safety.reasoning,
                        }
                    ),
                    "language": dump_json(
                        {
                            "fluency": evaluation.language.fluency,
                            "grammar": evaluation.language.grammar,
                            "notes": evaluation.language.notes,
                        }
                    ),
                    "plagiarism": dump_json(
                        {
                            "is_original": evaluation.plagiarism.is_original,
                            "max_similarity": evaluation.plagiarism.max_similarity,
                            "checked": evaluation.plagiarism.checked,
                        }
                    ),
                    "recommendation": evaluation.recommendation.value,
                    "created_at": evaluation.created_at,
                },
            )

    async def list_evaluations(self, submission_id: UUID) -> list[ComplianceEvaluation]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT id, subject_id, check_type, overall_score, threshold,
                           compliant, principle_scores, compliance_recommendation,
                           safety, language, plagiarism, recommendation, created_at
                    FROM compliance_evaluations
                    WHERE subject_id = :subject_id
                    ORDER BY created_at ASC, id ASC
                """),
                {"subject_id": submission_id},
            )
            return [_row_to_evaluation(row) for row in result.mappings()]
