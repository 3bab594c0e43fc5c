"""Reply schemas for the language model evaluators.

Every evaluator reply is validated against one of these models before it
reaches the domain. Validation failures become EvaluatorResponseError.
"""

from typing import Literal

from pydantic import BaseModel, Field


class PrincipleJudgmentReply(BaseModel):
    # Score may fall outside [0, 1]; the scorer clamps it.
    score: float
    reasoning: str = ""


class SafetyReply(BaseModel):
    is_safe: bool
    flags: list[str] = Field(default_factory=list)
    reasoning: str = ""


class LanguageReply(BaseModel):
    fluency: float = Field(ge=0.0, le=1.0)
    grammar: float = Field(ge=0.0, le=1.0)
    notes: str = ""


class RewriteReply(BaseModel):
    text_ko: str = Field(min_length=1)
    text_en: str = ""
    change_summary: str = ""


class PlacementReply(BaseModel):
    chapter: int = Field(ge=1)
    theme: str = Field(min_length=1)
    reasoning: str = ""
    traditions: list[str] = Field(default_factory=list)
    reflection: str = ""


class PanelVoteReply(BaseModel):
    vote: Literal["for", "against", "abstain"]
    reasoning: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class SynthesisReply(BaseModel):
    necessity: str
    meaning_diff: str
    impact: str
    community_summary: str
    recommendation: Literal["approve", "reject", "conditional"]
    reasoning: str
