"""Pydantic schemas for the consumer/UI contract.

Requests are validated on the way in; responses carry decisions, rule
results, diff tokens and the similarity bucket. The raw similarity score is
not part of any response model.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from quality_lock.autofix.orchestrator import FixOutcome, FixState
from quality_lock.rules.models import (
    ContentType,
    Decision,
    EvaluationResult,
    Layer,
    Severity,
)
from quality_lock.similarity import SimilarityBucket, TokenKind


# -- Request Schemas ---------------------------------------------------------


class AutoFixRequest(BaseModel):
    """Input for one auto-fix operation."""

    content_type: ContentType
    text: str = Field(..., min_length=1)
    test_mode: bool = False
    language: Optional[Literal["vi", "en"]] = None
    topic_keyword: Optional[str] = None
    skip_rule_ids: list[str] = Field(default_factory=list)


# -- Rule Schemas ------------------------------------------------------------


class RuleResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rule_id: str
    layer: Layer
    severity: Severity
    passed: bool
    message: str


class EvaluationResponse(BaseModel):
    content_type: ContentType
    decision: Decision
    hard_fails: list[RuleResultResponse] = Field(default_factory=list)
    soft_fails: list[RuleResultResponse] = Field(default_factory=list)
    skipped_rule_ids: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: EvaluationResult) -> "EvaluationResponse":
        return cls(
            content_type=result.content_type,
            decision=result.decision,
            hard_fails=[RuleResultResponse.model_validate(r) for r in result.hard_fails],
            soft_fails=[RuleResultResponse.model_validate(r) for r in result.soft_fails],
            skipped_rule_ids=list(result.skipped_rule_ids),
        )


# -- Auto-Fix Schemas --------------------------------------------------------


class DiffTokenResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    text: str
    kind: TokenKind


class FixOutcomeResponse(BaseModel):
    """What the reviewer UI receives. Applying the candidate is the UI's call."""

    state: FixState
    content_type: ContentType
    decision: Decision
    hard_fails: list[RuleResultResponse] = Field(default_factory=list)
    soft_fails: list[RuleResultResponse] = Field(default_factory=list)
    diff_tokens: list[DiffTokenResponse] = Field(default_factory=list)
    similarity_bucket: SimilarityBucket
    attempt_count: int = Field(..., ge=0)
    used_fallback: bool
    output_text: str
    fix_summary: str

    @classmethod
    def from_outcome(cls, outcome: FixOutcome) -> "FixOutcomeResponse":
        return cls(
            state=outcome.state,
            content_type=outcome.content_type,
            decision=outcome.decision,
            hard_fails=[RuleResultResponse.model_validate(r) for r in outcome.hard_fails],
            soft_fails=[RuleResultResponse.model_validate(r) for r in outcome.soft_fails],
            diff_tokens=[DiffTokenResponse.model_validate(t) for t in outcome.diff_tokens],
            similarity_bucket=outcome.similarity_bucket,
            attempt_count=outcome.attempt_count,
            used_fallback=outcome.used_fallback,
            output_text=outcome.output_text,
            fix_summary=outcome.fix_summary,
        )
