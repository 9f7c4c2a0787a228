"""Rule layer: content-type rule tables, section parsing, evaluation."""

from quality_lock.rules.evaluator import derive_decision, evaluate
from quality_lock.rules.models import (
    ContentType,
    Decision,
    EvaluationResult,
    Layer,
    RuleDefinition,
    RuleResult,
    Severity,
    TestModePolicy,
)
from quality_lock.rules.registry import get_rule, get_rules, relaxed_thresholds

__all__ = [
    "ContentType",
    "Decision",
    "EvaluationResult",
    "Layer",
    "RuleDefinition",
    "RuleResult",
    "Severity",
    "TestModePolicy",
    "derive_decision",
    "evaluate",
    "get_rule",
    "get_rules",
    "relaxed_thresholds",
]
