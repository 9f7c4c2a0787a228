"""Rule evaluator: runs a content type's rules and derives the Decision.

evaluate() is pure. The same (content_type, text, test_mode, topic_keyword)
always yields the same EvaluationResult; nothing is cached or persisted.

Decision derivation:
- FAIL  if any evaluated HARD rule fails
- DRAFT if no HARD rule fails but any evaluated SOFT rule fails
- PASS  otherwise

Under testMode, SKIP rules are never run, and neither are rules the caller
names in skip_rule_ids. They appear only in skipped_rule_ids, so they cannot
influence the decision or the fail lists.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from quality_lock.rules.models import (
    ContentType,
    Decision,
    EvaluationResult,
    RuleContext,
    RuleResult,
    Severity,
)
from quality_lock.rules.registry import get_rules, resolve_content_type
from quality_lock.rules.sections import ContentView

logger = logging.getLogger(__name__)


def derive_decision(results: Iterable[RuleResult]) -> Decision:
    """Collapse evaluated rule results into PASS / DRAFT / FAIL."""
    decision = Decision.PASS
    for result in results:
        if result.passed:
            continue
        if result.severity == Severity.HARD:
            return Decision.FAIL
        decision = Decision.DRAFT
    return decision


def evaluate(
    content_type: Union[str, ContentType],
    text: str,
    test_mode: bool = False,
    *,
    topic_keyword: Optional[str] = None,
    skip_rule_ids: Iterable[str] = (),
) -> EvaluationResult:
    """Evaluate ``text`` against the rule table for ``content_type``.

    Args:
        content_type: Registered content-type id, e.g. "social_caption_v1".
        text: Candidate text to check.
        test_mode: Apply each rule's testMode policy (SKIP / RELAX).
        topic_keyword: Optional keyword for keyword rules; they pass when
            no keyword is given.
        skip_rule_ids: Rules to leave out in any mode. They are reported in
            skipped_rule_ids like testMode SKIP rules; unknown ids are ignored.

    Returns:
        EvaluationResult with the decision and hard/soft fail lists.

    Raises:
        UnknownContentTypeError: if ``content_type`` has no rule table.
    """
    resolved = resolve_content_type(content_type)
    view = ContentView(text)

    skip = frozenset(skip_rule_ids)
    results: list[RuleResult] = []
    skipped: list[str] = []

    for rule in get_rules(resolved):
        if rule.rule_id in skip or rule.is_skipped(test_mode):
            skipped.append(rule.rule_id)
            continue
        ctx = RuleContext(
            view=view,
            bounds=rule.active_bounds(test_mode),
            topic_keyword=topic_keyword,
        )
        passed, message = rule.check(ctx)
        results.append(
            RuleResult(
                rule_id=rule.rule_id,
                layer=rule.layer,
                severity=rule.severity,
                passed=passed,
                message=message,
            )
        )

    hard_fails = tuple(
        r for r in results if not r.passed and r.severity == Severity.HARD
    )
    soft_fails = tuple(
        r for r in results if not r.passed and r.severity == Severity.SOFT
    )
    decision = derive_decision(results)

    logger.debug(
        "Evaluated %s: %s (%d hard, %d soft, %d skipped)",
        resolved.value,
        decision.value,
        len(hard_fails),
        len(soft_fails),
        len(skipped),
    )

    return EvaluationResult(
        content_type=resolved,
        decision=decision,
        hard_fails=hard_fails,
        soft_fails=soft_fails,
        results=tuple(results),
        skipped_rule_ids=tuple(skipped),
        test_mode=test_mode,
    )
