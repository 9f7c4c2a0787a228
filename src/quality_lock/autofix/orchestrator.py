"""Auto-fix orchestrator: bounded retry with a safe fallback.

State machine for one fix operation:

    INIT -> ATTEMPT(1) -> ACCEPTED
                       -> RETRY -> ATTEMPT(2) -> ACCEPTED
                                              -> FALLBACK

Each attempt builds a repair prompt (strict on retries), calls the external
generator, re-evaluates the candidate and compares it with the original. A
candidate is accepted only when it introduces no new failing HARD rule and
its similarity to the original is at or above the configured floor.

Generator errors and timeouts consume their attempt and count as a rejected
candidate, as does a candidate that repeats the input unchanged. When every
attempt is rejected the original text comes back unchanged with
used_fallback=True. That is a normal outcome, not an error.

Nothing here applies or publishes a candidate. ACCEPTED only means the
candidate is offered to a human reviewer.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol, Union

from quality_lock.analytics import (
    EVENT_ATTEMPT_COMPLETED,
    EVENT_ATTEMPT_STARTED,
    EVENT_FIX_COMPLETED,
    AnalyticsEmitter,
    bucket_duration,
)
from quality_lock.autofix.guardrails import GuardrailViolation, check_guardrails
from quality_lock.autofix.pattern_memory import PatternMemory, pattern_hash
from quality_lock.autofix.prompt_builder import (
    PromptMode,
    build_fix_prompt,
    summarize_fixes,
)
from quality_lock.config import Settings, get_settings
from quality_lock.rules.evaluator import evaluate
from quality_lock.rules.models import (
    ContentType,
    Decision,
    EvaluationResult,
    RuleResult,
)
from quality_lock.similarity import (
    DiffToken,
    SimilarityBucket,
    SimilarityResult,
    compare,
)

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^\s*```[\w-]*[ \t]*\n(?P<body>.*?)\n?```\s*$", re.DOTALL)


class TextGenerator(Protocol):
    """External text generator (the LLM). May raise or hang."""

    async def generate(self, system: str, user: str) -> str: ...


class FixState(str, Enum):
    INIT = "init"
    ATTEMPT = "attempt"
    RETRY = "retry"
    ACCEPTED = "accepted"
    FALLBACK = "fallback"
    NOT_NEEDED = "not_needed"


class RejectionReason(str, Enum):
    GENERATOR_ERROR = "generator_error"
    GENERATOR_TIMEOUT = "generator_timeout"
    EMPTY_RESPONSE = "empty_response"
    NEW_HARD_FAIL = "new_hard_fail"
    LOW_SIMILARITY = "low_similarity"
    NO_CHANGE = "no_change"


@dataclass(frozen=True)
class AutoFixAttempt:
    number: int
    input_text: str
    candidate_text: Optional[str]
    similarity: float  # raw score, internal only
    used_fallback: bool
    targeted_rule_ids: frozenset[str]
    accepted: bool = False
    rejection_reason: Optional[RejectionReason] = None
    new_hard_fail_ids: frozenset[str] = frozenset()
    guardrail_warnings: tuple[GuardrailViolation, ...] = ()


@dataclass(frozen=True)
class FixOutcome:
    state: FixState
    content_type: ContentType
    original_text: str
    output_text: str
    evaluation: EvaluationResult  # of output_text
    similarity: SimilarityResult  # original vs output_text
    attempts: tuple[AutoFixAttempt, ...] = ()
    used_fallback: bool = False
    pattern_hash: Optional[str] = None
    pattern_unreliable: bool = False
    targeted_rules: tuple[RuleResult, ...] = field(default=(), repr=False)

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    @property
    def decision(self) -> Decision:
        return self.evaluation.decision

    @property
    def hard_fails(self) -> tuple[RuleResult, ...]:
        return self.evaluation.hard_fails

    @property
    def soft_fails(self) -> tuple[RuleResult, ...]:
        return self.evaluation.soft_fails

    @property
    def diff_tokens(self) -> tuple[DiffToken, ...]:
        return self.similarity.tokens

    @property
    def similarity_bucket(self) -> SimilarityBucket:
        return self.similarity.bucket

    @property
    def fix_summary(self) -> str:
        return summarize_fixes(self.targeted_rules)


def strip_code_fences(text: str) -> str:
    """Remove a single wrapping ``` fence the generator was told not to add."""
    m = _CODE_FENCE.match(text)
    if m:
        return m.group("body").strip()
    return text.strip()


class AutoFixOrchestrator:
    """Runs bounded auto-fix operations against an injected generator.

    One instance may serve many concurrent operations: per-operation state
    lives inside run(). Callers serialize operations per draft.
    """

    def __init__(
        self,
        generator: TextGenerator,
        *,
        settings: Optional[Settings] = None,
        analytics: Optional[AnalyticsEmitter] = None,
        pattern_memory: Optional[PatternMemory] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._generator = generator
        self._settings = settings or get_settings()
        self._analytics = analytics
        self._pattern_memory = pattern_memory
        self._clock = clock

    async def run(
        self,
        content_type: Union[str, ContentType],
        text: str,
        *,
        test_mode: bool = False,
        language: Optional[str] = None,
        topic_keyword: Optional[str] = None,
        skip_rule_ids: Iterable[str] = (),
    ) -> FixOutcome:
        """Run one fix operation for ``text``.

        Raises:
            UnknownContentTypeError: before any generator call, if the
                content type is not registered.
        """
        language = language or self._settings.default_language
        started = self._clock()

        logger.debug("Auto-fix state %s for %s", FixState.INIT.value, content_type)
        skip_rule_ids = tuple(skip_rule_ids)
        original_eval = evaluate(
            content_type,
            text,
            test_mode,
            topic_keyword=topic_keyword,
            skip_rule_ids=skip_rule_ids,
        )
        resolved = original_eval.content_type
        targets = original_eval.failing
        if not targets:
            logger.info("Auto-fix not needed for %s: no actionable failures", resolved.value)
            return FixOutcome(
                state=FixState.NOT_NEEDED,
                content_type=resolved,
                original_text=text,
                output_text=text,
                evaluation=original_eval,
                similarity=compare(text, text),
            )

        attempts: list[AutoFixAttempt] = []
        max_attempts = self._settings.max_attempts

        for number in range(1, max_attempts + 1):
            is_last = number == max_attempts
            logger.debug(
                "Auto-fix state %s(%d) for %s", FixState.ATTEMPT.value, number, resolved.value
            )
            attempt, candidate_eval, candidate_sim = await self._attempt(
                number,
                resolved,
                text,
                original_eval,
                language=language,
                test_mode=test_mode,
                topic_keyword=topic_keyword,
                skip_rule_ids=skip_rule_ids,
                is_last=is_last,
            )
            attempts.append(attempt)

            if attempt.accepted:
                logger.info(
                    "Auto-fix accepted for %s on attempt %d (similarity %s)",
                    resolved.value,
                    number,
                    candidate_sim.bucket.value,
                )
                return self._finish(
                    FixState.ACCEPTED,
                    resolved,
                    text,
                    attempt.candidate_text,
                    candidate_eval,
                    candidate_sim,
                    attempts,
                    targets,
                    started,
                )

            if not is_last:
                logger.info(
                    "Auto-fix attempt %d for %s rejected (%s); %s(%d) in strict mode",
                    number,
                    resolved.value,
                    attempt.rejection_reason.value,
                    FixState.RETRY.value,
                    number + 1,
                )

        # FALLBACK
        logger.info(
            "Auto-fix for %s exhausted %d attempts; keeping original",
            resolved.value,
            max_attempts,
        )
        return self._finish(
            FixState.FALLBACK,
            resolved,
            text,
            text,
            original_eval,
            compare(text, text),
            attempts,
            targets,
            started,
        )

    # -- Internal helpers -----------------------------------------------------

    async def _attempt(
        self,
        number: int,
        content_type: ContentType,
        original: str,
        original_eval: EvaluationResult,
        *,
        language: str,
        test_mode: bool,
        topic_keyword: Optional[str],
        skip_rule_ids: tuple[str, ...],
        is_last: bool,
    ) -> tuple[AutoFixAttempt, Optional[EvaluationResult], Optional[SimilarityResult]]:
        """ATTEMPT(n): prompt, generate, re-evaluate, gate."""
        mode = PromptMode.for_attempt(number)
        targets = original_eval.failing
        target_ids = frozenset(r.rule_id for r in targets)
        prompt = build_fix_prompt(
            content_type,
            original,
            targets,
            attempt_number=number,
            mode=mode,
            language=language,
            test_mode=test_mode,
        )
        self._emit(
            EVENT_ATTEMPT_STARTED,
            {
                "content_type": content_type.value,
                "attempt_number": number,
                "prompt_mode": mode.value,
                "target_count": len(target_ids),
                "test_mode": test_mode,
            },
        )
        attempt_started = self._clock()

        def rejected(reason: RejectionReason, candidate: Optional[str] = None) -> AutoFixAttempt:
            return AutoFixAttempt(
                number=number,
                input_text=original,
                candidate_text=candidate,
                similarity=0.0,
                used_fallback=is_last,
                targeted_rule_ids=target_ids,
                rejection_reason=reason,
            )

        try:
            raw = await asyncio.wait_for(
                self._generator.generate(prompt.system, prompt.user),
                timeout=self._settings.generator_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Generator timed out on attempt %d for %s", number, content_type.value
            )
            attempt = rejected(RejectionReason.GENERATOR_TIMEOUT)
            self._emit_attempt_completed(attempt, content_type, None, attempt_started)
            return attempt, None, None
        except Exception:
            logger.warning(
                "Generator failed on attempt %d for %s",
                number,
                content_type.value,
                exc_info=True,
            )
            attempt = rejected(RejectionReason.GENERATOR_ERROR)
            self._emit_attempt_completed(attempt, content_type, None, attempt_started)
            return attempt, None, None

        candidate = strip_code_fences(raw) if isinstance(raw, str) else ""
        if not candidate:
            logger.warning(
                "Generator returned an empty response on attempt %d for %s",
                number,
                content_type.value,
            )
            attempt = rejected(RejectionReason.EMPTY_RESPONSE)
            self._emit_attempt_completed(attempt, content_type, None, attempt_started)
            return attempt, None, None

        if candidate.strip() == original.strip():
            logger.warning(
                "Generator returned the input unchanged on attempt %d for %s",
                number,
                content_type.value,
            )
            attempt = rejected(RejectionReason.NO_CHANGE, candidate)
            self._emit_attempt_completed(attempt, content_type, None, attempt_started)
            return attempt, None, None

        candidate_eval = evaluate(
            content_type,
            candidate,
            test_mode,
            topic_keyword=topic_keyword,
            skip_rule_ids=skip_rule_ids,
        )
        # compare() is CPU-bound on long texts; keep it off the event loop.
        loop = asyncio.get_event_loop()
        sim = await loop.run_in_executor(None, compare, original, candidate)

        # Acceptance gate
        new_hard = candidate_eval.hard_fail_ids - original_eval.hard_fail_ids
        reason: Optional[RejectionReason] = None
        if new_hard:
            reason = RejectionReason.NEW_HARD_FAIL
        elif sim.score < self._settings.similarity_floor:
            reason = RejectionReason.LOW_SIMILARITY
        accepted = reason is None

        warnings = tuple(check_guardrails(content_type, original, candidate, target_ids))

        attempt = AutoFixAttempt(
            number=number,
            input_text=original,
            candidate_text=candidate,
            similarity=sim.score,
            used_fallback=is_last and not accepted,
            targeted_rule_ids=target_ids,
            accepted=accepted,
            rejection_reason=reason,
            new_hard_fail_ids=frozenset(new_hard),
            guardrail_warnings=warnings,
        )
        self._emit_attempt_completed(attempt, content_type, sim, attempt_started)
        return attempt, candidate_eval, sim

    def _finish(
        self,
        state: FixState,
        content_type: ContentType,
        original: str,
        output: str,
        output_eval: EvaluationResult,
        output_sim: SimilarityResult,
        attempts: list[AutoFixAttempt],
        targets: tuple[RuleResult, ...],
        started: float,
    ) -> FixOutcome:
        used_fallback = state == FixState.FALLBACK
        key = pattern_hash(content_type, (r.rule_id for r in targets))
        unreliable = False
        if self._pattern_memory is not None:
            self._pattern_memory.record(key, accepted=state == FixState.ACCEPTED)
            unreliable = self._pattern_memory.is_unreliable(key)

        self._emit(
            EVENT_FIX_COMPLETED,
            {
                "content_type": content_type.value,
                "state": state.value,
                "attempt_count": len(attempts),
                "used_fallback": used_fallback,
                "decision": output_eval.decision.value,
                "similarity_bucket": output_sim.bucket.value,
                "duration_bucket": bucket_duration((self._clock() - started) * 1000),
                "pattern_unreliable": unreliable,
            },
        )

        return FixOutcome(
            state=state,
            content_type=content_type,
            original_text=original,
            output_text=output,
            evaluation=output_eval,
            similarity=output_sim,
            attempts=tuple(attempts),
            used_fallback=used_fallback,
            pattern_hash=key,
            pattern_unreliable=unreliable,
            targeted_rules=targets,
        )

    def _emit_attempt_completed(
        self,
        attempt: AutoFixAttempt,
        content_type: ContentType,
        sim: Optional[SimilarityResult],
        attempt_started: float,
    ) -> None:
        self._emit(
            EVENT_ATTEMPT_COMPLETED,
            {
                "content_type": content_type.value,
                "attempt_number": attempt.number,
                "accepted": attempt.accepted,
                "rejection_reason": (
                    attempt.rejection_reason.value if attempt.rejection_reason else None
                ),
                "similarity_bucket": sim.bucket.value if sim else None,
                "guardrail_warning_count": len(attempt.guardrail_warnings),
                "duration_bucket": bucket_duration((self._clock() - attempt_started) * 1000),
            },
        )

    def _emit(self, event: str, payload: dict) -> None:
        if self._analytics is None:
            return
        try:
            self._analytics.emit(event, payload)
        except Exception:
            logger.warning("Analytics emit failed for %s", event, exc_info=True)
