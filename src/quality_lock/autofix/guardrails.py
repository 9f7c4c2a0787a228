"""Advisory Safe-Edit Policy checks on auto-fix candidates.

These checks flag edits that look like the generator went beyond the listed
issues: new emoji or hashtags nobody asked for, AI filler phrasing, a
language switch, or a large expansion. They are surfaced on the attempt for
the reviewer and logged; they never change the accept/reject decision.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from quality_lock.rules.checks import (
    find_emoji,
    find_hashtags,
    find_meta_commentary,
    has_vietnamese,
)
from quality_lock.rules.models import ContentType, Layer
from quality_lock.rules.registry import get_rule

logger = logging.getLogger(__name__)

EMOJI_AUTHORIZED_RULES = frozenset({"reel_emoji_usage"})
HASHTAG_AUTHORIZED_RULES = frozenset({"reel_has_hashtags"})

MAX_EXPANSION = 1.3
MAX_STRUCTURE_EXPANSION = 1.5

# Short texts carry too few letters for the diacritics heuristic.
MIN_LANGUAGE_CHECK_CHARS = 50

TONE_SHIFT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\b(?:furthermore|moreover|additionally|consequently)\b",
        r"\b(?:it is worth noting|it should be noted)\b",
        r"\b(?:gonna|wanna|gotta|y'all)\b",
        r"\b(?:in today's world|in this day and age)\b",
        r"\b(?:leverage|utilize|facilitate|synergy)\b",
    ]
]


class ViolationSeverity(str, Enum):
    BLOCK = "block"
    WARNING = "warning"


class ViolationType(str, Enum):
    META_COMMENTARY = "meta_commentary"
    UNAUTHORIZED_EMOJI = "unauthorized_emoji"
    UNAUTHORIZED_HASHTAG = "unauthorized_hashtag"
    TONE_SHIFT = "tone_shift"
    LANGUAGE_CHANGE = "language_change"
    CONTENT_EXPANSION = "content_expansion"


@dataclass(frozen=True)
class GuardrailViolation:
    type: ViolationType
    description: str
    severity: ViolationSeverity = ViolationSeverity.WARNING

    @property
    def is_blocking(self) -> bool:
        return self.severity == ViolationSeverity.BLOCK


def check_guardrails(
    content_type: ContentType,
    original: str,
    candidate: str,
    targeted_rule_ids: Iterable[str],
) -> list[GuardrailViolation]:
    """Return every Safe-Edit Policy concern raised by ``candidate``."""
    targeted = set(targeted_rule_ids)
    violations: list[GuardrailViolation] = []

    phrase = find_meta_commentary(candidate)
    if phrase and not find_meta_commentary(original):
        violations.append(
            GuardrailViolation(
                ViolationType.META_COMMENTARY,
                f'Added "{phrase}"',
                ViolationSeverity.BLOCK,
            )
        )

    if not targeted & EMOJI_AUTHORIZED_RULES:
        new_emoji = find_emoji(candidate) - find_emoji(original)
        if new_emoji:
            violations.append(
                GuardrailViolation(
                    ViolationType.UNAUTHORIZED_EMOJI,
                    f"Added {len(new_emoji)} emoji not required by any issue",
                )
            )

    if not targeted & HASHTAG_AUTHORIZED_RULES:
        new_tags = set(find_hashtags(candidate)) - set(find_hashtags(original))
        if new_tags:
            violations.append(
                GuardrailViolation(
                    ViolationType.UNAUTHORIZED_HASHTAG,
                    f"Added hashtags: {', '.join(sorted(new_tags))}",
                )
            )

    for pattern in TONE_SHIFT_PATTERNS:
        m = pattern.search(candidate)
        if m and not pattern.search(original):
            violations.append(
                GuardrailViolation(ViolationType.TONE_SHIFT, f'Added "{m.group(0)}"')
            )
            break

    if (
        len(original) > MIN_LANGUAGE_CHECK_CHARS
        and len(candidate) > MIN_LANGUAGE_CHECK_CHARS
        and has_vietnamese(original) != has_vietnamese(candidate)
    ):
        direction = "Vietnamese to English" if has_vietnamese(original) else "English to Vietnamese"
        violations.append(
            GuardrailViolation(
                ViolationType.LANGUAGE_CHANGE,
                f"Language appears to have changed: {direction}",
                ViolationSeverity.BLOCK,
            )
        )

    limit = MAX_STRUCTURE_EXPANSION if _targets_structure(content_type, targeted) else MAX_EXPANSION
    if original.strip() and len(candidate) > len(original) * limit:
        violations.append(
            GuardrailViolation(
                ViolationType.CONTENT_EXPANSION,
                f"Candidate is more than {limit:g}x the original length",
            )
        )

    if violations:
        logger.info(
            "Guardrail warnings for %s candidate: %s",
            content_type.value,
            ", ".join(v.type.value for v in violations),
        )
    return violations


def _targets_structure(content_type: ContentType, rule_ids: set[str]) -> bool:
    """True when any targeted rule belongs to the STRUCTURE layer."""
    for rule_id in rule_ids:
        rule = get_rule(content_type, rule_id)
        if rule is not None and rule.layer == Layer.STRUCTURE:
            return True
    return False
