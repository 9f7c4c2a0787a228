"""Auto-fix prompt construction: failing rules in, (system, user) prompt out.

Assembles the repair request sent to the external generator from:
1. The failing rules (testMode SKIP rules removed, HARD before SOFT)
2. One human-authored instruction per rule from the closed instruction table
3. The expected output structure for the content type
4. The Safe-Edit Policy: normal on the first attempt, strict on retries

Output is byte-identical for identical inputs, so prompts can be golden-tested.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from quality_lock.autofix.instructions import instruction_for
from quality_lock.rules.models import ContentType, RuleResult, Severity
from quality_lock.rules.registry import get_rule, relaxed_thresholds, resolve_content_type

logger = logging.getLogger(__name__)


class PromptMode(str, Enum):
    NORMAL = "normal"
    STRICT = "strict"

    @classmethod
    def for_attempt(cls, attempt_number: int) -> PromptMode:
        return cls.STRICT if attempt_number > 1 else cls.NORMAL


@dataclass(frozen=True)
class FixPrompt:
    system: str
    user: str

    @property
    def is_passthrough(self) -> bool:
        return self.system == PASSTHROUGH_SYSTEM_PROMPT


PASSTHROUGH_SYSTEM_PROMPT = "Output the content exactly as provided."

LANGUAGE_NAMES = {
    "vi": "Vietnamese",
    "en": "English",
}

# Expected output structure per content type -- the shape a candidate must have
STRUCTURE_TEMPLATES: dict[ContentType, str] = {
    ContentType.SOCIAL_CAPTION: (
        "**Hook:** (1-2 sentences, attention-grabbing)\n"
        "\n"
        "**Body:** (2+ paragraphs separated by line breaks)\n"
        "\n"
        "**CTA:** (exactly 1 sentence with an action verb)"
    ),
    ContentType.SEO_BLOG: (
        "# H1 Title\n"
        "\n"
        "Introduction paragraph (50+ characters)\n"
        "\n"
        "## H2 Section Headings\n"
        "Content...\n"
        "\n"
        "## Kết luận / Conclusion"
    ),
    ContentType.VIDEO_SCRIPT: (
        "**Hook:** / **Opening:** (under 30 words)\n"
        "\n"
        "**Main:** / **Body:** / [SCENE] (2+ content sections)\n"
        "\n"
        "**CTA:** (call to action)"
    ),
    ContentType.EMAIL_MARKETING: (
        "**Subject:** (30-60 characters)\n"
        "\n"
        "**Preview:** (optional preheader)\n"
        "\n"
        "Email body (100+ characters)\n"
        "\n"
        "**CTA:** or [Button: text]"
    ),
    ContentType.LANDING_PAGE: (
        "**Headline:** (15 words or fewer)\n"
        "\n"
        "**Subheadline:** (supporting text)\n"
        "\n"
        "Benefits list (3+ bullets)\n"
        "\n"
        "**CTA:** or [Button: text]"
    ),
    ContentType.PRODUCT_DESCRIPTION: (
        "**Product:** / **Name:**\n"
        "\n"
        "Description (100+ characters)\n"
        "\n"
        "Features list (3+ bullets)\n"
        "\n"
        "Benefits\n"
        "\n"
        "**CTA:** (purchase action)"
    ),
    ContentType.REEL_CAPTION: (
        "Hook line (10 words or fewer)\n"
        "\n"
        "Body\n"
        "\n"
        "CTA (engagement action)\n"
        "\n"
        "#hashtags (3-10)"
    ),
}

SAFE_EDIT_POLICY = """SAFE-EDIT POLICY (MUST FOLLOW):
- Preserve the original topic, message and emotional tone
- Keep the same language as the original
- Do NOT add hashtags unless a listed issue requires them
- Do NOT add emoji unless a listed issue requires them
- Do NOT add sections beyond the expected structure
- Fix ONLY the listed issues and leave everything else unchanged
- Do NOT add explanations, notes or meta-commentary
- Do NOT wrap the output in code fences or markdown blocks
- Output ONLY the corrected content"""

STRICT_SAFE_EDIT_POLICY = """STRICT SAFE-EDIT POLICY (RETRY ATTEMPT, MUST FOLLOW EXACTLY):
- CRITICAL: Preserve the original creator's voice and tone
- CRITICAL: Keep the same language as the original
- CRITICAL: Make MINIMAL changes and only fix what is explicitly broken
- Do NOT add hashtags unless a listed issue requires them
- Do NOT add emoji unless a listed issue requires them
- Do NOT add sections beyond the expected structure
- Do NOT rewrite or paraphrase anything that was not flagged
- Do NOT change word choices unless the fix needs it
- Do NOT add explanations, notes or meta-commentary
- Do NOT wrap the output in code fences or markdown blocks
- Output ONLY the corrected content"""

SYSTEM_PROMPT_NORMAL = """You are a focused editor for marketing content.

Your ONLY job is to fix the specific quality issues listed for the content provided. You are not a rewriter.

Core principles:
1. MINIMAL EDITS: change only what the listed issues require.
2. PRESERVE VOICE: keep the creator's tone, style and word choices.
3. RESPECT LANGUAGE: Vietnamese stays Vietnamese, English stays English.
4. NO EXTRAS: no emoji, hashtags or sections unless an issue requires them."""

SYSTEM_PROMPT_STRICT = """You are an ultra-conservative editor for marketing content. This is a RETRY because the previous edit changed too much.

This time:
1. Make the ABSOLUTE MINIMUM change needed for each listed issue.
2. Do not rephrase, rewrite or "improve" anything that was not flagged.
3. If an issue asks for a paragraph break, add ONE line break and nothing else.
4. If an issue concerns the CTA, change only the CTA.
5. Keep every word that was not flagged.

You fix listed issues. You are not a creative rewriter."""


def build_fix_prompt(
    content_type: Union[str, ContentType],
    text: str,
    failing_rules: Iterable[RuleResult],
    *,
    attempt_number: int = 1,
    mode: Optional[PromptMode] = None,
    language: str = "vi",
    test_mode: bool = False,
) -> FixPrompt:
    """Build the repair prompt for one auto-fix attempt.

    Args:
        content_type: Content type the text was evaluated as.
        text: The original text to repair.
        failing_rules: Rule results from evaluate(); passed results are ignored.
        attempt_number: 1-based attempt; > 1 adds the retry marker.
        mode: Prompt mode; defaults to PromptMode.for_attempt(attempt_number).
        language: "vi" or "en", the language the output must stay in.
        test_mode: Drop SKIP rules and describe RELAX ranges.

    Returns:
        FixPrompt. When no actionable issue remains it is a pass-through
        prompt whose user part is ``text`` unchanged.
    """
    resolved = resolve_content_type(content_type)
    mode = mode or PromptMode.for_attempt(attempt_number)

    issues = _actionable_issues(resolved, failing_rules, test_mode)
    if not issues:
        return FixPrompt(system=PASSTHROUGH_SYSTEM_PROMPT, user=text)

    language_name = LANGUAGE_NAMES.get(language, language)
    sections = [
        _build_header_section(resolved, language_name, attempt_number, test_mode),
        _build_structure_section(resolved),
        _build_content_section(text),
        _build_issues_section(resolved, issues, test_mode),
        STRICT_SAFE_EDIT_POLICY if mode == PromptMode.STRICT else SAFE_EDIT_POLICY,
        f"Output MUST be in {language_name}.",
        "OUTPUT THE FIXED CONTENT ONLY:",
    ]
    system = SYSTEM_PROMPT_STRICT if mode == PromptMode.STRICT else SYSTEM_PROMPT_NORMAL
    return FixPrompt(system=system, user="\n\n".join(sections))


def summarize_fixes(failing_rules: Iterable[RuleResult]) -> str:
    """One-line summary of what an auto-fix targets, for reviewer display."""
    fails = [r for r in failing_rules if not r.passed]
    if not fails:
        return "No issues to fix."
    hard = sum(1 for r in fails if r.severity == Severity.HARD)
    soft = len(fails) - hard
    parts = []
    if hard:
        parts.append(f"{hard} critical issue{'s' if hard != 1 else ''}")
    if soft:
        parts.append(f"{soft} quality issue{'s' if soft != 1 else ''}")
    return f"Fixing {' and '.join(parts)}: {', '.join(r.rule_id for r in fails)}"


# -- Internal helpers ---------------------------------------------------------


def _actionable_issues(
    content_type: ContentType,
    failing_rules: Iterable[RuleResult],
    test_mode: bool,
) -> list[RuleResult]:
    """Failing, non-skipped rules, HARD first, one entry per rule id."""
    seen: set[str] = set()
    issues: list[RuleResult] = []
    for result in failing_rules:
        if result.passed or result.rule_id in seen:
            continue
        rule = get_rule(content_type, result.rule_id)
        if rule is not None and rule.is_skipped(test_mode):
            continue
        seen.add(result.rule_id)
        issues.append(result)
    return sorted(issues, key=lambda r: r.severity != Severity.HARD)


def _build_header_section(
    content_type: ContentType,
    language_name: str,
    attempt_number: int,
    test_mode: bool,
) -> str:
    parts = [
        f"CONTENT TYPE: {content_type.value}",
        f"LANGUAGE: {language_name}",
    ]
    if test_mode:
        parts.append("MODE: testMode (relaxed thresholds apply)")
        for rule_id, (default, relaxed) in sorted(relaxed_thresholds(content_type).items()):
            parts.append(f"- {rule_id}: {default} relaxed to {relaxed}")
    if attempt_number > 1:
        parts.append(f"RETRY ATTEMPT {attempt_number}: Be MORE CONSERVATIVE this time.")
    return "\n".join(parts)


def _build_structure_section(content_type: ContentType) -> str:
    template = STRUCTURE_TEMPLATES.get(content_type, "Preserve the original structure.")
    return f"EXPECTED OUTPUT STRUCTURE:\n---\n{template}\n---"


def _build_content_section(text: str) -> str:
    return f"ORIGINAL CONTENT TO FIX:\n---\n{text}\n---"


def _build_issues_section(
    content_type: ContentType,
    issues: list[RuleResult],
    test_mode: bool,
) -> str:
    parts = [f"ISSUES TO FIX ({len(issues)}):"]
    for result in issues:
        rule = get_rule(content_type, result.rule_id)
        bounds = rule.active_bounds(test_mode) if rule is not None else None
        instruction = instruction_for(content_type, result.rule_id, bounds)
        if instruction is None:
            logger.warning(
                "No fix instruction for %s/%s; using generic directive",
                content_type.value,
                result.rule_id,
            )
            instruction = f"Fix: {result.message}"
        prefix = "[CRITICAL]" if result.severity == Severity.HARD else "[QUALITY]"
        parts.append(f"{prefix} {instruction}")
    return "\n".join(parts)
