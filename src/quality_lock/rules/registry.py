"""Rule registry: the per-content-type rule tables and their check predicates.

Each content type owns a fixed table of RuleDefinitions, organised in three
layers:

1. STRUCTURE -- the required shape of the output (HARD)
2. RED_FLAG -- severe defects such as AI meta-commentary or spam (HARD)
3. QUALITY -- stylistic guidance (SOFT)

Every rule also declares its testMode policy: SAME, SKIP (not evaluated under
testMode) or RELAX (evaluated against a wider, documented range).

The table is built and validated once at import. A malformed table raises
RuleRegistryError immediately so it can never surface as a content decision.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

from quality_lock.exceptions import RuleRegistryError, UnknownContentTypeError
from quality_lock.rules.checks import (
    ACTION_INTENT_PATTERNS,
    BENEFIT_PATTERNS,
    BUTTON_MARKUP,
    CONCLUSION_HEADING,
    CONVERSATIONAL_PATTERNS,
    ENGAGEMENT_CTA_PATTERNS,
    GENERIC_CTA_PATTERNS,
    PERSONALIZATION_TOKEN,
    PURCHASE_CTA_PATTERNS,
    SOCIAL_PROOF_PATTERNS,
    SPAM_PATTERNS,
    count_emoji,
    count_keyword,
    find_first,
    find_hashtags,
    find_meta_commentary,
    matches_any,
    split_paragraphs,
    split_sentences,
    word_count,
)
from quality_lock.rules.models import (
    Bounds,
    CheckFn,
    ContentType,
    Layer,
    PolicyKind,
    RuleContext,
    RuleDefinition,
    Severity,
    TestModePolicy,
)
from quality_lock.rules.sections import ContentView, SectionKind, match_heading


CheckOutcome = tuple[bool, str]

SAME = TestModePolicy.same()
SKIP = TestModePolicy.skip()

# Fixed limits (not relaxable)
SOCIAL_MAX_SECTIONS = 4
SOCIAL_MAX_HOOK_SENTENCES = 2
SOCIAL_MAX_SENTENCE_WORDS = 25
SOCIAL_SHORT_BODY_CHARS = 100
SEO_MIN_INTRO_CHARS = 50
SEO_MAX_PARAGRAPH_WORDS = 150
VIDEO_MIN_SECTIONS = 2
VIDEO_MAX_HOOK_WORDS = 30
MIN_BODY_CHARS = 100
LANDING_MAX_HEADLINE_WORDS = 15
MIN_BULLETS = 3
REEL_MAX_HOOK_WORDS = 10
REEL_MAX_CHARS = 300

RULE_PREFIXES: dict[ContentType, str] = {
    ContentType.SOCIAL_CAPTION: "social_",
    ContentType.SEO_BLOG: "seo_",
    ContentType.VIDEO_SCRIPT: "video_",
    ContentType.EMAIL_MARKETING: "email_",
    ContentType.LANDING_PAGE: "landing_",
    ContentType.PRODUCT_DESCRIPTION: "product_",
    ContentType.REEL_CAPTION: "reel_",
}


# =============================================================================
# Shared predicates
# =============================================================================


def _no_meta_commentary(ctx: RuleContext) -> CheckOutcome:
    phrase = find_meta_commentary(ctx.text)
    if phrase:
        return False, f'Meta-commentary detected: "{phrase}"'
    return True, "No meta-commentary"


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def _labelled_text(view: ContentView, *kinds: SectionKind) -> str:
    """Concatenated content of all sections, optionally limited to ``kinds``."""
    return "\n".join(
        s.content for s in view.sections if not kinds or s.kind in kinds
    )


def _body_text(
    view: ContentView,
    single_line: Iterable[SectionKind],
    excluded: Iterable[SectionKind] = (SectionKind.CTA,),
) -> str:
    """Free-form body text with header-style lines and CTAs taken out.

    Sections in ``single_line`` own only their first line (e.g. a subject);
    whatever follows them is body copy. Sections in ``excluded`` are dropped.
    """
    single_line = set(single_line)
    excluded = set(excluded)
    parts = [view.preamble]
    for section in view.sections:
        if section.kind in excluded:
            continue
        if section.kind in single_line:
            _, _, rest = section.content.partition("\n")
            parts.append(rest)
        else:
            parts.append(section.content)
    return "\n\n".join(p.strip() for p in parts if p.strip())


def _cta_present(ctx: RuleContext) -> CheckOutcome:
    if ctx.view.has_section(SectionKind.CTA) or BUTTON_MARKUP.search(ctx.text):
        return True, "CTA present"
    return False, "Missing CTA section or [Button: ...]"


def _bullet_list(ctx: RuleContext) -> CheckOutcome:
    count = len(ctx.view.bullets)
    if count >= MIN_BULLETS:
        return True, f"{count} bullet points"
    return False, f"Only {count} bullet points (need at least {MIN_BULLETS})"


# =============================================================================
# social_caption_v1
# =============================================================================

_SOCIAL_REQUIRED = (SectionKind.HOOK, SectionKind.BODY, SectionKind.CTA)


def _social_structure_lock(ctx: RuleContext) -> CheckOutcome:
    missing = [k.name for k in _SOCIAL_REQUIRED if not ctx.view.has_section(k)]
    if missing:
        return False, f"Missing required sections: {', '.join(missing)}"
    return True, "Hook, Body and CTA present"


def _social_max_sections(ctx: RuleContext) -> CheckOutcome:
    count = len(ctx.view.sections)
    if count > SOCIAL_MAX_SECTIONS:
        return False, f"{count} labelled sections (maximum {SOCIAL_MAX_SECTIONS})"
    return True, f"{count} labelled sections"


def _social_cta_not_generic(ctx: RuleContext) -> CheckOutcome:
    cta = ctx.view.section(SectionKind.CTA)
    if cta is None or len(cta.content) < 5:
        return False, "CTA is missing or too short"
    if find_first(GENERIC_CTA_PATTERNS, cta.content):
        return False, f'Generic CTA: "{cta.content}"'
    return True, "CTA is specific"


def _social_hook_length(ctx: RuleContext) -> CheckOutcome:
    hook = ctx.view.section(SectionKind.HOOK)
    if hook is None:
        return True, "No hook to measure"
    count = len(split_sentences(hook.content))
    if count > SOCIAL_MAX_HOOK_SENTENCES:
        return False, f"Hook has {count} sentences (maximum {SOCIAL_MAX_HOOK_SENTENCES})"
    return True, f"Hook has {count} sentences"


def _social_body_formatting(ctx: RuleContext) -> CheckOutcome:
    body = ctx.view.section(SectionKind.BODY)
    if body is None or len(body.content) < SOCIAL_SHORT_BODY_CHARS:
        return True, "Body is short enough to stay as one paragraph"
    paragraphs = [line for line in body.content.splitlines() if line.strip()]
    if len(paragraphs) < 2:
        return False, "Body is a single block of text (needs 2+ paragraphs)"
    return True, f"Body has {len(paragraphs)} paragraphs"


def _social_sentence_length(ctx: RuleContext) -> CheckOutcome:
    text = _labelled_text(ctx.view, SectionKind.HOOK, SectionKind.BODY, SectionKind.CTA)
    long_sentences = [
        s for s in split_sentences(text or ctx.text)
        if word_count(s) > SOCIAL_MAX_SENTENCE_WORDS
    ]
    if long_sentences:
        return False, (
            f"{len(long_sentences)} sentence(s) exceed "
            f"{SOCIAL_MAX_SENTENCE_WORDS} words"
        )
    return True, "Sentence length is mobile-friendly"


def _social_topic_keyword(ctx: RuleContext) -> CheckOutcome:
    if not ctx.topic_keyword:
        return True, "No topic keyword provided"
    if count_keyword(ctx.text, ctx.topic_keyword):
        return True, f'Topic keyword "{ctx.topic_keyword}" present'
    return False, f'Topic keyword "{ctx.topic_keyword}" not found'


def _social_cta_action_verb(ctx: RuleContext) -> CheckOutcome:
    cta = ctx.view.section(SectionKind.CTA)
    if cta is None or not cta.content:
        return False, "No CTA to check"
    sentences = split_sentences(cta.content)
    if len(sentences) != 1:
        return False, f"CTA has {len(sentences)} sentences (expected exactly 1)"
    if not matches_any(ACTION_INTENT_PATTERNS, cta.content):
        return False, "CTA lacks a clear action verb"
    return True, "CTA is one sentence with action intent"


# =============================================================================
# seo_blog_v1
# =============================================================================


def _seo_title_present(ctx: RuleContext) -> CheckOutcome:
    if any(h.level == 1 for h in ctx.view.headings):
        return True, "H1 title present"
    return False, "Missing H1 title (# Title)"


def _seo_headings_hierarchy(ctx: RuleContext) -> CheckOutcome:
    headings = ctx.view.headings
    h1_count = sum(1 for h in headings if h.level == 1)
    if h1_count != 1:
        return False, f"Expected exactly one H1, found {h1_count}"
    if headings[0].level != 1:
        return False, "The H1 must be the first heading"
    for prev, cur in zip(headings, headings[1:]):
        if cur.level > prev.level + 1:
            return False, (
                f'Heading level jumps from H{prev.level} to H{cur.level} at "{cur.title}"'
            )
    return True, "Heading hierarchy is valid"


def _seo_intro_present(ctx: RuleContext) -> CheckOutcome:
    lines = ctx.view.lines
    h1 = next((h for h in ctx.view.headings if h.level == 1), None)
    first_h2 = next((h for h in ctx.view.headings if h.level == 2), None)
    start = h1.line_index + 1 if h1 else 0
    end = first_h2.line_index if first_h2 else len(lines)
    intro = "\n".join(
        line for line in lines[start:end] if not line.lstrip().startswith("#")
    ).strip()
    if len(intro) >= SEO_MIN_INTRO_CHARS:
        return True, "Introduction present"
    return False, (
        f"Introduction is {len(intro)} characters "
        f"(need {SEO_MIN_INTRO_CHARS}+ before the first H2)"
    )


def _seo_keyword_density(ctx: RuleContext) -> CheckOutcome:
    if not ctx.topic_keyword:
        return True, "No target keyword provided"
    count = count_keyword(ctx.text, ctx.topic_keyword)
    if ctx.bounds.contains(count):
        return True, f'Keyword "{ctx.topic_keyword}" appears {count} times'
    return False, (
        f'Keyword "{ctx.topic_keyword}" appears {count} times '
        f"(expected {ctx.bounds})"
    )


def _seo_paragraph_length(ctx: RuleContext) -> CheckOutcome:
    paragraphs = [
        p for p in split_paragraphs(ctx.text) if not p.lstrip().startswith("#")
    ]
    too_long = [p for p in paragraphs if word_count(p) > SEO_MAX_PARAGRAPH_WORDS]
    if too_long:
        return False, (
            f"{len(too_long)} paragraph(s) exceed {SEO_MAX_PARAGRAPH_WORDS} words"
        )
    return True, "Paragraph length OK"


def _seo_has_conclusion(ctx: RuleContext) -> CheckOutcome:
    for heading in ctx.view.headings:
        if heading.level == 2 and CONCLUSION_HEADING.search(heading.title):
            return True, "Conclusion section present"
    return False, "Missing H2 conclusion section"


# =============================================================================
# video_script_v1
# =============================================================================


def _video_hook_present(ctx: RuleContext) -> CheckOutcome:
    if ctx.view.has_section(SectionKind.HOOK):
        return True, "Hook present"
    return False, "Missing Hook/Opening section"


def _video_sections_present(ctx: RuleContext) -> CheckOutcome:
    count = sum(1 for s in ctx.view.sections if s.kind != SectionKind.HOOK)
    if count >= VIDEO_MIN_SECTIONS:
        return True, f"{count} content sections"
    return False, f"Only {count} content sections (need {VIDEO_MIN_SECTIONS}+)"


def _video_hook_duration(ctx: RuleContext) -> CheckOutcome:
    hook = ctx.view.section(SectionKind.HOOK)
    if hook is None:
        return True, "No hook to measure"
    words = word_count(hook.content)
    if words > VIDEO_MAX_HOOK_WORDS:
        return False, f"Hook is {words} words (maximum {VIDEO_MAX_HOOK_WORDS})"
    return True, f"Hook is {words} words"


def _video_has_cta(ctx: RuleContext) -> CheckOutcome:
    if ctx.view.has_section(SectionKind.CTA):
        return True, "CTA present"
    return False, "Missing call-to-action"


def _video_conversational(ctx: RuleContext) -> CheckOutcome:
    if matches_any(CONVERSATIONAL_PATTERNS, ctx.text):
        return True, "Conversational tone"
    return False, "No questions or direct address to the viewer"


# =============================================================================
# email_marketing_v1
# =============================================================================


def _email_subject(view: ContentView) -> Optional[str]:
    section = view.section(SectionKind.SUBJECT)
    if section is None:
        return None
    return _first_line(section.content) or None


def _email_subject_present(ctx: RuleContext) -> CheckOutcome:
    if _email_subject(ctx.view):
        return True, "Subject line present"
    return False, "Missing subject line (**Subject:** ...)"


def _email_body_present(ctx: RuleContext) -> CheckOutcome:
    body = _body_text(ctx.view, single_line=(SectionKind.SUBJECT, SectionKind.PREVIEW))
    if len(body) >= MIN_BODY_CHARS:
        return True, f"Body is {len(body)} characters"
    return False, f"Body is {len(body)} characters (need {MIN_BODY_CHARS}+)"


def _email_no_spam_words(ctx: RuleContext) -> CheckOutcome:
    phrase = find_first(SPAM_PATTERNS, ctx.text)
    if phrase:
        return False, f'Spam trigger detected: "{phrase}"'
    return True, "No spam triggers"


def _email_subject_length(ctx: RuleContext) -> CheckOutcome:
    subject = _email_subject(ctx.view)
    if subject is None:
        return True, "No subject line to measure"
    length = len(subject)
    if ctx.bounds.contains(length):
        return True, f"Subject is {length} characters"
    return False, f"Subject is {length} characters (expected {ctx.bounds})"


def _email_personalization(ctx: RuleContext) -> CheckOutcome:
    if PERSONALIZATION_TOKEN.search(ctx.text):
        return True, "Personalization token present"
    return False, "No personalization token such as {{name}}"


# =============================================================================
# landing_page_v1
# =============================================================================


def _headline(view: ContentView, kind: SectionKind) -> Optional[str]:
    section = view.section(kind)
    if section is not None and section.content:
        return _first_line(section.content)
    h1 = next((h for h in view.headings if h.level == 1), None)
    return h1.title if h1 else None


def _landing_headline_present(ctx: RuleContext) -> CheckOutcome:
    if _headline(ctx.view, SectionKind.HEADLINE):
        return True, "Headline present"
    return False, "Missing headline (**Headline:** or # H1)"


def _landing_headline_length(ctx: RuleContext) -> CheckOutcome:
    headline = _headline(ctx.view, SectionKind.HEADLINE)
    if not headline:
        return True, "No headline to measure"
    words = word_count(headline)
    if words > LANDING_MAX_HEADLINE_WORDS:
        return False, f"Headline is {words} words (maximum {LANDING_MAX_HEADLINE_WORDS})"
    return True, f"Headline is {words} words"


def _landing_social_proof(ctx: RuleContext) -> CheckOutcome:
    if ctx.view.has_section(SectionKind.SOCIAL_PROOF) or matches_any(
        SOCIAL_PROOF_PATTERNS, ctx.text
    ):
        return True, "Social proof present"
    return False, "No testimonial, review or rating"


# =============================================================================
# product_description_v1
# =============================================================================


def _product_name_present(ctx: RuleContext) -> CheckOutcome:
    if _headline(ctx.view, SectionKind.PRODUCT):
        return True, "Product name present"
    return False, "Missing product name (**Product:** or # H1)"


def _product_desc_present(ctx: RuleContext) -> CheckOutcome:
    section = ctx.view.section(SectionKind.DESCRIPTION)
    if section is not None:
        description = section.content
    else:
        description = _body_text(ctx.view, single_line=(SectionKind.PRODUCT,))
    if len(description) >= MIN_BODY_CHARS:
        return True, f"Description is {len(description)} characters"
    return False, (
        f"Description is {len(description)} characters (need {MIN_BODY_CHARS}+)"
    )


def _product_benefits(ctx: RuleContext) -> CheckOutcome:
    if ctx.view.has_section(SectionKind.BENEFITS) or matches_any(
        BENEFIT_PATTERNS, ctx.text
    ):
        return True, "Benefits described"
    return False, "No customer benefits described"


def _product_cta(ctx: RuleContext) -> CheckOutcome:
    if matches_any(PURCHASE_CTA_PATTERNS, ctx.text):
        return True, "Purchase CTA present"
    return False, "No purchase call-to-action"


# =============================================================================
# reel_caption_v1
# =============================================================================


def _reel_hook_line(view: ContentView) -> str:
    if not view.non_empty_lines:
        return ""
    line = view.non_empty_lines[0]
    heading = match_heading(line)
    if heading is not None:
        line = heading[2].strip()
    return line


def _reel_hook_present(ctx: RuleContext) -> CheckOutcome:
    hook = _reel_hook_line(ctx.view)
    if not hook or hook.startswith("#"):
        return False, "First line is not a hook"
    words = word_count(hook)
    if words > REEL_MAX_HOOK_WORDS:
        return False, f"Hook line is {words} words (maximum {REEL_MAX_HOOK_WORDS})"
    return True, "First line is a hook"


def _reel_length_limit(ctx: RuleContext) -> CheckOutcome:
    length = len(ctx.view.stripped)
    if length > REEL_MAX_CHARS:
        return False, f"Caption is {length} characters (maximum {REEL_MAX_CHARS})"
    return True, f"Caption is {length} characters"


def _reel_has_hashtags(ctx: RuleContext) -> CheckOutcome:
    count = len(find_hashtags(ctx.text))
    if ctx.bounds.contains(count):
        return True, f"{count} hashtags"
    return False, f"{count} hashtags (expected {ctx.bounds})"


def _reel_emoji_usage(ctx: RuleContext) -> CheckOutcome:
    count = count_emoji(ctx.text)
    if ctx.bounds.contains(count):
        return True, f"{count} emoji"
    return False, f"{count} emoji (expected {ctx.bounds})"


def _reel_cta_present(ctx: RuleContext) -> CheckOutcome:
    if matches_any(ENGAGEMENT_CTA_PATTERNS, ctx.text):
        return True, "Engagement CTA present"
    return False, "No engagement call-to-action"


# =============================================================================
# Rule tables
# =============================================================================


def _rule(
    content_type: ContentType,
    rule_id: str,
    layer: Layer,
    severity: Severity,
    description: str,
    check: CheckFn,
    test_mode: TestModePolicy = SAME,
    bounds: Optional[Bounds] = None,
) -> RuleDefinition:
    return RuleDefinition(
        content_type=content_type,
        rule_id=rule_id,
        layer=layer,
        severity=severity,
        description=description,
        check=check,
        test_mode=test_mode,
        bounds=bounds,
    )


_S, _R, _Q = Layer.STRUCTURE, Layer.RED_FLAG, Layer.QUALITY
_HARD, _SOFT = Severity.HARD, Severity.SOFT


def _build_table() -> dict[ContentType, tuple[RuleDefinition, ...]]:
    social = ContentType.SOCIAL_CAPTION
    seo = ContentType.SEO_BLOG
    video = ContentType.VIDEO_SCRIPT
    email = ContentType.EMAIL_MARKETING
    landing = ContentType.LANDING_PAGE
    product = ContentType.PRODUCT_DESCRIPTION
    reel = ContentType.REEL_CAPTION

    return {
        social: (
            _rule(social, "social_structure_lock", _S, _HARD, "Hook, Body and CTA sections present", _social_structure_lock),
            _rule(social, "social_max_sections", _S, _HARD, "At most 4 labelled sections", _social_max_sections),
            _rule(social, "social_no_meta_commentary", _R, _HARD, "No AI meta-commentary", _no_meta_commentary),
            _rule(social, "social_cta_not_generic", _R, _HARD, "CTA is specific, not generic", _social_cta_not_generic),
            _rule(social, "social_hook_length", _Q, _SOFT, "Hook is at most 2 sentences", _social_hook_length, SKIP),
            _rule(social, "social_body_formatting", _Q, _SOFT, "Body has 2+ paragraphs", _social_body_formatting),
            _rule(social, "social_sentence_length", _Q, _SOFT, "No sentence over 25 words", _social_sentence_length, SKIP),
            _rule(social, "social_topic_keyword", _Q, _SOFT, "Topic keyword appears", _social_topic_keyword),
            _rule(social, "social_cta_action_verb", _Q, _SOFT, "CTA is one sentence with action intent", _social_cta_action_verb),
        ),
        seo: (
            _rule(seo, "seo_title_present", _S, _HARD, "H1 title present", _seo_title_present),
            _rule(seo, "seo_headings_hierarchy", _S, _HARD, "One H1, no skipped heading levels", _seo_headings_hierarchy),
            _rule(seo, "seo_no_meta_commentary", _R, _HARD, "No AI meta-commentary", _no_meta_commentary),
            _rule(seo, "seo_intro_present", _Q, _SOFT, "Introduction before the first H2", _seo_intro_present),
            _rule(
                seo, "seo_keyword_density", _Q, _SOFT, "Keyword appears 2-5 times",
                _seo_keyword_density, TestModePolicy.relax(1, 8), Bounds(2, 5),
            ),
            _rule(seo, "seo_paragraph_length", _Q, _SOFT, "No paragraph over 150 words", _seo_paragraph_length, SKIP),
            _rule(seo, "seo_has_conclusion", _Q, _SOFT, "H2 conclusion section", _seo_has_conclusion),
        ),
        video: (
            _rule(video, "video_hook_present", _S, _HARD, "Hook/Opening section present", _video_hook_present),
            _rule(video, "video_sections_present", _S, _HARD, "2+ content sections after the hook", _video_sections_present),
            _rule(video, "video_no_meta_commentary", _R, _HARD, "No AI meta-commentary", _no_meta_commentary),
            _rule(video, "video_hook_duration", _Q, _SOFT, "Hook is 30 words or fewer", _video_hook_duration, SKIP),
            _rule(video, "video_has_cta", _Q, _SOFT, "Call-to-action present", _video_has_cta),
            _rule(video, "video_conversational", _Q, _SOFT, "Conversational tone", _video_conversational),
        ),
        email: (
            _rule(email, "email_subject_present", _S, _HARD, "Subject line present", _email_subject_present),
            _rule(email, "email_body_present", _S, _HARD, "Body is 100+ characters", _email_body_present),
            _rule(email, "email_no_meta_commentary", _R, _HARD, "No AI meta-commentary", _no_meta_commentary),
            _rule(email, "email_no_spam_words", _R, _HARD, "No spam trigger words", _email_no_spam_words),
            _rule(
                email, "email_subject_length", _Q, _SOFT, "Subject is 30-60 characters",
                _email_subject_length, TestModePolicy.relax(20, 80), Bounds(30, 60),
            ),
            _rule(email, "email_has_cta", _Q, _SOFT, "CTA section or button", _cta_present),
            _rule(email, "email_personalization", _Q, _SOFT, "Personalization token", _email_personalization, SKIP),
        ),
        landing: (
            _rule(landing, "landing_headline_present", _S, _HARD, "Headline present", _landing_headline_present),
            _rule(landing, "landing_cta_present", _S, _HARD, "CTA section or button", _cta_present),
            _rule(landing, "landing_no_meta_commentary", _R, _HARD, "No AI meta-commentary", _no_meta_commentary),
            _rule(landing, "landing_headline_length", _Q, _SOFT, "Headline is 15 words or fewer", _landing_headline_length),
            _rule(landing, "landing_benefits_list", _Q, _SOFT, "Benefits list with 3+ bullets", _bullet_list),
            _rule(landing, "landing_social_proof", _Q, _SOFT, "Testimonial, review or rating", _landing_social_proof, SKIP),
        ),
        product: (
            _rule(product, "product_name_present", _S, _HARD, "Product name present", _product_name_present),
            _rule(product, "product_desc_present", _S, _HARD, "Description is 100+ characters", _product_desc_present),
            _rule(product, "product_no_meta_commentary", _R, _HARD, "No AI meta-commentary", _no_meta_commentary),
            _rule(product, "product_features_list", _Q, _SOFT, "Features list with 3+ bullets", _bullet_list),
            _rule(product, "product_benefits", _Q, _SOFT, "Customer benefits described", _product_benefits),
            _rule(product, "product_cta", _Q, _SOFT, "Purchase call-to-action", _product_cta),
        ),
        reel: (
            _rule(reel, "reel_hook_present", _S, _HARD, "First line is a hook (10 words or fewer)", _reel_hook_present),
            _rule(reel, "reel_length_limit", _S, _HARD, "Caption is 300 characters or fewer", _reel_length_limit),
            _rule(reel, "reel_no_meta_commentary", _R, _HARD, "No AI meta-commentary", _no_meta_commentary),
            _rule(
                reel, "reel_has_hashtags", _Q, _SOFT, "3-10 hashtags",
                _reel_has_hashtags, TestModePolicy.relax(1, 15), Bounds(3, 10),
            ),
            _rule(reel, "reel_emoji_usage", _Q, _SOFT, "1-5 emoji", _reel_emoji_usage, SKIP, Bounds(1, 5)),
            _rule(reel, "reel_cta_present", _Q, _SOFT, "Engagement call-to-action", _reel_cta_present),
        ),
    }


# =============================================================================
# Validation
# =============================================================================


def validate_registry(table: dict[ContentType, tuple[RuleDefinition, ...]]) -> None:
    """Check a rule table for structural mistakes.

    Raises:
        RuleRegistryError: listing every problem found.
    """
    problems: list[str] = []

    for content_type in ContentType:
        if not table.get(content_type):
            problems.append(f"{content_type.value}: no rules registered")

    for content_type, rules in table.items():
        prefix = RULE_PREFIXES.get(content_type, "")
        seen: set[str] = set()
        for rule in rules:
            where = f"{content_type.value}/{rule.rule_id}"
            if rule.rule_id in seen:
                problems.append(f"{where}: duplicate rule id")
            seen.add(rule.rule_id)
            if rule.content_type != content_type:
                problems.append(f"{where}: registered under the wrong content type")
            if not rule.rule_id.startswith(prefix):
                problems.append(f"{where}: rule id must start with {prefix!r}")
            if not callable(rule.check):
                problems.append(f"{where}: check is not callable")
            if rule.bounds is not None and rule.bounds.low > rule.bounds.high:
                problems.append(f"{where}: default range {rule.bounds} is inverted")
            if rule.test_mode.kind == PolicyKind.RELAX:
                relaxed = rule.test_mode.relaxed
                if relaxed is None:
                    problems.append(f"{where}: RELAX policy without a relaxed range")
                elif relaxed.low > relaxed.high:
                    problems.append(f"{where}: relaxed range {relaxed} is inverted")
                if rule.bounds is None:
                    problems.append(f"{where}: RELAX policy on a rule without a default range")

    if problems:
        raise RuleRegistryError(detail="; ".join(problems))


RULE_TABLE = _build_table()
validate_registry(RULE_TABLE)


# =============================================================================
# Lookup
# =============================================================================


def resolve_content_type(content_type: Union[str, ContentType]) -> ContentType:
    """Coerce a content-type id, failing fast when it is unknown."""
    try:
        resolved = ContentType(content_type)
    except ValueError:
        raise UnknownContentTypeError(content_type=str(content_type)) from None
    if resolved not in RULE_TABLE:
        raise UnknownContentTypeError(content_type=resolved.value)
    return resolved


def content_types() -> tuple[ContentType, ...]:
    return tuple(RULE_TABLE)


def get_rules(content_type: Union[str, ContentType]) -> tuple[RuleDefinition, ...]:
    return RULE_TABLE[resolve_content_type(content_type)]


def get_rule(
    content_type: Union[str, ContentType], rule_id: str
) -> Optional[RuleDefinition]:
    for rule in get_rules(content_type):
        if rule.rule_id == rule_id:
            return rule
    return None


def relaxed_thresholds(
    content_type: Union[str, ContentType],
) -> dict[str, tuple[Bounds, Bounds]]:
    """Rules whose range widens under testMode, as (default, relaxed)."""
    return {
        rule.rule_id: (rule.bounds, rule.test_mode.relaxed)
        for rule in get_rules(content_type)
        if rule.test_mode.kind == PolicyKind.RELAX
        and rule.bounds is not None
        and rule.test_mode.relaxed is not None
    }
