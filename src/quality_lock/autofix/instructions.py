"""Repair instructions for every registered rule.

FIX_INSTRUCTIONS is a closed mapping keyed by (ContentType, rule_id). It is
checked against the rule registry at import: a registered rule without an
instruction, or an instruction for a rule that does not exist, raises
InstructionTableError instead of degrading to a generic directive at runtime.

Instructions for threshold rules carry {low}/{high} placeholders, filled with
the range that is actually being enforced (relaxed under testMode).
"""

from __future__ import annotations

from quality_lock.exceptions import InstructionTableError
from quality_lock.rules.models import Bounds, ContentType
from quality_lock.rules.registry import RULE_TABLE

_META = "Remove ALL meta-commentary and AI self-references. Start directly with the content."

_SOCIAL = ContentType.SOCIAL_CAPTION
_SEO = ContentType.SEO_BLOG
_VIDEO = ContentType.VIDEO_SCRIPT
_EMAIL = ContentType.EMAIL_MARKETING
_LANDING = ContentType.LANDING_PAGE
_PRODUCT = ContentType.PRODUCT_DESCRIPTION
_REEL = ContentType.REEL_CAPTION

FIX_INSTRUCTIONS: dict[tuple[ContentType, str], str] = {
    # -- social_caption_v1 -------------------------------------------------
    (_SOCIAL, "social_structure_lock"): (
        "Add the missing section labels. Required format: **Hook:** (attention "
        "grabber), **Body:** (main content), **CTA:** (call-to-action). Use "
        "exactly these labels."
    ),
    (_SOCIAL, "social_max_sections"): (
        "Remove extra sections. Keep ONLY **Hook:**, **Body:** and **CTA:**; "
        "at most 4 labelled sections are allowed."
    ),
    (_SOCIAL, "social_no_meta_commentary"): (
        'Remove ALL meta-commentary and AI self-references such as "Here is", '
        '"Below is", "As an AI", "Dưới đây là", "Tôi sẽ". Start directly with '
        "the content."
    ),
    (_SOCIAL, "social_cta_not_generic"): (
        'Write a specific CTA instead of a generic one. Avoid "Tìm hiểu thêm", '
        '"Xem thêm", "Click here", "Learn more"; use an action verb tied to the topic.'
    ),
    (_SOCIAL, "social_hook_length"): (
        "Shorten the Hook to 1-2 punchy sentences."
    ),
    (_SOCIAL, "social_body_formatting"): (
        "Split the Body into at least 2 paragraphs using line breaks, one key "
        "point per paragraph."
    ),
    (_SOCIAL, "social_sentence_length"): (
        "Break sentences longer than 25 words into shorter ones for mobile readability."
    ),
    (_SOCIAL, "social_topic_keyword"): (
        "Work the topic keyword naturally into the Hook or Body."
    ),
    (_SOCIAL, "social_cta_action_verb"): (
        "Rewrite the CTA as exactly 1 sentence with a clear action verb: Bình "
        "luận, Chia sẻ, Lưu, Theo dõi, Đăng ký, Comment, Share, Save, Follow."
    ),
    # -- seo_blog_v1 -------------------------------------------------------
    (_SEO, "seo_title_present"): 'Add an H1 title at the start using "# Title".',
    (_SEO, "seo_headings_hierarchy"): (
        "Fix the heading hierarchy: exactly one H1 first, then H2s, then H3s, "
        "without skipping levels."
    ),
    (_SEO, "seo_no_meta_commentary"): _META,
    (_SEO, "seo_intro_present"): (
        "Add an introduction paragraph (50+ characters) before the first H2."
    ),
    (_SEO, "seo_keyword_density"): (
        "Adjust the keyword so it appears {low}-{high} times naturally in the text."
    ),
    (_SEO, "seo_paragraph_length"): "Break paragraphs longer than 150 words into shorter ones.",
    (_SEO, "seo_has_conclusion"): (
        'Add a conclusion section with an H2 heading ("## Kết luận" or "## Conclusion").'
    ),
    # -- video_script_v1 ---------------------------------------------------
    (_VIDEO, "video_hook_present"): "Add a Hook section using the **Hook:** or **Opening:** label.",
    (_VIDEO, "video_sections_present"): (
        "Add content sections after the hook using **Main:**, **Body:** or [SCENE] markers."
    ),
    (_VIDEO, "video_no_meta_commentary"): _META,
    (_VIDEO, "video_hook_duration"): "Shorten the Hook to 30 words or fewer.",
    (_VIDEO, "video_has_cta"): "Add a **CTA:** section with a clear call-to-action at the end.",
    (_VIDEO, "video_conversational"): (
        "Make the tone conversational: add a question or address the viewer directly (bạn/you)."
    ),
    # -- email_marketing_v1 ------------------------------------------------
    (_EMAIL, "email_subject_present"): "Add a subject line using the **Subject:** label at the start.",
    (_EMAIL, "email_body_present"): "Expand the email body to at least 100 characters.",
    (_EMAIL, "email_no_meta_commentary"): _META,
    (_EMAIL, "email_no_spam_words"): (
        'Remove spam trigger words and punctuation: "FREE!!!", "ACT NOW", "100% FREE", "!!!".'
    ),
    (_EMAIL, "email_subject_length"): "Adjust the subject line to {low}-{high} characters.",
    (_EMAIL, "email_has_cta"): "Add a clear **CTA:** section or [Button: text].",
    (_EMAIL, "email_personalization"): "Add a personalization token such as {{{{name}}}} or {{{{firstName}}}}.",
    # -- landing_page_v1 ---------------------------------------------------
    (_LANDING, "landing_headline_present"): "Add a main headline using the **Headline:** label or an H1.",
    (_LANDING, "landing_cta_present"): "Add a CTA using **CTA:** or [Button: text].",
    (_LANDING, "landing_no_meta_commentary"): _META,
    (_LANDING, "landing_headline_length"): "Shorten the headline to 15 words or fewer.",
    (_LANDING, "landing_benefits_list"): "Add a benefits list with at least 3 bullet points.",
    (_LANDING, "landing_social_proof"): "Add a social proof element (testimonial, review, đánh giá).",
    # -- product_description_v1 --------------------------------------------
    (_PRODUCT, "product_name_present"): "Add the product name using the **Product:** or **Name:** label.",
    (_PRODUCT, "product_desc_present"): "Expand the product description to at least 100 characters.",
    (_PRODUCT, "product_no_meta_commentary"): _META,
    (_PRODUCT, "product_features_list"): "Add a features list with at least 3 bullet points.",
    (_PRODUCT, "product_benefits"): "Add benefit statements explaining how the product helps the customer.",
    (_PRODUCT, "product_cta"): 'Add a purchase CTA such as "Mua ngay", "Đặt hàng", "Order now" or "Add to cart".',
    # -- reel_caption_v1 ---------------------------------------------------
    (_REEL, "reel_hook_present"): "Start with a punchy hook line of 10 words or fewer.",
    (_REEL, "reel_length_limit"): "Shorten the caption to 300 characters or fewer.",
    (_REEL, "reel_no_meta_commentary"): _META,
    (_REEL, "reel_has_hashtags"): "Use {low}-{high} relevant hashtags.",
    (_REEL, "reel_emoji_usage"): "Use {low}-{high} emoji that fit the content.",
    (_REEL, "reel_cta_present"): "Add an engagement CTA (comment, share, save, follow).",
}


def verify_instruction_table(
    instructions: dict[tuple[ContentType, str], str] = FIX_INSTRUCTIONS,
) -> None:
    """Check that instructions and registered rules match one-to-one.

    Raises:
        InstructionTableError: naming every missing or orphaned entry.
    """
    registered = {
        (content_type, rule.rule_id)
        for content_type, rules in RULE_TABLE.items()
        for rule in rules
    }
    missing = sorted(f"{ct.value}/{rid}" for ct, rid in registered - instructions.keys())
    orphaned = sorted(f"{ct.value}/{rid}" for ct, rid in instructions.keys() - registered)

    problems = []
    if missing:
        problems.append(f"missing instructions: {', '.join(missing)}")
    if orphaned:
        problems.append(f"instructions for unknown rules: {', '.join(orphaned)}")
    if problems:
        raise InstructionTableError(detail="; ".join(problems))


def instruction_for(
    content_type: ContentType, rule_id: str, bounds: Bounds | None = None
) -> str | None:
    """Return the repair instruction for a rule, with its range filled in."""
    template = FIX_INSTRUCTIONS.get((content_type, rule_id))
    if template is None:
        return None
    if bounds is None:
        return template.format(low="?", high="?")
    return template.format(low=f"{bounds.low:g}", high=f"{bounds.high:g}")


verify_instruction_table()
