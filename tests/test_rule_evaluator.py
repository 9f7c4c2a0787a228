"""Tests for the rule registry, section parsing and the evaluator.

Covers decision derivation, testMode SKIP/RELAX handling, the per-content-type
rule tables and the fail-fast paths for unknown content types and malformed
registries.
"""

from dataclasses import replace

import pytest

from quality_lock.exceptions import RuleRegistryError, UnknownContentTypeError
from quality_lock.rules.evaluator import derive_decision, evaluate
from quality_lock.rules.models import (
    Bounds,
    ContentType,
    Decision,
    Layer,
    PolicyKind,
    RuleResult,
    Severity,
    TestModePolicy,
)
from quality_lock.rules.registry import (
    RULE_TABLE,
    content_types,
    get_rule,
    get_rules,
    relaxed_thresholds,
    validate_registry,
)
from quality_lock.rules.sections import (
    ContentView,
    SectionKind,
    match_heading,
    parse_sections,
)

from samples import (
    EMAIL_SHORT_SUBJECT,
    LANDING_PASS,
    PRODUCT_PASS,
    REEL_PASS,
    REEL_TWO_HASHTAGS,
    SEO_PASS,
    SOCIAL_FIXED,
    SOCIAL_LONG_HOOK,
    SOCIAL_MISSING_CTA,
    VIDEO_PASS,
)


ALL_SAMPLES = [
    (ContentType.SOCIAL_CAPTION, SOCIAL_FIXED),
    (ContentType.SOCIAL_CAPTION, SOCIAL_MISSING_CTA),
    (ContentType.SOCIAL_CAPTION, SOCIAL_LONG_HOOK),
    (ContentType.SEO_BLOG, SEO_PASS),
    (ContentType.VIDEO_SCRIPT, VIDEO_PASS),
    (ContentType.EMAIL_MARKETING, EMAIL_SHORT_SUBJECT),
    (ContentType.LANDING_PAGE, LANDING_PASS),
    (ContentType.PRODUCT_DESCRIPTION, PRODUCT_PASS),
    (ContentType.REEL_CAPTION, REEL_PASS),
    (ContentType.REEL_CAPTION, REEL_TWO_HASHTAGS),
]


SHORT_PRODUCT = (
    "**Product:** Balcony Herb Kit\n"
    "\n"
    "- Organic potting soil\n"
    "- Three heirloom seed packets\n"
    "- Two self-watering pots\n"
    "\n"
    "**CTA:** Order yours today."
)

FLAT_VIDEO = (
    "**Hook:** Flat coffee usually means stale beans.\n"
    "\n"
    "**Main:** Most of the time the beans are simply stale.\n"
    "\n"
    "[SCENE 2] Show the roast date on the bag.\n"
    "\n"
    "**CTA:** Follow for more brewing tips."
)

LONG_PARAGRAPH = " ".join(["word"] * 151)

FAILING_CASES = [
    pytest.param(
        ContentType.SOCIAL_CAPTION,
        SOCIAL_FIXED.replace("Da Lat.\n\nEach bag", "Da Lat. Each bag"),
        "social_body_formatting",
        id="social_body_formatting",
    ),
    pytest.param(
        ContentType.SEO_BLOG,
        SEO_PASS.replace(
            "Great coffee at home starts with fresh beans, clean water and a little patience.\n\n",
            "",
        ),
        "seo_intro_present",
        id="seo_intro_present",
    ),
    pytest.param(
        ContentType.SEO_BLOG,
        SEO_PASS.replace("## Choose fresh beans", LONG_PARAGRAPH + "\n\n## Choose fresh beans"),
        "seo_paragraph_length",
        id="seo_paragraph_length",
    ),
    pytest.param(
        ContentType.SEO_BLOG,
        SEO_PASS.replace("## Conclusion", "## Next steps"),
        "seo_has_conclusion",
        id="seo_has_conclusion",
    ),
    pytest.param(
        ContentType.SEO_BLOG,
        SEO_PASS + "\n\nI hope this helps!",
        "seo_no_meta_commentary",
        id="seo_no_meta_commentary",
    ),
    pytest.param(
        ContentType.VIDEO_SCRIPT,
        VIDEO_PASS.replace("**Hook:** ", ""),
        "video_hook_present",
        id="video_hook_present",
    ),
    pytest.param(
        ContentType.VIDEO_SCRIPT,
        VIDEO_PASS.replace(
            "Ever wondered why your coffee tastes flat?", " ".join(["coffee"] * 31) + "?"
        ),
        "video_hook_duration",
        id="video_hook_duration",
    ),
    pytest.param(
        ContentType.VIDEO_SCRIPT, FLAT_VIDEO, "video_conversational", id="video_conversational"
    ),
    pytest.param(
        ContentType.VIDEO_SCRIPT,
        "Here is the script.\n\n" + VIDEO_PASS,
        "video_no_meta_commentary",
        id="video_no_meta_commentary",
    ),
    pytest.param(
        ContentType.EMAIL_MARKETING,
        EMAIL_SHORT_SUBJECT.replace("**Subject:** Spring garden kits are in\n", ""),
        "email_subject_present",
        id="email_subject_present",
    ),
    pytest.param(
        ContentType.EMAIL_MARKETING,
        EMAIL_SHORT_SUBJECT.replace("\n\n**CTA:** [Button: Shop the kits]", ""),
        "email_has_cta",
        id="email_has_cta",
    ),
    pytest.param(
        ContentType.EMAIL_MARKETING,
        EMAIL_SHORT_SUBJECT + "\n\nI hope this helps.",
        "email_no_meta_commentary",
        id="email_no_meta_commentary",
    ),
    pytest.param(
        ContentType.LANDING_PAGE,
        LANDING_PASS.replace("\n\n**CTA:** [Button: Get your kit]", ""),
        "landing_cta_present",
        id="landing_cta_present",
    ),
    pytest.param(
        ContentType.LANDING_PAGE,
        LANDING_PASS.replace(
            "Grow herbs on any balcony",
            "Grow fresh herbs on any small balcony with one simple kit "
            "that fits every home and budget",
        ),
        "landing_headline_length",
        id="landing_headline_length",
    ),
    pytest.param(
        ContentType.LANDING_PAGE,
        LANDING_PASS.replace("Rated 4.8/5 by 2,000 home gardeners.\n\n", ""),
        "landing_social_proof",
        id="landing_social_proof",
    ),
    pytest.param(
        ContentType.LANDING_PAGE,
        "Here is the landing page.\n\n" + LANDING_PASS,
        "landing_no_meta_commentary",
        id="landing_no_meta_commentary",
    ),
    pytest.param(
        ContentType.PRODUCT_DESCRIPTION,
        PRODUCT_PASS.replace("**Product:** Balcony Herb Kit\n\n", ""),
        "product_name_present",
        id="product_name_present",
    ),
    pytest.param(
        ContentType.PRODUCT_DESCRIPTION,
        SHORT_PRODUCT,
        "product_desc_present",
        id="product_desc_present",
    ),
    pytest.param(
        ContentType.PRODUCT_DESCRIPTION,
        PRODUCT_PASS.replace(
            "- Organic potting soil\n- Three heirloom seed packets\n- Two self-watering pots\n\n",
            "",
        ),
        "product_features_list",
        id="product_features_list",
    ),
    pytest.param(
        ContentType.PRODUCT_DESCRIPTION,
        PRODUCT_PASS.replace(
            "It helps you cook with fresh herbs all year and saves money on groceries.",
            "Each pot holds enough soil for one plant.",
        ),
        "product_benefits",
        id="product_benefits",
    ),
    pytest.param(
        ContentType.PRODUCT_DESCRIPTION,
        "Here is the description.\n\n" + PRODUCT_PASS,
        "product_no_meta_commentary",
        id="product_no_meta_commentary",
    ),
    pytest.param(
        ContentType.REEL_CAPTION,
        REEL_PASS + "\n\nHere is your caption.",
        "reel_no_meta_commentary",
        id="reel_no_meta_commentary",
    ),
]


def _result(rule_id="social_x", severity=Severity.SOFT, passed=False) -> RuleResult:
    return RuleResult(
        rule_id=rule_id,
        layer=Layer.QUALITY,
        severity=severity,
        passed=passed,
        message="test",
    )


# =============================================================================
# Decision Derivation
# =============================================================================


class TestDeriveDecision:
    def test_all_passing_is_pass(self):
        """No failing result means PASS."""
        results = [_result(passed=True), _result(severity=Severity.HARD, passed=True)]
        assert derive_decision(results) == Decision.PASS

    def test_empty_is_pass(self):
        """An empty result list is PASS."""
        assert derive_decision([]) == Decision.PASS

    def test_soft_failure_is_draft(self):
        """A failing SOFT rule without HARD failures gives DRAFT."""
        results = [_result(passed=True), _result(severity=Severity.SOFT)]
        assert derive_decision(results) == Decision.DRAFT

    def test_hard_failure_is_fail(self):
        """A failing HARD rule gives FAIL even when SOFT rules also fail."""
        results = [_result(severity=Severity.SOFT), _result(severity=Severity.HARD)]
        assert derive_decision(results) == Decision.FAIL


# =============================================================================
# Evaluator
# =============================================================================


class TestEvaluate:
    @pytest.mark.parametrize(
        "content_type,text",
        [
            (ContentType.SOCIAL_CAPTION, SOCIAL_FIXED),
            (ContentType.SEO_BLOG, SEO_PASS),
            (ContentType.VIDEO_SCRIPT, VIDEO_PASS),
            (ContentType.LANDING_PAGE, LANDING_PASS),
            (ContentType.PRODUCT_DESCRIPTION, PRODUCT_PASS),
            (ContentType.REEL_CAPTION, REEL_PASS),
        ],
    )
    def test_well_formed_samples_pass(self, content_type, text):
        """Each well-formed sample satisfies every rule of its type."""
        result = evaluate(content_type, text)
        assert result.decision == Decision.PASS, [
            r.to_dict() for r in result.hard_fails + result.soft_fails
        ]
        assert result.hard_fails == ()
        assert result.soft_fails == ()

    def test_missing_cta_fails_hard(self):
        """A caption without a CTA fails the structure lock."""
        result = evaluate("social_caption_v1", SOCIAL_MISSING_CTA)

        assert result.decision == Decision.FAIL
        assert result.hard_fail_ids == {"social_structure_lock", "social_cta_not_generic"}
        assert [r.rule_id for r in result.soft_fails] == ["social_cta_action_verb"]
        lock = next(r for r in result.hard_fails if r.rule_id == "social_structure_lock")
        assert "CTA" in lock.message

    def test_accepts_string_content_type(self):
        """String ids resolve to the ContentType enum."""
        result = evaluate("seo_blog_v1", SEO_PASS)
        assert result.content_type == ContentType.SEO_BLOG

    def test_unknown_content_type_raises(self):
        """An unregistered content type is a caller error, not a FAIL."""
        with pytest.raises(UnknownContentTypeError) as exc_info:
            evaluate("tiktok_script_v9", "anything")
        assert exc_info.value.content_type == "tiktok_script_v9"
        assert "tiktok_script_v9" in str(exc_info.value)

    @pytest.mark.parametrize("content_type,text", ALL_SAMPLES)
    @pytest.mark.parametrize("test_mode", [False, True])
    def test_evaluation_is_deterministic(self, content_type, text, test_mode):
        """Identical inputs produce identical results."""
        first = evaluate(content_type, text, test_mode)
        second = evaluate(content_type, text, test_mode)
        assert first == second

    @pytest.mark.parametrize("content_type,text", ALL_SAMPLES)
    @pytest.mark.parametrize("test_mode", [False, True])
    def test_decision_matches_fail_lists(self, content_type, text, test_mode):
        """FAIL iff a HARD rule failed; DRAFT iff only SOFT rules failed."""
        result = evaluate(content_type, text, test_mode)

        hard = [r for r in result.results if not r.passed and r.severity == Severity.HARD]
        soft = [r for r in result.results if not r.passed and r.severity == Severity.SOFT]
        assert list(result.hard_fails) == hard
        assert list(result.soft_fails) == soft
        if hard:
            assert result.decision == Decision.FAIL
        elif soft:
            assert result.decision == Decision.DRAFT
        else:
            assert result.decision == Decision.PASS

    def test_failing_lists_hard_before_soft(self):
        """EvaluationResult.failing orders HARD failures first."""
        result = evaluate(ContentType.SOCIAL_CAPTION, SOCIAL_MISSING_CTA)
        severities = [r.severity for r in result.failing]
        assert severities == sorted(severities, key=lambda s: s != Severity.HARD)

    def test_to_dict_is_json_safe(self):
        """to_dict carries string enum values only."""
        data = evaluate(ContentType.SOCIAL_CAPTION, SOCIAL_MISSING_CTA).to_dict()
        assert data["decision"] == "FAIL"
        assert data["content_type"] == "social_caption_v1"
        assert data["hard_fails"][0]["severity"] == "HARD"


# =============================================================================
# testMode Policies
# =============================================================================


class TestTestModePolicies:
    def test_skip_rules_fail_outside_test_mode(self):
        """A three-sentence hook is a SOFT failure normally."""
        result = evaluate(ContentType.SOCIAL_CAPTION, SOCIAL_LONG_HOOK)
        assert result.decision == Decision.DRAFT
        assert [r.rule_id for r in result.soft_fails] == ["social_hook_length"]
        assert result.skipped_rule_ids == ()

    def test_skip_rules_are_not_evaluated_in_test_mode(self):
        """SKIP rules vanish from results and cannot affect the decision."""
        result = evaluate(ContentType.SOCIAL_CAPTION, SOCIAL_LONG_HOOK, test_mode=True)

        assert result.decision == Decision.PASS
        assert "social_hook_length" in result.skipped_rule_ids
        assert "social_sentence_length" in result.skipped_rule_ids
        evaluated = {r.rule_id for r in result.results}
        assert evaluated.isdisjoint(result.skipped_rule_ids)

    def test_relax_widens_email_subject_range(self):
        """A 25-character subject fails 30-60 but passes the relaxed 20-80."""
        normal = evaluate(ContentType.EMAIL_MARKETING, EMAIL_SHORT_SUBJECT)
        relaxed = evaluate(ContentType.EMAIL_MARKETING, EMAIL_SHORT_SUBJECT, test_mode=True)

        assert normal.decision == Decision.DRAFT
        assert [r.rule_id for r in normal.soft_fails] == ["email_subject_length"]
        assert "25 characters" in normal.soft_fails[0].message
        assert relaxed.decision == Decision.PASS

    def test_relax_widens_reel_hashtag_range(self):
        """Two hashtags fail 3-10 but pass the relaxed 1-15."""
        normal = evaluate(ContentType.REEL_CAPTION, REEL_TWO_HASHTAGS)
        relaxed = evaluate(ContentType.REEL_CAPTION, REEL_TWO_HASHTAGS, test_mode=True)

        assert [r.rule_id for r in normal.soft_fails] == ["reel_has_hashtags"]
        assert relaxed.decision == Decision.PASS

    def test_relax_keyword_density(self):
        """One keyword mention is DRAFT normally and fine in testMode."""
        normal = evaluate(ContentType.SEO_BLOG, SEO_PASS, topic_keyword="patience")
        relaxed = evaluate(
            ContentType.SEO_BLOG, SEO_PASS, test_mode=True, topic_keyword="patience"
        )
        assert [r.rule_id for r in normal.soft_fails] == ["seo_keyword_density"]
        assert relaxed.decision == Decision.PASS

    def test_relaxed_thresholds_lists_relax_rules(self):
        """relaxed_thresholds returns (default, relaxed) per RELAX rule."""
        assert relaxed_thresholds(ContentType.EMAIL_MARKETING) == {
            "email_subject_length": (Bounds(30, 60), Bounds(20, 80)),
        }
        assert relaxed_thresholds(ContentType.VIDEO_SCRIPT) == {}

    def test_caller_skip_rule_ids(self):
        """Rules named by the caller are skipped in any mode; unknown ids are ignored."""
        result = evaluate(
            ContentType.SOCIAL_CAPTION,
            SOCIAL_MISSING_CTA,
            skip_rule_ids=[
                "social_cta_action_verb",
                "social_structure_lock",
                "social_cta_not_generic",
                "seo_title_present",
            ],
        )
        assert result.decision == Decision.PASS
        assert result.skipped_rule_ids == (
            "social_structure_lock",
            "social_cta_not_generic",
            "social_cta_action_verb",
        )
        assert "social_structure_lock" not in {r.rule_id for r in result.results}


# =============================================================================
# Rule Behaviour Per Content Type
# =============================================================================


class TestRuleBehaviour:
    def test_meta_commentary_is_hard_fail(self):
        """AI framing text fails the RED_FLAG layer."""
        text = "Here is your caption.\n\n" + SOCIAL_FIXED
        result = evaluate(ContentType.SOCIAL_CAPTION, text)
        assert result.hard_fail_ids == {"social_no_meta_commentary"}

    def test_vietnamese_meta_commentary_detected(self):
        """Vietnamese framing phrases are detected too."""
        text = "Dưới đây là bài viết.\n\n" + SOCIAL_FIXED
        result = evaluate(ContentType.SOCIAL_CAPTION, text)
        assert "social_no_meta_commentary" in result.hard_fail_ids

    def test_generic_cta_rejected(self):
        """A bare 'Learn more.' CTA is generic."""
        text = SOCIAL_FIXED.replace(
            "Comment your favorite brew below and save this post for later.", "Learn more."
        )
        result = evaluate(ContentType.SOCIAL_CAPTION, text)
        assert "social_cta_not_generic" in result.hard_fail_ids

    def test_too_many_sections(self):
        """More than four labelled sections breaks the structure."""
        text = SOCIAL_FIXED + "\n\n**Hashtags:** #coffee\n\n**Tags:** #dalat"
        result = evaluate(ContentType.SOCIAL_CAPTION, text)
        assert "social_max_sections" in result.hard_fail_ids

    def test_topic_keyword_checked_when_given(self):
        """The keyword rule only fails when a keyword is supplied and absent."""
        assert evaluate(ContentType.SOCIAL_CAPTION, SOCIAL_FIXED).decision == Decision.PASS
        result = evaluate(ContentType.SOCIAL_CAPTION, SOCIAL_FIXED, topic_keyword="matcha")
        assert [r.rule_id for r in result.soft_fails] == ["social_topic_keyword"]

    def test_seo_heading_jump(self):
        """Skipping from H1 to H3 fails the hierarchy rule."""
        text = SEO_PASS.replace("## Choose fresh beans", "### Choose fresh beans")
        result = evaluate(ContentType.SEO_BLOG, text)
        assert "seo_headings_hierarchy" in result.hard_fail_ids

    def test_seo_missing_title(self):
        """Without an H1 both title and hierarchy rules fail."""
        text = SEO_PASS.replace("# How to Brew Better Coffee at Home", "How to brew")
        result = evaluate(ContentType.SEO_BLOG, text)
        assert {"seo_title_present", "seo_headings_hierarchy"} <= result.hard_fail_ids

    def test_video_needs_content_sections(self):
        """A hook alone is not a script."""
        text = "**Hook:** Ever wondered why your coffee tastes flat?"
        result = evaluate(ContentType.VIDEO_SCRIPT, text)
        assert "video_sections_present" in result.hard_fail_ids
        assert "video_has_cta" in {r.rule_id for r in result.soft_fails}

    def test_email_spam_words(self):
        """Spam triggers are a HARD failure."""
        text = EMAIL_SHORT_SUBJECT.replace("just landed", "just landed, ACT NOW")
        result = evaluate(ContentType.EMAIL_MARKETING, text)
        assert "email_no_spam_words" in result.hard_fail_ids

    def test_email_body_excludes_subject_and_cta(self):
        """Subject, preview and CTA lines do not count towards the body."""
        text = (
            "**Subject:** Spring garden kits are finally in stock\n"
            "**Preview:** Fresh seeds\n"
            "\n"
            "**CTA:** [Button: Shop the kits]"
        )
        result = evaluate(ContentType.EMAIL_MARKETING, text)
        assert "email_body_present" in result.hard_fail_ids

    def test_landing_headline_from_h1(self):
        """A markdown H1 counts as the landing page headline."""
        text = LANDING_PASS.replace("**Headline:** Grow herbs", "# Grow herbs")
        result = evaluate(ContentType.LANDING_PAGE, text)
        assert "landing_headline_present" not in result.hard_fail_ids

    def test_landing_short_benefits_list(self):
        """Fewer than three bullets is a quality issue."""
        text = LANDING_PASS.replace("- Self-watering pots\n", "")
        result = evaluate(ContentType.LANDING_PAGE, text)
        assert [r.rule_id for r in result.soft_fails] == ["landing_benefits_list"]

    def test_product_without_purchase_cta(self):
        """Products need a purchase action."""
        text = PRODUCT_PASS.replace("Order yours today", "Enjoy it")
        result = evaluate(ContentType.PRODUCT_DESCRIPTION, text)
        assert [r.rule_id for r in result.soft_fails] == ["product_cta"]

    def test_reel_length_limit(self):
        """Captions over 300 characters fail the HARD length rule."""
        text = REEL_PASS.replace(
            "Practice with cold milk first and pour slowly.",
            "Practice with cold milk first and pour slowly. " * 8,
        )
        result = evaluate(ContentType.REEL_CAPTION, text)
        assert "reel_length_limit" in result.hard_fail_ids

    def test_reel_hook_must_not_be_hashtags(self):
        """A caption that opens with hashtags has no hook."""
        text = "#latteart #coffee #barista\n\nSave this for later!"
        result = evaluate(ContentType.REEL_CAPTION, text)
        assert "reel_hook_present" in result.hard_fail_ids

    @pytest.mark.parametrize("content_type,text,rule_id", FAILING_CASES)
    def test_rule_fails_on_bad_input(self, content_type, text, rule_id):
        """Each rule reports a failure at its registered severity."""
        result = evaluate(content_type, text)
        failed = {r.rule_id: r.severity for r in result.failing}
        assert rule_id in failed
        assert failed[rule_id] == get_rule(content_type, rule_id).severity


# =============================================================================
# Registry
# =============================================================================


class TestRegistry:
    def test_every_content_type_has_rules(self):
        """All seven content types are registered."""
        assert set(content_types()) == set(ContentType)
        for content_type in ContentType:
            assert get_rules(content_type)

    def test_every_type_has_meta_commentary_rule(self):
        """Each content type guards against AI meta-commentary."""
        for content_type in ContentType:
            ids = [r.rule_id for r in get_rules(content_type) if r.layer == Layer.RED_FLAG]
            assert any(i.endswith("_no_meta_commentary") for i in ids)

    def test_structure_and_red_flag_rules_are_hard(self):
        """STRUCTURE and RED_FLAG rules are HARD; QUALITY rules are SOFT."""
        for rules in RULE_TABLE.values():
            for rule in rules:
                expected = Severity.SOFT if rule.layer == Layer.QUALITY else Severity.HARD
                assert rule.severity == expected, rule.rule_id

    def test_get_rule(self):
        """get_rule finds a rule by id and returns None when absent."""
        rule = get_rule("email_marketing_v1", "email_subject_length")
        assert rule.test_mode.kind == PolicyKind.RELAX
        assert get_rule("email_marketing_v1", "social_hook_length") is None

    def test_validate_accepts_shipped_table(self):
        """The shipped table validates cleanly."""
        validate_registry(RULE_TABLE)

    def test_duplicate_rule_id_rejected(self):
        """Duplicate ids within a content type are reported."""
        table = dict(RULE_TABLE)
        rules = table[ContentType.SEO_BLOG]
        table[ContentType.SEO_BLOG] = rules + (rules[0],)
        with pytest.raises(RuleRegistryError, match="duplicate rule id"):
            validate_registry(table)

    def test_relax_without_default_range_rejected(self):
        """RELAX on a rule with no default range is malformed."""
        table = dict(RULE_TABLE)
        rules = list(table[ContentType.VIDEO_SCRIPT])
        rules[0] = replace(rules[0], test_mode=TestModePolicy.relax(1, 2))
        table[ContentType.VIDEO_SCRIPT] = tuple(rules)
        with pytest.raises(RuleRegistryError, match="without a default range"):
            validate_registry(table)

    def test_missing_content_type_rejected(self):
        """Every ContentType needs a table."""
        table = dict(RULE_TABLE)
        del table[ContentType.REEL_CAPTION]
        with pytest.raises(RuleRegistryError, match="reel_caption_v1: no rules registered"):
            validate_registry(table)

    def test_wrong_prefix_rejected(self):
        """Rule ids carry their content-type prefix."""
        table = dict(RULE_TABLE)
        rules = list(table[ContentType.LANDING_PAGE])
        rules[0] = replace(rules[0], rule_id="headline_present")
        table[ContentType.LANDING_PAGE] = tuple(rules)
        with pytest.raises(RuleRegistryError, match="must start with 'landing_'"):
            validate_registry(table)


# =============================================================================
# Section Parsing
# =============================================================================


class TestSectionParsing:
    @pytest.mark.parametrize(
        "line,kind,rest",
        [
            ("**Hook:** Big news", SectionKind.HOOK, "Big news"),
            ("**Body**: Details here", SectionKind.BODY, "Details here"),
            ("## Call to Action", SectionKind.CTA, ""),
            ("[Button: Shop now]", SectionKind.CTA, "Shop now"),
            ("[SCENE 3] Close-up", SectionKind.SCENE, "Close-up"),
            ("Subject: Hello", SectionKind.SUBJECT, "Hello"),
            ("**Kêu gọi hành động:** Bình luận ngay", SectionKind.CTA, "Bình luận ngay"),
            ("**🎯 Hook:** Emoji label", SectionKind.HOOK, "Emoji label"),
        ],
    )
    def test_heading_shapes(self, line, kind, rest):
        """Every supported label shape is recognised."""
        heading = match_heading(line)
        assert heading is not None
        assert heading[1] == kind
        assert heading[2] == rest

    def test_plain_unknown_label_is_not_heading(self):
        """'Label: text' only counts for known labels."""
        assert match_heading("POV: your first latte") is None
        assert match_heading("Note: this is text") is None

    def test_bold_unknown_label_is_other(self):
        """Bold labels always form a section, unknown ones as OTHER."""
        assert match_heading("**Bonus:** extra")[1] == SectionKind.OTHER

    def test_parse_sections_collects_following_lines(self):
        """A section owns its inline text and the lines after it."""
        sections = parse_sections(SOCIAL_FIXED)
        assert [s.kind for s in sections] == [
            SectionKind.HOOK,
            SectionKind.BODY,
            SectionKind.CTA,
        ]
        assert sections[1].content.endswith("bright and sweet.")
        assert "\n\n" in sections[1].content

    def test_preamble_is_outside_sections(self):
        """Text before the first heading belongs to no section."""
        view = ContentView("Intro line\n**Hook:** Hi")
        assert view.preamble == "Intro line"
        assert len(view.sections) == 1

    def test_markdown_headings_and_bullets(self):
        """Headings carry level and index; bullets are detected."""
        view = ContentView("# Title\n\n## Part\n- one\n- two\n1. three")
        assert [(h.level, h.title, h.line_index) for h in view.headings] == [
            (1, "Title", 0),
            (2, "Part", 2),
        ]
        assert len(view.bullets) == 3
