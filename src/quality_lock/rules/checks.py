"""Shared text heuristics used by the rule predicates and the guardrails.

Pattern lists are bilingual (Vietnamese + English) because generated copy
comes in either language. All helpers are pure.
"""

from __future__ import annotations

import re

import textstat

# =============================================================================
# Pattern lists
# =============================================================================

# AI self-reference / framing text that must never reach a publishing surface.
META_COMMENTARY_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\bhere is\b",
        r"\bhere's (?:your|the|a) (?:caption|post|content|version|draft|script|email|rewrite)",
        r"\bbelow is\b",
        r"\bas an ai\b",
        r"\bas a language model\b",
        r"\bi (?:will|'ll) (?:rewrite|fix|revise|write|create|update)\b",
        r"\bi(?: have|'ve) (?:rewritten|revised|fixed|updated|made|written|created)\b",
        r"\blet me (?:rewrite|fix|revise|help)\b",
        r"\bi hope this helps\b",
        r"\bdưới đây là\b",
        r"\bđây là (?:bài|nội dung|caption|phiên bản|email|kịch bản)\b",
        r"\btôi sẽ\b",
        r"\btôi đã (?:sửa|viết|chỉnh)\b",
    ]
]

GENERIC_CTA_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"^\s*(?:tìm hiểu thêm|xem thêm|click here|learn more|read more|see more)\s*[.!]?\s*$",
        r"^\s*(?:liên hệ ngay|contact us)\s*[.!]?\s*$",
        r"^\s*(?:nhấn vào đây|bấm vào đây)\s*[.!]?\s*$",
    ]
]

ACTION_INTENT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\b(?:comment|share|save|follow|subscribe|tag|dm|join|sign up|book|try|visit|shop|order|reply|tell)\b",
        r"\b(?:bình luận|chia sẻ|lưu|theo dõi|đăng ký|để lại|hãy|inbox|nhắn tin|đặt|ghé|thử|kể)\b",
    ]
]

SPAM_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\bact now\b",
        r"100%\s*free\b",
        r"\bfree\s*!{2,}",
        r"!{3,}",
        r"\$\$\$",
        r"\brisk[- ]free\b",
        r"\bclick here now\b",
        r"\bguaranteed winner\b",
        r"\bmiễn phí 100%",
        r"\bhành động ngay\b",
    ]
]

CONVERSATIONAL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [r"\?", r"\byou(?:r|'re|'ll)?\b", r"\bbạn\b", r"\bmình\b"]
]

SOCIAL_PROOF_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\btestimonials?\b",
        r"\breviews?\b",
        r"\brated\b",
        r"\bcustomers? (?:say|love)\b",
        r"\bđánh giá\b",
        r"\bkhách hàng (?:nói|chia sẻ|yêu thích)\b",
        r"★",
        r"\b\d+(?:[.,]\d+)?\s*(?:/5|stars?|sao)\b",
    ]
]

BENEFIT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\bbenefits?\b",
        r"\bhelps? (?:you|your)\b",
        r"\bso you can\b",
        r"\bsaves? (?:you )?(?:time|money)\b",
        r"\blợi ích\b",
        r"\bgiúp (?:bạn|bé|da|tóc|cho)\b",
        r"\btiết kiệm\b",
    ]
]

PURCHASE_CTA_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\b(?:buy|order|shop|add to cart|get yours|purchase)\b",
        r"\b(?:mua|đặt hàng|đặt ngay|thêm vào giỏ|sở hữu ngay)\b",
    ]
]

ENGAGEMENT_CTA_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\b(?:comment|share|save|follow|like|tag|dm|watch|duet)\b",
        r"\b(?:bình luận|chia sẻ|lưu|theo dõi|thả tim|tag|xem)\b",
    ]
]

CONCLUSION_HEADING = re.compile(
    r"\b(?:conclusion|summary|final thoughts|kết luận|tổng kết|lời kết)\b",
    re.IGNORECASE,
)

PERSONALIZATION_TOKEN = re.compile(r"\{\{\s*\w+\s*\}\}")
BUTTON_MARKUP = re.compile(r"\[\s*(?:button|nút)\s*:[^\]]+\]", re.IGNORECASE)

_EMOJI = re.compile(
    "[\U0001F300-\U0001FAFF\U0001F1E6-\U0001F1FF☀-➿⭐⭕]"
)
_HASHTAG = re.compile(r"(?<!\S)#\w+")
_SENTENCE_END = re.compile(r"(?<=[.!?…])\s+")
_VIETNAMESE_CHARS = re.compile(
    r"[ăâđêôơưàảãáạằẳẵắặầẩẫấậèẻẽéẹềểễếệìỉĩíịòỏõóọồổỗốộờởỡớợùủũúụừửữứựỳỷỹýỵ]",
    re.IGNORECASE,
)


# =============================================================================
# Helpers
# =============================================================================


def find_first(patterns: list[re.Pattern], text: str) -> str | None:
    """Return the first matching phrase from ``patterns`` in ``text``."""
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            return m.group(0)
    return None


def matches_any(patterns: list[re.Pattern], text: str) -> bool:
    return find_first(patterns, text) is not None


def find_meta_commentary(text: str) -> str | None:
    return find_first(META_COMMENTARY_PATTERNS, text)


def split_sentences(text: str) -> list[str]:
    """Split text into sentences on terminal punctuation or line breaks."""
    sentences = []
    for line in text.splitlines():
        for part in _SENTENCE_END.split(line.strip()):
            if part.strip():
                sentences.append(part.strip())
    return sentences


def split_paragraphs(text: str) -> list[str]:
    return [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]


def word_count(text: str) -> int:
    if not text.strip():
        return 0
    return textstat.lexicon_count(text, removepunct=True)


def count_emoji(text: str) -> int:
    return len(_EMOJI.findall(text))


def find_emoji(text: str) -> set[str]:
    return set(_EMOJI.findall(text))


def find_hashtags(text: str) -> list[str]:
    return _HASHTAG.findall(text)


def count_keyword(text: str, keyword: str) -> int:
    """Case-insensitive whole-phrase occurrences of ``keyword``."""
    keyword = keyword.strip()
    if not keyword:
        return 0
    pattern = re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)", re.IGNORECASE)
    return len(pattern.findall(text))


def has_vietnamese(text: str) -> bool:
    return _VIETNAMESE_CHARS.search(text) is not None
