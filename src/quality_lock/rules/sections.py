"""Labelled-section parsing for generated marketing copy.

Generated copy marks its parts with labels in a handful of shapes:

    **Hook:** text            **Hook**: text
    ## Hook                   [SCENE 1]
    Hook: text                (plain form, only for known labels)

Labels are matched in English and Vietnamese and normalised to a
SectionKind. ContentView wraps a text and parses it lazily, once, so every
rule predicate in one evaluation shares the same parse.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Optional


class SectionKind(str, Enum):
    HOOK = "hook"
    BODY = "body"
    CTA = "cta"
    HASHTAGS = "hashtags"
    SUBJECT = "subject"
    PREVIEW = "preview"
    HEADLINE = "headline"
    SUBHEADLINE = "subheadline"
    PRODUCT = "product"
    DESCRIPTION = "description"
    FEATURES = "features"
    BENEFITS = "benefits"
    SOCIAL_PROOF = "social_proof"
    SCENE = "scene"
    OTHER = "other"


LABEL_KINDS: dict[str, SectionKind] = {
    # Hook
    "hook": SectionKind.HOOK,
    "hook line": SectionKind.HOOK,
    "opening": SectionKind.HOOK,
    "intro hook": SectionKind.HOOK,
    "mở đầu": SectionKind.HOOK,
    "mở bài": SectionKind.HOOK,
    "câu mở đầu": SectionKind.HOOK,
    # Body
    "body": SectionKind.BODY,
    "main": SectionKind.BODY,
    "main content": SectionKind.BODY,
    "content": SectionKind.BODY,
    "email body": SectionKind.BODY,
    "nội dung": SectionKind.BODY,
    "nội dung chính": SectionKind.BODY,
    "thân bài": SectionKind.BODY,
    "phần chính": SectionKind.BODY,
    # Call to action
    "cta": SectionKind.CTA,
    "call to action": SectionKind.CTA,
    "call-to-action": SectionKind.CTA,
    "button": SectionKind.CTA,
    "kêu gọi hành động": SectionKind.CTA,
    "lời kêu gọi": SectionKind.CTA,
    # Hashtags
    "hashtags": SectionKind.HASHTAGS,
    "hashtag": SectionKind.HASHTAGS,
    "tags": SectionKind.HASHTAGS,
    # Email
    "subject": SectionKind.SUBJECT,
    "subject line": SectionKind.SUBJECT,
    "tiêu đề email": SectionKind.SUBJECT,
    "chủ đề": SectionKind.SUBJECT,
    "preview": SectionKind.PREVIEW,
    "preview text": SectionKind.PREVIEW,
    "preheader": SectionKind.PREVIEW,
    "xem trước": SectionKind.PREVIEW,
    # Landing page
    "headline": SectionKind.HEADLINE,
    "hero headline": SectionKind.HEADLINE,
    "tiêu đề": SectionKind.HEADLINE,
    "tiêu đề chính": SectionKind.HEADLINE,
    "subheadline": SectionKind.SUBHEADLINE,
    "tiêu đề phụ": SectionKind.SUBHEADLINE,
    "testimonial": SectionKind.SOCIAL_PROOF,
    "testimonials": SectionKind.SOCIAL_PROOF,
    "reviews": SectionKind.SOCIAL_PROOF,
    "social proof": SectionKind.SOCIAL_PROOF,
    "đánh giá": SectionKind.SOCIAL_PROOF,
    # Product
    "product": SectionKind.PRODUCT,
    "name": SectionKind.PRODUCT,
    "product name": SectionKind.PRODUCT,
    "sản phẩm": SectionKind.PRODUCT,
    "tên sản phẩm": SectionKind.PRODUCT,
    "description": SectionKind.DESCRIPTION,
    "product description": SectionKind.DESCRIPTION,
    "mô tả": SectionKind.DESCRIPTION,
    "features": SectionKind.FEATURES,
    "tính năng": SectionKind.FEATURES,
    "đặc điểm": SectionKind.FEATURES,
    "benefits": SectionKind.BENEFITS,
    "lợi ích": SectionKind.BENEFITS,
}

_SCENE_LABEL = re.compile(r"^(scene|beat|part|cảnh|phần)\s*\d*$")

# Heading shapes, tried in order against a stripped line.
_BOLD_INLINE = re.compile(r"^\*\*(?P<label>[^*\n]{1,40}?)\s*:\s*\*\*\s*(?P<rest>.*)$")
_BOLD_COLON_AFTER = re.compile(r"^\*\*(?P<label>[^*\n]{1,40}?)\*\*\s*:\s*(?P<rest>.*)$")
_MARKDOWN = re.compile(r"^(?P<hashes>#{1,6})\s+(?P<label>.+?)\s*:?\s*$")
_BRACKET = re.compile(r"^\[(?P<label>[^\]\n]{1,40})\]\s*(?P<rest>.*)$")
_PLAIN = re.compile(r"^(?P<label>[^\W\d_][^:\n]{0,29}?)\s*:\s*(?P<rest>.*)$")

_BULLET = re.compile(r"^\s*(?:[-*•+✓✔]|\d+[.)])\s+\S")
_MD_HEADING = re.compile(r"^(#{1,6})\s+(.+?)\s*$")


def normalize_label(label: str) -> str:
    """Lowercase, drop leading emoji/punctuation and collapse whitespace."""
    cleaned = re.sub(r"^[^\w]+", "", label.strip().lower())
    cleaned = re.sub(r"[\s:]+$", "", cleaned)
    return re.sub(r"\s+", " ", cleaned)


def classify_label(label: str) -> Optional[SectionKind]:
    """Map a raw label to a SectionKind, or None if the label is unknown."""
    key = normalize_label(label)
    if key in LABEL_KINDS:
        return LABEL_KINDS[key]
    if _SCENE_LABEL.match(key):
        return SectionKind.SCENE
    return None


@dataclass(frozen=True)
class Section:
    label: str
    kind: SectionKind
    content: str


@dataclass(frozen=True)
class MarkdownHeading:
    level: int
    title: str
    line_index: int


def match_heading(line: str) -> Optional[tuple[str, SectionKind, str]]:
    """Return (label, kind, inline_rest) when the line is a section heading."""
    for pattern in (_BOLD_INLINE, _BOLD_COLON_AFTER):
        m = pattern.match(line)
        if m:
            label = m.group("label")
            return label, classify_label(label) or SectionKind.OTHER, m.group("rest")

    m = _MARKDOWN.match(line)
    if m:
        label = m.group("label").strip("* ")
        return label, classify_label(label) or SectionKind.OTHER, ""

    m = _BRACKET.match(line)
    if m:
        label, _, inner_rest = m.group("label").partition(":")
        rest = " ".join(p for p in (inner_rest.strip(), m.group("rest").strip()) if p)
        return label, classify_label(label) or SectionKind.OTHER, rest

    m = _PLAIN.match(line)
    if m:
        kind = classify_label(m.group("label"))
        if kind is not None:
            return m.group("label"), kind, m.group("rest")

    return None


def parse_sections(text: str) -> list[Section]:
    """Split text into labelled sections.

    Lines before the first heading belong to no section. A heading's inline
    text and every following line up to the next heading form its content.
    """
    sections: list[Section] = []
    current: Optional[tuple[str, SectionKind, list[str]]] = None

    def close() -> None:
        if current is not None:
            label, kind, lines = current
            sections.append(Section(label.strip(), kind, "\n".join(lines).strip()))

    for raw_line in text.splitlines():
        heading = match_heading(raw_line.strip())
        if heading is None:
            if current is not None:
                current[2].append(raw_line)
            continue
        close()
        label, kind, rest = heading
        current = (label, kind, [rest] if rest.strip() else [])
    close()
    return sections


class ContentView:
    """Lazily parsed view of one candidate text, shared across predicates."""

    def __init__(self, text: str) -> None:
        self.text = text

    @cached_property
    def stripped(self) -> str:
        return self.text.strip()

    @cached_property
    def sections(self) -> tuple[Section, ...]:
        return tuple(parse_sections(self.text))

    @cached_property
    def lines(self) -> tuple[str, ...]:
        return tuple(self.text.splitlines())

    @cached_property
    def non_empty_lines(self) -> tuple[str, ...]:
        return tuple(line.strip() for line in self.lines if line.strip())

    @cached_property
    def headings(self) -> tuple[MarkdownHeading, ...]:
        found = []
        for index, line in enumerate(self.lines):
            m = _MD_HEADING.match(line.strip())
            if m:
                found.append(MarkdownHeading(len(m.group(1)), m.group(2), index))
        return tuple(found)

    @cached_property
    def bullets(self) -> tuple[str, ...]:
        return tuple(line.strip() for line in self.lines if _BULLET.match(line))

    @cached_property
    def preamble(self) -> str:
        """Unlabelled text before the first section heading."""
        lines: list[str] = []
        for raw_line in self.lines:
            if match_heading(raw_line.strip()) is not None:
                break
            lines.append(raw_line)
        return "\n".join(lines).strip()

    def section(self, *kinds: SectionKind) -> Optional[Section]:
        """First section whose kind is one of ``kinds``."""
        for section in self.sections:
            if section.kind in kinds:
                return section
        return None

    def has_section(self, *kinds: SectionKind) -> bool:
        return self.section(*kinds) is not None
