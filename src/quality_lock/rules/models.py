"""Rule registry data types: layers, severities, testMode policies, results.

Everything here is immutable. Rule definitions are created once when the
registry loads; rule results are produced fresh by every evaluation call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from quality_lock.rules.sections import ContentView


# =============================================================================
# Enumerations
# =============================================================================


class ContentType(str, Enum):
    SOCIAL_CAPTION = "social_caption_v1"
    SEO_BLOG = "seo_blog_v1"
    VIDEO_SCRIPT = "video_script_v1"
    EMAIL_MARKETING = "email_marketing_v1"
    LANDING_PAGE = "landing_page_v1"
    PRODUCT_DESCRIPTION = "product_description_v1"
    REEL_CAPTION = "reel_caption_v1"


class Layer(str, Enum):
    STRUCTURE = "STRUCTURE"  # required shape
    RED_FLAG = "RED_FLAG"  # severe content defect
    QUALITY = "QUALITY"  # stylistic guidance


class Severity(str, Enum):
    HARD = "HARD"
    SOFT = "SOFT"


class Decision(str, Enum):
    PASS = "PASS"
    DRAFT = "DRAFT"
    FAIL = "FAIL"


class PolicyKind(str, Enum):
    SAME = "SAME"
    SKIP = "SKIP"
    RELAX = "RELAX"


# =============================================================================
# Rule definitions
# =============================================================================


@dataclass(frozen=True)
class Bounds:
    """Inclusive numeric range used by threshold rules."""

    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def __str__(self) -> str:
        return f"{self.low:g}-{self.high:g}"


@dataclass(frozen=True)
class TestModePolicy:
    """How a rule behaves when evaluation runs under testMode."""

    __test__ = False  # not a pytest test class

    kind: PolicyKind = PolicyKind.SAME
    relaxed: Optional[Bounds] = None

    @classmethod
    def same(cls) -> TestModePolicy:
        return cls(PolicyKind.SAME)

    @classmethod
    def skip(cls) -> TestModePolicy:
        return cls(PolicyKind.SKIP)

    @classmethod
    def relax(cls, low: float, high: float) -> TestModePolicy:
        return cls(PolicyKind.RELAX, Bounds(low, high))

    def __str__(self) -> str:
        if self.kind == PolicyKind.RELAX and self.relaxed is not None:
            return f"RELAX({self.relaxed})"
        return self.kind.value


@dataclass(frozen=True)
class RuleContext:
    """What a check predicate sees: the parsed text plus active thresholds."""

    view: ContentView
    bounds: Optional[Bounds] = None
    topic_keyword: Optional[str] = None

    @property
    def text(self) -> str:
        return self.view.text


# A predicate returns (passed, human-readable message).
CheckFn = Callable[[RuleContext], tuple[bool, str]]


@dataclass(frozen=True)
class RuleDefinition:
    content_type: ContentType
    rule_id: str
    layer: Layer
    severity: Severity
    description: str
    check: CheckFn = field(compare=False)
    test_mode: TestModePolicy = TestModePolicy()
    bounds: Optional[Bounds] = None  # default range for threshold rules

    def is_skipped(self, test_mode: bool) -> bool:
        return test_mode and self.test_mode.kind == PolicyKind.SKIP

    def active_bounds(self, test_mode: bool) -> Optional[Bounds]:
        """Relaxed range under testMode for RELAX rules, else the default."""
        if test_mode and self.test_mode.kind == PolicyKind.RELAX:
            return self.test_mode.relaxed
        return self.bounds


# =============================================================================
# Evaluation output
# =============================================================================


@dataclass(frozen=True)
class RuleResult:
    rule_id: str
    layer: Layer
    severity: Severity
    passed: bool
    message: str

    def to_dict(self) -> dict:
        return {
            "rule_id": self.rule_id,
            "layer": self.layer.value,
            "severity": self.severity.value,
            "passed": self.passed,
            "message": self.message,
        }


@dataclass(frozen=True)
class EvaluationResult:
    content_type: ContentType
    decision: Decision
    hard_fails: tuple[RuleResult, ...] = ()
    soft_fails: tuple[RuleResult, ...] = ()
    results: tuple[RuleResult, ...] = ()
    skipped_rule_ids: tuple[str, ...] = ()
    test_mode: bool = False

    @property
    def failing(self) -> tuple[RuleResult, ...]:
        """Hard fails first, then soft fails."""
        return self.hard_fails + self.soft_fails

    @property
    def hard_fail_ids(self) -> frozenset[str]:
        return frozenset(r.rule_id for r in self.hard_fails)

    def to_dict(self) -> dict:
        """Serialize to a JSON-safe dict for the consumer contract."""
        return {
            "content_type": self.content_type.value,
            "decision": self.decision.value,
            "hard_fails": [r.to_dict() for r in self.hard_fails],
            "soft_fails": [r.to_dict() for r in self.soft_fails],
            "skipped_rule_ids": list(self.skipped_rule_ids),
            "test_mode": self.test_mode,
        }
