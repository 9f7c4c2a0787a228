"""Quality Lock exception hierarchy.

All exceptions inherit from QualityLockError and carry a three-part structure:
message (what happened), detail (technical context), suggestion (what to do next).

Only setup-time problems raise. Content that fails its rules is a Decision,
and a misbehaving generator is absorbed by the auto-fix state machine.
"""


class QualityLockError(Exception):
    """Base exception for all Quality Lock errors."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.detail:
            parts.append(f"Detail: {self.detail}")
        if self.suggestion:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


class UnknownContentTypeError(QualityLockError):
    """Raised when a content-type id has no rule table.

    This is a caller contract violation, never a FAIL decision.
    """

    def __init__(
        self,
        message: str = "Unknown content type",
        detail: str | None = None,
        content_type: str | None = None,
        suggestion: str | None = "Use one of the registered content types (e.g. social_caption_v1)",
    ) -> None:
        self.content_type = content_type
        if detail is None and content_type is not None:
            detail = f"No rules registered for {content_type!r}"
        super().__init__(message, detail, suggestion)


class RuleRegistryError(QualityLockError):
    """Raised at import time when a rule table is malformed."""

    def __init__(
        self,
        message: str = "Rule registry is malformed",
        detail: str | None = None,
        suggestion: str | None = "Fix the rule table in quality_lock.rules.registry",
    ) -> None:
        super().__init__(message, detail, suggestion)


class InstructionTableError(QualityLockError):
    """Raised when the fix-instruction table and the rule registry disagree."""

    def __init__(
        self,
        message: str = "Fix instruction table does not match the rule registry",
        detail: str | None = None,
        suggestion: str | None = (
            "Add an instruction for every registered rule and remove "
            "instructions for rules that no longer exist"
        ),
    ) -> None:
        super().__init__(message, detail, suggestion)


class ConfigurationError(QualityLockError):
    """Raised when settings cannot be loaded or fail validation."""

    def __init__(
        self,
        message: str = "Invalid Quality Lock configuration",
        detail: str | None = None,
        suggestion: str | None = "Check QUALITY_LOCK_* environment variables or the .env file",
    ) -> None:
        super().__init__(message, detail, suggestion)
