"""Auto-fix: repair prompts, the retry/fallback orchestrator, pattern memory."""

from quality_lock.autofix.orchestrator import (
    AutoFixAttempt,
    AutoFixOrchestrator,
    FixOutcome,
    FixState,
    TextGenerator,
)
from quality_lock.autofix.pattern_memory import InMemoryPatternMemory, PatternMemory
from quality_lock.autofix.prompt_builder import FixPrompt, PromptMode, build_fix_prompt

__all__ = [
    "AutoFixAttempt",
    "AutoFixOrchestrator",
    "FixOutcome",
    "FixPrompt",
    "FixState",
    "InMemoryPatternMemory",
    "PatternMemory",
    "PromptMode",
    "TextGenerator",
    "build_fix_prompt",
]
