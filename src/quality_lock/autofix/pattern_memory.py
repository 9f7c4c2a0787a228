"""Pattern memory: per-pattern auto-fix outcome tracking.

A pattern is the combination of a content type and the set of rules an
auto-fix targeted. Downstream preference features use its reliability to
decide whether an automatic choice may be re-applied; the orchestrator only
records outcomes into it and never branches on it.

Stores are injected. InMemoryPatternMemory is safe to share between
concurrent fix operations.
"""

from __future__ import annotations

import hashlib
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional, Protocol

from quality_lock.rules.models import ContentType

# 2+ rejected outcomes mark a pattern unreliable
DEFAULT_NEGATIVE_THRESHOLD = 2


def pattern_hash(content_type: ContentType, rule_ids: Iterable[str]) -> str:
    """Stable, privacy-safe id for (content type, targeted rules)."""
    key = content_type.value + "|" + ",".join(sorted(set(rule_ids)))
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]


@dataclass(frozen=True)
class PatternStats:
    pattern_hash: str
    accepted_count: int = 0
    negative_count: int = 0
    last_updated_at: float = 0.0

    @property
    def total(self) -> int:
        return self.accepted_count + self.negative_count


class PatternMemory(Protocol):
    def get(self, pattern_hash: str) -> Optional[PatternStats]: ...

    def record(self, pattern_hash: str, accepted: bool) -> PatternStats: ...

    def is_unreliable(self, pattern_hash: str) -> bool: ...


class InMemoryPatternMemory:
    """Thread-safe, process-local PatternMemory."""

    def __init__(
        self,
        negative_threshold: int = DEFAULT_NEGATIVE_THRESHOLD,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if negative_threshold < 1:
            raise ValueError("negative_threshold must be at least 1")
        self._negative_threshold = negative_threshold
        self._clock = clock
        self._patterns: dict[str, PatternStats] = {}
        self._lock = threading.Lock()

    def get(self, pattern_hash: str) -> Optional[PatternStats]:
        with self._lock:
            return self._patterns.get(pattern_hash)

    def record(self, pattern_hash: str, accepted: bool) -> PatternStats:
        with self._lock:
            stats = self._patterns.get(pattern_hash) or PatternStats(pattern_hash)
            if accepted:
                stats = replace(stats, accepted_count=stats.accepted_count + 1)
            else:
                stats = replace(stats, negative_count=stats.negative_count + 1)
            stats = replace(stats, last_updated_at=self._clock())
            self._patterns[pattern_hash] = stats
            return stats

    def is_unreliable(self, pattern_hash: str) -> bool:
        with self._lock:
            stats = self._patterns.get(pattern_hash)
        if stats is None:
            return False
        return stats.negative_count >= self._negative_threshold

    def clear(self) -> None:
        with self._lock:
            self._patterns.clear()
