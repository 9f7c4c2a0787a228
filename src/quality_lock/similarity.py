"""Word-level diff and similarity scoring between an original and a candidate.

The diff is the UI artifact shown to the reviewer; the similarity score is
derived from that same diff and gates auto-fix acceptance. Only the bucket
label may leave this module towards logs or analytics.

Only words are aligned. The whitespace after each word is re-attached when
tokens are emitted, one token per whitespace character, so a diff can be
rendered back into the exact original and candidate texts.
"""

from __future__ import annotations

import difflib
import itertools
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

_TOKEN = re.compile(r"\S+|\s")
_LEADING = re.compile(r"\s*")
_WORD = re.compile(r"(\S+)(\s*)")

GAP_MARKER = " ... "


class TokenKind(str, Enum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


class SimilarityBucket(str, Enum):
    VERY_CLOSE = ">=0.85"
    CLOSE = "0.70-0.84"
    MODERATE = "0.50-0.69"
    VERY_DIFFERENT = "<0.50"

    @property
    def label(self) -> str:
        return _BUCKET_LABELS[self]


_BUCKET_LABELS = {
    SimilarityBucket.VERY_CLOSE: "very close",
    SimilarityBucket.CLOSE: "close",
    SimilarityBucket.MODERATE: "moderate",
    SimilarityBucket.VERY_DIFFERENT: "very different",
}


@dataclass(frozen=True)
class DiffToken:
    text: str
    kind: TokenKind

    @property
    def is_word(self) -> bool:
        return not self.text.isspace()


@dataclass(frozen=True)
class DiffStats:
    unchanged: int
    added: int
    removed: int


@dataclass(frozen=True)
class SimilarityResult:
    score: float  # 0.0 to 1.0
    bucket: SimilarityBucket
    tokens: tuple[DiffToken, ...]


# =============================================================================
# Diff
# =============================================================================


def tokenize(text: str) -> list[str]:
    return _TOKEN.findall(text)


def diff(original: str, candidate: str) -> list[DiffToken]:
    """Ordered token diff covering every token of both texts exactly once.

    Replaced spans emit their removed tokens before the added ones. Where a
    matched word is followed by different whitespace on each side, the old
    whitespace is emitted as removed and the new as added.
    """
    if original == candidate:
        return [DiffToken(t, TokenKind.UNCHANGED) for t in tokenize(original)]

    lead_a, words_a, spaces_a = _split_words(original)
    lead_b, words_b, spaces_b = _split_words(candidate)
    matcher = difflib.SequenceMatcher(None, words_a, words_b, autojunk=False)

    tokens = _whitespace_tokens(lead_a, lead_b)
    for op, i1, i2, j1, j2 in matcher.get_opcodes():
        if op == "equal":
            for i, j in zip(range(i1, i2), range(j1, j2)):
                tokens.append(DiffToken(words_a[i], TokenKind.UNCHANGED))
                tokens.extend(_whitespace_tokens(spaces_a[i], spaces_b[j]))
            continue
        if op in ("delete", "replace"):
            for i in range(i1, i2):
                tokens.extend(_word_tokens(words_a[i], spaces_a[i], TokenKind.REMOVED))
        if op in ("insert", "replace"):
            for j in range(j1, j2):
                tokens.extend(_word_tokens(words_b[j], spaces_b[j], TokenKind.ADDED))
    return tokens


def _split_words(text: str) -> tuple[str, list[str], list[str]]:
    """Split into leading whitespace, words, and the whitespace after each word."""
    lead = _LEADING.match(text).group(0)
    pairs = _WORD.findall(text, len(lead))
    return lead, [w for w, _ in pairs], [s for _, s in pairs]


def _word_tokens(word: str, space: str, kind: TokenKind) -> list[DiffToken]:
    return [DiffToken(word, kind)] + [DiffToken(c, kind) for c in space]


def _whitespace_tokens(old: str, new: str) -> list[DiffToken]:
    if old == new:
        return [DiffToken(c, TokenKind.UNCHANGED) for c in old]
    return [DiffToken(c, TokenKind.REMOVED) for c in old] + [
        DiffToken(c, TokenKind.ADDED) for c in new
    ]


def diff_stats(tokens: Iterable[DiffToken]) -> DiffStats:
    """Count word tokens (whitespace excluded) by kind."""
    counts = {kind: 0 for kind in TokenKind}
    for token in tokens:
        if token.is_word:
            counts[token.kind] += 1
    return DiffStats(
        unchanged=counts[TokenKind.UNCHANGED],
        added=counts[TokenKind.ADDED],
        removed=counts[TokenKind.REMOVED],
    )


# =============================================================================
# Similarity
# =============================================================================


def score_from_diff(tokens: Iterable[DiffToken]) -> float:
    """Dice overlap of word tokens: 2 * unchanged / (original + candidate)."""
    stats = diff_stats(tokens)
    original_words = stats.unchanged + stats.removed
    candidate_words = stats.unchanged + stats.added
    total = original_words + candidate_words
    if total == 0:
        return 1.0
    return 2.0 * stats.unchanged / total


def similarity(original: str, candidate: str) -> float:
    return score_from_diff(diff(original, candidate))


def bucket_similarity(score: float) -> SimilarityBucket:
    if score >= 0.85:
        return SimilarityBucket.VERY_CLOSE
    if score >= 0.70:
        return SimilarityBucket.CLOSE
    if score >= 0.50:
        return SimilarityBucket.MODERATE
    return SimilarityBucket.VERY_DIFFERENT


def compare(original: str, candidate: str) -> SimilarityResult:
    """Diff once, then derive score and bucket from the same tokens."""
    tokens = tuple(diff(original, candidate))
    score = score_from_diff(tokens)
    return SimilarityResult(score=score, bucket=bucket_similarity(score), tokens=tokens)


# =============================================================================
# Presentation helpers
# =============================================================================


def merge_runs(tokens: Iterable[DiffToken]) -> Iterator[DiffToken]:
    """Collapse consecutive tokens of the same kind into one token."""
    for kind, group in itertools.groupby(tokens, key=lambda t: t.kind):
        yield DiffToken("".join(t.text for t in group), kind)


def changes_with_context(
    tokens: Iterable[DiffToken], context: int = 2
) -> Iterator[DiffToken]:
    """Yield changed tokens plus ``context`` tokens either side of each change.

    Unchanged stretches between two kept windows become a single GAP_MARKER
    token; leading and trailing unchanged text is dropped. A diff with no
    changes yields nothing.
    """
    tokens = tuple(tokens)
    keep = [False] * len(tokens)
    for index, token in enumerate(tokens):
        if token.kind != TokenKind.UNCHANGED:
            lo = max(0, index - context)
            hi = min(len(tokens), index + context + 1)
            keep[lo:hi] = [True] * (hi - lo)

    last_kept = -1
    for index, token in enumerate(tokens):
        if not keep[index]:
            continue
        if last_kept != -1 and index > last_kept + 1:
            yield DiffToken(GAP_MARKER, TokenKind.UNCHANGED)
        yield token
        last_kept = index
