"""Degenerate-output detectors.

Both detectors only update counters held in the turn's GenerationState and
report whether their threshold has been reached; the generation loop decides
what to do about it.

Stall:
    The same token id sampled many times in a row. Compared on ids, not
    text, so two different tokens that render alike never count.

Anomaly:
    A run of display pieces that a classifier predicate flags as suspicious.
    The default predicate targets the symptoms of corrupted GGUF files
    (endless parentheses, at-signs, stray accented glyphs). It is a safety
    valve, not a quality check: false positives and negatives are expected.
"""

from __future__ import annotations

from collections.abc import Callable

from simplechat.state import GenerationState
from simplechat.config import (
    ANOMALY_RUN_THRESHOLD,
    STALL_REPEAT_THRESHOLD,
    ANOMALY_SUSPICIOUS_CHARS,
    ANOMALY_SUSPICIOUS_GLYPHS,
)

PieceClassifier = Callable[[str], bool]


def is_suspicious_piece(piece: str) -> bool:
    """Default anomaly predicate over one display piece."""
    if piece in ANOMALY_SUSPICIOUS_GLYPHS:
        return True
    return len(piece) == 1 and piece in ANOMALY_SUSPICIOUS_CHARS


class StallDetector:
    def __init__(self, threshold: int = STALL_REPEAT_THRESHOLD) -> None:
        self.threshold = threshold

    def observe(self, state: GenerationState, token: int) -> bool:
        """Record a sampled token; True once the repeat run hits the threshold."""
        if token == state.last_token:
            state.same_token_run += 1
        else:
            state.same_token_run = 1
            state.last_token = token
        return state.same_token_run >= self.threshold


class AnomalyDetector:
    def __init__(
        self,
        threshold: int = ANOMALY_RUN_THRESHOLD,
        classifier: PieceClassifier = is_suspicious_piece,
    ) -> None:
        self.threshold = threshold
        self.classifier = classifier

    def observe(self, state: GenerationState, piece: str) -> bool:
        """Record a display piece; True once the suspicious run hits the threshold."""
        if self.classifier(piece):
            state.anomaly_run += 1
        else:
            state.anomaly_run = 0
        return state.anomaly_run >= self.threshold


__all__ = [
    "PieceClassifier",
    "is_suspicious_piece",
    "StallDetector",
    "AnomalyDetector",
]
