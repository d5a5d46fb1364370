"""Per-turn generation state and the tagged turn result.

GenerationState:
    Counters mutated once per sampled token and reset at the start of every
    turn: the last sampled id, how many times in a row it was sampled, the
    current run of suspicious pieces and the number of emitted tokens.

TurnOutcome:
    What one call to the generation loop produced. The status tells the
    session driver whether to keep going, recover, or stop:

    - COMPLETED: the turn ended on one of the stop conditions
      (end-of-generation, max tokens, stall, anomaly)
    - TURN_FAILED: this turn could not proceed (context full, prompt could
      not be tokenized); the session can continue
    - SESSION_FATAL: the engine is in an unknown state; the session ends
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass


class TurnStatus(str, Enum):
    COMPLETED = "completed"
    TURN_FAILED = "turn_failed"
    SESSION_FATAL = "session_fatal"


class StopReason(str, Enum):
    EOG = "eog"
    MAX_TOKENS = "max_tokens"
    STALL = "stall"
    ANOMALY = "anomaly"


@dataclass(slots=True)
class GenerationState:
    """Mutable counters for a single turn."""

    last_token: int | None = None
    same_token_run: int = 0
    anomaly_run: int = 0
    tokens_decoded: int = 0


@dataclass(frozen=True, slots=True)
class TurnOutcome:
    """Result of one user turn.

    Attributes:
        status: Whether the session may continue.
        text: Response text emitted so far (complete for COMPLETED turns).
        stop_reason: Which stop condition ended a COMPLETED turn.
        tokens_decoded: Number of tokens emitted to the output stream.
        reason: Human-readable cause for failed turns.
        error: The exception behind a failed turn, if any.
    """

    status: TurnStatus
    text: str = ""
    stop_reason: StopReason | None = None
    tokens_decoded: int = 0
    reason: str | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.status is TurnStatus.COMPLETED

    @classmethod
    def completed(cls, text: str, stop_reason: StopReason, tokens_decoded: int) -> "TurnOutcome":
        return cls(
            status=TurnStatus.COMPLETED,
            text=text,
            stop_reason=stop_reason,
            tokens_decoded=tokens_decoded,
        )


__all__ = [
    "TurnStatus",
    "StopReason",
    "GenerationState",
    "TurnOutcome",
]
