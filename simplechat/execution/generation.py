"""Token-by-token generation loop for one user turn.

Per-turn state machine:

    INIT -> DECODE -> SAMPLE -> CLASSIFY -> EMIT -> DECODE -> ...
                                  |
                                  +-> STOP_EOG | STOP_MAXLEN | STOP_STALL | STOP_ANOMALY

The first batch is the whole tokenized prompt; every later batch is the
single token sampled in the previous step. The token that triggers a stop is
never emitted. Nothing here exits the process: failures come back as a
TurnOutcome and the session driver decides what happens next.
"""

from __future__ import annotations

import sys
import time
import codecs
import logging
from collections.abc import Callable

from simplechat.engines import BaseEngine
from simplechat.config import CHAT_MAX_PREDICT
from simplechat.config.display import ANOMALY_WARNING, CONTEXT_EXCEEDED_MESSAGE
from simplechat.errors import (
    DecodeError,
    TokenizeError,
    DetokenizeError,
    ContextOverflowError,
    classify_error,
)
from simplechat.state import StopReason, TurnStatus, TurnOutcome, GenerationState

from .context_window import ContextWindow
from .detectors import StallDetector, AnomalyDetector

logger = logging.getLogger(__name__)

TextSink = Callable[[str], None]


def _write_stdout(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _write_stderr(text: str) -> None:
    sys.stderr.write(f"{text}\n")
    sys.stderr.flush()


class GenerationLoop:
    """Drives decode, sample, detect and emit cycles against one engine.

    Args:
        engine: The inference engine holding the active sequence.
        max_predict: Tokens emitted per turn before stopping.
        context: Context window tracker (defaults to the engine's window).
        stall: Repeated-token detector.
        anomaly: Suspicious-piece detector.
        emit: Receives each display piece as soon as it is produced, and
            the anomaly diagnostic.
        notice: Receives user-facing notices such as context overflow.
    """

    def __init__(
        self,
        engine: BaseEngine,
        *,
        max_predict: int = CHAT_MAX_PREDICT,
        context: ContextWindow | None = None,
        stall: StallDetector | None = None,
        anomaly: AnomalyDetector | None = None,
        emit: TextSink | None = None,
        notice: TextSink | None = None,
    ) -> None:
        self._engine = engine
        self.max_predict = max_predict
        self.context = context if context is not None else ContextWindow(engine)
        self._stall = stall if stall is not None else StallDetector()
        self._anomaly = anomaly if anomaly is not None else AnomalyDetector()
        self._emit = emit if emit is not None else _write_stdout
        self._notice = notice if notice is not None else _write_stderr

    def generate(self, prompt: str) -> TurnOutcome:
        """Generate the response to an already formatted prompt."""
        start = time.perf_counter()
        is_first_turn = self.context.is_empty()

        try:
            batch = self._engine.tokenize(prompt, add_bos=is_first_turn, special=True)
        except TokenizeError as exc:
            return self._failed(exc, GenerationState(), [])
        if not batch:
            return self._failed(TokenizeError("prompt produced no tokens"), GenerationState(), [])

        logger.debug(
            "turn start first=%s prompt_tokens=%d used=%d capacity=%d",
            is_first_turn,
            len(batch),
            self.context.used(),
            self.context.capacity(),
        )

        state = GenerationState()
        pieces: list[str] = []
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while True:
                self.context.ensure_fits(len(batch))
                self._engine.decode(batch)

                token = self._engine.sample()
                stop = self._stop_reason(state, token)
                if stop is not None:
                    return self._completed(stop, state, pieces, decoder, start)

                piece = decoder.decode(self._engine.token_to_piece(token))
                if self._anomaly.observe(state, piece):
                    self._emit(ANOMALY_WARNING)
                    logger.warning(
                        "abnormal output detected after %d tokens; stopping the turn",
                        state.tokens_decoded,
                    )
                    decoder.reset()
                    return self._completed(StopReason.ANOMALY, state, pieces, decoder, start)

                pieces.append(piece)
                self._emit(piece)
                state.tokens_decoded += 1
                batch = [token]
        except (ContextOverflowError, DecodeError, DetokenizeError) as exc:
            if isinstance(exc, ContextOverflowError):
                self._notice(CONTEXT_EXCEEDED_MESSAGE)
            return self._failed(exc, state, pieces)

    def reset_sequence(self) -> None:
        """Clear the engine's sequence so the next turn starts at position 0."""
        self._engine.reset()

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _stop_reason(self, state: GenerationState, token: int) -> StopReason | None:
        stalled = self._stall.observe(state, token)
        if self._engine.is_eog(token):
            return StopReason.EOG
        if state.tokens_decoded >= self.max_predict:
            return StopReason.MAX_TOKENS
        if stalled:
            return StopReason.STALL
        return None

    def _completed(
        self,
        stop: StopReason,
        state: GenerationState,
        pieces: list[str],
        decoder: codecs.IncrementalDecoder,
        start: float,
    ) -> TurnOutcome:
        # Bytes of a character cut short by the stop are emitted as U+FFFD
        tail = decoder.decode(b"", final=True)
        if tail:
            pieces.append(tail)
            self._emit(tail)
        logger.info(
            "turn end stop=%s tokens=%d used=%d ms=%.1f",
            stop.value,
            state.tokens_decoded,
            self.context.used(),
            (time.perf_counter() - start) * 1000.0,
        )
        return TurnOutcome.completed("".join(pieces), stop, state.tokens_decoded)

    def _failed(self, exc: Exception, state: GenerationState, pieces: list[str]) -> TurnOutcome:
        status = classify_error(exc)
        level = logging.ERROR if status is TurnStatus.SESSION_FATAL else logging.INFO
        logger.log(level, "turn failed status=%s tokens=%d: %s", status.value, state.tokens_decoded, exc)
        return TurnOutcome(
            status=status,
            text="".join(pieces),
            tokens_decoded=state.tokens_decoded,
            reason=str(exc),
            error=exc,
        )


__all__ = ["GenerationLoop", "TextSink"]
