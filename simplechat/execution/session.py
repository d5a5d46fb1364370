"""Interactive session driver.

Reads one line per turn, formats it, generates the reply and records it.
An empty line (or end of input) ends the session normally.

Outcome handling:
    COMPLETED      the reply is committed to the conversation
    TURN_FAILED    context overflow starts a fresh conversation; any other
                   failure drops the pending user turn
    SESSION_FATAL  the session ends with exit status 1
"""

from __future__ import annotations

import sys
import uuid
import logging
from typing import TextIO
from collections.abc import Callable

from simplechat.logging import log_context
from simplechat.errors import TemplateError, ContextOverflowError
from simplechat.messages import ConversationFormatter
from simplechat.state import TurnStatus, TurnOutcome
from simplechat.config.display import (
    YELLOW,
    BANNER_HINT,
    RESET_COLOR,
    USER_PROMPT,
    BANNER_TITLE,
    BANNER_ANOMALY_NOTE,
    CONTEXT_RESET_MESSAGE,
)

from .generation import GenerationLoop

logger = logging.getLogger(__name__)

LineReader = Callable[[], str | None]


def _read_stdin_line() -> str | None:
    line = sys.stdin.readline()
    if not line:
        return None
    return line.rstrip("\r\n")


def print_banner(out: TextIO, *, model_path: str, n_gpu_layers: int) -> None:
    out.write(f"\n{BANNER_TITLE}\n")
    out.write(f"GPU offload: {'enabled' if n_gpu_layers != 0 else 'disabled'}\n")
    out.write(f"Model: {model_path}\n")
    out.write(f"{BANNER_HINT}\n")
    out.write(f"{BANNER_ANOMALY_NOTE}\n\n")
    out.flush()


class ChatSession:
    """One interactive conversation.

    Args:
        formatter: Owns the conversation and the formatting cursor.
        loop: Generation loop bound to the session's engine.
        read_line: Returns the next input line without its newline, or None
            at end of input.
        out: Stream for prompts and colour codes.
        err: Stream for fatal error messages.
    """

    def __init__(
        self,
        formatter: ConversationFormatter,
        loop: GenerationLoop,
        *,
        read_line: LineReader | None = None,
        out: TextIO | None = None,
        err: TextIO | None = None,
        session_id: str | None = None,
    ) -> None:
        self.formatter = formatter
        self.loop = loop
        self._read_line = read_line if read_line is not None else _read_stdin_line
        self._out = out if out is not None else sys.stdout
        self._err = err if err is not None else sys.stderr
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self.turns_completed = 0

    def run(self) -> int:
        """Run until an empty line; return the process exit status."""
        with log_context(session_id=self.session_id):
            logger.info("session start")
            turn_index = 0
            while True:
                self._write(USER_PROMPT)
                user_text = self._read_line()
                if not user_text:
                    logger.info("session end turns=%d", self.turns_completed)
                    return 0

                turn_index += 1
                with log_context(turn_id=str(turn_index)):
                    try:
                        outcome = self.run_turn(user_text)
                    except TemplateError as exc:
                        self._fatal(f"failed to apply the chat template: {exc}")
                        return 1

                if outcome.status is TurnStatus.SESSION_FATAL:
                    self._fatal(outcome.reason or "inference engine failure")
                    return 1

    def run_turn(self, user_text: str) -> TurnOutcome:
        """Format, generate and record a single turn.

        Raises:
            TemplateError: If the chat template cannot render the conversation.
        """
        prompt = self.formatter.render_prompt(user_text)

        self._write(YELLOW)
        outcome = self.loop.generate(prompt)
        self._write(f"\n{RESET_COLOR}")

        if outcome.ok:
            self.formatter.commit_assistant(outcome.text)
            self.turns_completed += 1
        elif outcome.status is TurnStatus.TURN_FAILED:
            if isinstance(outcome.error, ContextOverflowError):
                self._start_fresh()
            else:
                self.formatter.rollback_user()
        return outcome

    def _start_fresh(self) -> None:
        self.formatter.reset()
        self.loop.reset_sequence()
        self._write(f"{CONTEXT_RESET_MESSAGE}\n")
        logger.info("conversation reset after context overflow")

    def _write(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    def _fatal(self, message: str) -> None:
        self._write(RESET_COLOR)
        self._err.write(f"error: {message}\n")
        self._err.flush()


__all__ = ["ChatSession", "LineReader", "print_banner"]
