"""Exception classification into turn outcome severities."""

from __future__ import annotations

from simplechat.state.generation import TurnStatus

from .template import TemplateError
from .context import ContextOverflowError
from .engine import DecodeError, TokenizeError, DetokenizeError, EngineLoadError

ERROR_SEVERITIES: tuple[tuple[type[BaseException], TurnStatus], ...] = (
    (ContextOverflowError, TurnStatus.TURN_FAILED),
    (TokenizeError, TurnStatus.TURN_FAILED),
    (DecodeError, TurnStatus.SESSION_FATAL),
    (DetokenizeError, TurnStatus.SESSION_FATAL),
    (TemplateError, TurnStatus.SESSION_FATAL),
    (EngineLoadError, TurnStatus.SESSION_FATAL),
)


def classify_error(exc: BaseException) -> TurnStatus:
    """Map an exception raised during a turn to the outcome it causes.

    Anything not listed is treated as an engine invariant violation.
    """

    for cls, status in ERROR_SEVERITIES:
        if isinstance(exc, cls):
            return status
    return TurnStatus.SESSION_FATAL


__all__ = ["ERROR_SEVERITIES", "classify_error"]
