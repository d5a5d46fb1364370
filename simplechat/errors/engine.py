"""Inference engine exceptions.

These wrap failures reported by llama.cpp so the generation loop can decide
whether the current turn or the whole session has to end.
"""


class EngineLoadError(Exception):
    """Raised when the model or its context cannot be initialised."""


class TokenizeError(Exception):
    """Raised when the prompt text cannot be converted to token ids.

    Nothing has been decoded yet when this happens, so only the current
    turn is lost.
    """


class DecodeError(Exception):
    """Raised when a decode step over a batch fails.

    The engine's sequence state is unknown afterwards and cannot be reused.
    """


class DetokenizeError(Exception):
    """Raised when a sampled token cannot be converted to display text."""


__all__ = [
    "EngineLoadError",
    "TokenizeError",
    "DecodeError",
    "DetokenizeError",
]
