"""Abstract base class for inference engines.

Describes the capabilities the chat loop consumes from the external engine:
tokenization, one-token detokenization, batched decode steps, sampling from
the configured chain, and bookkeeping of the single active sequence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class BaseEngine(ABC):
    """Abstract base class for inference engines."""

    @abstractmethod
    def n_ctx(self) -> int:
        """Size of the context window in token positions."""

    @abstractmethod
    def n_used(self) -> int:
        """Highest occupied position of the active sequence plus one.

        Zero when nothing has been decoded since load or the last reset.
        """

    @abstractmethod
    def tokenize(self, text: str, *, add_bos: bool, special: bool = True) -> list[int]:
        """Convert text to token ids.

        Args:
            text: The text to tokenize.
            add_bos: Prepend the model's beginning-of-sequence token.
            special: Parse special-token markup (e.g. ``<|im_start|>``) into
                their ids instead of treating it as plain text.

        Raises:
            TokenizeError: If the engine cannot tokenize the text.
        """

    @abstractmethod
    def token_to_piece(self, token: int) -> bytes:
        """Return the raw bytes for one token, special tokens rendered.

        A piece may hold only part of a multi-byte UTF-8 character.

        Raises:
            DetokenizeError: If the token cannot be converted.
        """

    @abstractmethod
    def decode(self, batch: Sequence[int]) -> None:
        """Run one decode step over the batch, advancing the sequence.

        Raises:
            DecodeError: If the engine reports a failure.
        """

    @abstractmethod
    def sample(self) -> int:
        """Draw the next token from the last decode step's distribution."""

    @abstractmethod
    def is_eog(self, token: int) -> bool:
        """Whether the token ends generation (EOS, EOT, ...)."""

    def chat_template(self) -> str | None:
        """The chat template embedded in the model, if any."""
        return None

    @property
    def eos_token(self) -> str:
        return ""

    def reset(self) -> None:
        """Forget the active sequence so the next decode starts at position 0."""

    def close(self) -> None:
        """Release engine resources."""

    def __enter__(self) -> "BaseEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["BaseEngine"]
