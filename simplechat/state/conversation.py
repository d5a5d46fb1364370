"""Conversation dataclasses.

Turn:
    One message in the conversation, tagged with its role. Frozen once
    created so earlier turns can never change under the formatter.

Conversation:
    Chronologically ordered list of turns. Turns are expected to alternate
    user/assistant starting with the user; the chat template relies on it
    but it is not enforced here.
"""

from __future__ import annotations

from enum import Enum
from collections.abc import Iterator
from dataclasses import field, dataclass


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class Turn:
    """A single message in the running conversation.

    Attributes:
        role: Who produced the message.
        content: The message text.
    """

    role: Role
    content: str

    def as_message(self) -> dict[str, str]:
        """Return the {role, content} mapping chat templates expect."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class Conversation:
    """Ordered sequence of turns owned by one chat session."""

    turns: list[Turn] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.turns)

    def append(self, role: Role, content: str) -> Turn:
        turn = Turn(role=role, content=content)
        self.turns.append(turn)
        return turn

    def pop(self) -> Turn:
        return self.turns.pop()

    def clear(self) -> None:
        self.turns.clear()

    @property
    def last(self) -> Turn | None:
        return self.turns[-1] if self.turns else None

    def as_messages(self) -> list[dict[str, str]]:
        return [turn.as_message() for turn in self.turns]


__all__ = ["Role", "Turn", "Conversation"]
