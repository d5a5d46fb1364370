"""Incremental conversation-to-prompt formatting.

Every turn the whole conversation is re-rendered through the chat template,
but only the bytes appended since the last committed assistant turn are sent
to the model: everything before them is already in the engine's context.

    full render after commit N       |<------ prev_len ------>|
    full render with user turn N+1   |<------ prev_len ------>|<- prompt ->|

This relies on the template being append-only: adding a turn must never
change bytes rendered for earlier turns. The assumption is checked on every
turn and a violation is logged, but the diff is still taken.
"""

from __future__ import annotations

import logging

from simplechat.errors import TemplateError
from simplechat.state import Role, Conversation

from .templates import ChatTemplate

logger = logging.getLogger(__name__)


class ConversationFormatter:
    """Owns the conversation and the formatting cursor for one session.

    Attributes:
        conversation: Ordered turns rendered by the template.
    """

    def __init__(self, template: ChatTemplate, conversation: Conversation | None = None) -> None:
        self._template = template
        self.conversation = conversation if conversation is not None else Conversation()
        self._formatted = bytearray()
        self._prev_len = 0

    @property
    def prev_len(self) -> int:
        """Byte offset of the render already consumed as earlier prompts."""
        return self._prev_len

    @property
    def formatted(self) -> bytes:
        """The most recent full render, UTF-8 encoded."""
        return bytes(self._formatted)

    def render(self, *, add_generation_prompt: bool) -> bytes:
        """Render the whole conversation without touching the cursor.

        Raises:
            TemplateError: If the template fails or returns something other
                than text.
        """
        rendered = self._template.render(self.conversation.as_messages(), add_generation_prompt)
        if not isinstance(rendered, str):
            raise TemplateError(
                f"chat template returned {type(rendered).__name__}, expected str"
            )
        return rendered.encode("utf-8")

    def render_prompt(self, user_text: str) -> str:
        """Append a user turn and return only the newly rendered prompt text.

        Raises:
            TemplateError: If rendering fails; the user turn is removed again.
        """
        self.conversation.append(Role.USER, user_text)
        try:
            rendered = self.render(add_generation_prompt=True)
        except TemplateError:
            self.conversation.pop()
            raise

        consumed = bytes(self._formatted[:self._prev_len])
        if not rendered.startswith(consumed):
            logger.warning(
                "chat template is not append-only: earlier turns rendered differently "
                "(prev_len=%d new_len=%d); the prompt sent to the model may be wrong",
                self._prev_len,
                len(rendered),
            )

        self._formatted[:] = rendered
        prompt = rendered[self._prev_len:]
        logger.debug(
            "rendered turn=%d prev_len=%d new_len=%d prompt_bytes=%d",
            len(self.conversation),
            self._prev_len,
            len(rendered),
            len(prompt),
        )
        return prompt.decode("utf-8", errors="replace")

    def commit_assistant(self, assistant_text: str) -> None:
        """Record the assistant reply and move the cursor past it.

        Raises:
            TemplateError: If rendering fails.
        """
        self.conversation.append(Role.ASSISTANT, assistant_text)
        rendered = self.render(add_generation_prompt=False)
        self._formatted[:] = rendered
        self._prev_len = len(rendered)

    def rollback_user(self) -> bool:
        """Drop a trailing user turn whose generation failed.

        The cursor is untouched: nothing of that turn was committed.

        Returns:
            True if a user turn was removed.
        """
        last = self.conversation.last
        if last is None or last.role is not Role.USER:
            return False
        self.conversation.pop()
        return True

    def reset(self) -> None:
        """Forget every turn and start a fresh conversation."""
        self.conversation.clear()
        self._formatted.clear()
        self._prev_len = 0


__all__ = ["ConversationFormatter"]
