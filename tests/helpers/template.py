"""Chat template doubles for formatter tests."""

from __future__ import annotations

from simplechat.errors import TemplateError
from simplechat.messages import ChatTemplate


class TagTemplate(ChatTemplate):
    """Append-only template rendering ``[role]content\\n`` per message."""

    name = "tag"

    def render(self, messages: list[dict[str, str]], add_generation_prompt: bool) -> str:
        text = "".join(f"[{msg['role']}]{msg['content']}\n" for msg in messages)
        if add_generation_prompt:
            text += "[assistant]"
        return text


class NumberedTemplate(ChatTemplate):
    """Not append-only: the header counts every message in the conversation."""

    name = "numbered"

    def render(self, messages: list[dict[str, str]], add_generation_prompt: bool) -> str:
        text = f"#{len(messages)}\n" + "".join(f"{msg['role']}: {msg['content']}\n" for msg in messages)
        if add_generation_prompt:
            text += "assistant: "
        return text


class FailingTemplate(ChatTemplate):
    """Raises TemplateError once ``fail_after`` renders have succeeded."""

    name = "failing"

    def __init__(self, fail_after: int = 0) -> None:
        self.fail_after = fail_after
        self.calls = 0

    def render(self, messages: list[dict[str, str]], add_generation_prompt: bool) -> str:
        self.calls += 1
        if self.calls > self.fail_after:
            raise TemplateError("scripted template failure")
        return TagTemplate().render(messages, add_generation_prompt)


class BytesTemplate(ChatTemplate):
    """Returns bytes instead of text."""

    def render(self, messages, add_generation_prompt):  # type: ignore[override]
        return b"not text"


__all__ = ["TagTemplate", "NumberedTemplate", "FailingTemplate", "BytesTemplate"]
