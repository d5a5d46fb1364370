"""Chat template renderers.

A renderer turns the ordered list of ``{role, content}`` messages into the
single prompt text the model was trained on. Sources are
tried in this order by resolve_chat_template():

1. A Jinja template file given on the command line
2. A Hugging Face tokenizer's template (``--hf-tokenizer``)
3. The template embedded in the GGUF metadata
4. ChatML when none of the above is available

The beginning-of-sequence marker is never rendered here: the generation
loop asks the tokenizer to add it on the first turn only, so templates
receive an empty ``bos_token``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import jinja2
from jinja2.sandbox import ImmutableSandboxedEnvironment

from simplechat.errors import TemplateError

if TYPE_CHECKING:
    from simplechat.engines import BaseEngine

logger = logging.getLogger(__name__)


class ChatTemplate(ABC):
    """Renders a full conversation to prompt text."""

    name: str = "template"

    @abstractmethod
    def render(self, messages: list[dict[str, str]], add_generation_prompt: bool) -> str:
        """Render every message, optionally followed by the assistant header.

        Raises:
            TemplateError: If the template cannot render the messages.
        """


class ChatMLTemplate(ChatTemplate):
    """Fallback ChatML format, used when the model ships no template."""

    name = "chatml"

    def render(self, messages: list[dict[str, str]], add_generation_prompt: bool) -> str:
        parts = [
            f"<|im_start|>{msg.get('role', 'user')}\n{msg.get('content', '')}<|im_end|>\n"
            for msg in messages
        ]
        if add_generation_prompt:
            parts.append("<|im_start|>assistant\n")
        return "".join(parts)


def _raise_exception(message: str) -> None:
    raise jinja2.exceptions.TemplateError(message)


def _strftime_now(fmt: str) -> str:
    return datetime.now().strftime(fmt)


class JinjaChatTemplate(ChatTemplate):
    """Jinja chat template rendered in a sandbox.

    Mirrors how Hugging Face tokenizers render ``chat_template`` strings,
    including the ``raise_exception`` and ``strftime_now`` helpers and the
    ``{% break %}``/``{% continue %}`` loop controls many templates use.
    """

    name = "jinja"

    def __init__(self, source: str, *, eos_token: str = "") -> None:
        env = ImmutableSandboxedEnvironment(
            trim_blocks=True,
            lstrip_blocks=True,
            extensions=["jinja2.ext.loopcontrols"],
        )
        env.globals["raise_exception"] = _raise_exception
        env.globals["strftime_now"] = _strftime_now
        try:
            self._template = env.from_string(source)
        except jinja2.TemplateError as exc:
            raise TemplateError(f"failed to parse the chat template: {exc}") from exc
        self._eos_token = eos_token

    @classmethod
    def from_file(cls, path: str | Path, *, eos_token: str = "") -> "JinjaChatTemplate":
        try:
            source = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise TemplateError(f"failed to read chat template file {path}: {exc}") from exc
        return cls(source, eos_token=eos_token)

    def render(self, messages: list[dict[str, str]], add_generation_prompt: bool) -> str:
        try:
            return self._template.render(
                messages=messages,
                add_generation_prompt=add_generation_prompt,
                bos_token="",
                eos_token=self._eos_token,
            )
        except jinja2.TemplateError as exc:
            raise TemplateError(f"failed to apply the chat template: {exc}") from exc


class TransformersChatTemplate(ChatTemplate):
    """Template taken from a Hugging Face tokenizer.

    Useful for GGUF conversions that lost or mangled their template.
    """

    name = "transformers"

    def __init__(self, tokenizer_name: str) -> None:
        from transformers import AutoTokenizer

        try:
            self._tokenizer = AutoTokenizer.from_pretrained(tokenizer_name)
        except (OSError, ValueError) as exc:
            raise TemplateError(f"failed to load tokenizer {tokenizer_name}: {exc}") from exc
        if not getattr(self._tokenizer, "chat_template", None):
            raise TemplateError(f"tokenizer {tokenizer_name} has no chat template")
        self.tokenizer_name = tokenizer_name

    def render(self, messages: list[dict[str, str]], add_generation_prompt: bool) -> str:
        try:
            rendered = self._tokenizer.apply_chat_template(
                messages,
                tokenize=False,
                add_generation_prompt=add_generation_prompt,
            )
        except (ValueError, jinja2.TemplateError) as exc:
            raise TemplateError(f"failed to apply the chat template: {exc}") from exc
        # Strip the tokenizer's BOS; the generation loop adds it on the first turn
        bos = getattr(self._tokenizer, "bos_token", None)
        if bos and rendered.startswith(bos):
            rendered = rendered[len(bos):]
        return rendered


def resolve_chat_template(
    engine: "BaseEngine",
    *,
    template_file: str | None = None,
    hf_tokenizer: str | None = None,
) -> ChatTemplate:
    """Pick the chat template for the session.

    Raises:
        TemplateError: If an explicitly requested template cannot be loaded.
    """
    if template_file:
        logger.info("using chat template file %s", template_file)
        return JinjaChatTemplate.from_file(template_file, eos_token=engine.eos_token)
    if hf_tokenizer:
        logger.info("using chat template from tokenizer %s", hf_tokenizer)
        return TransformersChatTemplate(hf_tokenizer)

    embedded = engine.chat_template()
    if embedded:
        return JinjaChatTemplate(embedded, eos_token=engine.eos_token)

    logger.warning("model has no chat template, falling back to ChatML")
    return ChatMLTemplate()


__all__ = [
    "ChatTemplate",
    "ChatMLTemplate",
    "JinjaChatTemplate",
    "TransformersChatTemplate",
    "resolve_chat_template",
]
