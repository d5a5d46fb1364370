"""Conversation formatting: chat templates and incremental prompts."""

from .formatter import ConversationFormatter
from .templates import (
    ChatTemplate,
    ChatMLTemplate,
    JinjaChatTemplate,
    TransformersChatTemplate,
    resolve_chat_template,
)

__all__ = [
    "ChatMLTemplate",
    "ChatTemplate",
    "ConversationFormatter",
    "JinjaChatTemplate",
    "TransformersChatTemplate",
    "resolve_chat_template",
]
