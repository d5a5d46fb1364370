"""Chat template exceptions."""


class TemplateError(Exception):
    """Raised when the chat template cannot render the conversation.

    A template that fails once will fail for every later turn, so this ends
    the session rather than the turn.
    """


__all__ = ["TemplateError"]
