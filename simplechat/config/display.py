"""Terminal colours and user-facing messages for the chat session."""

import os


USE_COLOR = os.getenv("NO_COLOR") is None

GREEN = "\033[32m" if USE_COLOR else ""
YELLOW = "\033[33m" if USE_COLOR else ""
RESET_COLOR = "\033[0m" if USE_COLOR else ""

USER_PROMPT = f"{GREEN}> {RESET_COLOR}"

BANNER_TITLE = "=== llama.cpp simple chat ==="
BANNER_HINT = "Type a message and press Enter to send. An empty line exits."
BANNER_ANOMALY_NOTE = "Note: degenerate model output is detected and stopped automatically."

CONTEXT_EXCEEDED_MESSAGE = "context size exceeded"
CONTEXT_RESET_MESSAGE = "Starting a new conversation."

ANOMALY_WARNING = (
    "\n\n[model quality warning]\n"
    "The model produced a long run of abnormal characters. This usually means:\n"
    "  - the model file may be corrupted or of poor quality\n"
    "  - try a different GGUF model file\n"
    "  - or check that the model is compatible with llama.cpp\n\n"
)


__all__ = [
    "USE_COLOR",
    "GREEN",
    "YELLOW",
    "RESET_COLOR",
    "USER_PROMPT",
    "BANNER_TITLE",
    "BANNER_HINT",
    "BANNER_ANOMALY_NOTE",
    "CONTEXT_EXCEEDED_MESSAGE",
    "CONTEXT_RESET_MESSAGE",
    "ANOMALY_WARNING",
]
