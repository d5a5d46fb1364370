"""Generation execution: context window, detectors, loop and session driver."""

from .session import ChatSession, print_banner
from .generation import GenerationLoop
from .context_window import ContextWindow
from .detectors import StallDetector, AnomalyDetector, is_suspicious_piece

__all__ = [
    "AnomalyDetector",
    "ChatSession",
    "ContextWindow",
    "GenerationLoop",
    "StallDetector",
    "is_suspicious_piece",
    "print_banner",
]
