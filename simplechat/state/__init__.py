"""Centralized state dataclasses for the chat session.

This module re-exports all state definitions from their respective modules,
providing a single import point for state types.
"""

from .conversation import Role, Turn, Conversation
from .generation import StopReason, TurnStatus, TurnOutcome, GenerationState

__all__ = [
    "Conversation",
    "GenerationState",
    "Role",
    "StopReason",
    "Turn",
    "TurnOutcome",
    "TurnStatus",
]
