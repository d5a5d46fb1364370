"""Centralized exception classes for the chat session.

This module re-exports all domain-specific exceptions from their respective
modules, providing a single import point for error handling.

Organization:
    - engine.py: Model loading, tokenize, decode and detokenize failures
    - context.py: Context window overflow
    - template.py: Chat template rendering failures
    - validation.py: Configuration errors with error codes
    - classify.py: Exception-to-turn-outcome mapping
"""

from .template import TemplateError
from .classify import classify_error
from .validation import ValidationError
from .context import ContextOverflowError
from .engine import DecodeError, TokenizeError, DetokenizeError, EngineLoadError

__all__ = [
    # Engine errors
    "EngineLoadError",
    "TokenizeError",
    "DecodeError",
    "DetokenizeError",
    # Context window
    "ContextOverflowError",
    # Templates
    "TemplateError",
    # Validation
    "ValidationError",
    # Classification
    "classify_error",
]
