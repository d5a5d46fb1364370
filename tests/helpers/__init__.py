"""Shared fakes for unit tests: engine, llama_cpp bindings and chat templates."""

__all__ = [
    "engine",
    "llama",
    "template",
]
