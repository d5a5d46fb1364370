"""Interactive turn-based chat over a llama.cpp model."""

__version__ = "0.1.0"
