"""Engine loading and context window configuration."""

import os


CHAT_N_CTX = int(os.getenv("CHAT_N_CTX", "2048"))
CHAT_N_GPU_LAYERS = int(os.getenv("CHAT_N_GPU_LAYERS", "99"))
# Tokens to generate per turn before stopping
CHAT_MAX_PREDICT = int(os.getenv("CHAT_MAX_PREDICT", "256"))

# llama.cpp prints load progress and per-layer info unless silenced
ENGINE_VERBOSE = os.getenv("ENGINE_VERBOSE", "0") == "1"

# Initial buffer for one token's text; longer pieces are retried at their size
TOKEN_PIECE_BUFFER_SIZE = int(os.getenv("TOKEN_PIECE_BUFFER_SIZE", "256"))


__all__ = [
    "CHAT_N_CTX",
    "CHAT_N_GPU_LAYERS",
    "CHAT_MAX_PREDICT",
    "ENGINE_VERBOSE",
    "TOKEN_PIECE_BUFFER_SIZE",
]
