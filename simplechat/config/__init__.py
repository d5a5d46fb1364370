"""Aggregator of configuration modules.

This module re-exports the config API from smaller modules:
- engine: model loading, context size and generation length
- sampling: sampler chain defaults
- safety: stall and anomaly thresholds
- display: terminal colours and messages
- logging: log level and format
"""

from .engine import (
    CHAT_N_CTX,
    CHAT_N_GPU_LAYERS,
    CHAT_MAX_PREDICT,
    ENGINE_VERBOSE,
    TOKEN_PIECE_BUFFER_SIZE,
)
from .sampling import (
    CHAT_TOP_K,
    CHAT_TOP_P,
    CHAT_TOP_P_MIN_KEEP,
    CHAT_PENALTY_LAST_N,
    CHAT_REPEAT_PENALTY,
    CHAT_FREQUENCY_PENALTY,
    CHAT_PRESENCE_PENALTY,
    CHAT_TEMPERATURE,
    CHAT_SEED,
)
from .safety import (
    STALL_REPEAT_THRESHOLD,
    ANOMALY_RUN_THRESHOLD,
    ANOMALY_SUSPICIOUS_CHARS,
    ANOMALY_SUSPICIOUS_GLYPHS,
)

__all__ = [
    # engine
    "CHAT_N_CTX",
    "CHAT_N_GPU_LAYERS",
    "CHAT_MAX_PREDICT",
    "ENGINE_VERBOSE",
    "TOKEN_PIECE_BUFFER_SIZE",
    # sampling
    "CHAT_TOP_K",
    "CHAT_TOP_P",
    "CHAT_TOP_P_MIN_KEEP",
    "CHAT_PENALTY_LAST_N",
    "CHAT_REPEAT_PENALTY",
    "CHAT_FREQUENCY_PENALTY",
    "CHAT_PRESENCE_PENALTY",
    "CHAT_TEMPERATURE",
    "CHAT_SEED",
    # safety
    "STALL_REPEAT_THRESHOLD",
    "ANOMALY_RUN_THRESHOLD",
    "ANOMALY_SUSPICIOUS_CHARS",
    "ANOMALY_SUSPICIOUS_GLYPHS",
]
