"""Sampler chain defaults for chat generation.

The chain runs its stages in a fixed order, each one consuming the candidate
set left by the previous stage:

    top_k -> top_p -> penalties -> temperature -> dist

Sampling Parameters:
    top_k: Keep only the k most likely candidates.

    top_p (nucleus sampling): Keep the smallest prefix of candidates whose
        cumulative probability reaches top_p. At least CHAT_TOP_P_MIN_KEEP
        candidates survive.

    penalty_last_n: Size of the window of recently sampled tokens the penalty
        stage looks at.

    repeat_penalty: Multiplicative down-weighting of tokens in the window
        (1.0 = no penalty).

    frequency_penalty: Penalty scaled by how often a token appears in the window.

    presence_penalty: Flat penalty for any token present in the window.

    temperature: Logit rescaling before the final draw.

    seed: Seed for the final stochastic draw. Unset means llama.cpp's
        LLAMA_DEFAULT_SEED (a random seed per session).

All values can be overridden via environment variables or CLI flags.
"""

import os


CHAT_TOP_K = int(os.getenv("CHAT_TOP_K", "40"))
CHAT_TOP_P = float(os.getenv("CHAT_TOP_P", "0.95"))
CHAT_TOP_P_MIN_KEEP = int(os.getenv("CHAT_TOP_P_MIN_KEEP", "1"))
CHAT_PENALTY_LAST_N = int(os.getenv("CHAT_PENALTY_LAST_N", "128"))
CHAT_REPEAT_PENALTY = float(os.getenv("CHAT_REPEAT_PENALTY", "1.20"))
CHAT_FREQUENCY_PENALTY = float(os.getenv("CHAT_FREQUENCY_PENALTY", "0.10"))
CHAT_PRESENCE_PENALTY = float(os.getenv("CHAT_PRESENCE_PENALTY", "0.10"))
CHAT_TEMPERATURE = float(os.getenv("CHAT_TEMPERATURE", "0.7"))

_seed_raw = os.getenv("CHAT_SEED")
CHAT_SEED = int(_seed_raw) if _seed_raw else None


__all__ = [
    "CHAT_TOP_K",
    "CHAT_TOP_P",
    "CHAT_TOP_P_MIN_KEEP",
    "CHAT_PENALTY_LAST_N",
    "CHAT_REPEAT_PENALTY",
    "CHAT_FREQUENCY_PENALTY",
    "CHAT_PRESENCE_PENALTY",
    "CHAT_TEMPERATURE",
    "CHAT_SEED",
]
