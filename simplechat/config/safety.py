"""Thresholds for the degenerate-output safety stops."""

import os


# Consecutive identical token ids that end a turn
STALL_REPEAT_THRESHOLD = int(os.getenv("STALL_REPEAT_THRESHOLD", "32"))

# Consecutive suspicious pieces that end a turn
ANOMALY_RUN_THRESHOLD = int(os.getenv("ANOMALY_RUN_THRESHOLD", "10"))

# Single characters that show up in long runs when a model file is corrupted
ANOMALY_SUSPICIOUS_CHARS = frozenset("()@")

# Whole pieces observed in the same failure mode
ANOMALY_SUSPICIOUS_GLYPHS = frozenset({"ó", "gó"})


__all__ = [
    "STALL_REPEAT_THRESHOLD",
    "ANOMALY_RUN_THRESHOLD",
    "ANOMALY_SUSPICIOUS_CHARS",
    "ANOMALY_SUSPICIOUS_GLYPHS",
]
