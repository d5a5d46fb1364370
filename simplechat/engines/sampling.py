"""Sampler chain configuration and its llama.cpp materialisation.

A SamplerChain is an ordered tuple of stage configurations fixed at session
start. The order is significant: each stage narrows or reweights the
candidate set the next stage consumes.

Default chain:
    TopK(40) -> TopP(0.95, min_keep=1) -> Penalties(128, 1.20, 0.10, 0.10)
    -> Temperature(0.7) -> Dist(seed)

The chain itself carries no per-sequence state. The only stateful stage is
the penalty window, which lives inside the llama.cpp sampler object built by
build_llama_sampler() and is fed every sampled token by llama_sampler_sample.
"""

from __future__ import annotations

import logging
from typing import Any
from dataclasses import dataclass

from simplechat.config import (
    CHAT_SEED,
    CHAT_TOP_K,
    CHAT_TOP_P,
    CHAT_TEMPERATURE,
    CHAT_TOP_P_MIN_KEEP,
    CHAT_PENALTY_LAST_N,
    CHAT_REPEAT_PENALTY,
    CHAT_PRESENCE_PENALTY,
    CHAT_FREQUENCY_PENALTY,
)
from simplechat.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TopK:
    k: int


@dataclass(frozen=True, slots=True)
class TopP:
    p: float
    min_keep: int = 1


@dataclass(frozen=True, slots=True)
class Penalties:
    last_n: int
    repeat: float
    frequency: float
    presence: float


@dataclass(frozen=True, slots=True)
class Temperature:
    t: float


@dataclass(frozen=True, slots=True)
class Dist:
    seed: int | None = None


SamplerStage = TopK | TopP | Penalties | Temperature | Dist


@dataclass(frozen=True, slots=True)
class SamplerChain:
    """Ordered, immutable list of sampler stages."""

    stages: tuple[SamplerStage, ...]

    def __post_init__(self) -> None:
        for stage in self.stages:
            _validate_stage(stage)
        if not self.stages or not isinstance(self.stages[-1], Dist):
            raise ValidationError(
                "invalid_sampler_chain",
                "sampler chain must end with a Dist stage",
            )

    def describe(self) -> str:
        return " -> ".join(repr(stage) for stage in self.stages)


def _validate_stage(stage: SamplerStage) -> None:
    if isinstance(stage, TopK):
        if stage.k <= 0:
            raise ValidationError("invalid_top_k", f"top_k must be > 0 (got {stage.k})")
    elif isinstance(stage, TopP):
        if not 0.0 < stage.p <= 1.0:
            raise ValidationError("invalid_top_p", f"top_p must be in (0, 1] (got {stage.p})")
        if stage.min_keep < 1:
            raise ValidationError("invalid_min_keep", f"min_keep must be >= 1 (got {stage.min_keep})")
    elif isinstance(stage, Penalties):
        # llama.cpp reads -1 as "the whole context"
        if stage.last_n < -1:
            raise ValidationError("invalid_penalty_last_n", f"penalty last_n must be >= -1 (got {stage.last_n})")
        if stage.repeat <= 0.0:
            raise ValidationError("invalid_repeat_penalty", f"repeat penalty must be > 0 (got {stage.repeat})")
    elif isinstance(stage, Temperature):
        if stage.t < 0.0:
            raise ValidationError("invalid_temperature", f"temperature must be >= 0 (got {stage.t})")
    elif isinstance(stage, Dist):
        if stage.seed is not None and not 0 <= stage.seed <= 0xFFFFFFFF:
            raise ValidationError("invalid_seed", f"seed must fit in 32 bits (got {stage.seed})")
    else:
        raise ValidationError("invalid_sampler_stage", f"unknown sampler stage: {stage!r}")


def create_sampler_chain(
    *,
    top_k: int = CHAT_TOP_K,
    top_p: float = CHAT_TOP_P,
    min_keep: int = CHAT_TOP_P_MIN_KEEP,
    penalty_last_n: int = CHAT_PENALTY_LAST_N,
    repeat_penalty: float = CHAT_REPEAT_PENALTY,
    frequency_penalty: float = CHAT_FREQUENCY_PENALTY,
    presence_penalty: float = CHAT_PRESENCE_PENALTY,
    temperature: float = CHAT_TEMPERATURE,
    seed: int | None = CHAT_SEED,
) -> SamplerChain:
    """Create the session's sampler chain in its fixed stage order.

    Args:
        top_k: Candidates kept by the top-k stage.
        top_p: Cumulative probability kept by the nucleus stage.
        min_keep: Minimum candidates the nucleus stage keeps.
        penalty_last_n: Recent-token window for the penalty stage.
        repeat_penalty: Multiplicative penalty for repeated tokens.
        frequency_penalty: Penalty scaled by occurrence count.
        presence_penalty: Flat penalty for tokens present in the window.
        temperature: Logit temperature before the final draw.
        seed: Seed for the final draw (None = llama.cpp default seed).

    Returns:
        A validated SamplerChain.

    Raises:
        ValidationError: If any stage value is out of range.
    """
    return SamplerChain(stages=(
        TopK(top_k),
        TopP(top_p, min_keep),
        Penalties(penalty_last_n, repeat_penalty, frequency_penalty, presence_penalty),
        Temperature(temperature),
        Dist(seed),
    ))


def _init_stage(llama_cpp: Any, stage: SamplerStage) -> Any:
    if isinstance(stage, TopK):
        return llama_cpp.llama_sampler_init_top_k(stage.k)
    if isinstance(stage, TopP):
        return llama_cpp.llama_sampler_init_top_p(stage.p, stage.min_keep)
    if isinstance(stage, Penalties):
        return llama_cpp.llama_sampler_init_penalties(
            stage.last_n,
            stage.repeat,
            stage.frequency,
            stage.presence,
        )
    if isinstance(stage, Temperature):
        return llama_cpp.llama_sampler_init_temp(stage.t)
    seed = llama_cpp.LLAMA_DEFAULT_SEED if stage.seed is None else stage.seed
    return llama_cpp.llama_sampler_init_dist(seed)


def build_llama_sampler(chain: SamplerChain) -> Any:
    """Materialise the chain as a llama.cpp sampler chain object.

    The caller owns the returned pointer and must release it with
    ``llama_cpp.llama_sampler_free``.
    """
    import llama_cpp

    sampler = llama_cpp.llama_sampler_chain_init(llama_cpp.llama_sampler_chain_default_params())
    for stage in chain.stages:
        llama_cpp.llama_sampler_chain_add(sampler, _init_stage(llama_cpp, stage))
    logger.info("sampler chain: %s", chain.describe())
    return sampler


__all__ = [
    "TopK",
    "TopP",
    "Penalties",
    "Temperature",
    "Dist",
    "SamplerStage",
    "SamplerChain",
    "create_sampler_chain",
    "build_llama_sampler",
]
