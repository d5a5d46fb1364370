"""Inference engine abstraction.

1. Engine Factory:
   - create_engine(): Loads the llama.cpp engine for a model path

2. Sampler Chain:
   - create_sampler_chain(): Ordered stage configuration from config defaults
   - build_llama_sampler(): Materialises a chain on the llama.cpp side

Usage:
    from simplechat.engines import create_engine, create_sampler_chain

    chain = create_sampler_chain(temperature=0.7)
    with create_engine("model.gguf", chain, n_ctx=2048, n_gpu_layers=99) as engine:
        ids = engine.tokenize("hello", add_bos=True)
        engine.decode(ids)
        token = engine.sample()
"""

from __future__ import annotations

from simplechat.config import ENGINE_VERBOSE

from .base import BaseEngine
from .sampling import (
    Dist,
    TopK,
    TopP,
    Penalties,
    Temperature,
    SamplerChain,
    SamplerStage,
    build_llama_sampler,
    create_sampler_chain,
)


def create_engine(
    model_path: str,
    sampler_chain: SamplerChain,
    *,
    n_ctx: int,
    n_gpu_layers: int,
    verbose: bool = ENGINE_VERBOSE,
) -> BaseEngine:
    """Load the model and return a ready engine.

    Raises:
        EngineLoadError: If the model or context cannot be initialised.
    """
    from .llama import LlamaCppEngine

    return LlamaCppEngine(
        model_path,
        sampler_chain,
        n_ctx=n_ctx,
        n_gpu_layers=n_gpu_layers,
        verbose=verbose,
    )


__all__ = [
    "BaseEngine",
    "Dist",
    "Penalties",
    "SamplerChain",
    "SamplerStage",
    "Temperature",
    "TopK",
    "TopP",
    "build_llama_sampler",
    "create_engine",
    "create_sampler_chain",
]
