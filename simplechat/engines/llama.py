"""llama.cpp engine backed by the llama-cpp-python bindings.

The high-level ``llama_cpp.Llama`` object owns the model, the context and
the token bookkeeping of the single active sequence (``n_tokens``). Sampling
goes through a low-level llama.cpp sampler chain built from the session's
SamplerChain so stages run in exactly the configured order. End-of-generation
checks and token-to-text conversion go straight to the model's vocab.
"""

from __future__ import annotations

import ctypes
import logging
from typing import Any
from collections.abc import Sequence

from simplechat.config import TOKEN_PIECE_BUFFER_SIZE
from simplechat.errors import DecodeError, TokenizeError, EngineLoadError, DetokenizeError

from .base import BaseEngine
from .sampling import SamplerChain, build_llama_sampler

logger = logging.getLogger(__name__)

_TEMPLATE_METADATA_KEY = "tokenizer.chat_template"


class LlamaCppEngine(BaseEngine):
    """Single-sequence llama.cpp engine.

    Args:
        model_path: Path to a GGUF model file.
        sampler_chain: Stage configuration for the session's sampler.
        n_ctx: Context window size; the prompt batch size matches it so a
            whole prompt is decoded in one step.
        n_gpu_layers: Layers to offload to the GPU (0 = CPU only).
        verbose: Let llama.cpp print its own load/progress logs.

    Raises:
        EngineLoadError: If the model or its context cannot be created.
    """

    def __init__(
        self,
        model_path: str,
        sampler_chain: SamplerChain,
        *,
        n_ctx: int,
        n_gpu_layers: int,
        verbose: bool = False,
    ) -> None:
        import llama_cpp

        self.model_path = model_path
        try:
            self._llm = llama_cpp.Llama(
                model_path=model_path,
                n_ctx=n_ctx,
                n_batch=n_ctx,
                n_gpu_layers=n_gpu_layers,
                verbose=verbose,
            )
        except (ValueError, RuntimeError, OSError) as exc:
            raise EngineLoadError(f"unable to load model from {model_path}: {exc}") from exc

        self._vocab = llama_cpp.llama_model_get_vocab(self._llm.model)
        self._sampler = build_llama_sampler(sampler_chain)
        self._closed = False
        logger.info(
            "engine loaded model=%s n_ctx=%d n_gpu_layers=%d",
            model_path,
            self._llm.n_ctx(),
            n_gpu_layers,
        )

    # ------------------------------------------------------------------ #
    # Context bookkeeping
    # ------------------------------------------------------------------ #
    def n_ctx(self) -> int:
        return int(self._llm.n_ctx())

    def n_used(self) -> int:
        return int(self._llm.n_tokens)

    # ------------------------------------------------------------------ #
    # Tokenizer
    # ------------------------------------------------------------------ #
    def tokenize(self, text: str, *, add_bos: bool, special: bool = True) -> list[int]:
        try:
            return list(self._llm.tokenize(text.encode("utf-8"), add_bos=add_bos, special=special))
        except RuntimeError as exc:
            raise TokenizeError(f"failed to tokenize the prompt: {exc}") from exc

    def token_to_piece(self, token: int) -> bytes:
        import llama_cpp

        size = TOKEN_PIECE_BUFFER_SIZE
        buf = ctypes.create_string_buffer(size)
        n = llama_cpp.llama_token_to_piece(self._vocab, token, buf, size, 0, True)
        if n < 0:
            # A negative result is the size the piece actually needs
            size = -n
            buf = ctypes.create_string_buffer(size)
            n = llama_cpp.llama_token_to_piece(self._vocab, token, buf, size, 0, True)
        if n < 0 or n > size:
            raise DetokenizeError(f"failed to convert token {token} to piece (n={n})")
        return buf.raw[:n]

    # ------------------------------------------------------------------ #
    # Inference
    # ------------------------------------------------------------------ #
    def decode(self, batch: Sequence[int]) -> None:
        try:
            self._llm.eval(list(batch))
        except RuntimeError as exc:
            raise DecodeError(f"failed to decode: {exc}") from exc

    def sample(self) -> int:
        import llama_cpp

        return int(llama_cpp.llama_sampler_sample(self._sampler, self._llm.ctx, -1))

    def is_eog(self, token: int) -> bool:
        import llama_cpp

        return bool(llama_cpp.llama_vocab_is_eog(self._vocab, token))

    # ------------------------------------------------------------------ #
    # Template support
    # ------------------------------------------------------------------ #
    def chat_template(self) -> str | None:
        metadata: dict[str, Any] = getattr(self._llm, "metadata", None) or {}
        template = metadata.get(_TEMPLATE_METADATA_KEY)
        return template or None

    @property
    def eos_token(self) -> str:
        token = self._llm.token_eos()
        if token is None or token < 0:
            return ""
        return self.token_to_piece(token).decode("utf-8", errors="ignore")

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def reset(self) -> None:
        import llama_cpp

        # eval() drops KV cells past n_tokens before the next decode
        self._llm.reset()
        llama_cpp.llama_sampler_reset(self._sampler)
        logger.info("engine sequence reset")

    def close(self) -> None:
        if self._closed:
            return
        import llama_cpp

        self._closed = True
        llama_cpp.llama_sampler_free(self._sampler)
        self._llm.close()


__all__ = ["LlamaCppEngine"]
