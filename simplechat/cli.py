"""Command-line entry point.

Usage:
  simplechat -m model.gguf
  simplechat -m model.gguf -c 4096 -ngl 0 -n 512
  simplechat -m model.gguf --temp 0.2 --seed 42
  simplechat -m model.gguf --hf-tokenizer Qwen/Qwen2-1.5B-Instruct

Env:
  CHAT_N_CTX, CHAT_N_GPU_LAYERS, CHAT_MAX_PREDICT   defaults for -c, -ngl, -n
  CHAT_TEMPERATURE, CHAT_TOP_K, CHAT_TOP_P, ...     sampler defaults
  APP_LOG_LEVEL=WARNING                             log level (stderr)
  NO_COLOR=1                                        disable ANSI colours

Exit status is 0 when the session ends on an empty line and 1 for bad
arguments, model load failures, template failures and engine failures.
"""

from __future__ import annotations

import sys
import argparse
from collections.abc import Sequence

from simplechat.config import (
    CHAT_N_CTX,
    CHAT_MAX_PREDICT,
    CHAT_N_GPU_LAYERS,
)
from simplechat.config.display import RESET_COLOR
from simplechat.config.sampling import (
    CHAT_SEED,
    CHAT_TOP_K,
    CHAT_TOP_P,
    CHAT_TEMPERATURE,
    CHAT_REPEAT_PENALTY,
)
from simplechat.errors import TemplateError, EngineLoadError, ValidationError
from simplechat.logging import configure_logging
from simplechat.engines import SamplerChain, create_engine, create_sampler_chain
from simplechat.messages import ConversationFormatter, resolve_chat_template
from simplechat.execution import ChatSession, GenerationLoop, print_banner

USAGE_EXAMPLE = "\nexample usage:\n\n    {prog} -m model.gguf [-c context_size] [-ngl n_gpu_layers] [-n n_predict]\n"


class _ChatArgumentParser(argparse.ArgumentParser):
    """Raises ValidationError instead of exiting with status 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise ValidationError("invalid_argument", message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ChatArgumentParser(prog="simplechat", add_help=True)
    parser.add_argument("-m", "--model", dest="model", help="path to a GGUF model file")
    parser.add_argument(
        "-c",
        "--ctx-size",
        dest="n_ctx",
        type=int,
        default=CHAT_N_CTX,
        help=f"context size in tokens (default env CHAT_N_CTX or {CHAT_N_CTX})",
    )
    parser.add_argument(
        "-ngl",
        "--n-gpu-layers",
        dest="n_gpu_layers",
        type=int,
        default=CHAT_N_GPU_LAYERS,
        help=f"layers to offload to the GPU, -1 for all (default {CHAT_N_GPU_LAYERS})",
    )
    parser.add_argument(
        "-n",
        "--n-predict",
        dest="n_predict",
        type=int,
        default=CHAT_MAX_PREDICT,
        help=f"max tokens to generate per turn (default {CHAT_MAX_PREDICT})",
    )
    add_sampling_args(parser)
    parser.add_argument(
        "--chat-template-file",
        dest="chat_template_file",
        help="Jinja chat template to use instead of the model's embedded one",
    )
    parser.add_argument(
        "--hf-tokenizer",
        dest="hf_tokenizer",
        help="Hugging Face tokenizer whose chat template should be used",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="log level for diagnostics on stderr (default env APP_LOG_LEVEL)",
    )
    return parser


def add_sampling_args(parser: argparse.ArgumentParser) -> None:
    """Register sampler chain override knobs."""
    parser.add_argument(
        "--temp",
        dest="temperature",
        type=float,
        default=CHAT_TEMPERATURE,
        help=f"sampling temperature (default {CHAT_TEMPERATURE})",
    )
    parser.add_argument(
        "--top-k",
        dest="top_k",
        type=int,
        default=CHAT_TOP_K,
        help=f"top-k sampling cap (default {CHAT_TOP_K})",
    )
    parser.add_argument(
        "--top-p",
        dest="top_p",
        type=float,
        default=CHAT_TOP_P,
        help=f"nucleus sampling probability (default {CHAT_TOP_P})",
    )
    parser.add_argument(
        "--repeat-penalty",
        dest="repeat_penalty",
        type=float,
        default=CHAT_REPEAT_PENALTY,
        help=f"repetition penalty (default {CHAT_REPEAT_PENALTY})",
    )
    parser.add_argument(
        "--seed",
        dest="seed",
        type=int,
        default=CHAT_SEED,
        help="seed for the final sampling draw (default: random)",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse and validate command-line arguments.

    Raises:
        ValidationError: On missing or invalid arguments.
    """
    args = _build_parser().parse_args(argv)
    if not args.model:
        raise ValidationError("missing_model", "a model path is required (-m)")
    if args.n_ctx <= 0:
        raise ValidationError("invalid_ctx_size", f"context size must be > 0 (got {args.n_ctx})")
    if args.n_gpu_layers < -1:
        raise ValidationError("invalid_n_gpu_layers", f"GPU layers must be >= -1 (got {args.n_gpu_layers})")
    if args.n_predict < 0:
        raise ValidationError("invalid_n_predict", f"n_predict must be >= 0 (got {args.n_predict})")
    return args


def build_sampler_chain(args: argparse.Namespace) -> SamplerChain:
    return create_sampler_chain(
        top_k=args.top_k,
        top_p=args.top_p,
        repeat_penalty=args.repeat_penalty,
        temperature=args.temperature,
        seed=args.seed,
    )


def print_usage(prog: str = "simplechat") -> None:
    sys.stdout.write(USAGE_EXAMPLE.format(prog=prog) + "\n")
    sys.stdout.flush()


def main(argv: Sequence[str] | None = None) -> int:
    try:
        args = parse_args(argv)
        sampler_chain = build_sampler_chain(args)
    except ValidationError as err:
        sys.stderr.write(f"error: {err.message}\n")
        print_usage()
        return 1

    configure_logging(args.log_level)

    try:
        engine = create_engine(
            args.model,
            sampler_chain,
            n_ctx=args.n_ctx,
            n_gpu_layers=args.n_gpu_layers,
        )
    except EngineLoadError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1

    with engine:
        try:
            template = resolve_chat_template(
                engine,
                template_file=args.chat_template_file,
                hf_tokenizer=args.hf_tokenizer,
            )
        except TemplateError as exc:
            sys.stderr.write(f"error: {exc}\n")
            return 1

        session = ChatSession(
            ConversationFormatter(template),
            GenerationLoop(engine, max_predict=args.n_predict),
        )
        print_banner(sys.stdout, model_path=args.model, n_gpu_layers=args.n_gpu_layers)
        try:
            return session.run()
        except KeyboardInterrupt:
            sys.stdout.write(f"{RESET_COLOR}\n")
            return 0


__all__ = ["main", "parse_args", "add_sampling_args", "build_sampler_chain"]
