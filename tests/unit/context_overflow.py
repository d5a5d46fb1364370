"""Unit tests for context window enforcement in the generation loop."""

from __future__ import annotations

import pytest

from simplechat.state import TurnStatus
from simplechat.errors import ContextOverflowError
from simplechat.execution import ContextWindow, GenerationLoop
from simplechat.config.display import CONTEXT_EXCEEDED_MESSAGE
from tests.helpers.engine import BOS_ID, EOS_ID, FakeEngine


def _loop(engine: FakeEngine, notices: list[str] | None = None) -> GenerationLoop:
    sink = notices if notices is not None else []
    return GenerationLoop(engine, emit=lambda _text: None, notice=sink.append)


def test_context_window_reports_engine_usage() -> None:
    engine = FakeEngine(capacity=10, used=4)
    window = ContextWindow(engine)

    assert window.capacity() == 10
    assert window.used() == 4
    assert not window.is_empty()
    assert window.would_overflow(7)
    assert not window.would_overflow(6)


def test_ensure_fits_raises_with_details() -> None:
    window = ContextWindow(FakeEngine(capacity=10, used=5))

    with pytest.raises(ContextOverflowError) as excinfo:
        window.ensure_fits(6)

    assert excinfo.value.used == 5
    assert excinfo.value.batch_size == 6
    assert excinfo.value.capacity == 10


def test_prompt_one_past_capacity_fails_before_decode() -> None:
    engine = FakeEngine(capacity=10, used=5, prompt_tokens=6, script=[10])
    notices: list[str] = []

    outcome = _loop(engine, notices).generate("long prompt")

    assert outcome.status is TurnStatus.TURN_FAILED
    assert isinstance(outcome.error, ContextOverflowError)
    assert engine.decoded_batches == []
    assert engine.used == 5
    assert notices == [CONTEXT_EXCEEDED_MESSAGE]


def test_prompt_exactly_filling_capacity_is_decoded() -> None:
    engine = FakeEngine(capacity=10, used=5, prompt_tokens=5, script=[10, 11])

    outcome = _loop(engine).generate("prompt")

    # The prompt fills the window; the first sampled token cannot follow it
    assert engine.decoded_batches == [[1000, 1001, 1002, 1003, 1004]]
    assert outcome.status is TurnStatus.TURN_FAILED
    assert outcome.text == "t10"
    assert outcome.tokens_decoded == 1


def test_overflow_mid_generation_keeps_partial_text() -> None:
    engine = FakeEngine(capacity=6, prompt_tokens=2, script=[10, 11, 12, 13])

    outcome = _loop(engine).generate("hi there")

    assert outcome.status is TurnStatus.TURN_FAILED
    assert outcome.text == "t10t11t12t13"
    assert engine.used == 6


def test_bos_added_only_on_empty_context() -> None:
    engine = FakeEngine(script=[10, EOS_ID, 11, EOS_ID])
    loop = _loop(engine)

    loop.generate("first")
    loop.generate("second")

    assert [call.add_bos for call in engine.tokenize_calls] == [True, False]
    assert all(call.special for call in engine.tokenize_calls)
    assert engine.decoded_batches[0][0] == BOS_ID


def test_reset_sequence_brings_back_bos() -> None:
    engine = FakeEngine(script=[10, EOS_ID, 11, EOS_ID])
    loop = _loop(engine)
    loop.generate("first")

    loop.reset_sequence()
    loop.generate("again")

    assert engine.resets == 1
    assert [call.add_bos for call in engine.tokenize_calls] == [True, True]
