"""Unit tests for the interactive session driver."""

from __future__ import annotations

import io
from collections.abc import Iterable

from simplechat.state import Role, TurnStatus
from simplechat.messages import ConversationFormatter
from simplechat.execution import ChatSession, GenerationLoop, print_banner
from simplechat.config.display import CONTEXT_RESET_MESSAGE
from tests.helpers.engine import EOS_ID, FakeEngine
from tests.helpers.template import TagTemplate, FailingTemplate


def _lines(values: Iterable[str | None]):
    it = iter(values)
    return lambda: next(it, None)


def _session(engine: FakeEngine, lines: Iterable[str | None], template=None) -> tuple[ChatSession, io.StringIO, io.StringIO]:
    out = io.StringIO()
    err = io.StringIO()
    loop = GenerationLoop(engine, emit=out.write, notice=lambda text: err.write(f"{text}\n"))
    session = ChatSession(
        ConversationFormatter(template or TagTemplate()),
        loop,
        read_line=_lines(lines),
        out=out,
        err=err,
        session_id="test",
    )
    return session, out, err


def test_empty_first_line_exits_zero() -> None:
    engine = FakeEngine()
    session, _out, _err = _session(engine, [""])

    assert session.run() == 0
    assert engine.tokenize_calls == []
    assert engine.decoded_batches == []


def test_end_of_input_exits_zero() -> None:
    session, _out, _err = _session(FakeEngine(), [None])

    assert session.run() == 0


def test_two_turns_are_recorded() -> None:
    engine = FakeEngine(script=[10, EOS_ID, 11, EOS_ID])
    session, out, _err = _session(engine, ["hi", "again", ""])

    assert session.run() == 0

    turns = list(session.formatter.conversation)
    assert [turn.role for turn in turns] == [Role.USER, Role.ASSISTANT, Role.USER, Role.ASSISTANT]
    assert [turn.content for turn in turns] == ["hi", "t10", "again", "t11"]
    assert session.turns_completed == 2
    assert engine.tokenize_calls[1].text == "[user]again\n[assistant]"
    assert "t10" in out.getvalue()


def test_context_overflow_starts_fresh_conversation() -> None:
    engine = FakeEngine(capacity=8, prompt_tokens=3, script=[10, EOS_ID, 11, 12, EOS_ID])
    session, out, err = _session(engine, ["one", "two", "three", ""])

    assert session.run() == 0

    assert engine.resets == 1
    assert [call.add_bos for call in engine.tokenize_calls] == [True, False, True]
    assert "context size exceeded" in err.getvalue()
    assert CONTEXT_RESET_MESSAGE in out.getvalue()
    assert [turn.content for turn in session.formatter.conversation] == ["three", "t12"]
    assert session.formatter.prev_len == len(b"[user]three\n[assistant]t12\n")


def test_tokenize_failure_drops_the_turn() -> None:
    engine = FakeEngine(fail_tokenize=True)
    session, _out, _err = _session(engine, ["hi", ""])

    assert session.run() == 0
    assert len(session.formatter.conversation) == 0
    assert session.formatter.prev_len == 0


def test_decode_failure_is_fatal() -> None:
    engine = FakeEngine(script=[10], fail_decode_at=0)
    session, _out, err = _session(engine, ["hi", "never read"])

    assert session.run() == 1
    assert "error:" in err.getvalue()


def test_detokenize_failure_is_fatal() -> None:
    engine = FakeEngine(script=[10], fail_detokenize=True)
    session, _out, _err = _session(engine, ["hi"])

    assert session.run() == 1


def test_template_failure_is_fatal() -> None:
    session, _out, err = _session(FakeEngine(), ["hi"], template=FailingTemplate(fail_after=0))

    assert session.run() == 1
    assert "chat template" in err.getvalue()


def test_run_turn_returns_outcome() -> None:
    session, _out, _err = _session(FakeEngine(script=[10, EOS_ID]), [])

    outcome = session.run_turn("hi")

    assert outcome.status is TurnStatus.COMPLETED
    assert outcome.text == "t10"


def test_banner_mentions_model_and_offload() -> None:
    out = io.StringIO()

    print_banner(out, model_path="models/tiny.gguf", n_gpu_layers=0)

    text = out.getvalue()
    assert "models/tiny.gguf" in text
    assert "disabled" in text
