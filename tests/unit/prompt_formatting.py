"""Unit tests for incremental conversation formatting."""

from __future__ import annotations

import logging

import pytest

from simplechat.state import Role
from simplechat.errors import TemplateError
from simplechat.messages import ConversationFormatter
from tests.helpers.template import TagTemplate, BytesTemplate, FailingTemplate, NumberedTemplate


def test_first_prompt_is_whole_render() -> None:
    formatter = ConversationFormatter(TagTemplate())

    prompt = formatter.render_prompt("hi")

    assert prompt == "[user]hi\n[assistant]"
    assert formatter.prev_len == 0


def test_commit_moves_cursor_to_end_of_render() -> None:
    formatter = ConversationFormatter(TagTemplate())
    formatter.render_prompt("hi")

    formatter.commit_assistant("hello")

    assert formatter.prev_len == len(b"[user]hi\n[assistant]hello\n")
    assert formatter.formatted == b"[user]hi\n[assistant]hello\n"


def test_second_prompt_is_only_the_new_suffix() -> None:
    formatter = ConversationFormatter(TagTemplate())
    formatter.render_prompt("hi")
    formatter.commit_assistant("hello")

    prompt = formatter.render_prompt("again")

    assert prompt == "[user]again\n[assistant]"


def test_prev_len_counts_utf8_bytes() -> None:
    formatter = ConversationFormatter(TagTemplate())
    formatter.render_prompt("héllo")
    formatter.commit_assistant("ça va")

    expected = "[user]héllo\n[assistant]ça va\n".encode("utf-8")
    assert formatter.prev_len == len(expected)
    assert formatter.prev_len > len("[user]héllo\n[assistant]ça va\n")
    assert formatter.render_prompt("ok") == "[user]ok\n[assistant]"


def test_prev_len_never_decreases_across_turns() -> None:
    formatter = ConversationFormatter(TagTemplate())
    seen = [formatter.prev_len]
    for user, reply in [("a", "b"), ("c", "d"), ("e", "f")]:
        formatter.render_prompt(user)
        seen.append(formatter.prev_len)
        formatter.commit_assistant(reply)
        seen.append(formatter.prev_len)

    assert seen == sorted(seen)
    assert formatter.prev_len == len(formatter.render(add_generation_prompt=False))


def test_render_is_idempotent() -> None:
    formatter = ConversationFormatter(TagTemplate())
    formatter.render_prompt("hi")
    formatter.commit_assistant("hello")

    first = formatter.render(add_generation_prompt=False)
    second = formatter.render(add_generation_prompt=False)

    assert first == second


def test_rollback_user_keeps_cursor() -> None:
    formatter = ConversationFormatter(TagTemplate())
    formatter.render_prompt("hi")
    formatter.commit_assistant("hello")
    cursor = formatter.prev_len
    formatter.render_prompt("lost")

    assert formatter.rollback_user() is True
    assert len(formatter.conversation) == 2
    assert formatter.prev_len == cursor
    assert formatter.render_prompt("retry") == "[user]retry\n[assistant]"


def test_rollback_user_ignores_assistant_tail() -> None:
    formatter = ConversationFormatter(TagTemplate())
    formatter.render_prompt("hi")
    formatter.commit_assistant("hello")

    assert formatter.rollback_user() is False
    assert formatter.conversation.last is not None
    assert formatter.conversation.last.role is Role.ASSISTANT


def test_reset_starts_over() -> None:
    formatter = ConversationFormatter(TagTemplate())
    formatter.render_prompt("hi")
    formatter.commit_assistant("hello")

    formatter.reset()

    assert formatter.prev_len == 0
    assert len(formatter.conversation) == 0
    assert formatter.render_prompt("new") == "[user]new\n[assistant]"


def test_template_failure_drops_user_turn() -> None:
    formatter = ConversationFormatter(FailingTemplate(fail_after=0))

    with pytest.raises(TemplateError):
        formatter.render_prompt("hi")

    assert len(formatter.conversation) == 0
    assert formatter.prev_len == 0


def test_non_text_render_is_template_error() -> None:
    formatter = ConversationFormatter(BytesTemplate())

    with pytest.raises(TemplateError, match="expected str"):
        formatter.render_prompt("hi")


def test_append_only_violation_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    formatter = ConversationFormatter(NumberedTemplate())
    formatter.render_prompt("hi")
    formatter.commit_assistant("hello")

    with caplog.at_level(logging.WARNING):
        prompt = formatter.render_prompt("again")

    assert "not append-only" in caplog.text
    # The diff is still taken from the old cursor
    rendered = formatter.formatted
    assert prompt == rendered[formatter.prev_len:].decode("utf-8")


def test_append_only_template_logs_nothing(caplog: pytest.LogCaptureFixture) -> None:
    formatter = ConversationFormatter(TagTemplate())
    with caplog.at_level(logging.WARNING):
        formatter.render_prompt("hi")
        formatter.commit_assistant("hello")
        formatter.render_prompt("again")

    assert "not append-only" not in caplog.text
