"""Unit tests for the stall and anomaly detectors."""

from __future__ import annotations

from simplechat.state import GenerationState
from simplechat.execution import StallDetector, AnomalyDetector, is_suspicious_piece


def test_suspicious_single_characters() -> None:
    for piece in ("(", ")", "@"):
        assert is_suspicious_piece(piece)


def test_suspicious_glyphs() -> None:
    assert is_suspicious_piece("ó")
    assert is_suspicious_piece("gó")


def test_ordinary_pieces_are_not_suspicious() -> None:
    for piece in ("((", "a", " (", "", "hello", "go", "o"):
        assert not is_suspicious_piece(piece)


def test_stall_counts_consecutive_ids() -> None:
    detector = StallDetector(threshold=3)
    state = GenerationState()

    assert detector.observe(state, 5) is False
    assert detector.observe(state, 5) is False
    assert detector.observe(state, 5) is True
    assert state.same_token_run == 3


def test_stall_resets_on_new_token() -> None:
    detector = StallDetector(threshold=3)
    state = GenerationState()
    detector.observe(state, 5)
    detector.observe(state, 5)

    assert detector.observe(state, 6) is False
    assert state.same_token_run == 1
    assert state.last_token == 6


def test_default_stall_threshold_is_32() -> None:
    detector = StallDetector()
    state = GenerationState()

    results = [detector.observe(state, 9) for _ in range(32)]

    assert results[:31] == [False] * 31
    assert results[31] is True


def test_anomaly_run_resets_on_normal_piece() -> None:
    detector = AnomalyDetector(threshold=3)
    state = GenerationState()

    assert detector.observe(state, "(") is False
    assert detector.observe(state, "@") is False
    assert detector.observe(state, "word") is False
    assert state.anomaly_run == 0
    assert detector.observe(state, ")") is False


def test_default_anomaly_threshold_is_10() -> None:
    detector = AnomalyDetector()
    state = GenerationState()

    results = [detector.observe(state, "@") for _ in range(10)]

    assert results[:9] == [False] * 9
    assert results[9] is True


def test_custom_classifier() -> None:
    detector = AnomalyDetector(threshold=2, classifier=lambda piece: piece.isdigit())
    state = GenerationState()

    assert detector.observe(state, "1") is False
    assert detector.observe(state, "2") is True
