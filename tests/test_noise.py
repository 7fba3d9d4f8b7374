from datetime import timedelta

import pytest

from rouse.noise import NoiseScore, classify_response


def test_score_zero_when_no_fires():
    score = NoiseScore("fp1")
    assert score.score() == 0.0


def test_score_calculation_correct():
    score = NoiseScore("fp1")
    for _ in range(10):
        score.record_fire()
    for _ in range(8):
        score.record_dismiss()
    for _ in range(2):
        score.record_action()
    assert score.score() == pytest.approx(0.8)


def test_high_score_is_noise():
    score = NoiseScore("fp1")
    for _ in range(10):
        score.record_fire()
        score.record_dismiss()
    assert score.is_noise()


def test_low_score_is_not_noise():
    score = NoiseScore("fp1")
    for _ in range(10):
        score.record_fire()
        score.record_action()
    assert not score.is_noise()
    assert score.score() == 0.0


def test_quick_ack_is_dismiss():
    assert classify_response(timedelta(seconds=2), None) is True


def test_slow_ack_is_action():
    assert classify_response(timedelta(minutes=5), None) is False


def test_quick_resolve_after_slow_ack_is_dismiss():
    assert classify_response(timedelta(seconds=30), timedelta(seconds=45)) is True


def test_slow_ack_and_slow_resolve_is_action():
    assert classify_response(timedelta(seconds=30), timedelta(minutes=10)) is False


def test_suggest_suppression_above_threshold():
    score = NoiseScore("fp1")
    for _ in range(100):
        score.record_fire()
    for _ in range(96):
        score.record_dismiss()
    assert score.suggest_suppression()


def test_no_suppression_at_exact_threshold_of_noise():
    score = NoiseScore("fp1")
    for _ in range(10):
        score.record_fire()
    for _ in range(8):
        score.record_dismiss()
    assert not score.is_noise()
    assert not score.suggest_suppression()


def test_record_fire_counts():
    score = NoiseScore("fp1")
    score.record_fire()
    score.record_fire()
    assert score.total_fires == 2
    assert score.dismissed_count == 0
    assert score.acted_on_count == 0


def test_first_ack_time_sets_average():
    score = NoiseScore("fp1")
    score.update_avg_ack_time(timedelta(seconds=7))
    assert score.avg_time_to_ack() == timedelta(seconds=7)


def test_ack_time_after_one_response_replaces_average():
    score = NoiseScore("fp1")
    score.record_dismiss()
    score.update_avg_ack_time(timedelta(seconds=10))
    assert score.avg_time_to_ack_secs == 10


def test_fingerprint_kept():
    assert NoiseScore("abc").fingerprint == "abc"