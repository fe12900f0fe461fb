"""Tests for spaced-repetition scheduling."""
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from hanzidrill.config import settings
from hanzidrill.models.practice_models import NewState, PracticeMode, ReviewingState
from hanzidrill.services.srs_service import (
    SrsService,
    calculate_next_eligible,
    delay_for_bucket,
    draw_jitter,
    max_bucket,
    transition,
)
from hanzidrill.services.word_service import WordService

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def reviewing(bucket: int) -> ReviewingState:
    return ReviewingState(bucket=bucket, last_practiced=NOW, next_eligible=NOW)


def test_delay_table() -> None:
    """Test the delay table shape."""
    assert max_bucket() == 8
    assert delay_for_bucket(0) == timedelta(0)
    assert delay_for_bucket(1) == timedelta(minutes=1)
    assert delay_for_bucket(max_bucket()) == timedelta(days=30)
    delays = [delay_for_bucket(bucket) for bucket in range(max_bucket() + 1)]
    assert delays == sorted(delays)
    assert delay_for_bucket(max_bucket()) == max(delays)


def test_delay_for_bucket_out_of_range() -> None:
    """Test that out-of-range buckets are clamped."""
    assert delay_for_bucket(-1) == delay_for_bucket(0)
    assert delay_for_bucket(max_bucket() + 5) == delay_for_bucket(max_bucket())


def test_draw_jitter_bounds() -> None:
    """Test that jitter stays within the configured range."""
    for _ in range(200):
        jitter = draw_jitter()
        assert settings.practice.jitter_min <= jitter <= settings.practice.jitter_max


def test_calculate_next_eligible() -> None:
    """Test scaling the delay by the jitter factor."""
    assert calculate_next_eligible(3, NOW, 1.0) == NOW + timedelta(minutes=30)
    assert calculate_next_eligible(3, NOW, 0.5) == NOW + timedelta(minutes=15)
    assert calculate_next_eligible(0, NOW, 1.25) == NOW


def test_transition_new_word() -> None:
    """Test grading a word that has never been practiced."""
    result = transition(NewState(), True, NOW, jitter=1.0)
    assert result.bucket == 1
    assert result.last_practiced == NOW
    assert result.next_eligible == NOW + timedelta(minutes=1)

    result = transition(NewState(), False, NOW, jitter=1.0)
    assert result.bucket == 0
    assert result.next_eligible == NOW


def test_transition_monotonicity() -> None:
    """Test that correct answers climb and incorrect answers reset."""
    for bucket in range(max_bucket() + 1):
        up = transition(reviewing(bucket), True, NOW, jitter=1.0)
        down = transition(reviewing(bucket), False, NOW, jitter=1.0)
        assert up.bucket == min(bucket + 1, max_bucket())
        assert up.bucket >= bucket
        assert down.bucket == 0


def test_transition_stays_mastered() -> None:
    """Test that the mastered bucket is a ceiling."""
    result = transition(reviewing(max_bucket()), True, NOW, jitter=1.0)
    assert result.bucket == max_bucket()
    assert result.next_eligible == NOW + timedelta(days=30)


def test_transition_draws_jitter(mocker) -> None:
    """Test that a jitter factor is drawn when none is given."""
    mock_jitter = mocker.patch(
        "hanzidrill.services.srs_service.draw_jitter",
        return_value=1.25,
    )
    result = transition(reviewing(4), True, NOW)
    mock_jitter.assert_called_once()
    assert result.next_eligible == NOW + timedelta(days=1) * 1.25


def test_transition_jitter_bounds() -> None:
    """Test that random jitter keeps next eligibility within 25% of the delay."""
    for _ in range(50):
        result = transition(reviewing(2), True, NOW)
        delay = timedelta(minutes=30)
        assert NOW + delay * 0.75 <= result.next_eligible <= NOW + delay * 1.25


def test_transition_unknown_state() -> None:
    """Test that only known progress states are accepted."""
    with pytest.raises(TypeError):
        transition(object(), True, NOW)


def test_record_result(db: Session) -> None:
    """Test that a graded attempt is stored once."""
    word_service = WordService(db)
    word = word_service.add_word("爱", "ài", ["love"])
    srs = SrsService(word_service)

    result = srs.record_result(word, PracticeMode.HANZI_TO_PINYIN, True, now=NOW)
    state = word_service.get_progress(word, PracticeMode.HANZI_TO_PINYIN)
    assert isinstance(state, ReviewingState)
    assert state.bucket == 1
    assert state.last_practiced == NOW
    assert state.next_eligible == result.next_eligible

    # Other modes are independent
    assert isinstance(word_service.get_progress(word, PracticeMode.HANZI_TO_ENGLISH), NewState)

    srs.record_result(word, PracticeMode.HANZI_TO_PINYIN, True, now=NOW)
    assert word_service.get_progress(word, PracticeMode.HANZI_TO_PINYIN).bucket == 2

    srs.record_result(word, PracticeMode.HANZI_TO_PINYIN, False, now=NOW)
    state = word_service.get_progress(word, PracticeMode.HANZI_TO_PINYIN)
    assert state.bucket == 0
    assert state.next_eligible == NOW
