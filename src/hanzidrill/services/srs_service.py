"""Bucketed spaced-repetition scheduling."""
import logging
import random
from datetime import UTC, datetime, timedelta
from typing import Optional

from hanzidrill.config import settings
from hanzidrill.models.models import Word
from hanzidrill.models.practice_models import (
    NewState,
    PracticeMode,
    ProgressState,
    ReviewingState,
    Transition,
)
from hanzidrill.monitoring import bucket_transitions
from hanzidrill.services.word_service import WordService

logger = logging.getLogger(__name__)


def max_bucket() -> int:
    """Index of the mastered bucket."""
    return settings.practice.max_bucket


def delay_for_bucket(bucket: int) -> timedelta:
    """Base delay before a word in the given bucket is eligible again."""
    delays = settings.practice.bucket_delays_minutes
    bucket = min(max(bucket, 0), len(delays) - 1)
    return timedelta(minutes=delays[bucket])


def draw_jitter() -> float:
    """Random factor spreading out words graded in the same session."""
    return random.uniform(settings.practice.jitter_min, settings.practice.jitter_max)


def calculate_next_eligible(bucket: int, now: datetime, jitter: float) -> datetime:
    """Calculate when a word in the given bucket becomes eligible again."""
    return now + delay_for_bucket(bucket) * jitter


def transition(
    state: ProgressState,
    correct: bool,
    now: datetime,
    jitter: Optional[float] = None,
) -> Transition:
    """Move a word to its next bucket.

    A correct answer moves one bucket up (capped at the mastered bucket),
    an incorrect one resets to bucket 0. New words start from bucket 0.
    """
    if isinstance(state, NewState):
        current = 0
    elif isinstance(state, ReviewingState):
        current = state.bucket
    else:
        raise TypeError(f"Unknown progress state: {state!r}")

    bucket = min(current + 1, max_bucket()) if correct else 0
    if jitter is None:
        jitter = draw_jitter()
    return Transition(
        bucket=bucket,
        last_practiced=now,
        next_eligible=calculate_next_eligible(bucket, now, jitter),
    )


class SrsService:
    """Applies scheduling transitions and persists them."""

    def __init__(self, word_service: WordService):
        """Initialize the service with the storage adapter."""
        self.word_service = word_service

    def record_result(
        self,
        word: Word,
        mode: PracticeMode,
        correct: bool,
        now: Optional[datetime] = None,
        commit: bool = True,
    ) -> Transition:
        """Grade one attempt and store the new bucket and eligibility."""
        now = now or datetime.now(UTC)
        state = self.word_service.get_progress(word, mode)
        result = transition(state, correct, now)
        self.word_service.upsert_progress(
            word,
            mode,
            bucket=result.bucket,
            last_practiced=result.last_practiced,
            next_eligible=result.next_eligible,
            commit=commit,
        )
        bucket_transitions.labels(mode=mode.value, direction="up" if correct else "reset").inc()
        logger.info(
            "Word %s in %s: bucket %d -> %d, next eligible %s",
            word.written_form,
            mode.value,
            state.bucket,
            result.bucket,
            result.next_eligible.isoformat(),
        )
        return result
