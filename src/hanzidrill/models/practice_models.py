"""Models for practice-related data structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Union

from hanzidrill.exceptions import InvalidModeError

if TYPE_CHECKING:
    from hanzidrill.models.models import Word


class PracticeMode(Enum):
    """What the learner is shown and what they must answer."""
    HANZI_TO_PINYIN = "hanzi2pinyin"
    HANZI_TO_ENGLISH = "hanzi2english"
    ENGLISH_TO_HANZI = "english2hanzi"
    ENGLISH_TO_PINYIN = "english2pinyin"

    @property
    def answer_is_translation(self) -> bool:
        return self is PracticeMode.HANZI_TO_ENGLISH


class WordSelection(Enum):
    """How words are picked for a session."""
    MIXED = "mixed"  # Due words first, then new words
    NEW = "new"  # Only words never practiced in this mode
    REVIEW = "review"  # Only due words, oldest first
    RANDOM = "random"  # Only due words, shuffled


def parse_mode(value: Union[str, PracticeMode]) -> PracticeMode:
    """Resolve a mode identifier, raising InvalidModeError for unknown ones."""
    if isinstance(value, PracticeMode):
        return value
    try:
        return PracticeMode(value)
    except ValueError:
        raise InvalidModeError(value) from None


def parse_selection(value: Union[str, WordSelection]) -> WordSelection:
    """Resolve a word selection identifier."""
    if isinstance(value, WordSelection):
        return value
    try:
        return WordSelection(value)
    except ValueError:
        raise InvalidModeError(value, kind="word selection") from None


@dataclass(frozen=True)
class NewState:
    """No progress record yet in this mode."""
    bucket: int = 0


@dataclass(frozen=True)
class ReviewingState:
    """Progress record exists in this mode."""
    bucket: int
    last_practiced: Optional[datetime]
    next_eligible: datetime


ProgressState = Union[NewState, ReviewingState]


@dataclass(frozen=True)
class Transition:
    """Result of grading one attempt."""
    bucket: int
    last_practiced: datetime
    next_eligible: datetime


@dataclass
class PracticeQuestion:
    """A word rendered as a question for one mode."""
    word: Word
    prompt: str
    accepted_answers: List[str]
    bucket: Optional[int]  # None = new word


@dataclass(frozen=True)
class AnswerVerdict:
    """Outcome of checking a single answer."""
    correct: bool
    near_miss: bool = False


@dataclass
class AnswerResult:
    """Response to a submitted answer."""
    correct: bool
    accepted_answers: List[str]
    near_miss: bool = False


@dataclass(frozen=True)
class SessionResult:
    """First-try outcome for one word in a finished session."""
    written_form: str
    correct_first_try: bool


@dataclass
class WordProgress:
    """Scheduling state of a word after a session."""
    written_form: str
    bucket: int
    next_eligible: datetime


@dataclass
class SessionSummary:
    """Response to a completed session."""
    words_reviewed: int
    new_words_learned: int
    progress: List[WordProgress] = field(default_factory=list)


@dataclass
class Stats:
    """Per-mode progress statistics."""
    mode: PracticeMode
    total_words: int
    learned: int
    mastered: int
    due_for_review: int
    buckets: List[int]  # count of words in each bucket (index = bucket number)
