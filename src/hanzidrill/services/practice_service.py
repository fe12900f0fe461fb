"""Practice sessions: picking words, checking answers and rescheduling."""
import logging
from datetime import UTC, datetime
from typing import Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from hanzidrill.config import settings
from hanzidrill.exceptions import HanziDrillError, ItemNotFoundError
from hanzidrill.models.models import PinyinSynonym
from hanzidrill.models.practice_models import (
    AnswerResult,
    NewState,
    PracticeMode,
    PracticeQuestion,
    SessionResult,
    SessionSummary,
    Stats,
    WordProgress,
    WordSelection,
    parse_mode,
    parse_selection,
)
from hanzidrill.monitoring import answers_submitted, error_count, sessions_completed, sessions_started
from hanzidrill.services.answer_checker import accepted_answers, check_answer, render_prompt
from hanzidrill.services.selection_service import SelectionFilters, SelectionService
from hanzidrill.services.srs_service import SrsService
from hanzidrill.services.word_service import WordService

logger = logging.getLogger(__name__)

ModeLike = Union[PracticeMode, str]


class PracticeService:
    """Session protocol consumed by the presentation layer."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db
        self.word_service = WordService(db)
        self.selection_service = SelectionService(db)
        self.srs_service = SrsService(self.word_service)

    def _parse_mode(self, mode: ModeLike) -> PracticeMode:
        try:
            return parse_mode(mode)
        except HanziDrillError as e:
            error_count.labels(error_type=type(e).__name__).inc()
            logger.warning("Rejected request: %s", e)
            raise

    def _require_word(self, written_form: str):
        try:
            return self.word_service.require_word(written_form)
        except ItemNotFoundError as e:
            error_count.labels(error_type=type(e).__name__).inc()
            raise

    def create_question(self, word, mode: PracticeMode) -> PracticeQuestion:
        """Render a word as a question for the given mode."""
        state = self.word_service.get_progress(word, mode)
        return PracticeQuestion(
            word=word,
            prompt=render_prompt(mode, word),
            accepted_answers=accepted_answers(mode, word),
            bucket=None if isinstance(state, NewState) else state.bucket,
        )

    def start_session(
        self,
        mode: ModeLike,
        count: Optional[int] = None,
        selection: Union[WordSelection, str] = WordSelection.MIXED,
        categories: Iterable[str] = (),
        character_mode: bool = False,
        now: Optional[datetime] = None,
    ) -> List[PracticeQuestion]:
        """Pick words for a session and turn them into questions."""
        mode = self._parse_mode(mode)
        if count is None:
            count = settings.practice.default_session_size
        try:
            selection = parse_selection(selection)
        except HanziDrillError as e:
            error_count.labels(error_type=type(e).__name__).inc()
            logger.warning("Rejected request: %s", e)
            raise

        filters = SelectionFilters(
            categories=frozenset(categories),
            character_mode=character_mode,
        )
        try:
            words = self.selection_service.select_words(mode, count, selection, filters, now)
        except HanziDrillError as e:
            error_count.labels(error_type=type(e).__name__).inc()
            logger.info("Nothing to practice: %s", e)
            raise

        sessions_started.labels(mode=mode.value, selection=selection.value).inc()
        return [self.create_question(word, mode) for word in words]

    def submit_answer(self, mode: ModeLike, written_form: str, answer: str) -> AnswerResult:
        """Check an answer for one question."""
        mode = self._parse_mode(mode)
        word = self._require_word(written_form)

        synonyms = self.word_service.get_synonyms(word) if mode == PracticeMode.ENGLISH_TO_PINYIN else []
        verdict = check_answer(
            mode,
            answer,
            word,
            synonyms=synonyms,
            ambiguous=self.word_service.is_ambiguous_translation(word),
        )

        if verdict.correct:
            outcome = "correct"
        elif verdict.near_miss:
            outcome = "near_miss"
        else:
            outcome = "incorrect"
        answers_submitted.labels(mode=mode.value, outcome=outcome).inc()
        logger.debug("Answer %r for %s in %s: %s", answer, word.written_form, mode.value, outcome)

        return AnswerResult(
            correct=verdict.correct,
            accepted_answers=accepted_answers(mode, word),
            near_miss=verdict.near_miss,
        )

    def complete_session(
        self,
        mode: ModeLike,
        results: Iterable[SessionResult],
        now: Optional[datetime] = None,
    ) -> SessionSummary:
        """Reschedule every word of a finished session.

        All words are checked before anything is written, and the new states
        are committed together.
        """
        mode = self._parse_mode(mode)
        now = now or datetime.now(UTC)
        results = list(results)
        words = [self._require_word(result.written_form) for result in results]

        summary = SessionSummary(words_reviewed=len(results), new_words_learned=0)
        try:
            for word, result in zip(words, results):
                was_new = isinstance(self.word_service.get_progress(word, mode), NewState)
                transition = self.srs_service.record_result(
                    word, mode, result.correct_first_try, now=now, commit=False
                )
                if was_new and result.correct_first_try:
                    summary.new_words_learned += 1
                summary.progress.append(
                    WordProgress(
                        written_form=word.written_form,
                        bucket=transition.bucket,
                        next_eligible=transition.next_eligible,
                    )
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        sessions_completed.labels(mode=mode.value).inc()
        logger.info(
            "Completed %s session: %d reviewed, %d new learned",
            mode.value,
            summary.words_reviewed,
            summary.new_words_learned,
        )
        return summary

    def add_synonym(self, written_form: str, reading: str) -> PinyinSynonym:
        """Accept an alternate reading for a word."""
        word = self._require_word(written_form)
        return self.word_service.add_synonym(word, reading)

    def reset_progress(self, written_form: str, mode: Optional[ModeLike] = None) -> int:
        """Make a word new again in one mode or in all modes."""
        word = self._require_word(written_form)
        parsed = self._parse_mode(mode) if mode is not None else None
        return self.word_service.delete_progress(word, parsed)

    def get_stats(self, mode: ModeLike, now: Optional[datetime] = None) -> Stats:
        """Get progress statistics for a mode."""
        return self.word_service.get_stats(self._parse_mode(mode), now)
