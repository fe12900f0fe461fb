"""Word selection for practice sessions."""
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import FrozenSet, List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Query, Session

from hanzidrill.config import settings
from hanzidrill.exceptions import InvalidModeError, NoEligibleItemsError
from hanzidrill.models.models import Category, Progress, Word
from hanzidrill.models.practice_models import PracticeMode, WordSelection
from hanzidrill.monitoring import empty_selections, selection_duration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionFilters:
    """Restrictions applied to every selection query."""
    categories: FrozenSet[str] = frozenset()  # empty = no filter
    character_mode: bool = False  # single-character words only


class SelectionService:
    """Builds ordered candidate lists for a practice session."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def _apply_filters(self, query: Query, mode: PracticeMode, filters: SelectionFilters) -> Query:
        if filters.categories:
            query = query.filter(Word.categories.any(Category.name.in_(sorted(filters.categories))))
        if filters.character_mode:
            query = query.filter(func.length(Word.written_form) == 1)
        if mode.answer_is_translation:
            query = query.filter(Word.translatable.is_(True))
        return query

    def _due_query(self, mode: PracticeMode, filters: SelectionFilters, now: datetime) -> Query:
        query = (
            self.db.query(Word)
            .join(Progress, Progress.word_id == Word.id)
            .filter(
                Progress.mode == mode,
                Progress.next_eligible <= now,
            )
        )
        return self._apply_filters(query, mode, filters)

    def get_due_words(
        self,
        mode: PracticeMode,
        count: int,
        filters: SelectionFilters = SelectionFilters(),
        now: Optional[datetime] = None,
    ) -> List[Word]:
        """Get words due for review, the longest overdue first."""
        now = now or datetime.now(UTC)
        return (
            self._due_query(mode, filters, now)
            .order_by(Progress.next_eligible, Word.id)
            .limit(count)
            .all()
        )

    def get_new_words(
        self,
        mode: PracticeMode,
        count: int,
        filters: SelectionFilters = SelectionFilters(),
        exclude_ids: Optional[List[int]] = None,
    ) -> List[Word]:
        """Get words never practiced in this mode, most frequent first.

        Words without a frequency rank come after every ranked word, in the
        order they were added.
        """
        query = (
            self.db.query(Word)
            .outerjoin(
                Progress,
                and_(Progress.word_id == Word.id, Progress.mode == mode),
            )
            .filter(Progress.id.is_(None))
        )
        if exclude_ids:
            query = query.filter(Word.id.notin_(exclude_ids))
        query = self._apply_filters(query, mode, filters)
        rank = func.coalesce(Word.frequency_rank, settings.practice.missing_rank_sentinel)
        return query.order_by(rank, Word.id).limit(count).all()

    def get_mixed_words(
        self,
        mode: PracticeMode,
        count: int,
        filters: SelectionFilters = SelectionFilters(),
        now: Optional[datetime] = None,
    ) -> List[Word]:
        """Get due words first, then fill up with new words."""
        words = self.get_due_words(mode, count, filters, now)
        logger.debug("Due words: %d", len(words))
        if len(words) < count:
            new_words = self.get_new_words(
                mode,
                count - len(words),
                filters,
                exclude_ids=[word.id for word in words],
            )
            logger.debug("New words: %d", len(new_words))
            words.extend(new_words)
        return words

    def get_random_review_words(
        self,
        mode: PracticeMode,
        count: int,
        filters: SelectionFilters = SelectionFilters(),
        now: Optional[datetime] = None,
    ) -> List[Word]:
        """Get due words in random order."""
        now = now or datetime.now(UTC)
        return (
            self._due_query(mode, filters, now)
            .order_by(func.random())
            .limit(count)
            .all()
        )

    def select_words(
        self,
        mode: PracticeMode,
        count: int,
        selection: WordSelection = WordSelection.MIXED,
        filters: SelectionFilters = SelectionFilters(),
        now: Optional[datetime] = None,
    ) -> List[Word]:
        """Pick words for a session. Raises NoEligibleItemsError if none qualify."""
        if count < 1:
            raise ValueError("count must be positive")

        with selection_duration.labels(selection=selection.value).time():
            if selection == WordSelection.MIXED:
                words = self.get_mixed_words(mode, count, filters, now)
            elif selection == WordSelection.NEW:
                words = self.get_new_words(mode, count, filters)
            elif selection == WordSelection.REVIEW:
                words = self.get_due_words(mode, count, filters, now)
            elif selection == WordSelection.RANDOM:
                words = self.get_random_review_words(mode, count, filters, now)
            else:
                raise InvalidModeError(selection, kind="word selection")

        logger.info(
            "Selected %d words for %s (%s, categories=%s, character_mode=%s)",
            len(words),
            mode.value,
            selection.value,
            sorted(filters.categories),
            filters.character_mode,
        )
        if not words:
            empty_selections.labels(mode=mode.value, selection=selection.value).inc()
            raise NoEligibleItemsError(mode, selection)
        return words
