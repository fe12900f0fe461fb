"""Service for managing words and their practice progress."""
import logging
import re
from collections import Counter
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from hanzidrill.config import settings
from hanzidrill.exceptions import DuplicateItemError, ItemNotFoundError, MalformedTransliterationError
from hanzidrill.models.models import Category, PinyinSynonym, Progress, Word
from hanzidrill.models.practice_models import (
    NewState,
    PracticeMode,
    ProgressState,
    ReviewingState,
    Stats,
)
from hanzidrill.services.pinyin import is_syllable, normalize, segment_syllables, split_pinyin, to_display_form

logger = logging.getLogger(__name__)

_GLOSS_RE = re.compile(r"^\(.*\)$")


def is_translatable(translations: Iterable[str]) -> bool:
    """False if every translation is a bracketed gloss such as "(particle)"."""
    return not all(_GLOSS_RE.match(translation.strip()) for translation in translations)


def translation_key(translations: Iterable[str]) -> FrozenSet[str]:
    """Comparable form of a translation list."""
    return frozenset(translation.strip().casefold() for translation in translations)


def normalize_transliteration(pinyin: str) -> str:
    """Display form for storage; accepts tone-marked or numbered input."""
    pinyin = pinyin.strip()
    if any(char in "1234" for char in pinyin):
        normalized = to_display_form(pinyin)
    else:
        normalized = split_pinyin(pinyin)
    if not any(is_syllable(piece) for piece in segment_syllables(normalized.replace(" ", ""))):
        raise MalformedTransliterationError(f"No pinyin syllable in {pinyin!r}")
    return normalized


@dataclass
class WordRecord:
    """Word data as delivered by an importer."""
    written_form: str
    transliteration: str
    translations: List[str]
    frequency_rank: Optional[int] = None
    hsk_level: Optional[int] = None
    categories: Sequence[str] = ()


class WordCache:
    """In-memory view of the catalog, rebuilt lazily after invalidate()."""

    def __init__(self, db: Session):
        self.db = db
        self._words: Optional[Dict[str, Word]] = None
        self._translation_counts: Optional[Counter] = None

    def invalidate(self) -> None:
        """Drop cached data; the next lookup reloads it."""
        self._words = None
        self._translation_counts = None

    def _load(self) -> None:
        words = (
            self.db.query(Word)
            .options(selectinload(Word.categories))
            .order_by(Word.id)
            .all()
        )
        self._words = {word.written_form: word for word in words}
        self._translation_counts = Counter(translation_key(word.translations) for word in words)
        logger.debug("Loaded %d words into cache", len(words))

    @property
    def words(self) -> Dict[str, Word]:
        if self._words is None:
            self._load()
        return self._words

    @property
    def translation_counts(self) -> Counter:
        if self._translation_counts is None:
            self._load()
        return self._translation_counts


class WordService:
    """Storage adapter for words, progress and synonyms."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db
        self.cache = WordCache(db)

    def get_all_words(self) -> List[Word]:
        """Get all words in insertion order."""
        return list(self.cache.words.values())

    def get_word(self, written_form: str) -> Optional[Word]:
        """Get a word by its written form."""
        return self.cache.words.get(written_form.strip())

    def require_word(self, written_form: str) -> Word:
        """Get a word by its written form or raise ItemNotFoundError."""
        word = self.get_word(written_form)
        if word is None:
            logger.warning("Word %r not found", written_form)
            raise ItemNotFoundError(written_form)
        return word

    def get_word_count(self) -> int:
        """Get the count of words in the database."""
        return self.db.query(Word).count()

    def _get_or_create_categories(self, names: Iterable[str]) -> List[Category]:
        names = sorted({name.strip() for name in names if name and name.strip()})
        if not names:
            return []
        existing = {
            category.name: category
            for category in self.db.query(Category).filter(Category.name.in_(names)).all()
        }
        categories = []
        for name in names:
            category = existing.get(name)
            if category is None:
                category = Category(name=name)
                self.db.add(category)
                self.db.flush()
            categories.append(category)
        return categories

    def add_word(
        self,
        written_form: str,
        transliteration: str,
        translations: List[str],
        categories: Sequence[str] = (),
        frequency_rank: Optional[int] = None,
        hsk_level: Optional[int] = None,
        manual: bool = True,
    ) -> Word:
        """Create a new word. Raises DuplicateItemError if it already exists."""
        written_form = written_form.strip()
        if not written_form or not translations:
            raise ValueError("written form and at least one translation are required")
        if self.get_word(written_form) is not None:
            raise DuplicateItemError(written_form)

        word = Word(
            written_form=written_form,
            transliteration=normalize_transliteration(transliteration),
            translations=list(translations),
            frequency_rank=frequency_rank,
            hsk_level=hsk_level,
            translatable=is_translatable(translations),
            manual=manual,
            categories=self._get_or_create_categories(categories),
        )
        self.db.add(word)
        self.db.commit()
        self.db.refresh(word)
        self.cache.invalidate()
        logger.info("Added word %s [%s]", word.written_form, word.transliteration)
        return word

    def import_words(self, records: Iterable[WordRecord]) -> int:
        """Insert or refresh imported words. Progress is left untouched.

        The batch is committed as a whole; a bad record rolls back every
        record before it.
        """
        count = 0
        try:
            for record in records:
                written_form = record.written_form.strip()
                fields = dict(
                    transliteration=normalize_transliteration(record.transliteration),
                    translations=list(record.translations),
                    translatable=is_translatable(record.translations),
                    frequency_rank=record.frequency_rank,
                    hsk_level=record.hsk_level,
                    categories=self._get_or_create_categories(record.categories),
                )
                word = self.db.query(Word).filter(Word.written_form == written_form).first()
                if word is None:
                    self.db.add(Word(written_form=written_form, manual=False, **fields))
                    self.db.flush()
                else:
                    for key, value in fields.items():
                        setattr(word, key, value)
                count += 1
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning("Import failed after %d records, rolled back", count)
            raise
        finally:
            self.cache.invalidate()
        logger.info("Imported %d words", count)
        return count

    def update_word(
        self,
        written_form: str,
        transliteration: str,
        translations: List[str],
        categories: Sequence[str] = (),
    ) -> Word:
        """Update a word's transliteration, translations and categories."""
        if not translations:
            raise ValueError("at least one translation is required")
        word = self.require_word(written_form)

        word.transliteration = normalize_transliteration(transliteration)
        word.translations = list(translations)
        word.translatable = is_translatable(translations)
        word.categories = self._get_or_create_categories(categories)

        self.db.commit()
        self.db.refresh(word)
        self.cache.invalidate()
        return word

    def list_categories(self) -> List[str]:
        """Get all category names in alphabetical order."""
        return [name for (name,) in self.db.query(Category.name).order_by(Category.name).all()]

    def is_ambiguous_translation(self, word: Word) -> bool:
        """Whether another word has exactly the same set of translations."""
        return self.cache.translation_counts[translation_key(word.translations)] >= 2

    def _get_progress_row(self, word: Word, mode: PracticeMode) -> Optional[Progress]:
        return (
            self.db.query(Progress)
            .filter(Progress.word_id == word.id, Progress.mode == mode)
            .first()
        )

    def get_progress(self, word: Word, mode: PracticeMode) -> ProgressState:
        """Get the scheduling state of a word in a mode."""
        row = self._get_progress_row(word, mode)
        if row is None:
            return NewState()
        return ReviewingState(
            bucket=row.bucket,
            last_practiced=row.last_practiced,
            next_eligible=row.next_eligible,
        )

    def upsert_progress(
        self,
        word: Word,
        mode: PracticeMode,
        bucket: int,
        last_practiced: datetime,
        next_eligible: datetime,
        commit: bool = True,
    ) -> Progress:
        """Create or update the progress row of a word in a mode."""
        row = self._get_progress_row(word, mode)
        if row is None:
            row = Progress(word_id=word.id, mode=mode)
            self.db.add(row)
        row.bucket = bucket
        row.last_practiced = last_practiced
        row.next_eligible = next_eligible
        if commit:
            self.db.commit()
        else:
            self.db.flush()
        return row

    def delete_progress(self, word: Word, mode: Optional[PracticeMode] = None) -> int:
        """Reset a word to new in one mode, or in every mode if mode is None."""
        query = self.db.query(Progress).filter(Progress.word_id == word.id)
        if mode is not None:
            query = query.filter(Progress.mode == mode)
        deleted = query.delete(synchronize_session="fetch")
        self.db.commit()
        logger.info("Reset %d progress rows for %s", deleted, word.written_form)
        return deleted

    def get_synonyms(self, word: Word) -> List[str]:
        """Get the normalized alternate readings recorded for a word."""
        return [
            reading
            for (reading,) in self.db.query(PinyinSynonym.reading)
            .filter(PinyinSynonym.word_id == word.id)
            .order_by(PinyinSynonym.id)
            .all()
        ]

    def add_synonym(self, word: Word, reading: str) -> PinyinSynonym:
        """Record an alternate reading; adding the same reading twice is a no-op."""
        normalized = normalize(reading)
        if not normalized:
            raise ValueError(f"Empty reading: {reading!r}")
        synonym = (
            self.db.query(PinyinSynonym)
            .filter(PinyinSynonym.word_id == word.id, PinyinSynonym.reading == normalized)
            .first()
        )
        if synonym is None:
            synonym = PinyinSynonym(word_id=word.id, reading=normalized)
            self.db.add(synonym)
            self.db.commit()
            logger.info("Added synonym %s for %s", normalized, word.written_form)
        return synonym

    def get_stats(self, mode: PracticeMode, now: Optional[datetime] = None) -> Stats:
        """Get progress statistics for a mode."""
        now = now or datetime.now(UTC)
        top = settings.practice.max_bucket

        buckets = [0] * (top + 1)
        rows = (
            self.db.query(Progress.bucket, func.count(Progress.id))
            .filter(Progress.mode == mode)
            .group_by(Progress.bucket)
            .all()
        )
        for bucket, count in rows:
            buckets[min(bucket, top)] += count

        due = (
            self.db.query(func.count(Progress.id))
            .filter(Progress.mode == mode, Progress.next_eligible <= now)
            .scalar()
        )
        return Stats(
            mode=mode,
            total_words=self.get_word_count(),
            learned=sum(buckets),
            mastered=buckets[top],
            due_for_review=due or 0,
            buckets=buckets,
        )
