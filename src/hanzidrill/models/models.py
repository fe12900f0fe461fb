"""Database models for the practice engine."""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from hanzidrill.models.base import Base, TimestampMixin, UTCDateTime
from hanzidrill.models.practice_models import PracticeMode


word_categories = Table(
    "word_categories",
    Base.metadata,
    Column("word_id", Integer, ForeignKey("words.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Word(Base, TimestampMixin):
    """Vocabulary item keyed by its written form."""

    __tablename__ = "words"

    id = Column(Integer, primary_key=True)
    written_form = Column(String, unique=True, nullable=False, index=True)
    transliteration = Column(String, nullable=False)  # display form, e.g. "nǐ hǎo"
    translations = Column(JSON, nullable=False, default=list)  # first is primary
    frequency_rank = Column(Integer, nullable=True, index=True)  # lower = more common
    hsk_level = Column(Integer, nullable=True)
    translatable = Column(Boolean, default=True, nullable=False)
    manual = Column(Boolean, default=False, nullable=False)

    # Relationships
    categories = relationship("Category", secondary=word_categories, back_populates="words")
    progress = relationship("Progress", back_populates="word", cascade="all, delete-orphan")
    synonyms = relationship("PinyinSynonym", back_populates="word", cascade="all, delete-orphan")

    @property
    def category_names(self) -> list[str]:
        return sorted(category.name for category in self.categories)

    def __repr__(self) -> str:
        return f"<Word {self.written_form} [{self.transliteration}]>"


class Category(Base, TimestampMixin):
    """Tag used to filter practice sessions."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)

    # Relationships
    words = relationship("Word", secondary=word_categories, back_populates="categories")


class Progress(Base):
    """Scheduling state of a word in one practice mode."""

    __tablename__ = "progress"
    __table_args__ = (UniqueConstraint("word_id", "mode", name="uq_progress_word_mode"),)

    id = Column(Integer, primary_key=True)
    word_id = Column(Integer, ForeignKey("words.id", ondelete="CASCADE"), nullable=False)
    mode = Column(
        Enum(PracticeMode, values_callable=lambda modes: [mode.value for mode in modes]),
        nullable=False,
    )
    bucket = Column(Integer, nullable=False, default=0)
    last_practiced = Column(UTCDateTime)
    next_eligible = Column(UTCDateTime, nullable=False, index=True)

    # Relationships
    word = relationship("Word", back_populates="progress")


class PinyinSynonym(Base, TimestampMixin):
    """Alternate reading the learner accepted for a word."""

    __tablename__ = "pinyin_synonyms"
    __table_args__ = (UniqueConstraint("word_id", "reading", name="uq_synonym_word_reading"),)

    id = Column(Integer, primary_key=True)
    word_id = Column(Integer, ForeignKey("words.id", ondelete="CASCADE"), nullable=False)
    reading = Column(String, nullable=False)  # normalized machine form

    # Relationships
    word = relationship("Word", back_populates="synonyms")
