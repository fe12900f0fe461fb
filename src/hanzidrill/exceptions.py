"""Errors raised by the practice engine."""
from typing import Optional


class HanziDrillError(Exception):
    """Base class for practice engine errors."""


class InvalidModeError(HanziDrillError, ValueError):
    """Unrecognized practice mode or word selection identifier."""

    def __init__(self, value: object, kind: str = "mode"):
        self.value = value
        self.kind = kind
        super().__init__(f"Invalid {kind}: {value!r}")


class NoEligibleItemsError(HanziDrillError):
    """Selection produced nothing to practice."""

    def __init__(self, mode: object, selection: Optional[object] = None):
        self.mode = mode
        self.selection = selection
        super().__init__(f"No words available for practice in mode {mode}")


class ItemNotFoundError(HanziDrillError, LookupError):
    """A written form is not present in storage."""

    def __init__(self, written_form: str):
        self.written_form = written_form
        super().__init__(f"Word {written_form!r} not found")


class DuplicateItemError(HanziDrillError, ValueError):
    """A word with the same written form already exists."""

    def __init__(self, written_form: str):
        self.written_form = written_form
        super().__init__(f"Word {written_form!r} already exists")


class MalformedTransliterationError(HanziDrillError, ValueError):
    """Transliteration that cannot be segmented.

    Segmentation falls back to single characters and always terminates, so
    the tokenizer itself never raises this.
    """
