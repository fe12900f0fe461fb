"""Choosing between dictionary entries for a written form."""
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from hanzidrill.services.pinyin import strip_tones, to_machine_form

_SURNAME_RE = re.compile(r"^surname\s", re.IGNORECASE)
_VARIANT_RE = re.compile(r"^(old\s+)?variant\s+of\s", re.IGNORECASE)


@dataclass
class DictionaryEntry:
    """One reading of a written form as returned by the dictionary lookup."""
    simplified: str
    transliteration: str  # display form
    definitions: List[str] = field(default_factory=list)
    traditional: Optional[str] = None


def is_surname_or_variant(definition: str) -> bool:
    """Whether a definition only names a surname or points to a variant."""
    return bool(_SURNAME_RE.match(definition) or _VARIANT_RE.match(definition))


def filter_entries(entries: Sequence[DictionaryEntry]) -> List[DictionaryEntry]:
    """Drop entries whose definitions are all surnames or variant references."""
    return [
        entry for entry in entries
        if any(not is_surname_or_variant(definition) for definition in entry.definitions)
    ]


def choose_entry(entries: Sequence[DictionaryEntry], hint: Optional[str] = None) -> Optional[DictionaryEntry]:
    """Pick the entry matching a pinyin hint.

    An exact (tone-marked) match wins, then a match with tones stripped,
    then the first entry.
    """
    if not entries:
        return None
    if hint:
        wanted = to_machine_form(hint)
        for entry in entries:
            if to_machine_form(entry.transliteration) == wanted:
                return entry
        toneless = strip_tones(hint)
        for entry in entries:
            if strip_tones(entry.transliteration) == toneless:
                return entry
    return entries[0]
