"""Pinyin segmentation, tone conversion and reading comparison.

Two spellings of a reading are handled:

* display form: tone marks on vowels, syllables separated by spaces ("nǐ hǎo")
* machine form: lowercase, tone digit after each syllable, neutral tone
  written without a digit, "ü" written as "v" ("ni3hao3")
"""
import re
from typing import List, Optional, Tuple

NEUTRAL_TONE = 5
TONE_DIGITS = "12345"

# Tone-marked vowel -> (base vowel, tone); "v" stands for "ü"
TONE_MARKS = {
    "ā": ("a", 1), "á": ("a", 2), "ǎ": ("a", 3), "à": ("a", 4),
    "ē": ("e", 1), "é": ("e", 2), "ě": ("e", 3), "è": ("e", 4),
    "ī": ("i", 1), "í": ("i", 2), "ǐ": ("i", 3), "ì": ("i", 4),
    "ō": ("o", 1), "ó": ("o", 2), "ǒ": ("o", 3), "ò": ("o", 4),
    "ū": ("u", 1), "ú": ("u", 2), "ǔ": ("u", 3), "ù": ("u", 4),
    "ǖ": ("v", 1), "ǘ": ("v", 2), "ǚ": ("v", 3), "ǜ": ("v", 4),
}
MARKED_VOWELS = {value: marked for marked, value in TONE_MARKS.items()}

VOWELS = "aeiouüv" + "".join(TONE_MARKS)

INITIALS = ["zh", "ch", "sh", "b", "p", "m", "f", "d", "t", "n", "l", "g", "k",
            "h", "j", "q", "x", "r", "z", "c", "s", "y", "w"]

# Finals in machine spelling; tried longest first
FINALS = sorted(
    [
        "iang", "iong", "uang",
        "iao", "ian", "uai", "uan", "ing", "ang", "eng", "ong", "van",
        "ia", "ie", "iu", "in", "ua", "uo", "ue", "ui", "un", "ve", "vn",
        "ai", "ao", "an", "ei", "en", "er", "ou",
        "a", "e", "i", "o", "u", "v",
    ],
    key=len,
    reverse=True,
)


def _letter_class(letter: str) -> str:
    """Regex class matching a letter in any tone-marked or plain spelling."""
    if letter == "v":
        plain = "üv"
    elif letter in "aeiou":
        plain = letter
    else:
        return letter
    marked = "".join(char for char, (base, _) in TONE_MARKS.items() if base == letter)
    return f"[{plain}{marked}]"


_INITIAL_PATTERN = "|".join(INITIALS)
_FINAL_PATTERN = "|".join("".join(_letter_class(letter) for letter in final) for final in FINALS)
_SYLLABLE_RE = re.compile(f"(?:{_INITIAL_PATTERN})?(?:{_FINAL_PATTERN})", re.IGNORECASE)
_ER_RE = re.compile(_letter_class("e") + "r", re.IGNORECASE)
_BOUNDARY_RE = re.compile(r"[\s'’]+")
_MACHINE_SYLLABLE_RE = re.compile(r"([a-z]+)([1-5]?)")


def _is_vowel(char: str) -> bool:
    return char.lower() in VOWELS


def _can_start_syllable(rest: str) -> bool:
    """Whether a remainder is empty, starts at a boundary, or starts a syllable."""
    if not rest or not rest[0].isalpha():
        return True
    return _SYLLABLE_RE.match(rest) is not None


def _match_length(text: str, pos: int) -> int:
    """Length of the syllable starting at pos, including a trailing tone digit."""
    match = _SYLLABLE_RE.match(text, pos)
    if match is None:
        return 1

    length = match.end() - pos
    end = pos + length
    if end < len(text) and text[end] in TONE_DIGITS:
        return length + 1

    syllable = text[pos:end]
    rest = text[end:]
    if rest and _is_vowel(rest[0]) and length > 1:
        last = syllable[-1].lower()
        # A trailing n or r in front of a vowel starts the next syllable.
        if last == "n" or (last == "r" and not _ER_RE.fullmatch(syllable)):
            length -= 1

    stuck = pos + length
    if _can_start_syllable(text[stuck:]):
        return length

    # Give letters back only if the next syllable then covers the stuck one,
    # so an erhua "r" stays a piece of its own: "nǎr" -> "nǎ", "r".
    for shorter in range(length - 1, 0, -1):
        if not is_syllable(text[pos:pos + shorter]):
            continue
        following = _SYLLABLE_RE.match(text, pos + shorter)
        if following is not None and following.end() > stuck:
            return shorter
    return length


def segment_syllables(text: str) -> List[str]:
    """Split an unspaced pinyin run into syllables.

    Never fails: characters that cannot start a syllable become one-character
    pieces, so the pieces always concatenate back to the input.
    """
    pieces = []
    pos = 0
    while pos < len(text):
        length = _match_length(text, pos)
        pieces.append(text[pos:pos + length])
        pos += length
    return pieces


def is_syllable(piece: str) -> bool:
    """Whether piece is exactly one syllable, optionally with a tone digit."""
    if piece and piece[-1] in TONE_DIGITS:
        piece = piece[:-1]
    return _SYLLABLE_RE.fullmatch(piece) is not None


def split_pinyin(pinyin: str) -> str:
    """Return pinyin with syllables separated by single spaces.

    e.g. "zhīdào" -> "zhī dào". Spaces and apostrophes already present are
    taken as the syllable boundaries.
    """
    normalized = _BOUNDARY_RE.sub(" ", pinyin).strip()
    if " " in normalized:
        return normalized
    return " ".join(segment_syllables(normalized))


def _pieces(text: str) -> List[str]:
    """Lowercase syllable pieces of text, across spaces and apostrophes."""
    text = text.lower().replace("u:", "v")
    pieces = []
    for chunk in _BOUNDARY_RE.split(text):
        if chunk:
            pieces.extend(segment_syllables(chunk))
    return pieces


def _syllable_to_machine(syllable: str) -> str:
    tone = NEUTRAL_TONE
    letters = []
    for char in syllable:
        if char in TONE_MARKS:
            base, tone = TONE_MARKS[char]
            letters.append(base)
        elif char == "ü":
            letters.append("v")
        elif char in TONE_DIGITS:
            tone = int(char)
        else:
            letters.append(char)
    base = "".join(letters)
    return base if tone == NEUTRAL_TONE else f"{base}{tone}"


def _tone_mark_index(letters: str) -> Optional[int]:
    """Position of the vowel that carries the tone mark."""
    for vowel in "ae":
        if vowel in letters:
            return letters.index(vowel)
    if "ou" in letters:
        return letters.index("ou")
    for index in range(len(letters) - 1, -1, -1):
        if letters[index] in "iouv":
            return index
    return None


def _syllable_to_display(syllable: str) -> str:
    machine = _syllable_to_machine(syllable)
    match = _MACHINE_SYLLABLE_RE.fullmatch(machine)
    if match is None:
        return machine

    letters, digit = match.groups()
    tone = int(digit) if digit else NEUTRAL_TONE
    index = _tone_mark_index(letters) if tone != NEUTRAL_TONE else None
    if index is not None:
        letters = letters[:index] + MARKED_VOWELS[(letters[index], tone)] + letters[index + 1:]
    return letters.replace("v", "ü")


def to_machine_form(pinyin: str) -> str:
    """Convert pinyin to numbered form, e.g. "Nǐ hǎo" -> "ni3hao3"."""
    return "".join(_syllable_to_machine(piece) for piece in _pieces(pinyin))


def to_display_form(pinyin: str) -> str:
    """Convert pinyin to tone-marked form, e.g. "ni3hao3" -> "nǐ hǎo".

    The case of the first letter is kept; everything else is lowercase.
    """
    syllables: List[str] = []
    for piece in _pieces(pinyin):
        rendered = _syllable_to_display(piece)
        if syllables and not any(char.isalpha() for char in rendered):
            # Punctuation stays attached to the preceding syllable
            syllables[-1] += rendered
        elif rendered:
            syllables.append(rendered)

    result = " ".join(syllables)
    stripped = pinyin.strip()
    if result and stripped[:1].isupper():
        result = result[0].upper() + result[1:]
    return result


def strip_tones(pinyin: str) -> str:
    """Machine form without tone digits, e.g. "nǐ hǎo" -> "nihao"."""
    return re.sub(f"[{TONE_DIGITS}]", "", to_machine_form(pinyin))


def normalize(pinyin: str) -> str:
    """Canonical machine form with spacing, punctuation and case removed."""
    return re.sub(f"[^a-z{TONE_DIGITS}]", "", to_machine_form(pinyin.lower()))


def same_reading(first: str, second: str) -> bool:
    """Whether two pinyin strings denote the same pronunciation."""
    return normalize(first) == normalize(second)


def count_syllables(pinyin: str) -> int:
    """Number of syllables in pinyin, ignoring punctuation."""
    return sum(1 for piece in _pieces(pinyin) if is_syllable(piece))


def _split_final_tone(normalized: str) -> Tuple[str, Optional[str]]:
    if normalized and normalized[-1] in TONE_DIGITS:
        return normalized[:-1], normalized[-1]
    return normalized, None


def tone_optional_match(answer: str, expected: str) -> bool:
    """Compare normalized readings, tolerating a missing or extra final tone.

    Only the last syllable of a multi-syllable reading may differ, and only by
    a tone digit present on one side and absent on the other. Single-syllable
    readings must match exactly.
    """
    if answer == expected:
        return True
    if count_syllables(expected) < 2:
        return False

    answer_base, answer_tone = _split_final_tone(answer)
    expected_base, expected_tone = _split_final_tone(expected)
    return answer_base == expected_base and (answer_tone is None) != (expected_tone is None)
