"""Answer verification for each practice mode."""
import logging
from typing import Iterable, List

from hanzidrill.exceptions import InvalidModeError
from hanzidrill.models.models import Word
from hanzidrill.models.practice_models import AnswerVerdict, PracticeMode
from hanzidrill.services.pinyin import normalize, same_reading, to_machine_form, tone_optional_match

logger = logging.getLogger(__name__)


def english_matches(answer: str, translations: Iterable[str]) -> bool:
    """Whether the answer equals any translation, ignoring case and outer spaces."""
    folded = answer.strip().casefold()
    return any(translation.strip().casefold() == folded for translation in translations)


def hanzi_matches(answer: str, written_form: str) -> bool:
    """Whether the answer is exactly the written form."""
    return answer.strip() == written_form.strip()


def render_prompt(mode: PracticeMode, word: Word) -> str:
    """Text shown to the learner for a word in the given mode."""
    if mode in (PracticeMode.HANZI_TO_PINYIN, PracticeMode.HANZI_TO_ENGLISH):
        return word.written_form
    elif mode in (PracticeMode.ENGLISH_TO_HANZI, PracticeMode.ENGLISH_TO_PINYIN):
        return ", ".join(word.translations)
    raise InvalidModeError(mode)


def accepted_answers(mode: PracticeMode, word: Word) -> List[str]:
    """Answers that count as correct for a word in the given mode."""
    if mode in (PracticeMode.HANZI_TO_PINYIN, PracticeMode.ENGLISH_TO_PINYIN):
        return [word.transliteration, to_machine_form(word.transliteration)]
    elif mode == PracticeMode.HANZI_TO_ENGLISH:
        return list(word.translations)
    elif mode == PracticeMode.ENGLISH_TO_HANZI:
        return [word.written_form]
    raise InvalidModeError(mode)


def check_answer(
    mode: PracticeMode,
    answer: str,
    word: Word,
    synonyms: Iterable[str] = (),
    ambiguous: bool = False,
) -> AnswerVerdict:
    """Judge an answer against the target word.

    Args:
        mode: Practice mode the question was asked in.
        answer: Text submitted by the learner.
        word: Target word.
        synonyms: Normalized alternate readings recorded for the word.
        ambiguous: Whether another word in the catalog has the same translations.

    A near miss is never correct; the caller should prompt again.
    """
    if mode == PracticeMode.HANZI_TO_PINYIN:
        return AnswerVerdict(correct=same_reading(answer, word.transliteration))

    elif mode == PracticeMode.HANZI_TO_ENGLISH:
        return AnswerVerdict(correct=english_matches(answer, word.translations))

    elif mode == PracticeMode.ENGLISH_TO_HANZI:
        if hanzi_matches(answer, word.written_form):
            return AnswerVerdict(correct=True)
        # Another word with the same translations is a valid answer too
        return AnswerVerdict(correct=False, near_miss=ambiguous)

    elif mode == PracticeMode.ENGLISH_TO_PINYIN:
        if same_reading(answer, word.transliteration):
            return AnswerVerdict(correct=True)
        normalized = normalize(answer)
        near_miss = (
            normalized in set(synonyms)
            or (len(word.written_form) > 1
                and tone_optional_match(normalized, normalize(word.transliteration)))
            or ambiguous
        )
        if near_miss:
            logger.debug("Near miss for %s: %r", word.written_form, answer)
        return AnswerVerdict(correct=False, near_miss=near_miss)

    raise InvalidModeError(mode)
