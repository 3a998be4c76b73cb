"""Checking a player's submitted word against a puzzle."""
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel

from .scoring import score_word

MIN_WORD_LENGTH = 4


class RejectReason(str, Enum):
    TOO_SHORT = "too_short"
    MISSING_CENTER = "missing_center"
    INVALID_LETTERS = "invalid_letters"
    NOT_IN_WORD_LIST = "not_in_word_list"
    ALREADY_FOUND = "already_found"


REASON_MESSAGES = {
    RejectReason.TOO_SHORT: "Too short",
    RejectReason.MISSING_CENTER: "Missing center letter",
    RejectReason.INVALID_LETTERS: "Invalid letters",
    RejectReason.NOT_IN_WORD_LIST: "Not a valid word",
    RejectReason.ALREADY_FOUND: "Already found",
}


class WordCheck(BaseModel):
    """Outcome of one submission."""
    valid: bool
    word: str
    score: int = 0
    reason: Optional[RejectReason] = None

    @property
    def message(self) -> Optional[str]:
        return REASON_MESSAGES[self.reason] if self.reason else None


def _rejection_reason(word: str, center_letter: str, letters: set[str]) -> RejectReason:
    """Most specific explanation for a word missing from the answer list."""
    if len(word) < MIN_WORD_LENGTH:
        return RejectReason.TOO_SHORT
    if center_letter not in word:
        return RejectReason.MISSING_CENTER
    if not letters.issuperset(word):
        return RejectReason.INVALID_LETTERS
    return RejectReason.NOT_IN_WORD_LIST


def check_word(
    word: str,
    center_letter: str,
    outer_letters: list[str],
    valid_answers: Iterable[str],
    found_words: Iterable[str] = (),
) -> WordCheck:
    word = word.strip().upper()
    letters = [center_letter, *outer_letters]

    if word not in set(valid_answers):
        reason = _rejection_reason(word, center_letter, set(letters))
        return WordCheck(valid=False, word=word, reason=reason)

    if word in set(found_words):
        return WordCheck(valid=False, word=word, reason=RejectReason.ALREADY_FOUND)

    return WordCheck(valid=True, word=word, score=score_word(word, letters))
