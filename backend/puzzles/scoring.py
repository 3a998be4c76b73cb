"""Word scoring shared by the puzzle generator and the answer checker.

Scoring:
    - len=4 => 1 point, pangram or not
    - else length
    - Pangram (+7)
"""
from typing import Iterable

PANGRAM_BONUS = 7

# Share of max_score needed for each rank, lowest first
RANKS = [
    ("Beginner", 0.0),
    ("Good Start", 0.02),
    ("Moving Up", 0.05),
    ("Good", 0.08),
    ("Solid", 0.15),
    ("Nice", 0.25),
    ("Great", 0.4),
    ("Amazing", 0.5),
    ("Genius", 0.7),
    ("Queen Bee", 1.0),
]


def is_pangram(word: str, letters: Iterable[str]) -> bool:
    """True when the word uses every puzzle letter at least once."""
    return set(word.upper()).issuperset(l.upper() for l in letters)


def score_word(word: str, letters: Iterable[str]) -> int:
    if len(word) == 4:
        return 1
    base = len(word)
    return base + PANGRAM_BONUS if is_pangram(word, letters) else base


def max_score(words: Iterable[str], letters: Iterable[str]) -> int:
    letters = list(letters)
    return sum(score_word(w, letters) for w in words)


def get_rank(score: int, total: int) -> str:
    """Name of the highest rank whose threshold the score has reached."""
    if total <= 0:
        return RANKS[0][0]
    pct = score / total
    rank = RANKS[0][0]
    for name, threshold in RANKS:
        if pct >= threshold:
            rank = name
    return rank
