"""Data models for Bee Proper puzzles."""
import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

LETTER_SET_SIZE = 7


def letter_set_key(letters: list[str]) -> str:
    """Canonical, order-independent key for a letter set."""
    return "".join(sorted(letters))


class ProperNoun(BaseModel):
    """A corpus row."""
    id: Optional[int] = None
    word: str = Field(min_length=4, pattern=r"^[A-Z]+$")
    category: Literal["city", "first_name", "surname"]


class Puzzle(BaseModel):
    """A generated daily puzzle."""
    date: datetime.date
    center_letter: str
    outer_letters: list[str] = Field(min_length=6, max_length=6)  # drawn order, not sorted
    valid_answers: list[str]
    max_score: int = Field(ge=0)

    @field_validator("center_letter")
    @classmethod
    def validate_center(cls, v):
        if len(v) != 1 or not v.isalpha() or not v.isupper():
            raise ValueError(f"Center letter must be one uppercase letter, got {v!r}")
        return v

    @field_validator("outer_letters")
    @classmethod
    def validate_outer(cls, v):
        if len(set(v)) != len(v):
            raise ValueError("Outer letters must be distinct")
        for letter in v:
            if len(letter) != 1 or not letter.isalpha() or not letter.isupper():
                raise ValueError(f"Outer letters must be single uppercase letters, got {letter!r}")
        return v

    @model_validator(mode="after")
    def validate_center_not_outer(self):
        if self.center_letter in self.outer_letters:
            raise ValueError("Center letter cannot also be an outer letter")
        return self

    @property
    def letters(self) -> list[str]:
        return [self.center_letter, *self.outer_letters]

    def to_record(self) -> dict:
        """Serialize for the `puzzles` table (date as YYYY-MM-DD)."""
        return self.model_dump(mode="json")


class GeneratorConfig(BaseModel):
    """Run parameters for one generation job."""
    puzzle_count: int = Field(default=90, gt=0)
    min_words: int = Field(default=15, ge=1)
    max_words: int = Field(default=100, ge=1)
    max_attempts: int = Field(default=50000, gt=0)
    candidate_pool: int = Field(default=20, ge=LETTER_SET_SIZE)
    start_date: datetime.date = Field(default_factory=datetime.date.today)

    @model_validator(mode="after")
    def validate_bounds(self):
        if self.min_words > self.max_words:
            raise ValueError(
                f"min_words ({self.min_words}) cannot exceed max_words ({self.max_words})"
            )
        return self


class GenerationResult(BaseModel):
    """Accepted puzzles plus statistics for one run."""
    puzzles: list[Puzzle] = []
    requested: int
    attempts: int = 0
    letter_sets_tried: int = 0
    duplicate_draws: int = 0

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - len(self.puzzles))

    @property
    def word_count_range(self) -> Optional[tuple[int, int]]:
        counts = [len(p.valid_answers) for p in self.puzzles]
        if not counts:
            return None
        return min(counts), max(counts)

    @property
    def average_words(self) -> float:
        if not self.puzzles:
            return 0.0
        return sum(len(p.valid_answers) for p in self.puzzles) / len(self.puzzles)
