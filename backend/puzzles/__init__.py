"""Puzzle generation, scoring and answer checking."""
from .answers import RejectReason, WordCheck, check_word
from .generator import GenerationError, PuzzleGenerator, rank_letters, run
from .models import GenerationResult, GeneratorConfig, Puzzle
from .scoring import get_rank, is_pangram, max_score, score_word

__all__ = [
    "RejectReason",
    "WordCheck",
    "check_word",
    "GenerationError",
    "PuzzleGenerator",
    "run",
    "rank_letters",
    "GenerationResult",
    "GeneratorConfig",
    "Puzzle",
    "get_rank",
    "is_pangram",
    "max_score",
    "score_word",
]
