"""Puzzle generator: pick letter sets from the proper-noun corpus.

Usage:
    # Generate 90 puzzles starting today and upsert them
    python -m backend.puzzles.generator

    # Reproducible run for a given start date, printed only
    python -m backend.puzzles.generator --count 30 --start-date 2026-01-01 --seed 7 --dry-run
"""
import logging
import random
import sys
from datetime import date, timedelta
from typing import TYPE_CHECKING, Optional

from .models import LETTER_SET_SIZE, GenerationResult, GeneratorConfig, Puzzle, letter_set_key
from .scoring import is_pangram, max_score

if TYPE_CHECKING:
    from backend.store.supabase import CorpusSource, PuzzleSink

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """The run cannot produce any puzzle (empty corpus, thin alphabet, no accepts)."""


def letter_frequencies(words: list[str]) -> dict[str, int]:
    """Number of distinct words containing each letter."""
    freq: dict[str, int] = {}
    for word in words:
        for letter in dict.fromkeys(word):
            freq[letter] = freq.get(letter, 0) + 1
    return freq


def rank_letters(words: list[str], pool_size: int = 20) -> list[str]:
    """Top `pool_size` letters by document frequency.

    Ties keep the order in which letters were first seen in the corpus.
    """
    freq = letter_frequencies(words)
    ranked = sorted(freq, key=lambda l: -freq[l])
    return ranked[:pool_size]


def passes_quality_gate(
    valid_answers: list[str],
    letters: list[str],
    min_words: int,
    max_words: int,
) -> bool:
    if len(valid_answers) < min_words or len(valid_answers) > max_words:
        return False
    return any(is_pangram(w, letters) for w in valid_answers)


class PuzzleGenerator:
    """Rejection-sample letter sets until enough puzzles pass the quality gate."""

    def __init__(
        self,
        words: list[str],
        config: Optional[GeneratorConfig] = None,
        rng: Optional[random.Random] = None,
        candidate_letters: Optional[list[str]] = None,
    ):
        self.words = words
        self.config = config or GeneratorConfig()
        self.rng = rng or random.Random()
        if candidate_letters is None:
            candidate_letters = rank_letters(words, self.config.candidate_pool)
        self.candidate_letters = candidate_letters

    def _try_letter_set(self, seven: list[str], day: date) -> Optional[Puzzle]:
        """First center (in drawn order) that passes the gate, as a Puzzle."""
        letter_set = set(seven)
        matching_words = [w for w in self.words if letter_set.issuperset(w)]

        for center in seven:
            valid_answers = [w for w in matching_words if center in w]
            if not passes_quality_gate(
                valid_answers, seven, self.config.min_words, self.config.max_words
            ):
                continue

            return Puzzle(
                date=day,
                center_letter=center,
                outer_letters=[l for l in seven if l != center],
                valid_answers=valid_answers,
                max_score=max_score(valid_answers, seven),
            )
        return None

    def generate(self) -> GenerationResult:
        if not self.words:
            raise GenerationError("No words in corpus! Run the word importer first.")
        if len(self.candidate_letters) < LETTER_SET_SIZE:
            raise GenerationError(
                f"Need at least {LETTER_SET_SIZE} candidate letters, "
                f"got {len(self.candidate_letters)}: {', '.join(self.candidate_letters)}"
            )

        config = self.config
        result = GenerationResult(requested=config.puzzle_count)
        used: set[str] = set()

        while result.attempts < config.max_attempts and len(result.puzzles) < config.puzzle_count:
            result.attempts += 1
            seven = self.rng.sample(self.candidate_letters, LETTER_SET_SIZE)
            key = letter_set_key(seven)
            if key in used:
                result.duplicate_draws += 1
                continue
            used.add(key)

            day = config.start_date + timedelta(days=len(result.puzzles))
            puzzle = self._try_letter_set(seven, day)
            if puzzle is None:
                continue

            result.puzzles.append(puzzle)
            pangrams = sum(1 for w in puzzle.valid_answers if is_pangram(w, seven))
            logger.info(
                "#%d (%s): %s+[%s] %d words, %d pangram(s), max %d pts",
                len(result.puzzles),
                puzzle.date.isoformat(),
                puzzle.center_letter,
                ",".join(puzzle.outer_letters),
                len(puzzle.valid_answers),
                pangrams,
                puzzle.max_score,
            )

        result.letter_sets_tried = len(used)

        if not result.puzzles:
            raise GenerationError(
                f"Could not generate any puzzles after {result.attempts} attempts "
                f"({result.letter_sets_tried} letter sets). Try adjusting parameters."
            )
        if result.shortfall:
            logger.warning(
                "Generated %d/%d puzzles; attempt budget of %d exhausted",
                len(result.puzzles),
                config.puzzle_count,
                config.max_attempts,
            )
        return result


def print_summary(result: GenerationResult):
    print(f"\n--- Summary ---")
    print(f"Generated: {len(result.puzzles)}/{result.requested}")
    print(f"Letter sets tried: {result.letter_sets_tried}")
    if result.shortfall:
        print(f"Shortfall: {result.shortfall} puzzle(s)")
    low, high = result.word_count_range
    print(f"Word count range: {low}-{high}")
    print(f"Avg words per puzzle: {result.average_words:.1f}")
    print(f"Date range: {result.puzzles[0].date} to {result.puzzles[-1].date}")


def run(
    source: "CorpusSource",
    sink: Optional["PuzzleSink"],
    config: GeneratorConfig,
    rng: Optional[random.Random] = None,
    page_size: Optional[int] = None,
) -> GenerationResult:
    """Load the corpus, generate puzzles and hand them to the sink.

    A sink of None is a dry run. Errors propagate before anything is written.
    """
    from backend.store.supabase import PAGE_SIZE, load_corpus

    words = load_corpus(source, page_size=page_size or PAGE_SIZE)
    print(f"Loaded {len(words)} words")

    generator = PuzzleGenerator(words, config, rng)
    print(f"Top letters: {', '.join(generator.candidate_letters[:15])}")
    print(f"Generating {config.puzzle_count} puzzles...\n")
    result = generator.generate()
    print_summary(result)

    if sink is None:
        print("\nDry run: nothing saved.")
        return result
    sink.upsert_puzzles(result.puzzles)
    print(f"\n✓ Saved {len(result.puzzles)} puzzles to database!")
    return result


def main():
    """Main entry point for puzzle generation."""
    import argparse

    from dotenv import load_dotenv
    from pydantic import ValidationError

    from backend.store.supabase import ENV_FILE, PAGE_SIZE, StoreError, SupabaseStore

    defaults = GeneratorConfig()

    parser = argparse.ArgumentParser(description="Generate daily Bee Proper puzzles")
    parser.add_argument("--count", "-n", type=int, default=defaults.puzzle_count,
                        help=f"Number of puzzles to generate (default: {defaults.puzzle_count})")
    parser.add_argument("--min-words", type=int, default=defaults.min_words,
                        help=f"Minimum answers per puzzle (default: {defaults.min_words})")
    parser.add_argument("--max-words", type=int, default=defaults.max_words,
                        help=f"Maximum answers per puzzle (default: {defaults.max_words})")
    parser.add_argument("--max-attempts", type=int, default=defaults.max_attempts,
                        help=f"Letter-set sampling budget (default: {defaults.max_attempts})")
    parser.add_argument("--candidate-pool", type=int, default=defaults.candidate_pool,
                        help=f"Top-K frequent letters to sample from (default: {defaults.candidate_pool})")
    parser.add_argument("--start-date", type=date.fromisoformat, default=None,
                        help="First puzzle date, YYYY-MM-DD (default: today)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--page-size", type=int, default=PAGE_SIZE,
                        help=f"Corpus page size (default: {PAGE_SIZE})")
    parser.add_argument("--dry-run", action="store_true", help="Generate but do not save")
    args = parser.parse_args()

    load_dotenv(ENV_FILE)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    try:
        config = GeneratorConfig(
            puzzle_count=args.count,
            min_words=args.min_words,
            max_words=args.max_words,
            max_attempts=args.max_attempts,
            candidate_pool=args.candidate_pool,
            start_date=args.start_date or date.today(),
        )
        with SupabaseStore.from_env() as store:
            print(f"Total rows in DB: {store.count_words()}")
            run(
                store,
                None if args.dry_run else store,
                config,
                random.Random(args.seed),
                page_size=args.page_size,
            )
    except (ValidationError, StoreError, GenerationError) as e:
        print(f"\n✗ {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
