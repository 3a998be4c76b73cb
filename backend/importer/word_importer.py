"""Build the proper-noun corpus from raw census, city and first-name files.

Usage:
    # Defaults read from ./data
    python -m backend.importer.word_importer

    # Explicit files; print counts without touching the database
    python -m backend.importer.word_importer --surnames data/Names_2010Census.csv \
        --cities data/cities15000.txt --first-names data/yob2020.txt --dry-run

Expected inputs:
    - Names_2010Census.csv: census surnames, name in the first column, header row
    - cities15000.txt: GeoNames dump, tab separated, name in the second column
    - yobXXXX.txt: SSA baby names, "name,sex,count" rows, no header
"""
import logging
import re
import sys
from pathlib import Path
from typing import Iterable, Optional

from backend.puzzles.models import ProperNoun

logger = logging.getLogger(__name__)

MIN_LENGTH = 4

# Applied in this order; later categories overwrite earlier ones on collision
CATEGORY_PRECEDENCE = ["surname", "first_name", "city"]

_ALPHA_RE = re.compile(r"^[A-Za-z]+$")


def _normalize(name: str) -> Optional[str]:
    """Uppercase an eligible name, or None if it can't be a puzzle word."""
    name = name.strip()
    if len(name) < MIN_LENGTH or not _ALPHA_RE.match(name):
        return None
    return name.upper()


def _read_lines(path: Path) -> Iterable[str]:
    with path.open("r", encoding="utf-8", errors="replace") as f:
        for line in f:
            if line.strip():
                yield line.rstrip("\n")


def parse_surnames(path: Path) -> list[str]:
    words: list[str] = []
    lines = iter(_read_lines(path))
    next(lines, None)  # header
    for line in lines:
        word = _normalize(line.split(",")[0])
        if word:
            words.append(word)
    logger.info("Parsed %d valid surnames", len(words))
    return words


def parse_cities(path: Path) -> list[str]:
    words: list[str] = []
    for line in _read_lines(path):
        columns = line.split("\t")
        if len(columns) < 2 or " " in columns[1].strip():
            continue
        word = _normalize(columns[1])
        if word:
            words.append(word)
    logger.info("Parsed %d valid cities", len(words))
    return words


def parse_first_names(path: Path) -> list[str]:
    words: list[str] = []
    for line in _read_lines(path):
        word = _normalize(line.split(",")[0])
        if word:
            words.append(word)
    logger.info("Parsed %d valid first names", len(words))
    return words


def merge_words(by_category: dict[str, list[str]]) -> dict[str, str]:
    """Map word -> category with city > first_name > surname on collisions."""
    merged: dict[str, str] = {}
    for category in CATEGORY_PRECEDENCE:
        for word in by_category.get(category, []):
            merged[word] = category
    return merged


def build_rows(
    surnames: Optional[Path] = None,
    cities: Optional[Path] = None,
    first_names: Optional[Path] = None,
) -> list[dict]:
    """Parse whichever sources exist and return rows for proper_nouns."""
    by_category: dict[str, list[str]] = {}
    if surnames and surnames.exists():
        by_category["surname"] = parse_surnames(surnames)
    if cities and cities.exists():
        by_category["city"] = parse_cities(cities)
    if first_names and first_names.exists():
        by_category["first_name"] = parse_first_names(first_names)

    merged = merge_words(by_category)
    return [
        ProperNoun(word=word, category=category).model_dump(exclude={"id"})
        for word, category in merged.items()
    ]


def main():
    """Main entry point for the corpus import."""
    import argparse

    from dotenv import load_dotenv

    from backend.store.supabase import ENV_FILE, StoreError, SupabaseStore

    parser = argparse.ArgumentParser(description="Import proper nouns into the word corpus")
    parser.add_argument("--surnames", type=Path, default=Path("./data/Names_2010Census.csv"),
                        help="Census surname CSV (default: ./data/Names_2010Census.csv)")
    parser.add_argument("--cities", type=Path, default=Path("./data/cities15000.txt"),
                        help="GeoNames cities file (default: ./data/cities15000.txt)")
    parser.add_argument("--first-names", type=Path, default=None,
                        help="SSA first-name file (optional)")
    parser.add_argument("--dry-run", action="store_true", help="Parse and count only")
    args = parser.parse_args()

    load_dotenv(ENV_FILE)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    rows = build_rows(args.surnames, args.cities, args.first_names)
    print(f"Total unique words: {len(rows)}")
    if not rows:
        print("✗ No words parsed. Check the input paths.", file=sys.stderr)
        sys.exit(1)
    if args.dry_run:
        return

    try:
        with SupabaseStore.from_env() as store:
            print("Clearing existing proper_nouns...")
            inserted = store.replace_words(rows)
    except StoreError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)

    print(f"✓ Import complete! {inserted} words.")


if __name__ == "__main__":
    main()
