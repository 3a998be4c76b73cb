"""Dev helper: delete every user_progress row, keeping puzzles and words.

Usage:
    python -m backend.store.wipe_progress
"""
import os
import sys

from dotenv import load_dotenv

from .supabase import ENV_FILE, StoreError, SupabaseStore


def wipe(store: SupabaseStore, confirm=input) -> bool:
    """Wipe progress after a typed "yes". Returns True if rows were deleted."""
    count = store.count_progress()
    print(f"Found {count} user_progress rows.")
    if count == 0:
        print("Nothing to wipe.")
        return False

    answer = confirm('Type "yes" to confirm wipe: ')
    if answer.strip().lower() != "yes":
        print("Aborted.")
        return False

    store.wipe_progress()
    print("User progress wiped. Puzzles and words are preserved.")
    return True


def main():
    load_dotenv(ENV_FILE)
    print(f"Target: {os.environ.get('SUPABASE_URL', '')}")
    try:
        with SupabaseStore.from_env() as store:
            wipe(store)
    except StoreError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
