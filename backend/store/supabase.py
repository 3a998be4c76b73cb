"""Supabase (PostgREST) access for the word corpus, puzzles and player progress."""
import logging
import os
from datetime import datetime, timezone
from typing import Optional, Protocol

import httpx

from backend.puzzles.models import Puzzle

logger = logging.getLogger(__name__)

# Configuration
ENV_FILE = ".env.local"
PAGE_SIZE = 1000
INSERT_BATCH_SIZE = 500

PUZZLE_COLUMNS = "id,date,center_letter,outer_letters,max_score"


class StoreError(RuntimeError):
    """Any failed read or write against the store."""


class CorpusSource(Protocol):
    def fetch_page(self, after_id: int, limit: int) -> list[dict]: ...


class PuzzleSink(Protocol):
    def upsert_puzzles(self, puzzles: list[Puzzle]) -> None: ...


class SupabaseStore:
    """Thin synchronous client over the Supabase REST endpoint."""

    def __init__(self, url: str, key: str, client: Optional[httpx.Client] = None, timeout: float = 30.0):
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.client = client or httpx.Client(timeout=timeout)
        self.headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
        }

    @classmethod
    def from_env(cls) -> "SupabaseStore":
        """Build a store from SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY."""
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
        if not url or not key:
            raise StoreError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
        return cls(url, key)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict] = None,
        json=None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        headers = dict(self.headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = self.client.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                json=json,
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"{method} {table} failed ({e.response.status_code}): {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {table} failed: {e}") from e
        return response

    def _count(self, table: str) -> int:
        response = self._request("HEAD", table, params={"select": "*"}, prefer="count=exact")
        # Content-Range: 0-999/35231 or */0
        content_range = response.headers.get("Content-Range", "")
        total = content_range.rpartition("/")[2]
        if not total.isdigit():
            raise StoreError(f"Unexpected Content-Range for {table}: {content_range!r}")
        return int(total)

    # --- proper_nouns ---

    def count_words(self) -> int:
        return self._count("proper_nouns")

    def fetch_page(self, after_id: int, limit: int) -> list[dict]:
        """Words with id > after_id, ascending by id."""
        response = self._request(
            "GET",
            "proper_nouns",
            params={
                "select": "id,word",
                "id": f"gt.{after_id}",
                "order": "id.asc",
                "limit": str(limit),
            },
        )
        return response.json()

    def replace_words(self, rows: list[dict], batch_size: int = INSERT_BATCH_SIZE) -> int:
        """Clear proper_nouns and insert rows in batches. Returns rows inserted."""
        # PostgREST refuses an unfiltered delete
        self._request("DELETE", "proper_nouns", params={"id": "neq.0"})
        inserted = 0
        for i in range(0, len(rows), batch_size):
            batch = rows[i:i + batch_size]
            self._request("POST", "proper_nouns", json=batch, prefer="return=minimal")
            inserted += len(batch)
            if inserted % 5000 == 0 or i + batch_size >= len(rows):
                logger.info("Inserted %d/%d", inserted, len(rows))
        return inserted

    # --- puzzles ---

    def upsert_puzzles(self, puzzles: list[Puzzle]) -> None:
        """Insert puzzles, overwriting any existing puzzle on the same date."""
        if not puzzles:
            return
        self._request(
            "POST",
            "puzzles",
            params={"on_conflict": "date"},
            json=[p.to_record() for p in puzzles],
            prefer="resolution=merge-duplicates,return=minimal",
        )

    def get_puzzle_by_date(self, day: str) -> Optional[dict]:
        rows = self._request(
            "GET", "puzzles", params={"select": PUZZLE_COLUMNS, "date": f"eq.{day}"}
        ).json()
        return rows[0] if rows else None

    def get_latest_puzzle(self) -> Optional[dict]:
        rows = self._request(
            "GET",
            "puzzles",
            params={"select": PUZZLE_COLUMNS, "order": "date.desc", "limit": "1"},
        ).json()
        return rows[0] if rows else None

    def get_puzzle_answers(self, puzzle_id: int) -> Optional[dict]:
        """Center, outer letters and valid answers for answer checking."""
        rows = self._request(
            "GET",
            "puzzles",
            params={
                "select": "id,center_letter,outer_letters,valid_answers",
                "id": f"eq.{puzzle_id}",
            },
        ).json()
        return rows[0] if rows else None

    # --- user_progress ---

    def get_progress(self, user_id: str, puzzle_id: int) -> Optional[dict]:
        rows = self._request(
            "GET",
            "user_progress",
            params={
                "select": "id,found_words,score",
                "user_id": f"eq.{user_id}",
                "puzzle_id": f"eq.{puzzle_id}",
            },
        ).json()
        return rows[0] if rows else None

    def save_progress(
        self,
        user_id: str,
        puzzle_id: int,
        found_words: list[str],
        score: int,
        progress_id: Optional[int] = None,
    ) -> None:
        """Update the existing progress row, or insert the first one."""
        if progress_id is not None:
            self._request(
                "PATCH",
                "user_progress",
                params={"id": f"eq.{progress_id}"},
                json={
                    "found_words": found_words,
                    "score": score,
                    "last_updated": datetime.now(timezone.utc).isoformat(),
                },
                prefer="return=minimal",
            )
        else:
            self._request(
                "POST",
                "user_progress",
                json={
                    "user_id": user_id,
                    "puzzle_id": puzzle_id,
                    "found_words": found_words,
                    "score": score,
                },
                prefer="return=minimal",
            )

    def count_progress(self) -> int:
        return self._count("user_progress")

    def wipe_progress(self) -> None:
        self._request("DELETE", "user_progress", params={"id": "neq.0"})


def load_corpus(source: CorpusSource, page_size: int = PAGE_SIZE) -> list[str]:
    """Page through the whole corpus and return unique uppercase words.

    Any StoreError propagates; a partial corpus is never returned.
    """
    words: list[str] = []
    seen: set[str] = set()
    last_id = 0
    while True:
        page = source.fetch_page(last_id, page_size)
        if not page:
            break
        for row in page:
            word = row["word"].strip().upper()
            if word and word not in seen:
                seen.add(word)
                words.append(word)
        last_id = page[-1]["id"]
        if len(page) < page_size:
            break
    logger.info("Loaded %d words", len(words))
    return words
