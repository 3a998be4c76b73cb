"""FastAPI backend for Bee Proper."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from backend.puzzles.answers import check_word
from backend.puzzles.scoring import get_rank
from backend.store.supabase import ENV_FILE, StoreError, SupabaseStore

logger = logging.getLogger(__name__)

# Puzzles roll over at midnight Eastern
PUZZLE_TIMEZONE = ZoneInfo("America/New_York")

store: Optional[SupabaseStore] = None


# Pydantic models for API
class PuzzleClient(BaseModel):
    """Puzzle as sent to players (no valid_answers)."""
    id: int
    date: str
    center_letter: str
    outer_letters: list[str]
    max_score: int


class Progress(BaseModel):
    found_words: list[str] = []
    score: int = 0
    rank: str


class PuzzleResponse(BaseModel):
    puzzle: PuzzleClient
    progress: Progress


class CheckWordRequest(BaseModel):
    user_id: str
    puzzle_id: int
    word: str


class CheckWordResponse(BaseModel):
    valid: bool
    word: str
    score: int = 0
    total_score: Optional[int] = None
    found_words: Optional[list[str]] = None
    reason: Optional[str] = None
    error: Optional[str] = None


def get_today() -> str:
    """Today's date as YYYY-MM-DD in the puzzle timezone."""
    return datetime.now(PUZZLE_TIMEZONE).date().isoformat()


def get_store() -> SupabaseStore:
    if store is None:
        raise HTTPException(status_code=503, detail="Store not configured")
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the store on startup."""
    global store
    load_dotenv(ENV_FILE)
    try:
        store = SupabaseStore.from_env()
        logger.info("Connected to %s", store.base_url)
    except StoreError as e:
        logger.warning("Store unavailable: %s", e)

    yield

    if store is not None:
        store.close()
        store = None


app = FastAPI(
    title="Bee Proper API",
    description="Daily proper-noun spelling puzzles",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/puzzle", response_model=PuzzleResponse)
def get_puzzle(
    user_id: str = Query(..., description="Player id"),
    db: SupabaseStore = Depends(get_store),
) -> PuzzleResponse:
    """Today's puzzle, or the most recent one if today has none."""
    try:
        puzzle = db.get_puzzle_by_date(get_today()) or db.get_latest_puzzle()
        if not puzzle:
            raise HTTPException(status_code=404, detail="No puzzle available")
        progress = db.get_progress(user_id, puzzle["id"]) or {"found_words": [], "score": 0}
    except StoreError as e:
        raise HTTPException(status_code=503, detail=f"Store unavailable: {str(e)}")

    return PuzzleResponse(
        puzzle=PuzzleClient(**puzzle),
        progress=Progress(
            found_words=progress["found_words"],
            score=progress["score"],
            rank=get_rank(progress["score"], puzzle["max_score"]),
        ),
    )


@app.post("/api/check-word", response_model=CheckWordResponse)
def post_check_word(
    request: CheckWordRequest,
    db: SupabaseStore = Depends(get_store),
) -> CheckWordResponse:
    """Validate a submitted word and record it in the player's progress."""
    if not request.word.strip():
        raise HTTPException(status_code=400, detail="Missing word")

    try:
        puzzle = db.get_puzzle_answers(request.puzzle_id)
        if not puzzle:
            raise HTTPException(status_code=404, detail="Puzzle not found")

        existing = db.get_progress(request.user_id, request.puzzle_id)
        found_words = existing["found_words"] if existing else []

        result = check_word(
            request.word,
            puzzle["center_letter"],
            puzzle["outer_letters"],
            puzzle["valid_answers"],
            found_words,
        )
        if not result.valid:
            return CheckWordResponse(
                valid=False,
                word=result.word,
                reason=result.reason.value,
                error=result.message,
            )

        new_found = [*found_words, result.word]
        new_score = (existing["score"] if existing else 0) + result.score
        db.save_progress(
            request.user_id,
            request.puzzle_id,
            new_found,
            new_score,
            progress_id=existing["id"] if existing else None,
        )
    except StoreError as e:
        raise HTTPException(status_code=503, detail=f"Store unavailable: {str(e)}")

    return CheckWordResponse(
        valid=True,
        word=result.word,
        score=result.score,
        total_score=new_score,
        found_words=new_found,
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "store_configured": store is not None,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
