import pytest
from fastapi.testclient import TestClient

from backend.api import main
from backend.api.main import app, get_store

PUZZLE = {
    "id": 7,
    "date": "2026-05-01",
    "center_letter": "R",
    "outer_letters": ["O", "M", "E", "W", "A", "Y"],
    "max_score": 26,
}
ANSWERS = ["ROME", "ROMEO", "MORROW", "WAYMORE"]


class FakeStore:
    """In-memory stand-in for SupabaseStore."""

    def __init__(self, today=None, latest=None):
        self.today = today
        self.latest = latest
        self.progress: dict[tuple[str, int], dict] = {}

    def get_puzzle_by_date(self, day):
        return self.today

    def get_latest_puzzle(self):
        return self.latest

    def get_puzzle_answers(self, puzzle_id):
        if puzzle_id != PUZZLE["id"]:
            return None
        return {**PUZZLE, "valid_answers": ANSWERS}

    def get_progress(self, user_id, puzzle_id):
        return self.progress.get((user_id, puzzle_id))

    def save_progress(self, user_id, puzzle_id, found_words, score, progress_id=None):
        self.progress[(user_id, puzzle_id)] = {"id": 1, "found_words": found_words, "score": score}


@pytest.fixture
def fake_store(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    monkeypatch.setattr(main, "ENV_FILE", "does-not-exist.env")
    store = FakeStore(today=PUZZLE)
    app.dependency_overrides[get_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


def test_get_puzzle_hides_answers(fake_store):
    with TestClient(app) as client:
        resp = client.get("/api/puzzle", params={"user_id": "u1"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["puzzle"]["outer_letters"] == PUZZLE["outer_letters"]
        assert "valid_answers" not in data["puzzle"]
        assert data["progress"] == {"found_words": [], "score": 0, "rank": "Beginner"}


def test_get_puzzle_falls_back_to_latest(fake_store):
    fake_store.today = None
    fake_store.latest = {**PUZZLE, "id": 3, "date": "2026-04-30"}
    with TestClient(app) as client:
        resp = client.get("/api/puzzle", params={"user_id": "u1"})
        assert resp.status_code == 200
        assert resp.json()["puzzle"]["date"] == "2026-04-30"


def test_get_puzzle_404_when_empty(fake_store):
    fake_store.today = None
    with TestClient(app) as client:
        resp = client.get("/api/puzzle", params={"user_id": "u1"})
        assert resp.status_code == 404


def test_check_word_scores_and_records_progress(fake_store):
    with TestClient(app) as client:
        resp = client.post("/api/check-word", json={"user_id": "u1", "puzzle_id": 7, "word": "waymore"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["valid"] is True
        assert data["word"] == "WAYMORE"
        assert data["score"] == 14
        assert data["total_score"] == 14

        resp = client.post("/api/check-word", json={"user_id": "u1", "puzzle_id": 7, "word": "ROME"})
        data = resp.json()
        assert data["total_score"] == 15
        assert data["found_words"] == ["WAYMORE", "ROME"]

        resp = client.get("/api/puzzle", params={"user_id": "u1"})
        assert resp.json()["progress"]["rank"] == "Amazing"


def test_check_word_reports_reason(fake_store):
    with TestClient(app) as client:
        cases = {
            "ROM": ("too_short", "Too short"),
            "MEOW": ("missing_center", "Missing center letter"),
            "ROMAN": ("invalid_letters", "Invalid letters"),
            "MOORE": ("not_in_word_list", "Not a valid word"),
        }
        for word, (reason, message) in cases.items():
            data = client.post(
                "/api/check-word", json={"user_id": "u1", "puzzle_id": 7, "word": word}
            ).json()
            assert data["valid"] is False
            assert data["reason"] == reason
            assert data["error"] == message

        client.post("/api/check-word", json={"user_id": "u1", "puzzle_id": 7, "word": "ROMEO"})
        data = client.post(
            "/api/check-word", json={"user_id": "u1", "puzzle_id": 7, "word": "romeo"}
        ).json()
        assert data["reason"] == "already_found"


def test_check_word_unknown_puzzle(fake_store):
    with TestClient(app) as client:
        resp = client.post("/api/check-word", json={"user_id": "u1", "puzzle_id": 99, "word": "ROME"})
        assert resp.status_code == 404


def test_health_without_store(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    monkeypatch.setattr(main, "ENV_FILE", "does-not-exist.env")
    with TestClient(app) as client:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "store_configured": False}
