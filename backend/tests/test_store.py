import json
from datetime import date

import httpx
import pytest

from backend.puzzles.models import Puzzle
from backend.store.supabase import StoreError, SupabaseStore, load_corpus
from backend.store.wipe_progress import wipe


def _store(handler) -> SupabaseStore:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SupabaseStore("http://test.supabase.co", "service-key", client=client)


def _corpus_handler(rows, calls):
    def handler(request):
        calls.append(dict(request.url.params))
        after = int(request.url.params["id"].removeprefix("gt."))
        limit = int(request.url.params["limit"])
        page = [r for r in rows if r["id"] > after][:limit]
        return httpx.Response(200, json=page)

    return handler


def test_load_corpus_pages_until_short_page():
    rows = [
        {"id": 1, "word": "Rome"},
        {"id": 2, "word": "ROMEO"},
        {"id": 4, "word": "MOORE"},
        {"id": 7, "word": "ROME"},
        {"id": 9, "word": "MORROW"},
    ]
    calls = []
    words = load_corpus(_store(_corpus_handler(rows, calls)), page_size=2)

    assert words == ["ROME", "ROMEO", "MOORE", "MORROW"]
    assert [c["id"] for c in calls] == ["gt.0", "gt.2", "gt.7"]
    assert calls[0]["order"] == "id.asc"


def test_load_corpus_stops_on_empty_page():
    rows = [{"id": i, "word": f"WORD{chr(64 + i)}"} for i in range(1, 5)]
    calls = []
    words = load_corpus(_store(_corpus_handler(rows, calls)), page_size=2)
    assert len(words) == 4
    assert len(calls) == 3


def test_load_corpus_propagates_read_errors():
    def handler(request):
        if request.url.params["id"] == "gt.0":
            return httpx.Response(200, json=[{"id": 1, "word": "ROME"}, {"id": 2, "word": "ROMEO"}])
        return httpx.Response(500, text="boom")

    with pytest.raises(StoreError):
        load_corpus(_store(handler), page_size=2)


def test_auth_headers_sent():
    seen = {}

    def handler(request):
        seen["apikey"] = request.headers["apikey"]
        seen["authorization"] = request.headers["authorization"]
        return httpx.Response(200, json=[])

    _store(handler).fetch_page(0, 10)
    assert seen["apikey"] == "service-key"
    assert seen["authorization"] == "Bearer service-key"


def _puzzle(day, answers):
    return Puzzle(
        date=day,
        center_letter="R",
        outer_letters=["O", "M", "E", "W", "A", "Y"],
        valid_answers=answers,
        max_score=len(answers),
    )


def test_upsert_overwrites_existing_date():
    table: dict[str, dict] = {}

    def handler(request):
        assert request.method == "POST"
        assert request.url.params["on_conflict"] == "date"
        assert "resolution=merge-duplicates" in request.headers["prefer"]
        for record in json.loads(request.content):
            table[record["date"]] = record
        return httpx.Response(201)

    store = _store(handler)
    day = date(2026, 5, 1)
    store.upsert_puzzles([_puzzle(day, ["ROME", "ROMEO", "MORROW"])])
    store.upsert_puzzles([_puzzle(day, ["WAYMORE"])])

    assert list(table) == ["2026-05-01"]
    assert table["2026-05-01"]["valid_answers"] == ["WAYMORE"]
    assert table["2026-05-01"]["outer_letters"] == ["O", "M", "E", "W", "A", "Y"]


def test_upsert_write_error_is_fatal():
    store = _store(lambda request: httpx.Response(409, text="conflict"))
    with pytest.raises(StoreError):
        store.upsert_puzzles([_puzzle(date(2026, 5, 1), ["WAYMORE"])])


def test_save_progress_inserts_then_updates():
    requests = []

    def handler(request):
        requests.append((request.method, dict(request.url.params), json.loads(request.content)))
        return httpx.Response(201)

    store = _store(handler)
    store.save_progress("user-1", 3, ["ROME"], 1)
    store.save_progress("user-1", 3, ["ROME", "ROMEO"], 6, progress_id=12)

    assert requests[0][0] == "POST"
    assert requests[0][2] == {"user_id": "user-1", "puzzle_id": 3, "found_words": ["ROME"], "score": 1}
    assert requests[1][0] == "PATCH"
    assert requests[1][1] == {"id": "eq.12"}
    assert requests[1][2]["found_words"] == ["ROME", "ROMEO"]


def test_wipe_requires_confirmation():
    deleted = []

    def handler(request):
        if request.method == "HEAD":
            return httpx.Response(200, headers={"Content-Range": "*/3"})
        deleted.append(request.url.params["id"])
        return httpx.Response(204)

    store = _store(handler)
    assert wipe(store, confirm=lambda prompt: "no") is False
    assert deleted == []
    assert wipe(store, confirm=lambda prompt: "yes") is True
    assert deleted == ["neq.0"]


def test_missing_env_raises(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    with pytest.raises(StoreError):
        SupabaseStore.from_env()
