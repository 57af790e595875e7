import json

import httpx
from sqlalchemy import func, select

from app.ai import mapper
from app.config import settings
from app.models.flashcard_session import FlashcardSession, SessionCard
from app.services import ai_service, session_service

GENERATE_URL = "/api/v1/ai/generate"


async def count_rows(session_factory, model) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def test_generate_returns_cards_and_persists(
    client, provider_stub, user, auth_headers, session_factory, fake_redis,
):
    provider_stub.reply_with_cards([
        {"front": "Hund", "back": "dog", "difficulty": "easy"},
        {"front": "Katze", "back": "cat", "additional_info": "Die Katze schläft."},
    ])

    resp = await client.post(
        GENERATE_URL,
        json={"topic": "  Animals  ", "count": 5, "difficulty": "beginner"},
        headers=auth_headers(user),
    )

    assert resp.status_code == 201
    data = resp.json()
    assert data["topic"] == "Animals"
    assert data["difficulty"] == "beginner"
    assert data["generated_count"] == 2
    assert data["persistence_warning"] is None
    assert data["session_id"] is not None
    assert data["flashcards"][0] == {
        "id": data["flashcards"][0]["id"],
        "front": "Hund",
        "back": "dog",
        "additional_info": "",
        "difficulty": "easy",
    }
    assert data["flashcards"][1]["difficulty"] == "medium"

    # Exactly one outbound call, with the stored key
    assert len(provider_stub.requests) == 1
    assert provider_stub.requests[0].url.params["key"] == "gemini-test-key-1234"
    assert "Animals" in json.loads(provider_stub.requests[0].content)["contents"][0]["parts"][0]["text"]

    assert await count_rows(session_factory, FlashcardSession) == 1
    assert await count_rows(session_factory, SessionCard) == 2
    assert fake_redis.store == {}

    # History returns the same ids
    cards_resp = await client.get(
        f"/api/v1/sessions/{data['session_id']}/cards", headers=auth_headers(user),
    )
    assert [c["id"] for c in cards_resp.json()["flashcards"]] == [c["id"] for c in data["flashcards"]]


async def test_generate_trims_to_requested_count(client, provider_stub, user, auth_headers):
    provider_stub.reply_with_cards([{"front": f"q{i}", "back": f"a{i}"} for i in range(7)])

    resp = await client.post(
        GENERATE_URL, json={"topic": "Numbers", "count": 5}, headers=auth_headers(user),
    )

    assert resp.status_code == 201
    assert resp.json()["generated_count"] == 5


async def test_request_key_overrides_stored_key(client, provider_stub, user, auth_headers):
    provider_stub.reply_with_cards([{"front": "a", "back": "b"}])

    await client.post(
        GENERATE_URL,
        json={"topic": "x", "api_key": "one-off-key"},
        headers=auth_headers(user),
    )

    assert provider_stub.requests[0].url.params["key"] == "one-off-key"


async def test_openai_deployment(client, provider_stub, user, auth_headers, session_factory, monkeypatch):
    monkeypatch.setattr(settings, "LLM_PROVIDER", "openai")
    await client.put(
        "/api/v1/settings", json={"openai_api_key": "sk-openai-key-5678"}, headers=auth_headers(user),
    )
    provider_stub.reply_with_text(
        'Here you go:\n```json\n{"flashcards":[{"front":"a","back":"b"}]}\n```', provider="openai",
    )

    resp = await client.post(GENERATE_URL, json={"topic": "Letters"}, headers=auth_headers(user))

    assert resp.status_code == 201
    assert resp.json()["generated_count"] == 1
    assert provider_stub.requests[0].headers["authorization"] == "Bearer sk-openai-key-5678"


async def test_blank_topic_rejected_before_dispatch(client, provider_stub, user, auth_headers):
    resp = await client.post(GENERATE_URL, json={"topic": "   "}, headers=auth_headers(user))

    assert resp.status_code == 422
    assert resp.json()["error"] == "InputValidationError"
    assert provider_stub.requests == []


async def test_missing_api_key_rejected_before_dispatch(
    client, provider_stub, keyless_user, auth_headers,
):
    resp = await client.post(GENERATE_URL, json={"topic": "Cells"}, headers=auth_headers(keyless_user))

    assert resp.status_code == 422
    assert "API key not found" in resp.json()["detail"]
    assert provider_stub.requests == []


async def test_count_outside_allowed_set(client, provider_stub, user, auth_headers):
    resp = await client.post(
        GENERATE_URL, json={"topic": "Cells", "count": 7}, headers=auth_headers(user),
    )
    assert resp.status_code == 422
    assert provider_stub.requests == []


async def test_malformed_text_fails_without_persisting(
    client, provider_stub, user, auth_headers, session_factory, fake_redis,
):
    provider_stub.reply_with_text("I'm sorry, I can only answer in prose.")

    resp = await client.post(GENERATE_URL, json={"topic": "Cells"}, headers=auth_headers(user))

    assert resp.status_code == 502
    assert resp.json()["error"] == "MalformedResponseError"
    assert await count_rows(session_factory, FlashcardSession) == 0
    assert fake_redis.store == {}


async def test_only_unusable_cards_is_empty_result(
    client, provider_stub, user, auth_headers, session_factory,
):
    provider_stub.reply_with_cards([{"english_meaning": "dog"}])

    resp = await client.post(
        GENERATE_URL, json={"topic": "German", "mode": "vocabulary"}, headers=auth_headers(user),
    )

    assert resp.status_code == 502
    assert resp.json()["error"] == "EmptyResultError"
    assert await count_rows(session_factory, FlashcardSession) == 0


async def test_provider_error_status_is_surfaced(client, provider_stub, user, auth_headers):
    provider_stub.status_code = 429
    provider_stub.body = {"error": {"message": "Quota exceeded"}}

    resp = await client.post(GENERATE_URL, json={"topic": "Cells"}, headers=auth_headers(user))

    assert resp.status_code == 502
    body = resp.json()
    assert body["error"] == "ProviderRequestError"
    assert "429" in body["detail"]
    assert "Quota exceeded" in body["detail"]
    assert len(provider_stub.requests) == 1


async def test_unreachable_provider(client, provider_stub, user, auth_headers):
    provider_stub.error = httpx.ConnectError("connection refused")

    resp = await client.post(GENERATE_URL, json={"topic": "Cells"}, headers=auth_headers(user))

    assert resp.status_code == 503
    assert resp.json()["error"] == "ProviderUnreachableError"
    assert len(provider_stub.requests) == 1


async def test_persistence_failure_still_returns_cards(
    client, provider_stub, user, auth_headers, session_factory, fake_redis, monkeypatch,
):
    def columns_without_front(card):
        return {**mapper.to_storage_columns(card), "front_text": None}

    # NOT NULL violation on the real card insert
    monkeypatch.setattr(session_service, "to_storage_columns", columns_without_front)
    provider_stub.reply_with_cards([{"front": "a", "back": "b"}])

    resp = await client.post(GENERATE_URL, json={"topic": "Cells"}, headers=auth_headers(user))

    assert resp.status_code == 201
    data = resp.json()
    assert data["session_id"] is None
    assert data["persistence_warning"] == ai_service.PERSISTENCE_WARNING
    assert data["flashcards"][0]["front"] == "a"
    assert await count_rows(session_factory, FlashcardSession) == 0
    assert await count_rows(session_factory, SessionCard) == 0
    assert fake_redis.store == {}

    # The lock was released, so the next generation goes through
    monkeypatch.undo()
    resp = await client.post(GENERATE_URL, json={"topic": "Cells"}, headers=auth_headers(user))
    assert resp.status_code == 201
    assert resp.json()["persistence_warning"] is None


async def test_second_generation_while_busy_is_rejected(
    client, provider_stub, user, auth_headers, fake_redis,
):
    fake_redis.store[f"ai:generating:{user.id}"] = "1"

    resp = await client.post(GENERATE_URL, json={"topic": "Cells"}, headers=auth_headers(user))

    assert resp.status_code == 409
    assert provider_stub.requests == []


async def test_generate_requires_auth(client, provider_stub):
    resp = await client.post(GENERATE_URL, json={"topic": "Cells"})
    assert resp.status_code in (401, 403)
    assert provider_stub.requests == []


async def test_export_current_cards(client, user, auth_headers):
    cards = [
        {"front": "der Hund", "back": "the dog", "additional_info": "Der Hund bellt.", "difficulty": "easy"},
    ]

    resp = await client.post(
        "/api/v1/ai/export",
        json={"flashcards": cards, "mode": "vocabulary"},
        headers=auth_headers(user),
    )

    assert resp.status_code == 200
    disposition = resp.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="vocabulary-')
    exported = json.loads(resp.content)
    assert exported[0]["front"] == "der Hund"
    assert exported[0]["additional_info"] == "Der Hund bellt."
