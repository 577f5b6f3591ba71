"""HTTP tests: routing, auth, error mapping (TestClient + dependency overrides)."""

import pytest
from fastapi.testclient import TestClient

from factories import EXPANDED, LEARN_ITEM, LESSON_PLAN, TOPIC_OPTIONS, FakeModel, auth_headers, build_service

from educel.database import get_db
from educel.dependencies import get_generation_service, get_session_factory
from educel.main import app


@pytest.fixture
def client(session_factory):
    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def use_model(session_factory, *replies, limit: str = "100/hour") -> FakeModel:
    model = FakeModel(*replies)
    service = build_service(session_factory, model, limit=limit)
    app.dependency_overrides[get_generation_service] = lambda: service
    return model


class TestPublicRoutes:
    def test_root_and_health(self, client):
        assert client.get("/").json()["ai_provider"] == "none"
        assert client.get("/health").json() == {"status": "ok", "ai_provider": "none"}

    def test_ai_health_unconfigured(self, client):
        assert client.get("/api/health/ai").json()["status"] == "unconfigured"


class TestGenerateRoute:
    def test_requires_auth(self, client):
        response = client.post("/api/generate", json={"type": "topic_options", "depth": "concise"})
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_unconfigured_model_is_503(self, client):
        response = client.post(
            "/api/generate",
            json={"type": "learn_item", "depth": "concise", "topic": "Pricing"},
            headers=auth_headers(),
        )
        assert response.status_code == 503

    def test_unknown_type_is_400(self, client, session_factory):
        model = use_model(session_factory)
        response = client.post("/api/generate", json={"type": "poem", "depth": "concise"}, headers=auth_headers())
        assert response.status_code == 400
        assert "poem" in response.json()["error"]
        assert model.calls == []

    def test_invalid_body_is_400(self, client, session_factory):
        use_model(session_factory)
        response = client.post("/api/generate", json={"type": "learn_item", "depth": "long"}, headers=auth_headers())
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request data"
        assert body["details"]

    def test_topic_options_response_carries_meta(self, client, session_factory):
        use_model(session_factory, TOPIC_OPTIONS)
        body = {"type": "topic_options", "depth": "concise", "preferred_topics": ["Sales"]}
        first = client.post("/api/generate", json=body, headers=auth_headers()).json()
        second = client.post("/api/generate", json=body, headers=auth_headers()).json()
        assert first["options"] == TOPIC_OPTIONS["options"]
        assert first["_meta"]["cached"] is False
        assert second["_meta"] == {
            "usedFallbackSources": False,
            "cached": True,
            "session_id": first["_meta"]["session_id"],
        }

    def test_rate_limited_is_429(self, client, session_factory):
        use_model(session_factory, LEARN_ITEM, LEARN_ITEM, limit="1/hour")
        body = {"type": "learn_item", "depth": "concise", "topic": "Pricing"}
        assert client.post("/api/generate", json=body, headers=auth_headers()).status_code == 200
        response = client.post("/api/generate", json=body, headers=auth_headers())
        assert response.status_code == 429
        payload = response.json()
        assert payload["rateLimited"] is True
        assert payload["limit"] == 1
        assert payload["remaining"] == 0
        assert payload["resetAt"] > 0
        assert int(response.headers["Retry-After"]) > 0

    def test_exhausted_retries_are_502(self, client, session_factory):
        use_model(session_factory, "bad", "worse", "worst")
        body = {"type": "learn_item", "depth": "concise", "topic": "Pricing"}
        response = client.post("/api/generate", json=body, headers=auth_headers())
        assert response.status_code == 502
        assert response.json() == {"error": "Generation failed. Please try again."}


class TestLearnRoutes:
    def test_store_list_get_and_patch(self, client):
        headers = auth_headers()
        created = client.post(
            "/api/learn",
            json={"topic": "Pricing  Strategy", "source_type": "teach_me", "content": LEARN_ITEM},
            headers=headers,
        )
        assert created.status_code == 201
        item = created.json()["item"]
        assert item["topic"] == "pricing strategy"

        listed = client.get("/api/learn", headers=headers).json()["items"]
        assert [i["id"] for i in listed] == [item["id"]]
        assert client.get("/api/learn", params={"id": item["id"]}, headers=headers).json()["item"]["id"] == item["id"]
        assert client.get("/api/learn", params={"id": item["id"]}, headers=auth_headers("u2")).status_code == 404

        patched = client.patch("/api/learn", json={"id": item["id"], "expanded_content": EXPANDED}, headers=headers)
        assert patched.json()["updated"] is True
        again = client.patch("/api/learn", json={"id": item["id"], "expanded_content": EXPANDED}, headers=headers)
        assert again.json()["updated"] is False

        restored = client.post(
            "/api/learn",
            json={"topic": "pricing strategy", "source_type": "learn_more", "content": LEARN_ITEM},
            headers=headers,
        )
        assert restored.status_code == 200
        assert restored.json()["created"] is False
        assert restored.json()["item"]["id"] == item["id"]
        assert restored.json()["item"]["expanded_content"] == EXPANDED

    def test_invalid_content_is_rejected(self, client):
        bad = {**LEARN_ITEM, "bullets": ["one"]}
        response = client.post(
            "/api/learn", json={"topic": "x", "source_type": "teach_me", "content": bad}, headers=auth_headers()
        )
        assert response.status_code == 400

    def test_prefetch_and_expand(self, client, session_factory):
        model = use_model(session_factory, LEARN_ITEM, EXPANDED)
        headers = auth_headers()
        body = {"topic": "Negotiation Tactics", "preferred_topics": ["a", "b", "c"], "depth": "concise"}

        first = client.post("/api/learn/prefetch", json=body, headers=headers).json()
        second = client.post(
            "/api/learn/prefetch", json={**body, "topic": "negotiation   TACTICS"}, headers=headers
        ).json()
        assert first["cached"] is False
        assert second["cached"] is True
        assert second["item"]["id"] == first["item"]["id"]

        item_id = first["item"]["id"]
        expanded = client.post(f"/api/learn/{item_id}/expand", json={"depth": "deeper"}, headers=headers).json()
        assert expanded["item"]["expanded_content"] == EXPANDED
        cached = client.post(f"/api/learn/{item_id}/expand", headers=headers).json()
        assert cached["cached"] is True
        assert len(model.calls) == 2

    def test_prefetch_validates_preferred_topics(self, client, session_factory):
        use_model(session_factory)
        body = {"topic": "Pricing", "preferred_topics": ["only", "two"], "depth": "concise"}
        assert client.post("/api/learn/prefetch", json=body, headers=auth_headers()).status_code == 400


class TestSavedAndLessonPlanRoutes:
    def test_save_conflict_and_unsave(self, client):
        headers = auth_headers()
        item = client.post(
            "/api/learn",
            json={"topic": "Pricing", "source_type": "teach_me", "content": LEARN_ITEM},
            headers=headers,
        ).json()["item"]

        saved = client.post("/api/saved", json={"item_id": item["id"]}, headers=headers)
        assert saved.status_code == 201
        duplicate = client.post("/api/saved", json={"learn_item_id": item["id"]}, headers=headers)
        assert duplicate.status_code == 409
        assert duplicate.json() == {"error": "Already saved"}

        listed = client.get("/api/saved", headers=headers).json()["items"]
        assert len(listed) == 1
        assert listed[0]["learn_item"]["expires_at"] is None

        removed = client.delete("/api/saved", params={"item_id": item["id"]}, headers=headers).json()
        assert removed == {"success": True, "removed": True}
        assert client.get("/api/saved", headers=headers).json()["items"] == []

    def test_save_requires_an_id(self, client):
        assert client.post("/api/saved", json={"item_type": "learning"}, headers=auth_headers()).status_code == 400

    def test_save_unknown_item_is_404(self, client):
        assert client.post("/api/saved", json={"item_id": "missing"}, headers=auth_headers()).status_code == 404

    def test_lesson_plan_is_auto_saved(self, client):
        headers = auth_headers()
        created = client.post(
            "/api/lesson-plan",
            json={"topic": "Pricing", "content": LESSON_PLAN, "learn_item_id": "item-1"},
            headers=headers,
        )
        assert created.status_code == 201
        body = created.json()
        assert body["auto_saved"] is True
        plan_id = body["lesson_plan"]["id"]

        by_item = client.get("/api/lesson-plan", params={"learn_item_id": "item-1"}, headers=headers).json()
        assert by_item["lesson_plan"]["id"] == plan_id
        saved = client.get("/api/saved", headers=headers).json()["items"]
        assert [s["item_id"] for s in saved] == [plan_id]

    def test_lesson_plan_content_is_validated(self, client):
        short = {**LESSON_PLAN, "daily_plan": LESSON_PLAN["daily_plan"][:3]}
        response = client.post("/api/lesson-plan", json={"topic": "Pricing", "content": short}, headers=auth_headers())
        assert response.status_code == 400


class TestPrefsEventsUser:
    def test_prefs_roundtrip(self, client):
        headers = auth_headers()
        assert client.get("/api/prefs", headers=headers).json() == {"prefs": None}

        first = client.post("/api/prefs", json={"preferred_topics": ["Sales"]}, headers=headers).json()["prefs"]
        assert first["preferred_topics"] == ["Sales"]
        assert first["depth"] == "concise"

        second = client.post("/api/prefs", json={"theme": "dark"}, headers=headers).json()["prefs"]
        assert second["preferred_topics"] == ["Sales"]
        assert second["theme"] == "dark"

        user = client.get("/api/user", headers=headers).json()
        assert user["user"]["id"] == "user-1"
        assert user["prefs"]["theme"] == "dark"

    def test_empty_prefs_update_is_400(self, client):
        assert client.post("/api/prefs", json={}, headers=auth_headers()).status_code == 400

    def test_content_viewed_dedup(self, client):
        headers = auth_headers()
        event = {"event_type": "content_viewed", "learn_item_id": "item-1", "meta": {"session_id": "s1"}}
        assert client.post("/api/events", json=event, headers=headers).json() == {"success": True}
        assert client.post("/api/events", json=event, headers=headers).json() == {
            "success": True,
            "deduplicated": True,
        }

    def test_unknown_event_type_is_400(self, client):
        response = client.post("/api/events", json={"event_type": "clicked_ad"}, headers=auth_headers())
        assert response.status_code == 400

    def test_oversized_event_fields_are_400(self, client):
        headers = auth_headers()
        too_long_topic = {"event_type": "topic_clicked", "topic": "x" * 501}
        too_long_item = {"event_type": "content_viewed", "learn_item_id": "i" * 37}
        assert client.post("/api/events", json=too_long_topic, headers=headers).status_code == 400
        assert client.post("/api/events", json=too_long_item, headers=headers).status_code == 400
