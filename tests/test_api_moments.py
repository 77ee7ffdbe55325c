"""
HTTP tests for the moment endpoints.
"""
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.v1.dependencies import getGemMatcher
from app.database import getDbSession
from app.main import app
from app.modules.matching import GemMatcher
from tests.conftest import FakeScorer


BASE = "/api/v1/moments"


@pytest.fixture
def scorer():
    return FakeScorer({"matches": []})


@pytest_asyncio.fixture
async def client(db, scorer):
    async def overrideDb():
        yield db

    app.dependency_overrides[getDbSession] = overrideDb
    app.dependency_overrides[getGemMatcher] = lambda: GemMatcher(scorer)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


class TestCreateMoment:

    async def test_create_and_match(self, client, scorer, userId, makeThought):
        thought = await makeThought("Ask what success looks like")
        scorer.response = {"matches": [
            {"gem_id": str(thought.id), "relevance_score": 0.9, "relevance_reason": "Agenda"}
        ]}

        response = await client.post(
            BASE,
            params={"userId": str(userId)},
            json={"description": "Weekly 1:1 with manager"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["moment"]["description"] == "Weekly 1:1 with manager"
        assert body["moment"]["gemsMatchedCount"] == 1
        assert body["matchedThoughts"][0]["gemId"] == str(thought.id)
        assert body["matchedThoughts"][0]["relevanceScore"] == 0.9
        assert body["matchedThoughts"][0]["thought"]["content"] == "Ask what success looks like"
        assert body["degraded"] == []

    async def test_empty_description(self, client, userId):
        response = await client.post(BASE, params={"userId": str(userId)}, json={"description": "  "})

        assert response.status_code == 400
        assert response.json()["detail"] == "Description is required"

    async def test_description_too_long(self, client, userId):
        response = await client.post(BASE, params={"userId": str(userId)}, json={"description": "x" * 501})

        assert response.status_code == 400

    async def test_scorer_failure_still_201(self, client, scorer, userId, makeThought):
        await makeThought("Ask what success looks like")
        scorer.error = RuntimeError("provider down")

        response = await client.post(BASE, params={"userId": str(userId)}, json={"description": "Team sync"})

        assert response.status_code == 201
        assert response.json()["matchedThoughts"] == []
        assert "matching" in response.json()["degraded"]

    async def test_from_event(self, client, userId):
        response = await client.post(
            f"{BASE}/from-event",
            params={"userId": str(userId)},
            json={"calendarEvent": {"eventId": "abc_1", "title": "Weekly 1:1 with Sam"}},
        )

        assert response.status_code == 201
        moment = response.json()["moment"]
        assert moment["source"] == "calendar"
        assert moment["detectedEventType"] == "1:1"
        assert moment["calendarEventId"] == "abc_1"


class TestMomentLifecycle:

    async def test_get_enrich_and_status(self, client, scorer, userId, makeThought):
        thought = await makeThought("Ask about priorities")
        scorer.response = {"matches": [
            {"gem_id": str(thought.id), "relevance_score": 0.6, "relevance_reason": "Fits"}
        ]}
        created = await client.post(BASE, params={"userId": str(userId)}, json={"description": "Weekly 1:1"})
        momentId = created.json()["moment"]["id"]

        fetched = await client.get(f"{BASE}/{momentId}", params={"userId": str(userId)})
        assert fetched.status_code == 200
        assert len(fetched.json()["matchedThoughts"]) == 1

        scorer.response = {"matches": [
            {"gem_id": str(thought.id), "relevance_score": 0.4, "relevance_reason": "Weaker"}
        ]}
        enriched = await client.post(
            f"{BASE}/{momentId}/enrich",
            params={"userId": str(userId)},
            json={"userContext": "asking about promotion"},
        )
        assert enriched.status_code == 200
        assert enriched.json()["moment"]["userContext"] == "asking about promotion"
        assert enriched.json()["matchedThoughts"][0]["relevanceScore"] == 0.6

        completed = await client.patch(
            f"{BASE}/{momentId}/status",
            params={"userId": str(userId)},
            json={"status": "completed"},
        )
        assert completed.status_code == 200
        assert completed.json()["status"] == "completed"
        assert completed.json()["completedAt"] is not None

    async def test_unknown_moment(self, client, userId):
        response = await client.get(f"{BASE}/{uuid.uuid4()}", params={"userId": str(userId)})

        assert response.status_code == 404

    async def test_invalid_status(self, client, userId):
        created = await client.post(BASE, params={"userId": str(userId)}, json={"description": "Team sync"})

        response = await client.patch(
            f"{BASE}/{created.json()['moment']['id']}/status",
            params={"userId": str(userId)},
            json={"status": "archived"},
        )

        assert response.status_code == 422

    async def test_list(self, client, userId):
        await client.post(BASE, params={"userId": str(userId)}, json={"description": "Team sync"})

        response = await client.get(BASE, params={"userId": str(userId)})

        assert response.status_code == 200
        assert response.json()["total"] == 1


class TestLearningEndpoints:

    async def test_helpful_then_stats(self, client, scorer, userId, makeThought):
        thought = await makeThought("Ask about priorities")
        scorer.response = {"matches": [
            {"gem_id": str(thought.id), "relevance_score": 0.8, "relevance_reason": "Fits"}
        ]}
        created = await client.post(
            BASE,
            params={"userId": str(userId)},
            json={"description": "Weekly 1:1 with manager", "detectedEventType": "1:1"},
        )
        momentId = created.json()["moment"]["id"]

        response = await client.post(
            f"{BASE}/learn/helpful",
            params={"userId": str(userId)},
            json={"momentId": momentId, "gemId": str(thought.id)},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Learning recorded", "patternsRecorded": 3}

        stats = (await client.get(f"{BASE}/learn/stats", params={"userId": str(userId)})).json()
        assert stats["totalLearnings"] == 3
        assert stats["byPatternType"]["keyword"] == 2

    async def test_not_helpful_unknown_moment(self, client, userId, makeThought):
        thought = await makeThought("Ask about priorities")

        response = await client.post(
            f"{BASE}/learn/not-helpful",
            params={"userId": str(userId)},
            json={"momentId": str(uuid.uuid4()), "gemId": str(thought.id)},
        )

        assert response.status_code == 404


class TestAnalyzeTitle:

    async def test_generic_title(self, client):
        response = await client.post(f"{BASE}/analyze-title", json={"title": "Sync"})

        body = response.json()
        assert body["isGeneric"] is True
        assert body["genericReason"] == "short"
        assert body["suggestedQuestions"]
