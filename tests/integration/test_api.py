"""
API tests: progression, practice sessions and skip-ahead over HTTP.

Uses httpx ASGITransport against the app with the session maker and gate
collaborators overridden.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from src.api.deps import get_gate_collaborators, get_session_maker
from src.kernel.models.event_log import EventLog, EventType
from src.main import app

API = "/api/v1"


@pytest.fixture
def gate_parts(make_collaborators):
    return make_collaborators((80, 40, 20), question_count=3)


@pytest_asyncio.fixture
async def client(session_maker, gate_parts):
    collaborators, _ = gate_parts
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    app.dependency_overrides[get_gate_collaborators] = lambda: collaborators
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def skill_url(learner_id, skill_id, suffix):
    return f"{API}/learners/{learner_id}/skills/{skill_id}/{suffix}"


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "X-Request-ID" in response.headers

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"


class TestProgressionApi:
    async def test_mastery_for_new_learner(self, client):
        response = await client.get(skill_url(uuid.uuid4(), uuid.uuid4(), "mastery"))
        assert response.status_code == 200
        data = response.json()
        assert data["tier"] == "easy"
        assert data["decision"]["can_advance"] is False
        assert data["exam_ready"] is None

    async def test_attempts_then_advance(self, client):
        learner_id, skill_id = uuid.uuid4(), uuid.uuid4()
        for _ in range(3):
            response = await client.post(skill_url(learner_id, skill_id, "attempts"), json={"is_correct": True})
            assert response.status_code == 201
        data = response.json()
        assert data["decision"]["path_used"] == "streak"
        assert data["feedback"] == "Nice streak!"

        response = await client.post(skill_url(learner_id, skill_id, "advance"))
        assert response.status_code == 200
        assert response.json()["tier"] == "medium"

        data = (await client.get(skill_url(learner_id, skill_id, "mastery"))).json()
        assert data["tier"] == "medium"
        assert data["record"]["total_attempts"] == 0

    async def test_exam_readiness_at_exam_tier(self, client):
        learner_id, skill_id = uuid.uuid4(), uuid.uuid4()
        attempts_url = skill_url(learner_id, skill_id, "attempts")
        for streak in (3, 3, 4):
            for _ in range(streak):
                await client.post(attempts_url, json={"is_correct": True})
            assert (await client.post(skill_url(learner_id, skill_id, "advance"))).status_code == 200

        for is_correct in (True, True, False):
            data = (await client.post(attempts_url, json={"is_correct": is_correct})).json()
        assert data["tier"] == "exam"
        assert data["decision"] is None
        assert data["exam_ready"] is False  # 67%

        data = (await client.post(attempts_url, json={"is_correct": True})).json()
        assert data["exam_ready"] is True  # 75%

    async def test_advance_without_mastery_conflicts(self, client):
        response = await client.post(skill_url(uuid.uuid4(), uuid.uuid4(), "advance"))
        assert response.status_code == 409

    async def test_invalid_body_is_422(self, client):
        response = await client.post(skill_url(uuid.uuid4(), uuid.uuid4(), "attempts"), json={})
        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"


class TestPracticeApi:
    async def test_session_drifts_up_and_down(self, client):
        response = await client.post(f"{API}/practice-sessions", json={})
        assert response.status_code == 201
        session_id = response.json()["session_id"]
        url = f"{API}/practice-sessions/{session_id}/answers"

        await client.post(url, json={"is_correct": True})
        data = (await client.post(url, json={"is_correct": True})).json()
        assert data["changed"] is True
        assert data["direction"] == "up"
        assert data["tier"] == "medium"

        await client.post(url, json={"is_correct": False})
        data = (await client.post(url, json={"is_correct": False})).json()
        assert data["direction"] == "down"
        assert data["tier"] == "easy"
        assert len(data["progressions"]) == 2

    async def test_fast_track_start(self, client):
        response = await client.post(f"{API}/practice-sessions", json={"existing_mastery": 85})
        assert response.json()["tier"] == "hard"

    async def test_start_capped_at_max_tier(self, client):
        response = await client.post(
            f"{API}/practice-sessions",
            json={"existing_mastery": 90, "max_tier": "medium"},
        )
        assert response.json()["tier"] == "medium"

    async def test_closed_session_is_gone(self, client):
        session_id = (await client.post(f"{API}/practice-sessions", json={})).json()["session_id"]
        assert (await client.delete(f"{API}/practice-sessions/{session_id}")).status_code == 204
        assert (await client.get(f"{API}/practice-sessions/{session_id}")).status_code == 404


class TestSkipAheadApi:
    async def _open(self, client):
        response = await client.post(f"{API}/skip-ahead", json={
            "learner_id": str(uuid.uuid4()),
            "target_topic_id": str(uuid.uuid4()),
            "target_topic_name": "Quadratic Equations",
        })
        assert response.status_code == 201
        return response.json()

    async def test_quiz_pass_is_logged(self, client, session_maker):
        gate = await self._open(client)
        assert gate["state"] == "ready"
        assert [p["is_weak"] for p in gate["prerequisites"]] == [False, True, True]
        gate_url = f"{API}/skip-ahead/{gate['gate_id']}"

        data = (await client.post(f"{gate_url}/start")).json()
        assert data["state"] == "quiz"
        assert "correct_answer" not in data["current_question"]

        for _ in range(3):
            data = (await client.post(f"{gate_url}/answers", json={"answer": "right"})).json()
        assert data["state"] == "passed"
        assert data["can_proceed"] is True
        assert data["score"] == 1.0

        async with session_maker() as session:
            rows = (await session.execute(
                select(EventLog).where(EventLog.event_type == EventType.SKIP_AHEAD_PASSED.value)
            )).scalars().all()
        assert len(rows) == 1
        assert rows[0].payload["correct"] == 3

    async def test_quiz_fail_redirects_to_weakest(self, client):
        gate = await self._open(client)
        gate_url = f"{API}/skip-ahead/{gate['gate_id']}"
        await client.post(f"{gate_url}/start")
        for _ in range(3):
            data = (await client.post(f"{gate_url}/answers", json={"answer": "wrong"})).json()
        assert data["state"] == "failed"
        assert data["redirect_topic"]["id"] == "p3"
        assert data["score"] == 0.0

        data = (await client.post(f"{gate_url}/retry")).json()
        assert data["state"] == "ready"

    async def test_uncertain_answer_is_error(self, client):
        gate = await self._open(client)
        gate_url = f"{API}/skip-ahead/{gate['gate_id']}"
        await client.post(f"{gate_url}/start")
        data = (await client.post(f"{gate_url}/answers", json={"answer": "unsure"})).json()
        assert data["state"] == "error"
        assert data["can_proceed"] is False
        assert data["answered"] == 0

    async def test_answer_before_start_conflicts(self, client):
        gate = await self._open(client)
        response = await client.post(
            f"{API}/skip-ahead/{gate['gate_id']}/answers",
            json={"answer": "right"},
        )
        assert response.status_code == 409

    async def test_closed_gate_is_gone(self, client):
        gate = await self._open(client)
        gate_url = f"{API}/skip-ahead/{gate['gate_id']}"
        assert (await client.delete(gate_url)).status_code == 204
        assert (await client.get(gate_url)).status_code == 404

    async def test_lookup_failure_is_error(self, client, gate_parts):
        _, parts = gate_parts
        parts["source"].fail = True
        gate = await self._open(client)
        assert gate["state"] == "error"
        assert gate["error_message"]
