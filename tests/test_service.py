"""
FastAPI endpoint tests for the Mock Interview Service.

Tests all API endpoints using httpx AsyncClient with proper
lifespan management via asgi-lifespan. The service runs in demo mode so
no LLM is contacted.

Last Grunted: 10/19/2026
"""

from __future__ import annotations

import dataclasses
import os
import tempfile
import uuid
from typing import AsyncIterator

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from mock_interview import catalog
from tests.mock_data import generate_candidate_answers


TEST_OUTPUT_DIR = tempfile.mkdtemp(prefix="mock_interview_test_")
os.environ["OUTPUT_DIR"] = TEST_OUTPUT_DIR
os.environ["INTERVIEW_DEMO_MODE"] = "true"
for _name in ("OPENAI_API_KEY", "OPENAI_API_TYPE", "AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_KEY"):
    os.environ.pop(_name, None)


# =============================================================================
# Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """
    Create async test client with proper lifespan management.

    Uses LifespanManager so each test gets freshly initialized state.
    """
    from interview_service import app

    async with LifespanManager(app) as manager:
        transport = ASGITransport(app=manager.app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.fixture
def user_id() -> str:
    """Unique user per test; summaries share one output directory."""
    return f"user_{uuid.uuid4().hex[:8]}"


async def start_interview(
    client: AsyncClient,
    user_id: str = "anonymous",
    role: str = "nurse",
    level: str = "entry",
) -> str:
    response = await client.post(
        "/interviews",
        json={"role": role, "level": level, "user_id": user_id},
    )
    assert response.status_code == 200
    return response.json()["session_id"]


# =============================================================================
# Service Endpoint Tests
# =============================================================================


class TestServiceEndpoints:
    """Tests for /health, /stats, /catalog and /llm/status."""

    @pytest.mark.asyncio
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "Mock Interview Service"
        assert data["demo_mode"] is True
        assert data["active_interviews"] == 0
        assert data["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_stats_initial_values(self, client: AsyncClient) -> None:
        response = await client.get("/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["stats"]["interviews_started"] == 0
        assert data["stats"]["messages_received"] == 0
        assert data["output_directory"] == TEST_OUTPUT_DIR

    @pytest.mark.asyncio
    async def test_catalog(self, client: AsyncClient) -> None:
        response = await client.get("/catalog")

        assert response.status_code == 200
        data = response.json()
        assert {"value": "nurse", "label": "Registered Nurse"} in data["roles"]
        assert {"value": "mid", "label": "Mid Level"} in data["levels"]
        assert data["demo_mode"] is True
        assert data["recognition"]["lang"] == "en-US"

    @pytest.mark.asyncio
    async def test_llm_status_without_key(self, client: AsyncClient) -> None:
        response = await client.get("/llm/status")

        assert response.status_code == 200
        data = response.json()
        assert data["configured"] is False
        assert data["result"] == "No API key configured"


# =============================================================================
# Interview Endpoint Tests
# =============================================================================


class TestInterviewEndpoints:
    """Tests for the interview lifecycle."""

    @pytest.mark.asyncio
    async def test_start_interview(self, client: AsyncClient, user_id: str) -> None:
        response = await client.post(
            "/interviews",
            json={"role": "pharmacist", "level": "mid", "user_id": user_id},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["session_id"].startswith("mi_")
        assert data["turn"]["role"] == "assistant"
        assert data["turn"]["content"] == catalog.initial_greeting("pharmacist", "mid")
        assert data["utterance"]["rate"] == 0.9

        stats = (await client.get("/stats")).json()
        assert stats["stats"]["interviews_started"] == 1
        assert stats["active_interviews"] == 1

    @pytest.mark.asyncio
    async def test_start_interview_voice_off(self, client: AsyncClient) -> None:
        response = await client.post("/interviews", json={"voice_enabled": False})

        assert response.status_code == 200
        assert response.json()["utterance"] is None

    @pytest.mark.asyncio
    async def test_start_interview_invalid_role(self, client: AsyncClient) -> None:
        response = await client.post("/interviews", json={"role": "astronaut"})

        assert response.status_code == 400
        data = response.json()
        assert data["ok"] is False
        assert data["error_code"] == "INVALID_REQUEST"
        assert "astronaut" in data["error"]

    @pytest.mark.asyncio
    async def test_get_interview(self, client: AsyncClient, user_id: str) -> None:
        session_id = await start_interview(client, user_id, role="therapist", level="senior")

        response = await client.get(f"/interviews/{session_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["phase"] == "in_progress"
        assert data["role_label"] == "Physical Therapist"
        assert data["level_label"] == "Senior Level"
        assert data["is_active"] is True
        assert len(data["turns"]) == 1
        assert data["demo_mode"] is True
        assert data["has_recording"] is False

    @pytest.mark.asyncio
    async def test_unknown_interview(self, client: AsyncClient) -> None:
        response = await client.get("/interviews/mi_does_not_exist")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_send_message(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        response = await client.post(
            f"/interviews/{session_id}/messages",
            json={"content": generate_candidate_answers(1)[0]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["used_fallback"] is True
        assert data["turn"]["content"] == catalog.fallback_response(1, "nurse")

        stats = (await client.get("/stats")).json()["stats"]
        assert stats["messages_received"] == 1
        assert stats["fallback_responses"] == 1

    @pytest.mark.asyncio
    async def test_blank_message_ignored(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        response = await client.post(f"/interviews/{session_id}/messages", json={"content": "  "})

        assert response.status_code == 200
        assert response.json()["ok"] is False
        state = (await client.get(f"/interviews/{session_id}")).json()
        assert len(state["turns"]) == 1

    @pytest.mark.asyncio
    async def test_end_interview(self, client: AsyncClient, user_id: str) -> None:
        session_id = await start_interview(client, user_id)
        for answer in generate_candidate_answers(3):
            await client.post(f"/interviews/{session_id}/messages", json={"content": answer})

        response = await client.post(f"/interviews/{session_id}/end")

        assert response.status_code == 200
        data = response.json()
        assert data["persisted"] is True
        report = data["report"]
        assert report["used_fallback"] is True
        assert report["overall_feedback"] == catalog.DEMO_OVERALL_FEEDBACK
        assert len(report["question_feedback"]) == 3
        assert report["stats"]["total_questions"] == 3
        assert all(3 <= item["rating"] <= 5 for item in report["question_feedback"])

        state = (await client.get(f"/interviews/{session_id}")).json()
        assert state["phase"] == "feedback"
        assert state["is_active"] is False
        assert state["ended_at"] is not None

    @pytest.mark.asyncio
    async def test_end_twice_counts_once(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)
        first = (await client.post(f"/interviews/{session_id}/end")).json()
        second = (await client.post(f"/interviews/{session_id}/end")).json()

        assert first["report"] == second["report"]
        stats = (await client.get("/stats")).json()["stats"]
        assert stats["interviews_completed"] == 1

    @pytest.mark.asyncio
    async def test_message_after_end_rejected(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)
        await client.post(f"/interviews/{session_id}/end")

        response = await client.post(
            f"/interviews/{session_id}/messages", json={"content": "One more thing"}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "SESSION_NOT_ACTIVE"

    @pytest.mark.asyncio
    async def test_feedback_before_end(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        response = await client.get(f"/interviews/{session_id}/feedback")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_get_feedback_and_review(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)
        await client.post(f"/interviews/{session_id}/messages", json={"content": "My answer."})
        await client.post(f"/interviews/{session_id}/end")

        feedback = await client.get(f"/interviews/{session_id}/feedback")
        assert feedback.status_code == 200
        assert len(feedback.json()["report"]["question_feedback"]) == 1

        review = await client.post(f"/interviews/{session_id}/review")
        assert review.status_code == 200
        assert review.json()["phase"] == "review"

    @pytest.mark.asyncio
    async def test_review_before_end(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        response = await client.post(f"/interviews/{session_id}/review")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_reset_interview(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        response = await client.delete(f"/interviews/{session_id}")

        assert response.status_code == 200
        assert response.json()["ok"] is True
        assert (await client.get(f"/interviews/{session_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_finished_interviews_evicted_beyond_limit(
        self, client: AsyncClient, user_id: str, monkeypatch
    ) -> None:
        import interview_service

        monkeypatch.setattr(
            interview_service,
            "RUNTIME_CONFIG",
            dataclasses.replace(interview_service.RUNTIME_CONFIG, max_finished_interviews=1),
        )
        oldest = await start_interview(client, user_id)
        await client.post(f"/interviews/{oldest}/end")
        newer = await start_interview(client, user_id)
        await client.post(f"/interviews/{newer}/end")
        running = await start_interview(client, user_id)
        await start_interview(client, user_id)

        assert (await client.get(f"/interviews/{oldest}")).status_code == 404
        assert (await client.get(f"/interviews/{newer}")).status_code == 200
        assert (await client.get(f"/interviews/{running}")).status_code == 200
        history = await client.get(f"/users/{user_id}/sessions/{oldest}")
        assert history.status_code == 200

    @pytest.mark.asyncio
    async def test_set_voice(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        response = await client.post(f"/interviews/{session_id}/voice", json={"enabled": False})

        assert response.status_code == 200
        assert response.json()["voice_enabled"] is False
        reply = await client.post(
            f"/interviews/{session_id}/messages", json={"content": "Answer."}
        )
        assert reply.json()["utterance"] is None


# =============================================================================
# Speech Endpoint Tests
# =============================================================================


class TestSpeechEndpoints:
    """Tests for speech recognition endpoints."""

    @pytest.mark.asyncio
    async def test_dictated_answer(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        toggle = await client.post(f"/interviews/{session_id}/speech/toggle")
        assert toggle.json()["is_listening"] is True

        await client.post(
            f"/interviews/{session_id}/speech/events",
            json={"event_type": "final", "text": "I enjoy ", "confidence": 0.94},
        )
        partial = await client.post(
            f"/interviews/{session_id}/speech/events",
            json={"event_type": "partial", "text": "patient care"},
        )
        assert partial.json()["transcribed_text"] == "I enjoy patient care"

        response = await client.post(f"/interviews/{session_id}/speech/send")

        assert response.status_code == 200
        assert response.json()["ok"] is True
        state = (await client.get(f"/interviews/{session_id}")).json()
        assert state["turns"][1]["content"] == "I enjoy patient care"
        assert state["is_listening"] is False
        assert state["transcribed_text"] == ""

    @pytest.mark.asyncio
    async def test_permission_error(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)
        await client.post(f"/interviews/{session_id}/speech/toggle")

        response = await client.post(
            f"/interviews/{session_id}/speech/events",
            json={"event_type": "error", "error": "not-allowed"},
        )

        data = response.json()
        assert data["is_listening"] is False
        assert data["error"] == "Please allow microphone access for speech recognition."

    @pytest.mark.asyncio
    async def test_invalid_event_type(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        response = await client.post(
            f"/interviews/{session_id}/speech/events",
            json={"event_type": "bogus"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_event_after_end_rejected(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)
        await client.post(f"/interviews/{session_id}/end")

        response = await client.post(
            f"/interviews/{session_id}/speech/events",
            json={"event_type": "session_started"},
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "SESSION_NOT_ACTIVE"
        state = (await client.get(f"/interviews/{session_id}")).json()
        assert state["is_listening"] is False

    @pytest.mark.asyncio
    async def test_cancel(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)
        await client.post(f"/interviews/{session_id}/speech/toggle")
        await client.post(
            f"/interviews/{session_id}/speech/events",
            json={"event_type": "final", "text": "scratch that"},
        )

        response = await client.post(f"/interviews/{session_id}/speech/cancel")

        data = response.json()
        assert data["is_listening"] is False
        assert data["transcribed_text"] == ""


# =============================================================================
# Recording Endpoint Tests
# =============================================================================


class TestRecordingEndpoints:
    """Tests for recording upload, download and deletion."""

    @pytest.mark.asyncio
    async def test_upload_download_delete(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)
        payload = b"\x1a\x45\xdf\xa3recording"

        upload = await client.put(
            f"/interviews/{session_id}/recording",
            content=payload,
            headers={"Content-Type": "video/webm;codecs=vp9,opus"},
        )
        assert upload.status_code == 200
        assert upload.json()["content_type"] == "video/webm"
        assert upload.json()["size_bytes"] == len(payload)

        state = (await client.get(f"/interviews/{session_id}")).json()
        assert state["has_recording"] is True

        download = await client.get(f"/interviews/{session_id}/recording")
        assert download.status_code == 200
        assert download.content == payload
        assert download.headers["content-type"].startswith("video/webm")

        deleted = await client.delete(f"/interviews/{session_id}/recording")
        assert deleted.status_code == 200

        missing = await client.get(f"/interviews/{session_id}/recording")
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "RECORDING_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_upload_wrong_type(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        response = await client.put(
            f"/interviews/{session_id}/recording",
            content=b"data",
            headers={"Content-Type": "video/mp4"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    @pytest.mark.asyncio
    async def test_delete_missing_recording(self, client: AsyncClient) -> None:
        session_id = await start_interview(client)

        response = await client.delete(f"/interviews/{session_id}/recording")

        assert response.status_code == 404


# =============================================================================
# Dashboard Endpoint Tests
# =============================================================================


class TestDashboardEndpoints:
    """Tests for per-user session history and stats."""

    @pytest.mark.asyncio
    async def test_sessions_and_stats(self, client: AsyncClient, user_id: str) -> None:
        for role in ("nurse", "doctor"):
            session_id = await start_interview(client, user_id, role=role)
            for answer in generate_candidate_answers(2):
                await client.post(f"/interviews/{session_id}/messages", json={"content": answer})
            await client.post(f"/interviews/{session_id}/end")

        sessions = await client.get(f"/users/{user_id}/sessions")
        assert sessions.status_code == 200
        items = sessions.json()["sessions"]
        assert len(items) == 2
        assert {item["role"] for item in items} == {"nurse", "doctor"}
        assert all(item["user_id"] == user_id for item in items)

        stats = (await client.get(f"/users/{user_id}/stats")).json()
        assert stats["total_sessions"] == 2
        assert stats["total_questions"] == 4
        assert stats["sessions_by_role"] == {"nurse": 1, "doctor": 1}
        assert 3.0 <= stats["average_rating"] <= 5.0

    @pytest.mark.asyncio
    async def test_get_user_session(self, client: AsyncClient, user_id: str) -> None:
        session_id = await start_interview(client, user_id)
        await client.post(f"/interviews/{session_id}/end")

        response = await client.get(f"/users/{user_id}/sessions/{session_id}")
        assert response.status_code == 200
        assert response.json()["session_id"] == session_id

        other = await client.get(f"/users/someone_else/sessions/{session_id}")
        assert other.status_code == 404

    @pytest.mark.asyncio
    async def test_new_user_has_no_history(self, client: AsyncClient, user_id: str) -> None:
        sessions = await client.get(f"/users/{user_id}/sessions")
        stats = await client.get(f"/users/{user_id}/stats")

        assert sessions.json()["sessions"] == []
        assert stats.json()["total_sessions"] == 0
        assert stats.json()["average_rating"] is None
