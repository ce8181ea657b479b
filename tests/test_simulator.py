"""
Tests for InterviewSimulator.

Exercises the interview flow (greeting, turns, feedback, persistence),
fallback behavior, speech input and recording handling.

Last Grunted: 10/19/2026
"""

from __future__ import annotations

import asyncio
import random
from pathlib import Path

import pytest

from mock_interview import catalog
from mock_interview.agent import LLMResponseError, RateLimitExceededError
from mock_interview.output import SessionSummaryWriter
from mock_interview.recording import RecordingStore
from mock_interview.simulator import InterviewPhase, InterviewSimulator
from tests.mock_data import FakeInterviewerAgent, generate_candidate_answers, generate_transcript_event


@pytest.fixture
def writer(tmp_path: Path) -> SessionSummaryWriter:
    return SessionSummaryWriter(tmp_path / "output")


@pytest.fixture
def store(tmp_path: Path) -> RecordingStore:
    return RecordingStore(tmp_path / "recordings")


# =============================================================================
# Interview Flow Tests
# =============================================================================

class TestInterviewFlow:
    """Phase transitions and transcript handling."""

    @pytest.mark.asyncio
    async def test_start_interview(self):
        simulator = InterviewSimulator()

        result = await simulator.start_interview("nurse", "entry", "user_42")

        assert simulator.phase == InterviewPhase.IN_PROGRESS
        assert simulator.demo_mode is True
        assert result.turn.content == catalog.initial_greeting("nurse", "entry")
        assert result.utterance.text == result.turn.content
        assert simulator.session.user_id == "user_42"

    @pytest.mark.asyncio
    async def test_start_without_voice(self):
        simulator = InterviewSimulator(voice_enabled=False)

        result = await simulator.start_interview()

        assert result.utterance is None

    @pytest.mark.asyncio
    async def test_start_rejects_unknown_role(self):
        simulator = InterviewSimulator()

        with pytest.raises(ValueError):
            await simulator.start_interview("astronaut", "entry")
        assert simulator.phase == InterviewPhase.SETUP

    @pytest.mark.asyncio
    async def test_start_while_in_progress_raises(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()

        with pytest.raises(ValueError, match="already in progress"):
            await simulator.start_interview()

    @pytest.mark.asyncio
    async def test_demo_replies_follow_fallback_sequence(self):
        simulator = InterviewSimulator()
        await simulator.start_interview("doctor", "mid")
        questions = catalog.fallback_questions("doctor")

        replies = []
        for answer in generate_candidate_answers(3):
            result = await simulator.send_message(answer)
            replies.append(result.turn.content)
            assert result.used_fallback is True

        assert replies == list(questions[:3])
        assert len(simulator.session.turns) == 7

    @pytest.mark.asyncio
    async def test_blank_message_ignored(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()

        assert await simulator.send_message("   ") is None
        assert len(simulator.session.turns) == 1

    @pytest.mark.asyncio
    async def test_message_before_start_ignored(self):
        assert await InterviewSimulator().send_message("Hello") is None

    @pytest.mark.asyncio
    async def test_agent_sees_updated_history(self):
        fake = FakeInterviewerAgent(replies=["What drew you to pediatrics?"])
        simulator = InterviewSimulator(agent=fake)
        await simulator.start_interview()

        result = await simulator.send_message("I love working with children.")

        assert result.turn.content == "What drew you to pediatrics?"
        assert result.used_fallback is False
        assert fake.contexts[0]["messages"][-1] == {
            "role": "user",
            "content": "I love working with children.",
        }

    @pytest.mark.asyncio
    async def test_rate_limit_uses_fallback(self):
        fake = FakeInterviewerAgent(error=RateLimitExceededError())
        simulator = InterviewSimulator(agent=fake)
        await simulator.start_interview("nurse", "entry")

        result = await simulator.send_message("My answer.")

        assert result.used_fallback is True
        assert result.turn.content == catalog.fallback_response(1, "nurse")

    @pytest.mark.asyncio
    async def test_llm_error_uses_fallback(self):
        fake = FakeInterviewerAgent(error=LLMResponseError("bad output"))
        simulator = InterviewSimulator(agent=fake)
        await simulator.start_interview("nurse", "entry")
        await simulator.send_message("First.")

        result = await simulator.send_message("Second.")

        assert result.turn.content == catalog.fallback_response(2, "nurse")

    @pytest.mark.asyncio
    async def test_unexpected_error_uses_fallback(self):
        fake = FakeInterviewerAgent(error=RuntimeError("socket reset"))
        simulator = InterviewSimulator(agent=fake)
        await simulator.start_interview("nurse", "entry")

        result = await simulator.send_message("My answer.")

        assert result.used_fallback is True
        assert result.turn.content == catalog.fallback_response(1, "nurse")
        assert simulator.session.turns[-1].role == "assistant"

    @pytest.mark.asyncio
    async def test_end_interview_demo(self, writer: SessionSummaryWriter):
        simulator = InterviewSimulator(summary_writer=writer, rng=random.Random(5))
        await simulator.start_interview("nurse", "entry", "user_42")
        for answer in generate_candidate_answers(2):
            await simulator.send_message(answer)

        report = await simulator.end_interview()

        assert simulator.phase == InterviewPhase.FEEDBACK
        assert simulator.session.is_active is False
        assert report.used_fallback is True
        assert len(report.question_feedback) == 2
        assert simulator.persisted is True
        saved = writer.load_summary(simulator.session.session_id)
        assert saved.user_id == "user_42"
        assert saved.role_label == "Registered Nurse"
        assert saved.level_label == "Entry Level"
        assert saved.total_questions == 2

    @pytest.mark.asyncio
    async def test_end_interview_with_agent(self, writer: SessionSummaryWriter):
        fake = FakeInterviewerAgent(rating=4, overall="Solid interview.")
        simulator = InterviewSimulator(agent=fake, summary_writer=writer)
        await simulator.start_interview()
        await simulator.send_message("Answer one.")

        report = await simulator.end_interview()

        assert report.overall_feedback == "Solid interview."
        assert report.used_fallback is False
        assert report.stats.strong_answers == 1

    @pytest.mark.asyncio
    async def test_end_interview_twice_returns_same_report(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()
        await simulator.send_message("Answer.")

        first = await simulator.end_interview()
        second = await simulator.end_interview()

        assert first is second

    @pytest.mark.asyncio
    async def test_overlapping_end_calls_share_report(self, writer: SessionSummaryWriter):
        fake = FakeInterviewerAgent(feedback_delay=0.05)
        simulator = InterviewSimulator(agent=fake, summary_writer=writer)
        await simulator.start_interview()
        await simulator.send_message("Answer.")

        first, second = await asyncio.gather(
            simulator.end_interview(), simulator.end_interview()
        )

        assert first is second
        assert fake.feedback_calls == [1]
        assert simulator.phase == InterviewPhase.FEEDBACK

    @pytest.mark.asyncio
    async def test_unexpected_feedback_error_uses_fallback(self, writer: SessionSummaryWriter):
        fake = FakeInterviewerAgent(feedback_error=RuntimeError("socket reset"))
        simulator = InterviewSimulator(agent=fake, summary_writer=writer)
        await simulator.start_interview()
        await simulator.send_message("Answer.")

        report = await simulator.end_interview()

        assert report.used_fallback is True
        assert report.overall_feedback == catalog.ERROR_OVERALL_FEEDBACK
        assert simulator.phase == InterviewPhase.FEEDBACK
        assert simulator.persisted is True

    @pytest.mark.asyncio
    async def test_end_without_session_raises(self):
        with pytest.raises(ValueError):
            await InterviewSimulator().end_interview()

    @pytest.mark.asyncio
    async def test_persist_failure_keeps_feedback(self, tmp_path: Path):
        writer = SessionSummaryWriter(tmp_path)
        simulator = InterviewSimulator(summary_writer=writer)
        await simulator.start_interview()
        (tmp_path / f"{simulator.session.session_id}_summary.json").mkdir()

        report = await simulator.end_interview()

        assert report is not None
        assert simulator.phase == InterviewPhase.FEEDBACK
        assert simulator.persisted is False

    @pytest.mark.asyncio
    async def test_messages_after_end_ignored(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()
        await simulator.end_interview()

        assert await simulator.send_message("Too late") is None

    @pytest.mark.asyncio
    async def test_review_and_restart(self):
        simulator = InterviewSimulator()
        await simulator.start_interview("nurse", "entry")

        with pytest.raises(ValueError):
            simulator.review_interview()

        await simulator.end_interview()
        simulator.review_interview()
        assert simulator.phase == InterviewPhase.REVIEW

        first_id = simulator.session.session_id
        await simulator.start_interview("doctor", "senior")
        assert simulator.phase == InterviewPhase.IN_PROGRESS
        assert simulator.report is None
        assert simulator.session.session_id != first_id

    @pytest.mark.asyncio
    async def test_reset(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()
        await simulator.end_interview()

        await simulator.reset()

        assert simulator.phase == InterviewPhase.SETUP
        assert simulator.session is None
        assert simulator.report is None


# =============================================================================
# Speech Tests
# =============================================================================

class TestSpeechInput:
    """Answers dictated through speech recognition."""

    @pytest.mark.asyncio
    async def test_send_transcribed(self):
        simulator = InterviewSimulator()
        await simulator.start_interview("nurse", "entry")
        assert simulator.toggle_listening() is True
        simulator.apply_speech_event(generate_transcript_event("final", "I want to "))
        text = simulator.apply_speech_event(generate_transcript_event("partial", "help people"))
        assert text == "I want to help people"

        result = await simulator.send_transcribed()

        assert simulator.session.turns[1].content == "I want to help people"
        assert result.turn.content == catalog.fallback_response(1, "nurse")
        assert simulator.speech.is_listening is False
        assert simulator.speech.transcribed_text == ""

    @pytest.mark.asyncio
    async def test_send_transcribed_empty(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()
        simulator.toggle_listening()

        assert await simulator.send_transcribed() is None

    @pytest.mark.asyncio
    async def test_cancel_listening(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()
        simulator.toggle_listening()
        simulator.apply_speech_event(generate_transcript_event("final", "never mind"))

        simulator.cancel_listening()

        assert simulator.speech.transcribed_text == ""
        assert len(simulator.session.turns) == 1

    @pytest.mark.asyncio
    async def test_end_stops_listening(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()
        simulator.toggle_listening()

        await simulator.end_interview()

        assert simulator.speech.is_listening is False

    @pytest.mark.asyncio
    async def test_voice_toggle(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()
        simulator.set_voice_enabled(False)

        result = await simulator.send_message("Answer.")

        assert result.utterance is None


# =============================================================================
# Recording Tests
# =============================================================================

class TestRecording:
    """Recording attachment and cleanup."""

    @pytest.mark.asyncio
    async def test_recording_marked_in_summary(
        self, writer: SessionSummaryWriter, store: RecordingStore
    ):
        simulator = InterviewSimulator(summary_writer=writer, recording_store=store)
        await simulator.start_interview()
        session_id = simulator.session.session_id
        simulator.attach_recording(await store.save(session_id, b"webm-bytes", "video/webm"))

        await simulator.end_interview()

        assert writer.load_summary(session_id).has_recording is True

    @pytest.mark.asyncio
    async def test_reset_deletes_recording(self, store: RecordingStore):
        simulator = InterviewSimulator(recording_store=store)
        await simulator.start_interview()
        session_id = simulator.session.session_id
        simulator.attach_recording(await store.save(session_id, b"webm-bytes", "audio/webm"))

        await simulator.reset()

        assert simulator.recording is None
        assert not store.exists(session_id)

    @pytest.mark.asyncio
    async def test_delete_recording_without_store(self):
        simulator = InterviewSimulator()
        await simulator.start_interview()

        assert await simulator.delete_recording() is False
