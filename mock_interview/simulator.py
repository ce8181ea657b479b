"""
Interview Simulator.

The session state machine behind the practice UI. It sequences
greeting -> question/answer turns -> feedback generation -> persistence
and funnels the three side-effect sources (speech recognition events,
text-to-speech playback, LLM calls) through one conversation transcript.

Phases:
    setup -> in_progress -> generating_feedback -> feedback <-> review
    reset() returns to setup from anywhere.

Last Grunted: 10/19/2026
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from . import catalog
from .agent import InterviewAgentError, RateLimitExceededError
from .feedback import FeedbackGenerator
from .models import (
    ConversationTurn,
    FeedbackReport,
    InterviewSession,
    SessionSummary,
    SpeechUtterance,
    TranscriptEvent,
)
from .output import OutputWriteError
from .session import InterviewSessionManager
from .speech import SpeechCapture, speak

if TYPE_CHECKING:
    from .agent import InterviewerAgent
    from .output import SessionSummaryWriter
    from .recording import RecordingInfo, RecordingStore


__all__ = ["InterviewPhase", "InterviewSimulator", "TurnResult"]


logger = logging.getLogger(__name__)


class InterviewPhase(str, Enum):
    """Where the simulator is in the interview flow."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    GENERATING_FEEDBACK = "generating_feedback"
    FEEDBACK = "feedback"
    REVIEW = "review"


@dataclass
class TurnResult:
    """An interviewer turn plus what the client should do with it."""

    turn: ConversationTurn
    utterance: Optional[SpeechUtterance] = None
    used_fallback: bool = False


class InterviewSimulator:
    """
    Drives one user's mock interview.

    Example:
        >>> simulator = InterviewSimulator(agent=None)  # demo mode
        >>> greeting = await simulator.start_interview("nurse", "entry")
        >>> reply = await simulator.send_message("I love helping patients.")
        >>> report = await simulator.end_interview()
    """

    def __init__(
        self,
        agent: Optional["InterviewerAgent"] = None,
        summary_writer: Optional["SessionSummaryWriter"] = None,
        recording_store: Optional["RecordingStore"] = None,
        voice_enabled: bool = True,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.agent = agent
        self.summary_writer = summary_writer
        self.recording_store = recording_store
        self.voice_enabled = voice_enabled

        self.session_manager = InterviewSessionManager()
        self.speech = SpeechCapture()
        self.feedback_generator = FeedbackGenerator(agent=agent, rng=rng)

        self.phase = InterviewPhase.SETUP
        self.report: Optional[FeedbackReport] = None
        self.recording: Optional["RecordingInfo"] = None
        self.persisted = False
        self.summary_path: Optional[Path] = None
        self._end_lock = asyncio.Lock()

    @property
    def session(self) -> Optional[InterviewSession]:
        return self.session_manager.session

    @property
    def demo_mode(self) -> bool:
        return self.agent is None

    # -------------------------------------------------------------------------
    # Interview flow
    # -------------------------------------------------------------------------

    async def start_interview(
        self,
        role: str = catalog.DEFAULT_ROLE,
        level: str = catalog.DEFAULT_LEVEL,
        user_id: str = "anonymous",
    ) -> TurnResult:
        """
        Start a new interview with the interviewer's greeting.

        Starting from the feedback or review screen resets the previous
        interview first.

        Raises:
            ValueError: If an interview is still running, or role/level is unknown.
        """
        if self.phase in (InterviewPhase.IN_PROGRESS, InterviewPhase.GENERATING_FEEDBACK):
            raise ValueError("Interview already in progress. End or reset it first.")
        if self.phase != InterviewPhase.SETUP:
            await self.reset()

        session = self.session_manager.start_session(role, level, user_id)
        self.phase = InterviewPhase.IN_PROGRESS

        greeting = session.turns[0]
        return TurnResult(
            turn=greeting,
            utterance=speak(greeting.content, self.voice_enabled),
        )

    async def send_message(self, content: str) -> Optional[TurnResult]:
        """
        Record a candidate answer and produce the interviewer's reply.

        Blank input, or no interview in progress, is ignored.

        Returns:
            The interviewer's reply, or None if the message was ignored.
        """
        if self.phase != InterviewPhase.IN_PROGRESS or not self.session_manager.is_active:
            logger.debug("send_message ignored: no interview in progress")
            return None
        if not content or not content.strip():
            return None

        self.session_manager.add_turn("user", content)

        try:
            reply, used_fallback = await self._generate_reply()
        except Exception as e:
            logger.error("Error generating response: %s", e, exc_info=True)
            reply, used_fallback = catalog.APOLOGY_RESPONSE, True

        turn = self.session_manager.add_turn("assistant", reply)
        return TurnResult(
            turn=turn,
            utterance=speak(reply, self.voice_enabled),
            used_fallback=used_fallback,
        )

    async def _generate_reply(self) -> tuple[str, bool]:
        session = self.session_manager.session
        answers = self.session_manager.answer_count

        if self.agent is None:
            logger.info("Using fallback responses (demo mode)")
            return catalog.fallback_response(answers, session.role), True

        try:
            reply = await self.agent.generate_interview_response(
                self.session_manager.get_session_context()
            )
            return reply, False
        except RateLimitExceededError:
            logger.info("Rate limit exceeded, using fallback responses")
        except InterviewAgentError as e:
            logger.error("Error generating AI response: %s", e)
        except Exception as e:
            logger.error("Unexpected error generating AI response: %s", e, exc_info=True)

        return catalog.fallback_response(answers, session.role), True

    async def end_interview(self) -> FeedbackReport:
        """
        End the interview, generate feedback and persist the summary.

        Calling this again after feedback exists returns the same report.
        Overlapping calls wait for the first one and share its report.

        Raises:
            ValueError: If no interview has been started.
        """
        if self.session is None:
            raise ValueError("No active session. Start an interview first.")

        async with self._end_lock:
            if self.report is not None:
                return self.report

            self.speech.stop()
            self.session_manager.end_session()
            self.phase = InterviewPhase.GENERATING_FEEDBACK

            self.report = await self.feedback_generator.generate_report(self.session_manager)
            self.phase = InterviewPhase.FEEDBACK
            self._persist_summary()
            return self.report

    def _persist_summary(self) -> None:
        if self.summary_writer is None or self.report is None:
            return

        session = self.session
        summary = SessionSummary.from_session(
            session,
            self.report,
            role_label=catalog.role_label(session.role),
            level_label=catalog.level_display_label(session.level),
            has_recording=self.recording is not None,
        )
        try:
            self.summary_path = self.summary_writer.write_summary(summary)
            self.persisted = True
        except OutputWriteError as e:
            logger.error("Failed to persist summary for %s: %s", session.session_id, e)
            self.persisted = False

    def review_interview(self) -> None:
        """Go back from the feedback screen to the transcript."""
        if self.phase != InterviewPhase.FEEDBACK:
            raise ValueError("Feedback is not available yet.")
        self.phase = InterviewPhase.REVIEW

    async def reset(self) -> None:
        """Discard the interview, its feedback and its recording."""
        session_id = self.session.session_id if self.session else None
        self.speech.cancel()
        if session_id:
            await self.delete_recording()
        self.session_manager.clear()
        self.report = None
        self.persisted = False
        self.summary_path = None
        self.phase = InterviewPhase.SETUP
        logger.info("Interview reset%s", f" (was {session_id})" if session_id else "")

    # -------------------------------------------------------------------------
    # Speech
    # -------------------------------------------------------------------------

    def toggle_listening(self) -> bool:
        return self.speech.toggle()

    def apply_speech_event(self, event: TranscriptEvent) -> str:
        """Feed a recognizer event; returns the current transcription."""
        self.speech.apply_event(event)
        return self.speech.transcribed_text

    async def send_transcribed(self) -> Optional[TurnResult]:
        """Send the transcribed answer, then clear it and stop listening."""
        if not self.speech.transcribed_text.strip():
            return None
        text = self.speech.take_text()
        self.speech.stop()
        return await self.send_message(text)

    def cancel_listening(self) -> None:
        self.speech.cancel()

    def set_voice_enabled(self, enabled: bool) -> None:
        self.voice_enabled = enabled

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def attach_recording(self, info: "RecordingInfo") -> None:
        self.recording = info

    async def delete_recording(self) -> bool:
        """Drop the session's recording from the store, if any."""
        self.recording = None
        if self.recording_store is None or self.session is None:
            return False
        return await self.recording_store.delete(self.session.session_id)
