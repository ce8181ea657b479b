"""
Pydantic models for the Mock Interview simulator.

Defines conversation turns, interview sessions, per-question feedback,
the persisted session summary, and the speech events/utterances exchanged
with the browser.

Last Grunted: 10/19/2026
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field


def utc_timestamp() -> str:
    """Return the current UTC time as ISO 8601 with a 'Z' suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


TurnRole = Literal["user", "assistant"]


class ConversationTurn(BaseModel):
    """
    One message in the interview transcript.

    ``user`` turns are candidate answers, ``assistant`` turns are the
    interviewer's questions and reactions.
    """
    turn_id: str = Field(..., description="Identifier unique within the session")
    role: TurnRole = Field(..., description="'user' (candidate) or 'assistant' (interviewer)")
    content: str = Field(..., description="Message text")
    timestamp_utc: str = Field(
        default_factory=utc_timestamp,
        description="ISO 8601 UTC timestamp when the turn was recorded"
    )


class InterviewSession(BaseModel):
    """
    An interview in progress (or just finished).

    Example:
        >>> session = InterviewSession(
        ...     session_id="mi_20261019_103000_a1b2c3",
        ...     role="nurse",
        ...     level="entry",
        ...     started_at="2026-10-19T10:30:00.000Z"
        ... )
    """
    session_id: str = Field(..., description="Unique session identifier")
    user_id: str = Field(default="anonymous", description="Owner of the session")
    role: str = Field(..., description="Role key, e.g. 'nurse'")
    level: str = Field(..., description="Level key, e.g. 'entry'")
    turns: list[ConversationTurn] = Field(
        default_factory=list,
        description="Ordered conversation transcript"
    )
    started_at: str = Field(..., description="ISO 8601 UTC timestamp when session started")
    ended_at: Optional[str] = Field(default=None, description="ISO 8601 UTC timestamp when session ended")
    is_active: bool = Field(default=True, description="False once the interview has been ended")


class QuestionFeedback(BaseModel):
    """
    Evaluation of a single candidate answer.

    Ratings use a 1-5 scale (1=Poor, 2=Below Average, 3=Average,
    4=Good, 5=Excellent).
    """
    question: str = Field(..., description="The interviewer question")
    user_answer: str = Field(..., description="The candidate's answer")
    expected_answer: str = Field(..., description="What an ideal answer should include")
    rating: int = Field(..., ge=1, le=5, description="Answer rating from 1 to 5")
    feedback: str = Field(..., description="Specific feedback on the answer")
    category: str = Field(..., description="Skill category the question targets")


class FeedbackStats(BaseModel):
    """Summary statistics over a list of question feedback."""
    average_rating: Optional[float] = Field(
        default=None,
        description="Mean rating rounded to one decimal, None when nothing was rated"
    )
    strong_answers: int = Field(default=0, description="Answers rated 4 or higher")
    needs_improvement: int = Field(default=0, description="Answers rated 3 or lower")
    total_questions: int = Field(default=0, description="Number of answers evaluated")

    @classmethod
    def from_feedback(cls, items: list[QuestionFeedback]) -> "FeedbackStats":
        if not items:
            return cls()
        return cls(
            average_rating=round(sum(i.rating for i in items) / len(items), 1),
            strong_answers=sum(1 for i in items if i.rating >= 4),
            needs_improvement=sum(1 for i in items if i.rating <= 3),
            total_questions=len(items),
        )


class FeedbackReport(BaseModel):
    """
    Feedback produced when an interview ends.

    ``used_fallback`` is True when the sample feedback tables were used
    instead of the LLM (demo mode or generation failure).
    """
    overall_feedback: str = Field(..., description="Narrative feedback for the whole interview")
    question_feedback: list[QuestionFeedback] = Field(
        default_factory=list,
        description="Per-question evaluations in answer order"
    )
    used_fallback: bool = Field(default=False, description="Whether fallback content was used")
    generated_at: str = Field(default_factory=utc_timestamp)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stats(self) -> FeedbackStats:
        return FeedbackStats.from_feedback(self.question_feedback)


class SessionSummary(BaseModel):
    """
    Persisted record of a completed interview.

    One document per session, written by SessionSummaryWriter and read
    back for the dashboard.
    """
    session_id: str = Field(..., description="Session this summary belongs to")
    user_id: str = Field(default="anonymous", description="Owner of the session")
    role: str = Field(..., description="Role key")
    role_label: str = Field(..., description="Human role label")
    level: str = Field(..., description="Level key")
    level_label: str = Field(..., description="Human level label")
    started_at: str = Field(..., description="Session start timestamp")
    ended_at: Optional[str] = Field(default=None, description="Session end timestamp")
    turns: list[ConversationTurn] = Field(default_factory=list)
    overall_feedback: str = Field(default="")
    question_feedback: list[QuestionFeedback] = Field(default_factory=list)
    used_fallback: bool = Field(default=False)
    average_rating: Optional[float] = Field(default=None)
    strong_answers: int = Field(default=0)
    needs_improvement: int = Field(default=0)
    total_questions: int = Field(default=0)
    has_recording: bool = Field(default=False)

    @classmethod
    def from_session(
        cls,
        session: InterviewSession,
        report: FeedbackReport,
        role_label: str,
        level_label: str,
        has_recording: bool = False,
    ) -> "SessionSummary":
        stats = report.stats
        return cls(
            session_id=session.session_id,
            user_id=session.user_id,
            role=session.role,
            role_label=role_label,
            level=session.level,
            level_label=level_label,
            started_at=session.started_at,
            ended_at=session.ended_at,
            turns=list(session.turns),
            overall_feedback=report.overall_feedback,
            question_feedback=list(report.question_feedback),
            used_fallback=report.used_fallback,
            average_rating=stats.average_rating,
            strong_answers=stats.strong_answers,
            needs_improvement=stats.needs_improvement,
            total_questions=stats.total_questions,
            has_recording=has_recording,
        )


class TranscriptEvent(BaseModel):
    """
    Speech recognition event forwarded by the browser.

    Event Types:
        - "partial": Interim recognition result (still processing)
        - "final": Completed recognition result
        - "session_started": Recognition began listening
        - "session_stopped": Recognition ended
        - "error": Recognition error occurred (see ``error``)

    Example:
        >>> event = TranscriptEvent(
        ...     event_type="final",
        ...     text="I chose nursing because...",
        ...     confidence=0.93
        ... )
    """
    event_type: Literal["partial", "final", "session_started", "session_stopped", "error"] = Field(
        ...,
        description="Event type: 'partial', 'final', 'session_started', 'session_stopped', 'error'"
    )
    text: Optional[str] = Field(
        default=None,
        description="Transcript text content (null for status events)"
    )
    timestamp_utc: str = Field(
        default_factory=utc_timestamp,
        description="ISO 8601 UTC timestamp when event occurred"
    )
    confidence: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Recognition confidence score (0.0 to 1.0)"
    )
    error: Optional[str] = Field(
        default=None,
        description="Recognition error code, e.g. 'not-allowed', 'no-speech'"
    )


class SpeechUtterance(BaseModel):
    """Text-to-speech request for the interviewer's voice."""
    text: str
    lang: str = Field(default="en", description="Voice language prefix")
    rate: float = Field(default=0.9, gt=0.0, description="Speaking rate, slightly slower than normal")
    pitch: float = Field(default=1.0, ge=0.0, le=2.0)
    volume: float = Field(default=0.8, ge=0.0, le=1.0)
