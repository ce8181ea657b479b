"""
Mock Interview Practice Package.

Runs healthcare mock interviews against an LLM interviewer (OpenAI Agents
SDK), with predefined fallback questions and feedback when the LLM is not
configured or fails.

Components:
    - InterviewSimulator: Session state machine (greeting, turns, feedback, persistence)
    - InterviewSessionManager: Holds the conversation transcript
    - InterviewerAgent: LLM interviewer and answer evaluator
    - FeedbackGenerator: Per-question ratings and overall feedback
    - SpeechCapture: Speech recognition buffer; speak() builds TTS requests
    - RecordingStore: Stores uploaded webm recordings
    - SessionSummaryWriter: Persists session summaries to JSON documents
    - Models: Pydantic models for turns, sessions, feedback and summaries

Example:
    >>> from mock_interview import InterviewSimulator
    >>>
    >>> simulator = InterviewSimulator()  # demo mode, no LLM
    >>> greeting = await simulator.start_interview("nurse", "entry")
    >>> reply = await simulator.send_message("I want to care for people.")
    >>> report = await simulator.end_interview()
    >>> print(report.stats.average_rating)

Last Grunted: 10/19/2026
"""

from .models import (
    ConversationTurn,
    InterviewSession,
    QuestionFeedback,
    FeedbackStats,
    FeedbackReport,
    SessionSummary,
    TranscriptEvent,
    SpeechUtterance,
)

from .config import LLMSettings, RuntimeConfig, load_runtime_config

from .session import InterviewSessionManager

from .output import SessionSummaryWriter, OutputReadError, OutputWriteError

from .recording import RecordingInfo, RecordingStore

from .speech import SpeechCapture, speak

from .agent import (
    InterviewAgentError,
    InterviewerAgent,
    LLMResponseError,
    RateLimitExceededError,
    create_interviewer_agent,
)

from .feedback import FeedbackGenerator

from .simulator import InterviewPhase, InterviewSimulator, TurnResult


__all__ = [
    # Models
    "ConversationTurn",
    "InterviewSession",
    "QuestionFeedback",
    "FeedbackStats",
    "FeedbackReport",
    "SessionSummary",
    "TranscriptEvent",
    "SpeechUtterance",
    # Config
    "LLMSettings",
    "RuntimeConfig",
    "load_runtime_config",
    # Session management
    "InterviewSessionManager",
    # Persistence
    "SessionSummaryWriter",
    "OutputReadError",
    "OutputWriteError",
    "RecordingInfo",
    "RecordingStore",
    # Speech
    "SpeechCapture",
    "speak",
    # Agent
    "InterviewAgentError",
    "InterviewerAgent",
    "LLMResponseError",
    "RateLimitExceededError",
    "create_interviewer_agent",
    # Feedback
    "FeedbackGenerator",
    # Simulator
    "InterviewPhase",
    "InterviewSimulator",
    "TurnResult",
]

__version__ = "0.1.0"
