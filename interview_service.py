"""
Mock Interview Service

Hosts the interview simulator for the practice UI. Each interview gets its
own InterviewSimulator; finished interviews are summarized into JSON
documents that back the dashboard.

Endpoints:
    GET    /health                          - Health check
    GET    /stats                           - Statistics
    GET    /catalog                         - Roles, levels, demo mode flag
    GET    /llm/status                      - Test the LLM connection
    POST   /interviews                      - Start an interview (greeting)
    GET    /interviews/{id}                 - Interview state and transcript
    POST   /interviews/{id}/messages        - Send an answer, get the reply
    POST   /interviews/{id}/speech/toggle   - Start/stop listening
    POST   /interviews/{id}/speech/events   - Speech recognition event
    POST   /interviews/{id}/speech/send     - Send the transcribed answer
    POST   /interviews/{id}/speech/cancel   - Discard the transcription
    POST   /interviews/{id}/voice           - Toggle interviewer voice
    POST   /interviews/{id}/end             - End interview, generate feedback
    GET    /interviews/{id}/feedback        - Feedback report
    POST   /interviews/{id}/review          - Back from feedback to transcript
    PUT    /interviews/{id}/recording       - Upload webm recording (raw body)
    GET    /interviews/{id}/recording       - Download recording
    DELETE /interviews/{id}/recording       - Delete recording
    DELETE /interviews/{id}                 - Reset and forget interview
    GET    /users/{user_id}/sessions        - Past session summaries
    GET    /users/{user_id}/stats           - Dashboard statistics

Internal binding: configured by INTERVIEW_HOST/INTERVIEW_PORT (default 0.0.0.0:8765)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Any, AsyncIterator, Optional, TypedDict

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from mock_interview import catalog
from mock_interview.agent import InterviewerAgent, create_interviewer_agent
from mock_interview.config import load_runtime_config
from mock_interview.models import (
    ConversationTurn,
    FeedbackReport,
    SessionSummary,
    SpeechUtterance,
    TranscriptEvent,
)
from mock_interview.output import OutputReadError, SessionSummaryWriter
from mock_interview.recording import RecordingError, RecordingStore
from mock_interview.simulator import InterviewPhase, InterviewSimulator, TurnResult
from mock_interview.speech import RECOGNITION_SETTINGS

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

SERVICE_NAME = "Mock Interview Service"
SERVICE_VERSION = "1.0.0"

RUNTIME_CONFIG = load_runtime_config()

# CORS configuration - modify for production
CORS_ORIGINS: list[str] = [
    "http://localhost:8501",  # Streamlit default
    "http://localhost:3000",  # Common React dev port
]


# =============================================================================
# Request Models
# =============================================================================


class InterviewStartRequest(BaseModel):
    """Request to start a new mock interview."""

    role: str = Field(default=catalog.DEFAULT_ROLE, description="Role key, e.g. 'nurse'")
    level: str = Field(default=catalog.DEFAULT_LEVEL, description="Level key, e.g. 'entry'")
    user_id: str = Field(default="anonymous", min_length=1, description="Owner of the session")
    voice_enabled: bool | None = Field(
        default=None, description="Speak interviewer messages (defaults to VOICE_ENABLED)"
    )


class MessageRequest(BaseModel):
    """Candidate answer typed or pasted by the user."""

    content: str = Field(..., description="Answer text")


class VoiceRequest(BaseModel):
    enabled: bool = Field(..., description="Whether interviewer messages are spoken")


# =============================================================================
# Response Models
# =============================================================================


class BaseResponse(BaseModel):
    """Base response model with common fields."""

    ok: bool = Field(..., description="Whether the operation succeeded")
    message: str | None = Field(default=None, description="Optional status message")


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = Field(default=False)
    error: str = Field(..., description="Error description")
    error_code: str | None = Field(default=None, description="Machine-readable error code")


class TurnResponse(BaseResponse):
    """An interviewer turn produced by the simulator."""

    session_id: str
    turn: ConversationTurn | None = Field(default=None, description="Interviewer message")
    utterance: SpeechUtterance | None = Field(default=None, description="What to speak, if voice is on")
    used_fallback: bool = Field(default=False, description="Whether a predefined question was used")


class InterviewStateResponse(BaseModel):
    """Snapshot of one interview."""

    session_id: str
    user_id: str
    phase: InterviewPhase
    role: str
    role_label: str
    level: str
    level_label: str
    is_active: bool
    started_at: str
    ended_at: str | None = None
    turns: list[ConversationTurn] = Field(default_factory=list)
    voice_enabled: bool
    is_listening: bool
    transcribed_text: str = ""
    has_recording: bool
    demo_mode: bool


class SpeechStateResponse(BaseResponse):
    is_listening: bool
    transcribed_text: str
    error: str | None = Field(default=None, description="User-facing recognition error")


class FeedbackResponse(BaseResponse):
    session_id: str
    report: FeedbackReport
    persisted: bool = Field(..., description="Whether the summary was saved")


class RecordingResponse(BaseResponse):
    session_id: str
    content_type: str
    size_bytes: int


class CatalogResponse(BaseModel):
    roles: list[dict[str, str]]
    levels: list[dict[str, str]]
    demo_mode: bool
    recognition: dict[str, Any]


class LLMStatusResponse(BaseModel):
    configured: bool
    working: bool | None = None
    result: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    timestamp: str = Field(..., description="Current server timestamp")
    demo_mode: bool = Field(..., description="Whether predefined questions are used")
    active_interviews: int = Field(..., description="Interviews held in memory")


class StatsResponse(BaseModel):
    stats: dict[str, Any]
    active_interviews: int
    output_directory: str
    demo_mode: bool


class UserSessionsResponse(BaseModel):
    user_id: str
    sessions: list[SessionSummary]


# =============================================================================
# Application State (Type-safe Lifespan State)
# =============================================================================


class AppStats(TypedDict):
    """Application statistics tracking."""

    interviews_started: int
    interviews_completed: int
    messages_received: int
    fallback_responses: int
    speech_events: int
    recordings_saved: int
    summaries_persisted: int
    started_at: str


class AppState(TypedDict):
    """Type-safe application state managed by lifespan."""

    simulators: dict[str, InterviewSimulator]
    summary_writer: SessionSummaryWriter
    recording_store: RecordingStore
    agent: InterviewerAgent | None
    stats: AppStats


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def get_initial_stats() -> AppStats:
    """Create initial statistics dictionary."""
    return AppStats(
        interviews_started=0,
        interviews_completed=0,
        messages_received=0,
        fallback_responses=0,
        speech_events=0,
        recordings_saved=0,
        summaries_persisted=0,
        started_at=_utc_now(),
    )


# =============================================================================
# Custom Exceptions
# =============================================================================


class InterviewServiceError(Exception):
    """Base exception for interview service errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)


class SessionNotFoundError(InterviewServiceError):
    """Raised when the interview id is unknown."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            message=f"Interview '{session_id}' not found.",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="SESSION_NOT_FOUND",
        )


class SessionNotActiveError(InterviewServiceError):
    """Raised when an operation needs an interview in a different phase."""

    def __init__(self, message: str = "Interview is not in progress.") -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="SESSION_NOT_ACTIVE",
        )


class InvalidRequestError(InterviewServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_REQUEST",
        )


class RecordingNotFoundError(InterviewServiceError):
    def __init__(self, session_id: str) -> None:
        super().__init__(
            message=f"No recording for interview '{session_id}'.",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RECORDING_NOT_FOUND",
        )


# =============================================================================
# Dependencies
# =============================================================================


def get_app_state(request: Request) -> AppState:
    """
    Dependency to retrieve application state from request.

    Raises:
        RuntimeError: If state is not properly initialized.
    """
    state = getattr(request, "state", None)
    if state is None:
        raise RuntimeError("Application state not initialized")
    return AppState(
        simulators=state.simulators,
        summary_writer=state.summary_writer,
        recording_store=state.recording_store,
        agent=state.agent,
        stats=state.stats,
    )


# Type alias for dependency injection
AppStateDep = Annotated[AppState, Depends(get_app_state)]


def get_simulator(state: AppState, session_id: str) -> InterviewSimulator:
    simulator = state["simulators"].get(session_id)
    if simulator is None:
        raise SessionNotFoundError(session_id)
    return simulator


def evict_finished_interviews(state: AppState, limit: int) -> int:
    """
    Drop the oldest finished interviews beyond ``limit``.

    Only interviews whose summary was persisted are dropped; their history
    stays available through the dashboard endpoints.

    Returns:
        Number of interviews removed from memory.
    """
    simulators = state["simulators"]
    finished = [
        session_id
        for session_id, simulator in simulators.items()
        if simulator.persisted
        and simulator.phase in (InterviewPhase.FEEDBACK, InterviewPhase.REVIEW)
    ]
    evicted = finished[: max(len(finished) - limit, 0)]
    for session_id in evicted:
        del simulators[session_id]
    if evicted:
        logger.info("Evicted %d finished interviews from memory", len(evicted))
    return len(evicted)


def build_state_response(simulator: InterviewSimulator) -> InterviewStateResponse:
    session = simulator.session
    return InterviewStateResponse(
        session_id=session.session_id,
        user_id=session.user_id,
        phase=simulator.phase,
        role=session.role,
        role_label=catalog.role_label(session.role),
        level=session.level,
        level_label=catalog.level_display_label(session.level),
        is_active=session.is_active,
        started_at=session.started_at,
        ended_at=session.ended_at,
        turns=list(session.turns),
        voice_enabled=simulator.voice_enabled,
        is_listening=simulator.speech.is_listening,
        transcribed_text=simulator.speech.transcribed_text,
        has_recording=simulator.recording is not None,
        demo_mode=simulator.demo_mode,
    )


def build_turn_response(
    session_id: str,
    result: Optional[TurnResult],
    stats: AppStats,
) -> TurnResponse:
    if result is None:
        return TurnResponse(ok=False, message="Message ignored", session_id=session_id)
    if result.used_fallback:
        stats["fallback_responses"] += 1
    return TurnResponse(
        ok=True,
        session_id=session_id,
        turn=result.turn,
        utterance=result.utterance,
        used_fallback=result.used_fallback,
    )


def build_speech_response(simulator: InterviewSimulator) -> SpeechStateResponse:
    return SpeechStateResponse(
        ok=True,
        is_listening=simulator.speech.is_listening,
        transcribed_text=simulator.speech.transcribed_text,
        error=simulator.speech.error_message,
    )


# =============================================================================
# Exception Handlers
# =============================================================================


async def interview_service_error_handler(
    request: Request, exc: InterviewServiceError
) -> JSONResponse:
    """Handle InterviewServiceError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            ok=False,
            error=exc.message,
            error_code=exc.error_code,
        ).model_dump(),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            ok=False,
            error="Internal server error",
            error_code="INTERNAL_ERROR",
        ).model_dump(),
    )


# =============================================================================
# FastAPI App Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[dict[str, Any]]:
    """
    Manage application lifespan with type-safe state.

    Initializes the summary writer, recording store and (when configured)
    the LLM agent shared by all interviews.
    """
    logger.info("Starting %s v%s", SERVICE_NAME, SERVICE_VERSION)

    summary_writer = SessionSummaryWriter(RUNTIME_CONFIG.output_dir)
    recording_store = RecordingStore(RUNTIME_CONFIG.recording_dir)
    logger.info("Summary output directory: %s", RUNTIME_CONFIG.output_dir)
    logger.info("Recording directory: %s", RUNTIME_CONFIG.recording_dir)

    agent = create_interviewer_agent(RUNTIME_CONFIG)
    logger.info(
        "Mode: %s",
        "AI powered (%s)" % RUNTIME_CONFIG.llm.model if agent else "Demo (predefined questions)",
    )

    state = {
        "simulators": {},
        "summary_writer": summary_writer,
        "recording_store": recording_store,
        "agent": agent,
        "stats": get_initial_stats(),
    }

    yield state

    logger.info("Shutting down (%d interviews in memory)", len(state["simulators"]))


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title=SERVICE_NAME,
    version=SERVICE_VERSION,
    description="Mock interview practice with an LLM interviewer and end-of-interview feedback",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    max_age=3600,
)

app.add_exception_handler(InterviewServiceError, interview_service_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)


# =============================================================================
# Service Endpoints
# =============================================================================


@app.get("/health", response_model=HealthResponse)
async def health(state: AppStateDep) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        timestamp=_utc_now(),
        demo_mode=state["agent"] is None,
        active_interviews=len(state["simulators"]),
    )


@app.get("/stats", response_model=StatsResponse)
async def get_stats(state: AppStateDep) -> StatsResponse:
    return StatsResponse(
        stats=dict(state["stats"]),
        active_interviews=len(state["simulators"]),
        output_directory=str(RUNTIME_CONFIG.output_dir),
        demo_mode=state["agent"] is None,
    )


@app.get("/catalog", response_model=CatalogResponse)
async def get_catalog(state: AppStateDep) -> CatalogResponse:
    """Role and level options for the setup screen."""
    return CatalogResponse(
        roles=[
            {"value": key, "label": label}
            for key, label in catalog.ROLE_LABELS.items()
        ],
        levels=[
            {"value": key, "label": label}
            for key, label in catalog.LEVEL_DISPLAY_LABELS.items()
        ],
        demo_mode=state["agent"] is None,
        recognition=dict(RECOGNITION_SETTINGS),
    )


@app.get("/llm/status", response_model=LLMStatusResponse)
async def llm_status(state: AppStateDep) -> LLMStatusResponse:
    """Run the LLM connection test."""
    agent = state["agent"]
    if agent is None:
        if RUNTIME_CONFIG.llm.configured:
            return LLMStatusResponse(configured=True, result="Demo mode enabled")
        return LLMStatusResponse(configured=False, result="No API key configured")

    working = await agent.check_connection(timeout=RUNTIME_CONFIG.connection_timeout)
    return LLMStatusResponse(
        configured=True,
        working=working,
        result="API is working" if working else "API test failed",
    )


# =============================================================================
# Interview Endpoints
# =============================================================================


@app.post("/interviews", response_model=TurnResponse)
async def start_interview(
    request: InterviewStartRequest,
    state: AppStateDep,
) -> TurnResponse:
    """
    Start a new interview.

    Returns:
        TurnResponse with the interviewer's greeting.

    Raises:
        InvalidRequestError: If role or level is unknown.
    """
    voice_enabled = (
        RUNTIME_CONFIG.voice_enabled if request.voice_enabled is None else request.voice_enabled
    )
    simulator = InterviewSimulator(
        agent=state["agent"],
        summary_writer=state["summary_writer"],
        recording_store=state["recording_store"],
        voice_enabled=voice_enabled,
    )
    try:
        result = await simulator.start_interview(request.role, request.level, request.user_id)
    except ValueError as e:
        raise InvalidRequestError(str(e)) from e

    evict_finished_interviews(state, RUNTIME_CONFIG.max_finished_interviews)
    session_id = simulator.session.session_id
    state["simulators"][session_id] = simulator
    state["stats"]["interviews_started"] += 1

    return TurnResponse(
        ok=True,
        message="Interview started",
        session_id=session_id,
        turn=result.turn,
        utterance=result.utterance,
    )


@app.get("/interviews/{session_id}", response_model=InterviewStateResponse)
async def get_interview(session_id: str, state: AppStateDep) -> InterviewStateResponse:
    return build_state_response(get_simulator(state, session_id))


@app.post("/interviews/{session_id}/messages", response_model=TurnResponse)
async def send_message(
    session_id: str,
    request: MessageRequest,
    state: AppStateDep,
) -> TurnResponse:
    """
    Send a candidate answer and get the interviewer's reply.

    Raises:
        SessionNotActiveError: If the interview has already ended.
    """
    simulator = get_simulator(state, session_id)
    if simulator.phase != InterviewPhase.IN_PROGRESS:
        raise SessionNotActiveError()

    result = await simulator.send_message(request.content)
    if result is not None:
        state["stats"]["messages_received"] += 1
    return build_turn_response(session_id, result, state["stats"])


@app.post("/interviews/{session_id}/speech/toggle", response_model=SpeechStateResponse)
async def toggle_speech(session_id: str, state: AppStateDep) -> SpeechStateResponse:
    simulator = get_simulator(state, session_id)
    if simulator.phase != InterviewPhase.IN_PROGRESS:
        raise SessionNotActiveError()
    simulator.toggle_listening()
    return build_speech_response(simulator)


@app.post("/interviews/{session_id}/speech/events", response_model=SpeechStateResponse)
async def speech_event(
    session_id: str,
    event: TranscriptEvent,
    state: AppStateDep,
) -> SpeechStateResponse:
    """
    Receive a speech recognition event from the browser.

    Event format:
        {
            "event_type": "partial" | "final" | "session_started" | "session_stopped" | "error",
            "text": "transcript text",
            "confidence": 0.93,
            "error": "not-allowed"
        }

    Raises:
        SessionNotActiveError: If the interview is not in progress.
    """
    simulator = get_simulator(state, session_id)
    if simulator.phase != InterviewPhase.IN_PROGRESS:
        raise SessionNotActiveError()
    simulator.apply_speech_event(event)
    state["stats"]["speech_events"] += 1
    return build_speech_response(simulator)


@app.post("/interviews/{session_id}/speech/send", response_model=TurnResponse)
async def send_transcribed(session_id: str, state: AppStateDep) -> TurnResponse:
    simulator = get_simulator(state, session_id)
    if simulator.phase != InterviewPhase.IN_PROGRESS:
        raise SessionNotActiveError()

    result = await simulator.send_transcribed()
    if result is not None:
        state["stats"]["messages_received"] += 1
    return build_turn_response(session_id, result, state["stats"])


@app.post("/interviews/{session_id}/speech/cancel", response_model=SpeechStateResponse)
async def cancel_speech(session_id: str, state: AppStateDep) -> SpeechStateResponse:
    simulator = get_simulator(state, session_id)
    simulator.cancel_listening()
    return build_speech_response(simulator)


@app.post("/interviews/{session_id}/voice", response_model=InterviewStateResponse)
async def set_voice(
    session_id: str,
    request: VoiceRequest,
    state: AppStateDep,
) -> InterviewStateResponse:
    simulator = get_simulator(state, session_id)
    simulator.set_voice_enabled(request.enabled)
    return build_state_response(simulator)


@app.post("/interviews/{session_id}/end", response_model=FeedbackResponse)
async def end_interview(session_id: str, state: AppStateDep) -> FeedbackResponse:
    """
    End the interview and generate feedback.

    Per-question evaluations run concurrently; the summary is persisted
    once the report is ready.
    """
    simulator = get_simulator(state, session_id)
    # Later or overlapping calls see generating_feedback/feedback and share the first report.
    first_end = simulator.phase == InterviewPhase.IN_PROGRESS

    try:
        report = await simulator.end_interview()
    except ValueError as e:
        raise SessionNotActiveError(str(e)) from e

    if first_end:
        state["stats"]["interviews_completed"] += 1
        if simulator.persisted:
            state["stats"]["summaries_persisted"] += 1

    return FeedbackResponse(
        ok=True,
        message="Interview ended",
        session_id=session_id,
        report=report,
        persisted=simulator.persisted,
    )


@app.get("/interviews/{session_id}/feedback", response_model=FeedbackResponse)
async def get_feedback(session_id: str, state: AppStateDep) -> FeedbackResponse:
    simulator = get_simulator(state, session_id)
    if simulator.report is None:
        raise SessionNotActiveError("Feedback is not available until the interview ends.")
    return FeedbackResponse(
        ok=True,
        session_id=session_id,
        report=simulator.report,
        persisted=simulator.persisted,
    )


@app.post("/interviews/{session_id}/review", response_model=InterviewStateResponse)
async def review_interview(session_id: str, state: AppStateDep) -> InterviewStateResponse:
    simulator = get_simulator(state, session_id)
    try:
        simulator.review_interview()
    except ValueError as e:
        raise SessionNotActiveError(str(e)) from e
    return build_state_response(simulator)


@app.delete("/interviews/{session_id}", response_model=BaseResponse)
async def reset_interview(session_id: str, state: AppStateDep) -> BaseResponse:
    """Reset the interview (drops recording) and forget it."""
    simulator = get_simulator(state, session_id)
    await simulator.reset()
    del state["simulators"][session_id]
    return BaseResponse(ok=True, message="Interview reset")


# =============================================================================
# Recording Endpoints
# =============================================================================


@app.put("/interviews/{session_id}/recording", response_model=RecordingResponse)
async def upload_recording(
    session_id: str,
    http_request: Request,
    state: AppStateDep,
) -> RecordingResponse:
    """
    Store the webm blob recorded in the browser.

    Body is the raw recording; Content-Type must be video/webm or audio/webm.
    """
    simulator = get_simulator(state, session_id)
    data = await http_request.body()
    content_type = http_request.headers.get("content-type", "")

    try:
        info = await state["recording_store"].save(session_id, data, content_type)
    except ValueError as e:
        raise InvalidRequestError(str(e)) from e
    except RecordingError as e:
        logger.error("Recording upload failed: %s", e)
        raise InterviewServiceError(
            message="Failed to store recording",
            error_code="RECORDING_WRITE_FAILED",
        ) from e

    simulator.attach_recording(info)
    state["stats"]["recordings_saved"] += 1
    return RecordingResponse(
        ok=True,
        session_id=session_id,
        content_type=info.content_type,
        size_bytes=info.size_bytes,
    )


@app.get("/interviews/{session_id}/recording")
async def download_recording(session_id: str, state: AppStateDep) -> Response:
    simulator = get_simulator(state, session_id)
    if simulator.recording is None:
        raise RecordingNotFoundError(session_id)

    data = await state["recording_store"].load(session_id)
    if data is None:
        raise RecordingNotFoundError(session_id)
    return Response(content=data, media_type=simulator.recording.content_type)


@app.delete("/interviews/{session_id}/recording", response_model=BaseResponse)
async def delete_recording(session_id: str, state: AppStateDep) -> BaseResponse:
    simulator = get_simulator(state, session_id)
    deleted = await simulator.delete_recording()
    if not deleted:
        raise RecordingNotFoundError(session_id)
    return BaseResponse(ok=True, message="Recording deleted")


# =============================================================================
# Dashboard Endpoints
# =============================================================================


@app.get("/users/{user_id}/sessions", response_model=UserSessionsResponse)
async def list_user_sessions(user_id: str, state: AppStateDep) -> UserSessionsResponse:
    """Past interview summaries for a user, newest first."""
    return UserSessionsResponse(
        user_id=user_id,
        sessions=state["summary_writer"].list_summaries(user_id),
    )


@app.get("/users/{user_id}/sessions/{session_id}", response_model=SessionSummary)
async def get_user_session(
    user_id: str,
    session_id: str,
    state: AppStateDep,
) -> SessionSummary:
    try:
        summary = state["summary_writer"].load_summary(session_id)
    except OutputReadError as e:
        logger.error("Failed to read summary %s: %s", session_id, e)
        raise InterviewServiceError(
            message="Failed to read session summary",
            error_code="SUMMARY_READ_FAILED",
        ) from e
    if summary is None or summary.user_id != user_id:
        raise SessionNotFoundError(session_id)
    return summary


@app.get("/users/{user_id}/stats")
async def get_user_stats(user_id: str, state: AppStateDep) -> dict[str, Any]:
    return state["summary_writer"].get_user_stats(user_id)


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    logger.info("=" * 60)
    logger.info("%s v%s", SERVICE_NAME, SERVICE_VERSION)
    logger.info("=" * 60)
    logger.info("Binding to: http://%s:%d", RUNTIME_CONFIG.host, RUNTIME_CONFIG.port)
    logger.info("Summaries: %s", RUNTIME_CONFIG.output_dir)
    logger.info("Recordings: %s", RUNTIME_CONFIG.recording_dir)
    logger.info("LLM provider: %s", RUNTIME_CONFIG.llm.provider)
    logger.info("Demo mode: %s", not RUNTIME_CONFIG.llm_enabled)
    logger.info("=" * 60)

    uvicorn.run(
        app,
        host=RUNTIME_CONFIG.host,
        port=RUNTIME_CONFIG.port,
        log_level="info",
    )
