"""
Interview Session Manager.

Holds the single mutable conversation transcript for a mock interview:
starts the session with the interviewer's greeting, appends turns, and
produces the context handed to the LLM layer.

Thread Safety:
    This class is NOT thread-safe. Use a single instance per task; the
    simulator mutates it from one logical thread of control at a time.

Last Grunted: 10/19/2026
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from . import catalog
from .models import ConversationTurn, InterviewSession


__all__ = ["InterviewSessionManager"]


logger = logging.getLogger(__name__)


def _format_utc_timestamp(dt: datetime) -> str:
    """
    Format a datetime as ISO 8601 UTC string with 'Z' suffix.

    Args:
        dt: A datetime object (should be timezone-aware UTC).

    Returns:
        ISO 8601 formatted string ending with 'Z'.
    """
    return dt.isoformat().replace("+00:00", "Z")


class InterviewSessionManager:
    """
    Manages an interview session's state and transcript history.

    Responsibilities:
        - Initialize sessions with role/level and the opening greeting
        - Accumulate candidate and interviewer turns
        - Pair questions with answers for feedback generation
        - Generate context for the LLM layer

    Example:
        >>> manager = InterviewSessionManager()
        >>> manager.start_session("nurse", "entry")
        >>> manager.add_turn("user", "I have always wanted to help people.")
        >>> context = manager.get_session_context()
    """

    def __init__(self) -> None:
        """Initialize the session manager without an active session."""
        self._session: Optional[InterviewSession] = None
        self._turn_counter = 0
        logger.debug("InterviewSessionManager initialized")

    @property
    def session(self) -> Optional[InterviewSession]:
        """Get the current session, if any (may already be ended)."""
        return self._session

    @property
    def is_active(self) -> bool:
        """Check if there is an active session."""
        return self._session is not None and self._session.is_active

    def start_session(
        self,
        role: str,
        level: str,
        user_id: str = "anonymous",
    ) -> InterviewSession:
        """
        Initialize a new interview session.

        Creates a new session with a unique ID and seeds the transcript
        with the interviewer's greeting. Any existing session is implicitly
        ended.

        Args:
            role: Role key (e.g. "nurse").
            level: Level key (e.g. "entry").
            user_id: Owner of the session.

        Returns:
            The newly created InterviewSession.

        Raises:
            ValueError: If role or level is not in the catalog.
        """
        role = catalog.validate_role(role)
        level = catalog.validate_level(level)

        if self._session is not None and self._session.is_active:
            logger.info("Ending existing session before starting new one")
            self.end_session()

        timestamp = datetime.now(timezone.utc)
        session_id = f"mi_{timestamp.strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"

        self._session = InterviewSession(
            session_id=session_id,
            user_id=(user_id or "").strip() or "anonymous",
            role=role,
            level=level,
            started_at=_format_utc_timestamp(timestamp),
        )
        self._turn_counter = 0
        self.add_turn("assistant", catalog.initial_greeting(role, level))

        logger.info(
            "Started session %s (%s, %s) for user '%s'",
            session_id,
            role,
            level,
            self._session.user_id,
        )
        return self._session

    def end_session(self) -> Optional[InterviewSession]:
        """
        End the current session.

        Marks the session inactive with the current timestamp. The session
        stays retrievable for feedback and review.

        Returns:
            The ended session, or None if no session exists.
        """
        if self._session is None:
            logger.debug("end_session called but no session")
            return None

        if self._session.is_active:
            self._session.is_active = False
            self._session.ended_at = _format_utc_timestamp(datetime.now(timezone.utc))
            logger.info(
                "Ended session %s (total turns: %d)",
                self._session.session_id,
                len(self._session.turns),
            )
        return self._session

    def clear(self) -> None:
        """Forget the current session entirely."""
        self._session = None
        self._turn_counter = 0

    def add_turn(self, role: str, content: str) -> ConversationTurn:
        """
        Append a turn to the transcript.

        Args:
            role: "user" for the candidate, "assistant" for the interviewer.
            content: Message text (stored trimmed).

        Returns:
            The stored ConversationTurn.

        Raises:
            ValueError: If no session exists or role is invalid.
        """
        if self._session is None:
            raise ValueError("No active session. Call start_session() first.")

        valid_roles = {"user", "assistant"}
        if role not in valid_roles:
            raise ValueError(f"Invalid role '{role}'. Must be one of: {valid_roles}")

        self._turn_counter += 1
        turn = ConversationTurn(
            turn_id=str(self._turn_counter),
            role=role,
            content=content.strip(),
        )
        self._session.turns.append(turn)
        logger.debug("Added %s turn %s (len=%d)", role, turn.turn_id, len(turn.content))
        return turn

    @property
    def user_turns(self) -> list[ConversationTurn]:
        if self._session is None:
            return []
        return [t for t in self._session.turns if t.role == "user"]

    @property
    def assistant_turns(self) -> list[ConversationTurn]:
        if self._session is None:
            return []
        return [t for t in self._session.turns if t.role == "assistant"]

    @property
    def answer_count(self) -> int:
        """Number of candidate answers recorded so far."""
        return len(self.user_turns)

    def question_answer_pairs(self) -> list[tuple[str, str]]:
        """
        Pair each candidate answer with the interviewer message it follows.

        The i-th answer is paired with the i-th interviewer message; the
        greeting is the first question.

        Returns:
            List of (question, answer) tuples in answer order.
        """
        questions = self.assistant_turns
        pairs = []
        for index, answer in enumerate(self.user_turns):
            question = (
                questions[index].content
                if index < len(questions)
                else catalog.DEFAULT_QUESTION_TEXT
            )
            pairs.append((question, answer.content))
        return pairs

    def get_session_context(self) -> dict:
        """
        Generate the context dictionary for the LLM layer.

        Returns:
            Dictionary with role/level, the full message history as
            ``{"role", "content"}`` dicts, and turn counts.
        """
        if self._session is None:
            return {
                "session_active": False,
                "session_id": None,
                "role": None,
                "level": None,
                "messages": [],
                "answer_count": 0,
            }

        return {
            "session_active": self.is_active,
            "session_id": self._session.session_id,
            "role": self._session.role,
            "level": self._session.level,
            "messages": [
                {"role": turn.role, "content": turn.content}
                for turn in self._session.turns
            ],
            "answer_count": self.answer_count,
        }
