"""
Session Summary Writer.

Persists completed interview summaries as one JSON document per session
and reads them back for the dashboard (history and per-user stats).

Thread Safety:
    Each write replaces the whole document. Concurrent writers for the same
    session need external locking.

Last Grunted: 10/19/2026
"""

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from .models import SessionSummary


__all__ = ["SessionSummaryWriter", "OutputWriteError", "OutputReadError"]


logger = logging.getLogger(__name__)


SUMMARY_FORMAT_VERSION = "1.0"


class OutputWriteError(Exception):
    """Raised when writing a summary fails."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write to {path}: {cause}")


class OutputReadError(Exception):
    """Raised when reading a summary fails."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to read from {path}: {cause}")


def _format_utc_timestamp() -> str:
    """Return current UTC timestamp as ISO 8601 string with 'Z' suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SessionSummaryWriter:
    """
    Writes interview session summaries to JSON files.

    Output files are named: {session_id}_summary.json

    Example:
        >>> writer = SessionSummaryWriter(Path("./output"))
        >>> writer.write_summary(summary)
        >>> writer.get_user_stats("user_42")
    """

    def __init__(self, output_dir: Path) -> None:
        """
        Initialize the summary writer.

        Args:
            output_dir: Directory where summary JSON files will be written.
                       Created if it doesn't exist.
        """
        self.output_dir = Path(output_dir)
        self._ensure_output_dir()

    def _ensure_output_dir(self) -> None:
        """
        Create output directory if it doesn't exist.

        Raises:
            OutputWriteError: If directory creation fails.
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            logger.debug("Output directory ready: %s", self.output_dir)
        except OSError as e:
            raise OutputWriteError(self.output_dir, e) from e

    def _get_output_path(self, session_id: str) -> Path:
        """Get the output file path for a session."""
        return self.output_dir / f"{session_id}_summary.json"

    def write_summary(self, summary: SessionSummary) -> Path:
        """
        Write a session summary, overwriting any existing document.

        Args:
            summary: The SessionSummary to persist.

        Returns:
            Path to the written file.

        Raises:
            OutputWriteError: If file write fails.
        """
        output_path = self._get_output_path(summary.session_id)

        data = summary.model_dump()
        data["_meta"] = {
            "written_at": _format_utc_timestamp(),
            "version": SUMMARY_FORMAT_VERSION,
        }

        try:
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise OutputWriteError(output_path, e) from e

        logger.info("Wrote session summary to %s", output_path)
        return output_path

    def _read_path(self, path: Path) -> SessionSummary:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise OutputReadError(path, e) from e
        except OSError as e:
            raise OutputReadError(path, e) from e

        if not isinstance(data, dict):
            raise OutputReadError(path, TypeError("summary document must be a JSON object"))

        # Remove metadata before parsing
        data.pop("_meta", None)

        try:
            return SessionSummary.model_validate(data)
        except ValidationError as e:
            raise OutputReadError(path, e) from e

    def load_summary(self, session_id: str) -> Optional[SessionSummary]:
        """
        Load an existing summary from file.

        Returns:
            SessionSummary if file exists, None otherwise.

        Raises:
            OutputReadError: If file read fails or contains invalid JSON/data.
        """
        output_path = self._get_output_path(session_id)

        if not output_path.exists():
            logger.debug("No summary file found for session %s", session_id)
            return None

        return self._read_path(output_path)

    def list_sessions(self, user_id: Optional[str] = None) -> list[str]:
        """
        List session IDs with summary files.

        Args:
            user_id: When given, only sessions owned by this user.

        Returns:
            Sorted list of session IDs.
        """
        self._ensure_output_dir()

        if user_id is not None:
            return sorted(s.session_id for s in self.list_summaries(user_id))

        return sorted(
            path.name[: -len("_summary.json")]
            for path in self.output_dir.glob("*_summary.json")
        )

    def list_summaries(self, user_id: str) -> list[SessionSummary]:
        """
        Load all summaries owned by a user, newest first.

        Unreadable documents are skipped with a warning so one corrupt file
        doesn't hide the rest of the history.
        """
        self._ensure_output_dir()

        summaries = []
        for path in self.output_dir.glob("*_summary.json"):
            try:
                summary = self._read_path(path)
            except OutputReadError as e:
                logger.warning("Skipping unreadable summary %s: %s", path.name, e.cause)
                continue
            if summary.user_id == user_id:
                summaries.append(summary)

        return sorted(summaries, key=lambda s: s.started_at, reverse=True)

    def delete_summary(self, session_id: str) -> bool:
        """
        Delete a summary file.

        Returns:
            True if file was deleted, False if it didn't exist.

        Raises:
            OutputWriteError: If file deletion fails due to permissions or other OS error.
        """
        output_path = self._get_output_path(session_id)

        if not output_path.exists():
            logger.debug("No summary file to delete for session %s", session_id)
            return False

        try:
            output_path.unlink()
            logger.info("Deleted summary file for session %s", session_id)
            return True
        except OSError as e:
            raise OutputWriteError(output_path, e) from e

    def get_user_stats(self, user_id: str) -> dict[str, Any]:
        """
        Aggregate dashboard statistics for a user.

        Returns:
            Dictionary with total_sessions, average_rating (mean over rated
            answers across all sessions, one decimal), total_questions,
            strong_answers, sessions_by_role and last_session_at.
        """
        summaries = self.list_summaries(user_id)

        ratings = [
            item.rating
            for summary in summaries
            for item in summary.question_feedback
        ]
        by_role = Counter(summary.role for summary in summaries)

        return {
            "user_id": user_id,
            "total_sessions": len(summaries),
            "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else None,
            "total_questions": sum(s.total_questions for s in summaries),
            "strong_answers": sum(s.strong_answers for s in summaries),
            "sessions_by_role": dict(by_role),
            "last_session_at": summaries[0].started_at if summaries else None,
        }
