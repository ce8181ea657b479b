"""
Recording storage for interview audio/video.

The browser records with MediaRecorder (webm) and uploads the finished
blob. Recordings are stored one per session and replaced on re-upload.

Last Grunted: 10/19/2026
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os


__all__ = ["RecordingStore", "RecordingInfo", "RecordingError", "ALLOWED_CONTENT_TYPES"]


logger = logging.getLogger(__name__)


ALLOWED_CONTENT_TYPES = frozenset({"video/webm", "audio/webm"})


class RecordingError(Exception):
    """Raised when a recording can't be stored or read."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Recording I/O failed for {path}: {cause}")


@dataclass(frozen=True)
class RecordingInfo:
    """Metadata for a stored recording."""

    session_id: str
    path: Path
    content_type: str
    size_bytes: int


def _base_content_type(content_type: str) -> str:
    # "video/webm;codecs=vp9,opus" -> "video/webm"
    return (content_type or "").split(";", 1)[0].strip().lower()


class RecordingStore:
    """
    Stores one webm recording per session on disk.

    Example:
        >>> store = RecordingStore(Path("./output/recordings"))
        >>> info = await store.save("mi_20261019_103000_a1b2c3", blob, "video/webm")
        >>> data = await store.load(info.session_id)
    """

    def __init__(self, recording_dir: Path) -> None:
        self.recording_dir = Path(recording_dir)
        try:
            self.recording_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RecordingError(self.recording_dir, e) from e

    def _path(self, session_id: str) -> Path:
        return self.recording_dir / f"{session_id}.webm"

    def exists(self, session_id: str) -> bool:
        return self._path(session_id).exists()

    async def save(self, session_id: str, data: bytes, content_type: str) -> RecordingInfo:
        """
        Store a recording, replacing any earlier one for the session.

        Raises:
            ValueError: If the payload is empty or not webm.
            RecordingError: If the file can't be written.
        """
        base_type = _base_content_type(content_type)
        if base_type not in ALLOWED_CONTENT_TYPES:
            allowed = ", ".join(sorted(ALLOWED_CONTENT_TYPES))
            raise ValueError(
                f"Unsupported recording type '{content_type}'. Allowed: {allowed}."
            )
        if not data:
            raise ValueError("Recording is empty.")

        path = self._path(session_id)
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise RecordingError(path, e) from e

        logger.info("Saved %s recording for session %s (%d bytes)", base_type, session_id, len(data))
        return RecordingInfo(
            session_id=session_id,
            path=path,
            content_type=base_type,
            size_bytes=len(data),
        )

    async def load(self, session_id: str) -> Optional[bytes]:
        """Return recording bytes, or None if the session has none."""
        path = self._path(session_id)
        if not path.exists():
            return None
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise RecordingError(path, e) from e

    async def delete(self, session_id: str) -> bool:
        """Delete a recording. Returns False if there was none."""
        path = self._path(session_id)
        if not path.exists():
            return False
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            raise RecordingError(path, e) from e
        logger.info("Deleted recording for session %s", session_id)
        return True
