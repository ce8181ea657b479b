"""
Speech recognition buffer and text-to-speech requests.

The browser does the actual recognition and synthesis. SpeechCapture
mirrors the recognizer state from the events it forwards, and ``speak``
builds the utterance the browser should play for interviewer messages.

Last Grunted: 10/19/2026
"""

from __future__ import annotations

import logging
from typing import Optional

from .models import SpeechUtterance, TranscriptEvent


__all__ = ["SpeechCapture", "speak", "RECOGNITION_SETTINGS", "MIC_PERMISSION_MESSAGE"]


logger = logging.getLogger(__name__)


# Settings the client applies to its recognizer
RECOGNITION_SETTINGS: dict[str, object] = {
    "continuous": True,
    "interim_results": True,
    "lang": "en-US",
}

MIC_PERMISSION_MESSAGE = "Please allow microphone access for speech recognition."


class SpeechCapture:
    """
    Accumulates recognized speech for the current answer.

    Final results are committed in order; the latest partial result is
    kept separately and shown after the committed text until it becomes
    final.
    """

    def __init__(self) -> None:
        self.is_listening = False
        self.last_error: Optional[str] = None
        self._committed = ""
        self._interim = ""

    @property
    def transcribed_text(self) -> str:
        return self._committed + self._interim

    @property
    def error_message(self) -> Optional[str]:
        """User-facing message for the last error, if any."""
        if self.last_error is None:
            return None
        if self.last_error == "not-allowed":
            return MIC_PERMISSION_MESSAGE
        return f"Speech recognition error: {self.last_error}"

    def start(self) -> None:
        self._committed = ""
        self._interim = ""
        self.last_error = None
        self.is_listening = True
        logger.debug("Speech recognition started")

    def stop(self) -> None:
        self.is_listening = False
        logger.debug("Speech recognition stopped")

    def toggle(self) -> bool:
        """Start or stop listening; returns the new listening state."""
        if self.is_listening:
            self.stop()
        else:
            self.start()
        return self.is_listening

    def apply_event(self, event: TranscriptEvent) -> None:
        """Update the buffer from a recognizer event."""
        if event.event_type == "session_started":
            self.is_listening = True
        elif event.event_type == "final":
            if event.text:
                self._committed += event.text
            self._interim = ""
        elif event.event_type == "partial":
            self._interim = event.text or ""
        elif event.event_type == "error":
            self.is_listening = False
            self.last_error = event.error or "unknown"
            logger.error("Speech recognition error: %s", self.last_error)
        elif event.event_type == "session_stopped":
            self.is_listening = False

    def take_text(self) -> str:
        """Return the trimmed transcription and clear the buffer."""
        text = self.transcribed_text.strip()
        self._committed = ""
        self._interim = ""
        return text

    def cancel(self) -> None:
        self.stop()
        self._committed = ""
        self._interim = ""


def speak(text: str, voice_enabled: bool = True) -> Optional[SpeechUtterance]:
    """
    Build the utterance for an interviewer message.

    Returns:
        SpeechUtterance, or None when voice is off or there is nothing to say.
    """
    if not voice_enabled or not text or not text.strip():
        return None
    return SpeechUtterance(text=text)
