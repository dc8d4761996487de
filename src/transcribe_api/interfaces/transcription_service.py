"""Abstract interface for transcription service operations."""

from abc import ABC, abstractmethod

from transcribe_api.domain.models import NormalizedAudio, TranscriptionResult


class TranscriptionService(ABC):
    """Abstract base class for speech-to-text backends."""

    @abstractmethod
    def transcribe(
        self, audio: NormalizedAudio, timeout: float | None = None
    ) -> TranscriptionResult:
        """
        Transcribes audio into plain text in the configured language.

        Args:
            audio: Normalized audio payload.
            timeout: Seconds to wait for the result, or None to wait indefinitely.

        Returns:
            The transcript text, verbatim from the service.

        Raises:
            TranscriptionServiceError: If the service fails or cannot be reached.
        """
