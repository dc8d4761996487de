"""AssemblyAI implementation of the TranscriptionService interface."""

import os
import tempfile
from concurrent.futures import TimeoutError as FutureTimeoutError

import assemblyai as aai

from transcribe_api.domain import NormalizedAudio, TranscriptionResult
from transcribe_api.exceptions import TranscriptionServiceError
from transcribe_api.interfaces import TranscriptionService
from transcribe_api.logging import setup_logging

logger = setup_logging()


class AssemblyAITranscriber(TranscriptionService):
    """Handles audio transcription using AssemblyAI."""

    def __init__(self, transcriber: aai.Transcriber):
        self._transcriber = transcriber

    def transcribe(
        self, audio: NormalizedAudio, timeout: float | None = None
    ) -> TranscriptionResult:
        """
        Transcribes audio data using AssemblyAI.

        Writes audio to a temp file named with the normalized extension
        (the SDK uploads from a path), submits it, and waits for the text.
        The language is fixed by the transcriber's configuration.
        """
        suffix = os.path.splitext(audio.filename)[1] or ".audio"
        try:
            with tempfile.NamedTemporaryFile(suffix=suffix, delete=True) as temp_file:
                temp_file.write(audio.data)
                temp_file.flush()

                future = self._transcriber.transcribe_async(temp_file.name)
                transcript = future.result(timeout=timeout)

            if transcript.status == aai.TranscriptStatus.error:
                raise TranscriptionServiceError(
                    transcript.error or "Transcription failed"
                )

            if transcript.text is None:
                raise TranscriptionServiceError("Transcription returned no text")

        except TranscriptionServiceError:
            logger.exception(
                "AssemblyAI transcription failed",
                extra={"audio_file": audio.filename},
            )
            raise
        except FutureTimeoutError as e:
            logger.exception(
                "AssemblyAI transcription timed out",
                extra={"audio_file": audio.filename, "timeout": timeout},
            )
            raise TranscriptionServiceError("Transcription timed out", cause=e) from e
        except Exception as e:
            logger.exception(
                "AssemblyAI transcription failed",
                extra={"audio_file": audio.filename},
            )
            raise TranscriptionServiceError(
                str(e) or "Failed to transcribe audio",
                status_code=getattr(e, "status_code", None),
                cause=e,
            ) from e

        logger.info(
            "Audio transcription successful",
            extra={"audio_file": audio.filename, "characters": len(transcript.text)},
        )
        return TranscriptionResult(text=transcript.text)
