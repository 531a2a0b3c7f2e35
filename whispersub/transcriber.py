"""Handles Speech-to-Text transcription using the OpenAI audio API."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from openai import OpenAI

from .exceptions import TranscriptionError

logger = logging.getLogger(__name__)

DEFAULT_TRANSCRIPTION_MODEL = "whisper-1"

class Transcriber(ABC):
    """Abstract base class for transcription services."""

    @abstractmethod
    def transcribe(
        self,
        audio: bytes,
        filename: str,
        language: Optional[str] = None,
        prompt: Optional[str] = None
    ) -> str:
        """
        Transcribes the given audio into SRT text.

        Args:
            audio: Raw bytes of the audio file.
            filename: Name of the audio file; the provider uses its extension
                      to detect the audio format.
            language: Optional source-language hint (e.g. 'en').
            prompt: Optional text used to bias vocabulary and spelling.

        Returns:
            The transcript as SRT text, timed relative to the start of the audio.

        Raises:
            TranscriptionError: If transcription fails.
        """
        pass

class OpenAITranscriber(Transcriber):
    """Implements transcription using OpenAI's hosted Whisper model."""

    def __init__(self, api_key: Optional[str] = None, model_name: str = DEFAULT_TRANSCRIPTION_MODEL, client: Optional[OpenAI] = None):
        """
        Initializes the OpenAITranscriber.

        Args:
            api_key: OpenAI API key. Ignored when ``client`` is given.
            model_name: Transcription model identifier.
            client: A preconfigured OpenAI client.
        """
        self.model_name = model_name
        self.client = client or OpenAI(api_key=api_key)
        logger.info(f"Initializing OpenAITranscriber with model '{self.model_name}'")

    def transcribe(
        self,
        audio: bytes,
        filename: str,
        language: Optional[str] = None,
        prompt: Optional[str] = None
    ) -> str:
        logger.info(f"Uploading {filename} ({len(audio) / (1024 * 1024):.2f} MB) for transcription")

        request = {
            "model": self.model_name,
            "file": (filename, audio),
            "response_format": "srt",
        }
        if language:
            request["language"] = language
        if prompt:
            request["prompt"] = prompt

        try:
            response = self.client.audio.transcriptions.create(**request)
        except Exception as e:
            logger.error(f"Error during transcription of {filename}: {e}", exc_info=True)
            raise TranscriptionError(f"OpenAI transcription failed for {filename}: {e}") from e

        # SRT responses come back as plain text; older clients wrap them
        srt = response if isinstance(response, str) else getattr(response, "text", None)
        if srt is None:
            raise TranscriptionError(f"OpenAI returned no SRT text for {filename}")
        logger.info(f"Transcription of {filename} completed.")
        return srt
