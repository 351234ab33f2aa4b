"""
speechtxt/stt/google_speech.py
===============================
Google Cloud Speech-to-Text client

Responsibility:
    - Send normalized mono PCM16 audio to Google Speech (synchronous
      recognize)
    - Join the top alternative of every result with newlines
    - Surface network / auth failures as RecognitionError

This module does NOT:
    - Normalize or downmix audio
    - Store transcripts
"""

import logging

from google.api_core import exceptions as google_exceptions
from google.cloud import speech

from speechtxt.retry import call_with_retry

logger = logging.getLogger("speechtxt.stt.google_speech")


class RecognitionError(Exception):
    """Raised when the speech recognition call fails."""
    pass


class GoogleSpeechRecognizer:
    """Thin adapter over an injected ``speech.SpeechClient``."""

    def __init__(
        self,
        client: speech.SpeechClient,
        language_code: str = "id-ID",
        timeout: float = 120.0,
        max_retries: int = 0,
        retry_base_delay: float = 1.0,
    ):
        self.client = client
        self.language_code = language_code
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    def build_config(self, sample_rate_hertz: int) -> speech.RecognitionConfig:
        return speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=sample_rate_hertz,
            language_code=self.language_code,
        )

    def recognize(self, audio_bytes: bytes, sample_rate_hertz: int) -> str:
        """
        Transcribe LINEAR16 audio.

        Args:
            audio_bytes:       Mono PCM16 WAV bytes.
            sample_rate_hertz: Sample rate read from the WAV header.

        Returns:
            Transcript text, one line per recognition result.

        Raises:
            RecognitionError: If the API call fails.
        """
        config = self.build_config(sample_rate_hertz)
        audio = speech.RecognitionAudio(content=audio_bytes)

        # gapic retry off: call_with_retry is the only retry loop
        try:
            response = call_with_retry(
                self.client.recognize,
                config=config,
                audio=audio,
                retry=None,
                timeout=self.timeout,
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
            )
        except google_exceptions.GoogleAPIError as exc:
            raise RecognitionError(f"Speech recognition failed: {exc}") from exc

        lines = [
            result.alternatives[0].transcript
            for result in response.results
            if result.alternatives
        ]
        logger.info(
            "Speech recognition returned %d result(s), %d chars",
            len(lines), sum(len(line) for line in lines),
        )
        return "\n".join(lines)
