"""
speechtxt/pipeline.py
======================
Pipeline Orchestrator — one upload, end to end

Responsibility:
    1. Normalize the upload format (PCM16 WAV @ 16 kHz)
    2. Downmix to mono
    3. Read the sample rate and call speech recognition
    4. Upload the transcript to object storage
    5. Persist the transcription record

Execution is strictly sequential. Any failure aborts the request before
later stages run, so no partial transcript is ever uploaded or stored.

This layer MUST NOT:
    - Build external clients (they arrive via PipelineServices)
    - Retry audio normalization
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from speechtxt.audio.downmix import downmix_wav
from speechtxt.audio.normalizer import normalize
from speechtxt.audio.transcoder import Transcoder
from speechtxt.audio.types import AudioTarget, TranscriptionInput
from speechtxt.audio.wav import read_wav_info
from speechtxt.schemas import TranscriptionRecord

logger = logging.getLogger("speechtxt.pipeline")


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------


class Recognizer(Protocol):
    def recognize(self, audio_bytes: bytes, sample_rate_hertz: int) -> str:
        ...


class TranscriptStore(Protocol):
    def save_transcript(self, transcript: str, filename: str) -> str:
        ...


class RecordStore(Protocol):
    def create(
        self,
        *,
        audio_url: str,
        text: str,
        file_name: str,
        created_by_email: str,
    ) -> TranscriptionRecord:
        ...

    def find_by_email(self, email: str) -> list[TranscriptionRecord]:
        ...


@dataclass
class PipelineServices:
    """Collaborator handles injected into every pipeline run."""

    transcoder: Transcoder
    recognizer: Recognizer
    storage: TranscriptStore
    repository: RecordStore
    target: AudioTarget = field(default_factory=AudioTarget)


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def prepare_audio(upload: TranscriptionInput, services: PipelineServices) -> tuple[int, bytes]:
    """
    Normalize then downmix an upload.

    Returns:
        (sample_rate, mono PCM16 WAV bytes)

    Raises:
        AudioPipelineError subclasses from either stage.
    """
    normalized = normalize(upload, services.transcoder, services.target)
    mono = downmix_wav(normalized)
    info = read_wav_info(mono)
    logger.info(
        "Audio prepared: %.2fs | %d Hz | %d ch",
        info.frames / info.sample_rate if info.sample_rate else 0.0,
        info.sample_rate,
        info.channels,
    )
    return info.sample_rate, mono


def run_pipeline(
    upload: TranscriptionInput,
    email: str,
    title: str,
    services: PipelineServices,
) -> TranscriptionRecord:
    """
    Run the full upload → transcript → storage → database flow.

    Args:
        upload:   Raw audio upload.
        email:    Submitter email, stored as created_by_email.
        title:    Transcript title, used as the storage filename.
        services: Injected collaborators.

    Returns:
        The persisted TranscriptionRecord.

    Raises:
        AudioPipelineError: Normalization / downmix failure.
        RecognitionError:   Speech service failure.
        StorageError:       Object storage failure.
        PersistenceError:   Database failure.
    """
    sample_rate, mono = prepare_audio(upload, services)

    transcript = services.recognizer.recognize(mono, sample_rate)
    logger.info("Transcript received (%d chars)", len(transcript))

    audio_url = services.storage.save_transcript(transcript, title)

    record = services.repository.create(
        audio_url=audio_url,
        text=transcript,
        file_name=title,
        created_by_email=email,
    )
    logger.info("Transcription %s stored", record.id)
    return record
