"""
speechtxt/api/services.py
==========================
Service wiring — builds the collaborator handles the pipeline needs
from Settings, and releases them on shutdown.
"""

import logging

from google.cloud import speech, storage

from speechtxt.audio.transcoder import build_transcoder
from speechtxt.audio.types import AudioTarget
from speechtxt.db.repository import TranscriptionRepository
from speechtxt.pipeline import PipelineServices
from speechtxt.settings import Settings
from speechtxt.storage.gcs import TranscriptStorage
from speechtxt.stt.google_speech import GoogleSpeechRecognizer

logger = logging.getLogger("speechtxt.api.services")


def build_services(settings: Settings) -> PipelineServices:
    """
    Construct Google clients, the transcoder and the repository.

    Raises:
        RuntimeError: If GCP_BUCKET_NAME is not configured.
    """
    if not settings.storage.bucket_name:
        raise RuntimeError("GCP_BUCKET_NAME environment variable is not set.")

    credentials_path = settings.speech.credentials_path
    if credentials_path:
        speech_client = speech.SpeechClient.from_service_account_file(credentials_path)
        storage_client = storage.Client.from_service_account_json(credentials_path)
    else:
        speech_client = speech.SpeechClient()
        storage_client = storage.Client()

    repository = TranscriptionRepository(settings.database.path)
    repository.init_schema()

    services = PipelineServices(
        transcoder=build_transcoder(
            settings.audio.transcoder,
            ffmpeg_binary=settings.audio.ffmpeg_binary,
            timeout=settings.audio.transcode_timeout,
        ),
        recognizer=GoogleSpeechRecognizer(
            speech_client,
            language_code=settings.speech.language_code,
            timeout=settings.speech.timeout,
            max_retries=settings.retry.max_retries,
            retry_base_delay=settings.retry.base_delay,
        ),
        storage=TranscriptStorage(
            storage_client.bucket(settings.storage.bucket_name),
            settings.storage.bucket_name,
            prefix=settings.storage.prefix,
            cache_control=settings.storage.cache_control,
            max_retries=settings.retry.max_retries,
            retry_base_delay=settings.retry.base_delay,
        ),
        repository=repository,
        target=AudioTarget(sample_rate=settings.audio.target_sample_rate),
    )
    logger.info(
        "Services ready: transcoder=%s language=%s bucket=%s db=%s",
        settings.audio.transcoder,
        settings.speech.language_code,
        settings.storage.bucket_name,
        settings.database.path,
    )
    return services


def close_services(services: PipelineServices) -> None:
    """Release transport resources held by the Google clients."""
    recognizer = services.recognizer
    if isinstance(recognizer, GoogleSpeechRecognizer):
        recognizer.client.transport.close()

    store = services.storage
    if isinstance(store, TranscriptStorage):
        store.bucket.client.close()
