"""Runtime configuration for the speech-to-text service."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class AudioSettings:
    transcoder: str
    ffmpeg_binary: str
    transcode_timeout: float
    target_sample_rate: int
    max_upload_bytes: int


@dataclass(frozen=True)
class SpeechSettings:
    language_code: str
    timeout: float
    credentials_path: str | None


@dataclass(frozen=True)
class StorageSettings:
    bucket_name: str | None
    prefix: str
    cache_control: str


@dataclass(frozen=True)
class DatabaseSettings:
    path: str


@dataclass(frozen=True)
class RetrySettings:
    max_retries: int
    base_delay: float


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int


@dataclass(frozen=True)
class Settings:
    audio: AudioSettings
    speech: SpeechSettings
    storage: StorageSettings
    database: DatabaseSettings
    retry: RetrySettings
    server: ServerSettings


def load_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""

    audio_settings = AudioSettings(
        transcoder=os.getenv("TRANSCODER", "pydub"),
        ffmpeg_binary=os.getenv("FFMPEG_BINARY", "ffmpeg"),
        transcode_timeout=_env_float("TRANSCODE_TIMEOUT_SECONDS", 60.0),
        target_sample_rate=_env_int("TARGET_SAMPLE_RATE", 16000),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
    )

    speech_settings = SpeechSettings(
        language_code=os.getenv("SPEECH_LANGUAGE_CODE", "id-ID"),
        timeout=_env_float("SPEECH_TIMEOUT_SECONDS", 120.0),
        credentials_path=os.getenv("GOOGLE_APPLICATION_CREDENTIALS"),
    )

    storage_settings = StorageSettings(
        bucket_name=os.getenv("GCP_BUCKET_NAME"),
        prefix=os.getenv("TRANSCRIPTION_PREFIX", "transcriptions"),
        cache_control=os.getenv("TRANSCRIPT_CACHE_CONTROL", "public, max-age=31536000"),
    )

    return Settings(
        audio=audio_settings,
        speech=speech_settings,
        storage=storage_settings,
        database=DatabaseSettings(path=os.getenv("DB_PATH", "speechtotext.sqlite3")),
        retry=RetrySettings(
            max_retries=_env_int("EXTERNAL_MAX_RETRIES", 2),
            base_delay=_env_float("EXTERNAL_RETRY_BASE_DELAY", 1.0),
        ),
        server=ServerSettings(
            host=os.getenv("HOST", "127.0.0.1"),
            port=_env_int("PORT", 3000),
        ),
    )


__all__ = ["Settings", "load_settings"]
