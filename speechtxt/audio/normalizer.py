"""
speechtxt/audio/normalizer.py
==============================
Format Normalizer

Responsibility:
    - Validate the declared MIME type of the upload
    - Validate the upload is non-empty and carries a known container header
    - Convert audio to 16-bit signed linear PCM at 16 kHz (WAV container)
    - Return normalized audio as an in-memory bytes object

Inputs already at the target format are returned unchanged; everything
else goes through the injected Transcoder.

This module does NOT:
    - Downmix channels (see downmix.py)
    - Call the speech recognition service
    - Store anything
"""

import logging

from speechtxt.audio.containers import detect_container
from speechtxt.audio.errors import IOFailure, TranscodeFailure, UnsupportedFormat
from speechtxt.audio.transcoder import Transcoder
from speechtxt.audio.types import ACCEPTED_MIME_TYPES, AudioTarget, TranscriptionInput
from speechtxt.audio.wav import read_wav_info

logger = logging.getLogger("speechtxt.audio.normalizer")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_mime_type(mime_type: str | None) -> None:
    """
    Check the declared MIME type against the accepted list.

    Raises:
        UnsupportedFormat: If the MIME type is missing or not accepted.
    """
    normalized = (mime_type or "").split(";", 1)[0].strip().lower()
    if normalized not in ACCEPTED_MIME_TYPES:
        raise UnsupportedFormat(
            f"Unsupported file type '{mime_type}'. Only WAV, OGG, MP3 are allowed."
        )


def validate_not_empty(audio_bytes: bytes) -> None:
    """
    Raises:
        IOFailure: If the upload has no content.
    """
    if not audio_bytes:
        raise IOFailure("Audio file is empty.")


def validate_container(audio_bytes: bytes) -> str:
    """
    Sniff the container header.

    Returns:
        "wav", "ogg" or "mp3".

    Raises:
        UnsupportedFormat: If the header matches no supported container.
    """
    container = detect_container(audio_bytes)
    if container is None:
        raise UnsupportedFormat("Unrecognized audio container header.")
    return container


def is_target_format(audio_bytes: bytes, target: AudioTarget) -> bool:
    """Return True if the bytes already are a PCM WAV matching the target."""
    try:
        info = read_wav_info(audio_bytes)
    except UnsupportedFormat:
        return False
    return info.sample_rate == target.sample_rate and info.sample_width == target.sample_width


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize(
    upload: TranscriptionInput,
    transcoder: Transcoder,
    target: AudioTarget | None = None,
) -> bytes:
    """
    Full validation + format normalization for a single upload.

    Steps:
        1. Validate MIME type
        2. Validate upload is non-empty
        3. Sniff container header
        4. Return input unchanged if it already matches the target
        5. Otherwise transcode and verify the output matches the target

    Args:
        upload:     Raw upload bytes plus the declared MIME type.
        transcoder: Transcoder implementation to delegate decoding to.
        target:     Target format (defaults to PCM16 @ 16 kHz).

    Returns:
        WAV bytes, 16-bit signed PCM at the target sample rate. The
        channel layout of the input is preserved.

    Raises:
        UnsupportedFormat: Unknown MIME type or container.
        TranscodeFailure:  Transcoder error or off-target transcoder output.
        IOFailure:         Empty input or temporary I/O error.
    """
    target = target or AudioTarget()

    validate_mime_type(upload.declared_mime_type)
    validate_not_empty(upload.audio_bytes)
    container = validate_container(upload.audio_bytes)

    if container == "wav" and is_target_format(upload.audio_bytes, target):
        logger.info("Audio already PCM16 @ %d Hz — skipping transcode.", target.sample_rate)
        return upload.audio_bytes

    logger.info(
        "Transcoding %s upload (%.2f KB) to PCM16 @ %d Hz",
        container, len(upload.audio_bytes) / 1024, target.sample_rate,
    )
    output = transcoder.transcode(upload.audio_bytes, target)

    try:
        info = read_wav_info(output)
    except UnsupportedFormat as exc:
        raise TranscodeFailure(f"Transcoder produced an unreadable WAV: {exc.message}") from exc

    if info.sample_rate != target.sample_rate or info.sample_width != target.sample_width:
        raise TranscodeFailure(
            f"Transcoder output is {info.sample_rate} Hz / {info.sample_width * 8}-bit, "
            f"expected {target.sample_rate} Hz / {target.sample_width * 8}-bit."
        )

    return output
