"""
speechtxt/audio/transcoder.py
==============================
Audio Transcoder capability

Responsibility:
    - Convert an arbitrary supported upload (WAV / OGG / MP3) into a
      16-bit signed PCM WAV at the target sample rate
    - Keep the channel layout of the input (downmixing happens later)

Two interchangeable implementations:
    PydubTranscoder   — library-based (pydub; ffmpeg underneath for
                        compressed codecs)
    FFmpegTranscoder  — process-based; shells out to the ffmpeg binary
                        through a scoped temporary directory

This module does NOT:
    - Validate MIME types or sniff headers (see normalizer.py)
    - Downmix channels (see downmix.py)
"""

import io
import logging
import os
import subprocess
import tempfile
from typing import Protocol

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from speechtxt.audio.containers import detect_container
from speechtxt.audio.errors import IOFailure, TranscodeFailure
from speechtxt.audio.types import AudioTarget

logger = logging.getLogger("speechtxt.audio.transcoder")


class Transcoder(Protocol):
    """Anything that turns input audio bytes into target-format WAV bytes."""

    def transcode(self, audio_bytes: bytes, target: AudioTarget) -> bytes:
        ...


# ---------------------------------------------------------------------------
# Library-based
# ---------------------------------------------------------------------------


class PydubTranscoder:
    """Transcode in memory with pydub."""

    def transcode(self, audio_bytes: bytes, target: AudioTarget) -> bytes:
        try:
            audio = AudioSegment.from_file(
                io.BytesIO(audio_bytes), format=detect_container(audio_bytes)
            )
        except CouldntDecodeError as exc:
            raise TranscodeFailure(f"Audio could not be decoded: {exc}") from exc
        except OSError as exc:
            raise TranscodeFailure(f"Decoder unavailable: {exc}") from exc

        if audio.frame_rate != target.sample_rate:
            audio = audio.set_frame_rate(target.sample_rate)
        if audio.sample_width != target.sample_width:
            audio = audio.set_sample_width(target.sample_width)

        try:
            buffer = io.BytesIO()
            audio.export(buffer, format="wav")
            return buffer.getvalue()
        except OSError as exc:
            raise IOFailure(f"Failed to export transcoded audio: {exc}") from exc


# ---------------------------------------------------------------------------
# Process-based
# ---------------------------------------------------------------------------


class FFmpegTranscoder:
    """
    Transcode by running the ffmpeg binary.

    ffmpeg needs file-based I/O here, so input and output live in a
    temporary directory that is removed on every exit path.
    """

    def __init__(self, binary: str = "ffmpeg", timeout: float = 60.0):
        self.binary = binary
        self.timeout = timeout

    def build_command(self, input_path: str, output_path: str, target: AudioTarget) -> list[str]:
        return [
            self.binary,
            "-y",
            "-hide_banner",
            "-loglevel", "error",
            "-i", input_path,
            "-acodec", target.codec,
            "-ar", str(target.sample_rate),
            output_path,
        ]

    def transcode(self, audio_bytes: bytes, target: AudioTarget) -> bytes:
        with tempfile.TemporaryDirectory(prefix="speechtxt-") as workdir:
            input_path = os.path.join(workdir, "input")
            output_path = os.path.join(workdir, "output.wav")

            try:
                with open(input_path, "wb") as fh:
                    fh.write(audio_bytes)
            except OSError as exc:
                raise IOFailure(f"Failed to write temporary input: {exc}") from exc

            cmd = self.build_command(input_path, output_path, target)
            logger.debug("Running transcoder: %s", " ".join(cmd))

            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError as exc:
                raise TranscodeFailure(f"Transcoder binary not found: {self.binary}") from exc
            except subprocess.TimeoutExpired as exc:
                raise TranscodeFailure(
                    f"Transcoder timed out after {self.timeout:.0f}s"
                ) from exc

            if result.returncode != 0:
                stderr = result.stderr.decode("utf-8", errors="replace").strip()
                logger.warning("ffmpeg exited with %d: %s", result.returncode, stderr)
                raise TranscodeFailure(
                    f"Transcoder exited with status {result.returncode}: {stderr[-500:]}"
                )

            try:
                with open(output_path, "rb") as fh:
                    return fh.read()
            except OSError as exc:
                raise IOFailure(f"Failed to read transcoder output: {exc}") from exc


def build_transcoder(kind: str, ffmpeg_binary: str = "ffmpeg", timeout: float = 60.0) -> Transcoder:
    """Return the transcoder named by configuration ("pydub" or "ffmpeg")."""
    kind = (kind or "").strip().lower()
    if kind == "pydub":
        return PydubTranscoder()
    if kind == "ffmpeg":
        return FFmpegTranscoder(binary=ffmpeg_binary, timeout=timeout)
    raise ValueError(f"Unknown transcoder '{kind}'. Expected 'pydub' or 'ffmpeg'.")
