"""
speechtxt/audio/wav.py
=======================
WAV container codec

Responsibility:
    - Read WAV metadata without decoding samples
    - Decode integer-PCM WAV bytes into a float WaveformBuffer
    - Encode a WaveformBuffer back to 16-bit signed PCM WAV bytes

Headers are parsed with pydub's WAV chunk reader, which also accepts the
WAVE_FORMAT_EXTENSIBLE layout. Encoding uses the stdlib wave writer.

Quantization on encode rounds to the nearest representable value and
clamps to the int16 range.

This module does NOT:
    - Decode compressed codecs (MP3, OGG) — see transcoder.py
    - Resample or change channel layout
"""

import io
import struct
import wave
from dataclasses import dataclass

import numpy as np
from pydub.audio_segment import read_wav_audio
from pydub.exceptions import CouldntDecodeError

from speechtxt.audio.containers import detect_container
from speechtxt.audio.errors import EncodeFailure, UnsupportedFormat
from speechtxt.audio.types import WaveformBuffer

_INT16_SCALE = 32768.0
_INT16_MIN = -32768
_INT16_MAX = 32767

# sampwidth → (dtype, zero offset, full-scale divisor)
_DECODE_MAP: dict[int, tuple[str, float, float]] = {
    1: ("u1", 128.0, 128.0),   # 8-bit WAV is unsigned
    2: ("<i2", 0.0, 32768.0),
    4: ("<i4", 0.0, 2147483648.0),
}


@dataclass(frozen=True)
class WavInfo:
    """Header fields of a WAV container."""

    sample_rate: int
    channels: int
    sample_width: int
    frames: int


def _read_pcm(audio_bytes: bytes):
    """
    Parse the fmt and data chunks with pydub.

    pydub accepts both plain PCM (0x0001) and WAVE_FORMAT_EXTENSIBLE
    (0xFFFE) headers; the latter is what ffmpeg writes for more than
    two channels.

    Returns:
        (sample_rate, channels, sample_width, raw_pcm)
    """
    if detect_container(audio_bytes) != "wav":
        raise UnsupportedFormat("Not a readable PCM WAV container: missing RIFF/WAVE header")
    try:
        wav = read_wav_audio(audio_bytes)
    except (CouldntDecodeError, struct.error) as exc:
        raise UnsupportedFormat(f"Not a readable PCM WAV container: {exc}") from exc

    sample_width = wav.bits_per_sample // 8
    if wav.sample_rate <= 0 or wav.channels <= 0 or sample_width <= 0:
        raise UnsupportedFormat(
            f"Invalid WAV header: {wav.sample_rate} Hz, {wav.channels} channel(s), "
            f"{wav.bits_per_sample}-bit"
        )
    return wav.sample_rate, wav.channels, sample_width, wav.raw_data


def read_wav_info(audio_bytes: bytes) -> WavInfo:
    """
    Read WAV header fields.

    Raises:
        UnsupportedFormat: If the bytes are not a readable PCM WAV.
    """
    sample_rate, channels, sample_width, raw_pcm = _read_pcm(audio_bytes)
    return WavInfo(
        sample_rate=sample_rate,
        channels=channels,
        sample_width=sample_width,
        frames=len(raw_pcm) // (sample_width * channels),
    )


def decode_wav(audio_bytes: bytes) -> WaveformBuffer:
    """
    Decode PCM WAV bytes into per-channel float samples in [-1.0, 1.0].

    Raises:
        UnsupportedFormat: If the container or sample width is not supported.
    """
    sample_rate, n_channels, sampwidth, raw_pcm = _read_pcm(audio_bytes)

    if sampwidth not in _DECODE_MAP:
        raise UnsupportedFormat(f"Unsupported WAV sample width: {sampwidth * 8}-bit")

    dtype, offset, divisor = _DECODE_MAP[sampwidth]
    frame_bytes = sampwidth * n_channels
    usable = len(raw_pcm) - (len(raw_pcm) % frame_bytes)
    pcm = np.frombuffer(raw_pcm[:usable], dtype=dtype).astype(np.float64)
    pcm = (pcm - offset) / divisor

    # Interleaved frames → one row per channel
    frames = pcm.reshape(-1, n_channels)
    channels = tuple(np.ascontiguousarray(frames[:, c]) for c in range(n_channels))
    return WaveformBuffer(sample_rate=sample_rate, channel_data=channels)


def quantize_int16(samples: np.ndarray) -> np.ndarray:
    """
    Scale float samples to int16, rounding to nearest and clamping.

    Raises:
        EncodeFailure: If any sample is NaN or infinite.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if not np.all(np.isfinite(samples)):
        raise EncodeFailure("Waveform contains non-finite samples.")
    scaled = np.rint(samples * _INT16_SCALE)
    return np.clip(scaled, _INT16_MIN, _INT16_MAX).astype("<i2")


def encode_wav(buffer: WaveformBuffer) -> bytes:
    """
    Encode a WaveformBuffer as a 16-bit signed PCM WAV container.

    Raises:
        EncodeFailure: On non-finite samples or a writer error.
    """
    quantized = [quantize_int16(ch) for ch in buffer.channel_data]
    interleaved = np.stack(quantized, axis=1).reshape(-1)

    try:
        out = io.BytesIO()
        with wave.open(out, "wb") as wf:
            wf.setnchannels(buffer.num_channels)
            wf.setsampwidth(2)
            wf.setframerate(buffer.sample_rate)
            wf.writeframes(interleaved.tobytes())
        return out.getvalue()
    except (wave.Error, ValueError, OverflowError) as exc:
        raise EncodeFailure(f"Failed to encode WAV: {exc}") from exc
