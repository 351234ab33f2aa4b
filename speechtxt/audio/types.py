"""
speechtxt/audio/types.py
=========================
In-flight value types for the audio pipeline.

Both values live for a single request only. Nothing here is persisted.
"""

from dataclasses import dataclass

import numpy as np


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TARGET_SAMPLE_RATE = 16000  # Hz
TARGET_SAMPLE_WIDTH = 2  # bytes — 16-bit signed PCM

ACCEPTED_MIME_TYPES: frozenset[str] = frozenset({
    "audio/wav",
    "audio/ogg",
    "audio/mp3",
    "audio/x-wav",
    "audio/x-pn-wav",
    "audio/wave",
})


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AudioTarget:
    """Target encoding handed to the transcoder: linear PCM, 16-bit signed."""

    sample_rate: int = TARGET_SAMPLE_RATE
    sample_width: int = TARGET_SAMPLE_WIDTH
    codec: str = "pcm_s16le"


@dataclass(frozen=True)
class TranscriptionInput:
    """Raw upload as received from the HTTP layer."""

    audio_bytes: bytes
    declared_mime_type: str
    filename: str | None = None


@dataclass(frozen=True, eq=False)
class WaveformBuffer:
    """
    Decoded linear-PCM waveform.

    ``channel_data`` holds one float array per channel, samples in
    [-1.0, 1.0]. All channels have the same length.
    """

    sample_rate: int
    channel_data: tuple[np.ndarray, ...]

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if not self.channel_data:
            raise ValueError("channel_data must hold at least one channel")
        lengths = {len(ch) for ch in self.channel_data}
        if len(lengths) != 1:
            raise ValueError(f"channels differ in length: {sorted(lengths)}")

    @classmethod
    def from_channels(cls, sample_rate: int, channels) -> "WaveformBuffer":
        """Build a buffer from any sequence of per-channel sample sequences."""
        arrays = tuple(np.asarray(ch, dtype=np.float64) for ch in channels)
        return cls(sample_rate=sample_rate, channel_data=arrays)

    @property
    def num_channels(self) -> int:
        return len(self.channel_data)

    @property
    def num_samples(self) -> int:
        return len(self.channel_data[0])
