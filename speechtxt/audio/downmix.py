"""
speechtxt/audio/downmix.py
===========================
Channel Downmixer

Responsibility:
    - Collapse a stereo waveform to mono by averaging left and right
    - Pass mono waveforms through untouched
    - Reject any other channel count

The mean of two samples in [-1.0, 1.0] stays in range, so no clamping
is needed before re-encoding. Quantization in encode_wav still rounds
and clamps.
"""

import logging

from speechtxt.audio.errors import ChannelCountUnsupported
from speechtxt.audio.types import WaveformBuffer
from speechtxt.audio.wav import decode_wav, encode_wav

logger = logging.getLogger("speechtxt.audio.downmix")

MAX_CHANNELS = 2


def downmix(buffer: WaveformBuffer) -> WaveformBuffer:
    """
    Return a mono version of ``buffer``.

    Mono input is returned as-is (same object). Stereo input yields a
    new buffer where sample i is (left[i] + right[i]) / 2. The input is
    never mutated.

    Raises:
        ChannelCountUnsupported: For more than two channels.
    """
    channels = buffer.num_channels
    if channels == 1:
        return buffer
    if channels != MAX_CHANNELS:
        raise ChannelCountUnsupported(channels)

    left, right = buffer.channel_data
    mono = (left + right) / 2.0
    return WaveformBuffer(sample_rate=buffer.sample_rate, channel_data=(mono,))


def downmix_wav(wav_bytes: bytes) -> bytes:
    """
    Decode, downmix and re-encode WAV bytes.

    Mono WAV bytes are returned unchanged, with no re-encoding.

    Raises:
        UnsupportedFormat:       If the bytes are not a PCM WAV.
        ChannelCountUnsupported: For more than two channels.
        EncodeFailure:           If re-encoding fails.
    """
    buffer = decode_wav(wav_bytes)
    if buffer.num_channels == 1:
        return wav_bytes

    mono = downmix(buffer)
    logger.info(
        "Downmixed %d channels → mono (%d samples @ %d Hz)",
        buffer.num_channels, mono.num_samples, mono.sample_rate,
    )
    return encode_wav(mono)
