# speechtxt/audio/__init__.py
# ============================
# Audio Processing Layer
#
# Responsibility:
#   - Format normalization (any supported upload → PCM16 WAV @ 16 kHz)
#   - Channel downmix (stereo → mono)
#   - WAV encode / decode helpers
#
# Public API:
#   normalize(TranscriptionInput, transcoder) → bytes
#   downmix_wav(wav_bytes) → bytes

from speechtxt.audio.downmix import downmix, downmix_wav  # noqa: F401
from speechtxt.audio.errors import (                      # noqa: F401
    AudioPipelineError,
    ChannelCountUnsupported,
    EncodeFailure,
    IOFailure,
    TranscodeFailure,
    UnsupportedFormat,
)
from speechtxt.audio.normalizer import normalize           # noqa: F401
from speechtxt.audio.types import (                        # noqa: F401
    AudioTarget,
    TranscriptionInput,
    WaveformBuffer,
)

__all__ = [
    "normalize",
    "downmix",
    "downmix_wav",
    "AudioPipelineError",
    "ChannelCountUnsupported",
    "EncodeFailure",
    "IOFailure",
    "TranscodeFailure",
    "UnsupportedFormat",
    "AudioTarget",
    "TranscriptionInput",
    "WaveformBuffer",
]
