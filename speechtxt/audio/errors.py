"""
speechtxt/audio/errors.py
==========================
Audio pipeline error taxonomy.

Every failure in normalization or downmixing is terminal for the
current request and surfaces as one of these named conditions so the
HTTP layer can map it to a response code.
"""


class AudioPipelineError(Exception):
    """Base class for audio normalization failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnsupportedFormat(AudioPipelineError):
    """Raised when the input container or codec is not recognized."""
    pass


class TranscodeFailure(AudioPipelineError):
    """Raised when the external transcoder fails or misbehaves."""
    pass


class IOFailure(AudioPipelineError):
    """Raised when the audio bytes cannot be read or written."""
    pass


class ChannelCountUnsupported(AudioPipelineError):
    """Raised for waveforms with a channel count other than 1 or 2."""

    def __init__(self, channels: int):
        self.channels = channels
        super().__init__(
            f"Unsupported channel count {channels}; only mono or stereo audio is accepted."
        )


class EncodeFailure(AudioPipelineError):
    """Raised when quantizing / re-encoding a waveform fails."""
    pass
