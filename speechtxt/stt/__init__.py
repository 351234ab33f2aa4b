# speechtxt/stt/__init__.py
# ==========================
# Speech-to-Text Layer
#
# Wraps Google Cloud Speech-to-Text. The client is built by the service
# at startup and injected; nothing here constructs a client per call.
#
# Public API:
#   GoogleSpeechRecognizer(client, language_code).recognize(wav_bytes, sample_rate) → str

from speechtxt.stt.google_speech import (  # noqa: F401
    GoogleSpeechRecognizer,
    RecognitionError,
)

__all__ = [
    "GoogleSpeechRecognizer",
    "RecognitionError",
]
