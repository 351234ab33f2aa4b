"""
tests/test_pipeline.py
=======================
Pipeline orchestration tests

Verifies:
    1. Stage order: normalize → downmix → recognize → store → persist
    2. The recognizer receives mono PCM16 and the WAV sample rate
    3. Any failure aborts before later stages (no partial persistence)

All collaborators are in-memory fakes.
"""

import os
import sys
import unittest
from datetime import datetime, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from audio_fixtures import FakeTranscoder, make_extensible_wav, make_wav, sine
from speechtxt.audio.errors import ChannelCountUnsupported, UnsupportedFormat
from speechtxt.audio.types import TranscriptionInput
from speechtxt.audio.wav import read_wav_info
from speechtxt.pipeline import PipelineServices, prepare_audio, run_pipeline
from speechtxt.schemas import TranscriptionRecord
from speechtxt.storage.gcs import StorageError
from speechtxt.stt.google_speech import RecognitionError


class FakeRecognizer:
    def __init__(self, log, text="halo semua", error=None):
        self.log = log
        self.text = text
        self.error = error
        self.received = None

    def recognize(self, audio_bytes, sample_rate_hertz):
        self.log.append("recognize")
        self.received = (audio_bytes, sample_rate_hertz)
        if self.error:
            raise self.error
        return self.text


class FakeStorage:
    def __init__(self, log, error=None):
        self.log = log
        self.error = error
        self.saved = []

    def save_transcript(self, transcript, filename):
        self.log.append("store")
        if self.error:
            raise self.error
        self.saved.append((transcript, filename))
        return f"https://storage.googleapis.com/b/transcriptions/{filename}.txt"


class FakeRepository:
    def __init__(self, log):
        self.log = log
        self.records = []

    def create(self, *, audio_url, text, file_name, created_by_email):
        self.log.append("persist")
        now = datetime.now(timezone.utc)
        record = TranscriptionRecord(
            id=f"id{len(self.records)}",
            audio_url=audio_url,
            text=text,
            file_name=file_name,
            created_by_email=created_by_email,
            created_at=now,
            updated_at=now,
        )
        self.records.append(record)
        return record

    def find_by_email(self, email):
        return [r for r in self.records if r.created_by_email == email]


def _services(log, transcoder=None, recognizer=None, storage=None):
    return PipelineServices(
        transcoder=transcoder or FakeTranscoder(),
        recognizer=recognizer or FakeRecognizer(log),
        storage=storage or FakeStorage(log),
        repository=FakeRepository(log),
    )


def _upload(data, mime="audio/wav"):
    return TranscriptionInput(audio_bytes=data, declared_mime_type=mime)


class TestPrepareAudio(unittest.TestCase):

    def test_stereo_upload_becomes_mono(self):
        wav = make_wav([sine(1600), sine(1600, freq=220.0)])
        rate, mono = prepare_audio(_upload(wav), _services([]))
        info = read_wav_info(mono)
        self.assertEqual(rate, 16000)
        self.assertEqual(info.channels, 1)
        self.assertEqual(info.frames, 1600)

    def test_compressed_upload_transcoded_then_downmixed(self):
        converted = make_wav([sine(320), sine(320)])
        services = _services([], transcoder=FakeTranscoder(output=converted))
        rate, mono = prepare_audio(_upload(b"ID3" + b"\x00" * 32, "audio/mp3"), services)
        self.assertEqual(rate, 16000)
        self.assertEqual(read_wav_info(mono).channels, 1)

    def test_three_channel_transcoder_output_is_channel_error(self):
        surround = make_extensible_wav([sine(160), sine(160), sine(160)])
        services = _services([], transcoder=FakeTranscoder(output=surround))
        with self.assertRaises(ChannelCountUnsupported) as ctx:
            prepare_audio(_upload(b"OggS" + b"\x00" * 32, "audio/ogg"), services)
        self.assertEqual(ctx.exception.channels, 3)


class TestRunPipeline(unittest.TestCase):

    def test_happy_path_order_and_outputs(self):
        log = []
        services = _services(log)
        wav = make_wav([sine(800), sine(800)])

        record = run_pipeline(_upload(wav), "user@example.com", "rapat-senin", services)

        self.assertEqual(log, ["recognize", "store", "persist"])
        audio_sent, rate = services.recognizer.received
        self.assertEqual(rate, 16000)
        self.assertEqual(read_wav_info(audio_sent).channels, 1)
        self.assertEqual(services.storage.saved, [("halo semua", "rapat-senin")])
        self.assertEqual(record.text, "halo semua")
        self.assertEqual(record.file_name, "rapat-senin")
        self.assertEqual(record.created_by_email, "user@example.com")
        self.assertTrue(record.audio_url.endswith("/transcriptions/rapat-senin.txt"))

    def test_mono_input_sent_byte_identical(self):
        log = []
        services = _services(log)
        wav = make_wav([sine(800)])
        run_pipeline(_upload(wav), "u@example.com", "t", services)
        self.assertEqual(services.recognizer.received[0], wav)

    def test_channel_failure_stops_everything(self):
        log = []
        services = _services(log)
        wav = make_wav([sine(100)] * 3)
        with self.assertRaises(ChannelCountUnsupported):
            run_pipeline(_upload(wav), "u@example.com", "t", services)
        self.assertEqual(log, [])
        self.assertEqual(services.repository.records, [])

    def test_unsupported_format_stops_everything(self):
        log = []
        services = _services(log)
        with self.assertRaises(UnsupportedFormat):
            run_pipeline(_upload(b"not audio at all"), "u@example.com", "t", services)
        self.assertEqual(log, [])

    def test_recognition_failure_skips_storage_and_db(self):
        log = []
        recognizer = FakeRecognizer(log, error=RecognitionError("quota"))
        services = _services(log, recognizer=recognizer)
        with self.assertRaises(RecognitionError):
            run_pipeline(_upload(make_wav([sine(100)])), "u@example.com", "t", services)
        self.assertEqual(log, ["recognize"])
        self.assertEqual(services.repository.records, [])

    def test_storage_failure_skips_db(self):
        log = []
        services = _services(log, storage=FakeStorage(log, error=StorageError("denied")))
        with self.assertRaises(StorageError):
            run_pipeline(_upload(make_wav([sine(100)])), "u@example.com", "t", services)
        self.assertEqual(log, ["recognize", "store"])
        self.assertEqual(services.repository.records, [])


if __name__ == "__main__":
    unittest.main()
