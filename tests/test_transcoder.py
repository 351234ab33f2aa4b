"""
tests/test_transcoder.py
=========================
Transcoder tests

Test categories:
    1. FFmpegTranscoder — subprocess is mocked; checks the command line,
       error mapping and temporary directory cleanup on every exit path
    2. PydubTranscoder — real pydub on in-memory WAV input (no ffmpeg
       needed for WAV); decode errors mocked
    3. build_transcoder factory
"""

import os
import subprocess
import sys
import unittest
from unittest.mock import patch

from pydub.exceptions import CouldntDecodeError

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from audio_fixtures import make_wav, sine
from speechtxt.audio.errors import IOFailure, TranscodeFailure
from speechtxt.audio.transcoder import (
    FFmpegTranscoder,
    PydubTranscoder,
    build_transcoder,
)
from speechtxt.audio.types import AudioTarget
from speechtxt.audio.wav import read_wav_info

_CONVERTED = make_wav([sine(160)], sample_rate=16000)


class _FakeRun:
    """Stands in for subprocess.run; remembers the working directory."""

    def __init__(self, returncode=0, write_output=True, stderr=b"", error=None):
        self.returncode = returncode
        self.write_output = write_output
        self.stderr = stderr
        self.error = error
        self.cmd = None
        self.input_seen = None

    def __call__(self, cmd, capture_output, timeout):
        self.cmd = cmd
        input_path = cmd[cmd.index("-i") + 1]
        with open(input_path, "rb") as fh:
            self.input_seen = fh.read()
        if self.error is not None:
            raise self.error
        if self.write_output:
            with open(cmd[-1], "wb") as fh:
                fh.write(_CONVERTED)
        return subprocess.CompletedProcess(cmd, self.returncode, b"", self.stderr)

    @property
    def workdir(self):
        return os.path.dirname(self.cmd[-1])


class TestFFmpegTranscoder(unittest.TestCase):

    def _run(self, fake, data=b"ID3-mp3-payload"):
        transcoder = FFmpegTranscoder(binary="/usr/bin/ffmpeg", timeout=5)
        with patch("speechtxt.audio.transcoder.subprocess.run", fake):
            return transcoder.transcode(data, AudioTarget())

    def test_success_returns_output_and_cleans_up(self):
        fake = _FakeRun()
        out = self._run(fake)

        self.assertEqual(out, _CONVERTED)
        self.assertEqual(fake.input_seen, b"ID3-mp3-payload")
        self.assertFalse(os.path.exists(fake.workdir))

    def test_command_targets_pcm16_16k(self):
        fake = _FakeRun()
        self._run(fake)

        cmd = fake.cmd
        self.assertEqual(cmd[0], "/usr/bin/ffmpeg")
        self.assertIn("-y", cmd)
        self.assertEqual(cmd[cmd.index("-acodec") + 1], "pcm_s16le")
        self.assertEqual(cmd[cmd.index("-ar") + 1], "16000")
        self.assertTrue(cmd[-1].endswith(".wav"))

    def test_nonzero_exit_raises_and_cleans_up(self):
        fake = _FakeRun(returncode=1, write_output=False, stderr=b"Invalid data found")
        with self.assertRaises(TranscodeFailure) as ctx:
            self._run(fake)
        self.assertIn("Invalid data found", ctx.exception.message)
        self.assertFalse(os.path.exists(fake.workdir))

    def test_timeout_raises_and_cleans_up(self):
        fake = _FakeRun(error=subprocess.TimeoutExpired(cmd="ffmpeg", timeout=5))
        with self.assertRaises(TranscodeFailure):
            self._run(fake)
        self.assertFalse(os.path.exists(fake.workdir))

    def test_missing_binary(self):
        fake = _FakeRun(error=FileNotFoundError("ffmpeg"))
        with self.assertRaises(TranscodeFailure):
            self._run(fake)
        self.assertFalse(os.path.exists(fake.workdir))

    def test_missing_output_is_io_failure(self):
        fake = _FakeRun(write_output=False)
        with self.assertRaises(IOFailure):
            self._run(fake)
        self.assertFalse(os.path.exists(fake.workdir))


class TestPydubTranscoder(unittest.TestCase):

    def test_resamples_wav_and_keeps_channels(self):
        src = make_wav([sine(4410, sample_rate=44100), sine(4410, sample_rate=44100)],
                       sample_rate=44100)

        out = PydubTranscoder().transcode(src, AudioTarget())

        info = read_wav_info(out)
        self.assertEqual(info.sample_rate, 16000)
        self.assertEqual(info.sample_width, 2)
        self.assertEqual(info.channels, 2)

    def test_widens_eight_bit(self):
        src = make_wav([sine(1600)], sample_rate=16000, sampwidth=1)
        info = read_wav_info(PydubTranscoder().transcode(src, AudioTarget()))
        self.assertEqual(info.sample_width, 2)
        self.assertEqual(info.sample_rate, 16000)

    def test_decode_error_is_transcode_failure(self):
        with patch(
            "speechtxt.audio.transcoder.AudioSegment.from_file",
            side_effect=CouldntDecodeError("bad data"),
        ):
            with self.assertRaises(TranscodeFailure):
                PydubTranscoder().transcode(b"OggS garbage", AudioTarget())

    def test_missing_decoder_is_transcode_failure(self):
        with patch(
            "speechtxt.audio.transcoder.AudioSegment.from_file",
            side_effect=FileNotFoundError("ffprobe"),
        ):
            with self.assertRaises(TranscodeFailure):
                PydubTranscoder().transcode(b"ID3 garbage", AudioTarget())


class TestBuildTranscoder(unittest.TestCase):

    def test_kinds(self):
        self.assertIsInstance(build_transcoder("pydub"), PydubTranscoder)
        ffmpeg = build_transcoder("FFmpeg", ffmpeg_binary="/opt/ffmpeg", timeout=3)
        self.assertIsInstance(ffmpeg, FFmpegTranscoder)
        self.assertEqual(ffmpeg.binary, "/opt/ffmpeg")
        self.assertEqual(ffmpeg.timeout, 3)

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            build_transcoder("sox")


if __name__ == "__main__":
    unittest.main()
