"""Shared fixtures and collaborator fakes for the sentclip test suite."""

import os
import threading
import time
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from sentclip.exceptions import ExtractionError
from sentclip.models import RecognitionChunk, TranscriptionResult, Word
from sentclip.transcriber import Transcriber, TranscriptionConfig


def make_words(entries: Sequence[Tuple[str, float, float]]) -> List[Word]:
    return [Word(text=text, start_offset=start, end_offset=end) for text, start, end in entries]


# "Hello world. How are you?" split across two recognition chunks
HELLO_CHUNK_1 = [("Hello", 0.0, 0.4), ("world.", 0.5, 0.9)]
HELLO_CHUNK_2 = [("How", 1.2, 1.4), ("are", 1.45, 1.6), ("you?", 1.65, 1.9)]


@pytest.fixture
def hello_words() -> List[Word]:
    return make_words(HELLO_CHUNK_1 + HELLO_CHUNK_2)


@pytest.fixture
def hello_transcription() -> TranscriptionResult:
    return TranscriptionResult(
        chunks=(
            RecognitionChunk(words=tuple(make_words(HELLO_CHUNK_1)), transcript="Hello world."),
            RecognitionChunk(words=tuple(make_words(HELLO_CHUNK_2)), transcript="How are you?"),
        ),
        language="en",
    )


@pytest.fixture
def source_audio(tmp_path) -> str:
    path = tmp_path / "lesson.mp3"
    path.write_bytes(b"ID3 fake mp3 payload")
    return str(path)


class FakeTranscriber(Transcriber):
    """Returns a fixed result and records what it was asked to transcribe."""

    def __init__(self, result: TranscriptionResult, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[Tuple[bytes, TranscriptionConfig]] = []

    def transcribe(self, audio_bytes: bytes, config: TranscriptionConfig) -> TranscriptionResult:
        self.calls.append((audio_bytes, config))
        if self.error is not None:
            raise self.error
        return self.result


class FakeExtractor:
    """
    Writes a small file per extraction instead of running ffmpeg.

    delays: seconds to sleep before finishing, by destination file name.
    failures: exceptions to raise, by destination file name.
    gates: events an extraction waits on before finishing, by file name.
    """

    def __init__(
        self,
        delays: Optional[Dict[str, float]] = None,
        failures: Optional[Dict[str, Exception]] = None,
        gates: Optional[Dict[str, threading.Event]] = None,
    ):
        self.delays = delays or {}
        self.failures = failures or {}
        self.gates = gates or {}
        self.calls: List[Tuple[str, str, float, float]] = []
        self.completed: List[str] = []
        self.dir_existed: List[bool] = []
        self._lock = threading.Lock()

    def extract(self, source_path: str, dest_path: str, start_seconds: float, duration_seconds: float) -> str:
        name = os.path.basename(dest_path)
        with self._lock:
            self.calls.append((source_path, dest_path, start_seconds, duration_seconds))
            self.dir_existed.append(os.path.isdir(os.path.dirname(dest_path)))
        if name in self.gates:
            self.gates[name].wait(timeout=5)
        time.sleep(self.delays.get(name, 0))
        if name in self.failures:
            raise self.failures[name]
        with open(dest_path, "w", encoding="utf-8") as f:
            f.write(f"{start_seconds:.3f}+{duration_seconds:.3f}")
        with self._lock:
            self.completed.append(name)
        return dest_path


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def make_extractor():
    """Factory for FakeExtractor with per-file delays, failures or gates."""
    return FakeExtractor


@pytest.fixture
def make_transcriber():
    """Factory for FakeTranscriber."""
    return FakeTranscriber


@pytest.fixture
def codec_error() -> ExtractionError:
    return ExtractionError("codec error")
