"""Transcription service interface and provider-response conversion."""

import json
import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .models import RecognitionChunk, TranscriptionResult, Word
from .exceptions import TranscriptionError

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)s\s*$")

@dataclass(frozen=True)
class TranscriptionConfig:
    """Per-request recognition settings passed to a Transcriber."""
    encoding: str = "MP3"
    language_code: str = "en-US"
    enable_word_timestamps: bool = True
    enable_automatic_punctuation: bool = True
    model: Optional[str] = None
    sample_rate: Optional[int] = None

    @property
    def language(self) -> Optional[str]:
        """Bare language part of the BCP-47 code, e.g. 'en' for 'en-US'."""
        if not self.language_code:
            return None
        return self.language_code.split("-")[0].lower()

class Transcriber(ABC):
    """Abstract base class for transcription services."""

    @abstractmethod
    def transcribe(self, audio_bytes: bytes, config: TranscriptionConfig) -> TranscriptionResult:
        """
        Transcribes the given audio with word-level timestamps.

        Args:
            audio_bytes: Raw contents of the audio file.
            config: Recognition settings for this request.

        Returns:
            A TranscriptionResult whose chunks hold the recognized words.

        Raises:
            TranscriptionError: If transcription fails.
        """
        pass

def convert_time_offset(offset: Union[str, int, float, Dict[str, Any], None]) -> float:
    """
    Converts a provider time offset to seconds.

    Accepts a JSON duration string ("1.500s"), an object with "seconds" and
    "nanos" fields (either may be missing or a string), or a plain number.
    A missing offset counts as 0.

    Raises:
        ValueError: If the offset has none of these shapes.
    """
    if offset is None:
        return 0.0
    if isinstance(offset, bool):
        raise ValueError(f"Unsupported time offset: {offset!r}")
    if isinstance(offset, (int, float)):
        return float(offset)
    if isinstance(offset, str):
        match = _DURATION_RE.match(offset)
        if match:
            return float(match.group(1))
        return float(offset)
    if isinstance(offset, dict):
        seconds = float(offset.get("seconds") or 0)
        nanos = float(offset.get("nanos") or 0)
        return seconds + nanos / 1e9
    raise ValueError(f"Unsupported time offset: {offset!r}")

def parse_speech_response(payload: Dict[str, Any]) -> TranscriptionResult:
    """
    Converts a cloud speech-to-text style response into a TranscriptionResult.

    The expected shape is {"results": [{"alternatives": [{"transcript": ...,
    "words": [{"word", "startTime", "endTime"}, ...]}]}]}. Only the first
    (most likely) alternative of each result is used; results without
    alternatives or without words are skipped.

    Raises:
        TranscriptionError: If the payload is not shaped like a response.
    """
    if not isinstance(payload, dict):
        raise TranscriptionError("Transcription response must be a JSON object.")

    chunks: List[RecognitionChunk] = []
    try:
        for result in payload.get("results") or []:
            alternatives = result.get("alternatives") or []
            if not alternatives:
                logger.debug("Skipping recognition result without alternatives.")
                continue
            best = alternatives[0]
            words_info = best.get("words") or []
            if not words_info:
                logger.debug("Skipping recognition result without word timings.")
                continue
            words = tuple(
                Word(
                    text=str(info.get("word", "")).strip(),
                    start_offset=convert_time_offset(info.get("startTime", info.get("startOffset"))),
                    end_offset=convert_time_offset(info.get("endTime", info.get("endOffset"))),
                )
                for info in words_info
            )
            chunks.append(RecognitionChunk(words=words, transcript=str(best.get("transcript", "")).strip()))
    except (AttributeError, TypeError, ValueError) as e:
        raise TranscriptionError(f"Malformed transcription response: {e}") from e

    language = payload.get("languageCode") or payload.get("language")
    return TranscriptionResult(chunks=tuple(chunks), language=language)

class SavedTranscriptTranscriber(Transcriber):
    """Replays a transcription response previously saved as JSON, ignoring the audio."""

    def __init__(self, transcript_path: str):
        self.transcript_path = transcript_path
        logger.info(f"Using saved transcription response: {self.transcript_path}")

    def transcribe(self, audio_bytes: bytes, config: TranscriptionConfig) -> TranscriptionResult:
        logger.info(f"Loading saved transcription from: {self.transcript_path}")
        if not os.path.isfile(self.transcript_path):
            raise TranscriptionError(f"Saved transcription not found: {self.transcript_path}")
        try:
            with open(self.transcript_path, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Could not read saved transcription {self.transcript_path}: {e}", exc_info=True)
            raise TranscriptionError(f"Could not read saved transcription {self.transcript_path}: {e}") from e

        result = parse_speech_response(payload)
        if result.language is None:
            result = TranscriptionResult(chunks=result.chunks, language=config.language)
        logger.info(f"Loaded {len(result.chunks)} recognition results with {len(result.words())} words.")
        return result
