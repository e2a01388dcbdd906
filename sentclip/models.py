"""Data models for SentClip."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

@dataclass(frozen=True)
class Word:
    """A single recognized word with its timing, in seconds from recording start."""
    text: str
    start_offset: float
    end_offset: float

@dataclass(frozen=True)
class RecognitionChunk:
    """One recognition result from the provider: its words in spoken order."""
    words: Tuple[Word, ...] = ()
    transcript: str = ""

@dataclass(frozen=True)
class TranscriptionResult:
    """Holds the structured output from the ASR process."""
    chunks: Tuple[RecognitionChunk, ...] = ()
    language: Optional[str] = None

    def words(self) -> List[Word]:
        """Flattens all chunks, in order, into the global word sequence."""
        return [word for chunk in self.chunks for word in chunk.words]

    def to_dict(self) -> Dict[str, Any]:
        """Speech-response shaped dict; readable again by parse_speech_response."""
        return {
            "languageCode": self.language,
            "results": [
                {
                    "alternatives": [
                        {
                            "transcript": chunk.transcript,
                            "words": [
                                {"word": w.text, "startTime": w.start_offset, "endTime": w.end_offset}
                                for w in chunk.words
                            ],
                        }
                    ]
                }
                for chunk in self.chunks
            ],
        }

@dataclass(frozen=True)
class Sentence:
    """A sentence rebuilt from the word stream, with its buffered time span."""
    ordinal: int # 1-based position, names the output clip
    text: str
    start_time: float
    end_time: float
    first_word_index: int
    last_word_index: int # inclusive
    buffer: float = 0.0

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

@dataclass(frozen=True)
class SentenceClip:
    """A sentence together with the audio clip extracted for it."""
    sentence: Sentence
    file_name: str
    file_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.sentence.text,
            "startTime": self.sentence.start_time,
            "endTime": self.sentence.end_time,
            "fileName": self.file_name,
        }

@dataclass(frozen=True)
class SegmentedAudio:
    """Final output of one analysis request."""
    clips: Tuple[SentenceClip, ...] = field(default_factory=tuple)
    transcription: TranscriptionResult = field(default_factory=TranscriptionResult)
    source_audio_path: Optional[str] = None # Keep track of source if needed

    @property
    def sentences(self) -> List[Sentence]:
        return [clip.sentence for clip in self.clips]

    def to_dict(self) -> Dict[str, Any]:
        """Renders the result in the shape handed to upload/HTTP callers."""
        return {
            "sentences": [clip.to_dict() for clip in self.clips],
            "transcription": self.transcription.to_dict(),
        }
