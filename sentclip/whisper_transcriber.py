"""Handles Speech-to-Text transcription with word timestamps using Whisper."""

import ffmpeg
import whisper
import logging
import re
import torch
import numpy as np
from typing import Any, Dict, List, Optional

from .models import RecognitionChunk, TranscriptionResult, Word
from .exceptions import TranscriptionError
from .transcriber import Transcriber, TranscriptionConfig

logger = logging.getLogger(__name__)

# Request encodings mapped to ffmpeg demuxers. Unlisted encodings are probed by ffmpeg.
ENCODING_FORMATS = {
    "MP3": "mp3",
    "FLAC": "flac",
    "OGG_OPUS": "ogg",
    "WEBM_OPUS": "webm",
    "LINEAR16": "s16le",
    "MULAW": "mulaw",
    "AMR": "amr",
}
_RAW_FORMATS = {"s16le", "mulaw"}
_PUNCTUATION_RE = re.compile(r"[^\w\s'-]")

def decode_audio(audio_bytes: bytes, config: TranscriptionConfig, ffmpeg_cmd: str = 'ffmpeg') -> np.ndarray:
    """
    Decodes audio bytes into the 16 kHz mono float32 waveform Whisper expects.

    Args:
        audio_bytes: Raw audio file contents.
        config: Supplies the encoding hint and, for headerless encodings, the sample rate.
        ffmpeg_cmd: ffmpeg executable.

    Raises:
        TranscriptionError: If ffmpeg cannot decode the audio.
    """
    input_kwargs: Dict[str, Any] = {}
    fmt = ENCODING_FORMATS.get((config.encoding or "").upper())
    if fmt:
        input_kwargs['format'] = fmt
    if fmt in _RAW_FORMATS:
        if not config.sample_rate:
            raise TranscriptionError(f"Encoding {config.encoding} requires a sample_rate.")
        input_kwargs['ar'] = config.sample_rate
        input_kwargs['ac'] = 1

    try:
        out, _ = (
            ffmpeg
            .input('pipe:0', **input_kwargs)
            .output('pipe:1', format='s16le', acodec='pcm_s16le', ac=1, ar=whisper.audio.SAMPLE_RATE)
            .run(cmd=ffmpeg_cmd, input=audio_bytes, capture_stdout=True, capture_stderr=True)
        )
    except ffmpeg.Error as e:
        stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
        logger.error(f"ffmpeg could not decode audio for transcription: {stderr_output}")
        raise TranscriptionError(f"Failed to decode audio: {stderr_output}") from e
    except OSError as e:
        raise TranscriptionError(f"Could not run {ffmpeg_cmd}: {e}") from e

    return np.frombuffer(out, np.int16).flatten().astype(np.float32) / 32768.0

def result_from_whisper(result: Dict[str, Any], strip_punctuation: bool = False) -> TranscriptionResult:
    """
    Converts Whisper's transcribe() output into a TranscriptionResult.

    Each Whisper segment becomes one RecognitionChunk. Word texts lose the
    leading space Whisper attaches to them. Segments without word timings
    are skipped.
    """
    chunks: List[RecognitionChunk] = []
    for seg_data in result.get('segments', []):
        words_data = seg_data.get('words') or []
        if not words_data:
            logger.warning(f"Skipping segment without word timestamps: {seg_data.get('text', '')[:40]!r}")
            continue
        words = []
        for word_data in words_data:
            text = word_data['word'].strip()
            if strip_punctuation:
                text = _PUNCTUATION_RE.sub("", text)
            if not text:
                continue
            words.append(Word(text=text, start_offset=float(word_data['start']), end_offset=float(word_data['end'])))
        transcript = " ".join(word.text for word in words) if strip_punctuation else seg_data.get('text', '').strip()
        chunks.append(RecognitionChunk(words=tuple(words), transcript=transcript))
    return TranscriptionResult(chunks=tuple(chunks), language=result.get('language'))

class WhisperTranscriber(Transcriber):
    """Implements word-timed transcription using OpenAI's Whisper model."""

    def __init__(self, model_name: str = "base.en", device: str = "cuda", fp16: bool = True, ffmpeg_path: Optional[str] = None):
        """
        Initializes the WhisperTranscriber.

        Args:
            model_name: The name of the Whisper model to use (e.g., "base", "medium.en").
            device: The device to run the model on ("cuda" or "cpu").
            fp16: Whether to use float16 precision (faster on compatible GPUs).
            ffmpeg_path: Optional path to the ffmpeg executable used to decode input.

        Raises:
            ValueError: If the specified device is invalid.
            TranscriptionError: If the model fails to load.
        """
        self.model_name = model_name
        self.device = device
        self.fp16 = fp16
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'

        if self.device == "cuda" and not torch.cuda.is_available():
            logger.warning("CUDA device requested but not available. Falling back to CPU.")
            self.device = "cpu"
        elif self.device not in ["cuda", "cpu"]:
             raise ValueError(f"Invalid device specified: {self.device}. Choose 'cuda' or 'cpu'.")

        logger.info(f"Initializing WhisperTranscriber with model '{self.model_name}' on device '{self.device}' (FP16: {self.fp16})")
        try:
            self.model = whisper.load_model(self.model_name, device=self.device)
            logger.info(f"Whisper model '{self.model_name}' loaded successfully.")
        except Exception as e:
            logger.error(f"Failed to load Whisper model '{self.model_name}': {e}", exc_info=True)
            raise TranscriptionError(f"Failed to load Whisper model '{self.model_name}': {e}") from e

    def transcribe(self, audio_bytes: bytes, config: TranscriptionConfig) -> TranscriptionResult:
        """
        Transcribes the audio with word timestamps using the loaded Whisper model.

        Args:
            audio_bytes: Raw audio file contents.
            config: Recognition settings. Word timestamps must be enabled.

        Returns:
            A TranscriptionResult with one chunk per Whisper segment.

        Raises:
            TranscriptionError: If decoding or transcription fails.
        """
        if not config.enable_word_timestamps:
            raise TranscriptionError("Word timestamps are required to split audio into sentences.")
        if config.model and config.model != self.model_name:
            logger.warning(f"Request asks for model '{config.model}' but '{self.model_name}' is loaded; using '{self.model_name}'.")

        audio = decode_audio(audio_bytes, config, self.ffmpeg_cmd)
        logger.info(f"Starting transcription of {len(audio) / whisper.audio.SAMPLE_RATE:.1f}s of audio (language: {config.language or 'auto'})")
        try:
            result = self.model.transcribe(
                audio,
                language=config.language,
                word_timestamps=True,
                fp16=self.fp16 if self.device == "cuda" else False, # FP16 only works on CUDA
                verbose=None
            )
        except Exception as e:
            logger.error(f"Error during Whisper transcription: {e}", exc_info=True)
            raise TranscriptionError(f"Whisper transcription failed: {e}") from e

        transcription = result_from_whisper(result, strip_punctuation=not config.enable_automatic_punctuation)
        logger.info(f"Transcription completed. Detected language: {transcription.language or 'N/A'}, {len(transcription.chunks)} chunks, {len(transcription.words())} words.")
        return transcription
