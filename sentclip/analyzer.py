"""Orchestrates the sentence-splitting pipeline."""

import logging
import os
import time

from .clip_orchestrator import ClipOrchestrator
from .transcriber import Transcriber, TranscriptionConfig
from .sentence_builder import SentenceBuilder
from .models import SegmentedAudio, TranscriptionResult
from .exceptions import SentClipError, InputError, TranscriptionError
from .utils import audio_extension

logger = logging.getLogger(__name__)

# Encodings inferred from the file extension when the config does not name one.
EXTENSION_ENCODINGS = {
    ".mp3": "MP3",
    ".flac": "FLAC",
    ".ogg": "OGG_OPUS",
    ".opus": "OGG_OPUS",
    ".webm": "WEBM_OPUS",
}

class AudioAnalyzer:
    """
    Splits a spoken recording into one audio clip per sentence.

    The pipeline is strictly sequential up to the clip extraction: the source
    is validated and read, transcribed with word timestamps, and the words are
    regrouped into sentences. Only then are the clips cut, concurrently.
    """

    def __init__(
        self,
        transcriber: Transcriber,
        sentence_builder: SentenceBuilder,
        orchestrator: ClipOrchestrator,
        transcription_config: TranscriptionConfig,
    ):
        """
        Initializes the AudioAnalyzer.

        Args:
            transcriber: An instance of Transcriber.
            sentence_builder: An instance of SentenceBuilder.
            orchestrator: An instance of ClipOrchestrator.
            transcription_config: Recognition settings used for every request.
                                  An encoding of None is inferred per file.
        """
        self.transcriber = transcriber
        self.sentence_builder = sentence_builder
        self.orchestrator = orchestrator
        self.transcription_config = transcription_config

    def _read_source(self, source_audio_path: str) -> bytes:
        """Reads the source audio, raising InputError if it is missing, empty or unreadable."""
        if not source_audio_path:
            raise InputError("No source audio path given.")
        if not os.path.isfile(source_audio_path):
            raise InputError(f"Source audio file not found: {source_audio_path}")
        try:
            with open(source_audio_path, "rb") as f:
                audio_bytes = f.read()
        except OSError as e:
            logger.error(f"Could not read source audio {source_audio_path}: {e}", exc_info=True)
            raise InputError(f"Could not read source audio {source_audio_path}: {e}") from e
        if not audio_bytes:
            raise InputError(f"Source audio file is empty: {source_audio_path}")
        return audio_bytes

    def _config_for(self, source_audio_path: str) -> TranscriptionConfig:
        """Returns the request config, filling in the encoding from the file extension if unset."""
        config = self.transcription_config
        if config.encoding:
            return config
        encoding = EXTENSION_ENCODINGS.get(audio_extension(source_audio_path).lower(), "ENCODING_UNSPECIFIED")
        logger.debug(f"Inferred encoding {encoding} for {source_audio_path}")
        return TranscriptionConfig(
            encoding=encoding,
            language_code=config.language_code,
            enable_word_timestamps=config.enable_word_timestamps,
            enable_automatic_punctuation=config.enable_automatic_punctuation,
            model=config.model,
            sample_rate=config.sample_rate,
        )

    def transcribe(self, source_audio_path: str) -> TranscriptionResult:
        """
        Validates, reads and transcribes the source audio.

        Raises:
            InputError: If the source audio is missing, empty or unreadable.
            TranscriptionError: If the transcriber fails.
        """
        audio_bytes = self._read_source(source_audio_path)
        config = self._config_for(source_audio_path)
        try:
            return self.transcriber.transcribe(audio_bytes, config)
        except TranscriptionError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error during transcription of {source_audio_path}: {e}", exc_info=True)
            raise TranscriptionError(f"Transcription failed for {source_audio_path}: {e}") from e

    def analyze(self, source_audio_path: str, output_directory: str) -> SegmentedAudio:
        """
        Executes the full pipeline for a single recording.

        Args:
            source_audio_path: Path to the input audio file.
            output_directory: Directory receiving the sentence clips. Created if
                              absent; same-named clips are overwritten.

        Returns:
            The sentences with their clip files, and the transcription.

        Raises:
            InputError: If the source audio is missing, empty or unreadable.
            TranscriptionError: If transcription fails. No clip is written.
            ExtractionError: If any clip cannot be extracted. Clips already
                             written are left in place.
            SentClipError: For any other failure in the pipeline.
        """
        start_time = time.time()
        logger.info(f"--- Starting SentClip analysis for: {source_audio_path} ---")

        try:
            # 1. Transcribe
            logger.info("Step 1: Transcribing audio...")
            transcription = self.transcribe(source_audio_path)

            # 2. Rebuild sentences
            logger.info("Step 2: Rebuilding sentences from word timings...")
            sentences = self.sentence_builder.build(transcription.words())

            # 3. Extract clips
            logger.info(f"Step 3: Extracting {len(sentences)} sentence clips...")
            clips = self.orchestrator.extract_all(source_audio_path, sentences, output_directory)

            end_time = time.time()
            logger.info(f"--- SentClip analysis completed in {end_time - start_time:.2f} seconds ---")
            return SegmentedAudio(clips=tuple(clips), transcription=transcription, source_audio_path=source_audio_path)

        except SentClipError as e:
            logger.error(f"SentClip analysis failed: {e}", exc_info=False) # No stack needed for expected errors
            raise # Re-raise to be caught by the caller
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred during analysis: {e}", exc_info=True)
            raise SentClipError(f"An unexpected critical error occurred: {e}") from e
