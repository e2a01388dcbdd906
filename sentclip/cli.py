"""Command-Line Interface handler for SentClip."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config_loader import ConfigLoader
from .log_setup import setup_logging
from .segment_extractor import SegmentExtractor
from .clip_orchestrator import ClipOrchestrator
from .sentence_builder import SentenceBuilder
from .transcriber import SavedTranscriptTranscriber, Transcriber, TranscriptionConfig
from .analyzer import AudioAnalyzer
from .manifest import write_manifest
from .models import SegmentedAudio
from .exceptions import SentClipError, ConfigurationError
from .utils import format_timestamp

logger = logging.getLogger(__name__) # Get logger for this module

def build_transcriber(config: dict) -> Transcriber:
    """Creates the transcriber selected by config['transcriber']."""
    if config.get('transcriber') == 'saved':
        path = config.get('saved_transcript_path')
        if not path:
            raise ConfigurationError("'saved_transcript_path' is required when transcriber is 'saved'.")
        return SavedTranscriptTranscriber(path)

    # Imported here so replaying a saved transcript does not load torch
    from .whisper_transcriber import WhisperTranscriber
    device = config.get('device', 'cuda')
    return WhisperTranscriber(
        model_name=config.get('model') or 'base.en',
        device=device,
        fp16=config.get('whisper_fp16', True) if device == 'cuda' else False,
        ffmpeg_path=config.get('ffmpeg_path')
    )

def build_analyzer(config: dict) -> AudioAnalyzer:
    """Wires up every pipeline component from a loaded configuration."""
    transcription_config = TranscriptionConfig(
        encoding=config.get('encoding'),
        language_code=config.get('language_code', 'en-US'),
        enable_word_timestamps=True,
        enable_automatic_punctuation=config.get('enable_automatic_punctuation', True),
        model=config.get('model'),
        sample_rate=config.get('sample_rate'),
    )
    sentence_builder = SentenceBuilder(
        buffer_per_syllable=config.get('buffer_per_syllable', 0.1),
        include_trailing_words=config.get('include_trailing_words', False)
    )
    orchestrator = ClipOrchestrator(
        extractor=SegmentExtractor(ffmpeg_path=config.get('ffmpeg_path')), # None if not specified
        max_workers=config.get('max_workers', 4),
        show_progress=config.get('show_progress', True)
    )
    return AudioAnalyzer(
        transcriber=build_transcriber(config),
        sentence_builder=sentence_builder,
        orchestrator=orchestrator,
        transcription_config=transcription_config
    )

def log_summary(result: SegmentedAudio) -> None:
    """Logs one line per extracted sentence."""
    for clip in result.clips:
        sentence = clip.sentence
        logger.info(
            f"{clip.file_name}: [{format_timestamp(sentence.start_time)} - {format_timestamp(sentence.end_time)}] {sentence.text}"
        )

class CLIHandler:
    """Parses arguments and orchestrates the SentClip process."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            description="SentClip: Split a spoken recording into one audio clip per sentence.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter # Show defaults in help
        )
        parser.add_argument(
            "-a", "--audio",
            required=True,
            help="Path to the input audio file."
        )
        parser.add_argument(
            "-o", "--output-dir",
            required=True,
            help="Directory to save the sentence clips (created if missing)."
        )
        parser.add_argument(
            "-c", "--config",
            default="config.yaml",
            help="Path to the configuration YAML file."
        )
        parser.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )
        parser.add_argument(
            "--device",
            default=None, # Default taken from config
            choices=["cuda", "cpu"],
            help="Override the processing device (cuda or cpu) specified in config."
        )
        parser.add_argument(
            "--transcript",
            default=None,
            help="Replay a saved transcription response (JSON) instead of running Whisper."
        )

        return parser

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the analyzer."""
        args = self.parser.parse_args(argv)

        # --- Setup Logging ---
        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        # Temporarily setup basic logging to catch config loading errors
        setup_logging(log_level=log_level, log_dir='logs', log_file='sentclip_init.log')

        # --- Load Configuration ---
        try:
            config = ConfigLoader().load_config(args.config)
        except ConfigurationError as e:
            logger.critical(f"Failed to load configuration from {args.config}: {e}", exc_info=True)
            sys.exit(1)
        except FileNotFoundError:
             logger.critical(f"Configuration file not found: {args.config}", exc_info=True)
             sys.exit(1)

        # --- Re-configure Logging with settings from Config ---
        setup_logging(log_level=log_level, log_dir=config['log_dir'], log_file=config['log_file'])
        logger.info("Logging re-configured with settings from config file.")

        # --- Apply CLI Overrides ---
        if args.device:
             logger.info(f"Overriding device from config with CLI argument: {args.device}")
             config['device'] = args.device
        if args.transcript:
            logger.info(f"Replaying saved transcription from CLI argument: {args.transcript}")
            config['transcriber'] = 'saved'
            config['saved_transcript_path'] = args.transcript

        # --- Validate Input Path ---
        if not os.path.isfile(args.audio):
            logger.critical(f"Input audio file not found or is not a file: {args.audio}")
            sys.exit(1)

        try:
            logger.info("Initializing SentClip components...")
            analyzer = build_analyzer(config)
            logger.info("Components initialized successfully.")

            # --- Run Analysis ---
            result = analyzer.analyze(args.audio, args.output_dir)
            log_summary(result)
            if config.get('write_manifest', True):
                write_manifest(result, os.path.join(args.output_dir, config.get('manifest_name') or 'sentences.json'))
            logger.info(f"SentClip finished successfully: {len(result.clips)} clips in {args.output_dir}")
            sys.exit(0)

        except SentClipError as e:
             # Catch errors originating from our application logic
             logger.error(f"A SentClip error occurred: {e}")
             sys.exit(1)
        except KeyboardInterrupt:
             logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
             sys.exit(1)
        except Exception as e:
             # Catch any other unexpected errors
             logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
             sys.exit(2) # Use a different exit code for unexpected crashes
