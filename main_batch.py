#!/usr/bin/env python3
"""
SentClip Batch Processing Entry Point

Splits every audio recording in a directory into sentence clips, smallest
file first, writing each recording's clips into its own subfolder.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Optional, Tuple

# Progress bar library
from tqdm import tqdm

from sentclip.config_loader import ConfigLoader
from sentclip.log_setup import setup_logging
from sentclip.cli import build_analyzer
from sentclip.manifest import write_manifest
from sentclip.exceptions import SentClipError, ConfigurationError, FileSystemError
from sentclip.utils import ensure_dir_exists

# Initialize logger for this script
logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = (".mp3", ".wav", ".flac", ".m4a", ".ogg", ".opus")

def find_and_sort_recordings(input_dir: str) -> List[Tuple[str, int]]:
    """
    Finds all supported audio files in the input directory and sorts them by size.

    Args:
        input_dir: The directory to search for audio files.

    Returns:
        A list of tuples, where each tuple is (filepath, filesize),
        sorted by filesize in ascending order.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    recordings = []
    logger.info(f"Scanning directory for audio files: {input_dir}")
    for filename in os.listdir(input_dir):
        # Case-insensitive check for the extension
        if filename.lower().endswith(AUDIO_EXTENSIONS):
            filepath = os.path.join(input_dir, filename)
            try:
                if os.path.isfile(filepath): # Ensure it's actually a file
                    recordings.append((filepath, os.path.getsize(filepath)))
            except OSError as e:
                logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    # Sort by file size, then name so equal sizes keep a stable order
    recordings.sort(key=lambda item: (item[1], item[0]))
    logger.info(f"Found {len(recordings)} audio files. Sorted by size (smallest first).")
    return recordings


def run_batch_processing(argv: Optional[List[str]] = None) -> None:
    """Parses arguments, sets up, and runs the batch sentence splitting."""
    parser = argparse.ArgumentParser(
        description="SentClip Batch: Split every recording in a directory into sentence clips.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-i", "--input-dir",
        required=True,
        help="Directory containing the input audio files."
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

    args = parser.parse_args(argv)

    # --- Setup Logging (Initial) ---
    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir='logs', log_file='sentclip_batch_init.log')

    # --- Load Configuration ---
    try:
        config = ConfigLoader().load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}", exc_info=True)
        sys.exit(1)

    # --- Re-configure Logging (Final) ---
    setup_logging(log_level=log_level, log_dir=config['log_dir'], log_file='sentclip_batch.log')
    logger.info("Logging re-configured with settings from config file for batch processing.")

    if args.device:
        logger.info(f"Overriding device from config with CLI argument: {args.device}")
        config['device'] = args.device
    # One progress bar per file is enough; the per-clip bar would interleave with it
    config['show_progress'] = False

    # --- Find and Sort Recordings ---
    try:
        recording_paths = [item[0] for item in find_and_sort_recordings(args.input_dir)]
        if not recording_paths:
            logger.warning(f"No audio files found in {args.input_dir}. Exiting.")
            sys.exit(0)
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        sys.exit(1)

    base_output_dir = os.path.join(args.input_dir, "Sentences")
    try:
        ensure_dir_exists(base_output_dir)
    except FileSystemError as e:
        logger.critical(f"Could not create output directory: {e}")
        sys.exit(1)

    # --- Initialize Components (ONCE) ---
    # Loading the model once is the point of batch mode
    try:
        logger.info("Initializing SentClip components for batch processing...")
        analyzer = build_analyzer(config)
        logger.info("Components initialized successfully.")
    except SentClipError as e:
        logger.critical(f"Failed to initialize SentClip components: {e}", exc_info=True)
        sys.exit(1)
    except Exception as e:
        logger.critical(f"An unexpected error occurred during component initialization: {e}", exc_info=True)
        sys.exit(1)

    # --- Process Recordings Sequentially ---
    total_files = len(recording_paths)
    files_processed = 0
    files_failed = 0
    batch_start_time = time.time()

    logger.info(f"--- Starting Batch Sentence Splitting for {total_files} files ---")

    with tqdm(total=total_files, unit="file", desc="Starting Batch") as pbar:
        for audio_path in recording_paths:
            audio_filename = os.path.basename(audio_path)
            pbar.set_description(f"Processing: {audio_filename[:30]}...")
            output_dir = os.path.join(base_output_dir, os.path.splitext(audio_filename)[0])

            try:
                logger.info(f"--- Processing recording: {audio_path} ---")
                file_start_time = time.time()

                result = analyzer.analyze(audio_path, output_dir)
                if config.get('write_manifest', True):
                    write_manifest(result, os.path.join(output_dir, config.get('manifest_name') or 'sentences.json'))

                logger.info(f"Split {audio_filename} into {len(result.clips)} clips ({time.time() - file_start_time:.2f}s).")
                files_processed += 1

            except SentClipError as e:
                logger.error(f"SentClip failed for recording '{audio_filename}': {e}")
                files_failed += 1
            except KeyboardInterrupt:
                 logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
                 sys.exit(1)
            except Exception as e:
                logger.error(f"An unexpected error occurred processing '{audio_filename}': {e}", exc_info=True)
                files_failed += 1
            finally:
                 pbar.update(1) # Increment progress bar regardless of success/failure

    logger.info(f"--- Batch Sentence Splitting Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {files_processed}/{total_files} recordings")
    logger.info(f"Failed: {files_failed}/{total_files} recordings")

    sys.exit(1 if files_failed > 0 else 0)


if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("SentClip requires Python 3.8 or later.\n")
        sys.exit(1)

    run_batch_processing()
