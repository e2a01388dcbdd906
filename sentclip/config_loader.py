"""Handles loading configuration from YAML files."""

import yaml
import os
import logging
from typing import Any, Dict
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'log_dir': 'logs',
    'log_file': 'sentclip.log',
    # Transcription
    'transcriber': 'whisper', # 'whisper' or 'saved'
    'saved_transcript_path': None,
    'model': 'base.en',
    'device': 'cuda',
    'whisper_fp16': True,
    'encoding': None, # None: inferred from the file extension
    'language_code': 'en-US',
    'enable_automatic_punctuation': True,
    'sample_rate': None,
    # Sentence reconstruction
    'buffer_per_syllable': 0.1,
    'include_trailing_words': False,
    # Clip extraction
    'ffmpeg_path': None,
    'max_workers': 4,
    'show_progress': True,
    # Output
    'write_manifest': True,
    'manifest_name': 'sentences.json',
}

TRANSCRIBERS = ('whisper', 'saved')

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Keys missing from the file take their value from DEFAULT_CONFIG.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML,
                              if there are other reading errors, or if a
                              setting has an invalid value.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
             logger.error(f"Configuration path is not a file: {config_path}")
             raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except IOError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if loaded is None:
            loaded = {} # An empty file means "all defaults"
        if not isinstance(loaded, dict):
            # Handle cases where YAML loads something other than a dictionary (e.g., just a string)
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")

        config = dict(DEFAULT_CONFIG)
        config.update(loaded)
        self.validate(config)
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config

    def validate(self, config: dict) -> None:
        """
        Checks the values the pipeline depends on.

        Raises:
            ConfigurationError: On the first invalid setting found.
        """
        buffer = config.get('buffer_per_syllable')
        if isinstance(buffer, bool) or not isinstance(buffer, (int, float)) or buffer < 0:
            raise ConfigurationError(f"'buffer_per_syllable' must be a non-negative number, got {buffer!r}.")

        workers = config.get('max_workers')
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ConfigurationError(f"'max_workers' must be a positive integer, got {workers!r}.")

        transcriber = config.get('transcriber')
        if transcriber not in TRANSCRIBERS:
            raise ConfigurationError(f"'transcriber' must be one of {', '.join(TRANSCRIBERS)}, got {transcriber!r}.")

        sample_rate = config.get('sample_rate')
        if sample_rate is not None and (isinstance(sample_rate, bool) or not isinstance(sample_rate, int) or sample_rate <= 0):
            raise ConfigurationError(f"'sample_rate' must be a positive integer, got {sample_rate!r}.")
