"""Writes the analysis result next to the clips as a JSON manifest."""

import json
import logging
import os

from .models import SegmentedAudio
from .exceptions import FileSystemError
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_NAME = "sentences.json"

def write_manifest(result: SegmentedAudio, output_path: str) -> str:
    """
    Serializes an analysis result to UTF-8 JSON.

    Args:
        result: The result returned by AudioAnalyzer.analyze.
        output_path: Path of the manifest file. Overwritten if it exists.

    Returns:
        The manifest path.

    Raises:
        FileSystemError: If the file cannot be written.
    """
    ensure_dir_exists(os.path.dirname(os.path.abspath(output_path)))
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)
    except OSError as e:
        logger.error(f"Could not write manifest {output_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not write manifest {output_path}: {e}") from e
    logger.info(f"Manifest with {len(result.clips)} sentences written to: {output_path}")
    return output_path
