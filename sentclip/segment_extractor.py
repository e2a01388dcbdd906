"""Handles cutting time ranges out of an audio file using ffmpeg."""

import ffmpeg
import logging
from .exceptions import ExtractionError
from typing import Optional

logger = logging.getLogger(__name__)

class SegmentExtractor:
    """Extracts one time range of a source recording into its own file."""

    def __init__(self, ffmpeg_path: Optional[str] = None):
        """
        Initializes the SegmentExtractor.

        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd}")

    def build_stream(self, source_path: str, dest_path: str, start_seconds: float, duration_seconds: float):
        """
        Builds the ffmpeg-python stream for one extraction without running it.

        Seeking is done on the input (-ss/-t before -i) and the output codec is
        inferred by ffmpeg from the destination extension.
        """
        return (
            ffmpeg
            .input(source_path, ss=f"{start_seconds:.3f}", t=f"{duration_seconds:.3f}")
            .output(dest_path)
            .overwrite_output() # Same-named clips from an earlier run are replaced
        )

    def extract(self, source_path: str, dest_path: str, start_seconds: float, duration_seconds: float) -> str:
        """
        Extracts [start_seconds, start_seconds + duration_seconds] of the source into dest_path.

        Args:
            source_path: Path to the source audio file.
            dest_path: Path of the clip to write. Its extension selects the container.
            start_seconds: Offset of the clip start in the source.
            duration_seconds: Clip length.

        Returns:
            The destination path.

        Raises:
            ExtractionError: If ffmpeg fails or the range is invalid.
        """
        if start_seconds < 0 or duration_seconds < 0:
            raise ExtractionError(f"Invalid range for {dest_path}: start={start_seconds}, duration={duration_seconds}")

        logger.debug(f"Extracting {start_seconds:.3f}s (+{duration_seconds:.3f}s) from {source_path} to {dest_path}")
        try:
            self.build_stream(source_path, dest_path, start_seconds, duration_seconds).run(
                cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True
            )
            logger.info(f"Extracted segment: {dest_path}")
            return dest_path
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg error extracting segment {dest_path}: {stderr_output}")
            raise ExtractionError(f"ffmpeg failed for {dest_path}: {stderr_output}") from e
        except OSError as e:
            # Raised when the ffmpeg executable itself cannot be started
            logger.error(f"Could not run {self.ffmpeg_cmd} for {dest_path}: {e}", exc_info=True)
            raise ExtractionError(f"Could not run {self.ffmpeg_cmd}: {e}") from e
