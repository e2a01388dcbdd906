"""Runs the per-sentence clip extractions concurrently and joins their results."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence

from tqdm import tqdm

from .exceptions import ExtractionError
from .models import Sentence, SentenceClip
from .segment_extractor import SegmentExtractor
from .utils import audio_extension, ensure_dir_exists, format_timestamp

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4

def clip_file_name(ordinal: int, extension: str) -> str:
    """Deterministic clip name for the sentence at the given 1-based ordinal."""
    return f"sentence_{ordinal}{extension}"

class ClipOrchestrator:
    """
    Cuts one clip per sentence out of a source recording.

    Extractions are independent of each other and are submitted together to a
    thread pool (each one runs an ffmpeg process). The join is all-or-fail:
    the first failure observed aborts the whole step, while extractions
    already in flight are left to finish and their results are discarded.
    Clips written before the failure stay on disk.
    """

    def __init__(self, extractor: SegmentExtractor, max_workers: int = DEFAULT_MAX_WORKERS, show_progress: bool = False):
        """
        Initializes the ClipOrchestrator.

        Args:
            extractor: The collaborator that performs a single extraction.
            max_workers: Maximum number of extractions running at once.
            show_progress: Whether to display a tqdm progress bar.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.extractor = extractor
        self.max_workers = max_workers
        self.show_progress = show_progress

    def extract_all(self, source_path: str, sentences: Sequence[Sentence], output_dir: str) -> List[SentenceClip]:
        """
        Extracts every sentence's time range into output_dir.

        Args:
            source_path: Path to the source audio file.
            sentences: Sentences in ordinal order.
            output_dir: Destination directory, created if absent.

        Returns:
            One SentenceClip per sentence, in the order of `sentences`.

        Raises:
            ExtractionError: If any single extraction fails.
            FileSystemError: If the output directory cannot be created.
        """
        # Created once, before the fan-out, so the workers never race on it
        ensure_dir_exists(output_dir)
        if not sentences:
            logger.info("No sentences to extract.")
            return []

        extension = audio_extension(source_path)
        clips: List[Optional[SentenceClip]] = [None] * len(sentences)
        workers = min(self.max_workers, len(sentences))
        logger.info(f"Extracting {len(sentences)} clips into {output_dir} with {workers} worker(s)...")

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sentclip-extract")
        try:
            futures = {}
            for index, sentence in enumerate(sentences):
                file_name = clip_file_name(index + 1, extension)
                file_path = os.path.join(output_dir, file_name)
                logger.debug(f"Queueing {file_name} [{format_timestamp(sentence.start_time)} - {format_timestamp(sentence.end_time)}]")
                future = executor.submit(
                    self.extractor.extract, source_path, file_path, sentence.start_time, sentence.duration
                )
                futures[future] = (index, SentenceClip(sentence=sentence, file_name=file_name, file_path=file_path))

            with tqdm(total=len(futures), unit="clip", desc="Extracting clips", disable=not self.show_progress) as pbar:
                for future in as_completed(futures):
                    index, clip = futures[future]
                    try:
                        future.result()
                    except ExtractionError:
                        logger.error(f"Extraction failed for {clip.file_name}; aborting remaining clips.")
                        raise
                    except Exception as e:
                        logger.error(f"Unexpected error extracting {clip.file_name}: {e}", exc_info=True)
                        raise ExtractionError(f"Extraction failed for {clip.file_name}: {e}") from e
                    clips[index] = clip
                    pbar.update(1)
        finally:
            # Running and queued extractions are not cancelled; nothing waits for them either
            executor.shutdown(wait=False)

        logger.info(f"Extracted {len(clips)} clips.")
        return clips
