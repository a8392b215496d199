#!/usr/bin/env python3
"""
embedsub Batch Processing Entry Point

Extracts and translates the embedded subtitles of every video in a directory,
ordered by size, writing each translation next to its video.
"""

import argparse
import logging
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

# Progress bar library
from tqdm import tqdm

from embedsub.config_loader import ConfigLoader
from embedsub.log_setup import parse_log_level, setup_logging
from embedsub.models import PipelineStatus, TokenUsage
from embedsub.pipeline import SubtitlePipeline
from embedsub.exceptions import EmbedSubError, ConfigurationError

# Initialize logger for this script
logger = logging.getLogger(__name__)

DEFAULT_VIDEO_EXTENSIONS = ('.mkv', '.mp4', '.avi', '.mov', '.wmv', '.flv', '.webm', '.m4v')


@dataclass
class BatchSummary:
    """Counts per outcome plus token usage summed over all videos."""
    total: int = 0
    translated: int = 0
    skipped: int = 0
    no_subtitles: int = 0
    failed: int = 0
    usage: TokenUsage = field(default_factory=TokenUsage)


def find_and_sort_videos(input_dir: str, extensions: Iterable[str] = DEFAULT_VIDEO_EXTENSIONS) -> List[Tuple[str, int]]:
    """
    Finds all video files in the input directory and sorts them by size.

    Args:
        input_dir: The directory to search for video files (not recursive).
        extensions: Accepted file extensions, compared case-insensitively.

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

    accepted = tuple(ext.lower() for ext in extensions)
    videos = []
    logger.info(f"Scanning directory for video files: {input_dir}")
    for filename in sorted(os.listdir(input_dir)):
        if os.path.splitext(filename)[1].lower() in accepted:
            filepath = os.path.join(input_dir, filename)
            try:
                if os.path.isfile(filepath): # Ensure it's actually a file
                    videos.append((filepath, os.path.getsize(filepath)))
            except OSError as e:
                logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    videos.sort(key=lambda item: item[1])
    logger.info(f"Found {len(videos)} video files. Sorted by size (smallest first).")
    return videos


def process_videos(pipeline: SubtitlePipeline, video_paths: List[str], target_language: Optional[str] = None,
                   skip_detection: bool = False, force: bool = False) -> BatchSummary:
    """Runs the pipeline over each video in turn; one failure never stops the batch."""
    summary = BatchSummary(total=len(video_paths))

    with tqdm(total=len(video_paths), unit="video", desc="Starting Batch") as pbar:
        for video_path in video_paths:
            video_filename = os.path.basename(video_path)
            pbar.set_description(f"Processing: {video_filename[:30]}...")
            try:
                result = pipeline.process(video_path, target_language=target_language,
                                          skip_detection=skip_detection, force=force)
                summary.usage = summary.usage + result.usage
                if result.status is PipelineStatus.TRANSLATED:
                    summary.translated += 1
                    logger.info(f"Complete: {os.path.basename(result.output_path)}")
                elif result.status is PipelineStatus.NO_SUBTITLES:
                    summary.no_subtitles += 1
                else:
                    summary.skipped += 1
            except (EmbedSubError, OSError) as e:
                logger.error(f"embedsub failed for video '{video_filename}': {e}")
                summary.failed += 1
            except Exception as e:
                logger.error(f"An unexpected error occurred processing '{video_filename}': {e}", exc_info=True)
                summary.failed += 1
            finally:
                pbar.update(1) # Increment progress bar regardless of success/failure

    return summary


def run_batch_processing():
    """Parses arguments, sets up, and runs the batch subtitle translation."""
    parser = argparse.ArgumentParser(
        description="embedsub Batch: Translate the embedded subtitles of all videos in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-i", "--input-dir",
        required=True,
        help="Directory containing the input video files."
    )
    parser.add_argument(
        "-c", "--config",
        default="config.yaml",
        help="Path to the configuration YAML file."
    )
    parser.add_argument(
        "-l", "--target-lang",
        default=None, # Default taken from config file
        help="Override the target language specified in the config file."
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level for console and file output."
    )
    parser.add_argument(
        "--skip-detection",
        action="store_true",
        help="Translate without checking whether subtitles already are in the target language."
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Translate even if a translated subtitle file already exists."
    )

    args = parser.parse_args()

    # --- Setup Logging (Initial) ---
    setup_logging(log_level=parse_log_level(args.log_level or "INFO"), log_dir='logs', log_file='embedsub_batch_init.log')

    # --- Load Configuration ---
    try:
        config = ConfigLoader().load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}", exc_info=True)
        sys.exit(1)

    # --- Re-configure Logging (Final) ---
    setup_logging(
        log_level=parse_log_level(args.log_level or config.get('log_level', 'INFO')),
        log_dir=config.get('log_dir', 'logs'),
        log_file=config.get('log_file', 'embedsub_batch.log')
    )

    if args.target_lang:
        logger.info(f"Overriding target_language from config with CLI argument: {args.target_lang}")
        config['target_language'] = args.target_lang

    # --- Find and Sort Videos ---
    try:
        videos = find_and_sort_videos(args.input_dir, config.get('video_extensions', DEFAULT_VIDEO_EXTENSIONS))
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        sys.exit(1)
    if not videos:
        logger.warning(f"No video files found in {args.input_dir}. Exiting.")
        sys.exit(0)

    # --- Initialize Components (ONCE) ---
    try:
        pipeline = SubtitlePipeline.from_config(config)
    except EmbedSubError as e:
        logger.critical(f"Failed to initialize embedsub components: {e}", exc_info=True)
        sys.exit(1)

    batch_start_time = time.time()
    logger.info(f"--- Starting Batch Subtitle Translation for {len(videos)} files ---")
    try:
        summary = process_videos(pipeline, [path for path, _ in videos],
                                 skip_detection=args.skip_detection, force=args.force)
    except KeyboardInterrupt:
        logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
        sys.exit(1)

    cost = summary.usage.estimated_cost(config.get('price_input_per_1k', 0.00015),
                                        config.get('price_output_per_1k', 0.0006))
    logger.info("--- Batch Subtitle Translation Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Total files: {summary.total}")
    logger.info(f"Translated: {summary.translated}")
    logger.info(f"Skipped (already translated or same language): {summary.skipped}")
    logger.info(f"No text subtitles: {summary.no_subtitles}")
    logger.info(f"Failed: {summary.failed}")
    logger.info(f"Tokens used: {summary.usage.total_tokens:,} (estimated cost: ${cost:.4f})")

    sys.exit(1 if summary.failed > 0 else 0)


if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("embedsub requires Python 3.8 or later.\n")
        sys.exit(1)

    run_batch_processing()
