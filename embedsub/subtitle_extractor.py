"""Handles subtitle extraction from video files using ffmpeg and mkvextract."""

import logging
import os
from typing import Optional

from .extraction_chain import ExtractionStrategyChain
from .stream_probe import StreamProbe
from .utils import extracted_subtitle_path

logger = logging.getLogger(__name__)

class SubtitleExtractor:
    """Extracts the first usable text subtitle track of a video to SRT."""

    def __init__(self, stream_probe: StreamProbe, strategy_chain: ExtractionStrategyChain):
        """
        Initializes the SubtitleExtractor.

        Args:
            stream_probe: Lists the subtitle streams of a video.
            strategy_chain: Runs the fallback extraction methods for one stream.
        """
        self.stream_probe = stream_probe
        self.strategy_chain = strategy_chain

    def extract(self, video_path: str) -> Optional[str]:
        """
        Extracts a text subtitle stream from a video file to ``<base>.extracted.srt``.

        Streams are tried in container order; image-based codecs are skipped
        and the first stream that yields a non-empty SRT wins. Re-running
        overwrites the same output file.

        Args:
            video_path: Path to the input video file.

        Returns:
            The path of the extracted SRT file, or None if the video has no
            subtitle stream that could be converted to text.

        Raises:
            FileNotFoundError: If the input video file does not exist.
            ProbeError: If the container cannot be read.
        """
        logger.info(f"Starting subtitle extraction for: {video_path}")
        if not os.path.exists(video_path):
            raise FileNotFoundError(f"Input video file not found: {video_path}")

        probe_result = self.stream_probe.probe_media(video_path)
        streams = probe_result.streams
        if not streams:
            return None

        output_path = extracted_subtitle_path(video_path)
        logger.debug(f"Output subtitle path set to: {output_path}")

        for position, stream in enumerate(streams, start=1):
            logger.info(f"Attempting to extract subtitle stream {position}/{len(streams)} ({stream.describe()})")

            if stream.is_image_based:
                logger.warning(f"Subtitle codec '{stream.codec_name}' is image-based and cannot be converted to text. Skipping to next stream.")
                continue

            result = self.strategy_chain.extract_stream(
                video_path, stream, output_path, container_format=probe_result.container_format
            )
            if result:
                logger.info(f"Successfully extracted subtitle from stream {position} (index: {stream.index}) to {result}")
                return result
            logger.warning(f"Failed to extract subtitle from stream {position} (index: {stream.index}). Trying next stream...")

        logger.warning(f"Could not extract subtitles from any of the {len(streams)} subtitle stream(s) in {video_path}")
        return None
