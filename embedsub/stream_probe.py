"""Reads the subtitle stream layout of a video container with ffprobe."""

import logging
import os
import subprocess
from typing import List

import ffmpeg

from .exceptions import ProbeError
from .media_tools import FFmpegTool
from .models import ProbeResult, SubtitleStream

logger = logging.getLogger(__name__)


class StreamProbe:
    """Lists the subtitle streams of a video file in container order."""

    def __init__(self, ffmpeg_tool: FFmpegTool):
        self.ffmpeg_tool = ffmpeg_tool

    def probe(self, video_path: str) -> List[SubtitleStream]:
        """
        Returns the subtitle streams of a video, ascending by stream index.

        Raises:
            ProbeError: If the container cannot be read or parsed.
        """
        return self.probe_media(video_path).streams

    def probe_media(self, video_path: str) -> ProbeResult:
        """
        Probes a video and returns its container format and subtitle streams.

        Args:
            video_path: Path to the video file.

        Returns:
            A ProbeResult; its stream list is empty when the video has no subtitles.

        Raises:
            ProbeError: If the file is missing, ffprobe is missing, fails,
                        times out, or returns unreadable metadata.
        """
        if not os.path.isfile(video_path):
            raise ProbeError(f"Video file not found: {video_path}")

        try:
            metadata = self.ffmpeg_tool.probe(video_path)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffprobe failed for {video_path}: {stderr_output}")
            raise ProbeError(f"ffprobe could not read {video_path}: {stderr_output.strip()}") from e
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"ffprobe timed out reading {video_path}") from e
        except OSError as e:
            raise ProbeError(f"Could not run ffprobe: {e}") from e
        except ValueError as e:
            raise ProbeError(f"ffprobe returned invalid metadata for {video_path}: {e}") from e

        if not isinstance(metadata, dict):
            raise ProbeError(f"ffprobe returned invalid metadata for {video_path}")

        streams = []
        for stream_data in metadata.get('streams', []):
            if stream_data.get('codec_type') != 'subtitle':
                continue
            if 'index' not in stream_data:
                logger.warning(f"Skipping subtitle stream without an index: {stream_data}")
                continue
            tags = stream_data.get('tags') or {}
            streams.append(SubtitleStream(
                index=int(stream_data['index']),
                codec_name=stream_data.get('codec_name'),
                language=tags.get('language'),
                title=tags.get('title'),
            ))
        streams.sort(key=lambda s: s.index)

        container_format = (metadata.get('format') or {}).get('format_name')
        if streams:
            logger.info(f"Found {len(streams)} subtitle stream(s) in {video_path}")
            for stream in streams:
                logger.debug(f"Subtitle stream: {stream.describe()}")
        else:
            logger.info(f"No subtitle streams found in video: {video_path}")
        return ProbeResult(container_format=container_format, streams=streams)
