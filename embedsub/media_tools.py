"""Wrappers around the external ffmpeg, ffprobe and mkvextract executables."""

import logging
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, Optional

import ffmpeg

from .models import ExtractionOptions

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024 # 10 MB
VERSION_PROBE_TIMEOUT_SECONDS = 10.0


@dataclass
class ToolResult:
    """Result of one blocking tool invocation."""
    succeeded: bool
    diagnostics: str = ""
    return_code: Optional[int] = None
    timed_out: bool = False

    def describe(self) -> str:
        if self.timed_out:
            return "timed out"
        if self.return_code is None:
            return "could not be started"
        return f"exit code {self.return_code}"


def _decode_bounded(raw: Optional[bytes], max_bytes: int) -> str:
    """Decodes captured output, keeping only the last ``max_bytes`` bytes."""
    if not raw:
        return ""
    if len(raw) > max_bytes:
        raw = raw[-max_bytes:]
    return raw.decode('utf-8', errors='replace')


class FFmpegTool:
    """Runs ffprobe/ffmpeg through the ffmpeg-python bindings."""

    def __init__(
        self,
        ffmpeg_path: Optional[str] = None,
        ffprobe_path: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    ):
        """
        Initializes the FFmpegTool.

        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
            ffprobe_path: Optional path to the ffprobe executable.
            timeout: Seconds after which a single invocation is killed.
            max_output_bytes: Cap on the diagnostic output kept per invocation.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        self.ffprobe_cmd = ffprobe_path or 'ffprobe'
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd}, ffprobe command: {self.ffprobe_cmd}")

    def probe(self, video_path: str) -> Dict[str, Any]:
        """
        Returns ffprobe's format and stream metadata for a file.

        Raises:
            ffmpeg.Error: If ffprobe exits with an error.
            subprocess.TimeoutExpired: If ffprobe exceeds the timeout.
            OSError: If ffprobe cannot be started.
            ValueError: If the JSON output cannot be decoded.
        """
        return ffmpeg.probe(video_path, cmd=self.ffprobe_cmd, timeout=self.timeout)

    def extract_stream(self, video_path: str, stream_index: int, output_path: str, options: ExtractionOptions) -> ToolResult:
        """Writes one subtitle stream of ``video_path`` to ``output_path``."""
        input_kwargs = {}
        if options.fix_sub_duration:
            input_kwargs['fix_sub_duration'] = None # flag without a value

        output_kwargs = {'avoid_negative_ts': 'make_zero'}
        if options.copy:
            output_kwargs['c:s'] = 'copy'
        elif options.codec:
            output_kwargs['c:s'] = options.codec
        if options.output_format:
            output_kwargs['format'] = options.output_format

        source = ffmpeg.input(video_path, **input_kwargs)
        stream = (
            ffmpeg
            .output(source[str(stream_index)], output_path, **output_kwargs)
            .overwrite_output()
        )
        return self._run(stream)

    def convert_to_srt(self, input_path: str, output_path: str) -> ToolResult:
        """Re-encodes a standalone subtitle file (vtt, ass, ...) into SRT."""
        stream = (
            ffmpeg
            .input(input_path)
            .output(output_path, **{'c:s': 'srt'})
            .overwrite_output()
        )
        return self._run(stream)

    def _run(self, stream) -> ToolResult:
        logger.debug(f"FFmpeg command: {' '.join(ffmpeg.compile(stream, cmd=self.ffmpeg_cmd))}")
        try:
            process = ffmpeg.run_async(stream, cmd=self.ffmpeg_cmd, pipe_stdout=True, pipe_stderr=True)
        except OSError as e:
            logger.error(f"Could not start ffmpeg ({self.ffmpeg_cmd}): {e}")
            return ToolResult(succeeded=False, diagnostics=str(e))

        try:
            _, stderr = process.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            _, stderr = process.communicate()
            logger.warning(f"ffmpeg timed out after {self.timeout}s and was killed")
            return ToolResult(
                succeeded=False,
                diagnostics=_decode_bounded(stderr, self.max_output_bytes),
                return_code=process.returncode,
                timed_out=True
            )

        return ToolResult(
            succeeded=process.returncode == 0,
            diagnostics=_decode_bounded(stderr, self.max_output_bytes),
            return_code=process.returncode
        )


class MkvExtractTool:
    """Dedicated Matroska track extractor (mkvtoolnix)."""

    # mkvextract exits with 1 when it only emitted warnings.
    MAX_SUCCESS_EXIT_CODE = 1

    def __init__(
        self,
        mkvextract_path: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    ):
        self.mkvextract_cmd = mkvextract_path or 'mkvextract'
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes
        self._available: Optional[bool] = None

    def is_available(self) -> bool:
        """Runs ``mkvextract --version`` once and caches the answer."""
        if self._available is None:
            try:
                subprocess.run(
                    [self.mkvextract_cmd, '--version'],
                    capture_output=True,
                    timeout=VERSION_PROBE_TIMEOUT_SECONDS,
                    check=True
                )
                self._available = True
            except (OSError, subprocess.SubprocessError) as e:
                logger.debug(f"mkvextract not available: {e}")
                self._available = False
        return self._available

    def extract_track(self, video_path: str, track_index: int, output_path: str) -> ToolResult:
        """Extracts a raw track: ``mkvextract tracks <video> <index>:<output>``."""
        args = [self.mkvextract_cmd, 'tracks', video_path, f"{track_index}:{output_path}"]
        logger.debug(f"mkvextract command: {' '.join(args)}")
        try:
            completed = subprocess.run(args, capture_output=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            logger.warning(f"mkvextract timed out after {self.timeout}s")
            return ToolResult(
                succeeded=False,
                diagnostics=_decode_bounded(e.stderr or e.stdout, self.max_output_bytes),
                timed_out=True
            )
        except OSError as e:
            logger.error(f"Could not start mkvextract ({self.mkvextract_cmd}): {e}")
            return ToolResult(succeeded=False, diagnostics=str(e))

        diagnostics = "\n".join(
            part for part in (
                _decode_bounded(completed.stdout, self.max_output_bytes),
                _decode_bounded(completed.stderr, self.max_output_bytes),
            ) if part
        )
        return ToolResult(
            succeeded=completed.returncode <= self.MAX_SUCCESS_EXIT_CODE,
            diagnostics=diagnostics,
            return_code=completed.returncode
        )
