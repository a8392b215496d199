"""Ordered fallback strategies for turning one subtitle stream into an SRT file."""

import logging
import os
from typing import Callable, Iterable, List, Optional

from .exceptions import EmptyOutputError, ToolError
from .media_tools import FFmpegTool, MkvExtractTool, ToolResult
from .models import (
    AttemptStatus,
    ExtractionAttempt,
    ExtractionOptions,
    ExtractionStrategy,
    StrategyKind,
    SubtitleStream,
)
from .utils import file_has_content, remove_file

logger = logging.getLogger(__name__)

MATROSKA_EXTENSIONS = ('.mkv', '.mka', '.mks', '.webm')

# Native file extension mkvextract should write for a codec.
TRACK_CODEC_EXTENSIONS = {
    'subrip': 'srt',
    'srt': 'srt',
    'ass': 'ass',
    'ssa': 'ssa',
    'webvtt': 'vtt',
}
DEFAULT_TRACK_EXTENSION = 'vtt'

REMUX_EXTENSIONS = ('vtt', 'srt', 'ass', 'ssa')
REENCODE_CODECS = ('webvtt', 'ass', 'subrip', 'mov_text', 'text')


def first_success(attempts: Iterable[Callable[[], ExtractionAttempt]]) -> Optional[ExtractionAttempt]:
    """Runs attempts in order and returns the first successful one, or None."""
    for run_attempt in attempts:
        attempt = run_attempt()
        if attempt.succeeded:
            return attempt
    return None


def is_matroska(video_path: str, container_format: Optional[str] = None) -> bool:
    if container_format and 'matroska' in container_format.lower():
        return True
    return os.path.splitext(video_path)[1].lower() in MATROSKA_EXTENSIONS


def build_ffmpeg_strategies(fix_sub_duration: bool = True) -> List[ExtractionStrategy]:
    """The ffmpeg part of the chain: remux, SRT codec, SRT format, codec list."""
    strategies = [
        ExtractionStrategy(
            strategy_id=f"remux_{ext}",
            kind=StrategyKind.FFMPEG,
            extension=ext,
            options=ExtractionOptions(copy=True, fix_sub_duration=fix_sub_duration),
        )
        for ext in REMUX_EXTENSIONS
    ]
    strategies.append(ExtractionStrategy(
        strategy_id="reencode_srt",
        kind=StrategyKind.FFMPEG,
        options=ExtractionOptions(codec='srt', fix_sub_duration=fix_sub_duration),
    ))
    strategies.append(ExtractionStrategy(
        strategy_id="force_format_srt",
        kind=StrategyKind.FFMPEG,
        options=ExtractionOptions(output_format='srt', fix_sub_duration=fix_sub_duration),
    ))
    strategies.extend(
        ExtractionStrategy(
            strategy_id=f"reencode_{codec}",
            kind=StrategyKind.FFMPEG,
            options=ExtractionOptions(codec=codec, fix_sub_duration=fix_sub_duration),
        )
        for codec in REENCODE_CODECS
    )
    return strategies


class ExtractionStrategyChain:
    """
    Tries each extraction strategy against one stream until a non-empty SRT exists.

    Failures of individual attempts are logged and never raised.
    """

    def __init__(
        self,
        ffmpeg_tool: FFmpegTool,
        track_extractor: Optional[MkvExtractTool] = None,
        fix_sub_duration: bool = True
    ):
        self.ffmpeg_tool = ffmpeg_tool
        self.track_extractor = track_extractor
        self.fix_sub_duration = fix_sub_duration

    def strategies_for(self, video_path: str, stream: SubtitleStream,
                       container_format: Optional[str] = None) -> List[ExtractionStrategy]:
        """Returns the ordered strategies that apply to a stream of this video."""
        strategies = []
        if is_matroska(video_path, container_format):
            if self.track_extractor is not None and self.track_extractor.is_available():
                codec = (stream.codec_name or '').lower()
                strategies.append(ExtractionStrategy(
                    strategy_id="mkvextract",
                    kind=StrategyKind.TRACK_EXTRACT,
                    extension=TRACK_CODEC_EXTENSIONS.get(codec, DEFAULT_TRACK_EXTENSION),
                ))
            else:
                logger.info("mkvextract not available, falling back to ffmpeg methods")
        strategies.extend(build_ffmpeg_strategies(self.fix_sub_duration))
        return strategies

    def extract_stream(self, video_path: str, stream: SubtitleStream, output_path: str,
                       container_format: Optional[str] = None) -> Optional[str]:
        """
        Extracts one stream to ``output_path`` as SRT.

        Returns:
            ``output_path`` on success, None when every strategy failed.
        """
        strategies = self.strategies_for(video_path, stream, container_format)
        logger.info(f"Trying {len(strategies)} extraction methods for codec '{stream.codec_name or 'unknown'}'...")

        def make_attempt(number: int, strategy: ExtractionStrategy) -> Callable[[], ExtractionAttempt]:
            def run() -> ExtractionAttempt:
                logger.info(f"  Method {number}: {strategy.strategy_id} ({strategy.options.describe()})")
                attempt = self.run_strategy(video_path, stream, strategy, output_path)
                if attempt.succeeded:
                    logger.info(f"    SUCCESS - {attempt.detail}")
                else:
                    logger.info(f"    FAILED - {attempt.detail}")
                return attempt
            return run

        winner = first_success(
            make_attempt(number, strategy) for number, strategy in enumerate(strategies, start=1)
        )
        if winner is None:
            logger.warning(f"All extraction methods failed for stream index {stream.index}")
            return None
        return winner.output_path

    def run_strategy(self, video_path: str, stream: SubtitleStream,
                     strategy: ExtractionStrategy, output_path: str) -> ExtractionAttempt:
        """Runs one strategy, converting its intermediate file to SRT if needed."""
        if strategy.needs_conversion:
            target_path = f"{os.path.splitext(output_path)[0]}.{strategy.extension}"
        else:
            target_path = output_path

        if strategy.kind is StrategyKind.TRACK_EXTRACT:
            attempt = self._attempt(
                strategy, target_path,
                lambda: self.track_extractor.extract_track(video_path, stream.index, target_path)
            )
        else:
            attempt = self._attempt(
                strategy, target_path,
                lambda: self.ffmpeg_tool.extract_stream(video_path, stream.index, target_path, strategy.options)
            )

        if not attempt.succeeded or not strategy.needs_conversion:
            return attempt

        logger.info(f"    Got {strategy.extension} file, converting to SRT...")
        converted = self._attempt(
            strategy, output_path,
            lambda: self.ffmpeg_tool.convert_to_srt(target_path, output_path)
        )
        remove_file(target_path)
        return converted

    def _attempt(self, strategy: ExtractionStrategy, output_path: str,
                 invoke: Callable[[], ToolResult]) -> ExtractionAttempt:
        remove_file(output_path) # stale output from an earlier run

        try:
            self._run_tool(output_path, invoke)
        except ToolError as e:
            self._log_diagnostics(e.diagnostics)
            remove_file(output_path)
            return ExtractionAttempt(strategy, AttemptStatus.TOOL_ERROR, detail=str(e))
        except EmptyOutputError as e:
            remove_file(output_path)
            return ExtractionAttempt(strategy, AttemptStatus.EMPTY, detail=str(e))

        size = os.path.getsize(output_path)
        return ExtractionAttempt(strategy, AttemptStatus.SUCCESS, output_path=output_path,
                                 detail=f"created {size} byte file")

    @staticmethod
    def _run_tool(output_path: str, invoke: Callable[[], ToolResult]) -> None:
        """
        Raises:
            ToolError: If the tool failed, timed out or could not be started.
            EmptyOutputError: If the tool left no file or an empty one.
        """
        result = invoke()
        if not result.succeeded:
            raise ToolError(f"tool {result.describe()}", result.diagnostics)
        if not file_has_content(output_path):
            raise EmptyOutputError("file is empty" if os.path.exists(output_path) else "file not created")

    @staticmethod
    def _log_diagnostics(diagnostics: str) -> None:
        lines = [line for line in diagnostics.splitlines() if line.strip()]
        if not lines:
            logger.debug("    Tool stderr: none")
            return
        logger.debug(f"    Tool stderr ({len(lines)} lines):")
        for line in lines:
            logger.debug(f"      {line}")
