"""Orchestrates the extract-then-translate pipeline for one video."""

import logging
import os
import time
from typing import List, Optional

from .chunk_translator import ChunkTranslator
from .exceptions import EmbedSubError
from .extraction_chain import ExtractionStrategyChain
from .language import LanguageDetector, language_code
from .media_tools import FFmpegTool, MkvExtractTool
from .models import PipelineResult, PipelineStatus
from .rate_limiter import FixedDelayRateLimiter, NoDelayRateLimiter
from .stream_probe import StreamProbe
from .subtitle_extractor import SubtitleExtractor
from .subtitle_translator import SubtitleTranslator
from .translation_service import OpenAIChatService, TranslationService
from .utils import video_base_path

logger = logging.getLogger(__name__)

DEFAULT_TARGET_LANGUAGE = 'English'
DEFAULT_MODEL = 'gpt-4o-mini'

class SubtitlePipeline:
    """
    Manages the end-to-end process of producing a translated subtitle for a video file.
    """

    def __init__(
        self,
        config: dict,
        extractor: SubtitleExtractor,
        translator: SubtitleTranslator,
    ):
        """
        Initializes the SubtitlePipeline.

        Args:
            config: A dictionary containing configuration settings.
            extractor: An instance of SubtitleExtractor.
            translator: An instance of SubtitleTranslator.
        """
        self.config = config
        self.extractor = extractor
        self.translator = translator
        self.target_language = config.get('target_language', DEFAULT_TARGET_LANGUAGE)

    @classmethod
    def from_config(cls, config: dict, service: Optional[TranslationService] = None) -> "SubtitlePipeline":
        """
        Builds every component from configuration.

        Args:
            config: Loaded configuration.
            service: Translation service to use. Defaults to OpenAIChatService.from_config.

        Raises:
            ConfigurationError: If the OpenAI API key is missing.
        """
        timeout = float(config.get('tool_timeout_seconds', 60))
        max_output_bytes = int(config.get('tool_output_max_bytes', 10 * 1024 * 1024))
        ffmpeg_tool = FFmpegTool(
            ffmpeg_path=config.get('ffmpeg_path'),
            ffprobe_path=config.get('ffprobe_path'),
            timeout=timeout,
            max_output_bytes=max_output_bytes
        )
        track_extractor = MkvExtractTool(
            mkvextract_path=config.get('mkvextract_path'),
            timeout=timeout,
            max_output_bytes=max_output_bytes
        )
        extractor = SubtitleExtractor(
            stream_probe=StreamProbe(ffmpeg_tool),
            strategy_chain=ExtractionStrategyChain(
                ffmpeg_tool,
                track_extractor,
                fix_sub_duration=config.get('fix_sub_duration', True)
            )
        )

        service = service or OpenAIChatService.from_config(config)
        model = config.get('openai_model', DEFAULT_MODEL)
        delay = float(config.get('request_delay_seconds', 1.0))
        rate_limiter = FixedDelayRateLimiter(delay) if delay > 0 else NoDelayRateLimiter()
        detector = LanguageDetector(
            service=service,
            model=model,
            sample_chars=config.get('detection_sample_chars', 500),
            min_sample_chars=config.get('detection_min_sample_chars', 50),
            rate_limiter=rate_limiter
        )
        chunk_translator = ChunkTranslator(
            service=service,
            model=model,
            max_output_tokens=config.get('max_output_tokens', 8000),
            temperature=config.get('translation_temperature', 0.3),
            rate_limiter=rate_limiter,
            short_translation_ratio=config.get('short_translation_ratio', 0.3)
        )
        translator = SubtitleTranslator(
            detector=detector,
            chunk_translator=chunk_translator,
            max_chunk_chars=config.get('max_chunk_chars', 10000),
            skip_same_language=config.get('skip_same_language', True),
            price_input_per_1k=config.get('price_input_per_1k', 0.00015),
            price_output_per_1k=config.get('price_output_per_1k', 0.0006)
        )
        return cls(config=config, extractor=extractor, translator=translator)

    def existing_subtitle_paths(self, video_path: str, target_language: str) -> List[str]:
        """Translated subtitles for this video that are already on disk."""
        base = video_base_path(video_path)
        candidates = [
            f"{base}.{language_code(target_language)}.srt",
            f"{base}.{target_language.strip().lower()}.srt",
        ]
        return [path for path in dict.fromkeys(candidates) if os.path.exists(path)]

    def process(self, video_path: str, target_language: Optional[str] = None,
                skip_detection: bool = False, force: bool = False) -> PipelineResult:
        """
        Executes the full pipeline for a single video.

        Args:
            video_path: Path to the input video file.
            target_language: Overrides the configured target language.
            skip_detection: Translate without checking the subtitle's language.
            force: Translate even when a translated subtitle already exists.

        Returns:
            A PipelineResult describing what happened.

        Raises:
            FileNotFoundError: If the input video is not found.
            EmbedSubError: For probe, translation or file system errors.
        """
        target_language = target_language or self.target_language
        start_time = time.time()
        logger.info(f"--- Starting embedsub process for: {video_path} (target: {target_language}) ---")

        if not os.path.isfile(video_path):
            raise FileNotFoundError(f"Input video file not found: {video_path}")

        existing = self.existing_subtitle_paths(video_path, target_language)
        if existing and not force:
            logger.info(f"Subtitle already exists, skipping: {existing[0]}")
            return PipelineResult(video_path=video_path, status=PipelineStatus.SKIPPED_EXISTING,
                                  output_path=existing[0])

        try:
            logger.info("Step 1: Extracting subtitle from video...")
            extracted_path = self.extractor.extract(video_path)
            if not extracted_path:
                logger.warning(f"No embedded text subtitles found in video: {video_path}")
                return PipelineResult(video_path=video_path, status=PipelineStatus.NO_SUBTITLES)

            logger.info(f"Step 2: Translating subtitle to {target_language}...")
            result = self.translator.translate(extracted_path, video_path, target_language,
                                               skip_detection=skip_detection)
        except EmbedSubError as e:
            logger.error(f"embedsub process failed for {video_path}: {e}")
            raise

        status = PipelineStatus.SKIPPED_SAME_LANGUAGE if result.skipped else PipelineStatus.TRANSLATED
        logger.info(f"--- embedsub process finished ({status.value}) in {time.time() - start_time:.2f} seconds ---")
        return PipelineResult(
            video_path=video_path,
            status=status,
            output_path=result.output_path,
            usage=result.usage,
        )
