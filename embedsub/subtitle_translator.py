"""Translates an extracted subtitle file into the target language."""

import logging
import os
import time
from typing import List, Sequence

from .chunk_translator import ChunkTranslator
from .chunker import DEFAULT_MAX_CHUNK_CHARS, split_into_chunks
from .exceptions import IntegrityError, LanguageDetectionError, TranslationError
from .language import LanguageDetector, language_code, languages_match
from .models import (
    UNKNOWN_LANGUAGE,
    Chunk,
    ChunkTranslation,
    TokenUsage,
    TranslationResult,
    TranslationStatus,
)
from .subtitle_document import ENTRY_SEPARATOR, SubtitleDocument
from .utils import remove_file, translated_subtitle_path, write_text_atomic

logger = logging.getLogger(__name__)

class SubtitleTranslator:
    """
    Detects the source language, then chunks, translates and reassembles a subtitle file.

    The extracted input file is deleted once the result is known, whether the
    file was translated or skipped because it already is in the target
    language. On failure it is left in place and no output is written.
    """

    def __init__(
        self,
        detector: LanguageDetector,
        chunk_translator: ChunkTranslator,
        max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
        skip_same_language: bool = True,
        price_input_per_1k: float = 0.00015,
        price_output_per_1k: float = 0.0006
    ):
        self.detector = detector
        self.chunk_translator = chunk_translator
        self.max_chunk_chars = max_chunk_chars
        self.skip_same_language = skip_same_language
        self.price_input_per_1k = price_input_per_1k
        self.price_output_per_1k = price_output_per_1k

    def translate(self, document_path: str, video_path: str, target_language: str,
                  skip_detection: bool = False) -> TranslationResult:
        """
        Translates an extracted SRT file and writes ``<base>.<code>.srt`` next to the video.

        Args:
            document_path: Path to the extracted SRT file.
            video_path: Path of the video the subtitle came from.
            target_language: Language name, e.g. "Spanish".
            skip_detection: Translate without checking the source language.

        Returns:
            A TranslationResult, SKIPPED when the subtitle already is in the
            target language, TRANSLATED with the output path otherwise.

        Raises:
            FileNotFoundError: If the SRT file does not exist.
            TranslationServiceError: If a translation request fails.
            EmptyTranslationError: If a chunk came back empty.
            IntegrityError: If the translated chunk count differs from the source.
            FileSystemError: If the output file cannot be written.
        """
        start_time = time.time()
        logger.info("=== Starting subtitle translation ===")
        logger.info(f"Source SRT: {document_path}")
        logger.info(f"Target language: {target_language}")

        if not os.path.exists(document_path):
            raise FileNotFoundError(f"SRT file not found: {document_path}")

        usage = TokenUsage()
        detected_language = None

        if skip_detection or not self.skip_same_language:
            logger.info("Language detection skipped")
        else:
            try:
                detection = self.detector.detect(document_path)
                detected_language = detection.language
                usage = usage + detection.usage
            except LanguageDetectionError as e:
                logger.warning(f"Language detection failed, proceeding with translation: {e}")
                detected_language = UNKNOWN_LANGUAGE

            if languages_match(detected_language, target_language):
                logger.info(f"Subtitle is already in target language (detected: {detected_language}, target: {target_language})")
                remove_file(document_path)
                self._log_usage(usage, start_time)
                return TranslationResult(
                    status=TranslationStatus.SKIPPED,
                    detected_language=detected_language,
                    usage=usage,
                )
            logger.info(f"Source language ({detected_language}) differs from target ({target_language}), proceeding with translation")

        document = SubtitleDocument.read(document_path)
        if not document.entries:
            raise TranslationError(f"Subtitle file has no entries to translate: {document_path}")
        chunks = split_into_chunks(document, self.max_chunk_chars)
        translations = self.chunk_translator.translate_all(chunks, target_language)
        for translation in translations:
            usage = usage + translation.usage

        output_path = translated_subtitle_path(video_path, language_code(target_language))
        write_text_atomic(output_path, self.reassemble(chunks, translations))
        logger.info(f"Translated subtitle written to: {output_path}")

        remove_file(document_path)
        logger.info("=== Translation complete ===")
        self._log_usage(usage, start_time)
        return TranslationResult(
            status=TranslationStatus.TRANSLATED,
            output_path=output_path,
            detected_language=detected_language,
            usage=usage,
        )

    @staticmethod
    def reassemble(chunks: Sequence[Chunk], translations: List[ChunkTranslation]) -> str:
        """
        Joins translated chunks in source order with a blank line between them.

        Raises:
            IntegrityError: If the number of translations differs from the number of chunks.
        """
        if len(translations) != len(chunks):
            raise IntegrityError(f"Chunk count mismatch: {len(chunks)} original vs {len(translations)} translated")
        ordered = sorted(translations, key=lambda t: t.index)
        return ENTRY_SEPARATOR.join(t.text.strip() for t in ordered) + "\n"

    def _log_usage(self, usage: TokenUsage, start_time: float) -> None:
        logger.info(f"Duration: {time.time() - start_time:.2f}s")
        logger.info(f"Tokens: {usage.prompt_tokens:,} prompt, {usage.completion_tokens:,} completion, {usage.total_tokens:,} total")
        cost = usage.estimated_cost(self.price_input_per_1k, self.price_output_per_1k)
        logger.info(f"Estimated cost: ${cost:.4f}")
