"""Translates subtitle chunks one request at a time."""

import logging
import time
from typing import List, Optional, Sequence

from .exceptions import EmptyTranslationError, TranslationServiceError
from .models import Chunk, ChunkTranslation, CompletionRequest
from .rate_limiter import FixedDelayRateLimiter, RateLimiter
from .translation_service import TranslationService

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = """You are a professional subtitle translator. Translate the following SRT subtitle content to {target_language}.

CRITICAL RULES:
1. Preserve ALL timestamps exactly as they appear (format: HH:MM:SS,mmm --> HH:MM:SS,mmm)
2. Preserve ALL sequence numbers
3. Maintain the exact SRT format structure
4. Translate ONLY the text content, not numbers or timestamps
5. If text is truncated mid-sentence due to chunking, keep it truncated in translation
6. Preserve special characters, formatting markers (like ♪), and speaker labels (like "- ")
7. Output ONLY the translated subtitle content with no meta-commentary
8. Do NOT add phrases like "Here is the translation"
9. Maintain line breaks within each subtitle entry
10. Keep all blank lines between entries

This is chunk {number} of {total}."""


class ChunkTranslator:
    """Sends each chunk to the translation service with structure-preserving instructions."""

    def __init__(
        self,
        service: TranslationService,
        model: str,
        max_output_tokens: int = 8000,
        temperature: float = 0.3,
        rate_limiter: Optional[RateLimiter] = None,
        short_translation_ratio: float = 0.3
    ):
        """
        Initializes the ChunkTranslator.

        Args:
            service: A TranslationService.
            model: Model identifier sent with every request.
            max_output_tokens: Output budget per chunk.
            temperature: Sampling temperature for translation requests.
            rate_limiter: Waited on before every request. Defaults to one second between requests.
            short_translation_ratio: Translations shorter than this fraction of
                                     the source are logged as possibly truncated.
        """
        self.service = service
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.rate_limiter = rate_limiter or FixedDelayRateLimiter(1.0)
        self.short_translation_ratio = short_translation_ratio

    def translate(self, chunk: Chunk, index: int, total: int, target_language: str) -> ChunkTranslation:
        """
        Translates a single chunk.

        Args:
            chunk: The chunk to translate.
            index: Zero-based position of the chunk.
            total: Number of chunks in the document.
            target_language: Language name, e.g. "Spanish".

        Returns:
            The translated text and the token usage of the request.

        Raises:
            TranslationServiceError: If the request fails.
            EmptyTranslationError: If the service returned no text.
        """
        source_text = chunk.text
        request = CompletionRequest(
            model=self.model,
            system_prompt=SYSTEM_PROMPT_TEMPLATE.format(
                target_language=target_language, number=index + 1, total=total
            ),
            user_content=f"Translate this SRT subtitle content:\n\n{source_text}",
            max_output_tokens=self.max_output_tokens,
            temperature=self.temperature,
        )

        self.rate_limiter.wait()
        logger.info(f"Translating chunk {index + 1}/{total}...")
        start_time = time.time()
        try:
            response = self.service.complete(request)
        except TranslationServiceError as e:
            logger.error(f"Error translating chunk {index + 1}: {e}")
            raise

        translated = response.text
        logger.info(f"Chunk {index + 1}/{total} completed in {time.time() - start_time:.2f}s")
        logger.debug(f"Tokens used: {response.usage.total_tokens}")
        logger.debug(f"Original size: {len(source_text)} characters, translated size: {len(translated)} characters")

        if not translated or not translated.strip():
            raise EmptyTranslationError(f"Empty translation received for chunk {index + 1}/{total}")

        if len(translated) < len(source_text) * self.short_translation_ratio:
            logger.warning(f"Translation seems unusually short for chunk {index + 1} "
                           f"({len(translated)} vs {len(source_text)} characters)")

        return ChunkTranslation(index=index, text=translated, usage=response.usage)

    def translate_all(self, chunks: Sequence[Chunk], target_language: str) -> List[ChunkTranslation]:
        """Translates chunks strictly in order; the first failure aborts the run."""
        total = len(chunks)
        return [self.translate(chunk, i, total, target_language) for i, chunk in enumerate(chunks)]
