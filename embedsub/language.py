"""Subtitle language detection and language-name equivalence."""

import logging
import re
from typing import Dict, FrozenSet, List, Optional

from .exceptions import LanguageDetectionError, TranslationServiceError
from .models import UNKNOWN_LANGUAGE, CompletionRequest, LanguageDetection
from .rate_limiter import NoDelayRateLimiter, RateLimiter
from .subtitle_document import SubtitleDocument
from .translation_service import TranslationService

logger = logging.getLogger(__name__)

# canonical name -> ISO 639-1 code, ISO 639-2 codes, English and native names
LANGUAGE_SYNONYMS: Dict[str, FrozenSet[str]] = {
    'english': frozenset({'en', 'eng', 'english', 'anglais', 'inglés', 'ingles', 'englisch'}),
    'spanish': frozenset({'es', 'spa', 'esp', 'spanish', 'español', 'espanol', 'castellano', 'castilian'}),
    'french': frozenset({'fr', 'fra', 'fre', 'french', 'français', 'francais'}),
    'german': frozenset({'de', 'deu', 'ger', 'german', 'deutsch'}),
    'italian': frozenset({'it', 'ita', 'italian', 'italiano'}),
    'portuguese': frozenset({'pt', 'por', 'portuguese', 'português', 'portugues'}),
    'dutch': frozenset({'nl', 'nld', 'dut', 'dutch', 'nederlands', 'flemish'}),
    'japanese': frozenset({'ja', 'jpn', 'japanese', '日本語'}),
    'korean': frozenset({'ko', 'kor', 'korean', '한국어'}),
    'chinese': frozenset({'zh', 'zho', 'chi', 'chinese', '中文', 'mandarin', 'cantonese'}),
    'russian': frozenset({'ru', 'rus', 'russian', 'русский'}),
    'arabic': frozenset({'ar', 'ara', 'arabic', 'العربية'}),
    'hindi': frozenset({'hi', 'hin', 'hindi', 'हिन्दी', 'हिंदी'}),
    'turkish': frozenset({'tr', 'tur', 'turkish', 'türkçe', 'turkce'}),
    'polish': frozenset({'pl', 'pol', 'polish', 'polski'}),
    'swedish': frozenset({'sv', 'swe', 'swedish', 'svenska'}),
}

LANGUAGE_CODES: Dict[str, str] = {
    'english': 'en', 'spanish': 'es', 'french': 'fr', 'german': 'de',
    'italian': 'it', 'portuguese': 'pt', 'dutch': 'nl', 'japanese': 'ja',
    'korean': 'ko', 'chinese': 'zh', 'russian': 'ru', 'arabic': 'ar',
    'hindi': 'hi', 'turkish': 'tr', 'polish': 'pl', 'swedish': 'sv',
}

_WORD = re.compile(r"\w+")

DETECTION_SYSTEM_PROMPT = (
    "You are a language detection expert. Identify the language of the provided text. "
    "Respond with ONLY the language name in English (e.g., 'English', 'French', 'Spanish', "
    "'Japanese', 'Korean', 'German', etc.). Do not include any other text or explanation."
)


def _words(name: str) -> List[str]:
    return _WORD.findall(name.lower())


def canonical_language(name: Optional[str]) -> Optional[str]:
    """Maps a language name or code to its canonical table key, by whole words."""
    if not name:
        return None
    words = _words(name)
    for canonical, synonyms in LANGUAGE_SYNONYMS.items():
        if any(word in synonyms for word in words):
            return canonical
    return None


def languages_match(detected: Optional[str], target: Optional[str]) -> bool:
    """
    Decides whether a detected language is the same as the target language.

    Matches on case-insensitive equality, on either name containing the other
    ("English (US)" / "English", "Japanese" / "Japan"), or on both names
    resolving to the same entry of LANGUAGE_SYNONYMS ("English" / "eng").
    "Unknown" never matches.
    """
    detected_norm = (detected or '').strip().lower()
    target_norm = (target or '').strip().lower()
    if not detected_norm or not target_norm:
        return False
    if detected_norm == UNKNOWN_LANGUAGE.lower():
        return False
    if detected_norm == target_norm:
        return True
    if target_norm in detected_norm or detected_norm in target_norm:
        return True

    detected_canonical = canonical_language(detected_norm)
    return detected_canonical is not None and detected_canonical == canonical_language(target_norm)


def language_code(name: str) -> str:
    """Short code used in output file names: ISO 639-1 when known, else the first two letters."""
    canonical = canonical_language(name)
    if canonical:
        return LANGUAGE_CODES[canonical]
    return name.strip().lower()[:2]


class LanguageDetector:
    """Classifies the language of a subtitle file with the text-generation service."""

    def __init__(
        self,
        service: TranslationService,
        model: str,
        sample_chars: int = 500,
        min_sample_chars: int = 50,
        max_output_tokens: int = 50,
        temperature: float = 0.1,
        rate_limiter: Optional[RateLimiter] = None
    ):
        self.service = service
        self.model = model
        self.sample_chars = sample_chars
        self.min_sample_chars = min_sample_chars
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.rate_limiter = rate_limiter or NoDelayRateLimiter()

    def build_sample(self, document: SubtitleDocument) -> str:
        """Joins subtitle text lines until roughly ``sample_chars`` characters are collected."""
        parts = []
        char_count = 0
        for line in document.iter_text_lines():
            parts.append(line)
            char_count += len(line)
            if char_count >= self.sample_chars:
                break
        return " ".join(parts)

    def detect(self, document_path: str) -> LanguageDetection:
        """
        Detects the language of a subtitle file.

        Args:
            document_path: Path to the SRT file.

        Returns:
            The language name as returned by the service, or "Unknown" when
            the file holds too little text to classify.

        Raises:
            FileNotFoundError: If the file does not exist.
            LanguageDetectionError: If the service call fails.
        """
        logger.info("Detecting subtitle language...")
        sample = self.build_sample(SubtitleDocument.read(document_path))

        if len(sample.strip()) < self.min_sample_chars:
            logger.warning("Not enough text to detect language reliably")
            return LanguageDetection(language=UNKNOWN_LANGUAGE)

        logger.debug(f"Language detection sample ({len(sample)} chars): {sample[:100]}...")
        request = CompletionRequest(
            model=self.model,
            system_prompt=DETECTION_SYSTEM_PROMPT,
            user_content=f"What language is this text?\n\n{sample[:1000]}",
            max_output_tokens=self.max_output_tokens,
            temperature=self.temperature,
        )
        self.rate_limiter.wait()
        try:
            response = self.service.complete(request)
        except TranslationServiceError as e:
            raise LanguageDetectionError(f"Language detection request failed: {e}") from e

        language = response.text.strip() or UNKNOWN_LANGUAGE
        logger.info(f"Detected language: {language}")
        return LanguageDetection(language=language, usage=response.usage)
