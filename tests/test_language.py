from pathlib import Path

import pytest

from conftest import SAMPLE_SRT, CountingRateLimiter, FakeTranslationService, failing_responder

from embedsub.exceptions import LanguageDetectionError
from embedsub.language import (
    DETECTION_SYSTEM_PROMPT,
    LanguageDetector,
    canonical_language,
    language_code,
    languages_match,
)
from embedsub.models import UNKNOWN_LANGUAGE, TokenUsage


@pytest.mark.parametrize(
    "detected, target",
    [
        ("English", "english"),
        ("English (US)", "English"),
        ("Spanish", "Latin American Spanish"),
        ("en", "English"),
        ("Español", "Spanish"),
        ("Deutsch", "german"),
        ("Japanese", "Japan"),
        ("Portuguese", "Portug"),
        ("French", "en"),
    ],
)
def test_languages_match(detected, target):
    assert languages_match(detected, target)


@pytest.mark.parametrize(
    "detected, target",
    [
        ("Unknown", "English"),
        ("unknown", "Unknown"),
        ("Spanish", "Portuguese"),
        ("", "English"),
        (None, "English"),
        ("French", "English"),
    ],
)
def test_languages_do_not_match(detected, target):
    assert not languages_match(detected, target)


def test_language_code():
    assert language_code("Spanish") == "es"
    assert language_code("Brazilian Portuguese") == "pt"
    assert language_code("Japanese") == "ja"
    assert language_code("Klingon") == "kl"


def test_canonical_language_uses_whole_words():
    assert canonical_language("eng") == "english"
    assert canonical_language("Frenchman") is None
    assert canonical_language(None) is None


def _detector(service, **kwargs):
    return LanguageDetector(service=service, model="test-model", **kwargs)


def test_detect_returns_service_answer(extracted_srt: Path):
    service = FakeTranslationService(lambda request: " French \n")
    limiter = CountingRateLimiter()

    detection = _detector(service, rate_limiter=limiter).detect(str(extracted_srt))

    assert detection.language == "French"
    assert detection.usage == TokenUsage(10, 5, 15)
    assert limiter.waits == 1
    request = service.requests[0]
    assert request.system_prompt == DETECTION_SYSTEM_PROMPT
    assert request.model == "test-model"
    assert "Hello there, how are you doing today?" in request.user_content
    assert "00:00:01,000" not in request.user_content


def test_detect_short_sample_is_unknown_without_a_request(tmp_path: Path):
    path = tmp_path / "short.srt"
    path.write_text("1\n00:00:01,000 --> 00:00:02,000\nHi\n", encoding="utf-8")
    service = FakeTranslationService(lambda request: "English")

    detection = _detector(service).detect(str(path))

    assert detection.language == UNKNOWN_LANGUAGE
    assert service.requests == []


def test_detect_empty_answer_is_unknown(extracted_srt: Path):
    detection = _detector(FakeTranslationService(lambda request: "")).detect(str(extracted_srt))
    assert detection.language == UNKNOWN_LANGUAGE


def test_detect_service_failure_raises(extracted_srt: Path):
    with pytest.raises(LanguageDetectionError):
        _detector(FakeTranslationService(failing_responder)).detect(str(extracted_srt))


def test_sample_stops_after_enough_characters():
    from embedsub.subtitle_document import SubtitleDocument

    document = SubtitleDocument.from_text(SAMPLE_SRT)
    sample = _detector(FakeTranslationService(str), sample_chars=10).build_sample(document)
    assert sample == "Hello there, how are you doing today?"
