"""Shared fakes for embedsub tests."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from embedsub.exceptions import TranslationServiceError
from embedsub.media_tools import ToolResult
from embedsub.models import CompletionRequest, CompletionResponse, TokenUsage

SAMPLE_SRT = (
    "1\n"
    "00:00:01,000 --> 00:00:03,500\n"
    "Hello there, how are you doing today?\n"
    "\n"
    "2\n"
    "00:00:04,000 --> 00:00:06,000\n"
    "I am fine, thank you very much for asking.\n"
    "- And you?\n"
    "\n"
    "3\n"
    "00:00:07,250 --> 00:00:09,000\n"
    "Hello again, my old friend.\n"
)

FAILED = ToolResult(succeeded=False, diagnostics="Invalid argument\nConversion failed!", return_code=1)
OK = ToolResult(succeeded=True, return_code=0)


class FakeFFmpegTool:
    """Stands in for FFmpegTool; records every invocation."""

    def __init__(self, metadata=None, extract_handler: Optional[Callable] = None):
        self.metadata = metadata if metadata is not None else {"streams": [], "format": {}}
        self.extract_handler = extract_handler
        self.probe_calls: List[str] = []
        self.extract_calls = []
        self.convert_calls = []

    def probe(self, video_path):
        self.probe_calls.append(video_path)
        if isinstance(self.metadata, Exception):
            raise self.metadata
        return self.metadata

    def extract_stream(self, video_path, stream_index, output_path, options):
        self.extract_calls.append((stream_index, output_path, options))
        if self.extract_handler is None:
            return FAILED
        return self.extract_handler(video_path, stream_index, output_path, options)

    def convert_to_srt(self, input_path, output_path):
        self.convert_calls.append((input_path, output_path))
        shutil.copyfile(input_path, output_path)
        return OK


class FakeTrackExtractor:
    """Stands in for MkvExtractTool."""

    def __init__(self, available: bool = True, content: Optional[str] = SAMPLE_SRT):
        self.available = available
        self.content = content
        self.availability_checks = 0
        self.calls = []

    def is_available(self):
        self.availability_checks += 1
        return self.available

    def extract_track(self, video_path, track_index, output_path):
        self.calls.append((track_index, output_path))
        if self.content is None:
            return FAILED
        Path(output_path).write_text(self.content, encoding="utf-8")
        return OK


class FakeTranslationService:
    """Answers requests with ``responder(request)``; raising from it simulates a failed call."""

    def __init__(self, responder: Callable[[CompletionRequest], str], usage: TokenUsage = TokenUsage(10, 5, 15)):
        self.responder = responder
        self.usage = usage
        self.requests: List[CompletionRequest] = []

    def complete(self, request):
        self.requests.append(request)
        return CompletionResponse(text=self.responder(request), usage=self.usage)


def failing_responder(_request):
    raise TranslationServiceError("service unavailable")


class CountingRateLimiter:
    def __init__(self):
        self.waits = 0

    def wait(self):
        self.waits += 1


@pytest.fixture
def video_file(tmp_path: Path) -> Path:
    video = tmp_path / "movie.mkv"
    video.write_bytes(b"\x1a\x45\xdf\xa3" + b"0" * 64)
    return video


@pytest.fixture
def extracted_srt(tmp_path: Path) -> Path:
    path = tmp_path / "movie.extracted.srt"
    path.write_text(SAMPLE_SRT, encoding="utf-8")
    return path
