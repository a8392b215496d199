"""Data models for embedsub."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

UNKNOWN_LANGUAGE = "Unknown"

# Subtitle codecs stored as rendered bitmaps; these cannot become SRT text.
IMAGE_BASED_CODECS = frozenset({
    "hdmv_pgs_subtitle",
    "pgssub",
    "dvd_subtitle",
    "dvdsub",
    "dvb_subtitle",
    "xsub",
})


@dataclass(frozen=True)
class SubtitleStream:
    """A subtitle-capable stream as reported by ffprobe."""
    index: int
    codec_name: Optional[str] = None
    language: Optional[str] = None
    title: Optional[str] = None

    @property
    def is_image_based(self) -> bool:
        return (self.codec_name or "").lower() in IMAGE_BASED_CODECS

    def describe(self) -> str:
        return (f"index {self.index}, codec '{self.codec_name or 'unknown'}', "
                f"language '{self.language or 'unknown'}'")


@dataclass
class ProbeResult:
    """Container format plus its subtitle streams in container order."""
    container_format: Optional[str]
    streams: List[SubtitleStream] = field(default_factory=list)


@dataclass(frozen=True)
class ExtractionOptions:
    """Flags for one ffmpeg invocation."""
    copy: bool = False
    codec: Optional[str] = None
    output_format: Optional[str] = None
    fix_sub_duration: bool = True

    def describe(self) -> str:
        parts = []
        if self.copy:
            parts.append("copy")
        if self.codec:
            parts.append(f"codec={self.codec}")
        if self.output_format:
            parts.append(f"format={self.output_format}")
        if self.fix_sub_duration:
            parts.append("fix_sub_duration")
        return ", ".join(parts) or "auto-detect"


class StrategyKind(Enum):
    TRACK_EXTRACT = "track_extract"
    FFMPEG = "ffmpeg"


@dataclass(frozen=True)
class ExtractionStrategy:
    """Declarative description of one step of the extraction fallback chain."""
    strategy_id: str
    kind: StrategyKind
    extension: str = "srt"
    options: ExtractionOptions = field(default_factory=ExtractionOptions)

    @property
    def needs_conversion(self) -> bool:
        return self.extension != "srt"


class AttemptStatus(Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    TOOL_ERROR = "tool_error"


@dataclass
class ExtractionAttempt:
    """Outcome of running a single strategy. Never persisted."""
    strategy: ExtractionStrategy
    status: AttemptStatus
    output_path: Optional[str] = None
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status is AttemptStatus.SUCCESS


@dataclass(frozen=True)
class Chunk:
    """A contiguous run of subtitle entries sent to the service in one request."""
    index: int
    entries: Tuple[str, ...]

    @property
    def text(self) -> str:
        return "\n\n".join(self.entries)

    @property
    def size(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class TokenUsage:
    """Token counts for one or more service calls."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    def estimated_cost(self, input_per_1k: float, output_per_1k: float) -> float:
        return (self.prompt_tokens / 1000) * input_per_1k + (self.completion_tokens / 1000) * output_per_1k


@dataclass(frozen=True)
class CompletionRequest:
    model: str
    system_prompt: str
    user_content: str
    max_output_tokens: int
    temperature: float


@dataclass(frozen=True)
class CompletionResponse:
    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class LanguageDetection:
    language: str
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class ChunkTranslation:
    index: int
    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)


class TranslationStatus(Enum):
    TRANSLATED = "translated"
    SKIPPED = "skipped"


@dataclass
class TranslationResult:
    """Holds the outcome of translating one extracted subtitle file."""
    status: TranslationStatus
    output_path: Optional[str] = None
    detected_language: Optional[str] = None
    usage: TokenUsage = field(default_factory=TokenUsage)

    @property
    def skipped(self) -> bool:
        return self.status is TranslationStatus.SKIPPED


class PipelineStatus(Enum):
    TRANSLATED = "translated"
    SKIPPED_SAME_LANGUAGE = "skipped_same_language"
    SKIPPED_EXISTING = "skipped_existing"
    NO_SUBTITLES = "no_subtitles"


@dataclass
class PipelineResult:
    video_path: str
    status: PipelineStatus
    output_path: Optional[str] = None
    usage: TokenUsage = field(default_factory=TokenUsage)
