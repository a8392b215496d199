from pathlib import Path

import pytest

from conftest import FakeFFmpegTool

from embedsub.stream_probe import StreamProbe
from embedsub.subtitle_extractor import SubtitleExtractor


class _RecordingChain:
    def __init__(self, succeed_on=()):
        self.succeed_on = set(succeed_on)
        self.calls = []

    def extract_stream(self, video_path, stream, output_path, container_format=None):
        self.calls.append((stream.index, output_path, container_format))
        if stream.index in self.succeed_on:
            Path(output_path).write_text("1\n00:00:01,000 --> 00:00:02,000\nHi\n", encoding="utf-8")
            return output_path
        return None


def _metadata(*streams):
    return {
        "format": {"format_name": "matroska,webm"},
        "streams": [
            {"index": index, "codec_type": "subtitle", "codec_name": codec}
            for index, codec in streams
        ],
    }


def _extractor(metadata, chain):
    return SubtitleExtractor(StreamProbe(FakeFFmpegTool(metadata)), chain)


def test_video_without_subtitles_returns_none(video_file: Path):
    chain = _RecordingChain()
    assert _extractor(_metadata(), chain).extract(str(video_file)) is None
    assert chain.calls == []


def test_image_based_streams_are_skipped(video_file: Path):
    chain = _RecordingChain(succeed_on={2, 3})
    extractor = _extractor(_metadata((2, "hdmv_pgs_subtitle"), (3, "dvd_subtitle")), chain)

    assert extractor.extract(str(video_file)) is None
    assert chain.calls == []


def test_first_text_stream_after_image_stream_wins(video_file: Path, tmp_path: Path):
    chain = _RecordingChain(succeed_on={3, 4})
    extractor = _extractor(_metadata((2, "hdmv_pgs_subtitle"), (3, "subrip"), (4, "ass")), chain)

    result = extractor.extract(str(video_file))

    expected = str(tmp_path / "movie.extracted.srt")
    assert result == expected
    assert chain.calls == [(3, expected, "matroska,webm")]


def test_falls_through_to_next_stream_when_extraction_fails(video_file: Path):
    chain = _RecordingChain(succeed_on={5})
    extractor = _extractor(_metadata((4, "subrip"), (5, "ass")), chain)

    assert extractor.extract(str(video_file)).endswith("movie.extracted.srt")
    assert [index for index, _, _ in chain.calls] == [4, 5]


def test_all_streams_failing_returns_none(video_file: Path):
    chain = _RecordingChain()
    extractor = _extractor(_metadata((4, "subrip"), (5, "ass")), chain)
    assert extractor.extract(str(video_file)) is None
    assert len(chain.calls) == 2


def test_missing_video_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        _extractor(_metadata(), _RecordingChain()).extract(str(tmp_path / "missing.mkv"))
