from pathlib import Path

import pytest

import main_batch
from embedsub.exceptions import ProbeError
from embedsub.models import PipelineResult, PipelineStatus, TokenUsage


def test_find_and_sort_videos_filters_and_orders_by_size(tmp_path: Path):
    (tmp_path / "big.mkv").write_bytes(b"0" * 300)
    (tmp_path / "small.MP4").write_bytes(b"0" * 10)
    (tmp_path / "mid.webm").write_bytes(b"0" * 100)
    (tmp_path / "notes.txt").write_bytes(b"0" * 5)
    (tmp_path / "sub.srt").write_bytes(b"0" * 5)
    (tmp_path / "nested.mkv").mkdir()

    videos = main_batch.find_and_sort_videos(str(tmp_path))

    assert [Path(path).name for path, _ in videos] == ["small.MP4", "mid.webm", "big.mkv"]
    assert [size for _, size in videos] == [10, 100, 300]


def test_find_and_sort_videos_uses_given_extensions(tmp_path: Path):
    (tmp_path / "a.mkv").write_bytes(b"0")
    (tmp_path / "b.ts").write_bytes(b"0")
    videos = main_batch.find_and_sort_videos(str(tmp_path), [".ts"])
    assert [Path(path).name for path, _ in videos] == ["b.ts"]


def test_find_and_sort_videos_rejects_bad_input(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        main_batch.find_and_sort_videos(str(tmp_path / "missing"))
    file_path = tmp_path / "a.mkv"
    file_path.write_bytes(b"0")
    with pytest.raises(ValueError):
        main_batch.find_and_sort_videos(str(file_path))


class _ScriptedPipeline:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = []

    def process(self, video_path, target_language=None, skip_detection=False, force=False):
        self.calls.append((video_path, skip_detection, force))
        outcome = self.outcomes[video_path]
        if isinstance(outcome, Exception):
            raise outcome
        return PipelineResult(video_path=video_path, status=outcome,
                              output_path=f"{video_path}.out", usage=TokenUsage(10, 5, 15))


def test_process_videos_counts_outcomes_and_continues_after_failures():
    pipeline = _ScriptedPipeline({
        "a.mkv": PipelineStatus.TRANSLATED,
        "b.mkv": ProbeError("corrupt"),
        "c.mkv": PipelineStatus.SKIPPED_EXISTING,
        "d.mkv": PipelineStatus.NO_SUBTITLES,
        "e.mkv": RuntimeError("boom"),
        "f.mkv": PipelineStatus.SKIPPED_SAME_LANGUAGE,
    })

    summary = main_batch.process_videos(pipeline, list(pipeline.outcomes), force=True)

    assert len(pipeline.calls) == 6
    assert all(force for _, _, force in pipeline.calls)
    assert summary.total == 6
    assert summary.translated == 1
    assert summary.skipped == 2
    assert summary.no_subtitles == 1
    assert summary.failed == 2
    assert summary.usage == TokenUsage(40, 20, 60)
