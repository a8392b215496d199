from pathlib import Path

from conftest import SAMPLE_SRT

from embedsub.subtitle_document import SubtitleDocument, is_structural_line


def test_entries_split_at_blank_lines():
    document = SubtitleDocument.from_text(SAMPLE_SRT)
    assert len(document) == 3
    assert document.entries[1].splitlines() == [
        "2",
        "00:00:04,000 --> 00:00:06,000",
        "I am fine, thank you very much for asking.",
        "- And you?",
    ]


def test_bom_crlf_and_whitespace_only_separators_are_normalized():
    text = "\ufeff1\r\n00:00:01,000 --> 00:00:02,000\r\nA\r\n \r\n\r\n2\r\n00:00:03,000 --> 00:00:04,000\r\nB\r\n"
    document = SubtitleDocument.from_text(text)
    assert document.entries == [
        "1\n00:00:01,000 --> 00:00:02,000\nA",
        "2\n00:00:03,000 --> 00:00:04,000\nB",
    ]
    assert document.to_text() == "\n\n".join(document.entries)


def test_empty_text_has_no_entries():
    assert len(SubtitleDocument.from_text("")) == 0
    assert len(SubtitleDocument.from_text("\n \n\t\n")) == 0


def test_text_lines_skip_numbers_and_timestamps():
    lines = list(SubtitleDocument.from_text(SAMPLE_SRT).iter_text_lines())
    assert lines == [
        "Hello there, how are you doing today?",
        "I am fine, thank you very much for asking.",
        "- And you?",
        "Hello again, my old friend.",
    ]


def test_is_structural_line():
    assert is_structural_line("12")
    assert is_structural_line("00:00:01,000 --> 00:00:02,500")
    assert is_structural_line("00:00:01.000 --> 00:00:02.500 align:start")
    assert not is_structural_line("1984 was a year")
    assert not is_structural_line("Hello")


def test_read_from_disk(tmp_path: Path):
    path = tmp_path / "a.srt"
    path.write_text(SAMPLE_SRT, encoding="utf-8")
    assert len(SubtitleDocument.read(str(path))) == 3
