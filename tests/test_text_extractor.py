"""Tests for SRT to plain text conversion."""
from pathlib import Path

import pytest

from whispersub.exceptions import FileSystemError
from whispersub.models import Cue
from whispersub.text_extractor import srt_file_to_txt, to_plain_text


class TestToPlainText:

    @pytest.mark.unit
    def test_one_line_per_cue(self):
        cues = [Cue(1, 0, 1000, "Hello"), Cue(2, 1000, 2000, "World")]

        assert to_plain_text(cues) == "Hello\nWorld\n"

    @pytest.mark.unit
    def test_empty_text_gives_blank_line(self):
        cues = [Cue(1, 0, 1, "a"), Cue(2, 1, 2, ""), Cue(3, 2, 3, "b")]

        assert to_plain_text(cues) == "a\n\nb\n"

    @pytest.mark.unit
    def test_no_cues(self):
        assert to_plain_text([]) == ""


class TestSrtFileToTxt:

    @pytest.mark.unit
    def test_writes_txt_next_to_srt(self, srt_file):
        output = srt_file_to_txt(srt_file)

        assert output == str(Path(srt_file).with_suffix(".txt"))
        assert Path(output).read_text(encoding="utf-8") == "Hello there.\nGeneral Kenobi!\nSecond line\n"

    @pytest.mark.unit
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileSystemError):
            srt_file_to_txt(str(tmp_path / "nope.srt"))
