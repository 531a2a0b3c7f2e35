"""Tests for the job context accumulator and path helpers."""
import os

import pytest

from whispersub.models import ChunkJob, ChunkSpec, JobContext
from whispersub.utils import derive_path, language_slug, remove_files


class TestJobContext:

    @pytest.mark.unit
    def test_merged_text_is_in_chunk_order(self):
        context = JobContext(source_path="a.mp4", audio_path="a_tmp.mp3", formats=["txt"])
        context.accumulate("txt", 2, "c\n")
        context.accumulate("txt", 0, "a\n")
        context.accumulate("txt", 1, "b\n")

        assert context.merged_text("txt") == "a\n\nb\n\nc\n"

    @pytest.mark.unit
    def test_no_separator_before_first_non_empty_chunk(self):
        context = JobContext(source_path="a.mp4", audio_path="a_tmp.mp3", formats=["txt"])
        context.accumulate("txt", 0, "")
        context.accumulate("txt", 1, "b\n")

        assert context.merged_text("txt") == "b\n"

    @pytest.mark.unit
    def test_unknown_format_merges_to_empty(self):
        context = JobContext(source_path="a.mp4", audio_path="a_tmp.mp3")

        assert context.merged_text("srt") == ""


class TestChunkJob:

    @pytest.mark.unit
    def test_temp_paths_are_deduplicated(self):
        job = ChunkJob(
            spec=ChunkSpec(index=0, start_offset_seconds=0, duration_seconds=1),
            audio_path="t_chunk_0.mp3",
            transcript_path="t_chunk_0.srt",
            output_paths={"srt": "t_chunk_0.srt", "txt": "t_chunk_0.txt"},
        )

        assert job.temp_paths() == ["t_chunk_0.srt", "t_chunk_0.txt", "t_chunk_0.mp3"]

    @pytest.mark.unit
    def test_chunk_audio_is_removed_last(self):
        job = ChunkJob(
            spec=ChunkSpec(index=2, start_offset_seconds=20, duration_seconds=5),
            audio_path="t_chunk_2.mp3",
            transcript_path="t_chunk_2.srt",
        )

        assert job.temp_paths()[-1] == "t_chunk_2.mp3"


class TestPathHelpers:

    @pytest.mark.unit
    @pytest.mark.parametrize("base, suffix, ext, expected", [
        ("talk.mp4", "_tmp", "mp3", "talk_tmp.mp3"),
        ("talk.mp4", "_chunk_3", ".srt", "talk_chunk_3.srt"),
        ("a.b.c.wav", "", "srt", "a.b.c.srt"),
        ("ab1mp4", "", "srt", "ab1mp4.srt"),
    ])
    def test_derive_path(self, base, suffix, ext, expected):
        assert derive_path(os.path.join("media", base), suffix, ext) == os.path.join("media", expected)

    @pytest.mark.unit
    def test_language_slug(self):
        assert language_slug("Traditional Chinese") == "traditional-chinese"
        assert language_slug("en") == "en"

    @pytest.mark.unit
    def test_remove_files_ignores_missing(self, tmp_path):
        existing = tmp_path / "x.tmp"
        existing.write_text("x")

        remove_files([str(existing), str(tmp_path / "missing.tmp"), ""])

        assert not existing.exists()
