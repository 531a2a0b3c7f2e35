"""Tests for the ffmpeg wrapper; ffmpeg itself is never run."""
from unittest.mock import Mock, patch

import ffmpeg
import pytest

from whispersub.exceptions import MediaToolError
from whispersub.media import MediaTool


class TestProbeDuration:

    @pytest.mark.unit
    def test_duration_is_truncated_to_seconds(self):
        with patch("whispersub.media.ffmpeg.probe", return_value={"format": {"duration": "600.96"}}) as probe:
            assert MediaTool(ffprobe_path="/opt/ffprobe").probe_duration("a.mp3") == 600

        probe.assert_called_once_with("a.mp3", cmd="/opt/ffprobe")

    @pytest.mark.unit
    def test_probe_failure(self):
        error = ffmpeg.Error("ffprobe", b"", b"a.mp3: Invalid data found")
        with patch("whispersub.media.ffmpeg.probe", side_effect=error):
            with pytest.raises(MediaToolError, match="Invalid data"):
                MediaTool().probe_duration("a.mp3")

    @pytest.mark.unit
    def test_missing_duration(self):
        with patch("whispersub.media.ffmpeg.probe", return_value={"format": {}}):
            with pytest.raises(MediaToolError):
                MediaTool().probe_duration("a.mp3")


class TestRunCommands:

    @pytest.mark.unit
    def test_split_arguments(self):
        tool = MediaTool()
        with patch.object(MediaTool, "_run") as run:
            tool.split("a_tmp.mp3", 240.5, 120.0, "a_chunk_1.mp3")

        stream, output_path = run.call_args.args
        args = stream.get_args()
        assert output_path == "a_chunk_1.mp3"
        assert args[:2] == ["-i", "a_tmp.mp3"]
        assert args[args.index("-ss") + 1] == "240.5"
        assert args[args.index("-t") + 1] == "120.0"
        assert "a_chunk_1.mp3" in args
        assert "-y" in args

    @pytest.mark.unit
    def test_extract_audio_drops_video(self, tmp_path):
        source = tmp_path / "a.mp4"
        source.write_bytes(b"video")
        tool = MediaTool()
        with patch.object(MediaTool, "_run") as run:
            assert tool.extract_audio(str(source), str(tmp_path / "a_tmp.mp3")) == str(tmp_path / "a_tmp.mp3")

        args = run.call_args.args[0].get_args()
        assert "-vn" in args

    @pytest.mark.unit
    def test_extract_audio_missing_input(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MediaTool().extract_audio(str(tmp_path / "none.mp4"), str(tmp_path / "none_tmp.mp3"))

    @pytest.mark.unit
    @pytest.mark.parametrize("log_spawn, captured", [(False, True), (True, False)])
    def test_log_spawn_controls_output_capture(self, log_spawn, captured):
        stream = Mock()

        MediaTool(ffmpeg_path="/opt/ffmpeg", log_spawn=log_spawn)._run(stream, "out.mp3")

        stream.run.assert_called_once_with(cmd="/opt/ffmpeg", capture_stdout=captured, capture_stderr=captured)

    @pytest.mark.unit
    def test_failed_run_removes_partial_output(self, tmp_path):
        partial = tmp_path / "a_chunk_0.mp3"
        partial.write_bytes(b"half")
        stream = Mock()
        stream.run.side_effect = ffmpeg.Error("ffmpeg", b"", b"No space left on device")

        with pytest.raises(MediaToolError, match="No space left"):
            MediaTool()._run(stream, str(partial))

        assert not partial.exists()

    @pytest.mark.unit
    def test_missing_binary(self, tmp_path):
        stream = Mock()
        stream.run.side_effect = FileNotFoundError("ffmpeg")

        with pytest.raises(MediaToolError):
            MediaTool()._run(stream, str(tmp_path / "x.mp3"))
