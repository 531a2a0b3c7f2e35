"""
Pytest configuration and shared fixtures for the whispersub test suite.

The fakes below stand in for ffmpeg and the OpenAI API. They write real
files so that the resume/cleanup behaviour of the pipeline can be observed
on disk, and they count their calls.
"""
import logging
import os
import re
import time
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from whispersub.config import AppConfig
from whispersub.exceptions import TranscriptionError
from whispersub.media import MediaTool
from whispersub.planner import MEGABYTE
from whispersub.transcriber import Transcriber


SAMPLE_SRT = (
    "1\n"
    "00:00:00,000 --> 00:00:02,500\n"
    "Hello there.\n"
    "\n"
    "2\n"
    "00:00:02,500 --> 00:00:05,000\n"
    "General Kenobi!\n"
    "Second line\n"
    "\n"
)

# 2500 bytes of 25 s audio with a 1000 byte budget -> chunks of 10 s, 10 s and 5 s
AUDIO_BYTES = 2500
CHUNK_BYTES = 1000
AUDIO_DURATION = 25


def chunk_transcript(chunk_index: int) -> str:
    """Raw SRT as the provider would return it for one chunk: timings restart at zero."""
    return (
        "1\n"
        "00:00:00,000 --> 00:00:04,000\n"
        f"Hello {chunk_index}\n"
        "\n"
        "2\n"
        "00:00:04,000 --> 00:00:12,000\n"
        f"World {chunk_index}\n"
        "\n"
    )


class FakeMediaTool(MediaTool):
    """Writes placeholder files instead of running ffmpeg."""

    def __init__(self, audio_bytes: int = AUDIO_BYTES, duration: int = AUDIO_DURATION):
        super().__init__()
        self.audio_bytes = audio_bytes
        self.duration = duration
        self.extract_calls: List[tuple] = []
        self.split_calls: List[tuple] = []
        self.probe_calls: List[str] = []

    def probe_duration(self, media_path: str) -> int:
        self.probe_calls.append(media_path)
        return self.duration

    def extract_audio(self, media_path: str, output_path: str) -> str:
        self.extract_calls.append((media_path, output_path))
        Path(output_path).write_bytes(b"\0" * self.audio_bytes)
        return output_path

    def split(self, media_path: str, start_seconds: float, duration_seconds: float, output_path: str) -> str:
        self.split_calls.append((media_path, start_seconds, duration_seconds, output_path))
        Path(output_path).write_bytes(f"chunk {start_seconds} {duration_seconds}".encode())
        return output_path


class FakeTranscriber(Transcriber):
    """Returns :func:`chunk_transcript` for the chunk named in the upload filename."""

    def __init__(self, fail_on_chunk: Optional[int] = None, delays: Optional[Dict[int, float]] = None):
        self.fail_on_chunk = fail_on_chunk
        self.delays = delays or {}
        self.calls: List[dict] = []

    def transcribe(self, audio: bytes, filename: str, language: Optional[str] = None, prompt: Optional[str] = None) -> str:
        chunk_index = int(re.search(r"_chunk_(\d+)\.", filename).group(1))
        self.calls.append({"filename": filename, "audio": audio, "language": language, "prompt": prompt})
        time.sleep(self.delays.get(chunk_index, 0))
        if chunk_index == self.fail_on_chunk:
            raise TranscriptionError(f"provider refused {filename}")
        return chunk_transcript(chunk_index)


@pytest.fixture
def media_tool() -> FakeMediaTool:
    return FakeMediaTool()


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def config(tmp_path) -> AppConfig:
    """Config with a tiny chunk budget and no prompt file."""
    return AppConfig(
        openai_api_key="sk-test",
        formats=["srt"],
        chunk_size_mb=CHUNK_BYTES / MEGABYTE,
        prompt_file=str(tmp_path / "no-prompt.txt"),
        log_dir=None,
    )


@pytest.fixture
def media_file(tmp_path) -> str:
    path = tmp_path / "talk.mp4"
    path.write_bytes(b"not really a video")
    return str(path)


@pytest.fixture
def srt_file(tmp_path) -> str:
    path = tmp_path / "movie.srt"
    path.write_text(SAMPLE_SRT, encoding="utf-8")
    return str(path)


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch) -> Path:
    """Run in an empty working directory so stray config/log files cannot leak in."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging() replaces root handlers; put the originals back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def list_dir(path) -> List[str]:
    return sorted(os.listdir(path))
