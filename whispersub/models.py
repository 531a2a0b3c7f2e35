"""Data models for whispersub."""

import enum
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

@dataclass
class Cue:
    """A single subtitle cue. Times are integer milliseconds."""
    index: int
    start: int
    end: int
    text: str = ""

@dataclass(frozen=True)
class ChunkSpec:
    """Where one chunk sits on the source timeline."""
    index: int
    start_offset_seconds: float
    duration_seconds: float

    @property
    def offset_ms(self) -> int:
        return int(round(self.start_offset_seconds * 1000))

    @property
    def ceiling_ms(self) -> int:
        return int(round(self.duration_seconds * 1000))


class ChunkState(enum.Enum):
    """Lifecycle of a chunk inside the pipeline."""
    PENDING = "pending"
    SPLIT = "split"
    TRANSCRIBED = "transcribed"
    REALIGNED = "realigned"
    MERGED = "merged"
    CLEANED = "cleaned"


@dataclass
class ChunkJob:
    """Per-chunk working state: its spec, temp file paths and current state."""
    spec: ChunkSpec
    audio_path: str
    transcript_path: str
    output_paths: Dict[str, str] = field(default_factory=dict)
    state: ChunkState = ChunkState.PENDING
    results: Dict[str, str] = field(default_factory=dict)

    def temp_paths(self) -> List[str]:
        """All per-chunk artifacts, without duplicates, in deletion order. Chunk audio is last."""
        paths = [self.transcript_path]
        for path in self.output_paths.values():
            if path not in paths:
                paths.append(path)
        paths.append(self.audio_path)
        return paths


@dataclass
class JobContext:
    """
    State owned by a single pipeline run.

    ``accumulators`` maps an output format to the realigned text of each
    chunk, keyed by chunk index so that completion order never matters.
    """
    source_path: str
    audio_path: str
    chunk_count: int = 0
    formats: List[str] = field(default_factory=list)
    accumulators: Dict[str, Dict[int, str]] = field(default_factory=dict)
    prompt: Optional[str] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __post_init__(self):
        for fmt in self.formats:
            self.accumulators.setdefault(fmt, {})

    def accumulate(self, fmt: str, chunk_index: int, text: str) -> None:
        with self._lock:
            self.accumulators.setdefault(fmt, {})[chunk_index] = text

    def merged_text(self, fmt: str) -> str:
        """Concatenate chunk outputs in chunk order, newline between chunks."""
        merged = ""
        chunks = self.accumulators.get(fmt, {})
        for chunk_index in sorted(chunks):
            if merged:
                merged += "\n"
            merged += chunks[chunk_index]
        return merged
