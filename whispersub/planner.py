"""Splits a media file into chunks that fit the transcription upload limit."""

import logging
import math
from typing import List

from .models import ChunkSpec

logger = logging.getLogger(__name__)

MEGABYTE = 1024 * 1024
DEFAULT_CHUNK_BYTE_BUDGET = 24 * MEGABYTE


def chunk_count(total_size_bytes: int, chunk_byte_budget: int = DEFAULT_CHUNK_BYTE_BUDGET) -> int:
    """Number of chunks needed so that none exceeds the byte budget."""
    if chunk_byte_budget <= 0:
        raise ValueError(f"Chunk byte budget must be positive, got {chunk_byte_budget}")
    if total_size_bytes <= 0:
        return 0
    return math.ceil(total_size_bytes / chunk_byte_budget)


def plan_chunks(
    total_size_bytes: int,
    total_duration_seconds: float,
    chunk_byte_budget: int = DEFAULT_CHUNK_BYTE_BUDGET
) -> List[ChunkSpec]:
    """
    Plans chunk offsets and durations by splitting the duration proportionally to size.

    The nominal chunk duration is ``total_duration * budget / total_size``,
    which assumes a constant bitrate. The last chunk is clamped so that no
    chunk extends past the end of the media.

    Args:
        total_size_bytes: Size of the audio file to split.
        total_duration_seconds: Duration of that audio file.
        chunk_byte_budget: Maximum bytes per chunk.

    Returns:
        One ChunkSpec per chunk, ordered by index. Empty for an empty file.

    Raises:
        ValueError: If the byte budget is not positive.
    """
    count = chunk_count(total_size_bytes, chunk_byte_budget)
    if count == 0:
        return []

    nominal_duration = total_duration_seconds * (chunk_byte_budget / total_size_bytes)
    chunks = []
    for index in range(count):
        start = nominal_duration * index
        duration = max(0.0, min(nominal_duration, total_duration_seconds - start))
        chunks.append(ChunkSpec(index=index, start_offset_seconds=start, duration_seconds=duration))

    logger.info(
        f"Planned {count} chunk(s) of ~{nominal_duration:.2f}s for "
        f"{total_size_bytes / MEGABYTE:.2f} MB / {total_duration_seconds}s of audio."
    )
    return chunks
