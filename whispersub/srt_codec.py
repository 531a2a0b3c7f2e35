"""Parses SRT text into cues and serializes cues back into SRT text."""

import logging
import re
from typing import Iterable, List

from .exceptions import FormatError
from .models import Cue

logger = logging.getLogger(__name__)

_BLOCK_SEPARATOR = re.compile(r'\n[ \t]*\n')
_TIMESTAMP = re.compile(r'^\s*(\d+):(\d{2}):(\d{2})[,.](\d{1,3})\s*$')
_ARROW = '-->'


def parse_timestamp(value: str) -> int:
    """
    Parses an SRT timestamp (HH:MM:SS,mmm) into milliseconds.

    Raises:
        FormatError: If the value is not a valid timestamp.
    """
    match = _TIMESTAMP.match(value)
    if not match:
        raise FormatError(f"Malformed SRT timestamp: {value!r}")
    hours, minutes, seconds, millis = match.groups()
    if int(minutes) > 59 or int(seconds) > 59:
        raise FormatError(f"SRT timestamp out of range: {value!r}")
    # "1,5" means 500 ms, not 5 ms
    millis = int(millis.ljust(3, '0'))
    return ((int(hours) * 60 + int(minutes)) * 60 + int(seconds)) * 1000 + millis


def format_timestamp(milliseconds: int) -> str:
    """
    Formats milliseconds into SRT time format HH:MM:SS,mmm.

    Args:
        milliseconds: Time in milliseconds. Negative values are floored at 0.

    Returns:
        Formatted time string.
    """
    milliseconds = max(0, int(milliseconds))
    hrs = milliseconds // 3600000
    milliseconds %= 3600000
    mins = milliseconds // 60000
    milliseconds %= 60000
    secs = milliseconds // 1000
    milliseconds %= 1000
    return f"{hrs:02d}:{mins:02d}:{secs:02d},{milliseconds:03d}"


def _parse_timing_line(line: str, block_number: int):
    if _ARROW not in line:
        raise FormatError(f"Block {block_number}: expected a timing line, got {line!r}")
    start_str, end_str = line.split(_ARROW, 1)
    # Tolerate trailing position info such as "X1:40 X2:600"
    end_str = end_str.strip().split(' ')[0]
    return parse_timestamp(start_str), parse_timestamp(end_str)


def parse_srt(text: str) -> List[Cue]:
    """
    Parses SRT text into a list of cues.

    The index line of each block is read but not trusted; cues are numbered
    by their 1-based position in the document.

    Args:
        text: Raw SRT content.

    Returns:
        The cues, in document order.

    Raises:
        FormatError: If a block has a missing or malformed timing line.
    """
    normalized = text.lstrip('\ufeff').replace('\r\n', '\n').replace('\r', '\n')
    cues: List[Cue] = []

    for block in _BLOCK_SEPARATOR.split(normalized.strip()):
        lines = block.split('\n')
        # First non-empty line is the index
        while lines and not lines[0].strip():
            lines.pop(0)
        if not lines:
            continue

        block_number = len(cues) + 1
        if len(lines) < 2:
            raise FormatError(f"Block {block_number}: missing timing line in {block!r}")

        start, end = _parse_timing_line(lines[1], block_number)
        cue_text = '\n'.join(lines[2:])
        cues.append(Cue(index=block_number, start=start, end=end, text=cue_text))

    logger.debug(f"Parsed {len(cues)} cues from SRT text.")
    return cues


def serialize_srt(cues: Iterable[Cue]) -> str:
    """
    Serializes cues into SRT text, numbering them 1..N by position.

    The cue objects themselves are left untouched.
    """
    parts = []
    for position, cue in enumerate(cues, start=1):
        parts.append(
            f"{position}\n"
            f"{format_timestamp(cue.start)} {_ARROW} {format_timestamp(cue.end)}\n"
            f"{cue.text}\n\n"
        )
    return ''.join(parts)


def renumber_srt(text: str) -> str:
    """Rewrites SRT text so that cue indices run 1..N in document order."""
    return serialize_srt(parse_srt(text))
