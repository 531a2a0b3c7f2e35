"""Converts subtitle cues into plain text."""

import logging
import os
from typing import Iterable

from .exceptions import FileSystemError
from .models import Cue
from .srt_codec import parse_srt
from .utils import derive_path, read_text, write_text

logger = logging.getLogger(__name__)


def to_plain_text(cues: Iterable[Cue]) -> str:
    """One line per cue, timing dropped. Cues with empty text give blank lines."""
    return ''.join(f"{cue.text}\n" for cue in cues)


def srt_file_to_txt(srt_path: str) -> str:
    """
    Writes the text of an SRT file to a .txt file next to it.

    Args:
        srt_path: Path to the source .srt file.

    Returns:
        The path of the written .txt file.

    Raises:
        FileSystemError: If the SRT file cannot be read or the text file written.
        FormatError: If the SRT content is malformed.
    """
    if not os.path.isfile(srt_path):
        raise FileSystemError(f"SRT file not found: {srt_path}")

    output_path = derive_path(srt_path, '', 'txt')
    cues = parse_srt(read_text(srt_path))
    write_text(output_path, to_plain_text(cues))
    logger.info(f"Wrote {len(cues)} lines of text to {output_path}")
    return output_path
