"""Moves chunk-local cue timings onto the global timeline."""

import logging
import re
from typing import List

from .models import Cue

logger = logging.getLogger(__name__)

_TRAILING_PERIOD = re.compile(r'(?:\.|。)$')


def shift_and_clamp(cues: List[Cue], offset_ms: int, ceiling_ms: int) -> List[Cue]:
    """
    Clamps cues to their chunk and then shifts them by the chunk offset.

    Clamping happens in the chunk's local, zero-based frame: ``start`` is
    floored at 0 and ``end`` is capped at ``ceiling_ms``. Only afterwards is
    ``offset_ms`` added to both ends. Cues that end up with ``start >= end``
    are kept as they are.

    Args:
        cues: Cues as returned for a single chunk. Modified in place.
        offset_ms: Start of the chunk on the global timeline.
        ceiling_ms: Real duration of the chunk.

    Returns:
        The same list, for chaining.
    """
    degenerate = 0
    for cue in cues:
        if cue.start < 0:
            cue.start = 0
        if cue.end > ceiling_ms:
            cue.end = ceiling_ms
        if cue.start >= cue.end:
            degenerate += 1
        cue.start += offset_ms
        cue.end += offset_ms

    if degenerate:
        logger.debug(f"{degenerate} cue(s) have zero or negative duration after clamping to {ceiling_ms} ms.")
    return cues


def strip_trailing_period(cues: List[Cue]) -> List[Cue]:
    """Removes one trailing '.' or '。' from each cue's text, in place."""
    for cue in cues:
        cue.text = _TRAILING_PERIOD.sub('', cue.text)
    return cues
