"""Bounded binary search over the quality knob to approach a byte-size target.

Encoded size is not linear in quality, so instead of predicting a quality from
the target the search probes the encoder itself: each probe halves the quality
window, stepping two past the midpoint so adjacent probes never repeat a value.
The loop always spends its full iteration budget (unless a deadline expires) and
keeps the first candidate with the smallest distance to the target.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

from optipic import encoder
from optipic.encoder import EncodedResult, EncodeOptions
from optipic.pipeline import Pipeline

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 8
MIN_QUALITY = 30
MAX_QUALITY = 95
MIN_CEILING = 40
STEP = 2


@dataclass
class SearchState:
    low: int
    high: int
    best: Optional[EncodedResult] = None
    best_diff: float = math.inf
    iterations_remaining: int = MAX_ITERATIONS

    def next_quality(self) -> int:
        # Midpoint rounded half up, kept inside the probe range.
        quality = (self.low + self.high + 1) // 2
        return max(MIN_QUALITY, min(MAX_QUALITY, quality))

    def record(self, quality: int, result: EncodedResult, target_bytes: int) -> None:
        size = result.byte_length
        diff = abs(size - target_bytes)
        # Strict comparison: on ties the earliest candidate stays.
        if diff < self.best_diff:
            self.best = result
            self.best_diff = diff
        if size > target_bytes:
            self.high = quality - STEP
        else:
            self.low = quality + STEP
        self.iterations_remaining -= 1


def encode_to_target_size(
    pipeline: Pipeline,
    fmt: str,
    target_bytes: int,
    base_quality: int,
    options: EncodeOptions = EncodeOptions(),
    deadline: Optional[float] = None,
) -> EncodedResult:
    """Return the encoding whose size is closest to ``target_bytes``.

    ``deadline`` is a ``time.monotonic()`` timestamp; once it passes the search
    stops between probes and returns the best candidate seen so far.
    """
    state = SearchState(low=MIN_QUALITY, high=max(base_quality, MIN_CEILING))

    while state.iterations_remaining > 0:
        if state.best is not None and deadline is not None and time.monotonic() >= deadline:
            logger.info(
                "deadline reached after %d probes, keeping best candidate",
                MAX_ITERATIONS - state.iterations_remaining,
            )
            break
        quality = state.next_quality()
        result = encoder.encode_with_quality(pipeline, fmt, quality, options)
        state.record(quality, result, target_bytes)
        logger.debug(
            "probe q=%d size=%d target=%d window=[%d, %d]",
            quality, result.byte_length, target_bytes, state.low, state.high,
        )

    if state.best is None:
        return encoder.encode_with_quality(pipeline, fmt, base_quality, options)
    logger.debug("search picked q=%d (diff %d bytes)", state.best.quality, state.best_diff)
    return state.best
