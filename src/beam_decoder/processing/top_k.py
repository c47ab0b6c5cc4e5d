"""Top-k filtering of score rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from beam_decoder.processing.base import FILTER_VALUE, ScoreProcessor

if TYPE_CHECKING:
    from collections.abc import Sequence


class TopKProcessor(ScoreProcessor):
    """Keeps the scores that are at least the k-th largest value of the row.

    Every score strictly below the k-th largest is replaced with
    ``filter_value``. Ties with the k-th largest value all survive, so more
    than ``k`` tokens can remain. ``k`` is clamped to the row size.
    """

    def __init__(self, top_k: int, filter_value: float = FILTER_VALUE) -> None:
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")
        self.top_k = top_k
        self.filter_value = filter_value

    def process(self, scores: np.ndarray, sequence: Sequence[int]) -> np.ndarray:
        """Filter everything below the k-th largest score.

        Args:
            scores: 1-D score array for one beam.
            sequence: Unused.

        Returns:
            Filtered copy of *scores*.
        """
        size = scores.shape[0]
        k = min(self.top_k, size)
        # np.partition puts the k-th largest at position size - k in O(n).
        min_score = np.partition(scores, size - k)[size - k]
        result: np.ndarray = np.where(scores < min_score, self.filter_value, scores)
        return result
