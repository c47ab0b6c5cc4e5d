"""Top-p (nucleus) filtering of score rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from beam_decoder.processing.base import FILTER_VALUE, ScoreProcessor, stable_softmax

if TYPE_CHECKING:
    from collections.abc import Sequence


class TopPProcessor(ScoreProcessor):
    """Keeps the smallest set of top tokens whose probability mass exceeds ``top_p``.

    Algorithm, on the row sorted by descending score:
        1. softmax and cumulative sum
        2. mark positions whose cumulative probability exceeds ``top_p``
        3. shift the marks right by one, so the first token crossing the
           threshold is kept
        4. unmark the first ``min_size`` positions
        5. write ``filter_value`` at the original indices of marked positions

    With beam decoding (``num_beams > 1``) ``min_size`` should be at least 2.
    """

    def __init__(
        self,
        top_p: float,
        filter_value: float = FILTER_VALUE,
        min_size: int = 1,
    ) -> None:
        if not 0.0 < top_p <= 1.0:
            raise ValueError(f"top_p must be in (0, 1], got {top_p}")
        if min_size < 1:
            raise ValueError(f"min_size must be >= 1, got {min_size}")
        self.top_p = top_p
        self.filter_value = filter_value
        self.min_size = min_size

    def process(self, scores: np.ndarray, sequence: Sequence[int]) -> np.ndarray:
        if self.top_p >= 1.0:
            return scores.copy()

        # Stable descending order: equal scores keep their vocabulary order.
        sorted_indices = np.argsort(-scores, kind="stable")
        cumulative = np.cumsum(stable_softmax(scores[sorted_indices]))

        to_remove = cumulative > self.top_p
        to_remove[1:] = to_remove[:-1].copy()
        to_remove[: self.min_size] = False

        result = scores.copy()
        result[sorted_indices[to_remove]] = self.filter_value
        return result
