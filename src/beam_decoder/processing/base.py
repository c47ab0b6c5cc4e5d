"""Base class for score processors.

A score processor rewrites one beam's vocabulary-score row before the
candidates are ranked. Processors never modify their input in place; each
returns a new row of the same length.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

# Floating-point type of every score vector handled by the decoder.
SCORE_DTYPE = np.float64

# Value written over filtered-out token scores.
FILTER_VALUE = float("-inf")


class ScoreProcessor(ABC):
    """Abstract base class for score processors.

    Implementations map a 1-D score row (vocab_size,) and the token history
    of the beam it belongs to onto a new score row. Processors that do not
    depend on the history simply ignore it.
    """

    @abstractmethod
    def process(self, scores: np.ndarray, sequence: Sequence[int]) -> np.ndarray:
        """Return an adjusted copy of *scores*.

        Args:
            scores: 1-D score array for one beam (vocab_size,).
            sequence: Tokens generated so far by that beam, seed included.

        Returns:
            New score array of the same shape.
        """

    def __call__(self, scores: np.ndarray, sequence: Sequence[int]) -> np.ndarray:
        return self.process(scores, sequence)


def stable_softmax(scores: np.ndarray) -> np.ndarray:
    """Numerically stable softmax via shift-by-max.

    Args:
        scores: 1-D score array (may contain -inf for masked tokens).

    Returns:
        Probability array of the same shape. All zeros when every score
        is -inf.
    """
    finite_mask = np.isfinite(scores)
    if not np.any(finite_mask):
        return np.zeros_like(scores, dtype=SCORE_DTYPE)

    shifted = scores - np.max(scores[finite_mask])
    # exp(-inf) = 0 for masked tokens.
    exp_shifted = np.exp(shifted)
    result: np.ndarray = exp_shifted / np.sum(exp_shifted)
    return result
