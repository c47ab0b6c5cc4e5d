"""Base class for selection strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np

    from beam_decoder.selection.types import ScoredToken


class SelectionStrategy(ABC):
    """Abstract base class for candidate selection strategies.

    Given one total-score row per active beam, a strategy returns ranked
    ``(beam, token, score)`` candidates, descending by score. Ties keep the
    order in which candidates were discovered.
    """

    @abstractmethod
    def select(self, scores: Sequence[np.ndarray], result_size: int) -> list[ScoredToken]:
        """Rank candidate continuations.

        Args:
            scores: One 1-D score array (vocab_size,) per active beam.
            result_size: Number of candidates requested.

        Returns:
            Candidates sorted descending by score.
        """
