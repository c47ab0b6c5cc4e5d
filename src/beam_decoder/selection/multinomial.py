"""Stochastic multinomial candidate selection."""

from __future__ import annotations

from operator import attrgetter
from typing import TYPE_CHECKING

import numpy as np

from beam_decoder.exceptions import SamplingExhaustedError, TokenSelectionError
from beam_decoder.processing.base import stable_softmax
from beam_decoder.selection.base import SelectionStrategy
from beam_decoder.selection.registry import SelectionStrategyRegistry
from beam_decoder.selection.types import ScoredToken

if TYPE_CHECKING:
    from collections.abc import Sequence


@SelectionStrategyRegistry.register("multinomial")
class MultinomialSelection(SelectionStrategy):
    """Samples ``result_size`` distinct tokens per beam from its softmax distribution.

    Draws are made without replacement within a beam. Candidates of all
    beams are then ranked by their raw score, so the returned list holds up
    to ``num_beams * result_size`` entries.
    """

    def __init__(self, seed: int | None = None, rng: np.random.Generator | None = None) -> None:
        """Initialize the sampler.

        Args:
            seed: Seed for a new ``numpy.random.Generator``. Ignored if
                *rng* is given.
            rng: Generator to draw from.
        """
        self._rng = rng if rng is not None else np.random.default_rng(seed)

    def select(self, scores: Sequence[np.ndarray], result_size: int) -> list[ScoredToken]:
        result: list[ScoredToken] = []
        for beam_index, row in enumerate(scores):
            for token_index in self.sample(stable_softmax(row), result_size):
                result.append(
                    ScoredToken(
                        beam_index=beam_index,
                        token_index=token_index,
                        score=float(row[token_index]),
                    )
                )
        # sorted() is stable, also with reverse=True.
        return sorted(result, key=attrgetter("score"), reverse=True)

    def sample(self, probs: np.ndarray, num_samples: int) -> list[int]:
        """Draw *num_samples* distinct indices from a probability vector.

        Each draw is a CDF lookup of a uniform value. A drawn index has its
        probability zeroed before the next draw, which is equivalent to
        rejecting repeats and drawing again, but cannot spin on a
        distribution whose remaining mass is negligible.

        Args:
            probs: 1-D probability array.
            num_samples: Number of distinct indices to draw.

        Returns:
            Drawn indices in draw order.

        Raises:
            TokenSelectionError: If *num_samples* exceeds the vector size.
            SamplingExhaustedError: If fewer than *num_samples* indices have
                non-zero probability.
        """
        if num_samples > probs.shape[0]:
            raise TokenSelectionError(
                f"Cannot sample {num_samples} distinct tokens from {probs.shape[0]} positions"
            )
        available = int(np.count_nonzero(probs > 0))
        if available < num_samples:
            raise SamplingExhaustedError(
                f"Cannot sample {num_samples} distinct tokens: only {available} "
                f"have non-zero probability"
            )

        remaining = probs.astype(np.float64, copy=True)
        samples: list[int] = []
        while len(samples) < num_samples:
            cdf = np.cumsum(remaining)
            total = float(cdf[-1])
            if not total > 0.0:
                raise SamplingExhaustedError(
                    f"Probability mass exhausted after {len(samples)} of {num_samples} samples"
                )
            index = int(np.searchsorted(cdf, self._rng.random() * total, side="right"))
            if index >= remaining.shape[0]:
                # u * total rounded up to the top of the CDF.
                index = int(np.flatnonzero(remaining)[-1])
            samples.append(index)
            remaining[index] = 0.0
        return samples
