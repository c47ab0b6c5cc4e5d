"""Deterministic top-k candidate selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from beam_decoder.selection.base import SelectionStrategy
from beam_decoder.selection.registry import SelectionStrategyRegistry
from beam_decoder.selection.types import ScoredToken

if TYPE_CHECKING:
    from collections.abc import Sequence


@SelectionStrategyRegistry.register("top_k")
class TopKSelection(SelectionStrategy):
    """Returns the ``result_size`` highest-scoring candidates across all beams.

    The full ``num_beams x vocab_size`` score matrix is never sorted: each
    beam contributes at most ``result_size`` candidates (found in linear time
    with ``np.partition``) and only that small pool is ranked. Among equal
    scores the candidate discovered first (lower beam index, then lower
    token index) wins, both for membership and for order.
    """

    def select(self, scores: Sequence[np.ndarray], result_size: int) -> list[ScoredToken]:
        if len(scores) == 0 or result_size <= 0:
            return []

        beam_parts = []
        token_parts = []
        score_parts = []
        for beam_index, row in enumerate(scores):
            tokens = _top_indices(row, result_size)
            beam_parts.append(np.full(tokens.shape[0], beam_index))
            token_parts.append(tokens)
            score_parts.append(row[tokens])

        beams = np.concatenate(beam_parts)
        tokens = np.concatenate(token_parts)
        pool_scores = np.concatenate(score_parts)

        # np.lexsort sorts by the last key first.
        order = np.lexsort((tokens, beams, -pool_scores))[:result_size]
        return [
            ScoredToken(
                beam_index=int(beams[i]),
                token_index=int(tokens[i]),
                score=float(pool_scores[i]),
            )
            for i in order
        ]


def _top_indices(row: np.ndarray, k: int) -> np.ndarray:
    """Indices of the *k* largest values of *row*, lowest indices first among ties.

    The returned indices are not sorted by score.
    """
    size = row.shape[0]
    if k >= size:
        return np.arange(size)

    kth = np.partition(row, size - k)[size - k]
    above = np.flatnonzero(row > kth)
    ties = np.flatnonzero(row == kth)[: k - above.shape[0]]
    return np.concatenate((above, ties))
